"""Pydantic models for database and schema configuration."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    provider: str = "mysql"


class DatabaseConfig(BaseModel):
    """Complete configuration from db.toml.

    Example:
        >>> config = DatabaseConfig(profiles={})
        >>> config.schema_file
        'schema.sql'
        >>> config.upgrade_global_tables
        True
    """

    profiles: dict[str, DatabaseProfile]
    schema_file: str = "schema.sql"
    schema_scopes: dict[str, str] = Field(default_factory=dict)
    global_tables: list[str] = Field(default_factory=list)
    upgrade_global_tables: bool = True
