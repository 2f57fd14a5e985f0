"""TOML configuration loading and file-backed schema provider."""

import tomllib
from pathlib import Path

from schema_delta.config.models import DatabaseConfig, DatabaseProfile


def load_db_config(config_path: Path | None = None) -> DatabaseConfig:
    """Load database configuration from TOML file.

    Args:
        config_path: Path to db.toml (default: ``Path.cwd() / "db.toml"``)

    Returns:
        DatabaseConfig with all profiles and schema settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / "db.toml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create db.toml with a [profiles.<name>] section."
        )

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path.name}: {e}") from e

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = DatabaseProfile(**profile_data)

    # Parse schema settings
    schema_settings = data.get("schema", {})

    return DatabaseConfig(
        profiles=profiles,
        schema_file=schema_settings.get("file", "schema.sql"),
        schema_scopes=schema_settings.get("scopes", {}),
        global_tables=schema_settings.get("global_tables", []),
        upgrade_global_tables=schema_settings.get("upgrade_global_tables", True),
    )


def load_schema_text(config: DatabaseConfig, scope: str = "", base_dir: Path | None = None) -> str:
    """Read the declared schema SQL for a scope.

    ``[schema.scopes]`` entries win; any other scope (including ``""`` and
    ``"all"``) reads ``[schema] file``.  Relative paths resolve against
    ``base_dir`` (default: cwd).

    Raises:
        FileNotFoundError: If the schema file does not exist.
    """
    schema_path = Path(config.schema_scopes.get(scope, config.schema_file))
    if not schema_path.is_absolute():
        schema_path = (base_dir or Path.cwd()) / schema_path

    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    return schema_path.read_text()
