"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from schema_delta.config import load_db_config, DatabaseProfile, DatabaseConfig
"""

from schema_delta.config.loader import load_db_config, load_schema_text
from schema_delta.config.models import DatabaseConfig, DatabaseProfile

__all__ = ["load_db_config", "load_schema_text", "DatabaseConfig", "DatabaseProfile"]
