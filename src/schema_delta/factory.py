"""Backend factory.

Resolves the active database profile from ``db.toml`` and the
environment, and builds the backend, policy and schema provider the
reconciliation engine needs.

Profile resolution:
1. Explicit ``profile_name`` argument
2. ``{env_prefix}DB_PROFILE`` environment variable
3. Raise ``ProfileNotFoundError``
"""

import logging
import os
from functools import partial
from pathlib import Path
from urllib.parse import quote

from schema_delta.adapters.mysql import MySQLBackend
from schema_delta.adapters.policy import StaticTablePolicy
from schema_delta.config.loader import load_db_config, load_schema_text
from schema_delta.config.models import DatabaseConfig, DatabaseProfile
from schema_delta.schema.delta import SchemaProvider

logger = logging.getLogger(__name__)


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from the environment.

    Args:
        env_prefix: Prefix for the env var (``"APP_"`` reads
            ``APP_DB_PROFILE``).

    Returns:
        Profile name

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    env_var = f"{env_prefix}DB_PROFILE"
    env_profile = os.environ.get(env_var)
    if env_profile:
        return env_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Set {env_var}=<name> or pass --profile <name>."
    )


def get_active_profile(
    profile_name: str | None = None,
    env_prefix: str = "",
    config: DatabaseConfig | None = None,
) -> tuple[str, DatabaseProfile]:
    """Get profile name and configuration.

    Returns:
        Tuple of (profile_name, DatabaseProfile)

    Raises:
        ProfileNotFoundError: If no profile configured or not in db.toml
    """
    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix=env_prefix)
    if config is None:
        config = load_db_config()

    if profile_name not in config.profiles:
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )

    return profile_name, config.profiles[profile_name]


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config

    Returns:
        Connection URL with ``[YOUR-PASSWORD]`` replaced by the URL-quoted
        ``db_password``
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


def get_backend(
    profile_name: str | None = None,
    env_prefix: str = "",
    config: DatabaseConfig | None = None,
) -> MySQLBackend:
    """Create a backend for the resolved profile.

    Raises:
        ProfileNotFoundError: If no profile configured or not in db.toml
        ValueError: If the profile's provider is not ``mysql``
    """
    name, profile = get_active_profile(profile_name, env_prefix=env_prefix, config=config)
    if profile.provider != "mysql":
        raise ValueError(f"Profile '{name}' uses unsupported provider '{profile.provider}'")

    logger.debug(f"Creating backend for profile {name}")
    return MySQLBackend(resolve_url(profile))


def build_policy(config: DatabaseConfig) -> StaticTablePolicy:
    """Global-table policy from the ``[schema]`` settings."""
    return StaticTablePolicy.from_names(
        config.global_tables,
        upgrade_global_tables=config.upgrade_global_tables,
    )


def build_schema_provider(config: DatabaseConfig, base_dir: Path | None = None) -> SchemaProvider:
    """Schema provider reading scope files configured in ``[schema]``."""
    return partial(load_schema_text, config, base_dir=base_dir)
