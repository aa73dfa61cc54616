"""Adapter and store factory for configured database profiles.

Profile resolution order:
1. Explicit profile name
2. ``{env_prefix}DB_PROFILE`` environment variable
3. The only profile, when exactly one is configured
"""

import os
from urllib.parse import quote

from rowclone.adapters.postgres import AsyncPostgresAdapter
from rowclone.config.models import DatabaseProfile, RowcloneConfig
from rowclone.store import TableTreeStore


class ProfileNotFoundError(Exception):
    """Raised when no database profile can be resolved."""

    pass


def get_active_profile_name(
    config: RowcloneConfig,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> str:
    """Resolve which profile to connect with.

    Args:
        config: Loaded configuration.
        profile_name: Explicit profile name, if any.
        env_prefix: Prefix for environment variable lookup (e.g. ``"APP_"``
            reads ``APP_DB_PROFILE``).

    Returns:
        Profile name present in ``config.profiles``.

    Raises:
        ProfileNotFoundError: If no profile is selected or it is unknown.
    """
    name = profile_name or os.environ.get(f"{env_prefix}DB_PROFILE")
    if name is None and len(config.profiles) == 1:
        name = next(iter(config.profiles))

    if name is None:
        raise ProfileNotFoundError(
            "No database profile selected.\n"
            f"Pass --profile or set {env_prefix}DB_PROFILE. "
            f"Available profiles: {', '.join(config.profiles) or '(none)'}"
        )
    if name not in config.profiles:
        raise ProfileNotFoundError(
            f"Profile '{name}' not found. "
            f"Available: {', '.join(config.profiles) or '(none)'}"
        )
    return name


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Example:
        >>> resolve_url(DatabaseProfile(url="postgresql://u:[YOUR-PASSWORD]@h/db",
        ...                             db_password="p@ss"))
        'postgresql://u:p%40ss@h/db'
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


def get_adapter(
    config: RowcloneConfig,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> AsyncPostgresAdapter:
    """Create a table client for the resolved profile.

    Raises:
        ProfileNotFoundError: If no profile can be resolved.
    """
    name = get_active_profile_name(config, profile_name, env_prefix)
    return AsyncPostgresAdapter(database_url=resolve_url(config.profiles[name]))


def get_store(
    config: RowcloneConfig,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> tuple[AsyncPostgresAdapter, TableTreeStore]:
    """Create a table client and a tree store over it.

    The adapter is returned too so callers can ``close()`` it.
    """
    adapter = get_adapter(config, profile_name, env_prefix)
    return adapter, TableTreeStore(adapter, config.index)
