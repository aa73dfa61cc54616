"""Configuration management: copy settings, profiles, and TOML loading.

Usage:
    >>> from rowclone.config import load_config, CopySettings, CopyConfig
"""

from rowclone.config.loader import load_config, parse_config
from rowclone.config.models import (
    CopyConfig,
    CopySettings,
    DatabaseProfile,
    RowcloneConfig,
)

__all__ = [
    "load_config",
    "parse_config",
    "CopySettings",
    "CopyConfig",
    "DatabaseProfile",
    "RowcloneConfig",
]
