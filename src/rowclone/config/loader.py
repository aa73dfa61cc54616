"""Load rowclone.toml into a ``RowcloneConfig``.

The file has three top-level tables:

- ``[profiles.<name>]``: database connection profiles
- ``[models.<Model>]``: model declarations (table, pk, associations)
- ``[copy.<Model>]``: per-model copy settings

Usage:
    from rowclone.config.loader import load_config

    config = load_config()                       # ./rowclone.toml
    config = load_config(Path("conf/copy.toml"))
"""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rowclone.config.models import CopyConfig, CopySettings, DatabaseProfile, RowcloneConfig
from rowclone.errors import ConfigError
from rowclone.schema.models import AssociationIndex, ModelDef

DEFAULT_CONFIG_FILE = "rowclone.toml"


def parse_config(data: dict[str, Any]) -> RowcloneConfig:
    """Build a ``RowcloneConfig`` from already-parsed TOML data.

    Args:
        data: Dict as returned by ``tomllib.load``.

    Returns:
        RowcloneConfig with profiles, association index, and copy settings.

    Raises:
        ConfigError: If any section fails validation.
    """
    try:
        profiles = {
            name: DatabaseProfile(**profile_data)
            for name, profile_data in data.get("profiles", {}).items()
        }

        models: dict[str, ModelDef] = {}
        for name, model_data in data.get("models", {}).items():
            # Model name defaults to its table key; table defaults to the name
            model_data = {"name": name, "table": name, **model_data}
            models[name] = ModelDef(**model_data)

        settings = {
            name: CopySettings(**settings_data)
            for name, settings_data in data.get("copy", {}).items()
        }
    except (TypeError, ValidationError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    # Copy settings for undeclared models are almost always typos
    unknown = sorted(set(settings) - set(models))
    if models and unknown:
        raise ConfigError(
            f"Copy settings for undeclared models: {', '.join(unknown)}"
        )

    return RowcloneConfig(
        profiles=profiles,
        index=AssociationIndex(models=models),
        copy_config=CopyConfig(models=settings),
    )


def load_config(config_path: Path | None = None) -> RowcloneConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the config file (default: ./rowclone.toml)

    Returns:
        RowcloneConfig with all sections

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If config format is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE

    if not config_path.exists():
        raise FileNotFoundError(
            f"Config not found: {config_path}\n"
            f"Create {DEFAULT_CONFIG_FILE} with [models] and [copy] tables."
        )

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    return parse_config(data)
