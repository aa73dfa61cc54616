"""rowclone: deep copy of database records and their dependent rows.

Copies a root record with its has-one/has-many subtree as new rows,
duplicates many-to-many join rows, strips keys and timestamps, and
optionally repoints a master key at the new root.

Usage:
    from rowclone import AssociationIndex, ModelDef, HasMany, ManyToMany
    from rowclone import CopyConfig, CopySettings, copy_record
    from rowclone import AsyncPostgresAdapter, TableTreeStore
"""

__version__ = "0.1.0"

# Adapters
from rowclone.adapters.base import DatabaseClient, Persistor, RecordFetcher, RecordStore
from rowclone.adapters.postgres import AsyncPostgresAdapter

# Config
from rowclone.config.loader import load_config
from rowclone.config.models import CopyConfig, CopySettings, DatabaseProfile, RowcloneConfig

# Copy pipeline
from rowclone.copy.contain import generate_contain
from rowclone.copy.copier import Copier, CopyResult, CopyState, copy_record, prepare_copy

# Errors
from rowclone.errors import (
    ConfigError,
    CopyError,
    InsertRejectedError,
    RecordNotFoundError,
    UnknownModelError,
)

# Factory
from rowclone.factory import ProfileNotFoundError, get_adapter, get_store, resolve_url

# Schema
from rowclone.schema.models import AssociationIndex, HasMany, HasOne, ManyToMany, ModelDef

# Store
from rowclone.store import TableTreeStore

__all__ = [
    # Adapters
    "DatabaseClient",
    "RecordFetcher",
    "Persistor",
    "RecordStore",
    "AsyncPostgresAdapter",
    # Config
    "load_config",
    "CopySettings",
    "CopyConfig",
    "DatabaseProfile",
    "RowcloneConfig",
    # Copy pipeline
    "generate_contain",
    "Copier",
    "CopyResult",
    "CopyState",
    "copy_record",
    "prepare_copy",
    # Errors
    "CopyError",
    "RecordNotFoundError",
    "InsertRejectedError",
    "UnknownModelError",
    "ConfigError",
    # Factory
    "get_adapter",
    "get_store",
    "resolve_url",
    "ProfileNotFoundError",
    # Schema
    "AssociationIndex",
    "ModelDef",
    "HasOne",
    "HasMany",
    "ManyToMany",
    # Store
    "TableTreeStore",
]
