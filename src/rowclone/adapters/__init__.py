"""Database adapters package.

Provides the collaborator Protocols (``DatabaseClient``, ``RecordFetcher``,
``Persistor``) and the async PostgreSQL table client.

Usage:
    from rowclone.adapters import DatabaseClient, AsyncPostgresAdapter
"""

from rowclone.adapters.base import (
    DatabaseClient,
    Persistor,
    RecordFetcher,
    RecordStore,
)
from rowclone.adapters.postgres import AsyncPostgresAdapter

__all__ = [
    "DatabaseClient",
    "RecordFetcher",
    "Persistor",
    "RecordStore",
    "AsyncPostgresAdapter",
]
