"""Protocols for the collaborators the copy pipeline talks to.

- ``DatabaseClient``: flat async CRUD over single tables.
- ``RecordFetcher``: reads a root record and its contained associations
  as one nested record tree.
- ``Persistor``: cascade-saves a nested record tree.

``rowclone.store.TableTreeStore`` implements the last two on top of the
first.  Callers with their own ORM implement ``RecordFetcher`` and
``Persistor`` directly.

Usage:
    from rowclone.adapters.base import DatabaseClient, Persistor, RecordFetcher

    async def do_work(client: DatabaseClient) -> None:
        rows = await client.select("posts", "id, title", filters={"id": 1})
        await client.insert("posts", {"title": "Hello"})
        await client.close()
"""

from typing import Any, Protocol


class DatabaseClient(Protocol):
    """Flat table client interface that all adapters must implement.

    All methods are async -- callers must ``await`` every operation.
    """

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        """Select rows from table.

        Args:
            table: Table name.
            columns: Comma-separated column names (e.g., ``"id, title"``).
            filters: Optional dict of field=value filters (all must match via AND).
            order_by: Optional column name to sort by.

        Returns:
            List of dicts, one per row.  Empty list if no matches.
        """
        ...

    async def insert(self, table: str, data: dict) -> dict:
        """Insert row into table and return the created row.

        Args:
            table: Table name.
            data: Dict of field=value pairs to insert.

        Returns:
            Dict representing the created row (includes id, timestamps, etc.).

        Raises:
            Exception: If duplicate key or constraint violation.
        """
        ...

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> dict:
        """Update rows in table and return the first updated row.

        Raises:
            Exception: If no rows match filters.
        """
        ...

    async def close(self) -> None:
        """Close database connection and clean up resources."""
        ...


class RecordFetcher(Protocol):
    """Reads a record tree for the copy pipeline."""

    async def fetch(
        self,
        model: str,
        record_id: Any,
        contain: dict[str, dict],
    ) -> dict[str, Any] | None:
        """Fetch a root record and every association named in ``contain``.

        Args:
            model: Root model identifier.
            record_id: Primary key of the root record.
            contain: Nested contain set (association name -> nested contain).

        Returns:
            Record tree keyed by ``model`` with root-level associations as
            siblings, or ``None`` when no record matches ``record_id``.

        Example:
            tree = await fetcher.fetch("Post", 1, {"Comment": {}, "Tag": {}})
            # {"Post": {"id": 1, ...}, "Comment": [...], "Tag": [...]}
        """
        ...


class Persistor(Protocol):
    """Writes a record tree with cascading nested-save semantics."""

    async def save_tree(self, model: str, tree: dict[str, Any]) -> Any:
        """Save ``tree`` and return the root record's primary key.

        Records without a primary key are inserted, records with one are
        updated.  Child foreign keys and join-row foreign keys are set
        from their parent's key during the cascade.

        Raises:
            InsertRejectedError: If the datastore refuses any write.
        """
        ...


class RecordStore(RecordFetcher, Persistor, Protocol):
    """A collaborator that both fetches and saves record trees."""

    pass
