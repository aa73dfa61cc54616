"""Record-tree fetch and cascade save over a flat ``DatabaseClient``.

``TableTreeStore`` implements ``RecordFetcher`` and ``Persistor`` with
one query per table access, driven by the association index:

- has-many: rows of the related table whose foreign key equals the
  parent's primary key, ordered by the related primary key
- has-one: the first such row, or ``{}``
- many-to-many: join rows by ``foreign_key``, each embedded under
  ``with_model`` in the related row it points at

Saving walks the same shape top-down.  A record carrying its primary key
is updated, anything else is inserted, and each child's foreign key is
set from the parent's (new) primary key.  Many-to-many entries are
written as join rows; entries still embedding a ``with_model`` payload
are related records, which are never written.

Usage:
    from rowclone.adapters.postgres import AsyncPostgresAdapter
    from rowclone.store import TableTreeStore

    store = TableTreeStore(AsyncPostgresAdapter(url), index)
    tree = await store.fetch("Post", 1, {"Comment": {}, "Tag": {}})
    new_id = await store.save_tree("Post", converted_tree)
"""

import logging
from typing import Any

from rowclone.adapters.base import DatabaseClient
from rowclone.errors import InsertRejectedError
from rowclone.schema.models import AssociationIndex, ManyToMany, ModelDef

logger = logging.getLogger(__name__)


class TableTreeStore:
    """Record tree store backed by single-table CRUD calls.

    Args:
        adapter: Flat table client.
        index: Declared models and associations.
    """

    def __init__(self, adapter: DatabaseClient, index: AssociationIndex) -> None:
        self._adapter = adapter
        self._index = index

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def fetch(
        self,
        model: str,
        record_id: Any,
        contain: dict[str, dict],
    ) -> dict[str, Any] | None:
        """Fetch a record tree.  Returns ``None`` when the root is missing."""
        model_def = self._index.associations_of(model)
        rows = await self._adapter.select(
            model_def.table, "*", filters={model_def.pk: record_id}
        )
        if not rows:
            return None

        root = rows[0]
        tree: dict[str, Any] = {model: root}
        tree.update(await self._fetch_associations(model_def, root, contain))
        return tree

    async def _fetch_associations(
        self,
        model_def: ModelDef,
        record: dict[str, Any],
        contain: dict[str, dict],
    ) -> dict[str, Any]:
        pk_value = record[model_def.pk]
        children = model_def.children()
        found: dict[str, Any] = {}

        for name, nested in contain.items():
            if name in model_def.many_to_many:
                found[name] = await self._fetch_related(
                    model_def.many_to_many[name], pk_value
                )
                continue

            assoc = children.get(name)
            if assoc is None:
                logger.debug(f"{model_def.name} has no association {name}; skipping")
                continue

            child_def = self._index.associations_of(assoc.model)
            rows = await self._adapter.select(
                child_def.table,
                "*",
                filters={assoc.foreign_key: pk_value},
                order_by=child_def.pk,
            )
            for row in rows:
                row.update(await self._fetch_associations(child_def, row, nested))

            if name in model_def.has_one:
                found[name] = rows[0] if rows else {}
            else:
                found[name] = rows

        return found

    async def _fetch_related(self, assoc: ManyToMany, owner_id: Any) -> list[dict]:
        related_def = self._index.associations_of(assoc.model)
        join_rows = await self._adapter.select(
            assoc.join_table,
            "*",
            filters={assoc.foreign_key: owner_id},
            order_by=assoc.join_pk,
        )

        related: list[dict] = []
        for join_row in join_rows:
            rows = await self._adapter.select(
                related_def.table,
                "*",
                filters={related_def.pk: join_row[assoc.association_foreign_key]},
            )
            if not rows:
                logger.debug(
                    f"Join row in {assoc.join_table} points at missing "
                    f"{assoc.model} {join_row[assoc.association_foreign_key]}"
                )
                continue
            related.append({**rows[0], assoc.with_model: join_row})
        return related

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    async def save_tree(self, model: str, tree: dict[str, Any]) -> Any:
        """Cascade-save ``tree`` and return the root primary key.

        Raises:
            InsertRejectedError: If any insert or update fails.
        """
        model_def = self._index.associations_of(model)
        try:
            return await self._save_record(model_def, tree[model], tree)
        except InsertRejectedError:
            raise
        except Exception as e:
            raise InsertRejectedError(model, str(e)) from e

    async def _save_record(
        self,
        model_def: ModelDef,
        record: dict[str, Any],
        associations: dict[str, Any],
        parent_fk: tuple[str, Any] | None = None,
    ) -> Any:
        """Write one record, then its associations.

        ``associations`` is where association keys are looked up: the
        root tree for the root record, the record itself otherwise.
        """
        assoc_names = set(model_def.children()) | set(model_def.many_to_many)
        data = {k: v for k, v in record.items() if k not in assoc_names}
        if parent_fk is not None:
            data[parent_fk[0]] = parent_fk[1]

        pk_value = await self._write(model_def.table, model_def.pk, data)

        for name, assoc in model_def.children().items():
            value = associations.get(name)
            if not value:
                continue
            child_def = self._index.associations_of(assoc.model)
            for child in value if isinstance(value, list) else [value]:
                await self._save_record(
                    child_def, child, child, (assoc.foreign_key, pk_value)
                )

        for name, assoc in model_def.many_to_many.items():
            for join_row in associations.get(name) or []:
                if assoc.with_model in join_row:
                    continue
                await self._write(
                    assoc.join_table,
                    assoc.join_pk,
                    {**join_row, assoc.foreign_key: pk_value},
                )

        return pk_value

    async def _write(self, table: str, pk: str, data: dict[str, Any]) -> Any:
        if data.get(pk) is not None:
            pk_value = data[pk]
            await self._adapter.update(
                table,
                data={k: v for k, v in data.items() if k != pk},
                filters={pk: pk_value},
            )
            return pk_value

        data = {k: v for k, v in data.items() if k != pk}
        row = await self._adapter.insert(table, data=data)
        logger.debug(f"Inserted {table} {row.get(pk)}")
        return row.get(pk)
