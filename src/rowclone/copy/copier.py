"""Deep copy of a record and its dependent subtree.

Fetches a root record with its has-one/has-many descendants and
many-to-many join rows, converts everything into new-row data, and
cascade-saves it.  With a ``master_key`` configured, a second pass
re-fetches the new subtree and points the master key at the new root.

States: fetching -> converting -> persisting -> [master_key_updating]
-> done, with ``failed`` reachable from fetching (record not found),
persisting, and master_key_updating (write rejected).

Usage:
    from rowclone.copy.copier import Copier, copy_record
    from rowclone.store import TableTreeStore

    store = TableTreeStore(adapter, index)
    result = await copy_record(store, index, config, "Post", 42)
    if result.success:
        print(f"Copied to {result.new_id}")
    else:
        print(f"Failed: {result.error}")
"""

import logging
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from rowclone.adapters.base import RecordStore
from rowclone.config.models import CopyConfig
from rowclone.copy.contain import generate_contain
from rowclone.copy.convert import convert_tree
from rowclone.copy.master_key import apply_master_key
from rowclone.errors import InsertRejectedError, RecordNotFoundError
from rowclone.schema.models import AssociationIndex

logger = logging.getLogger(__name__)


class CopyState(str, Enum):
    """Stages of a copy operation."""

    FETCHING = "fetching"
    CONVERTING = "converting"
    PERSISTING = "persisting"
    MASTER_KEY_UPDATING = "master_key_updating"
    DONE = "done"
    FAILED = "failed"


class CopyResult(BaseModel):
    """Result of a copy operation.

    Example:
        >>> result = CopyResult(model="Post", source_id=1, success=True, new_id=2)
        >>> result.state
        <CopyState.DONE: 'done'>
    """

    model: str
    source_id: Any
    success: bool = False
    new_id: Any = None
    state: CopyState = CopyState.DONE
    error: str | None = None
    failed_at: CopyState | None = None
    error_kind: Literal["record_not_found", "insert_rejected"] | None = None


class PreparedCopy(BaseModel):
    """Contain set and converted tree of a copy that has not been saved."""

    model: str
    source_id: Any
    contain: dict[str, Any] = Field(default_factory=dict)
    tree: dict[str, Any] = Field(default_factory=dict)


class Copier:
    """Copies records using the given store, declarations, and settings.

    Holds no per-copy state, so one instance can serve concurrent copies
    of unrelated records.

    Args:
        store: Fetches and cascade-saves record trees.
        index: Declared associations.
        config: Per-model copy settings.
    """

    def __init__(
        self,
        store: RecordStore,
        index: AssociationIndex,
        config: CopyConfig,
    ) -> None:
        self._store = store
        self._index = index
        self._config = config

    async def prepare(self, model: str, record_id: Any) -> PreparedCopy:
        """Fetch and convert without saving.

        Raises:
            RecordNotFoundError: If ``record_id`` does not resolve.
        """
        contain, tree = await self._fetch(model, record_id)
        converted = convert_tree(self._index, self._config, model, tree)
        return PreparedCopy(
            model=model, source_id=record_id, contain=contain, tree=converted
        )

    async def copy(self, model: str, record_id: Any) -> CopyResult:
        """Copy ``model`` record ``record_id`` and its dependent subtree.

        Returns:
            ``CopyResult`` with ``new_id`` on success, or ``error`` and
            ``error_kind`` with the state the copy failed in.

        Raises:
            UnknownModelError: If the index does not declare a model the
                copy reaches.
            Exception: Whatever ``store.fetch`` raises for an unreachable
                datastore propagates unchanged; nothing has been written
                at that point.
        """
        result = CopyResult(model=model, source_id=record_id)
        logger.info(f"Copying {model} {record_id}")

        state = CopyState.FETCHING
        try:
            contain, tree = await self._fetch(model, record_id)

            state = CopyState.CONVERTING
            converted = convert_tree(self._index, self._config, model, tree)

            state = CopyState.PERSISTING
            new_id = await self._save(model, converted)

            settings = self._config.settings_for(model)
            if settings is not None and settings.master_key:
                state = CopyState.MASTER_KEY_UPDATING
                await self._update_master_key(
                    model, new_id, contain, settings.master_key
                )
        except RecordNotFoundError as e:
            logger.warning(f"Copy of {model} {record_id} failed: {e}")
            return result.model_copy(update={
                "state": CopyState.FAILED,
                "failed_at": state,
                "error": str(e),
                "error_kind": "record_not_found",
            })
        except InsertRejectedError as e:
            logger.warning(f"Copy of {model} {record_id} failed while {state.value}: {e}")
            return result.model_copy(update={
                "state": CopyState.FAILED,
                "failed_at": state,
                "error": str(e),
                "error_kind": "insert_rejected",
            })

        logger.info(f"Copied {model} {record_id} to {new_id}")
        return result.model_copy(update={
            "success": True,
            "new_id": new_id,
            "state": CopyState.DONE,
        })

    async def _fetch(
        self, model: str, record_id: Any
    ) -> tuple[dict[str, dict], dict[str, Any]]:
        contain = generate_contain(self._index, self._config, model)
        logger.debug(f"Contain set for {model}: {contain}")

        tree = await self._store.fetch(model, record_id, contain)
        if not tree or not tree.get(model):
            raise RecordNotFoundError(model, record_id)
        return contain, tree

    async def _save(self, model: str, tree: dict[str, Any]) -> Any:
        new_id = await self._store.save_tree(model, tree)
        if new_id is None:
            raise InsertRejectedError(model, "no primary key returned")
        return new_id

    async def _update_master_key(
        self,
        model: str,
        new_id: Any,
        contain: dict[str, dict],
        field: str,
    ) -> None:
        tree = await self._store.fetch(model, new_id, contain)
        if not tree or not tree.get(model):
            raise RecordNotFoundError(model, new_id)

        update = apply_master_key(self._index, model, tree, contain, field, new_id)
        logger.debug(f"Setting {field}={new_id} across {model} {new_id}")
        await self._save(model, update)


async def copy_record(
    store: RecordStore,
    index: AssociationIndex,
    config: CopyConfig,
    model: str,
    record_id: Any,
) -> CopyResult:
    """Copy a record and its dependent subtree.  See ``Copier.copy``."""
    return await Copier(store, index, config).copy(model, record_id)


async def prepare_copy(
    store: RecordStore,
    index: AssociationIndex,
    config: CopyConfig,
    model: str,
    record_id: Any,
) -> PreparedCopy:
    """Fetch and convert a record without saving.  See ``Copier.prepare``."""
    return await Copier(store, index, config).prepare(model, record_id)
