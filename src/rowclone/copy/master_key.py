"""Master-key propagation for the second pass of a copy.

The new root id only exists after the first save, so a "master key"
(a denormalized grouping id pointing at the subtree root) is rewritten
on a re-fetched copy of the new subtree and saved again.

The rewrite follows the declared has-one/has-many paths of the contain
set only.  A nested dict that merely happens to have a key with the
master key's name is left alone.
"""

from typing import Any

from rowclone.schema.models import AssociationIndex


def apply_master_key(
    index: AssociationIndex,
    model: str,
    tree: dict[str, Any],
    contain: dict[str, dict],
    field: str,
    new_id: Any,
) -> dict[str, Any]:
    """Point ``field`` at ``new_id`` throughout a re-fetched record tree.

    Args:
        index: Declared associations.
        model: Root model identifier.
        tree: Record tree re-fetched by the new root id.
        contain: Contain set used for the fetch.
        field: Master key field name.
        new_id: Primary key of the new root record.

    Returns:
        Update tree for ``Persistor.save_tree``: root and child records
        that carry ``field`` have it set to ``new_id``, empty associations
        are removed, and many-to-many data is left out so join rows are
        not written twice.

    Example:
        >>> apply_master_key(index, "Post",
        ...     {"Post": {"id": 8, "group_id": 7},
        ...      "Comment": [{"id": 20, "post_id": 8, "group_id": 7}]},
        ...     {"Comment": {}}, "group_id", 8)
        {'Post': {'id': 8, 'group_id': 8}, 'Comment': [{'id': 20, 'post_id': 8, 'group_id': 8}]}
    """
    result: dict[str, Any] = {model: _rewrite(tree[model], field, new_id)}
    children = _rewrite_children(index, model, tree, contain, field, new_id)
    result.update(children)
    return result


def _rewrite(record: dict[str, Any], field: str, new_id: Any) -> dict[str, Any]:
    if field not in record:
        return dict(record)
    return {**record, field: new_id}


def _rewrite_children(
    index: AssociationIndex,
    model: str,
    record: dict[str, Any],
    contain: dict[str, dict],
    field: str,
    new_id: Any,
) -> dict[str, Any]:
    """Rewritten association values of ``record`` along ``contain``."""
    children = index.associations_of(model).children()
    result: dict[str, Any] = {}
    for name, nested in contain.items():
        assoc = children.get(name)
        if assoc is None:
            continue
        value = record.get(name)
        if not value:
            continue

        if isinstance(value, list):
            result[name] = [
                _rewrite_node(index, assoc.model, child, nested, field, new_id)
                for child in value
            ]
        else:
            result[name] = _rewrite_node(index, assoc.model, value, nested, field, new_id)
    return result


def _rewrite_node(
    index: AssociationIndex,
    model: str,
    record: dict[str, Any],
    contain: dict[str, dict],
    field: str,
    new_id: Any,
) -> dict[str, Any]:
    # Drop association keys first; only those on the contain path come back
    assoc_names = set(index.associations_of(model).children())
    assoc_names.update(index.associations_of(model).many_to_many)
    node = {k: v for k, v in record.items() if k not in assoc_names}
    node = _rewrite(node, field, new_id)
    node.update(_rewrite_children(index, model, record, contain, field, new_id))
    return node
