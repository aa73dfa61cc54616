"""Conversion of a fetched record tree into insertable new-row data.

Three steps, always applied in this order by the copier:

1. ``strip_fields`` on the root record (its declared primary key plus
   the configured fields: timestamps, tree-position fields, ...).
2. ``convert_joins``: many-to-many data arrives as full related records
   with the join row embedded under the join model's key.  Each is
   replaced by its join row, stripped of the join primary key and the
   foreign key to the owning record.  Join rows are copied whole rather
   than reduced to an id list because they may carry extra columns
   (ordering, annotations).
3. ``convert_children``: has-one/has-many records are stripped, lose the
   foreign key to their parent, and are converted recursively.

None of these functions mutate their input.
"""

from typing import Any, Iterable

from rowclone.config.models import CopyConfig, CopySettings
from rowclone.schema.models import AssociationIndex


def strip_fields(record: dict[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    """Return ``record`` without any of ``fields``."""
    drop = set(fields)
    return {k: v for k, v in record.items() if k not in drop}


def convert_joins(
    index: AssociationIndex,
    settings: CopySettings,
    model: str,
    tree: dict[str, Any],
) -> dict[str, Any]:
    """Replace many-to-many related records with their sanitized join rows.

    Args:
        index: Declared associations.
        settings: Copy settings of the root model.
        model: Root model identifier.
        tree: Record tree as fetched (root-level associations as siblings).

    Returns:
        New tree; unchanged when ``settings.habtm`` is false.

    Example:
        >>> convert_joins(index, CopySettings(), "Post", {
        ...     "Post": {"title": "X"},
        ...     "Tag": [{"id": 3, "name": "red",
        ...              "PostsTag": {"id": 9, "post_id": 1, "tag_id": 3, "sort_order": 5}}],
        ... })
        {'Post': {'title': 'X'}, 'Tag': [{'tag_id': 3, 'sort_order': 5}]}
    """
    if not settings.habtm:
        return tree

    result = dict(tree)
    for name, assoc in index.associations_of(model).many_to_many.items():
        related = result.get(name)
        if not related:
            continue

        join_rows = [
            record[assoc.with_model]
            for record in related
            if isinstance(record, dict) and record.get(assoc.with_model)
        ]
        if not join_rows:
            continue

        drop = [*settings.strip_fields, assoc.join_pk, assoc.foreign_key]
        result[name] = [strip_fields(row, drop) for row in join_rows]

    return result


def convert_children(
    index: AssociationIndex,
    config: CopyConfig,
    model: str,
    record: dict[str, Any],
    root_settings: CopySettings,
) -> dict[str, Any]:
    """Strip keys from nested has-one/has-many records, recursively.

    Each child is stripped with its own model's ``strip_fields`` (or
    ``root_settings`` when its model has no settings registered) and its
    declared primary key, and loses the foreign key pointing at
    ``record``.  Association keys whose value is empty are dropped so an
    empty collection is never submitted as "clear this relation".

    Args:
        index: Declared associations.
        config: Per-model copy settings.
        model: Model of ``record``.
        record: Record dict (or the root tree) holding association keys.
        root_settings: Settings of the model being copied.
    """
    result = dict(record)
    for name, assoc in index.associations_of(model).children().items():
        if name not in result:
            continue

        value = result[name]
        if not value:
            del result[name]
            continue

        fields = (config.settings_for(assoc.model) or root_settings).strip_fields
        child_pk = index.associations_of(assoc.model).pk
        drop = [*fields, child_pk, assoc.foreign_key]

        if isinstance(value, list):
            result[name] = [
                convert_children(
                    index, config, assoc.model, strip_fields(child, drop), root_settings
                )
                for child in value
            ]
        else:
            result[name] = convert_children(
                index, config, assoc.model, strip_fields(value, drop), root_settings
            )

    return result


def convert_tree(
    index: AssociationIndex,
    config: CopyConfig,
    model: str,
    tree: dict[str, Any],
) -> dict[str, Any]:
    """Run the full conversion on a fetched tree: strip, joins, children."""
    settings = config.settings_for(model) or CopySettings()

    converted = dict(tree)
    root_pk = index.associations_of(model).pk
    converted[model] = strip_fields(tree[model], [*settings.strip_fields, root_pk])
    converted = convert_joins(index, settings, model, converted)
    return convert_children(index, config, model, converted, settings)
