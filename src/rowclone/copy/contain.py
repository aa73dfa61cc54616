"""Contain-set generation.

A contain set names the associations to fetch and copy.  It mirrors the
nesting of has-one/has-many associations; many-to-many associations of
the root model are listed at the top level with no nesting, since only
their join rows are copied.

Example:
    >>> generate_contain(index, config, "Post")
    {'Comment': {'Reply': {}}, 'Attachment': {}, 'Tag': {}}
"""

import logging

from rowclone.config.models import CopyConfig
from rowclone.schema.models import AssociationIndex

logger = logging.getLogger(__name__)


def build_contain(
    index: AssociationIndex,
    config: CopyConfig,
    model: str,
    path: tuple[str, ...] = (),
) -> dict[str, dict]:
    """Recursively build the has-one/has-many contain set for ``model``.

    Models without registered settings, or with ``recursive`` disabled,
    contribute nothing.  An association is skipped when its related model
    is ``model`` itself or any model already on ``path``.

    Args:
        index: Declared associations.
        config: Per-model copy settings.
        model: Model to expand.
        path: Models visited on the way to ``model`` (ancestors only).
    """
    settings = config.settings_for(model)
    if settings is None or not settings.recursive:
        return {}

    visited = (*path, model)
    contain: dict[str, dict] = {}
    for name, assoc in index.associations_of(model).children().items():
        if assoc.model in visited:
            logger.debug(f"Skipping {model}.{name}: {assoc.model} already on path")
            continue
        contain[name] = build_contain(index, config, assoc.model, visited)

    return contain


def remove_ignored(contain: dict[str, dict], ignore: list[str]) -> dict[str, dict]:
    """Return a copy of ``contain`` without the dotted ``ignore`` paths.

    Paths that do not resolve in ``contain`` are skipped.
    """
    result = _copy_contain(contain)
    for path in dict.fromkeys(ignore):
        keys = path.split(".")
        node = result
        for key in keys[:-1]:
            node = node.get(key)
            if not isinstance(node, dict):
                break
        else:
            if keys[-1] in node:
                del node[keys[-1]]
                logger.debug(f"Ignoring association path {path}")
    return result


def generate_contain(
    index: AssociationIndex,
    config: CopyConfig,
    model: str,
) -> dict[str, dict]:
    """Full contain set for copying ``model``.

    Combines the recursive child contain with the root model's
    many-to-many associations, then removes the root's ignored paths.
    """
    contain = build_contain(index, config, model)
    for name in index.associations_of(model).many_to_many:
        contain.setdefault(name, {})

    settings = config.settings_for(model)
    if settings is not None and settings.ignore:
        contain = remove_ignored(contain, settings.ignore)
    return contain


def _copy_contain(contain: dict[str, dict]) -> dict[str, dict]:
    return {name: _copy_contain(nested) for name, nested in contain.items()}
