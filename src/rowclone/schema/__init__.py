"""Model and association declarations.

Usage:
    from rowclone.schema import AssociationIndex, ModelDef
    from rowclone.schema import HasOne, HasMany, ManyToMany
"""

from rowclone.schema.models import (
    AssociationIndex,
    HasMany,
    HasOne,
    ManyToMany,
    ModelDef,
)

__all__ = [
    "AssociationIndex",
    "ModelDef",
    "HasOne",
    "HasMany",
    "ManyToMany",
]
