"""Association declarations and the index that serves them.

Projects declare their models and how they relate, and the copy
pipeline reads the declarations by model identifier -- no reflection
over live ORM objects.

Usage:
    from rowclone.schema.models import (
        AssociationIndex, HasMany, HasOne, ManyToMany, ModelDef,
    )

    index = AssociationIndex(models={
        "Post": ModelDef(
            name="Post",
            table="posts",
            has_many={"Comment": HasMany(model="Comment", foreign_key="post_id")},
            many_to_many={
                "Tag": ManyToMany(
                    model="Tag",
                    join_table="posts_tags",
                    with_model="PostsTag",
                    foreign_key="post_id",
                    association_foreign_key="tag_id",
                ),
            },
        ),
        "Comment": ModelDef(name="Comment", table="comments"),
        "Tag": ModelDef(name="Tag", table="tags"),
    })
"""

from pydantic import BaseModel, Field

from rowclone.errors import UnknownModelError


class HasOne(BaseModel):
    """One-to-one association; the foreign key lives on the related model."""

    model: str          # related model identifier
    foreign_key: str    # FK column on the related model


class HasMany(BaseModel):
    """One-to-many association; the foreign key lives on the related model."""

    model: str
    foreign_key: str


class ManyToMany(BaseModel):
    """Many-to-many association mediated by a join table."""

    model: str                          # related model identifier
    join_table: str                     # join table name
    with_model: str                     # key of the join payload in each related record
    foreign_key: str                    # join column pointing at the owning record
    association_foreign_key: str        # join column pointing at the related record
    join_pk: str = "id"                 # join table primary key


class ModelDef(BaseModel):
    """A record type and its declared associations.

    Association dict keys are association names; they are also the keys
    under which associated records appear in a record tree.
    """

    name: str
    table: str
    pk: str = "id"
    has_one: dict[str, HasOne] = Field(default_factory=dict)
    has_many: dict[str, HasMany] = Field(default_factory=dict)
    many_to_many: dict[str, ManyToMany] = Field(default_factory=dict)

    def children(self) -> dict[str, HasOne | HasMany]:
        """Has-many and has-one associations merged (has-one wins on a name clash)."""
        return {**self.has_many, **self.has_one}


class AssociationIndex(BaseModel):
    """Declared models keyed by identifier. Read-only during a copy."""

    models: dict[str, ModelDef] = Field(default_factory=dict)

    def associations_of(self, model: str) -> ModelDef:
        """Return the declaration for ``model``.

        Raises:
            UnknownModelError: If ``model`` was never declared.
        """
        try:
            return self.models[model]
        except KeyError:
            raise UnknownModelError(model, sorted(self.models)) from None

    def __contains__(self, model: object) -> bool:
        return model in self.models
