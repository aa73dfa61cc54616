"""Tests for association declarations and index lookup."""

import pytest

from rowclone.errors import UnknownModelError
from rowclone.schema.models import AssociationIndex, HasMany, HasOne, ManyToMany, ModelDef


class TestModelDef:
    """Declaration defaults and helpers."""

    def test_defaults(self):
        model = ModelDef(name="Tag", table="tags")
        assert model.pk == "id"
        assert model.children() == {}
        assert model.many_to_many == {}

    def test_children_merges_has_many_and_has_one(self, blog_index):
        children = blog_index.associations_of("Post").children()
        assert set(children) == {"Comment", "ChildPost", "Summary"}
        assert isinstance(children["Summary"], HasOne)

    def test_has_one_wins_name_clash(self):
        model = ModelDef(
            name="User",
            table="users",
            has_many={"Profile": HasMany(model="Profile", foreign_key="user_id")},
            has_one={"Profile": HasOne(model="Profile", foreign_key="owner_id")},
        )
        assert model.children()["Profile"].foreign_key == "owner_id"

    def test_join_pk_default(self):
        assoc = ManyToMany(
            model="Tag",
            join_table="posts_tags",
            with_model="PostsTag",
            foreign_key="post_id",
            association_foreign_key="tag_id",
        )
        assert assoc.join_pk == "id"


class TestAssociationIndex:
    """Lookup by model identifier."""

    def test_lookup(self, blog_index):
        assert blog_index.associations_of("Comment").table == "comments"

    def test_contains(self, blog_index):
        assert "Post" in blog_index
        assert "Nope" not in blog_index

    def test_unknown_model(self):
        index = AssociationIndex(models={"Post": ModelDef(name="Post", table="posts")})
        with pytest.raises(UnknownModelError) as exc_info:
            index.associations_of("Nope")
        assert isinstance(exc_info.value, KeyError)
        assert "Available: Post" in str(exc_info.value)
