"""Shared fixtures: an in-memory table client and a blog-shaped schema.

Schema used across tests:

    Post    (posts)     has_many Comment, has_one Summary,
                        has_many ChildPost (-> Post, self-reference),
                        many_to_many Tag via posts_tags (PostsTag)
    Comment (comments)  has_many Reply
    Reply   (replies)
    Summary (summaries)
    Tag     (tags)
"""

import copy
from typing import Any

import pytest

from rowclone.config.models import CopyConfig, CopySettings
from rowclone.schema.models import (
    AssociationIndex,
    HasMany,
    HasOne,
    ManyToMany,
    ModelDef,
)


class FakeDatabase:
    """In-memory ``DatabaseClient`` with auto-increment key columns.

    Keys are ``id`` unless ``pk_columns`` names another column for a
    table.  Tables named in ``reject_inserts`` raise on insert, like a
    constraint violation would.
    """

    def __init__(
        self,
        tables: dict[str, list[dict]] | None = None,
        pk_columns: dict[str, str] | None = None,
    ) -> None:
        self.tables: dict[str, list[dict]] = copy.deepcopy(tables or {})
        self.pk_columns = pk_columns or {}
        self.reject_inserts: set[str] = set()
        self.inserts: list[tuple[str, dict]] = []
        self.updates: list[tuple[str, dict, dict]] = []
        self.closed = False
        self._next_id = 100

    def rows(self, table: str) -> list[dict]:
        return self.tables.setdefault(table, [])

    async def select(self, table, columns="*", filters=None, order_by=None):
        rows = [
            dict(r) for r in self.rows(table)
            if all(r.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by))
        return rows

    async def insert(self, table, data):
        if table in self.reject_inserts:
            raise RuntimeError(f"violates constraint on {table}")
        row = dict(data)
        row.setdefault(self.pk_columns.get(table, "id"), self._next_id)
        self._next_id += 1
        self.rows(table).append(row)
        self.inserts.append((table, dict(data)))
        return dict(row)

    async def update(self, table, data, filters):
        for row in self.rows(table):
            if all(row.get(k) == v for k, v in filters.items()):
                row.update(data)
                self.updates.append((table, dict(data), dict(filters)))
                return dict(row)
        raise ValueError(f"No rows matched filters: {filters}")

    async def close(self):
        self.closed = True


def _posts_tags() -> ManyToMany:
    return ManyToMany(
        model="Tag",
        join_table="posts_tags",
        with_model="PostsTag",
        foreign_key="post_id",
        association_foreign_key="tag_id",
    )


@pytest.fixture
def blog_index() -> AssociationIndex:
    return AssociationIndex(models={
        "Post": ModelDef(
            name="Post",
            table="posts",
            has_many={
                "Comment": HasMany(model="Comment", foreign_key="post_id"),
                "ChildPost": HasMany(model="Post", foreign_key="parent_id"),
            },
            has_one={"Summary": HasOne(model="Summary", foreign_key="post_id")},
            many_to_many={"Tag": _posts_tags()},
        ),
        "Comment": ModelDef(
            name="Comment",
            table="comments",
            has_many={"Reply": HasMany(model="Reply", foreign_key="comment_id")},
        ),
        "Reply": ModelDef(name="Reply", table="replies"),
        "Summary": ModelDef(name="Summary", table="summaries"),
        "Tag": ModelDef(name="Tag", table="tags"),
    })


@pytest.fixture
def blog_config() -> CopyConfig:
    return CopyConfig(models={
        "Post": CopySettings(),
        "Comment": CopySettings(),
        "Reply": CopySettings(),
        "Summary": CopySettings(),
    })


@pytest.fixture
def blog_rows() -> dict[str, list[dict[str, Any]]]:
    return {
        "posts": [
            {"id": 1, "title": "X", "parent_id": None, "group_id": 7,
             "created": "2026-01-01", "modified": "2026-01-02"},
            {"id": 2, "title": "child of X", "parent_id": 1, "group_id": 7},
        ],
        "comments": [
            {"id": 10, "post_id": 1, "body": "a", "group_id": 7},
            {"id": 11, "post_id": 1, "body": "b", "group_id": 7},
        ],
        "replies": [
            {"id": 20, "comment_id": 10, "body": "re: a", "group_id": 7},
        ],
        "summaries": [],
        "tags": [
            {"id": 3, "name": "red"},
            {"id": 4, "name": "blue"},
        ],
        "posts_tags": [
            {"id": 30, "post_id": 1, "tag_id": 3, "sort_order": 5},
            {"id": 31, "post_id": 1, "tag_id": 4, "sort_order": 6},
        ],
    }


@pytest.fixture
def fake_db(blog_rows) -> FakeDatabase:
    return FakeDatabase(blog_rows)


@pytest.fixture
def make_db():
    """Factory for a ``FakeDatabase`` seeded with the given tables."""
    return FakeDatabase
