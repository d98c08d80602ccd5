"""
Integration tests for sets, dictionaries and inverse lookup.

Tests cover:
- Key encoding on disk
- Partial updates and removal
- Collapse of empty collections
- Dictionaries of objects
- find_by_collection_key
"""

import pytest
import pytest_asyncio

from docschema import (
    SELF,
    InvalidSchemaUsage,
    QueryFilter,
    dict_type,
    find_by_collection_key,
    number,
    object_type,
    set_type,
    string,
)

Post = object_type({
    SELF: string,
    "title": string,
    "related": set_type,
})


class TestSetType:
    """Tests for set_type."""

    @pytest.mark.asyncio
    async def test_keys_are_encoded_into_one_segment(self, store, author):
        await set_type.write(store, author, "/tags", {"a/b c": True})

        assert [d.path for d in store.all_docs()] == ["/tags/a%2Fb%20c"]
        assert await set_type.read(store, "/tags") == {"a/b c": True}

    @pytest.mark.asyncio
    async def test_add_and_remove(self, store, author):
        await set_type.write(store, author, "/tags", {"x": True, "y": True})

        await set_type.write(store, author, "/tags", {"x": False, "z": True})

        assert await set_type.read(store, "/tags") == {"y": True, "z": True}

    @pytest.mark.asyncio
    async def test_empty_set_reads_as_none(self, store, author):
        await set_type.write(store, author, "/tags", {"x": True})

        await set_type.write(store, author, "/tags", {"x": None})

        assert await set_type.read(store, "/tags") is None

    @pytest.mark.asyncio
    async def test_delete_whole_set(self, store, author):
        await set_type.write(store, author, "/tags", {"x": True, "y": True})

        await set_type.write(store, author, "/tags", None)

        assert await set_type.read(store, "/tags") is None
        assert all(d.is_deleted for d in store.all_docs())

    @pytest.mark.asyncio
    async def test_set_inside_object(self, store, author):
        await Post.write(store, author, "/posts/2", {
            SELF: "Post body",
            "title": "Second",
            "related": {"/posts/1": True},
        })

        assert await Post.read(store, "/posts/2") == {
            SELF: "Post body",
            "title": "Second",
            "related": {"/posts/1": True},
        }


class TestDictType:
    """Tests for dict_type."""

    Scores = dict_type(number)
    People = dict_type(object_type({"name": string, "age": number}))

    @pytest.mark.asyncio
    async def test_dict_of_atoms(self, store, author):
        await self.Scores.write(store, author, "/scores", {"ada": 3, "bob": 5})

        assert await self.Scores.read(store, "/scores") == {"ada": 3, "bob": 5}

    @pytest.mark.asyncio
    async def test_dict_of_objects(self, store, author):
        await self.People.write(store, author, "/people", {
            "ada": {"name": "Ada", "age": 36},
            "bob": {"name": "Bob"},
        })

        assert await self.People.read(store, "/people") == {
            "ada": {"name": "Ada", "age": 36},
            "bob": {"name": "Bob"},
        }

    @pytest.mark.asyncio
    async def test_deleting_one_field_keeps_the_entry(self, store, author):
        """A cleared field inside an entry doesn't drop the whole entry."""
        await self.People.write(store, author, "/people", {"ada": {"name": "Ada", "age": 36}})

        await self.People.write(store, author, "/people", {"ada": {"age": None}})

        assert await self.People.read(store, "/people") == {"ada": {"name": "Ada"}}

    @pytest.mark.asyncio
    async def test_deleting_entry(self, store, author):
        await self.People.write(store, author, "/people", {
            "ada": {"name": "Ada"},
            "bob": {"name": "Bob"},
        })

        await self.People.write(store, author, "/people", {"ada": None})

        assert await self.People.read(store, "/people") == {"bob": {"name": "Bob"}}


class TestFindByCollectionKey:
    """Tests for inverse relationship lookup."""

    @pytest_asyncio.fixture
    async def posts(self, store, author):
        await Post.write(store, author, "/posts/1", {"title": "First"})
        await Post.write(store, author, "/posts/2", {"related": {"/posts/1": True}})
        await Post.write(store, author, "/posts/3", {"related": {"/posts/1": True, "/posts/2": True}})
        await set_type.write(store, author, "/drafts/9/related", {"/posts/1": True})
        return store

    @pytest.mark.asyncio
    async def test_finds_owning_objects(self, posts):
        found = await find_by_collection_key(
            "/posts/1",
            posts,
            collection_path_suffix="/related",
            filter=QueryFilter(path_starts_with="/posts/"),
        )

        assert found == ["/posts/2", "/posts/3"]

    @pytest.mark.asyncio
    async def test_without_suffix_returns_collections(self, posts):
        found = await find_by_collection_key("/posts/2", posts)

        assert found == ["/posts/3/related"]

    @pytest.mark.asyncio
    async def test_suffix_without_leading_slash(self, posts):
        found = await find_by_collection_key("/posts/1", posts, collection_path_suffix="related")

        assert found == ["/drafts/9", "/posts/2", "/posts/3"]

    @pytest.mark.asyncio
    async def test_removed_relation_not_found(self, posts, author):
        await Post.write(posts, author, "/posts/2", {"related": {"/posts/1": False}})

        found = await find_by_collection_key(
            "/posts/1", posts, collection_path_suffix="/related"
        )

        assert found == ["/drafts/9", "/posts/3"]

    @pytest.mark.asyncio
    async def test_rejects_path_ends_with(self, store):
        with pytest.raises(InvalidSchemaUsage):
            await find_by_collection_key("k", store, filter=QueryFilter(path_ends_with="/x"))
