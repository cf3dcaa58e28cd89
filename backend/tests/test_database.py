"""
API Faker — Database Unit Tests
=================================

What:  Tests for the JSON document store behind the router.
How:   In-memory stores for the primitives; pytest's tmp_path for the file
       lifecycle and persistence.

What we test:
    ✅ init(): creates, loads, rejects non-object and invalid JSON files
    ✅ Every write lands on disk and survives a reload
    ✅ Id generation (integers, UUIDs, collisions, strict mode, bad types)
    ✅ update/patch keep identifier and position
    ✅ A failed write leaves the in-memory document untouched and no temp file
    ✅ Reads hand out copies
"""

import asyncio
import json

import pytest

from apifaker.database import Database, id_to_str
from apifaker.exceptions import (
    ConflictError,
    InvalidDataError,
    PersistenceError,
    StorageNotFoundError,
)


class TestIdToStr:

    def test_integers_and_strings_share_a_form(self):
        assert id_to_str(7) == id_to_str("7") == "7"

    def test_integral_float_matches_integer(self):
        assert id_to_str(7.0) == "7"

    def test_fractional_float_kept(self):
        assert id_to_str(1.5) == "1.5"


class TestDatabaseFile:
    """init() and persistence against a real file."""

    @pytest.mark.asyncio
    async def test_init_creates_missing_file(self, tmp_path):
        path = tmp_path / "nested" / "db.json"
        db = Database(path=path)
        await db.init()

        assert json.loads(path.read_text(encoding="utf-8")) == {}
        assert db.get_data() == {}

    @pytest.mark.asyncio
    async def test_init_loads_existing_document(self, tmp_path, seed_data):
        path = tmp_path / "db.json"
        path.write_text(json.dumps(seed_data), encoding="utf-8")

        db = Database(path=path)
        await db.init()

        assert db.get_data() == seed_data

    @pytest.mark.asyncio
    async def test_init_treats_blank_file_as_empty(self, tmp_path):
        path = tmp_path / "db.json"
        path.write_text("   \n", encoding="utf-8")

        db = Database(path=path)
        await db.init()

        assert db.get_data() == {}

    @pytest.mark.asyncio
    async def test_init_rejects_top_level_array(self, tmp_path):
        path = tmp_path / "db.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        with pytest.raises(InvalidDataError, match="must contain a JSON object"):
            await Database(path=path).init()

    @pytest.mark.asyncio
    async def test_init_rejects_invalid_json(self, tmp_path):
        path = tmp_path / "db.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(InvalidDataError, match="not valid JSON"):
            await Database(path=path).init()

    @pytest.mark.asyncio
    async def test_writes_survive_reload(self, tmp_path, seed_data):
        path = tmp_path / "db.json"
        path.write_text(json.dumps(seed_data), encoding="utf-8")
        db = Database(path=path)
        await db.init()

        created = await db.create("posts", {"title": "persisted"})
        await db.update_singular("settings", {"theme": "dark"})
        await db.delete("comments", "c1")

        reloaded = Database(path=path)
        await reloaded.init()
        assert reloaded.get_by_id("posts", created["id"]) == created
        assert reloaded.get_collection("settings") == {"theme": "dark"}
        assert reloaded.get_collection("comments") == []
        assert not (tmp_path / "db.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_failed_write_leaves_store_unchanged(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        db = Database(path=blocker / "db.json", data={"posts": []})

        with pytest.raises(PersistenceError):
            await db.create("posts", {"title": "lost"})

        assert db.get_data() == {"posts": []}

    @pytest.mark.asyncio
    async def test_failed_replace_removes_temp_file(self, tmp_path):
        target = tmp_path / "db.json"
        target.mkdir()
        db = Database(path=target, data={"posts": []})

        with pytest.raises(PersistenceError):
            await db.create("posts", {"title": "lost"})

        assert not (tmp_path / "db.json.tmp").exists()
        assert db.get_data() == {"posts": []}


class TestDatabaseCreate:

    @pytest.mark.asyncio
    async def test_first_item_of_new_collection_gets_id_1(self):
        db = Database()
        created = await db.create("posts", {"title": "hi"})

        assert created == {"title": "hi", "id": 1}
        assert db.is_collection("posts")

    @pytest.mark.asyncio
    async def test_integer_ids_continue_from_max(self, seed_data):
        db = Database(data=seed_data)
        created = await db.create("posts", {"title": "third"})
        assert created["id"] == 3

    @pytest.mark.asyncio
    async def test_string_ids_get_uuid(self, seed_data):
        db = Database(data=seed_data)
        created = await db.create("comments", {"body": "another"})

        assert isinstance(created["id"], str)
        assert len(created["id"]) == 32

    @pytest.mark.asyncio
    async def test_explicit_unique_id_is_kept(self, seed_data):
        db = Database(data=seed_data)
        created = await db.create("posts", {"id": "custom", "title": "x"})
        assert created["id"] == "custom"

    @pytest.mark.asyncio
    async def test_null_id_is_generated(self, seed_data):
        db = Database(data=seed_data)
        created = await db.create("posts", {"id": None, "title": "x"})
        assert created["id"] == 3

    @pytest.mark.asyncio
    async def test_colliding_id_is_replaced(self, seed_data):
        db = Database(data=seed_data)
        created = await db.create("posts", {"id": "1", "title": "dup"})

        assert created["id"] == 3
        assert db.get_by_id("posts", 1)["title"] == "json-server"

    @pytest.mark.asyncio
    async def test_colliding_id_conflicts_in_strict_mode(self, seed_data):
        db = Database(data=seed_data, strict_ids=True)

        with pytest.raises(ConflictError, match="Item with id '1' already exists in 'posts'"):
            await db.create("posts", {"id": 1, "title": "dup"})
        assert len(db.get_collection("posts")) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", [True, {"a": 1}, [1]])
    async def test_non_scalar_id_rejected(self, seed_data, bad_id):
        db = Database(data=seed_data)
        with pytest.raises(InvalidDataError, match="must be a string or a number"):
            await db.create("posts", {"id": bad_id})

    @pytest.mark.asyncio
    async def test_create_on_singular_rejected(self, seed_data):
        db = Database(data=seed_data)
        with pytest.raises(InvalidDataError, match="not a collection"):
            await db.create("settings", {"x": 1})

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_ids(self):
        db = Database()
        results = await asyncio.gather(*(db.create("posts", {"n": n}) for n in range(5)))

        assert sorted(item["id"] for item in results) == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_custom_id_field(self):
        db = Database(id_field="_id")
        created = await db.create("users", {"name": "ann"})

        assert created["_id"] == 1
        assert db.get_by_id("users", "1") == created


class TestDatabaseUpdates:

    def setup_method(self):
        self.seed = {
            "posts": [
                {"id": 1, "title": "a", "author": "x"},
                {"id": 2, "title": "b", "author": "y"},
            ],
            "settings": {"theme": "light"},
        }
        self.db = Database(data=self.seed)

    @pytest.mark.asyncio
    async def test_update_replaces_fields_and_keeps_id(self):
        updated = await self.db.update("posts", "1", {"id": 99, "title": "new"})

        assert updated == {"id": 1, "title": "new"}
        assert self.db.get_collection("posts")[0] == updated

    @pytest.mark.asyncio
    async def test_update_unknown_id_returns_none(self):
        assert await self.db.update("posts", 42, {"title": "x"}) is None

    @pytest.mark.asyncio
    async def test_update_on_non_collection_raises(self):
        with pytest.raises(StorageNotFoundError):
            await self.db.update("settings", 1, {"title": "x"})

    @pytest.mark.asyncio
    async def test_patch_merges_and_keeps_id(self):
        patched = await self.db.patch("posts", 2, {"title": "bb", "id": 7})

        assert patched == {"id": 2, "title": "bb", "author": "y"}
        assert self.db.get_by_id("posts", 7) is None

    @pytest.mark.asyncio
    async def test_update_singular_replaces_value(self):
        stored = await self.db.update_singular("settings", {"lang": "fr"})
        assert stored == {"lang": "fr"}
        assert self.db.get_collection("settings") == {"lang": "fr"}

    @pytest.mark.asyncio
    async def test_update_singular_refuses_collection(self):
        with pytest.raises(InvalidDataError):
            await self.db.update_singular("posts", {"a": 1})

    @pytest.mark.asyncio
    async def test_delete_twice(self):
        assert await self.db.delete("posts", "1") is True
        assert await self.db.delete("posts", "1") is False
        assert [p["id"] for p in self.db.get_collection("posts")] == [2]

    @pytest.mark.asyncio
    async def test_delete_on_non_collection_is_false(self):
        assert await self.db.delete("settings", 1) is False

    def test_reads_return_copies(self):
        self.db.get_data()["posts"].clear()
        self.db.get_by_id("posts", 1)["title"] = "changed"

        assert self.db.get_by_id("posts", 1)["title"] == "a"
        assert len(self.db.get_collection("posts")) == 2

    def test_seed_document_is_copied(self):
        self.seed["posts"].clear()
        assert len(self.db.get_collection("posts")) == 2
