"""
Tests for the SQL-backed record store and typed repositories.
"""

import asyncio
import pytest

from app.repositories import record_store
from app.repositories.record_store import ConditionFailedError, RecordNotFoundError
from app.services.container import ServiceContainer
from app.utils.exceptions import ValidationError
from app.utils.pagination import decode_cursor, encode_cursor

TABLE = "test-records"


class TestRecordStore:
    """Test get/put/update/delete/scan semantics."""

    @pytest.mark.asyncio
    async def test_put_and_get(self, container: ServiceContainer):
        """Test storing and reading a document."""
        store = container.record_store
        await store.put(TABLE, {"id": "a", "name": "first", "nested": {"x": 1}})

        item = await store.get(TABLE, "a")

        assert item == {"id": "a", "name": "first", "nested": {"x": 1}}
        assert await store.get(TABLE, "missing") is None

    @pytest.mark.asyncio
    async def test_put_requires_id(self, container: ServiceContainer):
        """Test put rejects documents without an id."""
        with pytest.raises(ValueError):
            await container.record_store.put(TABLE, {"name": "no id"})

    @pytest.mark.asyncio
    async def test_tables_are_isolated(self, container: ServiceContainer):
        """Test keys are scoped to their table."""
        store = container.record_store
        await store.put(TABLE, {"id": "a"})

        assert await store.get("other-table", "a") is None

    @pytest.mark.asyncio
    async def test_update_merges_and_removes_none(self, container: ServiceContainer):
        """Test update merges fields and drops None values."""
        store = container.record_store
        await store.put(TABLE, {"id": "a", "status": "pending", "reviewedBy": "x"})

        updated = await store.update(TABLE, "a", {"status": "approved", "reviewedBy": None, "notes": "ok"})

        assert updated == {"id": "a", "status": "approved", "notes": "ok"}
        assert await store.get(TABLE, "a") == updated

    @pytest.mark.asyncio
    async def test_update_missing_key(self, container: ServiceContainer):
        """Test updating a missing key."""
        with pytest.raises(RecordNotFoundError):
            await container.record_store.update(TABLE, "missing", {"status": "paid"})

    @pytest.mark.asyncio
    async def test_conditional_update(self, container: ServiceContainer):
        """Test update only applies while the condition holds."""
        store = container.record_store
        await store.put(TABLE, {"id": "a", "status": "pending"})

        await store.update(TABLE, "a", {"status": "paid"}, condition={"status": "pending"})

        with pytest.raises(ConditionFailedError) as exc_info:
            await store.update(TABLE, "a", {"status": "cancelled"}, condition={"status": "pending"})
        assert exc_info.value.actual == "paid"
        assert (await store.get(TABLE, "a"))["status"] == "paid"

    @pytest.mark.asyncio
    async def test_concurrent_conditional_updates(self, container: ServiceContainer):
        """Test only one of two racing conditional updates is written."""
        store = container.record_store
        await store.put(TABLE, {"id": "a", "status": "pending"})

        results = await asyncio.gather(
            store.update(TABLE, "a", {"status": "approved"}, condition={"status": "pending"}),
            store.update(TABLE, "a", {"status": "rejected"}, condition={"status": "pending"}),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, ConditionFailedError)]
        written = [r for r in results if isinstance(r, dict)]
        assert len(failures) == 1
        assert len(written) == 1
        assert (await store.get(TABLE, "a"))["status"] == written[0]["status"]

    @pytest.mark.asyncio
    async def test_condition_checked_by_write_statement(self, container: ServiceContainer, monkeypatch):
        """Test a stale read cannot overwrite a record whose condition no longer holds."""
        store = container.record_store
        await store.put(TABLE, {"id": "a", "status": "paid"})

        # Simulate a read taken before another writer changed the status
        checks = []

        def stale_check(table, key, item, condition):
            checks.append(item.get("status"))

        monkeypatch.setattr(record_store, "_check_condition", stale_check)

        with pytest.raises(ConditionFailedError) as exc_info:
            await store.update(TABLE, "a", {"status": "cancelled"}, condition={"status": "pending"})

        assert exc_info.value.actual == "paid"
        assert checks == ["paid", "paid"]
        assert (await store.get(TABLE, "a"))["status"] == "paid"

    @pytest.mark.asyncio
    async def test_delete(self, container: ServiceContainer):
        """Test deleting a document."""
        store = container.record_store
        await store.put(TABLE, {"id": "a"})

        assert await store.delete(TABLE, "a") is True
        assert await store.delete(TABLE, "a") is False
        assert await store.get(TABLE, "a") is None

    @pytest.mark.asyncio
    async def test_scan_filters_in_insertion_order(self, container: ServiceContainer):
        """Test scan filters and ordering."""
        store = container.record_store
        for i, owner in enumerate(["u1", "u2", "u1", "u1"]):
            await store.put(TABLE, {"id": f"r{i}", "ownerId": owner, "rank": i, "active": i != 2})

        result = await store.scan(TABLE, filters={"ownerId": "u1"})
        assert [item["id"] for item in result.items] == ["r0", "r2", "r3"]
        assert result.count == 3
        assert result.next_cursor is None

        # Non-string filters and predicates are applied after loading
        result = await store.scan(TABLE, filters={"ownerId": "u1", "active": True})
        assert [item["id"] for item in result.items] == ["r0", "r3"]

        result = await store.scan(TABLE, predicate=lambda item: item["rank"] >= 2)
        assert [item["id"] for item in result.items] == ["r2", "r3"]

    @pytest.mark.asyncio
    async def test_scan_pagination_covers_every_match_once(self, container: ServiceContainer):
        """Test cursor pages return every match exactly once."""
        store = container.record_store
        for i in range(5):
            await store.put(TABLE, {"id": f"r{i}", "kind": "x"})

        seen = []
        cursor = None
        while True:
            result = await store.scan(TABLE, filters={"kind": "x"}, limit=2, cursor=cursor)
            assert result.count == 5
            seen.extend(item["id"] for item in result.items)
            cursor = result.next_cursor
            if cursor is None:
                break

        assert seen == ["r0", "r1", "r2", "r3", "r4"]

    @pytest.mark.asyncio
    async def test_scan_rejects_foreign_cursor(self, container: ServiceContainer):
        """Test scan rejects a malformed cursor."""
        with pytest.raises(ValidationError):
            await container.record_store.scan(TABLE, cursor="not-a-cursor")


class TestCursor:

    def test_cursor_round_trip(self):
        """Test cursor encoding."""
        assert decode_cursor(encode_cursor(42)) == 42
        assert decode_cursor(None) is None

    def test_cursor_is_opaque(self):
        """Test cursors do not expose the position."""
        assert "42" not in encode_cursor(42)


class TestRepositories:

    @pytest.mark.asyncio
    async def test_update_refreshes_updated_at(self, container: ServiceContainer, available_property):
        """Test repository updates refresh updatedAt."""
        before = available_property.updated_at

        updated = await container.properties.update(available_property.id, {"title": "Renamed"})

        assert updated.title == "Renamed"
        assert updated.updated_at >= before

    @pytest.mark.asyncio
    async def test_exists(self, container: ServiceContainer, available_property, landlord):
        """Test repository existence checks."""
        assert await container.properties.exists(landlordId=landlord.id) is True
        assert await container.properties.exists(landlordId="someone-else") is False
