"""
Tests for storage backends and transaction support
"""

import pytest

from token_ledger.storage import (
    InMemoryStorage, SQLiteStorage, StorageInterface, DuplicateRecordError
)


test_data = {
    "id": "0x" + "aa" * 20,
    "address": "0x" + "aa" * 20,
    "balance": str(2 ** 200),
}


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path):
    """Run each test against both backends"""
    if request.param == "memory":
        backend = InMemoryStorage()
    else:
        backend = SQLiteStorage(tmp_path / "test.db")
    yield backend
    backend.close()


class TestStorageOperations:
    """Test basic CRUD behaviour shared by all backends"""

    def test_save_and_load(self, storage):
        storage.save("balances", "acc_1", test_data)
        assert storage.load("balances", "acc_1") == test_data
        assert storage.load("balances", "missing") is None

    def test_large_amount_strings_survive(self, storage):
        storage.save("balances", "acc_1", test_data)
        assert int(storage.load("balances", "acc_1")["balance"]) == 2 ** 200

    def test_overwrite_keeps_insertion_order(self, storage):
        storage.save("t", "a", {"id": "a", "v": 1})
        storage.save("t", "b", {"id": "b", "v": 2})
        storage.save("t", "a", {"id": "a", "v": 3})

        assert [r["id"] for r in storage.load_all("t")] == ["a", "b"]
        assert storage.load("t", "a")["v"] == 3
        assert storage.count("t") == 2

    def test_insert_never_overwrites(self, storage):
        storage.insert("t", "a", {"id": "a", "v": 1})

        with pytest.raises(DuplicateRecordError):
            storage.insert("t", "a", {"id": "a", "v": 2})

        assert storage.load("t", "a") == {"id": "a", "v": 1}
        storage.insert("t", "b", {"id": "b", "v": 3})
        assert storage.count("t") == 2

    def test_duplicate_insert_rolls_back_transaction(self, storage):
        storage.insert("t", "a", {"id": "a"})

        with pytest.raises(DuplicateRecordError):
            with storage.atomic():
                storage.save("t", "b", {"id": "b"})
                storage.insert("t", "a", {"id": "a", "v": 2})

        assert storage.load("t", "b") is None
        assert storage.load("t", "a") == {"id": "a"}

    def test_exists_find_delete(self, storage):
        storage.save("t", "a", {"id": "a", "owner": "x"})
        storage.save("t", "b", {"id": "b", "owner": "y"})

        assert storage.exists("t", "a")
        assert not storage.exists("t", "c")
        assert [r["id"] for r in storage.find("t", {"owner": "y"})] == ["b"]

        assert storage.delete("t", "a")
        assert not storage.delete("t", "a")
        assert storage.count("t") == 1

    def test_clear_table(self, storage):
        storage.save("t", "a", {"id": "a"})
        storage.clear_table("t")
        assert storage.count("t") == 0
        assert storage.load_all("t") == []

    def test_loaded_records_are_copies(self, storage):
        storage.save("t", "a", {"id": "a", "v": 1})
        record = storage.load("t", "a")
        record["v"] = 99
        assert storage.load("t", "a")["v"] == 1


class TestTransactions:
    """Test atomic() commit and rollback"""

    def test_commit(self, storage):
        with storage.atomic():
            storage.save("t", "a", {"id": "a", "v": 1})
            storage.save("t", "b", {"id": "b", "v": 2})

        assert storage.count("t") == 2

    def test_rollback_restores_previous_values(self, storage):
        storage.save("t", "a", {"id": "a", "v": 1})

        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("t", "a", {"id": "a", "v": 2})
                storage.save("t", "b", {"id": "b", "v": 3})
                raise RuntimeError("abort")

        assert storage.load("t", "a") == {"id": "a", "v": 1}
        assert storage.load("t", "b") is None
        assert storage.count("t") == 1

    def test_rollback_restores_deleted_record(self, storage):
        storage.save("t", "a", {"id": "a", "v": 1})

        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.delete("t", "a")
                raise RuntimeError("abort")

        assert storage.load("t", "a") == {"id": "a", "v": 1}

    def test_nested_atomic_joins_outer(self, storage):
        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("t", "a", {"id": "a"})
                with storage.atomic():
                    storage.save("t", "b", {"id": "b"})
                raise RuntimeError("abort")

        assert storage.count("t") == 0

    def test_storage_usable_after_rollback(self, storage):
        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("fresh", "a", {"id": "a"})
                raise RuntimeError("abort")

        storage.save("fresh", "b", {"id": "b"})
        assert [r["id"] for r in storage.load_all("fresh")] == ["b"]


class TestSQLitePersistence:
    """SQLite-specific behaviour"""

    def test_data_survives_reopen(self, tmp_path):
        db_path = tmp_path / "persist.db"
        storage = SQLiteStorage(db_path)
        storage.save("t", "a", test_data)
        storage.close()

        reopened = SQLiteStorage(db_path)
        assert reopened.load("t", "a") == test_data
        reopened.close()

    def test_in_memory_database(self):
        storage = SQLiteStorage()
        storage.save("t", "a", {"id": "a"})
        assert storage.exists("t", "a")
        storage.close()

    def test_backends_implement_interface(self):
        assert issubclass(InMemoryStorage, StorageInterface)
        assert issubclass(SQLiteStorage, StorageInterface)

    def test_transaction_sees_other_connection_commits(self, tmp_path):
        db_path = tmp_path / "shared.db"
        first = SQLiteStorage(db_path)
        second = SQLiteStorage(db_path)
        first.save("t", "counter", {"id": "counter", "v": 1})

        with second.atomic():
            record = second.load("t", "counter")
            second.save("t", "counter", {"id": "counter", "v": record["v"] + 1})

        with first.atomic():
            record = first.load("t", "counter")
            first.save("t", "counter", {"id": "counter", "v": record["v"] + 1})

        assert second.load("t", "counter")["v"] == 3
        first.close()
        second.close()
