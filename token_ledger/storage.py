"""
Storage Backend Module

Provides abstract storage interface and implementations for in-memory
(testing, single-process) and SQLite (persistence). Token amounts are
stored as decimal strings since uint256 values overflow SQLite integers.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Set, Tuple, Union
from datetime import datetime
import sqlite3
import json
import threading
from dataclasses import dataclass, asdict
from pathlib import Path
from contextlib import contextmanager


class DuplicateRecordError(Exception):
    """Raised by insert() when the record id is already taken"""
    pass


@dataclass
class StorageRecord:
    """Base class for stored records with timestamps"""
    id: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        result = asdict(self)
        result['created_at'] = self.created_at.isoformat()
        result['updated_at'] = self.updated_at.isoformat()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StorageRecord':
        """Create instance from dictionary"""
        if 'created_at' in data and isinstance(data['created_at'], str):
            data['created_at'] = datetime.fromisoformat(data['created_at'])
        if 'updated_at' in data and isinstance(data['updated_at'], str):
            data['updated_at'] = datetime.fromisoformat(data['updated_at'])

        return cls(**data)


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to storage"""
        pass

    @abstractmethod
    def insert(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Add a new record, raising DuplicateRecordError if the id exists"""
        pass

    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        pass

    @abstractmethod
    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from storage"""
        pass

    @abstractmethod
    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        pass

    @abstractmethod
    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Count records in table"""
        pass

    @abstractmethod
    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close storage connection"""
        pass

    def begin_transaction(self) -> None:
        """Start a transaction (default no-op)"""
        pass

    def commit(self) -> None:
        """Commit current transaction (default no-op)"""
        pass

    def rollback(self) -> None:
        """Rollback current transaction (default no-op)"""
        pass

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations"""
        self.begin_transaction()
        try:
            yield
            self.commit()
        except Exception:
            self.rollback()
            raise


def _matches(record: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    for key, value in filters.items():
        if key not in record or record[key] != value:
            return False
    return True


class InMemoryStorage(StorageInterface):
    """
    In-memory storage implementation

    Transactions keep an undo log of the records they overwrite, so a
    rollback restores exactly the touched records.
    """

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self._depth = 0
        self._undo: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []

    def _ensure_table(self, table: str) -> None:
        if table not in self._data:
            self._data[table] = {}

    def _remember(self, table: str, record_id: str) -> None:
        """Record the pre-image of a record about to change"""
        if self._depth:
            self._undo.append((table, record_id, self._data[table].get(record_id)))

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to memory"""
        with self._lock:
            self._ensure_table(table)
            self._remember(table, record_id)
            # Deep copy to prevent external mutation
            self._data[table][record_id] = json.loads(json.dumps(data, default=str))

    def insert(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Add a new record to memory"""
        with self._lock:
            self._ensure_table(table)
            if record_id in self._data[table]:
                raise DuplicateRecordError(f"{table}/{record_id} already exists")
            self._remember(table, record_id)
            self._data[table][record_id] = json.loads(json.dumps(data, default=str))

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from memory"""
        with self._lock:
            self._ensure_table(table)
            record = self._data[table].get(record_id)
            if record is not None:
                return json.loads(json.dumps(record))
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            self._ensure_table(table)
            return [json.loads(json.dumps(record)) for record in self._data[table].values()]

    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from memory"""
        with self._lock:
            self._ensure_table(table)
            if record_id in self._data[table]:
                self._remember(table, record_id)
                del self._data[table][record_id]
                return True
            return False

    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        with self._lock:
            self._ensure_table(table)
            return record_id in self._data[table]

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        with self._lock:
            self._ensure_table(table)
            return [
                json.loads(json.dumps(record))
                for record in self._data[table].values()
                if _matches(record, filters)
            ]

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            return len(self._data[table])

    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._lock:
            self._ensure_table(table)
            for record_id in list(self._data[table]):
                self._remember(table, record_id)
            self._data[table] = {}

    def close(self) -> None:
        """Close storage (no-op for in-memory)"""
        pass

    def begin_transaction(self) -> None:
        """Start a transaction; nested calls join the outer one"""
        self._lock.acquire()
        self._depth += 1

    def commit(self) -> None:
        """Commit current transaction"""
        try:
            self._depth -= 1
            if self._depth == 0:
                self._undo = []
        finally:
            self._lock.release()

    def rollback(self) -> None:
        """Undo every write made since the outermost begin_transaction"""
        try:
            self._depth -= 1
            if self._depth == 0:
                for table, record_id, previous in reversed(self._undo):
                    if previous is None:
                        self._data[table].pop(record_id, None)
                    else:
                        self._data[table][record_id] = previous
                self._undo = []
        finally:
            self._lock.release()


class SQLiteStorage(StorageInterface):
    """SQLite storage implementation for persistence"""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level='DEFERRED')
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._depth = 0
        self._tables: Set[str] = set()

        # WAL mode for better concurrent readers
        if self.db_path != ":memory:":
            with self._lock:
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
                self._connection.commit()

    @property
    def _in_transaction(self) -> bool:
        return self._depth > 0

    def _ensure_table(self, table: str) -> None:
        """Ensure table exists with proper schema"""
        if table in self._tables:
            return
        self._connection.execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                data TEXT NOT NULL
            )
        """)
        if not self._in_transaction:
            self._connection.commit()
        self._tables.add(table)

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to SQLite, keeping its original insertion position"""
        with self._lock:
            self._ensure_table(table)
            data_json = json.dumps(data, default=str)
            self._connection.execute(f"""
                INSERT INTO {table} (id, data) VALUES (?, ?)
                ON CONFLICT(id) DO UPDATE SET data = excluded.data
            """, (record_id, data_json))

            if not self._in_transaction:
                self._connection.commit()

    def insert(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Add a new record to SQLite; an existing id is never overwritten"""
        with self._lock:
            self._ensure_table(table)
            data_json = json.dumps(data, default=str)
            try:
                self._connection.execute(f"""
                    INSERT INTO {table} (id, data) VALUES (?, ?)
                """, (record_id, data_json))
            except sqlite3.IntegrityError as e:
                if not self._in_transaction:
                    self._connection.rollback()
                raise DuplicateRecordError(f"{table}/{record_id} already exists") from e

            if not self._in_transaction:
                self._connection.commit()

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from SQLite"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT data FROM {table} WHERE id = ?
            """, (record_id,))
            row = cursor.fetchone()
            if row:
                return json.loads(row['data'])
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT data FROM {table} ORDER BY seq
            """)
            return [json.loads(row['data']) for row in cursor.fetchall()]

    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from SQLite"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                DELETE FROM {table} WHERE id = ?
            """, (record_id,))

            if not self._in_transaction:
                self._connection.commit()
            return cursor.rowcount > 0

    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT 1 FROM {table} WHERE id = ? LIMIT 1
            """, (record_id,))
            return cursor.fetchone() is not None

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters (simple JSON key matching)"""
        with self._lock:
            return [record for record in self.load_all(table) if _matches(record, filters)]

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT COUNT(*) as count FROM {table}
            """)
            return cursor.fetchone()['count']

    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._lock:
            self._ensure_table(table)
            self._connection.execute(f"DELETE FROM {table}")

            if not self._in_transaction:
                self._connection.commit()

    def begin_transaction(self) -> None:
        """
        Start a transaction; nested calls join the outer one

        The outermost call takes the database write lock up front, so
        reads made inside the transaction cannot go stale because of
        another connection to the same file.
        """
        self._lock.acquire()
        if self._depth == 0 and not self._connection.in_transaction:
            try:
                self._connection.execute("BEGIN IMMEDIATE")
            except Exception:
                self._lock.release()
                raise
        self._depth += 1

    def commit(self) -> None:
        """Commit current transaction"""
        try:
            self._depth -= 1
            if self._depth == 0:
                self._connection.commit()
        finally:
            self._lock.release()

    def rollback(self) -> None:
        """Rollback current transaction"""
        try:
            self._depth -= 1
            if self._depth == 0:
                self._connection.rollback()
                # Tables created inside the transaction are gone too
                self._tables.clear()
        finally:
            self._lock.release()

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None
