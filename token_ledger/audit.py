"""
Audit Trail Module

Hash-chained immutable audit log with SHA-256 for tamper detection.
Every committed ledger state change is recorded here.
"""

import hashlib
import json
import threading
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
from enum import Enum
import uuid

from .storage import StorageInterface, StorageRecord


HEAD_RECORD = "head"


class AuditEventType(Enum):
    """Types of audit events"""
    LEDGER_INITIALIZED = "ledger_initialized"
    TOKENS_TRANSFERRED = "tokens_transferred"
    ALLOWANCE_APPROVED = "allowance_approved"
    DELEGATED_TRANSFER = "delegated_transfer"


@dataclass
class AuditEvent(StorageRecord):
    """
    Immutable audit event with hash chaining for tamper detection
    """
    event_type: AuditEventType
    entity_type: str  # account, allowance, ledger
    entity_id: str    # Address or owner:spender key
    previous_hash: str
    current_hash: str
    metadata: Dict[str, Any]
    user_id: Optional[str] = None  # Acting address

    def __post_init__(self):
        if self.metadata:
            self.metadata = {k: self._convert(v) for k, v in self.metadata.items()}

    @classmethod
    def _convert(cls, value):
        # Amounts exceed JSON-safe integers, store them as strings
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, dict):
            return {k: cls._convert(v) for k, v in value.items()}
        if isinstance(value, list):
            return [cls._convert(v) for v in value]
        return value

    def calculate_hash(self) -> str:
        """
        Calculate SHA-256 hash of this event
        Hash includes all fields except current_hash to prevent circular reference
        """
        hash_data = {
            'id': self.id,
            'created_at': self.created_at.isoformat(),
            'event_type': self.event_type.value,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'previous_hash': self.previous_hash,
            'user_id': self.user_id,
            'metadata': self.metadata
        }

        json_data = json.dumps(hash_data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()

    def verify_hash(self) -> bool:
        """Verify that the current hash is correct"""
        return self.current_hash == self.calculate_hash()

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['event_type'] = self.event_type.value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditEvent':
        data = dict(data)
        if isinstance(data['event_type'], str):
            data['event_type'] = AuditEventType(data['event_type'])
        return super().from_dict(data)


class AuditTrail:
    """
    Hash-chained audit trail for tamper detection

    The chain head is stored beside the events and read inside each
    write transaction, so handles sharing a store extend one chain.
    """

    def __init__(self, storage: StorageInterface, table_name: str = "audit_events"):
        self.storage = storage
        self.table_name = table_name
        self.head_table = f"{table_name}_head"
        self._lock = threading.Lock()

    def _chain_head(self) -> Optional[str]:
        head = self.storage.load(self.head_table, HEAD_RECORD)
        return head['hash'] if head else None

    def log_event(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None
    ) -> AuditEvent:
        """
        Log an audit event with hash chaining

        Args:
            event_type: Type of audit event
            entity_type: Type of entity being audited
            entity_id: ID of the entity
            metadata: Additional event-specific data
            user_id: Address that initiated the action

        Returns:
            Created AuditEvent
        """
        # Storage lock first, matching the ledger's lock order
        with self.storage.atomic(), self._lock:
            now = datetime.now(timezone.utc)

            event = AuditEvent(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                previous_hash=self._chain_head() or "",
                current_hash="",
                user_id=user_id,
                metadata=metadata or {}
            )
            event.current_hash = event.calculate_hash()

            self.storage.insert(self.table_name, event.id, event.to_dict())
            self.storage.save(self.head_table, HEAD_RECORD, {
                'id': HEAD_RECORD, 'hash': event.current_hash
            })

            return event

    def get_events_for_entity(self, entity_type: str, entity_id: str) -> List[AuditEvent]:
        """Get all audit events for a specific entity in chain order"""
        filters = {'entity_type': entity_type, 'entity_id': entity_id}
        return [AuditEvent.from_dict(data) for data in self.storage.find(self.table_name, filters)]

    def get_all_events(self, limit: Optional[int] = None) -> List[AuditEvent]:
        """Get all audit events in chain order"""
        events = [AuditEvent.from_dict(data) for data in self.storage.load_all(self.table_name)]
        if limit:
            events = events[-limit:]
        return events

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the entire audit chain

        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_events': 0,
            'hash_errors': [],
            'chain_breaks': []
        }

        events = self.get_all_events()
        result['total_events'] = len(events)

        previous_hash = ""
        for i, event in enumerate(events):
            if not event.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_hash': event.calculate_hash(),
                    'actual_hash': event.current_hash
                })
            if event.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': event.previous_hash
                })
            previous_hash = event.current_hash

        return result

    def count_events(self) -> int:
        """Get total number of audit events"""
        return self.storage.count(self.table_name)

    def get_latest_hash(self) -> Optional[str]:
        """Get the hash of the most recent audit event"""
        return self._chain_head()
