"""
Event System Module

Transfer and Approval notifications. Every successful ledger operation
appends exactly one event to the append-only EventLog and then hands it
to the EventDispatcher, which fans it out to subscribers
(publish/subscribe). Rejected operations emit nothing.
"""

from enum import Enum
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid
import logging
from threading import RLock

from .storage import StorageInterface


HEAD_RECORD = "head"


class LedgerEventType(Enum):
    """Notifications emitted by the ledger"""
    TRANSFER = "Transfer"
    APPROVAL = "Approval"


@dataclass
class LedgerEvent:
    """
    A single notification

    Transfer args: from, to, amount. Approval args: owner, spender, amount.
    Amounts are ints here and decimal strings once serialized.
    """
    event_type: LedgerEventType
    args: Dict[str, Any]
    sequence: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def amount(self) -> int:
        return self.args['amount']

    def accounts(self) -> List[str]:
        """Addresses named by this event"""
        return [value for key, value in self.args.items() if key != 'amount']

    def involves(self, account: str) -> bool:
        return account in self.accounts()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        args = dict(self.args)
        args['amount'] = str(self.amount)
        return {
            'event_type': self.event_type.value,
            'args': args,
            'sequence': self.sequence,
            'timestamp': self.timestamp.isoformat(),
            'event_id': self.event_id
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LedgerEvent':
        """Create from dictionary"""
        args = dict(data['args'])
        args['amount'] = int(args['amount'])
        return cls(
            event_type=LedgerEventType(data['event_type']),
            args=args,
            sequence=data['sequence'],
            timestamp=datetime.fromisoformat(data['timestamp']) if isinstance(data['timestamp'], str) else data['timestamp'],
            event_id=data['event_id']
        )


def transfer_event(from_account: str, to_account: str, amount: int) -> LedgerEvent:
    """Create a Transfer(from, to, amount) event"""
    return LedgerEvent(
        event_type=LedgerEventType.TRANSFER,
        args={'from': from_account, 'to': to_account, 'amount': amount}
    )


def approval_event(owner: str, spender: str, amount: int) -> LedgerEvent:
    """Create an Approval(owner, spender, amount) event"""
    return LedgerEvent(
        event_type=LedgerEventType.APPROVAL,
        args={'owner': owner, 'spender': spender, 'amount': amount}
    )


class EventLog:
    """
    Append-only, storage-backed event log

    Sequence numbers start at 1 and increase by one per appended event.
    The last assigned number lives in storage next to the events, so every
    handle on the same store continues the same sequence.
    """

    def __init__(self, storage: StorageInterface, table_name: str = "token_events"):
        self.storage = storage
        self.table_name = table_name
        self.head_table = f"{table_name}_head"

    @property
    def last_sequence(self) -> int:
        head = self.storage.load(self.head_table, HEAD_RECORD)
        return head['last_sequence'] if head else 0

    def append(self, event: LedgerEvent) -> LedgerEvent:
        """
        Assign the next sequence number and persist the event

        Raises:
            DuplicateRecordError: If the sequence number is already taken
        """
        with self.storage.atomic():
            event.sequence = self.last_sequence + 1
            self.storage.insert(self.table_name, f"{event.sequence:020d}", event.to_dict())
            self.storage.save(self.head_table, HEAD_RECORD, {
                'id': HEAD_RECORD, 'last_sequence': event.sequence
            })
        return event

    def get_events(
        self,
        event_type: Optional[LedgerEventType] = None,
        account: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[LedgerEvent]:
        """
        Get events in emission order

        Args:
            event_type: Only events of this type
            account: Only events naming this address
            limit: Return only the most recent N matching events
        """
        events = [LedgerEvent.from_dict(data) for data in self.storage.load_all(self.table_name)]
        events.sort(key=lambda e: e.sequence)

        if event_type:
            events = [e for e in events if e.event_type == event_type]
        if account:
            events = [e for e in events if e.involves(account)]
        if limit:
            events = events[-limit:]

        return events

    def __len__(self) -> int:
        return self.last_sequence


class EventDispatcher:
    """Central event dispatcher, publish/subscribe pattern"""

    def __init__(self):
        self._handlers: Dict[LedgerEventType, List[Callable]] = {}
        self._global_handlers: List[Callable] = []  # catch-all handlers
        self._lock = RLock()
        self.logger = logging.getLogger("token_ledger.events")

    @staticmethod
    def _name(handler: Callable) -> str:
        return getattr(handler, "__name__", repr(handler))

    def subscribe(self, event_type: LedgerEventType, handler: Callable) -> None:
        """Subscribe to a specific event type"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            self.logger.debug(f"Subscribed handler {self._name(handler)} to {event_type.value}")

    def subscribe_all(self, handler: Callable) -> None:
        """Subscribe to ALL events"""
        with self._lock:
            self._global_handlers.append(handler)
            self.logger.debug(f"Subscribed global handler {self._name(handler)}")

    def unsubscribe(self, event_type: LedgerEventType, handler: Callable) -> None:
        """Unsubscribe from a specific event type"""
        with self._lock:
            try:
                self._handlers.get(event_type, []).remove(handler)
                self.logger.debug(f"Unsubscribed handler {self._name(handler)} from {event_type.value}")
            except ValueError:
                self.logger.warning(f"Handler {self._name(handler)} was not subscribed to {event_type.value}")

    def unsubscribe_all(self, handler: Callable) -> None:
        """Unsubscribe a catch-all handler"""
        with self._lock:
            try:
                self._global_handlers.remove(handler)
                self.logger.debug(f"Unsubscribed global handler {self._name(handler)}")
            except ValueError:
                self.logger.warning(f"Global handler {self._name(handler)} was not subscribed")

    def publish(self, event: LedgerEvent) -> None:
        """Publish event to all subscribers"""
        with self._lock:
            handlers = list(self._handlers.get(event.event_type, [])) + list(self._global_handlers)

        self.logger.debug(f"Publishing {event.event_type.value} #{event.sequence}")
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # The ledger change is already committed; a subscriber cannot undo it
                self.logger.error(f"Error in event handler {self._name(handler)} for {event.event_type.value}: {e}")

    def clear(self) -> None:
        """Clear all handlers"""
        with self._lock:
            self._handlers.clear()
            self._global_handlers.clear()

    def get_handler_count(self, event_type: Optional[LedgerEventType] = None) -> int:
        """Get count of handlers for a specific event type or all"""
        with self._lock:
            if event_type:
                return len(self._handlers.get(event_type, []))
            total = sum(len(handlers) for handlers in self._handlers.values())
            return total + len(self._global_handlers)
