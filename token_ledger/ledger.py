"""
Token Ledger Engine

Core bookkeeping for a fixed-supply fungible token: account balances,
(owner, spender) allowances, and the transfer / approve / transfer_from
state transitions.

Every operation is serialized by a single ledger lock and validates all
of its preconditions before writing anything. The reads behind those
checks, the writes, the event log append and the audit record share one
storage transaction, so a call either applies completely or leaves the
ledger exactly as it was, even with several handles open on one store.
Subscribers are notified only after the transaction commits.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
import threading

from .amounts import ZERO_ADDRESS, normalize_address, is_zero_address, validate_amount
from .audit import AuditTrail, AuditEventType
from .errors import (
    LedgerError, InvalidSender, InvalidRecipient, InvalidSpender,
    InsufficientBalance, InsufficientAllowance, Unauthorized, LedgerNotInitialized
)
from .events import (
    EventDispatcher, EventLog, LedgerEvent, LedgerEventType,
    transfer_event, approval_event
)
from .logging_config import get_logger, log_action
from .storage import StorageInterface


BALANCES_TABLE = "token_balances"
ALLOWANCES_TABLE = "token_allowances"
STATE_TABLE = "token_state"
SUPPLY_RECORD = "supply"


def _allowance_key(owner: str, spender: str) -> str:
    return f"{owner}:{spender}"


class TokenLedger:
    """
    Balance and allowance book for one token

    Use TokenLedger.initialize() to create a ledger in a fresh store and
    TokenLedger(storage) to open one that already exists.
    """

    def __init__(
        self,
        storage: StorageInterface,
        audit_trail: Optional[AuditTrail] = None,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        state = storage.load(STATE_TABLE, SUPPLY_RECORD)
        if not state:
            raise LedgerNotInitialized()

        self.storage = storage
        self.audit_trail = audit_trail
        self.event_dispatcher = event_dispatcher
        self.event_log = EventLog(storage)
        self.logger = get_logger("token_ledger.ledger")
        self._lock = threading.RLock()

        self._total_supply = int(state['total_supply'])
        self.initial_holder: str = state['initial_holder']
        self.initialized_at = datetime.fromisoformat(state['initialized_at'])

    @classmethod
    def initialize(
        cls,
        storage: StorageInterface,
        total_supply: int,
        initial_holder: str,
        audit_trail: Optional[AuditTrail] = None,
        event_dispatcher: Optional[EventDispatcher] = None
    ) -> 'TokenLedger':
        """
        Create the ledger, crediting the whole supply to one holder

        This is the only path that creates supply and it runs once per
        store. The mint is recorded as Transfer(ZERO_ADDRESS, holder, supply).

        Args:
            storage: Store that does not yet hold a ledger
            total_supply: Fixed supply in base units
            initial_holder: Address receiving the supply
            audit_trail: Optional audit trail for state changes
            event_dispatcher: Optional dispatcher for subscribers

        Returns:
            The new TokenLedger

        Raises:
            Unauthorized: If the store already holds a ledger
            InvalidRecipient: If initial_holder is the zero address
        """
        supply = validate_amount(total_supply)
        holder = normalize_address(initial_holder)
        if is_zero_address(holder):
            raise InvalidRecipient("Initial holder cannot be the zero address")

        now = datetime.now(timezone.utc)
        event = transfer_event(ZERO_ADDRESS, holder, supply)

        with storage.atomic():
            if storage.exists(STATE_TABLE, SUPPLY_RECORD):
                raise Unauthorized("Ledger is already initialized")

            storage.save(STATE_TABLE, SUPPLY_RECORD, {
                'id': SUPPLY_RECORD,
                'total_supply': str(supply),
                'initial_holder': holder,
                'initialized_at': now.isoformat()
            })
            storage.save(BALANCES_TABLE, holder, {
                'id': holder, 'address': holder, 'balance': str(supply)
            })
            EventLog(storage).append(event)

            if audit_trail:
                audit_trail.log_event(
                    event_type=AuditEventType.LEDGER_INITIALIZED,
                    entity_type="ledger",
                    entity_id=SUPPLY_RECORD,
                    metadata={"total_supply": supply, "initial_holder": holder}
                )

        ledger = cls(storage, audit_trail, event_dispatcher)
        log_action(
            ledger.logger, "info", "Ledger initialized",
            user_id=holder, action="initialize", resource="ledger",
            extra={"total_supply": str(supply), "initial_holder": holder}
        )
        ledger._publish(event)
        return ledger

    # Queries

    def total_supply(self) -> int:
        """Fixed supply set at initialization"""
        return self._total_supply

    def balance_of(self, account: str) -> int:
        """Balance of an account, 0 if it never held tokens"""
        account = normalize_address(account)
        with self._lock:
            return self._get_balance(account)

    def allowance(self, owner: str, spender: str) -> int:
        """Amount spender may still move out of owner's balance, 0 if unset"""
        owner = normalize_address(owner)
        spender = normalize_address(spender)
        with self._lock:
            return self._get_allowance(owner, spender)

    def holders(self) -> Dict[str, int]:
        """Snapshot of every non-zero balance"""
        with self._lock:
            balances = {}
            for record in self.storage.load_all(BALANCES_TABLE):
                balance = int(record['balance'])
                if balance:
                    balances[record['address']] = balance
            return balances

    def verify_supply_invariant(self) -> bool:
        """Check that all balances add up to the total supply"""
        return sum(self.holders().values()) == self._total_supply

    def events(
        self,
        event_type: Optional[LedgerEventType] = None,
        account: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[LedgerEvent]:
        """Emitted events in order, optionally filtered by type or address"""
        if account is not None:
            account = normalize_address(account)
        with self._lock:
            return self.event_log.get_events(event_type=event_type, account=account, limit=limit)

    # Mutations

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """
        Move amount from sender to to

        Raises:
            InvalidSender: If sender is the zero address
            InvalidRecipient: If to is the zero address
            InsufficientBalance: If sender holds less than amount
        """
        sender = normalize_address(sender)
        to = normalize_address(to)
        amount = validate_amount(amount)

        with self._lock:
            if is_zero_address(sender):
                raise self._rejected("transfer", sender, InvalidSender())
            if is_zero_address(to):
                raise self._rejected("transfer", sender, InvalidRecipient())

            event = transfer_event(sender, to, amount)
            with self.storage.atomic():
                balance = self._get_balance(sender)
                if balance < amount:
                    raise self._rejected("transfer", sender, InsufficientBalance(sender, balance, amount))

                self._set_balance(sender, balance - amount)
                self._set_balance(to, self._get_balance(to) + amount)
                self.event_log.append(event)
                self._audit(
                    AuditEventType.TOKENS_TRANSFERRED, "account", sender, sender,
                    {"from": sender, "to": to, "amount": amount}
                )

            log_action(
                self.logger, "info", "Transfer completed",
                user_id=sender, action="transfer", resource=f"account:{to}",
                extra={"from": sender, "to": to, "amount": str(amount), "sequence": event.sequence}
            )
            self._publish(event)
            return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """
        Set spender's allowance on owner's balance to amount

        The new value replaces any previous allowance. The owner's balance
        is not checked; an allowance may exceed it.

        Raises:
            InvalidSender: If owner is the zero address
            InvalidSpender: If spender is the zero address
        """
        owner = normalize_address(owner)
        spender = normalize_address(spender)
        amount = validate_amount(amount)

        with self._lock:
            if is_zero_address(owner):
                raise self._rejected("approve", owner, InvalidSender("Owner cannot be the zero address"))
            if is_zero_address(spender):
                raise self._rejected("approve", owner, InvalidSpender())

            event = approval_event(owner, spender, amount)
            with self.storage.atomic():
                self._set_allowance(owner, spender, amount)
                self.event_log.append(event)
                self._audit(
                    AuditEventType.ALLOWANCE_APPROVED, "allowance",
                    _allowance_key(owner, spender), owner,
                    {"owner": owner, "spender": spender, "amount": amount}
                )

            log_action(
                self.logger, "info", "Allowance approved",
                user_id=owner, action="approve", resource=f"allowance:{spender}",
                extra={"owner": owner, "spender": spender, "amount": str(amount), "sequence": event.sequence}
            )
            self._publish(event)
            return True

    def transfer_from(self, spender: str, from_account: str, to: str, amount: int) -> bool:
        """
        Move amount from from_account to to using spender's allowance

        Only the spent part of the allowance is consumed; the remainder
        stays available. Emits the same Transfer event as transfer().

        Raises:
            InvalidSender: If spender or from_account is the zero address
            InsufficientAllowance: If spender's allowance is below amount
            InsufficientBalance: If from_account holds less than amount
            InvalidRecipient: If to is the zero address
        """
        spender = normalize_address(spender)
        from_account = normalize_address(from_account)
        to = normalize_address(to)
        amount = validate_amount(amount)

        with self._lock:
            if is_zero_address(spender):
                raise self._rejected("transfer_from", spender, InvalidSender("Spender cannot be the zero address"))
            if is_zero_address(from_account):
                raise self._rejected("transfer_from", spender, InvalidSender())

            event = transfer_event(from_account, to, amount)
            with self.storage.atomic():
                allowance = self._get_allowance(from_account, spender)
                if allowance < amount:
                    raise self._rejected(
                        "transfer_from", spender,
                        InsufficientAllowance(from_account, spender, allowance, amount)
                    )

                balance = self._get_balance(from_account)
                if balance < amount:
                    raise self._rejected(
                        "transfer_from", spender, InsufficientBalance(from_account, balance, amount)
                    )

                if is_zero_address(to):
                    raise self._rejected("transfer_from", spender, InvalidRecipient())

                self._set_allowance(from_account, spender, allowance - amount)
                self._set_balance(from_account, balance - amount)
                self._set_balance(to, self._get_balance(to) + amount)
                self.event_log.append(event)
                self._audit(
                    AuditEventType.DELEGATED_TRANSFER, "account", from_account, spender,
                    {"from": from_account, "to": to, "spender": spender, "amount": amount}
                )

            log_action(
                self.logger, "info", "Delegated transfer completed",
                user_id=spender, action="transfer_from", resource=f"account:{from_account}",
                extra={
                    "from": from_account, "to": to, "spender": spender,
                    "amount": str(amount), "sequence": event.sequence
                }
            )
            self._publish(event)
            return True

    def mint(self, caller: str, to: str, amount: int) -> bool:
        """
        Supply is fixed after initialization; every mint request is rejected

        Raises:
            Unauthorized: Always
        """
        caller = normalize_address(caller)
        raise self._rejected("mint", caller, Unauthorized())

    # Internals

    def _get_balance(self, account: str) -> int:
        record = self.storage.load(BALANCES_TABLE, account)
        return int(record['balance']) if record else 0

    def _set_balance(self, account: str, balance: int) -> None:
        self.storage.save(BALANCES_TABLE, account, {
            'id': account, 'address': account, 'balance': str(balance)
        })

    def _get_allowance(self, owner: str, spender: str) -> int:
        record = self.storage.load(ALLOWANCES_TABLE, _allowance_key(owner, spender))
        return int(record['amount']) if record else 0

    def _set_allowance(self, owner: str, spender: str, amount: int) -> None:
        key = _allowance_key(owner, spender)
        self.storage.save(ALLOWANCES_TABLE, key, {
            'id': key, 'owner': owner, 'spender': spender, 'amount': str(amount)
        })

    def _audit(self, event_type: AuditEventType, entity_type: str, entity_id: str,
               user_id: str, metadata: Dict) -> None:
        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=user_id,
                metadata=metadata
            )

    def _publish(self, event: LedgerEvent) -> None:
        if self.event_dispatcher:
            self.event_dispatcher.publish(event)

    def _rejected(self, action: str, caller: str, error: LedgerError) -> LedgerError:
        """Log a rejected request and hand back the error to raise"""
        log_action(
            self.logger, "warning", f"Rejected {action}: {error.message}",
            user_id=caller, action=action, extra={"error": error.code}
        )
        return error
