"""
Ledger Error Types

Every rejected ledger operation raises one of these. A rejection never
changes ledger state: the caller gets the error and decides whether to
resubmit.

Hierarchy
---------
LedgerError (ValueError)
 ├─ InvalidAddress        : malformed account identifier
 ├─ InvalidAmount         : amount outside the uint256 range
 ├─ InvalidSender         : acting or source identity is the zero address
 ├─ InvalidRecipient      : recipient is the zero address
 ├─ InvalidSpender        : spender is the zero address
 ├─ InsufficientBalance   : source account lacks funds
 ├─ InsufficientAllowance : spender lacks delegated allowance
 ├─ Unauthorized          : supply creation outside initialization
 └─ LedgerNotInitialized  : storage holds no ledger
"""

from typing import Any, Dict, Optional


class LedgerError(ValueError):
    """Base class for ledger rejections"""

    code: str = "LedgerError"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form used by the API and log records"""
        return {"error": self.code, "detail": self.message}


class InvalidAddress(LedgerError):
    code = "InvalidAddress"

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid account address: {value!r}")
        self.value = value


class InvalidAmount(LedgerError):
    code = "InvalidAmount"

    def __init__(self, value: Any) -> None:
        super().__init__(f"Amount must be an integer in the uint256 range, got {value!r}")
        self.value = value


class InvalidSender(LedgerError):
    code = "InvalidSender"

    def __init__(self, message: str = "Sender cannot be the zero address") -> None:
        super().__init__(message)


class InvalidRecipient(LedgerError):
    code = "InvalidRecipient"

    def __init__(self, message: str = "Recipient cannot be the zero address") -> None:
        super().__init__(message)


class InvalidSpender(LedgerError):
    code = "InvalidSpender"

    def __init__(self, message: str = "Spender cannot be the zero address") -> None:
        super().__init__(message)


class InsufficientBalance(LedgerError):
    """Source balance is lower than the requested amount"""

    code = "InsufficientBalance"

    def __init__(self, account: str, balance: int, needed: int) -> None:
        super().__init__(
            f"Insufficient balance in {account}: balance={balance}, needed={needed}"
        )
        self.account = account
        self.balance = balance
        self.needed = needed


class InsufficientAllowance(LedgerError):
    """Spender's remaining allowance is lower than the requested amount"""

    code = "InsufficientAllowance"

    def __init__(self, owner: str, spender: str, allowance: int, needed: int) -> None:
        super().__init__(
            f"Insufficient allowance for {spender} on {owner}: "
            f"allowance={allowance}, needed={needed}"
        )
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.needed = needed


class Unauthorized(LedgerError):
    code = "Unauthorized"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "Supply can only be created at initialization")


class LedgerNotInitialized(LedgerError):
    code = "LedgerNotInitialized"

    def __init__(self, message: str = "Storage does not hold an initialized ledger") -> None:
        super().__init__(message)
