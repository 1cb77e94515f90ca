"""
Deployment

Wires storage, audit trail, dispatcher, metadata and ledger together.
A fresh store is initialized once from configuration; a store that
already holds a ledger is reopened as-is.
"""

from dataclasses import dataclass
from typing import Optional

from .amounts import to_base_units
from .audit import AuditTrail
from .config import LedgerConfig, get_config
from .events import EventDispatcher
from .ledger import TokenLedger, STATE_TABLE, SUPPLY_RECORD
from .logging_config import get_logger
from .metadata import TokenMetadata
from .storage import StorageInterface, InMemoryStorage, SQLiteStorage


logger = get_logger("token_ledger.deployment")


@dataclass
class Deployment:
    """Handle to a running ledger and its collaborators"""
    metadata: TokenMetadata
    ledger: TokenLedger
    storage: StorageInterface
    event_dispatcher: EventDispatcher
    audit_trail: Optional[AuditTrail] = None

    def close(self) -> None:
        self.storage.close()


def create_storage(database_url: str) -> StorageInterface:
    """
    Build a storage backend from a URL

    memory:// gives an InMemoryStorage, sqlite:///path a file-backed
    SQLiteStorage and sqlite:// an in-memory SQLite database.
    """
    if database_url.startswith("memory://"):
        return InMemoryStorage()
    if database_url.startswith("sqlite:///"):
        return SQLiteStorage(database_url[len("sqlite:///"):])
    if database_url == "sqlite://":
        return SQLiteStorage(":memory:")
    raise ValueError(f"Unsupported database URL: {database_url}")


def deploy(config: Optional[LedgerConfig] = None,
           storage: Optional[StorageInterface] = None) -> Deployment:
    """
    Open the configured ledger, initializing it if the store is fresh

    Args:
        config: Configuration, defaults to the global one
        storage: Backend to use instead of config.database_url

    Returns:
        Deployment bundling ledger, metadata and collaborators

    Raises:
        ValueError: If the store is fresh and no initial holder is configured
    """
    config = config or get_config()
    storage = storage or create_storage(config.database_url)
    metadata = TokenMetadata.from_config(config)
    dispatcher = EventDispatcher()
    audit_trail = AuditTrail(storage) if config.enable_audit_logging else None

    if storage.exists(STATE_TABLE, SUPPLY_RECORD):
        ledger = TokenLedger(storage, audit_trail, dispatcher)
        logger.info(f"Opened existing {metadata.symbol} ledger, supply {ledger.total_supply()}")
    else:
        if not config.initial_holder:
            raise ValueError("initial_holder must be configured to initialize a new ledger")
        supply = to_base_units(config.initial_supply, metadata.decimals)
        ledger = TokenLedger.initialize(
            storage, supply, config.initial_holder,
            audit_trail=audit_trail, event_dispatcher=dispatcher
        )

    return Deployment(
        metadata=metadata,
        ledger=ledger,
        storage=storage,
        event_dispatcher=dispatcher,
        audit_trail=audit_trail
    )
