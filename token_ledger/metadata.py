"""
Token Metadata

Read-only name, symbol and decimal precision served alongside the
ledger. The ledger itself never consults these values; they only matter
when amounts are shown to or read from people.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from .amounts import DEFAULT_DECIMALS, to_base_units, format_units
from .config import LedgerConfig, get_config


@dataclass(frozen=True)
class TokenMetadata:
    """Immutable token descriptor"""
    name: str
    symbol: str
    decimals: int = DEFAULT_DECIMALS

    def __post_init__(self):
        if not self.name:
            raise ValueError("Token name cannot be empty")
        if not self.symbol:
            raise ValueError("Token symbol cannot be empty")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int) or not 0 <= self.decimals <= 77:
            raise ValueError(f"Invalid decimals: {self.decimals!r}")

    @classmethod
    def from_config(cls, config: Optional[LedgerConfig] = None) -> 'TokenMetadata':
        config = config or get_config()
        return cls(
            name=config.token_name,
            symbol=config.token_symbol,
            decimals=config.token_decimals
        )

    def parse_amount(self, value: Union[str, int, Decimal]) -> int:
        """Whole-token quantity -> base units"""
        return to_base_units(value, self.decimals)

    def format_amount(self, amount: int, with_symbol: bool = False) -> str:
        """Base units -> whole-token quantity string"""
        text = format_units(amount, self.decimals)
        return f"{text} {self.symbol}" if with_symbol else text

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "symbol": self.symbol, "decimals": self.decimals}
