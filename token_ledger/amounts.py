"""
Addresses and Token Amounts

Account identifiers are fixed-width hex addresses; amounts are integers
in the uint256 range counted in base units (10**decimals base units per
whole token). Conversions to and from human-readable quantities go
through Decimal, NEVER float.
"""

from decimal import Decimal, Context, InvalidOperation, localcontext
from typing import Any, Union
import re

from .errors import InvalidAddress, InvalidAmount


ADDRESS_LENGTH = 20  # bytes
ZERO_ADDRESS = "0x" + "00" * ADDRESS_LENGTH

UINT256_MAX = 2 ** 256 - 1
_UINT256_DIGITS = len(str(UINT256_MAX))
DEFAULT_DECIMALS = 18

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{%d}$" % (ADDRESS_LENGTH * 2))

# uint256 has 78 decimal digits; leave room for the fractional part
_CONVERSION_CONTEXT = Context(prec=160)


def normalize_address(value: Any) -> str:
    """
    Validate an account identifier and return its canonical lowercase form

    Raises:
        InvalidAddress: If value is not a 0x-prefixed 20-byte hex string
    """
    if not isinstance(value, str) or not _ADDRESS_PATTERN.match(value):
        raise InvalidAddress(value)
    return value.lower()


def is_zero_address(address: str) -> bool:
    """Check whether a normalized address is the zero sentinel"""
    return address == ZERO_ADDRESS


def validate_amount(value: Any) -> int:
    """
    Check that value is an integer amount in the uint256 range

    Raises:
        InvalidAmount: If value is not an int (bools excluded) or is out of range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(value)
    if value < 0 or value > UINT256_MAX:
        raise InvalidAmount(value)
    return value


def parse_base_units(text: str) -> int:
    """
    Parse a decimal string of base units, e.g. from a JSON request body

    Raises:
        InvalidAmount: If text is not a plain digit string or is out of range
    """
    if not isinstance(text, str) or not text.isascii() or not text.isdigit():
        raise InvalidAmount(text)
    digits = text.lstrip("0") or "0"
    # Longer strings cannot be in range and int() refuses very long ones
    if len(digits) > _UINT256_DIGITS:
        raise InvalidAmount(f"{digits[:16]}... ({len(digits)} digits)")
    return validate_amount(int(digits))


def to_base_units(value: Union[str, int, Decimal], decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Convert a whole-token quantity to base units

    Args:
        value: Token quantity such as "1.5", 100 or Decimal("0.25")
        decimals: Number of fractional digits of the token

    Returns:
        Integer amount in base units

    Raises:
        InvalidAmount: If the quantity is negative, has more fractional
            digits than the token supports, or overflows uint256
    """
    if isinstance(value, float) or isinstance(value, bool):
        raise InvalidAmount(value)

    with localcontext(_CONVERSION_CONTEXT):
        try:
            quantity = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmount(value)

        if not quantity.is_finite():
            raise InvalidAmount(value)

        scaled = quantity.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise InvalidAmount(value)

    return validate_amount(int(scaled))


def format_units(amount: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Format a base-unit amount as a token quantity with full precision"""
    validate_amount(amount)
    if decimals == 0:
        return str(amount)
    whole, fraction = divmod(amount, 10 ** decimals)
    return f"{whole}.{fraction:0{decimals}d}"
