"""
Tests for address normalization, uint256 amounts and token metadata
"""

import pytest
from decimal import Decimal

from token_ledger.amounts import (
    ZERO_ADDRESS, UINT256_MAX, normalize_address, is_zero_address,
    validate_amount, parse_base_units, to_base_units, format_units
)
from token_ledger.errors import InvalidAddress, InvalidAmount, LedgerError
from token_ledger.metadata import TokenMetadata
from token_ledger.config import LedgerConfig


class TestAddresses:
    """Test account identifier handling"""

    def test_normalize_lowercases(self):
        assert normalize_address("0x" + "AB" * 20) == "0x" + "ab" * 20

    def test_zero_address_sentinel(self):
        assert ZERO_ADDRESS == "0x0000000000000000000000000000000000000000"
        assert is_zero_address(normalize_address(ZERO_ADDRESS))
        assert not is_zero_address("0x" + "00" * 19 + "01")

    @pytest.mark.parametrize("value", [
        "0x" + "ab" * 19,          # too short
        "0x" + "ab" * 21,          # too long
        "ab" * 20,                 # missing prefix
        "0x" + "gg" * 20,          # not hex
        12345,
        None,
    ])
    def test_malformed_addresses(self, value):
        with pytest.raises(InvalidAddress) as exc_info:
            normalize_address(value)
        assert exc_info.value.code == "InvalidAddress"


class TestAmounts:
    """Test uint256 range validation"""

    def test_bounds_accepted(self):
        assert validate_amount(0) == 0
        assert validate_amount(UINT256_MAX) == UINT256_MAX

    @pytest.mark.parametrize("value", [-1, UINT256_MAX + 1, 1.0, Decimal("1"), "1", True, False, None])
    def test_out_of_range_or_wrong_type(self, value):
        with pytest.raises(InvalidAmount):
            validate_amount(value)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            validate_amount(-5)
        assert issubclass(InvalidAmount, LedgerError)


class TestParseBaseUnits:
    """Test parsing of decimal base-unit strings"""

    def test_plain_digits(self):
        assert parse_base_units("0") == 0
        assert parse_base_units("0042") == 42
        assert parse_base_units(str(UINT256_MAX)) == UINT256_MAX

    @pytest.mark.parametrize("text", [
        str(UINT256_MAX + 1),
        "9" * 79,
        "9" * 5000,
        "-1",
        "1.5",
        "",
        "\u0661",  # Arabic-Indic digit one
        42,
    ])
    def test_rejected(self, text):
        with pytest.raises(InvalidAmount):
            parse_base_units(text)

    def test_long_zero_padding(self):
        assert parse_base_units("0" * 5000 + "7") == 7


class TestUnitConversion:
    """Test whole-token <-> base-unit conversion"""

    def test_whole_tokens(self):
        assert to_base_units("1000000") == 1_000_000 * 10 ** 18
        assert to_base_units(100) == 100 * 10 ** 18

    def test_fractional_tokens(self):
        assert to_base_units("1.5") == 15 * 10 ** 17
        assert to_base_units(Decimal("0.000000000000000001")) == 1
        assert to_base_units("2.25", decimals=2) == 225

    def test_too_many_fractional_digits(self):
        with pytest.raises(InvalidAmount):
            to_base_units("0.0000000000000000001")
        with pytest.raises(InvalidAmount):
            to_base_units("1.5", decimals=0)

    @pytest.mark.parametrize("value", ["-1", "abc", "NaN", "Infinity", 1.5, "1e80"])
    def test_invalid_quantities(self, value):
        with pytest.raises(InvalidAmount):
            to_base_units(value)

    def test_format_units(self):
        assert format_units(15 * 10 ** 17) == "1.500000000000000000"
        assert format_units(1) == "0.000000000000000001"
        assert format_units(225, decimals=2) == "2.25"
        assert format_units(42, decimals=0) == "42"

    def test_format_max_value(self):
        text = format_units(UINT256_MAX)
        assert to_base_units(text) == UINT256_MAX


class TestTokenMetadata:
    """Test the read-only metadata collaborator"""

    def test_defaults(self):
        metadata = TokenMetadata(name="Test Token", symbol="TST")
        assert metadata.decimals == 18
        assert metadata.to_dict() == {"name": "Test Token", "symbol": "TST", "decimals": 18}

    def test_immutable(self):
        metadata = TokenMetadata(name="Test Token", symbol="TST")
        with pytest.raises(Exception):
            metadata.symbol = "XXX"

    def test_from_config(self):
        config = LedgerConfig(token_name="Config Coin", token_symbol="CFG", token_decimals=6)
        metadata = TokenMetadata.from_config(config)
        assert metadata == TokenMetadata("Config Coin", "CFG", 6)

    def test_parse_and_format(self):
        metadata = TokenMetadata(name="Six", symbol="SIX", decimals=6)
        assert metadata.parse_amount("12.5") == 12_500_000
        assert metadata.format_amount(12_500_000) == "12.500000"
        assert metadata.format_amount(12_500_000, with_symbol=True) == "12.500000 SIX"

    @pytest.mark.parametrize("kwargs", [
        {"name": "", "symbol": "X"},
        {"name": "X", "symbol": ""},
        {"name": "X", "symbol": "X", "decimals": -1},
        {"name": "X", "symbol": "X", "decimals": 78},
        {"name": "X", "symbol": "X", "decimals": True},
    ])
    def test_invalid_metadata(self, kwargs):
        with pytest.raises(ValueError):
            TokenMetadata(**kwargs)
