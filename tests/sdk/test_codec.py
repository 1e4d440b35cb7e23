"""
Unit tests for signed_issuance.codec module.

Tests cover:
- b64_encode / b64_decode
- validate_address
- offchain_content / onchain_content / content_url
- to_micro_units / format_units
- parse_price
"""

import pytest
from algosdk import account

from signed_issuance import InvalidAddressError, InvalidPriceError
from signed_issuance.codec import (
    b64_decode,
    b64_encode,
    content_url,
    format_units,
    offchain_content,
    onchain_content,
    parse_price,
    to_micro_units,
    validate_address,
)
from smart_contracts import constants as const

DEFAULT_PRICE = const.MICRO_UNITS_PER_UNIT


class TestBase64:
    """Tests for b64_encode and b64_decode."""

    def test_encode(self) -> None:
        """Test standard base64 with padding."""
        assert b64_encode(b"\x01\x02") == "AQI="

    def test_decode(self) -> None:
        """Test decoding back to bytes."""
        assert b64_decode("AQI=") == b"\x01\x02"

    @pytest.mark.parametrize("data", ["not base64!", "AQI", "éé=="])
    def test_decode_invalid(self, data: str) -> None:
        """Test that malformed base64 raises ValueError."""
        with pytest.raises(ValueError, match="Invalid base64"):
            b64_decode(data)


class TestValidateAddress:
    """Tests for validate_address."""

    def test_valid(self) -> None:
        """Test that a generated address is returned unchanged."""
        _, address = account.generate_account()
        assert validate_address(address) == address

    @pytest.mark.parametrize("address", ["", "ABC", "A" * 58])
    def test_invalid(self, address: str) -> None:
        """Test that malformed addresses are rejected."""
        with pytest.raises(InvalidAddressError):
            validate_address(address)

    def test_invalid_is_value_error(self) -> None:
        """Test that callers catching ValueError also catch bad addresses."""
        with pytest.raises(ValueError):
            validate_address("nope")


class TestContent:
    """Tests for content blob helpers."""

    def test_offchain(self) -> None:
        """Test the off-chain tag prefix."""
        blob = offchain_content("https://example.com/1.json")
        assert blob == b"\x01https://example.com/1.json"
        assert content_url(blob) == "https://example.com/1.json"

    def test_offchain_utf8(self) -> None:
        """Test that URLs are UTF-8 encoded."""
        assert offchain_content("https://example.com/é") == b"\x01https://example.com/\xc3\xa9"

    def test_offchain_empty(self) -> None:
        """Test that an empty URL is rejected."""
        with pytest.raises(ValueError, match="must not be empty"):
            offchain_content("")

    def test_onchain(self) -> None:
        """Test the on-chain tag prefix and that it has no URL."""
        blob = onchain_content(b"{}")
        assert blob == b"\x00{}"
        assert content_url(blob) is None
        assert content_url(b"") is None


class TestUnits:
    """Tests for to_micro_units and format_units."""

    @pytest.mark.parametrize(
        ("units", "expected"),
        [(1, 1_000_000), ("0.05", 50_000), (0.1, 100_000), ("2.5", 2_500_000), (0, 0)],
    )
    def test_to_micro_units(self, units: int | float | str, expected: int) -> None:
        """Test exact conversion of whole units."""
        assert to_micro_units(units) == expected

    @pytest.mark.parametrize("units", ["0.0000001", "abc"])
    def test_to_micro_units_invalid(self, units: str) -> None:
        """Test that unrepresentable amounts are rejected."""
        with pytest.raises(InvalidPriceError):
            to_micro_units(units)

    @pytest.mark.parametrize(
        ("micro", "expected"),
        [(0, "0.00 units"), (1_000_000, "1.00 units"), (1_500_000, "1.50 units")],
    )
    def test_format_units(self, micro: int, expected: str) -> None:
        """Test two-decimal formatting."""
        assert format_units(micro) == expected


class TestParsePrice:
    """Tests for parse_price."""

    @pytest.mark.parametrize("price", [None, ""])
    def test_default(self, price: str | None) -> None:
        """Test that a missing price falls back to the default."""
        assert parse_price(price, DEFAULT_PRICE) == DEFAULT_PRICE

    @pytest.mark.parametrize(
        ("price", "expected"),
        [
            ("1", 1_000_000),
            ("0.5", 500_000),
            (" 2 ", 2_000_000),
            ("999", 999_000_000),
            ("1000", 1000),
            ("5000000", 5_000_000),
            ("0", 0),
        ],
    )
    def test_strings(self, price: str, expected: int) -> None:
        """Test that small strings are whole units and large ones micro-units."""
        assert parse_price(price, DEFAULT_PRICE) == expected

    def test_integers_are_micro_units(self) -> None:
        """Test that integers are never scaled."""
        assert parse_price(5, DEFAULT_PRICE) == 5
        assert parse_price(2_000_000, DEFAULT_PRICE) == 2_000_000

    @pytest.mark.parametrize(
        "price",
        ["abc", "-1", "1000.5", "NaN", "Infinity", "0.0000001", True, -5, 2**64, str(2**64)],
    )
    def test_invalid(self, price: str | int) -> None:
        """Test that malformed, negative and oversized prices are rejected."""
        with pytest.raises(InvalidPriceError):
            parse_price(price, DEFAULT_PRICE)
