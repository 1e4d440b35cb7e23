from __future__ import annotations

import base64
import binascii
from decimal import Decimal, InvalidOperation

from algokit_utils import AlgoAmount
from algosdk import encoding

from smart_contracts import constants as const
from smart_contracts.errors import ProtocolError
from smart_contracts.issuance_lib import MAX_UINT64
from smart_contracts.messages import Message, decode_message

from .errors import InvalidAddressError, InvalidPriceError, MessageDecodeError

# Price strings below this are read as whole units, the rest as micro-units
WHOLE_UNIT_PRICE_LIMIT = 1000


def b64_encode(data: bytes) -> str:
    """Standard base64 (with padding)."""
    return base64.b64encode(data).decode("ascii")


def b64_decode(data_b64: str) -> bytes:
    """Standard base64 decode (accepts padding)."""
    try:
        return base64.b64decode(data_b64.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"Invalid base64: {e}") from e


def validate_address(address: str) -> str:
    """Return `address` if it is a valid account address."""
    if not isinstance(address, str) or not encoding.is_valid_address(address):
        raise InvalidAddressError(f"Invalid account address: {address!r}")
    return address


def offchain_content(url: str) -> bytes:
    """Content blob pointing at off-chain metadata: 0x01 || utf8(url)."""
    if not url:
        raise ValueError("Metadata URL must not be empty")
    return bytes([const.CONTENT_OFFCHAIN]) + url.encode("utf-8")


def onchain_content(data: bytes) -> bytes:
    return bytes([const.CONTENT_ONCHAIN]) + data


def content_url(content: bytes) -> str | None:
    """URL of an off-chain content blob, None for any other blob."""
    if not content or content[0] != const.CONTENT_OFFCHAIN:
        return None
    return content[1:].decode("utf-8")


def to_micro_units(units: int | float | str | Decimal) -> int:
    """Convert whole units to micro-units without float rounding."""
    try:
        micro = Decimal(str(units)) * const.MICRO_UNITS_PER_UNIT
    except InvalidOperation as e:
        raise InvalidPriceError(f"Invalid amount: {units!r}") from e
    if micro != micro.to_integral_value():
        raise InvalidPriceError(f"Amount has more than 6 decimals: {units!r}")
    return AlgoAmount(micro_algo=int(micro)).micro_algo


def format_units(micro_units: int) -> str:
    amount = AlgoAmount(micro_algo=micro_units)
    return f"{Decimal(amount.micro_algo) / const.MICRO_UNITS_PER_UNIT:.2f} units"


def parse_price(price: str | int | None, default: int) -> int:
    """
    Parse a price as sent by clients of the signer service.

    Strings below `WHOLE_UNIT_PRICE_LIMIT` are whole units (decimals allowed),
    anything larger is taken as micro-units. Integers are always micro-units.

    Raises:
        InvalidPriceError: If the price is malformed, negative or beyond uint64.
    """
    if price is None or price == "":
        return default
    if isinstance(price, bool):
        raise InvalidPriceError(f"Invalid price: {price!r}")
    if isinstance(price, int):
        micro = price
    else:
        try:
            number = Decimal(price.strip())
        except InvalidOperation as e:
            raise InvalidPriceError(f"Invalid price: {price!r}") from e
        if not number.is_finite() or number < 0:
            raise InvalidPriceError(f"Invalid price: {price!r}")
        if number < WHOLE_UNIT_PRICE_LIMIT:
            micro = to_micro_units(number)
        elif number == number.to_integral_value():
            micro = int(number)
        else:
            raise InvalidPriceError(f"Micro-unit price must be an integer: {price!r}")
    if not (0 <= micro <= MAX_UINT64):
        raise InvalidPriceError(f"Price must fit in uint64: {price!r}")
    return micro


def parse_message(body: bytes) -> Message | None:
    """Decode a message body outside of an actor."""
    try:
        return decode_message(body)
    except ProtocolError as e:
        raise MessageDecodeError(str(e)) from e
