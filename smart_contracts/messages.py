"""
Protocol messages.

Every non-empty body is a 4-byte big-endian op-code followed by the ARC-4 ABI
encoding of a fixed tuple layout. The set of messages is closed: actors dispatch
on the decoded type, and new kinds are added by extending `MESSAGE_TYPES`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import cache
from typing import Any, ClassVar

from algosdk import abi
from algosdk import error as algosdk_error

from .constants import (
    BOUNCE_PREFIX,
    OP_ADMIN_CLAIM,
    OP_ADMIN_SET_START_TIME,
    OP_ADMIN_TOGGLE_POLICY,
    OP_ADMIN_TRANSFER_CATALOG_OWNERSHIP,
    OP_CATALOG_CHANGE_OWNER,
    OP_CATALOG_ISSUE,
    OP_DEPLOY_AND_MINT,
    OP_EXCESSES,
    OP_INTERNAL_MINT_ITEM,
    OP_MINT_ITEM,
    OP_SIZE,
    SIGNATURE_SIZE,
)
from .errors import ErrorCode, ProtocolError

DECODE_ERRORS = (
    ValueError,
    IndexError,
    TypeError,
    algosdk_error.ABIEncodingError,
    algosdk_error.ABITypeError,
)


@cache
def abi_type(layout: str) -> abi.ABIType:
    return abi.ABIType.from_string(layout)


def as_bytes(value: object) -> bytes:
    """ABI byte arrays decode either as `bytes` or as a list of ints."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, Sequence) and not isinstance(value, str):
        return bytes(value)
    raise TypeError("expected bytes or a sequence of ints")


class Message:
    """Base of the op-code tagged union."""

    __slots__ = ()

    OP: ClassVar[int]
    LAYOUT: ClassVar[str]

    def _to_abi(self) -> list[Any]:
        raise NotImplementedError

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> Message:
        raise NotImplementedError

    def encode(self) -> bytes:
        return self.OP.to_bytes(OP_SIZE, "big") + abi_type(self.LAYOUT).encode(
            self._to_abi()
        )

    @classmethod
    def decode_payload(cls, payload: bytes) -> Message:
        try:
            return cls._from_abi(abi_type(cls.LAYOUT).decode(payload))
        except DECODE_ERRORS as e:
            raise ProtocolError(
                ErrorCode.MALFORMED_BODY, f"{cls.__name__}: {e}"
            ) from e


@dataclass(frozen=True, slots=True)
class DeployAndMint(Message):
    OP: ClassVar[int] = OP_DEPLOY_AND_MINT
    LAYOUT: ClassVar[str] = f"(byte[{SIGNATURE_SIZE}])"

    signature: bytes

    @property
    def query_id(self) -> int:
        return 0

    def _to_abi(self) -> list[Any]:
        return [self.signature]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> DeployAndMint:
        return cls(signature=as_bytes(values[0]))


@dataclass(frozen=True, slots=True)
class MintItem(Message):
    OP: ClassVar[int] = OP_MINT_ITEM
    LAYOUT: ClassVar[str] = f"(uint64,byte[{SIGNATURE_SIZE}])"

    query_id: int
    signature: bytes

    def _to_abi(self) -> list[Any]:
        return [self.query_id, self.signature]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> MintItem:
        return cls(query_id=int(values[0]), signature=as_bytes(values[1]))


@dataclass(frozen=True, slots=True)
class InternalMintRequest(Message):
    OP: ClassVar[int] = OP_INTERNAL_MINT_ITEM
    LAYOUT: ClassVar[str] = "(uint64,uint64,address,byte[])"

    query_id: int
    price: int
    owner: str
    content: bytes

    def _to_abi(self) -> list[Any]:
        return [self.query_id, self.price, self.owner, self.content]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> InternalMintRequest:
        return cls(
            query_id=int(values[0]),
            price=int(values[1]),
            owner=str(values[2]),
            content=as_bytes(values[3]),
        )


@dataclass(frozen=True, slots=True)
class AdminClaim(Message):
    OP: ClassVar[int] = OP_ADMIN_CLAIM
    LAYOUT: ClassVar[str] = "(uint64)"

    query_id: int = 0

    def _to_abi(self) -> list[Any]:
        return [self.query_id]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> AdminClaim:
        return cls(query_id=int(values[0]))


@dataclass(frozen=True, slots=True)
class AdminTogglePolicy(Message):
    OP: ClassVar[int] = OP_ADMIN_TOGGLE_POLICY
    LAYOUT: ClassVar[str] = "(uint64,bool)"

    query_id: int
    enabled: bool

    def _to_abi(self) -> list[Any]:
        return [self.query_id, self.enabled]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> AdminTogglePolicy:
        return cls(query_id=int(values[0]), enabled=bool(values[1]))


@dataclass(frozen=True, slots=True)
class AdminSetStartTime(Message):
    OP: ClassVar[int] = OP_ADMIN_SET_START_TIME
    LAYOUT: ClassVar[str] = "(uint64,uint64)"

    query_id: int
    start_time: int

    def _to_abi(self) -> list[Any]:
        return [self.query_id, self.start_time]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> AdminSetStartTime:
        return cls(query_id=int(values[0]), start_time=int(values[1]))


@dataclass(frozen=True, slots=True)
class AdminTransferCatalogOwnership(Message):
    OP: ClassVar[int] = OP_ADMIN_TRANSFER_CATALOG_OWNERSHIP
    LAYOUT: ClassVar[str] = "(uint64,address)"

    query_id: int
    new_owner: str

    def _to_abi(self) -> list[Any]:
        return [self.query_id, self.new_owner]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> AdminTransferCatalogOwnership:
        return cls(query_id=int(values[0]), new_owner=str(values[1]))


@dataclass(frozen=True, slots=True)
class CatalogIssue(Message):
    OP: ClassVar[int] = OP_CATALOG_ISSUE
    LAYOUT: ClassVar[str] = "(uint64,address,byte[])"

    query_id: int
    owner: str
    content: bytes

    def _to_abi(self) -> list[Any]:
        return [self.query_id, self.owner, self.content]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> CatalogIssue:
        return cls(
            query_id=int(values[0]), owner=str(values[1]), content=as_bytes(values[2])
        )


@dataclass(frozen=True, slots=True)
class CatalogChangeOwner(Message):
    OP: ClassVar[int] = OP_CATALOG_CHANGE_OWNER
    LAYOUT: ClassVar[str] = "(uint64,address)"

    query_id: int
    new_owner: str

    def _to_abi(self) -> list[Any]:
        return [self.query_id, self.new_owner]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> CatalogChangeOwner:
        return cls(query_id=int(values[0]), new_owner=str(values[1]))


@dataclass(frozen=True, slots=True)
class Excesses(Message):
    OP: ClassVar[int] = OP_EXCESSES
    LAYOUT: ClassVar[str] = "(uint64)"

    query_id: int = 0

    def _to_abi(self) -> list[Any]:
        return [self.query_id]

    @classmethod
    def _from_abi(cls, values: Sequence[Any]) -> Excesses:
        return cls(query_id=int(values[0]))


MESSAGE_TYPES: dict[int, type[Message]] = {
    cls.OP: cls
    for cls in (
        DeployAndMint,
        MintItem,
        InternalMintRequest,
        AdminClaim,
        AdminTogglePolicy,
        AdminSetStartTime,
        AdminTransferCatalogOwnership,
        CatalogIssue,
        CatalogChangeOwner,
        Excesses,
    )
}


def read_op(body: bytes) -> int | None:
    """Op-code of a body, or None for an empty (plain transfer) body."""
    if not body:
        return None
    if len(body) < OP_SIZE:
        raise ProtocolError(ErrorCode.MALFORMED_BODY, "body shorter than op-code")
    return int.from_bytes(body[:OP_SIZE], "big")


def decode_message(body: bytes) -> Message | None:
    """
    Decode a body into its message type. Returns None for an empty body.

    Raises:
        ProtocolError: UNKNOWN_OP or MALFORMED_BODY.
    """
    op = read_op(body)
    if op is None:
        return None
    message_type = MESSAGE_TYPES.get(op)
    if message_type is None:
        raise ProtocolError(ErrorCode.UNKNOWN_OP, f"0x{op:08x}")
    return message_type.decode_payload(body[OP_SIZE:])


def bounce_body(body: bytes) -> bytes:
    return BOUNCE_PREFIX + body


def unwrap_bounced(body: bytes) -> bytes:
    if body.startswith(BOUNCE_PREFIX):
        return body[len(BOUNCE_PREFIX) :]
    return body
