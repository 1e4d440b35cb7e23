"""
Off-ledger signer operations.

Every operation takes an explicit `SignerContext`; nothing here keeps state
between requests.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from smart_contracts import constants as const
from smart_contracts.issuance_lib import (
    compute_content_hash,
    compute_mint_digest,
    verify_mint_signature,
)
from smart_contracts.messages import DeployAndMint, MintItem
from smart_contracts.pending_issuance.storage import (
    pending_issuance_code,
    pending_issuance_state_init,
)

from .codec import b64_decode, b64_encode, format_units, parse_price, validate_address
from .keys import SignerKeys


@dataclass(frozen=True, slots=True)
class SignerContext:
    keys: SignerKeys
    issuer_address: str
    pending_code: bytes = field(default_factory=lambda: pending_issuance_code().to_bytes())
    activation_time: int = 0
    default_price: int = const.MICRO_UNITS_PER_UNIT

    def __post_init__(self) -> None:
        validate_address(self.issuer_address)
        if self.activation_time < 0:
            raise ValueError("activation_time must be non-negative")


@dataclass(frozen=True, slots=True)
class MintRequest:
    owner: str
    content: bytes
    price: str | int | None = None


@dataclass(frozen=True, slots=True)
class SignedMint:
    """Everything an owner needs to deploy and mint a pending issuance."""

    pending_issuance_address: str
    init_code: str  # base64
    init_data: str  # base64
    message_body: str  # base64 DeployAndMint body
    signature: str  # hex
    content_hash: str  # hex
    price: int
    owner: str

    @property
    def signature_bytes(self) -> bytes:
        return bytes.fromhex(self.signature)

    @property
    def recommended_value(self) -> int:
        """Price plus the buffer that pays for the three hops."""
        return self.price + const.GAS_BUFFER

    def mint_item_body(self, query_id: int = 0) -> bytes:
        """Body for minting a pending issuance that is already deployed."""
        return MintItem(query_id=query_id, signature=self.signature_bytes).encode()

    def init_bytes(self) -> tuple[bytes, bytes]:
        return b64_decode(self.init_code), b64_decode(self.init_data)

    def to_json(self) -> dict[str, Any]:
        return {
            "pendingIssuanceAddress": self.pending_issuance_address,
            "initCode": self.init_code,
            "initData": self.init_data,
            "messageBody": self.message_body,
            "signature": self.signature,
            "contentHash": self.content_hash,
            "price": str(self.price),
            "priceFormatted": format_units(self.price),
            "recommendedValue": str(self.recommended_value),
            "ownerAccount": self.owner,
        }


def sign_digest(keys: SignerKeys, *, content: bytes, price: int, owner: str) -> bytes:
    return keys.sign(compute_mint_digest(content=content, price=price, owner=owner))


def calculate_address(
    ctx: SignerContext, owner: str, content: bytes, price: str | int | None = None
) -> str:
    """Address of the pending issuance for these parameters, without signing."""
    validate_address(owner)
    state_init = pending_issuance_state_init(
        code=ctx.pending_code,
        price=parse_price(price, ctx.default_price),
        issuer=ctx.issuer_address,
        owner=owner,
        signer_public_key=ctx.keys.public_key,
        content=content,
        activation_time=ctx.activation_time,
    )
    return state_init.address


def sign_mint(
    ctx: SignerContext, owner: str, content: bytes, price: str | int | None = None
) -> SignedMint:
    """
    Sign a mint for `owner` and return the pending issuance it authorizes.

    Raises:
        InvalidAddressError: If `owner` is not a valid address.
        InvalidPriceError: If `price` cannot be parsed.
    """
    validate_address(owner)
    price_micro = parse_price(price, ctx.default_price)
    state_init = pending_issuance_state_init(
        code=ctx.pending_code,
        price=price_micro,
        issuer=ctx.issuer_address,
        owner=owner,
        signer_public_key=ctx.keys.public_key,
        content=content,
        activation_time=ctx.activation_time,
    )
    signature = sign_digest(ctx.keys, content=content, price=price_micro, owner=owner)
    return SignedMint(
        pending_issuance_address=state_init.address,
        init_code=b64_encode(state_init.code),
        init_data=b64_encode(state_init.data),
        message_body=b64_encode(DeployAndMint(signature=signature).encode()),
        signature=signature.hex(),
        content_hash=compute_content_hash(content).hex(),
        price=price_micro,
        owner=owner,
    )


def batch_sign(ctx: SignerContext, items: Iterable[MintRequest]) -> list[SignedMint]:
    return [sign_mint(ctx, item.owner, item.content, item.price) for item in items]


def verify_mint(
    public_key: bytes, content: bytes, price: int, owner: str, signature: bytes
) -> bool:
    """Check a signer signature the way a pending issuance does."""
    return verify_mint_signature(
        public_key=public_key,
        content=content,
        price=price,
        owner=owner,
        signature=signature,
    )
