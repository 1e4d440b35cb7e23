"""
Shared protocol library: hashing, mint authorization and content addressing.

Both the actors and the off-ledger signer import from here, so a client and the
issuer always agree on the address of a pending issuance and on the digest a
signer signs.
"""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass

from algosdk import encoding, util

from .constants import (
    BYTES32_SIZE,
    HASH_DOMAIN_ACCOUNT,
    HASH_DOMAIN_MINT,
    SIGNATURE_SIZE,
    UINT64_SIZE,
)

MAX_UINT64 = 2**64 - 1


def sha512_256(data: bytes) -> bytes:
    """
    SHA-512/256 digest.

    Python exposes this as 'sha512_256' in hashlib on most modern builds.
    """
    try:
        h = hashlib.new("sha512_256")
    except ValueError as err:
        raise RuntimeError(
            "hashlib does not support sha512_256 on this Python build"
        ) from err
    h.update(data)
    return h.digest()


def public_key_to_address(public_key: bytes) -> str:
    if len(public_key) != BYTES32_SIZE:
        raise ValueError(f"public key must be {BYTES32_SIZE} bytes")
    return encoding.encode_address(public_key)


def address_to_public_key(address: str) -> bytes:
    if not encoding.is_valid_address(address):
        raise ValueError(f"Invalid account address: {address!r}")
    return encoding.decode_address(address)


def compute_content_hash(content: bytes) -> bytes:
    return sha512_256(content)


def compute_mint_digest(*, content: bytes, price: int, owner: str) -> bytes:
    """
    Compute d = SHA-512/256("signed-issuance/mint" || SHA-512/256(content) || price || owner)

    Args:
        content: Content blob of the asset to issue
        price: Price in micro-units (uint64)
        owner: Address of the only account allowed to mint

    Returns:
        32-byte digest signed by the signer
    """
    if not (0 <= price <= MAX_UINT64):
        raise ValueError("price must fit in uint64")
    data = (
        HASH_DOMAIN_MINT
        + compute_content_hash(content)
        + int(price).to_bytes(UINT64_SIZE, "big", signed=False)
        + address_to_public_key(owner)
    )
    return sha512_256(data)


def verify_signature(*, public_key: bytes, digest: bytes, signature: bytes) -> bool:
    """Ed25519 check of `signature` over `digest`. Any malformed input is a failure."""
    if len(public_key) != BYTES32_SIZE or len(signature) != SIGNATURE_SIZE:
        return False
    return util.verify_bytes(
        digest,
        base64.b64encode(signature).decode("ascii"),
        public_key_to_address(public_key),
    )


def verify_mint_signature(
    *,
    public_key: bytes,
    content: bytes,
    price: int,
    owner: str,
    signature: bytes,
) -> bool:
    digest = compute_mint_digest(content=content, price=price, owner=owner)
    return verify_signature(public_key=public_key, digest=digest, signature=signature)


def state_init_address(code: bytes, data: bytes) -> str:
    """
    Compute the account address of (code, initial data):
    SHA-512/256("signed-issuance/account" || SHA-512/256(code) || SHA-512/256(data))
    """
    return encoding.encode_address(
        sha512_256(HASH_DOMAIN_ACCOUNT + sha512_256(code) + sha512_256(data))
    )


@dataclass(frozen=True, slots=True)
class StateInit:
    """Code and initial data of an account that does not exist yet."""

    code: bytes
    data: bytes

    @property
    def address(self) -> str:
        return state_init_address(self.code, self.data)
