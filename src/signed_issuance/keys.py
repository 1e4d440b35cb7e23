"""Signer key material and its on-disk persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from algosdk import account, encoding, util

from .codec import b64_decode
from .errors import SignerKeyError

logger = logging.getLogger(__name__)

DEFAULT_KEYS_FILE = ".keys.json"


@dataclass(frozen=True, slots=True)
class SignerKeys:
    """
    Ed25519 key pair of the signer.

    `private_key` is in algosdk's base64 form (seed followed by public key). The
    public key is what the issuer and every pending issuance store.
    """

    private_key: str

    def __post_init__(self) -> None:
        try:
            raw = b64_decode(self.private_key)
        except ValueError as e:
            raise SignerKeyError("Private key is not valid base64") from e
        if len(raw) != 64:
            raise SignerKeyError(f"Private key must be 64 bytes, got {len(raw)}")

    @staticmethod
    def generate() -> SignerKeys:
        private_key, _ = account.generate_account()
        return SignerKeys(private_key=private_key)

    @property
    def address(self) -> str:
        return account.address_from_private_key(self.private_key)

    @property
    def public_key(self) -> bytes:
        return encoding.decode_address(self.address)

    def sign(self, digest: bytes) -> bytes:
        return b64_decode(util.sign_bytes(digest, self.private_key))

    def to_json(self) -> dict[str, Any]:
        return {
            "privateKey": self.private_key,
            "publicKey": self.public_key.hex(),
            "address": self.address,
        }

    @staticmethod
    def from_json(obj: dict[str, Any]) -> SignerKeys:
        try:
            keys = SignerKeys(private_key=str(obj["privateKey"]))
        except KeyError as e:
            raise SignerKeyError("Key file has no 'privateKey'") from e
        stored = obj.get("publicKey")
        if stored is not None and stored != keys.public_key.hex():
            raise SignerKeyError("Stored public key does not match the private key")
        return keys


def save_keys(keys: SignerKeys, path: str | Path) -> Path:
    path = Path(path)
    try:
        path.write_text(json.dumps(keys.to_json(), indent=2), encoding="utf-8")
    except OSError as e:
        raise SignerKeyError(f"Cannot write keys to {path}: {e}") from e
    logger.info("Signer keys saved to %s", path)
    return path


def load_keys(path: str | Path) -> SignerKeys | None:
    """Load keys from `path`, None if the file does not exist."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        obj = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SignerKeyError(f"Cannot read keys from {path}: {e}") from e
    if not isinstance(obj, dict):
        raise SignerKeyError(f"Key file {path} must hold a JSON object")
    return SignerKeys.from_json(obj)


def load_or_create_keys(path: str | Path = DEFAULT_KEYS_FILE) -> SignerKeys:
    keys = load_keys(path)
    if keys is None:
        logger.info("No signer keys at %s, generating a new key pair", path)
        keys = SignerKeys.generate()
        save_keys(keys, path)
    return keys


def describe_keys(keys: SignerKeys) -> str:
    """Public part of the key pair, safe to display."""
    return "\n".join(
        [
            "=== Signer Key Info ===",
            f"Public key (hex): {keys.public_key.hex()}",
            f"Address:          {keys.address}",
            "=======================",
        ]
    )
