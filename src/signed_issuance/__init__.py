# ruff: noqa: RUF022
"""
Signed Issuance Python SDK.

Public entrypoints:
- :func:`signed_issuance.signing.sign_mint` and friends, for the off-ledger signer
- :class:`signed_issuance.sandbox.Sandbox`, the in-process host network
- :mod:`signed_issuance.wrappers`, typed clients for the issuance actors

The on-ledger actors live in the `smart_contracts` package; this SDK shares
their hashing, address derivation and message codec so both sides always agree.
"""

from __future__ import annotations

from smart_contracts.errors import ErrorCode, ProtocolError
from smart_contracts.issuer.policy import MintPolicy, TimeGate, ToggleGate
from smart_contracts.pending_issuance.enums import BouncePolicy

from .codec import (
    b64_decode,
    b64_encode,
    format_units,
    offchain_content,
    onchain_content,
    parse_message,
    parse_price,
    to_micro_units,
    validate_address,
)
from .errors import (
    ChainViewUnavailableError,
    InsufficientWalletBalanceError,
    InvalidAddressError,
    InvalidPriceError,
    MessageDecodeError,
    SandboxError,
    ServiceConfigError,
    SignedIssuanceError,
    SignerKeyError,
    TransactionNotFoundError,
)
from .keys import SignerKeys, load_keys, load_or_create_keys, save_keys
from .sandbox import NetworkConfig, OutboundMessage, Sandbox, SendResult, Transaction
from .signing import (
    MintRequest,
    SignedMint,
    SignerContext,
    batch_sign,
    calculate_address,
    sign_mint,
    verify_mint,
)
from .wrappers import CatalogClient, IssuerClient, PendingIssuanceClient

__all__ = [
    # Signer
    "SignerContext",
    "SignerKeys",
    "SignedMint",
    "MintRequest",
    "sign_mint",
    "batch_sign",
    "calculate_address",
    "verify_mint",
    "load_keys",
    "save_keys",
    "load_or_create_keys",
    # Host network
    "NetworkConfig",
    "Sandbox",
    "SendResult",
    "Transaction",
    "OutboundMessage",
    # Clients
    "PendingIssuanceClient",
    "IssuerClient",
    "CatalogClient",
    # Protocol
    "BouncePolicy",
    "ErrorCode",
    "ProtocolError",
    "MintPolicy",
    "TimeGate",
    "ToggleGate",
    # Codec
    "b64_decode",
    "b64_encode",
    "format_units",
    "offchain_content",
    "onchain_content",
    "parse_message",
    "parse_price",
    "to_micro_units",
    "validate_address",
    # Errors
    "SignedIssuanceError",
    "InvalidAddressError",
    "MessageDecodeError",
    "InvalidPriceError",
    "SignerKeyError",
    "SandboxError",
    "InsufficientWalletBalanceError",
    "TransactionNotFoundError",
    "ServiceConfigError",
    "ChainViewUnavailableError",
]
