from __future__ import annotations


class SignedIssuanceError(Exception):
    """Base class for all SDK errors."""


class InvalidAddressError(SignedIssuanceError, ValueError):
    """Raised when a string is not a valid account address."""


class MessageDecodeError(SignedIssuanceError, ValueError):
    """Raised when a message body has an unknown op-code or does not match its layout."""


class InvalidPriceError(SignedIssuanceError, ValueError):
    """Raised when a price cannot be parsed or does not fit in uint64."""


class SignerKeyError(SignedIssuanceError, RuntimeError):
    """Raised when signer keys cannot be loaded, parsed or persisted."""


class SandboxError(SignedIssuanceError, RuntimeError):
    """Raised when the in-process network is driven into an invalid state."""


class InsufficientWalletBalanceError(SandboxError):
    """Raised when a wallet cannot pay the value plus the forward fee of a message."""


class TransactionNotFoundError(SignedIssuanceError, LookupError):
    """Raised when no transaction of a send result matches the expected fields."""


class ServiceConfigError(SignedIssuanceError, RuntimeError):
    """Raised when the signer service configuration is missing or invalid."""


class ChainViewUnavailableError(SignedIssuanceError, RuntimeError):
    """Raised when an operation needs a chain view but the service has none configured."""
