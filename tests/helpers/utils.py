from collections.abc import Callable

from algokit_utils import AlgoAmount

from signed_issuance import (
    IssuerClient,
    PendingIssuanceClient,
    Sandbox,
    SendResult,
    SignedMint,
    SignerContext,
    Transaction,
    sign_mint,
)
from smart_contracts.constants import GAS_BUFFER
from smart_contracts.errors import ErrorCode

WALLET_FUNDS = AlgoAmount.from_algo(100)
CATALOG_DEPLOY_VALUE = AlgoAmount(micro_algo=50_000)
ISSUER_DEPLOY_VALUE = AlgoAmount(micro_algo=500_000)
ADMIN_OP_VALUE = AlgoAmount(micro_algo=50_000)
MINT_VALUE = AlgoAmount.from_algo(2)

IssuerFactory = Callable[..., IssuerClient]


def mint_value(price: int) -> int:
    return price + GAS_BUFFER


def signed_pending_issuance(
    sandbox: Sandbox,
    ctx: SignerContext,
    owner: str,
    content: bytes,
    price: int | None = None,
) -> tuple[PendingIssuanceClient, SignedMint]:
    signed = sign_mint(ctx, owner, content, price)
    return PendingIssuanceClient.from_signed_mint(sandbox, signed), signed


def rejection(result: SendResult, dest: str, code: ErrorCode) -> Transaction:
    """The failed transaction at `dest`, asserting its exit code."""
    tx = result.find(dest=dest, success=False)
    assert tx.exit_code == code, f"expected {code.name}, got {tx.exit_code}"
    return tx


def bounce_to(result: SendResult, dest: str) -> Transaction:
    return result.find(dest=dest, bounced=True)
