from algokit_utils import AlgoAmount

from signed_issuance import (
    BouncePolicy,
    CatalogClient,
    IssuerClient,
    Sandbox,
    SignerContext,
    SignerKeys,
)
from smart_contracts import constants as const
from smart_contracts.errors import ErrorCode
from smart_contracts.messages import Excesses, decode_message
from smart_contracts.pending_issuance.storage import pending_issuance_code
from tests.helpers.utils import (
    ADMIN_OP_VALUE,
    MINT_VALUE,
    IssuerFactory,
    rejection,
    signed_pending_issuance,
)

MAX_USER_LOSS = AlgoAmount(micro_algo=100_000)
MIN_REFUND = AlgoAmount(micro_algo=1_500_000)


def _context(issuer: IssuerClient, keys: SignerKeys) -> SignerContext:
    return SignerContext(
        keys=keys,
        issuer_address=issuer.address,
        pending_code=issuer.get_state().pending_code,
    )


def test_disabled_policy_refunds_owner(
    sandbox: Sandbox,
    admin: str,
    user: str,
    issuer: IssuerClient,
    catalog: CatalogClient,
    signer_context: SignerContext,
    content: bytes,
    price: int,
) -> None:
    issuer.send_admin_toggle_policy(admin, ADMIN_OP_VALUE.micro_algo, False)
    item, signed = signed_pending_issuance(sandbox, signer_context, user, content, price)
    user_balance = sandbox.balance(user)

    result = item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes)

    rejection(result, issuer.address, ErrorCode.MINT_DISABLED)
    bounce = result.find(src=issuer.address, dest=item.address, bounced=True)
    assert bounce.success
    refund = result.find(src=item.address, dest=user)
    assert refund.value > MIN_REFUND.micro_algo
    assert decode_message(bounce.out_messages[0].body) == Excesses(query_id=0)
    assert not result.has(dest=catalog.address)
    assert catalog.items == ()

    user_loss = user_balance - sandbox.balance(user)
    assert 0 < user_loss < MAX_USER_LOSS.micro_algo
    assert item.get_balance() == const.MIN_RESERVE


def test_refund_only_consumes_pending_issuance(
    sandbox: Sandbox,
    admin: str,
    user: str,
    issuer: IssuerClient,
    catalog: CatalogClient,
    signer_context: SignerContext,
    content: bytes,
    price: int,
) -> None:
    issuer.send_admin_toggle_policy(admin, ADMIN_OP_VALUE.micro_algo, False)
    item, signed = signed_pending_issuance(sandbox, signer_context, user, content, price)
    item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes)

    state = item.get_state()
    assert state.minted
    assert state.content is None

    issuer.send_admin_toggle_policy(admin, ADMIN_OP_VALUE.micro_algo, True)
    result = item.send_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes)

    rejection(result, item.address, ErrorCode.ALREADY_MINTED)
    assert catalog.items == ()


def test_reset_for_retry_allows_second_attempt(
    sandbox: Sandbox,
    admin: str,
    user: str,
    deploy_issuer: IssuerFactory,
    catalog: CatalogClient,
    signer_keys: SignerKeys,
    content: bytes,
    price: int,
) -> None:
    issuer = deploy_issuer(bounce_policy=BouncePolicy.RESET_FOR_RETRY)
    ctx = _context(issuer, signer_keys)
    issuer.send_admin_toggle_policy(admin, ADMIN_OP_VALUE.micro_algo, False)
    item, signed = signed_pending_issuance(sandbox, ctx, user, content, price)

    first = item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes)

    rejection(first, issuer.address, ErrorCode.MINT_DISABLED)
    assert first.find(src=item.address, dest=user).op == const.OP_EXCESSES
    state = item.get_state()
    assert not state.minted
    assert state.content == content

    issuer.send_admin_toggle_policy(admin, ADMIN_OP_VALUE.micro_algo, True)
    second = item.send_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes, query_id=2)

    assert second.find(dest=catalog.address, op=const.OP_CATALOG_ISSUE).success
    assert item.get_state().minted
    assert catalog.items[0].owner == user
    assert catalog.items[0].content == content


def test_bounce_policies_have_distinct_addresses(
    sandbox: Sandbox,
    user: str,
    deploy_issuer: IssuerFactory,
    signer_keys: SignerKeys,
    content: bytes,
    price: int,
) -> None:
    refund_only = deploy_issuer(bounce_policy=BouncePolicy.REFUND_ONLY)
    ctx = _context(refund_only, signer_keys)
    retry_ctx = SignerContext(
        keys=signer_keys,
        issuer_address=refund_only.address,
        pending_code=pending_issuance_code(BouncePolicy.RESET_FOR_RETRY).to_bytes(),
    )

    item, _ = signed_pending_issuance(sandbox, ctx, user, content, price)
    retry_item, _ = signed_pending_issuance(sandbox, retry_ctx, user, content, price)

    assert item.address != retry_item.address


def test_retry_item_rejected_by_refund_only_issuer(
    sandbox: Sandbox,
    user: str,
    issuer: IssuerClient,
    signer_keys: SignerKeys,
    content: bytes,
    price: int,
) -> None:
    retry_ctx = SignerContext(
        keys=signer_keys,
        issuer_address=issuer.address,
        pending_code=pending_issuance_code(BouncePolicy.RESET_FOR_RETRY).to_bytes(),
    )
    item, signed = signed_pending_issuance(sandbox, retry_ctx, user, content, price)

    result = item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes)

    # the issuer only recognises items built from its own code template
    rejection(result, issuer.address, ErrorCode.ADDRESS_MISMATCH)
    assert not item.get_state().minted
