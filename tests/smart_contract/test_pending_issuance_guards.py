import pytest
from algokit_utils import AlgoAmount

from signed_issuance import (
    CatalogClient,
    IssuerClient,
    PendingIssuanceClient,
    Sandbox,
    SignerContext,
    SignerKeys,
    sign_mint,
)
from smart_contracts import constants as const
from smart_contracts.errors import ErrorCode
from tests.helpers.utils import MINT_VALUE, bounce_to, rejection, signed_pending_issuance

MAX_REJECTION_COST = AlgoAmount(micro_algo=100_000)


def test_fail_not_owner(
    sandbox: Sandbox,
    user: str,
    attacker: str,
    catalog: CatalogClient,
    signer_context: SignerContext,
    content: bytes,
    price: int,
) -> None:
    item, signed = signed_pending_issuance(sandbox, signer_context, user, content, price)
    attacker_balance = sandbox.balance(attacker)

    result = item.send_deploy_with_mint(attacker, MINT_VALUE.micro_algo, signed.signature_bytes)

    tx = rejection(result, item.address, ErrorCode.NOT_OWNER)
    assert tx.deployed
    assert bounce_to(result, attacker).value > 0
    assert not result.has(dest=catalog.address)
    assert not item.get_state().minted
    assert catalog.items == ()
    # attacker only pays fees
    assert attacker_balance - sandbox.balance(attacker) < MAX_REJECTION_COST.micro_algo


def test_owner_can_mint_after_foreign_attempt(
    sandbox: Sandbox,
    user: str,
    attacker: str,
    catalog: CatalogClient,
    signer_context: SignerContext,
    content: bytes,
    price: int,
) -> None:
    item, signed = signed_pending_issuance(sandbox, signer_context, user, content, price)
    item.send_deploy_with_mint(attacker, MINT_VALUE.micro_algo, signed.signature_bytes)

    result = item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes)

    assert not result.find(dest=item.address).deployed
    assert result.find(dest=catalog.address).success
    assert catalog.items[0].owner == user


def test_fail_invalid_signature(
    sandbox: Sandbox,
    user: str,
    catalog: CatalogClient,
    signer_context: SignerContext,
    content: bytes,
    price: int,
) -> None:
    item, signed = signed_pending_issuance(sandbox, signer_context, user, content, price)
    tampered = bytearray(signed.signature_bytes)
    tampered[0] ^= 0xFF

    result = item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, bytes(tampered))

    rejection(result, item.address, ErrorCode.INVALID_SIGNATURE)
    assert bounce_to(result, user)
    assert not result.has(dest=catalog.address)
    assert not item.get_state().minted


def test_fail_signature_from_other_key(
    sandbox: Sandbox,
    user: str,
    issuer: IssuerClient,
    signer_context: SignerContext,
    content: bytes,
    price: int,
) -> None:
    rogue = SignerContext(keys=SignerKeys.generate(), issuer_address=issuer.address)
    forged = sign_mint(rogue, user, content, price)
    item, _ = signed_pending_issuance(sandbox, signer_context, user, content, price)

    result = item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, forged.signature_bytes)

    rejection(result, item.address, ErrorCode.INVALID_SIGNATURE)


def test_fail_signature_replayed_for_other_owner(
    sandbox: Sandbox,
    user: str,
    attacker: str,
    issuer: IssuerClient,
    signer_context: SignerContext,
    signer_keys: SignerKeys,
    content: bytes,
    price: int,
) -> None:
    _, signed_for_user = signed_pending_issuance(sandbox, signer_context, user, content, price)
    attacker_item = PendingIssuanceClient.from_params(
        sandbox,
        price=price,
        issuer=issuer.address,
        owner=attacker,
        signer_public_key=signer_keys.public_key,
        content=content,
    )
    assert attacker_item.address != signed_for_user.pending_issuance_address

    result = attacker_item.send_deploy_with_mint(
        attacker, MINT_VALUE.micro_algo, signed_for_user.signature_bytes
    )

    rejection(result, attacker_item.address, ErrorCode.INVALID_SIGNATURE)


def test_fail_already_minted(
    sandbox: Sandbox,
    user: str,
    catalog: CatalogClient,
    signer_context: SignerContext,
    content: bytes,
    price: int,
) -> None:
    item, signed = signed_pending_issuance(sandbox, signer_context, user, content, price)
    item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes)
    assert len(catalog.items) == 1

    result = item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes)

    rejection(result, item.address, ErrorCode.ALREADY_MINTED)
    assert bounce_to(result, user)
    assert len(catalog.items) == 1


@pytest.mark.parametrize("shortfall", [1, 500_000])
def test_fail_insufficient_funds(
    sandbox: Sandbox,
    user: str,
    catalog: CatalogClient,
    signer_context: SignerContext,
    content: bytes,
    price: int,
    shortfall: int,
) -> None:
    item, signed = signed_pending_issuance(sandbox, signer_context, user, content, price)

    result = item.send_deploy_with_mint(user, price - shortfall, signed.signature_bytes)

    rejection(result, item.address, ErrorCode.INSUFFICIENT_FUNDS)
    assert bounce_to(result, user)
    assert not item.get_state().minted
    assert not result.has(dest=catalog.address)


def test_price_without_fee_buffer_is_refunded(
    sandbox: Sandbox,
    user: str,
    issuer: IssuerClient,
    catalog: CatalogClient,
    signer_context: SignerContext,
    content: bytes,
    price: int,
) -> None:
    item, signed = signed_pending_issuance(sandbox, signer_context, user, content, price)

    result = item.send_deploy_with_mint(user, price, signed.signature_bytes)

    # the item accepts, the issuer cannot keep the price and pay the catalog
    assert result.find(dest=item.address, bounced=False).success
    rejection(result, issuer.address, ErrorCode.INSUFFICIENT_FUNDS)
    refund = result.find(src=item.address, dest=user)
    assert refund.op == const.OP_EXCESSES
    assert not result.has(dest=catalog.address)
    # a refund-only item is spent by the attempt
    state = item.get_state()
    assert state.minted
    assert state.content is None


def test_top_up_is_accepted(
    sandbox: Sandbox,
    user: str,
    signer_context: SignerContext,
    content: bytes,
    price: int,
) -> None:
    item, signed = signed_pending_issuance(sandbox, signer_context, user, content, price)
    item.send_deploy_with_mint(user, MINT_VALUE.micro_algo, signed.signature_bytes)
    balance = item.get_balance()

    result = item.send_top_up(user, 10_000)

    assert result.find(dest=item.address).success
    assert item.get_balance() == balance + 10_000 - const.GAS_BASE
