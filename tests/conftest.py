import pytest
from algokit_utils import AlgoAmount

from signed_issuance import (
    CatalogClient,
    IssuerClient,
    MintPolicy,
    Sandbox,
    SignerContext,
    SignerKeys,
    offchain_content,
)
from smart_contracts.pending_issuance.enums import BouncePolicy
from smart_contracts.pending_issuance.storage import pending_issuance_code
from tests.helpers.utils import (
    ADMIN_OP_VALUE,
    CATALOG_DEPLOY_VALUE,
    ISSUER_DEPLOY_VALUE,
    WALLET_FUNDS,
    IssuerFactory,
)


@pytest.fixture(scope="session")
def signer_keys() -> SignerKeys:
    return SignerKeys.generate()


@pytest.fixture(scope="function")
def sandbox() -> Sandbox:
    return Sandbox()


@pytest.fixture(scope="function")
def admin(sandbox: Sandbox) -> str:
    return sandbox.wallet("admin", WALLET_FUNDS.micro_algo)


@pytest.fixture(scope="function")
def user(sandbox: Sandbox) -> str:
    return sandbox.wallet("user", WALLET_FUNDS.micro_algo)


@pytest.fixture(scope="function")
def attacker(sandbox: Sandbox) -> str:
    return sandbox.wallet("attacker", WALLET_FUNDS.micro_algo)


@pytest.fixture(scope="function")
def catalog(sandbox: Sandbox, admin: str) -> CatalogClient:
    client = CatalogClient.from_owner(sandbox, admin)
    result = client.send_deploy(admin, CATALOG_DEPLOY_VALUE.micro_algo)
    assert result.find(dest=client.address, deployed=True, success=True)
    return client


@pytest.fixture(scope="function")
def deploy_issuer(
    sandbox: Sandbox, admin: str, catalog: CatalogClient, signer_keys: SignerKeys
) -> IssuerFactory:
    """Deploy an issuer and hand it the catalog ownership."""

    def _deploy(
        *,
        bounce_policy: BouncePolicy = BouncePolicy.REFUND_ONLY,
        policy: MintPolicy | None = None,
        item_activation_time: int = 0,
        deploy_value: int = ISSUER_DEPLOY_VALUE.micro_algo,
    ) -> IssuerClient:
        client = IssuerClient.from_config(
            sandbox,
            admin=admin,
            catalog=catalog.address,
            signer_public_key=signer_keys.public_key,
            pending_code=pending_issuance_code(bounce_policy).to_bytes(),
            policy=policy,
            item_activation_time=item_activation_time,
        )
        client.send_deploy(admin, deploy_value)
        assert client.is_deployed
        catalog.send_change_owner(admin, ADMIN_OP_VALUE.micro_algo, client.address)
        assert catalog.get_state().owner == client.address
        return client

    return _deploy


@pytest.fixture(scope="function")
def issuer(deploy_issuer: IssuerFactory) -> IssuerClient:
    return deploy_issuer()


@pytest.fixture(scope="function")
def signer_context(issuer: IssuerClient, signer_keys: SignerKeys) -> SignerContext:
    return SignerContext(keys=signer_keys, issuer_address=issuer.address)


@pytest.fixture(scope="session")
def content() -> bytes:
    return offchain_content("https://example.com/items/1.json")


@pytest.fixture(scope="session")
def price() -> int:
    return AlgoAmount.from_algo(1).micro_algo
