"""
Typed clients for the issuance actors.

Each client knows the address of one actor and how to build the message bodies
it accepts. Clients send through a `Sandbox` and read state back from it.
"""

from __future__ import annotations

from smart_contracts.catalog.storage import CatalogStorage, IssuedItem
from smart_contracts.issuance_lib import StateInit
from smart_contracts.issuer.policy import MintPolicy, ToggleGate
from smart_contracts.issuer.storage import IssuerStorage
from smart_contracts.messages import (
    AdminClaim,
    AdminSetStartTime,
    AdminTogglePolicy,
    AdminTransferCatalogOwnership,
    CatalogChangeOwner,
    DeployAndMint,
    MintItem,
)
from smart_contracts.pending_issuance.storage import (
    PendingIssuanceStorage,
    pending_issuance_code,
    pending_issuance_state_init,
)

from .codec import validate_address
from .sandbox import Sandbox, SendResult
from .signing import SignedMint


class _ActorClient:
    def __init__(self, sandbox: Sandbox, address: str, state_init: StateInit | None = None) -> None:
        self.sandbox = sandbox
        self.address = address
        self.state_init = state_init

    @property
    def is_deployed(self) -> bool:
        return self.sandbox.is_deployed(self.address)

    def get_balance(self) -> int:
        return self.sandbox.balance(self.address)

    def send_top_up(self, sender: str, value: int) -> SendResult:
        return self.sandbox.send(sender, self.address, value)

    def _send(
        self, sender: str, value: int, body: bytes, *, with_init: bool = False
    ) -> SendResult:
        return self.sandbox.send(
            sender,
            self.address,
            value,
            body,
            state_init=self.state_init if with_init else None,
        )


class PendingIssuanceClient(_ActorClient):
    @classmethod
    def from_params(
        cls,
        sandbox: Sandbox,
        *,
        price: int,
        issuer: str,
        owner: str,
        signer_public_key: bytes,
        content: bytes,
        activation_time: int = 0,
        code: bytes | None = None,
    ) -> PendingIssuanceClient:
        state_init = pending_issuance_state_init(
            code=code if code is not None else pending_issuance_code().to_bytes(),
            price=price,
            issuer=issuer,
            owner=owner,
            signer_public_key=signer_public_key,
            content=content,
            activation_time=activation_time,
        )
        return cls(sandbox, state_init.address, state_init)

    @classmethod
    def from_signed_mint(cls, sandbox: Sandbox, signed: SignedMint) -> PendingIssuanceClient:
        code, data = signed.init_bytes()
        state_init = StateInit(code=code, data=data)
        if state_init.address != signed.pending_issuance_address:
            raise ValueError("Signed mint state init does not hash to its address")
        return cls(sandbox, state_init.address, state_init)

    def send_deploy_with_mint(self, sender: str, value: int, signature: bytes) -> SendResult:
        return self._send(
            sender, value, DeployAndMint(signature=signature).encode(), with_init=True
        )

    def send_mint(
        self, sender: str, value: int, signature: bytes, *, query_id: int = 0
    ) -> SendResult:
        return self._send(
            sender, value, MintItem(query_id=query_id, signature=signature).encode()
        )

    def get_state(self) -> PendingIssuanceStorage:
        state = self.sandbox.get_state(self.address)
        assert isinstance(state, PendingIssuanceStorage)
        return state


class IssuerClient(_ActorClient):
    @classmethod
    def from_config(
        cls,
        sandbox: Sandbox,
        *,
        admin: str,
        catalog: str,
        signer_public_key: bytes,
        pending_code: bytes | None = None,
        policy: MintPolicy | None = None,
        item_activation_time: int = 0,
    ) -> IssuerClient:
        storage = IssuerStorage(
            admin=validate_address(admin),
            catalog=validate_address(catalog),
            signer_public_key=signer_public_key,
            pending_code=(
                pending_code if pending_code is not None else pending_issuance_code().to_bytes()
            ),
            policy=policy if policy is not None else ToggleGate(enabled=True),
            item_activation_time=item_activation_time,
        )
        state_init = storage.state_init()
        return cls(sandbox, state_init.address, state_init)

    def send_deploy(self, sender: str, value: int) -> SendResult:
        return self._send(sender, value, b"", with_init=True)

    def send_admin_claim(self, sender: str, value: int, *, query_id: int = 0) -> SendResult:
        return self._send(sender, value, AdminClaim(query_id=query_id).encode())

    def send_admin_toggle_policy(
        self, sender: str, value: int, enabled: bool, *, query_id: int = 0  # noqa: FBT001
    ) -> SendResult:
        return self._send(
            sender, value, AdminTogglePolicy(query_id=query_id, enabled=enabled).encode()
        )

    def send_admin_set_start_time(
        self, sender: str, value: int, start_time: int, *, query_id: int = 0
    ) -> SendResult:
        return self._send(
            sender,
            value,
            AdminSetStartTime(query_id=query_id, start_time=start_time).encode(),
        )

    def send_admin_transfer_catalog_ownership(
        self, sender: str, value: int, new_owner: str, *, query_id: int = 0
    ) -> SendResult:
        return self._send(
            sender,
            value,
            AdminTransferCatalogOwnership(query_id=query_id, new_owner=new_owner).encode(),
        )

    def get_state(self) -> IssuerStorage:
        state = self.sandbox.get_state(self.address)
        assert isinstance(state, IssuerStorage)
        return state


class CatalogClient(_ActorClient):
    @classmethod
    def from_owner(
        cls, sandbox: Sandbox, owner: str, *, collection_content: bytes = b""
    ) -> CatalogClient:
        storage = CatalogStorage(
            owner=validate_address(owner), collection_content=collection_content
        )
        state_init = storage.state_init()
        return cls(sandbox, state_init.address, state_init)

    def send_deploy(self, sender: str, value: int) -> SendResult:
        return self._send(sender, value, b"", with_init=True)

    def send_change_owner(
        self, sender: str, value: int, new_owner: str, *, query_id: int = 0
    ) -> SendResult:
        return self._send(
            sender, value, CatalogChangeOwner(query_id=query_id, new_owner=new_owner).encode()
        )

    def get_state(self) -> CatalogStorage:
        state = self.sandbox.get_state(self.address)
        assert isinstance(state, CatalogStorage)
        return state

    @property
    def items(self) -> tuple[IssuedItem, ...]:
        return self.get_state().items
