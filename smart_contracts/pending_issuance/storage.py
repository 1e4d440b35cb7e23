from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..actor_common import CodeTemplate
from ..constants import BYTES32_SIZE
from ..issuance_lib import StateInit
from ..messages import abi_type, as_bytes
from .enums import BouncePolicy

CODE_NAME: Final[str] = "pending-issuance"

# (minted, activation_time, price, issuer, owner, signer_public_key, has_content, content)
STORAGE_LAYOUT: Final[str] = f"(bool,uint64,uint64,address,address,byte[{BYTES32_SIZE}],bool,byte[])"


def pending_issuance_code(policy: BouncePolicy = BouncePolicy.REFUND_ONLY) -> CodeTemplate:
    return CodeTemplate(name=CODE_NAME, version=1, variant=BouncePolicy(policy).value)


@dataclass(frozen=True, slots=True)
class PendingIssuanceStorage:
    minted: bool
    activation_time: int  # 0 = no time gate
    price: int  # micro-units
    issuer: str
    owner: str
    signer_public_key: bytes
    content: bytes | None

    @staticmethod
    def initial(
        *,
        price: int,
        issuer: str,
        owner: str,
        signer_public_key: bytes,
        content: bytes,
        activation_time: int = 0,
    ) -> PendingIssuanceStorage:
        if len(signer_public_key) != BYTES32_SIZE:
            raise ValueError(f"signer_public_key must be {BYTES32_SIZE} bytes")
        if price < 0 or activation_time < 0:
            raise ValueError("price and activation_time must be non-negative")
        return PendingIssuanceStorage(
            minted=False,
            activation_time=activation_time,
            price=price,
            issuer=issuer,
            owner=owner,
            signer_public_key=bytes(signer_public_key),
            content=bytes(content),
        )

    def encode(self) -> bytes:
        return abi_type(STORAGE_LAYOUT).encode(
            [
                self.minted,
                self.activation_time,
                self.price,
                self.issuer,
                self.owner,
                self.signer_public_key,
                self.content is not None,
                self.content or b"",
            ]
        )

    @staticmethod
    def decode(data: bytes) -> PendingIssuanceStorage:
        values = abi_type(STORAGE_LAYOUT).decode(data)
        return PendingIssuanceStorage(
            minted=bool(values[0]),
            activation_time=int(values[1]),
            price=int(values[2]),
            issuer=str(values[3]),
            owner=str(values[4]),
            signer_public_key=as_bytes(values[5]),
            content=as_bytes(values[7]) if values[6] else None,
        )


def pending_issuance_state_init(
    *,
    code: bytes,
    price: int,
    issuer: str,
    owner: str,
    signer_public_key: bytes,
    content: bytes,
    activation_time: int = 0,
) -> StateInit:
    storage = PendingIssuanceStorage.initial(
        price=price,
        issuer=issuer,
        owner=owner,
        signer_public_key=signer_public_key,
        content=content,
        activation_time=activation_time,
    )
    return StateInit(code=code, data=storage.encode())


def pending_issuance_address(
    *,
    code: bytes,
    price: int,
    issuer: str,
    owner: str,
    signer_public_key: bytes,
    content: bytes,
    activation_time: int = 0,
) -> str:
    """Address a pending issuance with these parameters has, deployed or not."""
    return pending_issuance_state_init(
        code=code,
        price=price,
        issuer=issuer,
        owner=owner,
        signer_public_key=signer_public_key,
        content=content,
        activation_time=activation_time,
    ).address
