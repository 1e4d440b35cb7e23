from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..actor_common import CodeTemplate
from ..constants import BYTES32_SIZE
from ..issuance_lib import StateInit
from ..messages import abi_type, as_bytes
from .policy import MintPolicy, ToggleGate

CODE_NAME: Final[str] = "issuer"
ISSUER_CODE: Final[CodeTemplate] = CodeTemplate(name=CODE_NAME, version=1)

# (admin, catalog, signer_public_key, policy_kind, policy_value, item_activation_time, pending_code)
STORAGE_LAYOUT: Final[str] = f"(address,address,byte[{BYTES32_SIZE}],uint8,uint64,uint64,byte[])"


@dataclass(frozen=True, slots=True)
class IssuerStorage:
    admin: str
    catalog: str
    signer_public_key: bytes
    pending_code: bytes
    policy: MintPolicy = ToggleGate(enabled=True)
    item_activation_time: int = 0

    def __post_init__(self) -> None:
        if len(self.signer_public_key) != BYTES32_SIZE:
            raise ValueError(f"signer_public_key must be {BYTES32_SIZE} bytes")

    def encode(self) -> bytes:
        return abi_type(STORAGE_LAYOUT).encode(
            [
                self.admin,
                self.catalog,
                self.signer_public_key,
                int(self.policy.kind),
                self.policy.value,
                self.item_activation_time,
                self.pending_code,
            ]
        )

    @staticmethod
    def decode(data: bytes) -> IssuerStorage:
        values = abi_type(STORAGE_LAYOUT).decode(data)
        return IssuerStorage(
            admin=str(values[0]),
            catalog=str(values[1]),
            signer_public_key=as_bytes(values[2]),
            policy=MintPolicy.from_kind(int(values[3]), int(values[4])),
            item_activation_time=int(values[5]),
            pending_code=as_bytes(values[6]),
        )

    def state_init(self) -> StateInit:
        return StateInit(code=ISSUER_CODE.to_bytes(), data=self.encode())
