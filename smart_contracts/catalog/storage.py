from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from ..actor_common import CodeTemplate
from ..issuance_lib import StateInit
from ..messages import abi_type, as_bytes

CODE_NAME: Final[str] = "catalog"
CATALOG_CODE: Final[CodeTemplate] = CodeTemplate(name=CODE_NAME, version=1)

# (owner, next_item_index, collection_content)
STORAGE_LAYOUT: Final[str] = "(address,uint64,byte[])"


@dataclass(frozen=True, slots=True)
class IssuedItem:
    index: int
    owner: str
    content: bytes


@dataclass(frozen=True, slots=True)
class CatalogStorage:
    """
    Catalog state. Only the deploy-time fields take part in the address; issued
    items live off the serialised layout.
    """

    owner: str
    next_item_index: int = 0
    collection_content: bytes = b""
    items: tuple[IssuedItem, ...] = field(default=())

    def encode(self) -> bytes:
        return abi_type(STORAGE_LAYOUT).encode(
            [self.owner, self.next_item_index, self.collection_content]
        )

    @staticmethod
    def decode(data: bytes) -> CatalogStorage:
        values = abi_type(STORAGE_LAYOUT).decode(data)
        return CatalogStorage(
            owner=str(values[0]),
            next_item_index=int(values[1]),
            collection_content=as_bytes(values[2]),
        )

    def state_init(self) -> StateInit:
        return StateInit(code=CATALOG_CODE.to_bytes(), data=self.encode())
