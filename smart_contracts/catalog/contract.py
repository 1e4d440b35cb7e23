from __future__ import annotations

import dataclasses
import logging

from .. import constants as const
from ..actor_common import Actor, CodeTemplate, ExecutionContext, InboundMessage, ensure
from ..errors import ErrorCode, ProtocolError
from ..messages import CatalogChangeOwner, CatalogIssue, decode_message
from .storage import CODE_NAME, CatalogStorage, IssuedItem

logger = logging.getLogger(__name__)


class Catalog(Actor):
    """Minimal asset catalog: its owner issues items, anyone else is refused."""

    CODE_NAME = CODE_NAME

    def __init__(self, code: CodeTemplate, storage: CatalogStorage) -> None:
        super().__init__(code, storage)
        self.storage: CatalogStorage = storage

    @classmethod
    def from_state_init(cls, code: CodeTemplate, data: bytes) -> Catalog:
        return cls(code, CatalogStorage.decode(data))

    def receive(self, ctx: ExecutionContext, message: InboundMessage) -> None:
        if message.bounced:
            return

        msg = decode_message(message.body)
        if msg is None:
            return
        if isinstance(msg, CatalogIssue):
            self._issue(ctx, message, msg)
        elif isinstance(msg, CatalogChangeOwner):
            self._change_owner(ctx, message, msg)
        else:
            raise ProtocolError(ErrorCode.UNKNOWN_OP, type(msg).__name__)

    def _issue(self, ctx: ExecutionContext, message: InboundMessage, msg: CatalogIssue) -> None:
        ctx.consume_gas(const.GAS_CATALOG)
        ensure(message.src == self.storage.owner, ErrorCode.CATALOG_NOT_OWNER)
        item = IssuedItem(
            index=self.storage.next_item_index, owner=msg.owner, content=msg.content
        )
        self.storage = dataclasses.replace(
            self.storage,
            next_item_index=item.index + 1,
            items=(*self.storage.items, item),
        )
        logger.debug("Catalog %s issued item %d to %s", ctx.my_address, item.index, item.owner)

    def _change_owner(
        self, ctx: ExecutionContext, message: InboundMessage, msg: CatalogChangeOwner
    ) -> None:
        ctx.consume_gas(const.GAS_CATALOG)
        ensure(message.src == self.storage.owner, ErrorCode.CATALOG_NOT_OWNER)
        self.storage = dataclasses.replace(self.storage, owner=msg.new_owner)
