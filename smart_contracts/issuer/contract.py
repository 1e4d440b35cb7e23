from __future__ import annotations

import dataclasses
import logging

from .. import constants as const
from ..actor_common import (
    Actor,
    CodeTemplate,
    ExecutionContext,
    InboundMessage,
    checked_sub,
    ensure,
)
from ..errors import ErrorCode, ProtocolError
from ..messages import (
    AdminClaim,
    AdminSetStartTime,
    AdminTogglePolicy,
    AdminTransferCatalogOwnership,
    CatalogChangeOwner,
    CatalogIssue,
    Excesses,
    InternalMintRequest,
    decode_message,
    read_op,
    unwrap_bounced,
)
from ..pending_issuance.storage import pending_issuance_address
from .policy import MintPolicy
from .storage import CODE_NAME, IssuerStorage

logger = logging.getLogger(__name__)


class Issuer(Actor):
    """
    Collection-wide singleton that turns verified mint requests into catalog issues.

    A mint request is only honoured when its sender is the pending issuance the
    issuer itself derives from the request payload.
    """

    CODE_NAME = CODE_NAME

    def __init__(self, code: CodeTemplate, storage: IssuerStorage) -> None:
        super().__init__(code, storage)
        self.storage: IssuerStorage = storage

    @classmethod
    def from_state_init(cls, code: CodeTemplate, data: bytes) -> Issuer:
        return cls(code, IssuerStorage.decode(data))

    def receive(self, ctx: ExecutionContext, message: InboundMessage) -> None:
        if message.bounced:
            self._on_bounce(ctx, message)
            return

        msg = decode_message(message.body)
        if msg is None:
            return  # deploy or top-up
        if isinstance(msg, InternalMintRequest):
            self._mint(ctx, message, msg)
        elif isinstance(msg, AdminClaim):
            self._admin_claim(ctx, message)
        elif isinstance(msg, AdminTogglePolicy):
            self._admin_set_policy(ctx, message, self.storage.policy.toggled(msg.enabled))
        elif isinstance(msg, AdminSetStartTime):
            self._admin_set_policy(
                ctx, message, self.storage.policy.rescheduled(msg.start_time)
            )
        elif isinstance(msg, AdminTransferCatalogOwnership):
            self._admin_transfer_catalog_ownership(ctx, message, msg)
        else:
            raise ProtocolError(ErrorCode.UNKNOWN_OP, type(msg).__name__)

    def _remaining_value(self, ctx: ExecutionContext, *, retain: int = 0) -> int:
        """Inbound value left after gas, the reserve top-up, `retain` and one forward fee."""
        return checked_sub(
            ctx.balance,
            max(ctx.original_balance, const.MIN_RESERVE) + retain + ctx.forward_fee,
            ErrorCode.INSUFFICIENT_FUNDS,
        )

    def expected_pending_issuance(self, my_address: str, request: InternalMintRequest) -> str:
        s = self.storage
        return pending_issuance_address(
            code=s.pending_code,
            price=request.price,
            issuer=my_address,
            owner=request.owner,
            signer_public_key=s.signer_public_key,
            content=request.content,
            activation_time=s.item_activation_time,
        )

    def _mint(
        self, ctx: ExecutionContext, message: InboundMessage, request: InternalMintRequest
    ) -> None:
        ctx.consume_gas(const.GAS_ISSUER_MINT)
        ensure(
            message.src == self.expected_pending_issuance(ctx.my_address, request),
            ErrorCode.ADDRESS_MISMATCH,
        )
        ensure(self.storage.policy.can_mint(ctx.now), self.storage.policy.rejection_code)

        amount = self._remaining_value(ctx, retain=request.price)
        ensure(amount > 0, ErrorCode.INSUFFICIENT_FUNDS)
        ctx.send(
            self.storage.catalog,
            amount,
            CatalogIssue(
                query_id=request.query_id, owner=request.owner, content=request.content
            ).encode(),
        )

    def _check_admin(self, ctx: ExecutionContext, message: InboundMessage) -> None:
        ctx.consume_gas(const.GAS_ADMIN)
        ensure(message.src == self.storage.admin, ErrorCode.NOT_ADMIN)

    def _admin_claim(self, ctx: ExecutionContext, message: InboundMessage) -> None:
        self._check_admin(ctx, message)
        excess = ctx.balance - const.MIN_RESERVE - ctx.forward_fee
        ensure(excess > 0, ErrorCode.INSUFFICIENT_BALANCE)
        ctx.send(self.storage.admin, excess, Excesses().encode(), bounce=False)

    def _admin_set_policy(
        self, ctx: ExecutionContext, message: InboundMessage, policy: MintPolicy
    ) -> None:
        self._check_admin(ctx, message)
        self.storage = dataclasses.replace(self.storage, policy=policy)

    def _admin_transfer_catalog_ownership(
        self,
        ctx: ExecutionContext,
        message: InboundMessage,
        msg: AdminTransferCatalogOwnership,
    ) -> None:
        self._check_admin(ctx, message)
        amount = self._remaining_value(ctx)
        ensure(amount > 0, ErrorCode.INSUFFICIENT_FUNDS)
        ctx.send(
            self.storage.catalog,
            amount,
            CatalogChangeOwner(query_id=msg.query_id, new_owner=msg.new_owner).encode(),
        )

    def _on_bounce(self, ctx: ExecutionContext, message: InboundMessage) -> None:
        """Return what the catalog refused to whoever paid for the forward."""
        body = unwrap_bounced(message.body)
        op = read_op(body)
        if op == const.OP_CATALOG_ISSUE:
            issue = CatalogIssue.decode_payload(body[const.OP_SIZE :])
            self._refund(ctx, issue.owner, issue.query_id)
        elif op == const.OP_CATALOG_CHANGE_OWNER:
            change = CatalogChangeOwner.decode_payload(body[const.OP_SIZE :])
            self._refund(ctx, self.storage.admin, change.query_id)

    def _refund(self, ctx: ExecutionContext, dest: str, query_id: int) -> None:
        ctx.consume_gas(const.GAS_ISSUER_BOUNCE)
        refund = self._remaining_value(ctx)
        if refund == 0:
            logger.debug("Bounce at %s left nothing to refund", ctx.my_address)
            return
        ctx.send(dest, refund, Excesses(query_id=query_id).encode(), bounce=False)
