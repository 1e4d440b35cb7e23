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
from ..issuance_lib import verify_mint_signature
from ..messages import (
    DeployAndMint,
    Excesses,
    InternalMintRequest,
    MintItem,
    decode_message,
    read_op,
    unwrap_bounced,
)
from .enums import BouncePolicy
from .storage import CODE_NAME, PendingIssuanceStorage

logger = logging.getLogger(__name__)


class PendingIssuance(Actor):
    """
    One-time mint placeholder for a single prospective asset.

    Its address is derived from its initial storage, so the signer can tell the
    owner where to send the mint before the account exists, and a second attempt
    with the same parameters reaches this same instance.
    """

    CODE_NAME = CODE_NAME

    def __init__(self, code: CodeTemplate, storage: PendingIssuanceStorage) -> None:
        super().__init__(code, storage)
        self.storage: PendingIssuanceStorage = storage
        self.bounce_policy = BouncePolicy(code.variant or BouncePolicy.REFUND_ONLY)

    @classmethod
    def from_state_init(cls, code: CodeTemplate, data: bytes) -> PendingIssuance:
        return cls(code, PendingIssuanceStorage.decode(data))

    def receive(self, ctx: ExecutionContext, message: InboundMessage) -> None:
        if message.bounced:
            self._on_bounce(ctx, message)
            return

        msg = decode_message(message.body)
        if msg is None:
            return  # plain top-up
        if isinstance(msg, (DeployAndMint, MintItem)):
            self._mint(ctx, message, query_id=msg.query_id, signature=msg.signature)
        else:
            raise ProtocolError(ErrorCode.UNKNOWN_OP, type(msg).__name__)

    def _check_mint_preconditions(
        self, ctx: ExecutionContext, message: InboundMessage, signature: bytes
    ) -> bytes:
        s = self.storage
        ensure(
            s.activation_time == 0 or ctx.now >= s.activation_time,
            ErrorCode.NOT_YET_ACTIVE,
        )
        ensure(not s.minted, ErrorCode.ALREADY_MINTED)
        ensure(message.src == s.owner, ErrorCode.NOT_OWNER)
        ensure(message.value >= s.price, ErrorCode.INSUFFICIENT_FUNDS)
        if s.content is None:
            raise ProtocolError(ErrorCode.CONTENT_MISSING)
        ensure(
            verify_mint_signature(
                public_key=s.signer_public_key,
                content=s.content,
                price=s.price,
                owner=s.owner,
                signature=signature,
            ),
            ErrorCode.INVALID_SIGNATURE,
        )
        return s.content

    def _mint(
        self,
        ctx: ExecutionContext,
        message: InboundMessage,
        *,
        query_id: int,
        signature: bytes,
    ) -> None:
        ctx.consume_gas(const.GAS_PENDING_MINT)
        content = self._check_mint_preconditions(ctx, message, signature)

        forward = checked_sub(
            ctx.balance,
            const.MIN_RESERVE + ctx.forward_fee,
            ErrorCode.INSUFFICIENT_FUNDS,
        )
        ensure(forward > 0, ErrorCode.INSUFFICIENT_FUNDS)

        self.storage = dataclasses.replace(self.storage, minted=True, content=None)
        ctx.send(
            self.storage.issuer,
            forward,
            InternalMintRequest(
                query_id=query_id,
                price=self.storage.price,
                owner=self.storage.owner,
                content=content,
            ).encode(),
            bounce=True,
        )

    def _on_bounce(self, ctx: ExecutionContext, message: InboundMessage) -> None:
        body = unwrap_bounced(message.body)
        if read_op(body) != const.OP_INTERNAL_MINT_ITEM:
            return

        ctx.consume_gas(const.GAS_PENDING_BOUNCE)
        request = InternalMintRequest.decode_payload(body[const.OP_SIZE :])

        if self.bounce_policy is BouncePolicy.RESET_FOR_RETRY:
            if not request.content:
                raise ProtocolError(ErrorCode.CONTENT_MISSING, "bounced payload")
            self.storage = dataclasses.replace(
                self.storage, minted=False, content=request.content
            )

        refund = checked_sub(
            ctx.balance,
            max(ctx.original_balance, const.MIN_RESERVE) + ctx.forward_fee,
            ErrorCode.INSUFFICIENT_FUNDS,
        )
        if refund == 0:
            logger.debug("Bounce at %s left nothing to refund", ctx.my_address)
            return
        ctx.send(
            self.storage.owner,
            refund,
            Excesses(query_id=request.query_id).encode(),
            bounce=False,
        )
