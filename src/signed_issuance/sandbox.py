"""
In-process host network for the issuance actors.

The sandbox keeps accounts and balances, delivers messages one at a time from a
FIFO queue and applies the host rules the actors rely on:

- a message carrying a state init that hashes to its destination deploys the
  actor before delivery;
- gas and forward fees are charged to the account that spends them;
- a rejected message rolls back the actor's storage and balance (consumed gas
  is still charged) and, when bounceable, returns its value minus fees to the
  sender with a bounce marker.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, Final

from algosdk import encoding

from smart_contracts import constants as const
from smart_contracts.actor_common import Actor, ExecutionContext, InboundMessage
from smart_contracts.errors import ErrorCode, ProtocolError
from smart_contracts.issuance_lib import StateInit, sha512_256
from smart_contracts.messages import bounce_body, unwrap_bounced
from smart_contracts.registry import instantiate

from .errors import (
    InsufficientWalletBalanceError,
    SandboxError,
    TransactionNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_NOW: Final[int] = 1_700_000_000
MAX_DELIVERIES: Final[int] = 1_000


@dataclass(frozen=True, slots=True)
class NetworkConfig:
    """Host pricing. Amounts are micro-units."""

    gas_price: int = 1
    forward_fee: int = 1_000

    def __post_init__(self) -> None:
        if self.gas_price < 0 or self.forward_fee < 0:
            raise ValueError("gas_price and forward_fee must be non-negative")


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    dest: str
    value: int
    body: bytes
    bounce: bool


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    Outcome of delivering one message.

    `exit_code` is 0 on success, the rejection code on failure and None when no
    code ran (wallets and uninitialised accounts).
    """

    src: str
    dest: str
    value: int
    op: int | None
    success: bool
    exit_code: int | None
    deployed: bool
    bounced: bool
    out_messages: tuple[OutboundMessage, ...]
    fees: int

    @property
    def aborted(self) -> bool:
        return not self.success


@dataclass(slots=True)
class SendResult:
    """Every transaction caused by one external send, in delivery order."""

    transactions: list[Transaction] = field(default_factory=list)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.transactions)

    def __len__(self) -> int:
        return len(self.transactions)

    def filter(self, **criteria: Any) -> list[Transaction]:
        """
        Transactions whose fields match all `criteria`.

        A criterion is either a value compared for equality or a predicate
        called with the field value.
        """
        unknown = set(criteria) - set(Transaction.__dataclass_fields__)
        if unknown:
            raise TypeError(f"Unknown transaction fields: {sorted(unknown)}")
        return [tx for tx in self.transactions if _matches(tx, criteria)]

    def has(self, **criteria: Any) -> bool:
        return bool(self.filter(**criteria))

    def find(self, **criteria: Any) -> Transaction:
        matches = self.filter(**criteria)
        if not matches:
            raise TransactionNotFoundError(
                f"No transaction matches {criteria!r}; got {self.describe()}"
            )
        return matches[0]

    def describe(self) -> list[str]:
        return [
            f"{tx.src[:6]}->{tx.dest[:6]} op={_format_op(tx.op)} "
            f"value={tx.value} success={tx.success} exit={tx.exit_code}"
            for tx in self.transactions
        ]


def _matches(tx: Transaction, criteria: dict[str, Any]) -> bool:
    for name, expected in criteria.items():
        actual = getattr(tx, name)
        if callable(expected):
            if not expected(actual):
                return False
        elif actual != expected:
            return False
    return True


def _format_op(op: int | None) -> str:
    return "-" if op is None else f"0x{op:08x}"


def peek_op(body: bytes) -> int | None:
    """Op-code of a (possibly bounced) body without decoding the payload."""
    body = unwrap_bounced(body)
    if len(body) < const.OP_SIZE:
        return None
    return int.from_bytes(body[: const.OP_SIZE], "big")


@dataclass(slots=True)
class _Account:
    address: str
    balance: int = 0
    actor: Actor | None = None
    wallet: bool = False


@dataclass(frozen=True, slots=True)
class _Envelope:
    src: str
    dest: str
    value: int
    body: bytes
    bounce: bool
    bounced: bool = False
    state_init: StateInit | None = None


class _HostContext(ExecutionContext):
    """Execution context of one delivery. Spending is checked against `balance`."""

    def __init__(
        self,
        *,
        my_address: str,
        now: int,
        balance: int,
        original_balance: int,
        config: NetworkConfig,
    ) -> None:
        self.my_address = my_address
        self.now = now
        self.balance = balance
        self.original_balance = original_balance
        self.forward_fee = config.forward_fee
        self.gas_price = config.gas_price
        self.gas_used = 0
        self.outbound: list[OutboundMessage] = []

    @property
    def gas_fee(self) -> int:
        return self.gas_used * self.gas_price

    def consume_gas(self, units: int) -> None:
        cost = units * self.gas_price
        self.gas_used += units
        if cost > self.balance:
            raise ProtocolError(ErrorCode.INSUFFICIENT_FUNDS, "out of gas")
        self.balance -= cost

    def send(self, dest: str, amount: int, body: bytes, *, bounce: bool = True) -> None:
        if amount <= 0:
            raise ProtocolError(ErrorCode.INSUFFICIENT_FUNDS, "non-positive message value")
        total = amount + self.forward_fee
        if total > self.balance:
            raise ProtocolError(
                ErrorCode.INSUFFICIENT_FUNDS, f"cannot send {amount} from {self.balance}"
            )
        self.balance -= total
        self.outbound.append(OutboundMessage(dest=dest, value=amount, body=body, bounce=bounce))


class Sandbox:
    """
    Single-threaded host network.

    Messages caused by a delivery are queued behind it, so causally related
    messages are processed in order and each one sees the committed state of the
    previous ones. Balances plus collected fees only change through `wallet()`.
    """

    def __init__(self, config: NetworkConfig | None = None, *, now: int = DEFAULT_NOW) -> None:
        self.config = config or NetworkConfig()
        self.now = now
        self.fees_collected = 0
        self._accounts: dict[str, _Account] = {}

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def wallet(self, name: str, balance: int) -> str:
        """Create (or top up) a deterministic wallet account and return its address."""
        address = encoding.encode_address(sha512_256(b"signed-issuance/wallet/" + name.encode()))
        account = self._accounts.setdefault(address, _Account(address=address, wallet=True))
        if account.actor is not None:
            raise SandboxError(f"{address} is an actor, not a wallet")
        account.wallet = True
        account.balance += balance
        logger.debug("Wallet %r at %s funded with %d", name, address, balance)
        return address

    def balance(self, address: str) -> int:
        account = self._accounts.get(address)
        return account.balance if account else 0

    def is_deployed(self, address: str) -> bool:
        account = self._accounts.get(address)
        return account is not None and account.actor is not None

    def get_actor(self, address: str) -> Actor:
        account = self._accounts.get(address)
        if account is None or account.actor is None:
            raise SandboxError(f"No actor deployed at {address}")
        return account.actor

    def get_state(self, address: str) -> object:
        return self.get_actor(address).get_state()

    def total_value(self) -> int:
        return sum(a.balance for a in self._accounts.values()) + self.fees_collected

    def advance_time(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("time only moves forward")
        self.now += seconds
        return self.now

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------
    def send(
        self,
        sender: str,
        dest: str,
        value: int,
        body: bytes = b"",
        *,
        bounce: bool = True,
        state_init: StateInit | None = None,
    ) -> SendResult:
        """
        Send a message from a wallet and run the network until it is idle.

        Raises:
            SandboxError: If `sender` is not a wallet.
            InsufficientWalletBalanceError: If the wallet cannot pay value plus fee.
        """
        account = self._accounts.get(sender)
        if account is None or not account.wallet:
            raise SandboxError(f"{sender} is not a wallet")
        if value < 0:
            raise ValueError("value must be non-negative")
        cost = value + self.config.forward_fee
        if cost > account.balance:
            raise InsufficientWalletBalanceError(
                f"Wallet {sender} holds {account.balance}, needs {cost}"
            )
        account.balance -= cost
        self.fees_collected += self.config.forward_fee

        queue: deque[_Envelope] = deque(
            [_Envelope(sender, dest, value, body, bounce, state_init=state_init)]
        )
        result = SendResult()
        while queue:
            if len(result) >= MAX_DELIVERIES:
                raise SandboxError(f"Message chain exceeded {MAX_DELIVERIES} deliveries")
            tx, follow_ups = self._deliver(queue.popleft())
            result.transactions.append(tx)
            queue.extend(follow_ups)
        return result

    def _deliver(self, env: _Envelope) -> tuple[Transaction, list[_Envelope]]:
        account = self._accounts.setdefault(env.dest, _Account(address=env.dest))
        deployed = False
        if account.actor is None and not account.wallet and env.state_init is not None:
            if env.state_init.address == env.dest:
                try:
                    account.actor = instantiate(env.state_init.code, env.state_init.data)
                except ValueError as e:
                    # delivered as to any account without code
                    logger.warning("Cannot deploy at %s: %s", env.dest, e)
                else:
                    deployed = True
                    logger.debug("Deployed %s at %s", type(account.actor).__name__, env.dest)
            else:
                logger.warning("State init does not match %s, ignored", env.dest)

        if account.actor is None:
            return self._deliver_to_plain_account(account, env)
        return self._execute(account, env, deployed=deployed)

    def _deliver_to_plain_account(
        self, account: _Account, env: _Envelope
    ) -> tuple[Transaction, list[_Envelope]]:
        follow_ups: list[_Envelope] = []
        fees = 0
        success = True
        if account.wallet or not env.bounce or env.bounced:
            account.balance += env.value
        else:
            # uninitialised account without code: bounce instead of holding the value
            success = False
            refund = env.value - self.config.forward_fee
            if refund > 0:
                fees = self.config.forward_fee
                follow_ups.append(self._bounce_of(env, refund))
            else:
                fees = env.value
        self.fees_collected += fees
        tx = Transaction(
            src=env.src,
            dest=env.dest,
            value=env.value,
            op=peek_op(env.body),
            success=success,
            exit_code=None,
            deployed=False,
            bounced=env.bounced,
            out_messages=tuple(
                OutboundMessage(b.dest, b.value, b.body, b.bounce) for b in follow_ups
            ),
            fees=fees,
        )
        return tx, follow_ups

    def _execute(
        self, account: _Account, env: _Envelope, *, deployed: bool
    ) -> tuple[Transaction, list[_Envelope]]:
        actor = account.actor
        assert actor is not None
        pre_storage = actor.storage
        original_balance = account.balance
        ctx = _HostContext(
            my_address=account.address,
            now=self.now,
            balance=original_balance + env.value,
            original_balance=original_balance,
            config=self.config,
        )
        message = InboundMessage(
            src=env.src,
            dest=env.dest,
            value=env.value,
            body=env.body,
            bounced=env.bounced,
            bounceable=env.bounce,
        )

        follow_ups: list[_Envelope] = []
        try:
            ctx.consume_gas(const.GAS_BASE)
            actor.receive(ctx, message)
        except ProtocolError as e:
            actor.storage = pre_storage
            gas_fee = min(ctx.gas_fee, original_balance + env.value)
            account.balance = original_balance + env.value - gas_fee
            fees = gas_fee
            if env.bounce and not env.bounced:
                refund = env.value - gas_fee - self.config.forward_fee
                if refund > 0:
                    account.balance -= refund + self.config.forward_fee
                    fees += self.config.forward_fee
                    follow_ups.append(self._bounce_of(env, refund))
            self.fees_collected += fees
            logger.info(
                "%s rejected op %s from %s: %s (%d)",
                type(actor).__name__,
                _format_op(peek_op(env.body)),
                env.src,
                e.name,
                e.code,
            )
            tx = Transaction(
                src=env.src,
                dest=env.dest,
                value=env.value,
                op=peek_op(env.body),
                success=False,
                exit_code=int(e.code),
                deployed=deployed,
                bounced=env.bounced,
                out_messages=tuple(
                    OutboundMessage(b.dest, b.value, b.body, b.bounce) for b in follow_ups
                ),
                fees=fees,
            )
            return tx, follow_ups

        account.balance = ctx.balance
        fees = ctx.gas_fee + self.config.forward_fee * len(ctx.outbound)
        self.fees_collected += fees
        follow_ups = [
            _Envelope(
                src=account.address,
                dest=out.dest,
                value=out.value,
                body=out.body,
                bounce=out.bounce,
            )
            for out in ctx.outbound
        ]
        logger.debug(
            "%s processed op %s from %s, %d outbound",
            type(actor).__name__,
            _format_op(peek_op(env.body)),
            env.src,
            len(follow_ups),
        )
        tx = Transaction(
            src=env.src,
            dest=env.dest,
            value=env.value,
            op=peek_op(env.body),
            success=True,
            exit_code=0,
            deployed=deployed,
            bounced=env.bounced,
            out_messages=tuple(ctx.outbound),
            fees=fees,
        )
        return tx, follow_ups

    @staticmethod
    def _bounce_of(env: _Envelope, value: int) -> _Envelope:
        return _Envelope(
            src=env.dest,
            dest=env.src,
            value=value,
            body=bounce_body(env.body),
            bounce=False,
            bounced=True,
        )


def value_predicate(minimum: int | None = None, maximum: int | None = None) -> Callable[[int], bool]:
    """Predicate for `SendResult.find(value=...)` bounding a message value."""

    def check(value: int) -> bool:
        if minimum is not None and value < minimum:
            return False
        return maximum is None or value <= maximum

    return check
