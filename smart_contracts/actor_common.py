from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import ClassVar

from .constants import CODE_TEMPLATE_PREFIX
from .errors import ErrorCode, ProtocolError


def ensure(condition: bool, code: ErrorCode) -> None:  # noqa: FBT001
    if not condition:
        raise ProtocolError(code)


def checked_sub(a: int, b: int, code: ErrorCode) -> int:
    """Return a - b, rejecting with `code` instead of going negative."""
    result = a - b
    if result < 0:
        raise ProtocolError(code, f"{a} - {b} underflows")
    return result


@dataclass(frozen=True, slots=True)
class CodeTemplate:
    """
    Identity of the code an actor runs.

    The serialised form takes part in address derivation, so two templates that
    differ only in `variant` yield different accounts for identical state.
    """

    name: str
    version: int = 1
    variant: str | None = None

    def to_bytes(self) -> bytes:
        code = f"{self.name}/v{self.version}"
        if self.variant:
            code += f"/{self.variant}"
        return CODE_TEMPLATE_PREFIX + code.encode()

    @staticmethod
    def from_bytes(code: bytes) -> CodeTemplate:
        if not code.startswith(CODE_TEMPLATE_PREFIX):
            raise ValueError("Not a signed-issuance code template")
        parts = code[len(CODE_TEMPLATE_PREFIX) :].decode().split("/")
        if len(parts) not in (2, 3) or not parts[1].startswith("v"):
            raise ValueError(f"Malformed code template: {code!r}")
        try:
            version = int(parts[1][1:])
        except ValueError as e:
            raise ValueError(f"Malformed code template version: {code!r}") from e
        variant = parts[2] if len(parts) == 3 else None
        return CodeTemplate(name=parts[0], version=version, variant=variant)


@dataclass(frozen=True, slots=True)
class InboundMessage:
    """A message as seen by the actor it is delivered to."""

    src: str
    dest: str
    value: int
    body: bytes = b""
    bounced: bool = False
    bounceable: bool = True


class ExecutionContext(abc.ABC):
    """
    What the host network exposes to an actor while it processes one message.

    `balance` already includes the inbound value and drops as gas is consumed and
    messages are sent. `original_balance` is the balance before the message arrived.
    """

    my_address: str
    now: int
    balance: int
    original_balance: int
    forward_fee: int

    @abc.abstractmethod
    def consume_gas(self, units: int) -> None: ...

    @abc.abstractmethod
    def send(self, dest: str, amount: int, body: bytes, *, bounce: bool = True) -> None: ...


class Actor(abc.ABC):
    """
    Base class for a single-threaded, message-driven account.

    Storage is an immutable dataclass that handlers replace wholesale, which lets
    the host roll back a rejected message by restoring the previous reference.
    """

    CODE_NAME: ClassVar[str]

    def __init__(self, code: CodeTemplate, storage: object) -> None:
        self.code = code
        self.storage = storage

    @classmethod
    @abc.abstractmethod
    def from_state_init(cls, code: CodeTemplate, data: bytes) -> Actor: ...

    @abc.abstractmethod
    def receive(self, ctx: ExecutionContext, message: InboundMessage) -> None: ...

    def get_state(self) -> object:
        return self.storage
