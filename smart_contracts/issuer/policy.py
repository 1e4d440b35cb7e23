"""Mint policy strategies of the issuer. Both answer `can_mint(now)`."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass

from ..errors import ErrorCode


class PolicyKind(enum.IntEnum):
    TOGGLE = 0
    TIME_GATE = 1


class MintPolicy(abc.ABC):
    __slots__ = ()

    kind: PolicyKind

    @abc.abstractmethod
    def can_mint(self, now: int) -> bool: ...

    @property
    @abc.abstractmethod
    def rejection_code(self) -> ErrorCode: ...

    @property
    @abc.abstractmethod
    def value(self) -> int: ...

    def toggled(self, enabled: bool) -> MintPolicy:  # noqa: FBT001
        return ToggleGate(enabled=enabled)

    def rescheduled(self, start_time: int) -> MintPolicy:
        return TimeGate(start_time=start_time)

    @staticmethod
    def from_kind(kind: int, value: int) -> MintPolicy:
        if kind == PolicyKind.TOGGLE:
            return ToggleGate(enabled=bool(value))
        if kind == PolicyKind.TIME_GATE:
            return TimeGate(start_time=value)
        raise ValueError(f"Unknown mint policy kind: {kind}")


@dataclass(frozen=True, slots=True)
class ToggleGate(MintPolicy):
    enabled: bool = True

    kind = PolicyKind.TOGGLE

    def can_mint(self, now: int) -> bool:
        return self.enabled

    @property
    def rejection_code(self) -> ErrorCode:
        return ErrorCode.MINT_DISABLED

    @property
    def value(self) -> int:
        return int(self.enabled)


@dataclass(frozen=True, slots=True)
class TimeGate(MintPolicy):
    start_time: int = 0

    kind = PolicyKind.TIME_GATE

    def can_mint(self, now: int) -> bool:
        return now >= self.start_time

    @property
    def rejection_code(self) -> ErrorCode:
        return ErrorCode.NOT_YET_ACTIVE

    @property
    def value(self) -> int:
        return self.start_time
