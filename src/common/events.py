from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeAlias


@dataclass(frozen=True, slots=True)
class ChatListChangedEvent:
    count: int
    reason: str


@dataclass(frozen=True, slots=True)
class TimelineChangedEvent:
    session_id: str | None
    count: int
    reason: str


@dataclass(frozen=True, slots=True)
class ActiveSessionChangedEvent:
    session_id: str | None


@dataclass(frozen=True, slots=True)
class SendStateChangedEvent:
    state: str


@dataclass(frozen=True, slots=True)
class ModelChangedEvent:
    model: str


@dataclass(frozen=True, slots=True)
class LoadStateEvent:
    source: str
    state: str


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    message: str
    source: str | None = None


Event: TypeAlias = (
    ChatListChangedEvent
    | TimelineChangedEvent
    | ActiveSessionChangedEvent
    | SendStateChangedEvent
    | ModelChangedEvent
    | LoadStateEvent
    | ErrorEvent
)
EventCallback: TypeAlias = Callable[[Event], None] | None


class EventEmitter:
    def __init__(self, callback: EventCallback = None):
        self._callback = callback

    def emit(self, event: Event) -> None:
        if self._callback is not None:
            self._callback(event)
