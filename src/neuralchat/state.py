from enum import Enum

from common.events import ActiveSessionChangedEvent, EventEmitter


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class ActiveSession:
    """The one chat the client is looking at; ``None`` means a new, uncreated chat."""

    def __init__(self, emitter: EventEmitter | None = None):
        self._current: str | None = None
        self.emitter = emitter or EventEmitter()

    @property
    def current(self) -> str | None:
        return self._current

    def set(self, chat_id: str | None) -> None:
        if chat_id == self._current:
            return
        self._current = chat_id
        self.emitter.emit(ActiveSessionChangedEvent(session_id=chat_id))
