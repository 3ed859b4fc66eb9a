import logging
from datetime import datetime

from common.events import EventEmitter, LoadStateEvent, TimelineChangedEvent
from neuralchat.gateway import ChatGateway, GatewayError
from neuralchat.models import Confirmed, MessageRecord, Pending
from neuralchat.state import ActiveSession, LoadState

logger = logging.getLogger(__name__)


class MessageTimelineStore:
    """Ordered prompt/response pairs of the active chat.

    Holds at most one pending record. The pending record belongs to the chat
    that was active when it was appended and is only ever shown in that chat's
    timeline.
    """

    def __init__(self, gateway: ChatGateway, active: ActiveSession, emitter: EventEmitter | None = None):
        self.gateway = gateway
        self.active = active
        self.emitter = emitter or EventEmitter()
        self.messages: list[MessageRecord] = []
        self.session_id: str | None = None
        self.load_state = LoadState.IDLE
        self._pending: MessageRecord | None = None
        self._pending_session_id: str | None = None

    @property
    def pending(self) -> MessageRecord | None:
        return self._pending

    async def load_for(self, session_id: str | None) -> None:
        self.session_id = session_id
        self.messages = self._with_pending(session_id, [])

        if session_id is None:
            self._set_load_state(LoadState.IDLE)
            self._changed("clear")
            return

        self._set_load_state(LoadState.LOADING)
        self._changed("reset")
        try:
            messages = await self.gateway.list_messages(session_id)
        except GatewayError as e:
            if self._is_stale(session_id):
                return
            logger.warning(f"Failed to load messages for chat {session_id}: {e}")
            self.messages = self._with_pending(session_id, [])
            self._set_load_state(LoadState.FAILED)
            self._changed("load")
            return

        if self._is_stale(session_id):
            return
        self.session_id = session_id
        self.messages = self._with_pending(session_id, messages)
        self._set_load_state(LoadState.LOADED)
        self._changed("load")

    def append_temporary(self, prompt: str, model: str) -> MessageRecord:
        if self._pending is not None:
            raise RuntimeError("A message is already awaiting confirmation")
        record = MessageRecord(id=Pending(), prompt=prompt, response=None, model=model)
        self._pending = record
        self._pending_session_id = self.active.current
        self.messages.append(record)
        self._changed("append")
        return record

    def reconcile_success(
        self,
        response: str,
        assigned_id: str,
        created_at: datetime | None,
        session_id: str | None = None,
    ) -> MessageRecord | None:
        """Swap the pending record for its confirmed form.

        ``session_id`` is the id the remote store gave a chat that did not
        exist when the message was sent.
        """
        pending, origin = self._take_pending()
        if pending is None:
            logger.warning("No pending message to confirm")
            return None

        confirmed = MessageRecord(
            id=Confirmed(value=assigned_id),
            prompt=pending.prompt,
            response=response,
            model=pending.model,
            created_at=created_at,
        )
        if self.session_id != origin:
            logger.debug(f"Confirmed message for chat {origin or session_id} is no longer on screen")
            return confirmed

        self.messages = [confirmed if m.is_pending else m for m in self.messages]
        if session_id is not None and origin is None:
            self.session_id = session_id
        self._changed("confirm")
        return confirmed

    def reconcile_failure(self) -> None:
        pending, origin = self._take_pending()
        if pending is None:
            return
        if self.session_id != origin:
            return
        self.messages = [m for m in self.messages if not m.is_pending]
        self._changed("rollback")

    def _take_pending(self) -> tuple[MessageRecord | None, str | None]:
        pending, origin = self._pending, self._pending_session_id
        self._pending = None
        self._pending_session_id = None
        return pending, origin

    def _with_pending(self, session_id: str | None, messages: list[MessageRecord]) -> list[MessageRecord]:
        messages = list(messages)
        if self._pending is not None and self._pending_session_id == session_id:
            messages.append(self._pending)
        return messages

    def _is_stale(self, session_id: str) -> bool:
        if self.active.current == session_id:
            return False
        logger.debug(f"Discarding stale messages for chat {session_id}")
        return True

    def _set_load_state(self, state: LoadState) -> None:
        self.load_state = state
        self.emitter.emit(LoadStateEvent(source="messages", state=state.value))

    def _changed(self, reason: str) -> None:
        self.emitter.emit(
            TimelineChangedEvent(session_id=self.session_id, count=len(self.messages), reason=reason)
        )
