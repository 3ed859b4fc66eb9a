import logging

from common.events import ChatListChangedEvent, ErrorEvent, EventEmitter, LoadStateEvent
from neuralchat.gateway import ChatGateway, GatewayError
from neuralchat.models import ChatSummary
from neuralchat.state import LoadState

logger = logging.getLogger(__name__)


class ChatListStore:
    """Most-recent-first list of the user's chats.

    Removal happens only after the remote delete succeeds, so a failed delete
    needs no rollback.
    """

    def __init__(self, gateway: ChatGateway, emitter: EventEmitter | None = None):
        self.gateway = gateway
        self.emitter = emitter or EventEmitter()
        self.chats: list[ChatSummary] = []
        self.load_state = LoadState.IDLE
        self.deleting: set[str] = set()

    def get(self, chat_id: str) -> ChatSummary | None:
        for chat in self.chats:
            if chat.id == chat_id:
                return chat
        return None

    def clear(self) -> None:
        self.chats = []
        self._set_load_state(LoadState.IDLE)
        self.emitter.emit(ChatListChangedEvent(count=0, reason="clear"))

    async def load(self) -> None:
        self._set_load_state(LoadState.LOADING)
        try:
            chats = await self.gateway.list_chats()
        except GatewayError as e:
            logger.warning(f"Failed to load chats: {e}")
            self.chats = []
            self._set_load_state(LoadState.FAILED)
            self.emitter.emit(ChatListChangedEvent(count=0, reason="load"))
            return

        seen: set[str] = set()
        self.chats = []
        for chat in chats:
            if chat.id in seen:
                continue
            seen.add(chat.id)
            self.chats.append(chat)
        self._set_load_state(LoadState.LOADED)
        self.emitter.emit(ChatListChangedEvent(count=len(self.chats), reason="load"))

    def prepend_local(self, summary: ChatSummary) -> None:
        self.chats = [summary] + [c for c in self.chats if c.id != summary.id]
        self.emitter.emit(ChatListChangedEvent(count=len(self.chats), reason="prepend"))

    async def remove_local(self, chat_id: str) -> bool:
        self.deleting.add(chat_id)
        try:
            await self.gateway.delete_chat(chat_id)
        except GatewayError as e:
            logger.warning(f"Failed to delete chat {chat_id}: {e}")
            self.emitter.emit(ErrorEvent(message=str(e), source="delete"))
            return False
        finally:
            self.deleting.discard(chat_id)

        self.chats = [c for c in self.chats if c.id != chat_id]
        self.emitter.emit(ChatListChangedEvent(count=len(self.chats), reason="remove"))
        return True

    def _set_load_state(self, state: LoadState) -> None:
        self.load_state = state
        self.emitter.emit(LoadStateEvent(source="chats", state=state.value))
