import logging
from enum import Enum

from common.events import ErrorEvent, EventEmitter, SendStateChangedEvent
from common.ids import generate_id
from neuralchat.gateway import ChatGateway, GatewayError
from neuralchat.model_selector import ModelSelector
from neuralchat.models import ChatSummary, CreateChatResult, utc_now
from neuralchat.state import ActiveSession
from neuralchat.stores.chat_list import ChatListStore
from neuralchat.stores.timeline import MessageTimelineStore

logger = logging.getLogger(__name__)


class SendState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"


class SendController:
    """Runs one optimistic send at a time.

    The prompt shows up in the timeline before the remote call returns and is
    either confirmed or retracted once it does. Chat and model are captured at
    submit time; changing either mid-flight does not redirect the call.
    """

    def __init__(
        self,
        gateway: ChatGateway,
        active: ActiveSession,
        chat_list: ChatListStore,
        timeline: MessageTimelineStore,
        models: ModelSelector,
        emitter: EventEmitter | None = None,
    ):
        self.gateway = gateway
        self.active = active
        self.chat_list = chat_list
        self.timeline = timeline
        self.models = models
        self.emitter = emitter or EventEmitter()
        self.state = SendState.IDLE
        self.draft = ""
        self._generation = 0

    @property
    def can_compose(self) -> bool:
        return self.state is SendState.IDLE

    async def submit(self, prompt: str | None = None) -> bool:
        text = (self.draft if prompt is None else prompt).strip()
        if not text or self.state is not SendState.IDLE:
            return False

        chat_id = self.active.current
        model = self.models.current
        self.timeline.append_temporary(text, model)
        self.draft = ""
        generation = self._generation
        self._set_state(SendState.SENDING)

        try:
            if chat_id is None:
                result = await self.gateway.create_chat(text, model)
            else:
                result = await self.gateway.send_message(chat_id, text, model)
        except GatewayError as e:
            if generation != self._generation:
                logger.debug(f"Ignoring failure of abandoned send to chat {chat_id or '<new>'}: {e}")
                return False
            logger.warning(f"Send to chat {chat_id or '<new>'} failed: {e}")
            self.timeline.reconcile_failure()
            self.emitter.emit(ErrorEvent(message=str(e), source="send"))
            self._set_state(SendState.IDLE)
            return False
        except BaseException:
            if generation == self._generation:
                self.timeline.reconcile_failure()
                self._set_state(SendState.IDLE)
            raise

        if generation != self._generation:
            logger.debug(f"Dropping result of abandoned send to chat {chat_id or '<new>'}")
            return False

        created_at = result.created_at or utc_now()
        message_id = result.message_id or generate_id()
        if isinstance(result, CreateChatResult):
            if self.active.current is None:
                self.active.set(result.chat_id)
            self.chat_list.prepend_local(
                ChatSummary(id=result.chat_id, title=result.title, created_at=utc_now())
            )
            self.timeline.reconcile_success(
                result.response, message_id, created_at, session_id=result.chat_id
            )
            logger.info(f"Created chat {result.chat_id} ({result.title!r})")
        else:
            self.timeline.reconcile_success(result.response, message_id, created_at)

        self._set_state(SendState.IDLE)
        return True

    def reset(self) -> None:
        """Abandon the send in flight, if any.

        The pending record is retracted now and whatever the remote call
        later returns is dropped.
        """
        self._generation += 1
        self.draft = ""
        self.timeline.reconcile_failure()
        if self.state is not SendState.IDLE:
            self._set_state(SendState.IDLE)

    def _set_state(self, state: SendState) -> None:
        self.state = state
        self.emitter.emit(SendStateChangedEvent(state=state.value))
