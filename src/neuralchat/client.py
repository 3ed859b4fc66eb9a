from __future__ import annotations

import logging

from common.events import EventCallback, EventEmitter
from neuralchat.config import ClientConfig
from neuralchat.controller import SendController
from neuralchat.gateway import ChatGateway, GatewayError
from neuralchat.model_selector import ModelSelector
from neuralchat.probe import AuthState, SessionProbe
from neuralchat.state import ActiveSession
from neuralchat.stores.chat_list import ChatListStore
from neuralchat.stores.timeline import MessageTimelineStore

logger = logging.getLogger(__name__)

NEW_CONVERSATION_TITLE = "New Conversation"


class ChatClient:
    def __init__(
        self,
        config: ClientConfig | None = None,
        gateway: ChatGateway | None = None,
        on_event: EventCallback = None,
    ):
        self.config = config or ClientConfig()
        self.gateway = gateway or ChatGateway(self.config)
        self.emitter = EventEmitter(on_event)
        self.probe = SessionProbe(self.gateway)
        self.active = ActiveSession(self.emitter)
        self.models = ModelSelector(self.config.model, self.emitter)
        self.chat_list = ChatListStore(self.gateway, self.emitter)
        self.timeline = MessageTimelineStore(self.gateway, self.active, self.emitter)
        self.sender = SendController(
            self.gateway,
            self.active,
            self.chat_list,
            self.timeline,
            self.models,
            self.emitter,
        )

    @property
    def auth_state(self) -> AuthState:
        return self.probe.state

    @property
    def active_title(self) -> str:
        if self.active.current is None:
            return NEW_CONVERSATION_TITLE
        chat = self.chat_list.get(self.active.current)
        return chat.title if chat else NEW_CONVERSATION_TITLE

    async def start(self) -> AuthState:
        state = await self.probe.probe()
        if state is AuthState.AUTHENTICATED:
            await self.chat_list.load()
        return state

    async def new_chat(self) -> None:
        self.sender.draft = ""
        self.active.set(None)
        await self.timeline.load_for(None)

    async def select_chat(self, chat_id: str) -> None:
        if chat_id == self.active.current:
            return
        self.sender.draft = ""
        self.active.set(chat_id)
        await self.timeline.load_for(chat_id)

    async def delete_chat(self, chat_id: str) -> bool:
        removed = await self.chat_list.remove_local(chat_id)
        if removed and self.active.current == chat_id:
            self.active.set(None)
            await self.timeline.load_for(None)
        return removed

    async def send(self, prompt: str | None = None) -> bool:
        return await self.sender.submit(prompt)

    async def login(self, email: str, password: str, user_name: str = "") -> AuthState:
        """Sign in, then check the session the same way start-up does.

        A rejected sign-in raises ``GatewayError`` with the server's message.
        """
        await self.gateway.login(email, password, user_name)
        logger.info(f"Signed in as {email}")
        return await self.start()

    async def register(self, user_name: str, email: str, password: str) -> None:
        await self.gateway.register(user_name, email, password)
        logger.info(f"Registered {email}")

    async def logout(self) -> None:
        self.sender.reset()
        try:
            await self.gateway.logout()
        except GatewayError as e:
            logger.debug(f"Logout request failed: {e}")
        self.active.set(None)
        await self.timeline.load_for(None)
        self.chat_list.clear()
        self.probe.state = AuthState.UNAUTHENTICATED

    async def aclose(self) -> None:
        await self.gateway.aclose()
