import asyncio

import pytest

from neuralchat.client import ChatClient
from neuralchat.config import ClientConfig
from neuralchat.gateway import GatewayError
from neuralchat.models import (
    ChatSummary,
    Confirmed,
    CreateChatResult,
    MessageRecord,
    SendMessageResult,
    utc_now,
)


class FakeGateway:
    """In-memory chat store with scriptable failures and hold points.

    ``fail`` holds call keys that raise ``GatewayError``; ``gates`` maps call
    keys to events the call waits on before answering. A key is either the
    method name or ``"<method>:<chat id>"``.
    """

    def __init__(self):
        self.chats: list[ChatSummary] = []
        self.messages: dict[str, list[MessageRecord]] = {}
        self.replies: dict[str, str] = {}
        self.calls: list[tuple] = []
        self.fail: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self._chat_counter = 0
        self._message_counter = 0
        self.closed = False
        self.signed_in = True

    def add_chat(self, chat_id: str, title: str, prompts: list[str] | None = None) -> ChatSummary:
        chat = ChatSummary(id=chat_id, title=title, created_at=utc_now())
        self.chats.insert(0, chat)
        self.messages[chat_id] = [
            self._record(prompt, self.reply_for(prompt), "llama3") for prompt in prompts or []
        ]
        return chat

    def reply_for(self, prompt: str) -> str:
        return self.replies.get(prompt, f"echo: {prompt}")

    def _record(self, prompt: str, response: str, model: str) -> MessageRecord:
        self._message_counter += 1
        return MessageRecord(
            id=Confirmed(value=f"m{self._message_counter}"),
            prompt=prompt,
            response=response,
            model=model,
            created_at=utc_now(),
        )

    async def _enter(self, method: str, chat_id: str | None = None) -> None:
        keys = [method] if chat_id is None else [method, f"{method}:{chat_id}"]
        for key in keys:
            gate = self.gates.get(key)
            if gate is not None:
                await gate.wait()
        for key in keys:
            if key in self.fail:
                raise GatewayError(f"{key} failed", status_code=500)

    async def probe(self) -> None:
        self.calls.append(("probe",))
        await self._enter("probe")
        if not self.signed_in:
            raise GatewayError("Not authorized", status_code=401)

    async def login(self, email: str, password: str, user_name: str = "") -> None:
        self.calls.append(("login", email))
        await self._enter("login")
        self.signed_in = True

    async def register(self, user_name: str, email: str, password: str) -> None:
        self.calls.append(("register", user_name, email))
        await self._enter("register")

    async def list_chats(self) -> list[ChatSummary]:
        self.calls.append(("list_chats",))
        await self._enter("list_chats")
        return list(self.chats)

    async def list_messages(self, chat_id: str) -> list[MessageRecord]:
        self.calls.append(("list_messages", chat_id))
        await self._enter("list_messages", chat_id)
        return list(self.messages.get(chat_id, []))

    async def create_chat(self, prompt: str, model: str) -> CreateChatResult:
        self.calls.append(("create_chat", prompt, model))
        await self._enter("create_chat")
        self._chat_counter += 1
        chat_id = f"s{self._chat_counter}"
        response = self.reply_for(prompt)
        self.chats.insert(0, ChatSummary(id=chat_id, title=prompt, created_at=utc_now()))
        record = self._record(prompt, response, model)
        self.messages[chat_id] = [record]
        return CreateChatResult(chat_id=chat_id, title=prompt, response=response, message_id=record.id.value)

    async def send_message(self, chat_id: str, prompt: str, model: str) -> SendMessageResult:
        self.calls.append(("send_message", chat_id, prompt, model))
        await self._enter("send_message", chat_id)
        response = self.reply_for(prompt)
        record = self._record(prompt, response, model)
        self.messages.setdefault(chat_id, []).append(record)
        return SendMessageResult(response=response, message_id=record.id.value, created_at=record.created_at)

    async def delete_chat(self, chat_id: str) -> None:
        self.calls.append(("delete_chat", chat_id))
        await self._enter("delete_chat", chat_id)
        self.chats = [c for c in self.chats if c.id != chat_id]
        self.messages.pop(chat_id, None)

    async def logout(self) -> None:
        self.calls.append(("logout",))
        await self._enter("logout")
        self.signed_in = False

    async def aclose(self) -> None:
        self.closed = True


async def settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        base_url="http://chat.test",
        token="t0k3n",
        timeout=None,
        model="llama3",
        email=None,
        password=None,
    )


@pytest.fixture
def client(config, gateway, events) -> ChatClient:
    return ChatClient(config, gateway=gateway, on_event=events.append)
