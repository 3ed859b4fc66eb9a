import logging
from typing import Any

import httpx
from pydantic import ValidationError

from neuralchat.config import (
    CHAT_MESSAGE_PATH,
    CHAT_MESSAGES_PATH,
    CHAT_PATH,
    LIST_CHATS_PATH,
    LOGIN_PATH,
    LOGOUT_PATH,
    NEW_CHAT_MESSAGE_PATH,
    REGISTER_PATH,
    ClientConfig,
)
from neuralchat.models import ChatSummary, CreateChatResult, MessageRecord, SendMessageResult

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"HTTP {response.status_code} for {response.request.method} {response.request.url.path}"


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


class ChatGateway:
    """Async HTTP client for the remote chat store.

    Every failure, whether an error status, a transport problem or a payload
    that does not parse, surfaces as ``GatewayError``.
    """

    def __init__(self, config: ClientConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config or ClientConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json", "User-Agent": "neuralchat/0.1"}
            if self.config.token:
                headers["Authorization"] = f"Bearer {self.config.token}"
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.config.timeout),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, json: dict | None = None) -> dict[str, Any]:
        try:
            response = await self.client.request(method, path, json=json)
        except httpx.RequestError as e:
            raise GatewayError(f"{method} {path} failed: {e}") from e

        logger.debug(f"{method} {path} -> {response.status_code}")
        if response.is_error:
            raise GatewayError(_error_message(response), status_code=response.status_code)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError(f"{method} {path} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise GatewayError(f"{method} {path} returned {type(data).__name__}, expected object")
        return data

    async def probe(self) -> None:
        await self._request("GET", self.config.probe_path)

    async def list_chats(self) -> list[ChatSummary]:
        data = await self._request("GET", LIST_CHATS_PATH)
        try:
            return [ChatSummary.from_api(item) for item in data.get("chats") or []]
        except (KeyError, TypeError, ValidationError) as e:
            raise GatewayError(f"Malformed chat list: {e}") from e

    async def list_messages(self, chat_id: str) -> list[MessageRecord]:
        data = await self._request("GET", CHAT_MESSAGES_PATH.format(chat_id=chat_id))
        try:
            return [MessageRecord.from_api(item) for item in data.get("prompts") or []]
        except (KeyError, TypeError, ValidationError) as e:
            raise GatewayError(f"Malformed message list for chat {chat_id}: {e}") from e

    async def create_chat(self, prompt: str, model: str) -> CreateChatResult:
        data = await self._request("POST", NEW_CHAT_MESSAGE_PATH, json={"prompt": prompt, "model": model})
        try:
            return CreateChatResult(
                chat_id=str(data["chatId"]),
                title=data.get("title") or prompt,
                response=data.get("response") or "",
                message_id=_optional_str(data.get("messageId")),
                created_at=data.get("createdAt"),
            )
        except (KeyError, ValidationError) as e:
            raise GatewayError(f"Malformed create-chat response: {e}") from e

    async def send_message(self, chat_id: str, prompt: str, model: str) -> SendMessageResult:
        data = await self._request(
            "POST", CHAT_MESSAGE_PATH.format(chat_id=chat_id), json={"prompt": prompt, "model": model}
        )
        try:
            return SendMessageResult(
                response=data.get("response") or "",
                message_id=_optional_str(data.get("messageId")),
                created_at=data.get("createdAt"),
            )
        except ValidationError as e:
            raise GatewayError(f"Malformed send-message response: {e}") from e

    async def delete_chat(self, chat_id: str) -> None:
        await self._request("DELETE", CHAT_PATH.format(chat_id=chat_id))

    async def login(self, email: str, password: str, user_name: str = "") -> None:
        """Start a server-side session.

        The server answers with a session cookie, which the underlying
        ``httpx.AsyncClient`` keeps and sends on every later request.
        """
        await self._request(
            "POST", LOGIN_PATH, json={"userName": user_name, "email": email, "password": password}
        )
        logger.debug(f"Session cookies held: {sorted(self.client.cookies.keys())}")

    async def register(self, user_name: str, email: str, password: str) -> None:
        await self._request(
            "POST", REGISTER_PATH, json={"userName": user_name, "email": email, "password": password}
        )

    async def logout(self) -> None:
        try:
            await self._request("POST", LOGOUT_PATH)
        finally:
            self.client.cookies.clear()
