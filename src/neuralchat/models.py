from datetime import datetime, timezone
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Pending(BaseModel):
    """Marker for the single message still awaiting its remote confirmation."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["pending"] = "pending"


class Confirmed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["confirmed"] = "confirmed"
    value: str


MessageId: TypeAlias = Pending | Confirmed


class ChatSummary(BaseModel):
    id: str
    title: str
    created_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ChatSummary":
        return cls(
            id=str(data["_id"]),
            title=data.get("title") or "",
            created_at=data.get("createdAt"),
        )


class MessageRecord(BaseModel):
    id: MessageId
    prompt: str
    response: str | None = None
    model: str
    created_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return isinstance(self.id, Pending)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "MessageRecord":
        return cls(
            id=Confirmed(value=str(data["_id"])),
            prompt=data.get("prompt") or "",
            response=data.get("response"),
            model=data.get("model") or "",
            created_at=data.get("createdAt"),
        )


class CreateChatResult(BaseModel):
    chat_id: str
    title: str
    response: str
    message_id: str | None = None
    created_at: datetime | None = None


class SendMessageResult(BaseModel):
    response: str
    message_id: str | None = None
    created_at: datetime | None = None
