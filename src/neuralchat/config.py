import logging
import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelInfo:
    key: str
    label: str
    sub: str


MODELS = (
    ModelInfo(key="llama3", label="Llama 3.3", sub="70B Versatile"),
    ModelInfo(key="llama3fast", label="Llama 3.1", sub="8B Instant"),
    ModelInfo(key="qwen", label="Qwen 3", sub="32B"),
)
MODEL_KEYS = tuple(m.key for m in MODELS)
DEFAULT_MODEL = "llama3"

LIST_CHATS_PATH = "/api/chat/all"
CHAT_MESSAGES_PATH = "/api/chat/{chat_id}/messages"
NEW_CHAT_MESSAGE_PATH = "/api/chat/new/message"
CHAT_MESSAGE_PATH = "/api/chat/{chat_id}/message"
CHAT_PATH = "/api/chat/{chat_id}"
LOGIN_PATH = "/api/auth/login"
REGISTER_PATH = "/api/auth/register"
LOGOUT_PATH = "/api/auth/logout"


class ConfigError(Exception):
    pass


def get_optional_env(name: str, default: str | None) -> str | None:
    return os.environ.get(name) or default


def _timeout_from_env() -> float | None:
    raw = get_optional_env("NEURALCHAT_TIMEOUT", None)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"NEURALCHAT_TIMEOUT must be a number, got {raw!r}") from None


@dataclass
class ClientConfig:
    base_url: str = field(
        default_factory=lambda: get_optional_env("NEURALCHAT_BASE_URL", "http://localhost:5000")
    )
    token: str | None = field(default_factory=lambda: get_optional_env("NEURALCHAT_TOKEN", None))
    email: str | None = field(default_factory=lambda: get_optional_env("NEURALCHAT_EMAIL", None))
    password: str | None = field(
        default_factory=lambda: get_optional_env("NEURALCHAT_PASSWORD", None), repr=False
    )
    timeout: float | None = field(default_factory=_timeout_from_env)
    model: str = field(default_factory=lambda: get_optional_env("NEURALCHAT_MODEL", DEFAULT_MODEL))
    probe_path: str = LIST_CHATS_PATH

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        config = cls()
        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)
        return config

    def validate(self) -> None:
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("timeout must be > 0 when set")
        if self.model not in MODEL_KEYS:
            raise ConfigError(
                f"Unknown model {self.model!r} (expected one of: {', '.join(MODEL_KEYS)})"
            )
        if not self.probe_path.startswith("/"):
            raise ConfigError("probe_path must start with '/'")
        logger.info("Configuration validated successfully")
