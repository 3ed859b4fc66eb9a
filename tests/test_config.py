import pytest

from common.events import EventEmitter, ModelChangedEvent
from neuralchat.config import DEFAULT_MODEL, MODEL_KEYS, ClientConfig, ConfigError
from neuralchat.model_selector import ModelSelector


class TestClientConfig:
    def test_defaults(self, monkeypatch):
        for name in (
            "NEURALCHAT_BASE_URL",
            "NEURALCHAT_TOKEN",
            "NEURALCHAT_EMAIL",
            "NEURALCHAT_PASSWORD",
            "NEURALCHAT_TIMEOUT",
            "NEURALCHAT_MODEL",
        ):
            monkeypatch.delenv(name, raising=False)

        config = ClientConfig()

        assert config.base_url == "http://localhost:5000"
        assert config.token is None
        assert config.email is None
        assert config.timeout is None
        assert config.model == DEFAULT_MODEL
        config.validate()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("NEURALCHAT_BASE_URL", "https://chat.example.com")
        monkeypatch.setenv("NEURALCHAT_TOKEN", "abc")
        monkeypatch.setenv("NEURALCHAT_TIMEOUT", "12.5")
        monkeypatch.setenv("NEURALCHAT_MODEL", "qwen")

        config = ClientConfig()

        assert config.base_url == "https://chat.example.com"
        assert config.token == "abc"
        assert config.timeout == 12.5
        assert config.model == "qwen"

    def test_credentials_from_environment_stay_out_of_repr(self, monkeypatch):
        monkeypatch.setenv("NEURALCHAT_EMAIL", "ada@example.com")
        monkeypatch.setenv("NEURALCHAT_PASSWORD", "hunter2")

        config = ClientConfig()

        assert (config.email, config.password) == ("ada@example.com", "hunter2")
        assert "hunter2" not in repr(config)

    def test_bad_timeout_env(self, monkeypatch):
        monkeypatch.setenv("NEURALCHAT_TIMEOUT", "soon")
        with pytest.raises(ConfigError):
            ClientConfig()

    def test_from_env_overrides_skip_none(self, monkeypatch):
        monkeypatch.setenv("NEURALCHAT_MODEL", "qwen")

        config = ClientConfig.from_env(model=None, base_url="http://other:8080")

        assert config.model == "qwen"
        assert config.base_url == "http://other:8080"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"base_url": "ftp://chat"},
            {"base_url": "localhost:5000"},
            {"timeout": 0},
            {"model": "gpt-4o"},
            {"probe_path": "api/chat/all"},
        ],
    )
    def test_validate_rejects(self, overrides):
        config = ClientConfig(base_url="http://chat.test", token=None, timeout=None, model="llama3")
        for key, value in overrides.items():
            setattr(config, key, value)
        with pytest.raises(ConfigError):
            config.validate()


class TestModelSelector:
    def test_default_model(self):
        assert ModelSelector().current == "llama3"

    def test_select_known_model(self):
        events = []
        selector = ModelSelector(emitter=EventEmitter(events.append))

        selector.select("qwen")

        assert selector.current == "qwen"
        assert events == [ModelChangedEvent(model="qwen")]

    def test_unknown_model_is_rejected(self):
        selector = ModelSelector()
        with pytest.raises(ValueError):
            selector.select("gpt-4o")
        assert selector.current == "llama3"

    def test_catalog(self):
        assert MODEL_KEYS == ("llama3", "llama3fast", "qwen")
