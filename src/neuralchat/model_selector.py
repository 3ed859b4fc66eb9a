from common.events import EventEmitter, ModelChangedEvent
from neuralchat.config import DEFAULT_MODEL, MODEL_KEYS


class ModelSelector:
    def __init__(self, model: str = DEFAULT_MODEL, emitter: EventEmitter | None = None):
        if model not in MODEL_KEYS:
            raise ValueError(f"Unknown model: {model}")
        self._model = model
        self.emitter = emitter or EventEmitter()

    @property
    def current(self) -> str:
        return self._model

    def select(self, model: str) -> None:
        if model not in MODEL_KEYS:
            raise ValueError(f"Unknown model: {model}")
        self._model = model
        self.emitter.emit(ModelChangedEvent(model=model))
