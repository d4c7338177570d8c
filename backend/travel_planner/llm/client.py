import logging
from typing import Protocol

from travel_planner.core.config import Settings
from travel_planner.core.errors import ModelUnavailable, PlanServiceError
from travel_planner.llm.backends.mock_backend import MockBackend
from travel_planner.llm.backends.ollama_backend import OllamaBackend

logger = logging.getLogger(__name__)


class ModelBackend(Protocol):
    def complete(self, prompt: str) -> str:
        """Send the prompt, return the raw reply text (expected to be JSON)."""
        ...


class LLMClient:
    """
    Pluggable model client. Backends only need to implement `complete`; any
    error they raise is reported to callers as ModelUnavailable so provider
    details never leave this layer.
    """

    def __init__(self, backend: ModelBackend):
        self.backend = backend

    def complete(self, prompt: str) -> str:
        try:
            return self.backend.complete(prompt)
        except PlanServiceError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("Model backend %s failed: %s", type(self.backend).__name__, exc)
            raise ModelUnavailable() from exc


def create_llm_client(settings: Settings) -> LLMClient:
    provider = settings.llm_provider.lower()
    if provider == "ollama":
        backend = OllamaBackend(
            host=settings.ollama_host,
            model=settings.ollama_model,
            timeout_sec=settings.llm_timeout_sec,
            temperature=settings.llm_temperature,
        )
    elif provider == "mock":
        backend = MockBackend()
    else:
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
    logger.info("Using %s model backend", provider)
    return LLMClient(backend=backend)
