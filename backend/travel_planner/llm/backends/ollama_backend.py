from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import requests

from travel_planner.core.errors import ModelUnavailable
from travel_planner.llm.prompts import PLANNER_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


@dataclass
class OllamaBackend:
    """
    Model backend using Ollama's chat API in JSON mode.
    The request is bounded by timeout_sec; expiry surfaces as ModelUnavailable.
    """

    host: str
    model: str
    timeout_sec: float = 60.0
    temperature: float = 0.7
    session: requests.Session = field(default_factory=requests.Session)

    def _build_messages(self, prompt: str) -> List[dict]:
        return [
            {"role": "system", "content": PLANNER_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    def complete(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": self._build_messages(prompt),
            "stream": False,
            "format": "json",
            "options": {"temperature": self.temperature},
        }
        try:
            resp = self.session.post(
                f"{self.host.rstrip('/')}/api/chat", json=payload, timeout=self.timeout_sec
            )
            resp.raise_for_status()
        except requests.Timeout as exc:
            logger.error("Ollama request timed out after %ss", self.timeout_sec)
            raise ModelUnavailable() from exc
        except requests.RequestException as exc:
            logger.error("Ollama request failed: %s", exc)
            raise ModelUnavailable() from exc

        try:
            content = resp.json()["message"]["content"]
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Unexpected Ollama response body: %.200s", resp.text)
            raise ModelUnavailable() from exc
        if not content:
            logger.error("Ollama returned an empty message")
            raise ModelUnavailable()

        logger.debug("Ollama reply: %s", content)
        return content
