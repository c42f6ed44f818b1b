"""
Advisory collaborator for free-text operational advice.

The grid core never talks to a language model directly. It hands an
``AdvisoryRequest`` to an ``AdvisoryService``, which delegates to a pluggable
``AdvisoryClient`` and substitutes a fixed fallback string whenever the
client fails. The service never raises.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Any, Optional
import logging
import os
import time

import requests

from .exceptions import AdvisoryError
from .models import Advice, AdvisoryRequest

FALLBACK_ADVICE = "Manual override suggested."
EMPTY_RESPONSE_ADVICE = "Optimize storage to balance peaks."

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_API_KEY_ENV = "API_KEY"

PROMPT_TEMPLATE = """You are SparkGrid AI, a Virtual Power Plant optimizer.
Current Grid Status:
- Total Gen: {generation}MW
- Total Cons: {consumption}MW
- Net Load: {net_load}MW
- Scenario: {scenario}

Give a concise (2-3 sentence) technical advice on how to optimize this VPP. Focus on demand response or storage management. Output plain text."""


def build_prompt(request: AdvisoryRequest) -> str:
    """Render the fixed prompt template for a grid summary."""
    return PROMPT_TEMPLATE.format(
        generation=request.generation_mw,
        consumption=request.consumption_mw,
        net_load=request.net_load_mw,
        scenario=request.scenario
    )


class AdvisoryClient(ABC):
    """Base class for text-generation backends."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"sparkgrid.advisory.{name}")

    @abstractmethod
    def advise(self, request: AdvisoryRequest) -> str:
        """Return advice text, or raise ``AdvisoryError``."""
        pass

    def is_available(self) -> bool:
        """Check if the client can be called at all."""
        return True


class StaticAdvisoryClient(AdvisoryClient):
    """Client that always answers with the same text. Useful offline."""

    def __init__(self, text: str = EMPTY_RESPONSE_ADVICE):
        super().__init__("static")
        self.text = text

    def advise(self, request: AdvisoryRequest) -> str:
        return self.text


class GeminiAdvisoryClient(AdvisoryClient):
    """Client for the Generative Language ``generateContent`` REST endpoint."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        api_key_env: str = DEFAULT_API_KEY_ENV,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        super().__init__("gemini")
        self.model = model
        self.api_key_env = api_key_env
        self._api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key or os.environ.get(self.api_key_env)

    @property
    def url(self) -> str:
        return f"{self.endpoint}/models/{self.model}:generateContent"

    def is_available(self) -> bool:
        return bool(self.api_key)

    def advise(self, request: AdvisoryRequest) -> str:
        api_key = self.api_key
        if not api_key:
            raise AdvisoryError(f"No API key found in ${self.api_key_env}")

        payload = {"contents": [{"parts": [{"text": build_prompt(request)}]}]}
        try:
            resp = self._session.post(
                self.url,
                json=payload,
                headers={"x-goog-api-key": api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise AdvisoryError(f"Advisory request failed: {e}") from e

        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        """Join the text parts of the first candidate."""
        try:
            parts = data["candidates"][0]["content"].get("parts", [])
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise AdvisoryError(f"Malformed advisory response: {e}") from e
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()


class AdvisoryService:
    """Wraps an advisory client and maps every failure to fallback text."""

    def __init__(
        self,
        client: Optional[AdvisoryClient] = None,
        fallback_text: str = FALLBACK_ADVICE,
        empty_text: str = EMPTY_RESPONSE_ADVICE
    ):
        self.client = client or GeminiAdvisoryClient()
        self.fallback_text = fallback_text
        self.empty_text = empty_text
        self.logger = logging.getLogger("sparkgrid.advisory")

        self._request_count = 0
        self._failure_count = 0
        self._last_latency = 0.0

    def get_advice(self, request: AdvisoryRequest, now: Optional[datetime] = None) -> Advice:
        """Ask the client for advice; never raises."""
        self._request_count += 1
        start_time = time.time()
        try:
            text = self.client.advise(request)
        except Exception as e:
            self._failure_count += 1
            self._last_latency = time.time() - start_time
            self.logger.warning(f"Advisory client {self.client.name} failed: {e}")
            return Advice(
                text=self.fallback_text,
                request=request,
                received_at=now or datetime.now(),
                fallback_used=True
            )

        self._last_latency = time.time() - start_time
        self.logger.debug(f"Advice received in {self._last_latency * 1000:.0f}ms")
        return Advice(
            text=text or self.empty_text,
            request=request,
            received_at=now or datetime.now()
        )

    def get_metadata(self) -> Dict[str, Any]:
        """Return service information for logging/debugging."""
        return {
            "client": self.client.name,
            "is_available": self.client.is_available(),
            "request_count": self._request_count,
            "failure_count": self._failure_count,
            "last_latency": self._last_latency
        }
