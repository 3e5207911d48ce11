"""Live naming capability backed by the Gemini ``generateContent`` REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import requests

from ..config import Settings
from ..core.errors import ExternalCallFailure, MalformedResponse
from .capabilities import NamingCapability
from .stub import OfflineNaming

__all__ = ["GeminiClient", "build_naming"]

logger = logging.getLogger(__name__)

_STRING_ARRAY_SCHEMA: Mapping[str, Any] = {"type": "ARRAY", "items": {"type": "STRING"}}


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        endpoint: str,
        timeout: float = 20.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must not be empty")
        self.model = model
        self.base_url = endpoint.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, *, session: requests.Session | None = None) -> GeminiClient:
        if not settings.gemini_api_key:
            raise ValueError("settings carry no Gemini API key")
        return cls(
            settings.gemini_api_key,
            model=settings.gemini_model,
            endpoint=settings.gemini_endpoint,
            timeout=settings.http_timeout,
            session=session,
        )

    # -------- headers --------
    @property
    def headers(self) -> Mapping[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key,
        }

    # -------- core request --------
    def _generate_json(self, prompt: str) -> Any:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": _STRING_ARRAY_SCHEMA,
            },
        }
        try:
            response = self.session.request(
                method="POST",
                url=url,
                headers=self.headers,
                json=body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.JSONDecodeError as exc:
            raise MalformedResponse("Gemini returned a non-JSON body") from exc
        except requests.RequestException as exc:
            raise ExternalCallFailure(f"Gemini request failed: {exc}") from exc

        text = _candidate_text(payload)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedResponse("Gemini answer is not valid JSON") from exc

    # -------- capabilities --------
    def generate_names(self, count: int, theme: str) -> Sequence[str]:
        prompt = (
            f'Generate {count} creative, fun, and distinct team names based on the theme: "{theme}". '
            "The names should be suitable for a corporate team building activity. "
            "Return strictly a JSON array of strings."
        )
        logger.debug("requesting team names", extra={"count": count, "model": self.model})
        return self._generate_json(prompt)

    def extract_names(self, text: str) -> Sequence[str]:
        prompt = (
            "Extract a list of person names from the following text. "
            "Ignore generic words, headers, or dates. "
            f'Return only the names as a JSON array of strings. Text: "{text}"'
        )
        logger.debug("requesting name extraction", extra={"chars": len(text), "model": self.model})
        return self._generate_json(prompt)


def _candidate_text(payload: Any) -> str:
    try:
        parts = payload["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise MalformedResponse("Gemini response carries no candidate text") from exc
    if not text.strip():
        raise MalformedResponse("Gemini returned an empty answer")
    return text


def build_naming(settings: Settings) -> NamingCapability:
    if settings.gemini_api_key:
        return GeminiClient.from_settings(settings)
    logger.info("No Gemini API key configured; AI naming disabled")
    return OfflineNaming()
