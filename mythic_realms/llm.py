"""Narrative and image service clients.

The session injects a narrator callable matching the protocol:

    async def __call__(self, stage: str, prompt: str) -> str: ...

`stage` identifies the caller ("narrator" for turns). The implementation may
use it for logging or routing; the simplest implementation ignores it.

Scene images come from a painter callable:

    async def __call__(self, prompt: str) -> str | None: ...

returning a data URL, or None when no image was produced.

Implementations:

    HttpLLM:     text generation over HTTP; one wire format per provider
                 (KoboldCpp, OpenAI-compatible completions, Gemini).
    EchoLLM:     no network; answers every prompt with a minimal valid
                 envelope. Useful for exercising a session end-to-end.
    HttpPainter: Gemini image generation; never raises, returns None on
                 any failure.

Every HttpLLM failure is raised as LLMError with a message the turn error
taxonomy (mythic_realms.errors) can classify.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Literal, NamedTuple, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, stage: str, prompt: str) -> str: ...


class Painter(Protocol):
    async def __call__(self, prompt: str) -> str | None: ...


class LLMError(RuntimeError):
    """Raised when the narrator backend cannot be reached or answers badly."""


# ---------------------------------------------------------------------------
# Wire formats
# ---------------------------------------------------------------------------

ProviderFormat = Literal["koboldcpp", "openai", "gemini"]

GEMINI_URL = "https://generativelanguage.googleapis.com"


class WireFormat(NamedTuple):
    path: str                                   # appended to the base URL; may use {model}
    body: Callable[[str, str], dict[str, Any]]  # (prompt, model) -> request JSON
    text: Callable[[dict[str, Any]], str]       # response JSON -> completion text
    needs_key: bool


def _kobold_text(data: dict[str, Any]) -> str:
    results = data.get("results")
    if not results or "text" not in results[0]:
        raise LLMError("Unexpected response format from KoboldCpp backend")
    return results[0]["text"]


def _openai_body(prompt: str, model: str) -> dict[str, Any]:
    return {"prompt": prompt, "model": model} if model else {"prompt": prompt}


def _openai_text(data: dict[str, Any]) -> str:
    choices = data.get("choices")
    if not choices or "text" not in choices[0]:
        raise LLMError("Unexpected response format from OpenAI-compatible backend")
    return choices[0]["text"]


def _gemini_body(prompt: str, model: str) -> dict[str, Any]:
    return {"contents": [{"parts": [{"text": prompt}]}]}


def _gemini_text(data: dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError) as e:
        raise LLMError("Unexpected response format from Gemini backend") from e
    if not text:
        raise LLMError("No response text from Gemini backend")
    return text


WIRE_FORMATS: dict[str, WireFormat] = {
    "koboldcpp": WireFormat("/api/v1/generate", lambda prompt, _: {"prompt": prompt}, _kobold_text, False),
    "openai": WireFormat("/v1/completions", _openai_body, _openai_text, True),
    "gemini": WireFormat("/v1beta/models/{model}:generateContent", _gemini_body, _gemini_text, True),
}


def _status_error(status: int) -> LLMError:
    if status == 429:
        return LLMError("LLM backend quota exceeded (HTTP 429)")
    if status in (401, 403):
        return LLMError(f"LLM backend rejected the API key (HTTP {status})")
    return LLMError(f"LLM backend returned HTTP {status}")


# ---------------------------------------------------------------------------
# HttpLLM
# ---------------------------------------------------------------------------

class HttpLLM:
    """Async HTTP client for text-generation backends.

    Args:
        provider_url:    Backend root, e.g. "http://localhost:5001" or GEMINI_URL.
        api_key:         Sent as a bearer token (x-goog-api-key for gemini).
                         Required by the openai and gemini formats.
        provider_format: One of WIRE_FORMATS. Defaults to "koboldcpp".
        model:           Model name; part of the URL for gemini.
        timeout:         Seconds before the request is abandoned.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "koboldcpp",
        model: str = "",
        timeout: float = 120.0,
    ) -> None:
        if provider_format not in WIRE_FORMATS:
            raise ValueError(f"Unknown provider format {provider_format!r}")
        self._root = provider_url.rstrip("/")
        self._key = api_key
        self._wire = WIRE_FORMATS[provider_format]
        self._gemini = provider_format == "gemini"
        self._model = model
        self._timeout = timeout

    @property
    def url(self) -> str:
        return self._root + self._wire.path.format(model=self._model)

    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._gemini:
            headers["x-goog-api-key"] = self._key
        elif self._key:
            headers["Authorization"] = f"Bearer {self._key}"
        return headers

    async def __call__(self, stage: str, prompt: str) -> str:
        if self._wire.needs_key and not self._key:
            raise LLMError("API key not found.")

        url = self.url
        logger.debug("llm request stage=%s url=%s chars=%d", stage, url, len(prompt))
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=self._wire.body(prompt, self._model), headers=self.headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Network error: cannot connect to LLM backend at {self._root}") from e
        except httpx.TimeoutException as e:
            raise LLMError(f"Network error: LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise _status_error(e.response.status_code) from e

        text = self._wire.text(resp.json())
        logger.debug("llm reply stage=%s chars=%d", stage, len(text))
        return text


# ---------------------------------------------------------------------------
# EchoLLM: no network; always answers with a valid envelope
# ---------------------------------------------------------------------------

class EchoLLM:
    """Answers every prompt with a minimal envelope and an empty patch.

    The narration repeats the prompt's ``Action:`` line, so the session,
    engine and storage wiring can be exercised without a running model.
    Use a stub in tests when you need controlled patches.
    """

    async def __call__(self, stage: str, prompt: str) -> str:
        action = ""
        for line in prompt.splitlines():
            if line.strip().startswith("Action:"):
                action = line.split(":", 1)[1].strip().strip('"')
        logger.debug("echo stage=%s action=%r", stage, action)
        return json.dumps({
            "narration": f"You {action}." if action else "Nothing happens.",
            "choices": [{"id": "look", "label": "Look around", "intent": "travel"}],
            "patch": {},
        })


# ---------------------------------------------------------------------------
# HttpPainter: scene images; failures are logged, never raised
# ---------------------------------------------------------------------------

class HttpPainter:
    """Gemini image generation returning ``data:image/png;base64,...`` URLs."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash-image",
        provider_url: str = GEMINI_URL,
        timeout: float = 120.0,
    ) -> None:
        self._url = f"{provider_url.rstrip('/')}/v1beta/models/{model}:generateContent"
        self._key = api_key
        self._timeout = timeout

    async def __call__(self, prompt: str) -> str | None:
        if not self._key:
            return None
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"imageConfig": {"aspectRatio": "16:9"}},
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, json=body, headers={"x-goog-api-key": self._key})
                resp.raise_for_status()
            parts = resp.json()["candidates"][0]["content"]["parts"]
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Image generation failed: %s", e)
            return None

        for part in parts:
            inline = part.get("inlineData")
            if inline and inline.get("data"):
                return f"data:image/png;base64,{inline['data']}"
        return None
