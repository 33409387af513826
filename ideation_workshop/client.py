#!/usr/bin/env python3
"""
Ideation Workshop - Generative Text Client

Thin async client for a local text-generation service (Ollama-compatible
/api/generate endpoint). One POST per call, no streaming, no retries.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import httpx

if TYPE_CHECKING:
    from .logger import WorkshopLogger


DEFAULT_GENERATE_URL = "http://localhost:11434/api/generate"
DEFAULT_MODEL = "mistral:instruct"


@dataclass(frozen=True)
class GenerationSettings:
    """Endpoint, model and sampling parameters for every request."""
    url: str = DEFAULT_GENERATE_URL
    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    top_p: float = 0.9
    timeout: Optional[float] = 120.0


class GenerationError(Exception):
    """
    Raised for any failed generation call.

    str(error) is the advisory shown to users; .detail keeps the
    underlying reason for logs.
    """

    def __init__(self, model: str, detail: str = ""):
        self.model = model
        self.detail = detail
        super().__init__(
            f"Failed to generate AI response. Please ensure Ollama is running "
            f"and the {model} model is installed."
        )


class GenerativeClient:
    """Sends prompts to the generation endpoint and returns the generated text."""

    def __init__(
        self,
        settings: Optional[GenerationSettings] = None,
        logger: Optional["WorkshopLogger"] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            settings: Endpoint and sampling settings (defaults to a local Ollama)
            logger: Optional logger for request events
            transport: Custom httpx transport (tests pass httpx.MockTransport)
        """
        self.settings = settings or GenerationSettings()
        self._logger = logger
        self._transport = transport

    def build_payload(self, prompt: str) -> dict:
        return {
            "model": self.settings.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.settings.temperature,
                "top_p": self.settings.top_p,
            },
        }

    async def generate(self, prompt: str, command: str = "generate") -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Full prompt text
            command: Label used in log entries

        Returns:
            The service's "response" text

        Raises:
            GenerationError: on transport failure, non-2xx status,
                malformed JSON or a missing "response" field
        """
        if self._logger:
            self._logger.log_generation_start(command, prompt)

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.settings.timeout,
            ) as client:
                response = await client.post(self.settings.url, json=self.build_payload(prompt))
        except httpx.HTTPError as e:
            raise self._fail(command, f"request failed: {e}") from e

        if not response.is_success:
            raise self._fail(
                command,
                f"HTTP {response.status_code}: {_error_text(response)}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise self._fail(command, "malformed JSON in response") from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            error = data.get("error") if isinstance(data, dict) else None
            raise self._fail(command, error or "response field missing")

        if self._logger:
            self._logger.log_generation_complete(command, len(text))
        return text

    def _fail(self, command: str, detail: str) -> GenerationError:
        error = GenerationError(self.settings.model, detail)
        if self._logger:
            self._logger.log_error(f"{command} generation failed ({detail})")
        return error


def _error_text(response: httpx.Response) -> str:
    """Error message from an {"error": ...} body, or the reason phrase."""
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return response.reason_phrase
