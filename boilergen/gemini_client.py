"""Async client for the Google Gemini ``generateContent`` API.

Wraps a single non-streaming text generation call with timeout handling and
a structured response. Like the rest of boilergen it is async so it shares
the CLI's event loop.

Typical usage::

    client = GeminiClient()
    resp = await client.generate("Create a Vue store boilerplate", api_key=key)
    if resp.success:
        print(resp.text)
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, Field


class GeminiResponse(BaseModel):
    """Structured response from a Gemini generation call."""

    text: str = Field(default="", description="Generated text")
    model: str = Field(default="", description="Model that produced the response")
    finish_reason: str | None = Field(default=None, description="Candidate finish reason")
    success: bool = Field(default=True, description="Whether the request succeeded")
    error: str | None = Field(default=None, description="Error message on failure")
    status_code: int | None = Field(default=None, description="HTTP status on HTTP failures")


class GeminiClient:
    """Async client for ``models/<model>:generateContent``.

    The API key travels as the ``key`` query parameter and is never included
    in error messages.
    """

    def __init__(
        self,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        model: str = "gemini-2.5-pro",
        timeout: int = 120,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
        )

    @staticmethod
    def build_payload(prompt: str) -> dict[str, Any]:
        """Request body for a single-turn text prompt."""
        return {"contents": [{"parts": [{"text": prompt}]}]}

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Pull the generated text out of a ``generateContent`` response.

        The text lives at ``candidates[0].content.parts[*].text``; multiple
        parts are concatenated.
        """
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    @staticmethod
    def _extract_finish_reason(data: dict) -> str | None:
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        return candidates[0].get("finishReason")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(self, prompt: str, api_key: str, model: str | None = None) -> GeminiResponse:
        """Generate text from a prompt.

        Args:
            prompt: The full prompt text.
            api_key: Gemini API key.
            model: Model name; defaults to the client's model.

        Returns:
            A ``GeminiResponse`` with the generated text or an error. This
            method does not raise for transport or HTTP failures.
        """
        model = model or self.model
        endpoint = f"/models/{model}:generateContent"

        try:
            async with self._client() as client:
                response = await client.post(
                    endpoint,
                    params={"key": api_key},
                    json=self.build_payload(prompt),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError:
            return GeminiResponse(
                model=model,
                success=False,
                error=f"Cannot connect to Gemini at {self.base_url}.",
            )
        except httpx.TimeoutException:
            return GeminiResponse(
                model=model,
                success=False,
                error=f"Request to Gemini timed out after {self.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            return GeminiResponse(
                model=model,
                success=False,
                status_code=exc.response.status_code,
                error=f"Gemini returned HTTP {exc.response.status_code}: {exc.response.text[:500]}",
            )
        except Exception as exc:  # noqa: BLE001
            return GeminiResponse(
                model=model,
                success=False,
                error=f"Unexpected error during Gemini generate: {exc}",
            )

        text = self._extract_text(data)
        finish_reason = self._extract_finish_reason(data)
        if not text:
            return GeminiResponse(
                model=model,
                finish_reason=finish_reason,
                success=False,
                error=f"Gemini returned no text (finish reason: {finish_reason or 'unknown'}).",
            )
        return GeminiResponse(
            text=text,
            model=data.get("modelVersion", model),
            finish_reason=finish_reason,
            success=True,
        )
