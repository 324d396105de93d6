"""
core.api.openai_client

Thin async wrapper around an OpenAI-compatible Chat Completions API for
Arena Copilot. By default it talks to Gemini's compatibility endpoint.

Used by:
  - runtime/session/chat_session.py  (streamed chat turns)
  - runtime/agents/orchestrator.py   (one-shot generation, images)

Every provider failure (HTTP error, connection error, timeout) is
re-raised as TransportError with the original exception chained.
No retries are attempted here; callers decide.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, Sequence, Tuple

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict

from configs.settings import settings
from core.request.builder import GenerationRequest
from exceptions.exceptions import TransportError


logger = logging.getLogger(__name__)


class StreamChunk(BaseModel):
    """One incremental fragment of an in-progress reply (may be empty)."""

    model_config = ConfigDict(frozen=True)

    text: str = ""


class ModelTransport(Protocol):
    """
    Provider interface used by sessions and the orchestrator.

    Implementations may use:
    - the OpenAI SDK against any compatible endpoint
    - an in-memory fake (tests)
    """

    async def generate(self, request: GenerationRequest, *, model: str) -> str:
        """Run one stateless request and return the reply text."""
        ...

    async def generate_image(self, prompt: str, *, model: str) -> Tuple[str, str]:
        """Return ``(media_type, base64_data)`` for the first generated image."""
        ...

    def stream_chat(
        self,
        *,
        model: str,
        system_instruction: str,
        messages: Sequence[Dict[str, str]],
        reasoning_budget: Optional[int] = None,
    ) -> AsyncIterator[StreamChunk]:
        """Yield the reply to ``messages`` chunk by chunk."""
        ...


# -------------------------------------------------------------------
# Internal helpers
# -------------------------------------------------------------------


def _thinking_options(reasoning_budget: Optional[int]) -> Dict[str, Any]:
    """Map a reasoning budget onto the provider's thinking configuration."""
    if reasoning_budget is None:
        return {}
    return {
        "extra_body": {
            "extra_body": {
                "google": {"thinking_config": {"thinking_budget": reasoning_budget}}
            }
        }
    }


# -------------------------------------------------------------------
# Transport
# -------------------------------------------------------------------


class OpenAITransport:
    """ModelTransport backed by ``openai.AsyncOpenAI``.

    Parameters
    ----------
    client:
        Pre-built AsyncOpenAI client. If omitted, one is created from the
        central settings on first use.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None) -> None:
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=settings.api_key,
                base_url=settings.base_url,
                timeout=settings.request_timeout,
                max_retries=0,
            )
        return self._client

    async def generate(self, request: GenerationRequest, *, model: str) -> str:
        """
        Send a one-shot request and return the reply text.

        Returns
        -------
        str
            Model text; for schema-constrained requests this is JSON text
            that the caller decodes.

        Raises
        ------
        TransportError
            If the API call fails or the response has no choices.
        """
        options: Dict[str, Any] = _thinking_options(request.reasoning_budget)
        if request.schema_descriptor is not None:
            options["response_format"] = request.schema_descriptor.to_response_format()

        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": request.to_content()}],
                **options,
            )
        except OpenAIError as e:
            logger.warning("[TRANSPORT] generate failed model=%s: %s", model, e)
            raise TransportError("generate", str(e)) from e

        if not completion.choices:
            raise TransportError("generate", "empty response from provider")

        return completion.choices[0].message.content or ""

    async def generate_image(self, prompt: str, *, model: str) -> Tuple[str, str]:
        try:
            result = await self.client.images.generate(
                model=model,
                prompt=prompt,
                n=1,
                response_format="b64_json",
            )
        except OpenAIError as e:
            logger.warning("[TRANSPORT] image generation failed model=%s: %s", model, e)
            raise TransportError("generate_image", str(e)) from e

        for image in result.data or []:
            if image.b64_json:
                return "image/png", image.b64_json

        raise TransportError("generate_image", "provider returned no image data")

    async def stream_chat(
        self,
        *,
        model: str,
        system_instruction: str,
        messages: Sequence[Dict[str, str]],
        reasoning_budget: Optional[int] = None,
    ) -> AsyncIterator[StreamChunk]:
        """
        Stream one chat turn.

        The provider stream is always closed, whether the caller exhausts
        this generator, stops early, or an error occurs.
        """
        payload: List[Dict[str, str]] = [{"role": "system", "content": system_instruction}]
        payload.extend(messages)

        try:
            stream = await self.client.chat.completions.create(
                model=model,
                messages=payload,
                stream=True,
                **_thinking_options(reasoning_budget),
            )
        except OpenAIError as e:
            logger.warning("[TRANSPORT] chat stream could not start model=%s: %s", model, e)
            raise TransportError("stream_chat", str(e)) from e

        try:
            async for event in stream:
                if not event.choices:
                    continue
                yield StreamChunk(text=event.choices[0].delta.content or "")
        except OpenAIError as e:
            logger.warning("[TRANSPORT] chat stream broke model=%s: %s", model, e)
            raise TransportError("stream_chat", str(e)) from e
        finally:
            await stream.close()
