"""
GroqCompletionClient — calls the Groq chat completions API.

Uses the `groq` Python SDK with async support. SDK retries are disabled:
a failed call surfaces immediately as UpstreamError.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import groq
from groq import AsyncGroq

from coach_relay.services.ai_coach.base import CompletionClient, UpstreamError

logger = logging.getLogger(__name__)


def _error_from_sdk(exc: groq.APIError) -> UpstreamError:
    """Translate an SDK exception into UpstreamError, keeping diagnostics."""
    body = getattr(exc, 'body', None)
    code = getattr(exc, 'code', None)
    error_type = getattr(exc, 'type', None)
    if isinstance(body, dict):
        detail = body.get('error', body)
        if isinstance(detail, dict):
            code = code or detail.get('code')
            error_type = error_type or detail.get('type')
    return UpstreamError(
        message=str(exc),
        status_code=getattr(exc, 'status_code', None),
        code=code,
        error_type=error_type or exc.__class__.__name__,
    )


class GroqCompletionClient(CompletionClient):
    """Completion client backed by the Groq LLM API."""

    def __init__(self, api_key: str) -> None:
        self._client = AsyncGroq(api_key=api_key, max_retries=0)
        logger.info("GroqCompletionClient initialized — key_length=%d", len(api_key))

    async def complete(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int,
        temperature: float,
    ) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except groq.APIError as exc:
            raise _error_from_sdk(exc) from exc

        if not completion.choices:
            return ''
        return (completion.choices[0].message.content or '').strip()
