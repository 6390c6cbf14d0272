"""Perplexity chat-completions backend.

Sends one user message per call to the OpenAI-style endpoint:

    POST /chat/completions
    {"model": ..., "messages": [{"role": "user", "content": ...}], "stream": false}

and reads the answer from choices[0].message.content.
"""

import logging

import httpx

from ..config import API_KEY_KEY, get_api_url, get_request_timeout
from ..core import CompletionResult, ErrorKind
from ..provider import CompletionProvider
from ..storage import KeyValueStore

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = (
    'Error: No Perplexity API key set. Please run "pplx-chat set-key" to set your API key.'
)
EMPTY_ANSWER_MESSAGE = "No response from Perplexity."


class PerplexityProvider(CompletionProvider):
    """Provider for the Perplexity API."""

    name = "perplexity"

    def __init__(
        self,
        store: KeyValueStore,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.store = store
        self.api_url = api_url or get_api_url()
        self.timeout = timeout if timeout is not None else get_request_timeout()
        self._transport = transport

    async def complete(self, prompt: str, model: str) -> CompletionResult:
        api_key = await self.store.get(API_KEY_KEY)
        if not api_key:
            return CompletionResult(MISSING_KEY_MESSAGE, error=ErrorKind.CONFIGURATION)

        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.api_url, json=payload, headers=headers)

            if not resp.is_success:
                logger.error("Perplexity returned %s for model %s", resp.status_code, model)
                return CompletionResult(
                    f"Error: {resp.status_code} {resp.reason_phrase}\n{resp.text}",
                    error=ErrorKind.HTTP,
                    detail=resp.text,
                )

            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Perplexity request failed: %s", e)
            return CompletionResult(f"Error: {e}", error=ErrorKind.TRANSPORT, detail=str(e))

        return CompletionResult(_extract_content(data) or EMPTY_ANSWER_MESSAGE)


def _extract_content(data) -> str:
    """Pull choices[0].message.content out of a decoded response body."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""
