"""One conversation: persist turns, call the model, act on the answer.

A ChatSession is owned by a single view (a WebSocket connection or the
terminal loop) and handles one ask at a time. Each ask runs to completion
in a fixed order:

    append user turn -> complete -> append assistant turn
        -> resolve intent -> materialize -> notify

Outbound UI messages are plain dicts with a "command" key and are handed to
the `send` coroutine supplied by the view.
"""

import logging
from typing import Awaitable, Callable

from .core import ChatTurn, FileWriteOutcome
from .materializer import FileMaterializer, MaterializationError
from .provider import CompletionProvider
from .resolver import resolve
from .session import SessionStore

logger = logging.getLogger(__name__)

Send = Callable[[dict], Awaitable[None]]

AGENTIC_MODE = "agentic"


def response_message(text: str) -> dict:
    return {"command": "response", "text": text}


def agentic_info_message(text: str) -> dict:
    return {"command": "agenticInfo", "text": text}


def history_message(turns: list[ChatTurn]) -> dict:
    return {"command": "loadHistory", "history": [t.to_dict() for t in turns]}


class ChatSession:
    """Conversation state and the ask pipeline for one view."""

    def __init__(self, sessions: SessionStore, provider: CompletionProvider, materializer: FileMaterializer):
        self.sessions = sessions
        self.provider = provider
        self.materializer = materializer
        self.history: list[ChatTurn] = []

    async def load_history(self) -> list[ChatTurn]:
        """Reload the cache from storage, which may have changed underneath us."""
        self.history = await self.sessions.load()
        return self.history

    async def ask(self, text: str, model: str, mode: str, send: Send) -> None:
        await self.sessions.append(ChatTurn(role="user", content=text))
        await self.load_history()

        result = await self.provider.complete(text, model)

        await self.sessions.append(ChatTurn(role="assistant", content=result.text))
        await self.load_history()

        if not result.ok:
            # Error text is never scanned for file intents.
            logger.info("Completion failed (%s), skipping action resolution", result.error.value)
            await send(response_message(result.text))
            return

        outcome = await self._act(text, result.text, mode == AGENTIC_MODE, send)
        if outcome is None or not outcome.written:
            await send(response_message(result.text))

    async def _act(self, prompt: str, answer: str, agentic: bool, send: Send) -> FileWriteOutcome | None:
        """Materialize the resolved intent, if any. Failures are reported, not raised."""
        intent = resolve(prompt, answer, agentic)
        if intent is None:
            return None

        try:
            outcome = await self.materializer.materialize(intent)
        except MaterializationError as e:
            await send(agentic_info_message(f"Error performing action: {e}"))
            return None

        if outcome.created:
            await send(agentic_info_message(f"Created file: {intent.filename}"))
        elif outcome.overwritten:
            await send(agentic_info_message(f"Updated file: {intent.filename}"))
        return outcome
