"""Append-only conversation log persisted in a key/value store.

The whole turn list is serialized as one JSON array under a single key and
rewritten on every append. There is no protection against concurrent
writers; one conversation view owns one log.
"""

import json
import logging

from .config import HISTORY_KEY
from .core import ROLES, ChatTurn
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

# Older logs stored assistant turns under this role.
_LEGACY_ROLES = {"ai": "assistant"}


class SessionStore:
    """Read-modify-write access to the persisted chat log."""

    def __init__(self, store: KeyValueStore, key: str = HISTORY_KEY):
        self.store = store
        self.key = key

    async def load(self) -> list[ChatTurn]:
        """Return the persisted turns; corrupt or missing data is no history."""
        raw = await self.store.get(self.key)
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unparseable chat history: %s", e)
            return []

        turns = _parse_turns(data)
        if turns is None:
            logger.warning("Ignoring malformed chat history under %s", self.key)
            return []
        return turns

    async def append(self, turn: ChatTurn) -> list[ChatTurn]:
        """Persist `turn` at the end of the log and return the new log."""
        turns = await self.load()
        turns.append(turn)
        await self._save(turns)
        return turns

    async def clear(self) -> None:
        await self._save([])

    async def _save(self, turns: list[ChatTurn]) -> None:
        payload = json.dumps([t.to_dict() for t in turns], ensure_ascii=False)
        await self.store.store(self.key, payload)


def _parse_turns(data) -> list[ChatTurn] | None:
    """Convert decoded JSON into turns, or None if the shape is wrong."""
    if not isinstance(data, list):
        return None

    turns = []
    for entry in data:
        if not isinstance(entry, dict):
            return None
        role = entry.get("role")
        content = entry.get("content")
        role = _LEGACY_ROLES.get(role, role)
        if role not in ROLES or not isinstance(content, str):
            return None
        turns.append(ChatTurn(role=role, content=content))
    return turns
