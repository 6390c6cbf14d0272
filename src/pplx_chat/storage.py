"""Key/value persistence for the API key and the serialized chat log."""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from .config import get_secrets_path

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Base class for string-valued secret stores."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under `key`, or None."""
        ...

    @abstractmethod
    async def store(self, key: str, value: str) -> None:
        """Persist `value` under `key`, replacing any previous value."""
        ...


class MemoryKeyValueStore(KeyValueStore):
    """In-process store, nothing survives the process."""

    def __init__(self, data: dict[str, str] | None = None):
        self._data = dict(data or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def store(self, key: str, value: str) -> None:
        self._data[key] = value


class FileKeyValueStore(KeyValueStore):
    """A JSON object on disk, readable only by the owner."""

    def __init__(self, path: Path):
        self.path = path

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read)
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def store(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._update, key, value)

    # ── Private helpers ──────────────────────────────────────────────

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Failed to read %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _update(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        # A leftover temp file would keep its old mode through O_TRUNC.
        tmp.unlink(missing_ok=True)
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(data, ensure_ascii=False))
        os.replace(tmp, self.path)


def get_store() -> KeyValueStore:
    """Return the store at the configured secrets path."""
    return FileKeyValueStore(get_secrets_path())
