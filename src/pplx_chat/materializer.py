"""Write resolved intents to disk, asking before clobbering existing files."""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .core import ActionIntent, FileWriteOutcome

logger = logging.getLogger(__name__)


class MaterializationError(Exception):
    """Path resolution, confirmation, or the write itself failed."""


class EditorHost(ABC):
    """The UI the materializer talks to.

    The web view and the terminal chat each provide one.
    """

    @abstractmethod
    async def confirm(self, message: str) -> bool:
        """Ask a yes/no question. Dismissing the question means no."""
        ...

    @abstractmethod
    async def open_file(self, path: Path, content: str) -> None:
        """Show a freshly written file to the user."""
        ...


class FileMaterializer:
    """Turns an ActionIntent into a file on disk."""

    def __init__(self, host: EditorHost, workspace_roots: list[Path] | None = None):
        self.host = host
        self.workspace_roots = list(workspace_roots or [])

    def resolve_path(self, filename: str) -> Path:
        """Bare names land in the first workspace root; paths are used as given."""
        if "/" not in filename and "\\" not in filename and self.workspace_roots:
            return self.workspace_roots[0] / filename
        return Path(filename)

    async def materialize(self, intent: ActionIntent) -> FileWriteOutcome:
        try:
            path = self.resolve_path(intent.filename)
            exists = await asyncio.to_thread(path.exists)

            if exists:
                message = f"File {path} already exists. Do you want to overwrite it?"
                if not await self.host.confirm(message):
                    logger.info("Overwrite of %s declined", path)
                    return FileWriteOutcome(path=path)

            await asyncio.to_thread(_write_file, path, intent.code)
            logger.info("Wrote %d chars to %s (%s)", len(intent.code), path, intent.origin.value)
        except Exception as e:
            logger.error("Failed to create file %s: %s", intent.filename, e)
            raise MaterializationError(f"Failed to create file {intent.filename}: {e}") from e

        outcome = FileWriteOutcome(path=path, created=not exists, overwritten=exists)
        try:
            await self.host.open_file(path, intent.code)
        except Exception as e:
            # The write already happened; only the display step failed.
            logger.error("Wrote %s but could not open it: %s", path, e)
        return outcome


def _write_file(path: Path, content: str) -> None:
    """Replace the file's entire content, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
