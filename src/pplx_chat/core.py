"""Core data models for pplx-chat."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


ROLES = ("user", "assistant")


@dataclass(frozen=True)
class ChatTurn:
    """A single message in the conversation log."""

    role: str  # "user" | "assistant"
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


class ActionOrigin(str, Enum):
    """Where a file-creation intent was detected."""

    EXPLICIT_USER_REQUEST = "explicit-user-request"
    AGENTIC_INFERENCE = "agentic-inference"


@dataclass(frozen=True)
class ActionIntent:
    """A request to write `code` as the full content of `filename`."""

    filename: str
    code: str
    origin: ActionOrigin


@dataclass
class FileWriteOutcome:
    """Result of materializing an intent. Both flags false means declined."""

    path: Path
    created: bool = False
    overwritten: bool = False

    @property
    def written(self) -> bool:
        return self.created or self.overwritten


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"  # no API key stored
    HTTP = "http"  # non-2xx response
    TRANSPORT = "transport"  # network failure or undecodable body


@dataclass
class CompletionResult:
    """Outcome of a completion call.

    `text` is always what the user sees: the model answer, or a formatted
    error message when `error` is set.
    """

    text: str
    error: Optional[ErrorKind] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None
