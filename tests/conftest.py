"""Shared test fixtures for pplx-chat."""

import json
from pathlib import Path

import pytest

from pplx_chat.chat import ChatSession
from pplx_chat.config import API_KEY_KEY, HISTORY_KEY
from pplx_chat.core import CompletionResult
from pplx_chat.materializer import EditorHost, FileMaterializer
from pplx_chat.provider import CompletionProvider
from pplx_chat.session import SessionStore
from pplx_chat.storage import MemoryKeyValueStore


class FakeHost(EditorHost):
    """Scripted UI: answers confirmations from a list and records everything."""

    def __init__(self, answers=None, fail_on_confirm=False, fail_on_open=False):
        self.answers = list(answers or [])
        self.fail_on_confirm = fail_on_confirm
        self.fail_on_open = fail_on_open
        self.questions: list[str] = []
        self.opened: list[tuple[Path, str]] = []

    async def confirm(self, message: str) -> bool:
        self.questions.append(message)
        if self.fail_on_confirm:
            raise OSError("dialog failed")
        return self.answers.pop(0) if self.answers else False

    async def open_file(self, path: Path, content: str) -> None:
        if self.fail_on_open:
            raise OSError("no editor")
        self.opened.append((path, content))


class FakeProvider(CompletionProvider):
    """Returns canned results in order and records every call."""

    name = "fake"

    def __init__(self, *results):
        self.results = [r if isinstance(r, CompletionResult) else CompletionResult(r) for r in results]
        self.calls: list[tuple[str, str]] = []

    async def complete(self, prompt: str, model: str) -> CompletionResult:
        self.calls.append((prompt, model))
        return self.results.pop(0)


class Outbox:
    """Collects outbound UI messages."""

    def __init__(self):
        self.messages: list[dict] = []

    async def __call__(self, message: dict) -> None:
        self.messages.append(message)

    def commands(self) -> list[str]:
        return [m["command"] for m in self.messages]

    def texts(self, command: str) -> list[str]:
        return [m["text"] for m in self.messages if m["command"] == command]


@pytest.fixture
def memory_store():
    return MemoryKeyValueStore({API_KEY_KEY: "pplx-test-key"})


@pytest.fixture
def stored_history(memory_store):
    """A store pre-seeded with one earlier exchange."""
    memory_store._data[HISTORY_KEY] = json.dumps([
        {"role": "user", "content": "What is Python?"},
        {"role": "assistant", "content": "A programming language."},
    ])
    return memory_store


@pytest.fixture
def workspace(tmp_path):
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def outbox():
    return Outbox()


@pytest.fixture
def make_chat(memory_store, workspace):
    """Build a ChatSession around a FakeProvider and FakeHost."""

    def _make(*results, host=None):
        provider = FakeProvider(*results)
        session = ChatSession(
            sessions=SessionStore(memory_store),
            provider=provider,
            materializer=FileMaterializer(host or FakeHost(), [workspace]),
        )
        return session, provider

    return _make
