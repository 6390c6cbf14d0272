"""FastAPI web server for pplx-chat."""

import json
import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, Response

from .backends import get_provider
from .chat import AGENTIC_MODE, ChatSession, agentic_info_message, history_message
from .config import get_default_model, get_workspace_roots
from .export import history_to_json, history_to_markdown
from .materializer import EditorHost, FileMaterializer
from .provider import CompletionProvider
from .session import SessionStore
from .storage import KeyValueStore, get_store

logger = logging.getLogger(__name__)

app = FastAPI(title="pplx-chat", version="0.1.0")

# Store and provider caches (populated on first request)
_store: KeyValueStore | None = None
_provider: CompletionProvider | None = None


def _get_store() -> KeyValueStore:
    """Lazily initialize and cache the key/value store."""
    global _store
    if _store is None:
        _store = get_store()
    return _store


def _get_provider() -> CompletionProvider:
    """Lazily initialize and cache the completion provider."""
    global _provider
    if _provider is None:
        _provider = get_provider(_get_store())
        logger.info("Using provider: %s", _provider.name)
    return _provider


class WebSocketEditorHost(EditorHost):
    """Runs confirmations and file display as messages on the chat socket."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.disconnected = False

    async def send(self, message: dict) -> None:
        if self.disconnected:
            logger.debug("Dropping %s for closed socket", message.get("command"))
            return
        await self.websocket.send_json(message)

    async def confirm(self, message: str) -> bool:
        await self.send({"command": "confirm", "text": message})
        try:
            while True:
                reply = await _receive_message(self.websocket)
                if reply is None:
                    continue
                if reply.get("command") == "confirmResult":
                    return reply.get("answer") == "Yes"
                logger.warning("Ignoring %r while waiting for confirmation", reply.get("command"))
        except WebSocketDisconnect:
            # An abandoned dialog counts as "no".
            self.disconnected = True
            return False

    async def open_file(self, path: Path, content: str) -> None:
        await self.send({"command": "openFile", "path": str(path), "content": content})


async def _receive_message(websocket: WebSocket) -> dict | None:
    """Read one JSON object from the socket; None for anything else."""
    raw = await websocket.receive_text()
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring non-JSON message from chat view")
        return None
    return message if isinstance(message, dict) else None


def _new_chat_session(host: EditorHost) -> ChatSession:
    return ChatSession(
        sessions=SessionStore(_get_store()),
        provider=_get_provider(),
        materializer=FileMaterializer(host, get_workspace_roots()),
    )


# ── Routes ───────────────────────────────────────────────────────


@app.get("/")
async def index():
    """Serve the chat page."""
    html_path = Path(__file__).parent / "static" / "index.html"
    if not html_path.exists():
        raise HTTPException(status_code=404, detail="Frontend not found")
    return HTMLResponse(html_path.read_text(encoding="utf-8"))


@app.get("/api/history")
async def get_history():
    """Return the persisted conversation."""
    turns = await SessionStore(_get_store()).load()
    return {"history": [t.to_dict() for t in turns]}


@app.delete("/api/history")
async def clear_history():
    """Forget the persisted conversation."""
    await SessionStore(_get_store()).clear()
    logger.info("Chat history cleared")
    return {"history": []}


@app.get("/api/history/export")
async def export_history(format: str = Query("md", description="Export format: md or json")):
    """Export the conversation as Markdown or JSON."""
    turns = await SessionStore(_get_store()).load()

    if format == "json":
        return Response(
            content=history_to_json(turns),
            media_type="application/json",
            headers={"Content-Disposition": 'attachment; filename="pplx-chat.json"'},
        )
    elif format == "md":
        return Response(
            content=history_to_markdown(turns),
            media_type="text/markdown",
            headers={"Content-Disposition": 'attachment; filename="pplx-chat.md"'},
        )
    raise HTTPException(status_code=400, detail=f"Unknown export format: {format}")


@app.websocket("/ws")
async def chat_socket(websocket: WebSocket):
    """The chat view: history on connect, then one ask at a time."""
    await websocket.accept()
    host = WebSocketEditorHost(websocket)
    session = _new_chat_session(host)

    try:
        await host.send(history_message(await session.load_history()))

        while not host.disconnected:
            message = await _receive_message(websocket)
            if message is None:
                continue

            command = message.get("command")
            if command != "ask":
                logger.warning("Ignoring unknown command from chat view: %r", command)
                continue

            text = message.get("text")
            if not isinstance(text, str) or not text.strip():
                await host.send(agentic_info_message("Error: cannot send an empty message"))
                continue

            model = message.get("model") or get_default_model()
            mode = message.get("mode") or "chat"
            if mode != AGENTIC_MODE:
                mode = "chat"
            await session.ask(text, model, mode, host.send)
    except WebSocketDisconnect:
        logger.info("Chat view disconnected")
