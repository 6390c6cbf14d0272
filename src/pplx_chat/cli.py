"""CLI entry point for pplx-chat."""

import asyncio
import logging
from pathlib import Path

import click
import uvicorn

from .backends import get_provider
from .chat import AGENTIC_MODE, ChatSession
from .config import API_KEY_KEY, get_default_model, get_workspace_roots
from .export import history_to_json, history_to_markdown
from .materializer import EditorHost, FileMaterializer
from .session import SessionStore
from .storage import get_store

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"/exit", "/quit"}


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity.",
)
def main(log_level: str):
    """Chat with Perplexity and let it write files into your workspace."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--port", default=8080, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
def serve(port: int, host: str):
    """Start the web interface."""
    click.echo(f"Starting pplx-chat on http://{host}:{port}")
    uvicorn.run("pplx_chat.server:app", host=host, port=port, reload=False)


@main.command("set-key")
@click.option("--key", prompt="Perplexity API key", hide_input=True, help="API key to store.")
def set_key(key: str):
    """Store the Perplexity API key."""
    key = key.strip()
    if not key:
        raise click.UsageError("API key cannot be empty.")
    asyncio.run(get_store().store(API_KEY_KEY, key))
    click.echo("API key saved.")


@main.command()
@click.option("--format", "fmt", default="text", type=click.Choice(["text", "md", "json"]), help="Output format.")
@click.option("--clear", is_flag=True, help="Delete the stored conversation.")
def history(fmt: str, clear: bool):
    """Print or clear the stored conversation."""
    sessions = SessionStore(get_store())
    if clear:
        asyncio.run(sessions.clear())
        click.echo("History cleared.")
        return

    turns = asyncio.run(sessions.load())
    if fmt == "md":
        click.echo(history_to_markdown(turns))
    elif fmt == "json":
        click.echo(history_to_json(turns))
    else:
        for turn in turns:
            click.secho(f"{turn.role}:", bold=True)
            click.echo(turn.content)
            click.echo()


class TerminalEditorHost(EditorHost):
    """Confirmation and file display for the terminal chat."""

    async def confirm(self, message: str) -> bool:
        try:
            return await asyncio.to_thread(click.confirm, message, default=False)
        except click.Abort:
            return False

    async def open_file(self, path: Path, content: str) -> None:
        # Open in a text editor; the OS default action could execute scripts.
        click.secho(f"Opening {path}", fg="cyan")
        await asyncio.to_thread(click.edit, filename=str(path))


async def _print_message(message: dict) -> None:
    command = message.get("command")
    if command == "response":
        click.echo(message["text"])
    elif command == "agenticInfo":
        click.secho(message["text"], fg="yellow")


async def _chat_loop(model: str, mode: str, workspace: Path | None) -> None:
    store = get_store()
    roots = [workspace] if workspace else get_workspace_roots()
    session = ChatSession(
        sessions=SessionStore(store),
        provider=get_provider(store),
        materializer=FileMaterializer(TerminalEditorHost(), roots),
    )

    turns = await session.load_history()
    if turns:
        click.secho(f"Resuming conversation with {len(turns)} messages.", dim=True)

    while True:
        try:
            text = await asyncio.to_thread(click.prompt, "you", prompt_suffix="> ")
        except click.Abort:
            break
        if text.strip() in EXIT_COMMANDS:
            break
        if not text.strip():
            continue
        await session.ask(text, model, mode, _print_message)


@main.command()
@click.option("--model", default=None, help="Model name (default: $PPLX_CHAT_MODEL or sonar-pro).")
@click.option("--agentic/--no-agentic", default=False, help="Also act on file instructions in answers.")
@click.option(
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for bare filenames (default: $PPLX_CHAT_WORKSPACE or the current directory).",
)
def chat(model: str | None, agentic: bool, workspace: Path | None):
    """Chat in the terminal. Type /exit to leave."""
    mode = AGENTIC_MODE if agentic else "chat"
    asyncio.run(_chat_loop(model or get_default_model(), mode, workspace))
    click.echo("Bye.")
