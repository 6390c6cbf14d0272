"""Platform-aware settings and path resolution for pplx-chat."""

import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

API_KEY_KEY = "pplx.apiKey"
HISTORY_KEY = "pplx.chatHistory"

DEFAULT_API_URL = "https://api.perplexity.ai/chat/completions"
DEFAULT_MODEL = "sonar-pro"
DEFAULT_TIMEOUT = 120.0


def get_data_dir() -> Path:
    """Return the directory holding pplx-chat's persisted state."""
    env = os.environ.get("PPLX_CHAT_HOME")
    if env:
        return Path(env)

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "pplx-chat"
    elif sys.platform == "win32":
        return Path(os.environ.get("APPDATA", "")) / "pplx-chat"
    else:  # Linux
        return Path.home() / ".config" / "pplx-chat"


def get_secrets_path() -> Path:
    """Return the path of the key/value file holding the API key and history."""
    return get_data_dir() / "secrets.json"


def get_workspace_roots() -> list[Path]:
    """Return the open workspace roots, first one wins for bare filenames."""
    env = os.environ.get("PPLX_CHAT_WORKSPACE")
    if env:
        return [Path(p) for p in env.split(os.pathsep) if p]
    return [Path.cwd()]


def get_api_url() -> str:
    return os.environ.get("PPLX_API_URL", DEFAULT_API_URL)


def get_default_model() -> str:
    return os.environ.get("PPLX_CHAT_MODEL", DEFAULT_MODEL)


def get_request_timeout() -> float:
    """Return the transport timeout in seconds."""
    env = os.environ.get("PPLX_CHAT_TIMEOUT")
    if env:
        try:
            return float(env)
        except ValueError:
            logger.warning("Ignoring invalid PPLX_CHAT_TIMEOUT %r, using %ss", env, DEFAULT_TIMEOUT)
    return DEFAULT_TIMEOUT
