"""Decide whether a prompt/response pair should produce a file write."""

import logging
from typing import Optional

from .core import ActionIntent, ActionOrigin
from .patterns import find_code_block, find_file_blocks, find_filename

logger = logging.getLogger(__name__)


def resolve(user_prompt: str, model_response: str, agentic: bool = False) -> Optional[ActionIntent]:
    """Return at most one file-creation intent for this exchange.

    An explicit filename in the prompt takes priority and short-circuits:
    if the response has no code block, nothing happens, even in agentic
    mode. Otherwise, in agentic mode, the earliest "I've created a file ..."
    style block in the response wins.
    """
    filename = find_filename(user_prompt)
    if filename:
        code = find_code_block(model_response)
        if not code:
            logger.info("Prompt asked for %s but the response has no code block", filename)
            return None
        return ActionIntent(filename=filename, code=code, origin=ActionOrigin.EXPLICIT_USER_REQUEST)

    if not agentic:
        return None

    for block in find_file_blocks(model_response):
        if block.code:
            return ActionIntent(filename=block.filename, code=block.code, origin=ActionOrigin.AGENTIC_INFERENCE)
    return None
