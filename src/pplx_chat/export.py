"""Export the conversation log to Markdown and JSON formats."""

import json

from .core import ChatTurn


def history_to_markdown(turns: list[ChatTurn], title: str = "pplx-chat conversation") -> str:
    """Export the turns as clean Markdown, one section per turn."""
    lines = [f"# {title}", ""]
    lines.append(f"**Messages:** {len(turns)}")
    lines.extend(["", "---", ""])

    for turn in turns:
        lines.append(f"## {turn.role.capitalize()}")
        lines.append("")
        lines.append(turn.content)
        lines.extend(["", "---", ""])

    return "\n".join(lines)


def history_to_json(turns: list[ChatTurn]) -> str:
    """Export the turns as structured JSON."""
    data = {
        "message_count": len(turns),
        "messages": [turn.to_dict() for turn in turns],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)
