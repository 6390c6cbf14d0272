"""Text patterns that spot file-creation requests in prompts and responses.

Two rule tables drive everything here:

- USER_FILENAME_RULES: tried in order against the user's prompt, the first
  rule that matches supplies the filename.
- AGENTIC_FILE_RULES: scanned over the whole model response, every
  occurrence of every rule is a (filename, code) candidate.

Each rule pairs a compiled pattern with an extractor that turns the match
into clean values, so rules can be tested and extended one at a time.
All functions are pure.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

_NAME_QUOTES = "`'\""
_NAME_TRAILING = ".,;:!?"

# A fenced block: a ``` line with any info string, body, then a line starting with ```.
_FENCE = r"^```[^\n`]*\r?\n(.*?)^```"

CODE_BLOCK_RE = re.compile(_FENCE, re.DOTALL | re.MULTILINE)


def clean_filename(raw: str) -> str:
    """Strip quoting and sentence punctuation captured around a filename."""
    name = raw.strip().strip(_NAME_QUOTES)
    while name:
        if name[-1] in _NAME_TRAILING:
            name = name[:-1]
        elif name[-1] == ")" and name.count(")") > name.count("("):
            # closing a parenthetical around the name, not part of it
            name = name[:-1]
        else:
            break
    return name.strip(_NAME_QUOTES)


def _filename_from_group(match: re.Match) -> Optional[str]:
    name = clean_filename(match.group(1))
    return name or None


def _file_block_from_groups(match: re.Match) -> Optional[tuple[str, str]]:
    name = clean_filename(match.group(1))
    if not name:
        return None
    return name, match.group(2).strip()


@dataclass(frozen=True)
class FilenameRule:
    """A pattern that pulls a target filename out of a user prompt."""

    name: str
    pattern: re.Pattern
    extract: Callable[[re.Match], Optional[str]] = _filename_from_group

    def apply(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        if not match:
            return None
        return self.extract(match)


@dataclass(frozen=True)
class FileBlock:
    """A (filename, code) pair found in a response, with its text offset."""

    start: int
    filename: str
    code: str
    rule: str


@dataclass(frozen=True)
class FileBlockRule:
    """A pattern that pulls a filename and its fenced code out of a response."""

    name: str
    pattern: re.Pattern
    extract: Callable[[re.Match], Optional[tuple[str, str]]] = _file_block_from_groups

    def apply(self, text: str) -> list[FileBlock]:
        blocks = []
        for match in self.pattern.finditer(text):
            extracted = self.extract(match)
            if extracted is None:
                continue
            filename, code = extracted
            blocks.append(FileBlock(start=match.start(), filename=filename, code=code, rule=self.name))
        return blocks


USER_FILENAME_RULES: tuple[FilenameRule, ...] = (
    # "create a new file named 'app.py'", "write a program called calc.js"
    FilenameRule(
        name="create-file",
        pattern=re.compile(
            r"""(?:create|write|make)(?: a)? (?:new )?(?:file|program)(?: named| called)? ['"]?([^'"}\s]+)['"]?""",
            re.IGNORECASE,
        ),
    ),
    # "save the following code to a file named out.txt"
    FilenameRule(
        name="save-code-to-file",
        pattern=re.compile(
            r"""(?:save|write)(?: the)?(?: following)? (?:code|program) (?:to|in)(?: a)? file(?: named| called)? ['"]?([^'"}\s]+)['"]?""",
            re.IGNORECASE,
        ),
    ),
    # "implement solve.py"
    FilenameRule(
        name="implement-python-file",
        pattern=re.compile(
            r"""(?:implement|create) (?:a )?['"]?([^'"}\s]+\.py)['"]?""",
            re.IGNORECASE,
        ),
    ),
)


AGENTIC_FILE_RULES: tuple[FileBlockRule, ...] = (
    # "Create a file named x.py with the following content:" + fence
    FileBlockRule(
        name="file-with-following-content",
        pattern=re.compile(
            r"(?:create|add|make)(?: a)? file(?: named)? (\S+)[^\n]*?with(?: the)? following content:?[ \t]*\r?\n"
            + _FENCE,
            re.IGNORECASE | re.DOTALL | re.MULTILINE,
        ),
    ),
    # "I've created a file `x.py`:" + fence
    FileBlockRule(
        name="created-file",
        pattern=re.compile(
            r"(?:Here['’]s the|I['’]ve created|Creating) (?:a )?(?:new )?file `?([^`\s]+)`?:?[ \t]*\r?\n"
            + _FENCE,
            re.IGNORECASE | re.DOTALL | re.MULTILINE,
        ),
    ),
)


def find_filename(prompt: str, rules=USER_FILENAME_RULES) -> Optional[str]:
    """Return the filename requested by `prompt`; the first matching rule wins."""
    for rule in rules:
        name = rule.apply(prompt)
        if name:
            return name
    return None


def find_code_block(response: str) -> Optional[str]:
    """Return the trimmed body of the first fenced code block, if any."""
    match = CODE_BLOCK_RE.search(response)
    if not match:
        return None
    return match.group(1).strip()


def find_file_blocks(response: str, rules=AGENTIC_FILE_RULES) -> list[FileBlock]:
    """Return every agentic (filename, code) match in response-text order."""
    blocks = []
    for rule in rules:
        blocks.extend(rule.apply(response))
    blocks.sort(key=lambda b: b.start)
    return blocks
