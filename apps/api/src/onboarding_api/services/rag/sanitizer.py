"""Plain-text cleanup for model output.

Prompts ask for plain text, but models still emit markdown now and then, so
every answer passes through ``to_plain_text`` before it reaches a caller.
Rules run in this order:

1. backslash escapes of markdown punctuation are resolved
2. fenced code blocks are dropped
3. horizontal rules are dropped
4. ``*``/``+`` list markers become ``-``
5. headers keep their text
6. bold, then italic markers are unwrapped
7. inline code keeps its text
8. links and images keep their label
9. whitespace is normalized and list items get a blank line before them
10. leftover ``*`` and backticks are removed, as is ``#`` when it opens a line
    or is not attached to a word (``tour #3`` keeps its hash)
11. a terminal period is added when the text has no terminal punctuation
"""

from __future__ import annotations

import re

_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\\([\\`*_{}\[\]()#+\-.!])"), r"\1"),
    (re.compile(r"```[\s\S]*?```"), ""),
    (re.compile(r"^[ \t]*([-*_])(?:[ \t]*\1){2,}[ \t]*$", re.MULTILINE), ""),
    (re.compile(r"^([ \t]*)[*+][ \t]+", re.MULTILINE), r"\1- "),
    (re.compile(r"^#{1,6}[ \t]+(.*)$", re.MULTILINE), r"\1"),
    (re.compile(r"\*\*(.+?)\*\*"), r"\1"),
    (re.compile(r"(?<!\w)__(.+?)__(?!\w)"), r"\1"),
    (re.compile(r"\*(.+?)\*"), r"\1"),
    (re.compile(r"(?<!\w)_(?!\s)(.+?)(?<!\s)_(?!\w)"), r"\1"),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"!?\[([^\]]+)\]\([^)]*\)"), r"\1"),
]

_LAYOUT_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\n{3,}"), "\n\n"),
    (re.compile(r"\n(\d+\.)"), r"\n\n\1"),
    (re.compile(r"\n(-[ \t])"), r"\n\n\1"),
    (re.compile(r"[ \t]+"), " "),
]

_LEFTOVER_MARKUP = re.compile(r"[*`]|^[ \t]*#+|#+(?!\w)", re.MULTILINE)
_DOUBLE_SPACES = re.compile(r" {2,}")
_BLANK_LINES = re.compile(r"\n\s*\n")
_TERMINAL_PUNCTUATION = re.compile(r"[.!?]$")


def strip_markdown(text: str) -> str:
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    return text


def to_plain_text(raw: str) -> str:
    text = strip_markdown(raw.replace("\r\n", "\n"))
    for pattern, replacement in _LAYOUT_RULES:
        text = pattern.sub(replacement, text)

    text = _LEFTOVER_MARKUP.sub("", text)
    text = _DOUBLE_SPACES.sub(" ", text)
    text = _BLANK_LINES.sub("\n\n", text)
    text = "\n".join(line.strip() for line in text.split("\n")).strip()

    if text and not _TERMINAL_PUNCTUATION.search(text):
        text += "."
    return text
