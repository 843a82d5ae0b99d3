from __future__ import annotations

import re

_CRLF_PATTERN = re.compile(r"\r\n?")
_EXCESS_NEWLINES_PATTERN = re.compile(r"\n{3,}")
_HORIZONTAL_SPACE_PATTERN = re.compile(r"[ \t]+")

# a boundary is only used when it falls in the second half of the window
_MIN_BREAK_RATIO = 0.5


def preprocess_content(content: str) -> str:
    normalized = _CRLF_PATTERN.sub("\n", content)
    normalized = _EXCESS_NEWLINES_PATTERN.sub("\n\n", normalized)
    normalized = _HORIZONTAL_SPACE_PATTERN.sub(" ", normalized)
    return normalized.strip()


def _find_break_point(window: str) -> int:
    return max(window.rfind("."), window.rfind("\n"))


def split_spans(text: str, *, chunk_size: int, chunk_overlap: int) -> list[tuple[int, int]]:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    if chunk_overlap < 0:
        raise ValueError("chunk_overlap must be >= 0")
    if chunk_overlap >= chunk_size:
        raise ValueError("chunk_overlap must be smaller than chunk_size")
    if not text:
        raise ValueError("text must not be empty")

    text_length = len(text)
    if text_length <= chunk_size:
        return [(0, text_length)]

    spans: list[tuple[int, int]] = []
    cursor = 0

    while cursor < text_length:
        end = min(text_length, cursor + chunk_size)
        if end < text_length:
            break_point = _find_break_point(text[cursor:end])
            if break_point > chunk_size * _MIN_BREAK_RATIO:
                end = cursor + break_point + 1

        spans.append((cursor, end))

        if end >= text_length:
            break
        cursor = max(end - chunk_overlap, cursor + 1)

    return spans
