"""Helpers for cleansing recognized text."""

from __future__ import annotations

_LINK_PREFIXES = ("https://", "http://", "www.")
_TRAILING_PUNCTUATION = ".,;:!?)]}>'\""
_BRACKET_PAIRS = {")": "(", "]": "[", "}": "{"}


def normalize_text(text: str, keep_line_breaks: bool) -> str:
    """Apply the line-break policy to raw recognized text."""

    if keep_line_breaks:
        return text

    flattened = text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")
    return collapse_spaces(flattened).strip()


def collapse_spaces(text: str) -> str:
    """Replace every run of two or more spaces with a single space."""

    pieces: list[str] = []
    previous_space = False
    for char in text:
        if char == " ":
            if previous_space:
                continue
            previous_space = True
        else:
            previous_space = False
        pieces.append(char)
    return "".join(pieces)


def find_first_link(text: str) -> str | None:
    """Return the first web link in ``text``, or ``None``."""

    for token in text.split():
        lowered = token.lower()
        for prefix in _LINK_PREFIXES:
            start = lowered.find(prefix)
            if start == -1:
                continue
            candidate = _trim_link(token[start:])
            if len(candidate) <= len(prefix):
                continue
            if prefix == "www.":
                return f"https://{candidate}"
            return candidate
    return None


def _trim_link(candidate: str) -> str:
    """Drop trailing punctuation; a closing bracket stays while it has a match."""

    while candidate and candidate[-1] in _TRAILING_PUNCTUATION:
        closer = candidate[-1]
        opener = _BRACKET_PAIRS.get(closer)
        if opener is not None and candidate.count(closer) <= candidate.count(opener):
            break
        candidate = candidate[:-1]
    return candidate
