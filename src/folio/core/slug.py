"""Slug helpers shared by tag derivation, tag lookups, categories and heading anchors."""

from __future__ import annotations

import re

_DROPPED_CHARS_RE = re.compile(r"[.'’]")
_SEPARATOR_RE = re.compile(r"[\W_]+")
_HEADING_STRIP_RE = re.compile(r"[^\w\- ]")


def slugify(value: str) -> str:
    """Return the URL slug used for tags, authors and category paths.

    ``slugify("Next.js") == "nextjs"`` and ``slugify("  A B  ") == "a-b"``.
    Applying it twice gives the same result as applying it once.
    """
    lowered = _DROPPED_CHARS_RE.sub("", value.strip().lower())
    return _SEPARATOR_RE.sub("-", lowered).strip("-")


def heading_slug(text: str) -> str:
    """GitHub-style anchor for a heading, without de-duplication."""
    return _HEADING_STRIP_RE.sub("", text.strip().lower()).replace(" ", "-")


class HeadingSlugger:
    """Produces unique anchors for the headings of one rendered document.

    Repeated headings get ``-1``, ``-2`` ... suffixes in order of appearance,
    so ids written into the HTML and ids listed in the TOC always agree.
    """

    def __init__(self) -> None:
        self._occurrences: dict[str, int] = {}

    def slug(self, text: str) -> str:
        base = heading_slug(text)
        result = base
        while result in self._occurrences:
            self._occurrences[base] += 1
            result = f"{base}-{self._occurrences[base]}"
        self._occurrences[result] = 0
        return result

    def reset(self) -> None:
        self._occurrences.clear()
