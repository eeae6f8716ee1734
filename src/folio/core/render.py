"""Markdown to HTML compilation with heading anchors, a table of contents and callouts."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import re

from markdown_it import MarkdownIt
from markdown_it.token import Token
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from folio.core.cache import CacheLayer
from folio.core.slug import HeadingSlugger
from folio.exceptions import RenderError
from folio.models import RenderedContent, TocItem

logger = logging.getLogger(__name__)

MARKDOWN_TAG = "markdown"
TOC_DEPTHS = (2, 3)

_CODE_FORMATTER = HtmlFormatter(nowrap=True)

CALLOUT_ICONS: dict[str, str] = {
    "info": (
        '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20" viewBox="0 0 24 24" fill="none" '
        'stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">'
        '<circle cx="12" cy="12" r="10"></circle><path d="M12 16v-4"></path><path d="M12 8h.01"></path></svg>'
    ),
    "warning": (
        '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20" viewBox="0 0 24 24" fill="none" '
        'stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">'
        '<path d="m21.73 18-8-14a2 2 0 0 0-3.48 0l-8 14A2 2 0 0 0 4 21h16a2 2 0 0 0 1.73-3Z"></path>'
        '<path d="M12 9v4"></path><path d="M12 17h.01"></path></svg>'
    ),
    "success": (
        '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20" viewBox="0 0 24 24" fill="none" '
        'stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">'
        '<path d="M22 11.08V12a10 10 0 1 1-5.93-9.14"></path><polyline points="22 4 12 14.01 9 11.01"></polyline></svg>'
    ),
    "danger": (
        '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20" viewBox="0 0 24 24" fill="none" '
        'stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">'
        '<circle cx="12" cy="12" r="10"></circle><path d="m15 9-6 6"></path><path d="m9 9 6 6"></path></svg>'
    ),
}

_CALLOUT_RE = re.compile(r"^\[!(info|warning|success|danger)\]", re.IGNORECASE)


def fingerprint(body: str) -> str:
    return hashlib.sha256(body.encode("utf-8")).hexdigest()


def highlight_code(code: str, lang: str, _attrs: str) -> str:
    """Pygments token spans for a fenced block; empty for unknown languages so it is escaped as plain text."""
    if not lang:
        return ""
    try:
        lexer = get_lexer_by_name(lang)
    except ClassNotFound:
        return ""
    return highlight(code, lexer, _CODE_FORMATTER)


def _html_token(content: str) -> Token:
    token = Token("html_block", "", 0)
    token.content = content
    token.block = True
    return token


def _plain_text(children: list[Token] | None) -> str:
    parts: list[str] = []
    for child in children or []:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif child.children:
            parts.append(_plain_text(child.children))
    return "".join(parts)


def _strip_callout_marker(children: list[Token], marker_length: int) -> None:
    remaining = marker_length
    while children and remaining > 0 and children[0].type == "text":
        first = children[0]
        if len(first.content) <= remaining:
            remaining -= len(first.content)
            children.pop(0)
        else:
            first.content = first.content[remaining:]
            remaining = 0

    while children:
        first = children[0]
        if first.type == "text":
            first.content = first.content.lstrip()
            if first.content:
                return
            children.pop(0)
        elif first.type in ("softbreak", "hardbreak"):
            children.pop(0)
        else:
            return


def _callout_type(tokens: list[Token], open_index: int) -> str | None:
    if open_index + 2 >= len(tokens):
        return None
    if tokens[open_index + 1].type != "paragraph_open" or tokens[open_index + 2].type != "inline":
        return None
    inline = tokens[open_index + 2]
    match = _CALLOUT_RE.match(inline.content)
    if match is None:
        return None
    _strip_callout_marker(inline.children or [], match.end())
    inline.content = inline.content[match.end() :].lstrip()
    return match.group(1).lower()


def _rewrite_callouts(tokens: list[Token]) -> list[Token]:
    opened: list[tuple[int, str | None]] = []
    after: dict[int, Token] = {}
    before: dict[int, Token] = {}
    for index, token in enumerate(tokens):
        if token.type == "blockquote_open":
            kind = _callout_type(tokens, index)
            if kind is not None:
                token.attrSet("class", f"callout callout-{kind}")
                token.attrSet("data-callout-type", kind)
                after[index] = _html_token(
                    f'<span class="callout-icon" aria-hidden="true">{CALLOUT_ICONS[kind]}</span>\n'
                    '<div class="callout-content">\n'
                )
            opened.append((index, kind))
        elif token.type == "blockquote_close" and opened:
            _, kind = opened.pop()
            if kind is not None:
                before[index] = _html_token("</div>\n")

    if not after:
        return tokens
    rewritten: list[Token] = []
    for index, token in enumerate(tokens):
        if index in before:
            rewritten.append(before[index])
        rewritten.append(token)
        if index in after:
            rewritten.append(after[index])
    return rewritten


def _anchor_headings(tokens: list[Token]) -> list[TocItem]:
    slugger = HeadingSlugger()
    toc: list[TocItem] = []
    for index, token in enumerate(tokens):
        if token.type != "heading_open" or index + 1 >= len(tokens):
            continue
        inline = tokens[index + 1]
        if inline.type != "inline":
            continue
        text = _plain_text(inline.children).strip()
        if not text:
            continue
        anchor = slugger.slug(text)
        token.attrSet("id", anchor)

        link_open = Token("link_open", "a", 1)
        link_open.attrSet("href", f"#{anchor}")
        link_open.attrSet("class", "heading-link")
        inline.children = [link_open, *(inline.children or []), Token("link_close", "a", -1)]

        depth = int(token.tag[1:])
        if depth in TOC_DEPTHS:
            toc.append(TocItem(id=anchor, text=text, depth=depth))
    return toc


class MarkdownRenderer:
    """Compiles markdown bodies to HTML, memoized by a fingerprint of the body."""

    def __init__(self, cache: CacheLayer, ttl_seconds: float = 3600) -> None:
        self._cache = cache
        self._ttl = ttl_seconds
        self._md = MarkdownIt("commonmark", {"html": True, "highlight": highlight_code}).enable(
            ["table", "strikethrough"]
        )

    async def render(self, body: str) -> RenderedContent:
        return await self._cache.memoize(
            f"markdown:{fingerprint(body)}",
            self._ttl,
            (MARKDOWN_TAG,),
            lambda: asyncio.to_thread(self.compile, body),
        )

    def compile(self, body: str) -> RenderedContent:
        """Uncached compilation. Raises ``RenderError`` on failure."""
        try:
            env: dict = {}
            tokens = self._md.parse(body, env)
            tokens = _rewrite_callouts(tokens)
            toc = _anchor_headings(tokens)
            html = self._md.renderer.render(tokens, self._md.options, env)
        except Exception as exc:
            logger.debug("Markdown compilation failed", exc_info=True)
            raise RenderError(f"Failed to render markdown: {exc}") from exc
        return RenderedContent(content=html, toc=tuple(toc))
