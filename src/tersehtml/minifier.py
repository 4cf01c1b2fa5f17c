"""Streaming HTML minification over a token sequence.

The minifier is a single forward pass. Whitespace decisions that depend on
what comes next are deferred through a three-valued `MinifyState` rather
than by looking ahead or rewriting earlier output, and the only data held
between tokens is that state, the current `Region`, and (inside <script>)
the borrowed script buffer.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from enum import IntEnum
from typing import Any, TextIO

from .buffer import DEFAULT_BUFFER_POOL, BufferPool, CharBuffer
from .constants import JAVASCRIPT_MIME_TYPES, SPACE_CHARACTERS
from .scripts import minify_script
from .serialize import to_html, write_html
from .settings import DEFAULT_SETTINGS, MinifySettings
from .smallset import SPACES
from .tokenizer import Tokenizer
from .tokens import CharacterTokens, CommentToken, Tag

logger = logging.getLogger(__name__)

ScriptMinifier = Callable[[TextIO], str]

_WHITESPACE_RUN_PATTERN = re.compile(r"[\t\n\f\r ]+")
# What compress_whitespace would rewrite: a run of two or more, or a lone non-space separator.
_NEEDS_COMPRESSION_PATTERN = re.compile(r"[\t\n\f\r ]{2,}|[\t\n\f\r]")
_JAVASCRIPT_MIME_TYPES = frozenset(JAVASCRIPT_MIME_TYPES)


class MinifyState(IntEnum):
    COMPRESSED = 0
    LAST_CHAR_WAS_SPACE = 1
    SPACE_NEEDED = 2


class Region(IntEnum):
    NONE = 0
    WHITESPACE_PRESERVE = 1
    SCRIPT = 2


def trim_indices(value: str | None) -> tuple[int, int]:
    """Bounds of `value` without its leading and trailing whitespace.

    Returns `(start, end)` with `end` inclusive. For an empty value `end` is
    -1; for a whitespace-only value `end < start`.
    """
    if not value:
        return 0, -1
    length = len(value)
    start = 0
    while start < length and SPACES.contains(value[start]):
        start += 1
    end = length - 1
    while end >= start and SPACES.contains(value[end]):
        end -= 1
    return start, end


def compress_whitespace(value: str, start: int | None = None, end: int | None = None) -> str:
    """Collapse every whitespace run in `value[start:end + 1]` to one space.

    Without bounds the value is trimmed first. When there is nothing to
    rewrite the original string (or a plain slice of it) is returned.
    """
    if start is None or end is None:
        start, end = trim_indices(value)
    if end < start:
        return ""
    if _NEEDS_COMPRESSION_PATTERN.search(value, start, end + 1) is None:
        if start == 0 and end == len(value) - 1:
            return value
        return value[start : end + 1]
    return _WHITESPACE_RUN_PATTERN.sub(" ", value[start : end + 1])


def trim_style(value: str | None) -> str | None:
    """Trim whitespace around a style value and any trailing `;` separators."""
    if not value:
        return value
    length = len(value)
    start = 0
    while start < length and SPACES.contains(value[start]):
        start += 1
    end = length - 1
    while end >= start and (value[end] == ";" or SPACES.contains(value[end])):
        end -= 1
    if start == 0 and end == length - 1:
        return value
    return value[start : end + 1]


def is_conditional_comment(data: str | None) -> bool:
    if not data:
        return False
    data = data.strip(SPACE_CHARACTERS)
    return data.startswith("[if") or data.endswith("endif]")


def _is_javascript(tag: Tag) -> bool:
    script_type = tag.get("type")
    if script_type is None:
        return True
    essence = script_type.split(";", 1)[0].strip(SPACE_CHARACTERS).lower()
    return essence in _JAVASCRIPT_MIME_TYPES


def _normalize_attributes(tag: Tag) -> Tag:
    attrs = []
    for key, value in tag.attrs:
        if value is not None:
            if key == "style":
                value = trim_style(value)
            elif key == "class":
                value = compress_whitespace(value)
        attrs.append((key, value))
    return Tag(tag.kind, tag.name, attrs, tag.self_closing, tag.pos)


class Minifier:
    """Single-pass token minifier.

    `run()` is a generator: output tokens are computed only as the consumer
    asks for them, and abandoning the generator mid-way releases any script
    buffer without emitting it.
    """

    __slots__ = ("buffer_pool", "env_debug", "script_minifier", "settings")

    def __init__(
        self,
        settings: MinifySettings | None = None,
        *,
        script_minifier: ScriptMinifier | None = None,
        buffer_pool: BufferPool | None = None,
        debug: bool = False,
    ) -> None:
        self.settings = settings if settings is not None else DEFAULT_SETTINGS
        self.script_minifier = script_minifier if script_minifier is not None else minify_script
        self.buffer_pool = buffer_pool if buffer_pool is not None else DEFAULT_BUFFER_POOL
        self.env_debug = bool(debug)

    def debug(self, message: str) -> None:
        if self.env_debug:
            logger.debug(message)

    def run(self, tokens: Iterable[Any]) -> Iterator[Any]:
        settings = self.settings
        block_level = settings.block_level_elements
        preserve_inner = settings.preserve_inner_space_tags
        preserve_surrounding = settings.preserve_surrounding_space_tags

        state = MinifyState.LAST_CHAR_WAS_SPACE
        region = Region.NONE
        script = None
        script_is_javascript = True

        try:
            for token in tokens:
                if isinstance(token, CommentToken):
                    # Dropped or kept, comments never settle a pending space.
                    if is_conditional_comment(token.data):
                        yield token
                    elif self.env_debug:
                        self.debug(f"Dropped comment at {token.pos}")
                    continue

                if isinstance(token, CharacterTokens):
                    value = token.data
                    if not value:
                        continue
                    if region == Region.WHITESPACE_PRESERVE:
                        yield token
                        continue
                    if region == Region.SCRIPT:
                        if script is None:
                            script = self.buffer_pool.acquire()
                        script.append(value)
                        continue

                    start, end = trim_indices(value)
                    if end < start:
                        if state == MinifyState.COMPRESSED:
                            state = MinifyState.SPACE_NEEDED
                        continue

                    if state == MinifyState.SPACE_NEEDED and start == 0:
                        yield CharacterTokens(" ", token.pos)
                        state = MinifyState.LAST_CHAR_WAS_SPACE

                    if state == MinifyState.LAST_CHAR_WAS_SPACE or start == 0:
                        yield CharacterTokens(compress_whitespace(value, start, end), token.pos)
                    else:
                        # Keep one character of the leading run; it comes out as a single space.
                        yield CharacterTokens(compress_whitespace(value, start - 1, end), token.pos)

                    if end < len(value) - 1:
                        state = MinifyState.SPACE_NEEDED
                    else:
                        state = MinifyState.COMPRESSED
                    continue

                name = getattr(token, "name", None)
                is_tag = isinstance(token, Tag)
                is_end_tag = is_tag and token.kind == Tag.END

                if state == MinifyState.SPACE_NEEDED:
                    if is_end_tag and name in block_level:
                        state = MinifyState.LAST_CHAR_WAS_SPACE
                    else:
                        yield CharacterTokens(" ", token.pos)
                        if name in preserve_surrounding:
                            state = MinifyState.COMPRESSED
                        else:
                            state = MinifyState.LAST_CHAR_WAS_SPACE

                if is_end_tag and name == "script" and script is not None:
                    yield CharacterTokens(self._flush_script(script, script_is_javascript), token.pos)
                    self.buffer_pool.release(script)
                    script = None

                if is_tag and token.kind == Tag.START and token.has_attr("style", "class"):
                    yield _normalize_attributes(token)
                else:
                    yield token

                if not is_tag:
                    continue
                previous = region
                if not is_end_tag and name in preserve_inner:
                    region = Region.WHITESPACE_PRESERVE
                elif not is_end_tag and name == "script":
                    region = Region.SCRIPT
                    script_is_javascript = _is_javascript(token)
                elif is_end_tag and (name in preserve_inner or name == "script"):
                    region = Region.NONE
                if self.env_debug and region != previous:
                    self.debug(f"Region {previous.name} -> {region.name} at <{'/' if is_end_tag else ''}{name}>")
        finally:
            if script is not None:
                self.buffer_pool.release(script)

    def _flush_script(self, buffer: CharBuffer, is_javascript: bool) -> str:
        if not is_javascript:
            return buffer.getvalue()
        if self.env_debug:
            self.debug(f"Minifying script of {len(buffer)} characters")
        return self.script_minifier(buffer.reader())


def minify_tokens(
    tokens: Iterable[Any],
    settings: MinifySettings | None = None,
    *,
    script_minifier: ScriptMinifier | None = None,
    buffer_pool: BufferPool | None = None,
    debug: bool = False,
) -> Iterator[Any]:
    """Lazily minify a token sequence."""
    minifier = Minifier(settings, script_minifier=script_minifier, buffer_pool=buffer_pool, debug=debug)
    return minifier.run(tokens)


def minify(
    html: str | None,
    settings: MinifySettings | None = None,
    *,
    quote_attr_values: bool = True,
    **kwargs: Any,
) -> str:
    """Minify an HTML document held in memory and return the result."""
    tokens = Tokenizer().tokens(html)
    return to_html(minify_tokens(tokens, settings, **kwargs), quote_attr_values=quote_attr_values)


def minify_to(
    html: str | None,
    writer: TextIO,
    settings: MinifySettings | None = None,
    *,
    quote_attr_values: bool = True,
    **kwargs: Any,
) -> None:
    """Minify an HTML document held in memory straight into `writer`."""
    tokens = Tokenizer().tokens(html)
    write_html(minify_tokens(tokens, settings, **kwargs), writer, quote_attr_values=quote_attr_values)
