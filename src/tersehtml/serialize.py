"""Token serialization back to HTML text."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TextIO

from .tokens import CharacterTokens, CommentToken, DoctypeToken, Tag


def _choose_attr_quote(value: str) -> str:
    if '"' in value and "'" not in value:
        return "'"
    return '"'


def _escape_attr_value(value: str, quote_char: str) -> str:
    # Values are kept as written in the source, character references
    # included, so only the delimiting quote needs escaping.
    if quote_char == '"':
        return value.replace('"', "&quot;")
    return value.replace("'", "&#39;")


def _can_unquote_attr_value(value: str) -> bool:
    for ch in value:
        if ch in {'"', "'", "=", "<", ">", "`"}:
            return False
        if ch in {" ", "\t", "\n", "\f", "\r"}:
            return False
    return True


def serialize_start_tag(
    name: str,
    attrs: Iterable[tuple[str, str | None]] | None,
    *,
    self_closing: bool = False,
    quote_attr_values: bool = True,
) -> str:
    parts: list[str] = ["<", name]
    for key, value in attrs or ():
        if value is None:
            parts.extend([" ", key])
            continue

        if value == "":
            parts.extend([" ", key, '=""'])
            continue

        if not quote_attr_values and _can_unquote_attr_value(value):
            parts.extend([" ", key, "=", value])
        else:
            quote = _choose_attr_quote(value)
            parts.extend([" ", key, "=", quote, _escape_attr_value(value, quote), quote])

    parts.append("/>" if self_closing else ">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def serialize_token(token: Any, *, quote_attr_values: bool = True) -> str:
    """Render a single token as HTML text."""
    if isinstance(token, CharacterTokens):
        return token.data or ""
    if isinstance(token, Tag):
        if token.kind == Tag.END:
            return serialize_end_tag(token.name)
        return serialize_start_tag(
            token.name,
            token.attrs,
            self_closing=token.self_closing,
            quote_attr_values=quote_attr_values,
        )
    if isinstance(token, CommentToken):
        if token.raw is not None:
            return token.raw
        return f"<!--{token.data or ''}-->"
    if isinstance(token, DoctypeToken):
        return f"<!{token.data or ''}>"
    raise TypeError(f"Unsupported token: {type(token).__name__}")


def to_html(tokens: Iterable[Any], *, quote_attr_values: bool = True) -> str:
    """Serialize a token sequence into a single string."""
    return "".join(serialize_token(token, quote_attr_values=quote_attr_values) for token in tokens)


def write_html(tokens: Iterable[Any], writer: TextIO, *, quote_attr_values: bool = True) -> None:
    """Serialize a token sequence into `writer`, one token at a time."""
    for token in tokens:
        text = serialize_token(token, quote_attr_values=quote_attr_values)
        if text:
            writer.write(text)
