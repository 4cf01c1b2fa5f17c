from .buffer import DEFAULT_BUFFER_POOL, BufferPool, CharBuffer
from .minifier import (
    Minifier,
    MinifyState,
    Region,
    compress_whitespace,
    minify,
    minify_to,
    minify_tokens,
    trim_style,
)
from .serialize import serialize_token, to_html, write_html
from .settings import DEFAULT_SETTINGS, MinifySettings
from .tokenizer import Tokenizer, TokenizerOpts, tokenize
from .tokens import CharacterTokens, CommentToken, DoctypeToken, ParseError, Tag

__all__ = [
    "DEFAULT_BUFFER_POOL",
    "DEFAULT_SETTINGS",
    "BufferPool",
    "CharBuffer",
    "CharacterTokens",
    "CommentToken",
    "DoctypeToken",
    "Minifier",
    "MinifySettings",
    "MinifyState",
    "ParseError",
    "Region",
    "Tag",
    "Tokenizer",
    "TokenizerOpts",
    "compress_whitespace",
    "minify",
    "minify_to",
    "minify_tokens",
    "serialize_token",
    "to_html",
    "tokenize",
    "trim_style",
    "write_html",
]
