import re
import sys
from collections import deque

from .constants import RAWTEXT_ELEMENTS
from .tokens import (
    CharacterTokens,
    CommentToken,
    DoctypeToken,
    ParseError,
    Tag,
)

# CR stays a separator because text is never newline-normalized here.
_WHITESPACE = frozenset("\t\n\f\r ")
_ASCII_LOWER_TABLE = str.maketrans({chr(code): chr(code + 32) for code in range(65, 91)})

_TAG_NAME_TERMINATOR_PATTERN = re.compile(r"[\t\n\f\r />]")
_ATTR_NAME_TERMINATOR_PATTERN = re.compile(r"[\t\n\f\r />=]")
_ATTR_VALUE_UNQUOTED_PATTERN = re.compile(r"[\t\n\f\r >]")
_COMMENT_END_PATTERN = re.compile(r"--!?>")
_RAWTEXT_END_PATTERNS = {}


def _rawtext_end_pattern(name):
    pattern = _RAWTEXT_END_PATTERNS.get(name)
    if pattern is None:
        pattern = re.compile(rf"</{re.escape(name)}(?=[\t\n\f\r />])", re.IGNORECASE)
        _RAWTEXT_END_PATTERNS[name] = pattern
    return pattern


class TokenizerOpts:
    __slots__ = ("collect_errors", "discard_bom", "rawtext_elements")

    def __init__(self, collect_errors=False, discard_bom=True, rawtext_elements=None):
        self.collect_errors = bool(collect_errors)
        self.discard_bom = bool(discard_bom)
        self.rawtext_elements = RAWTEXT_ELEMENTS if rawtext_elements is None else rawtext_elements


class Tokenizer:
    """Source-preserving HTML tokenizer.

    Follows the shape of the HTML5 tokenizer states, but keeps text and
    attribute values exactly as written (no character reference decoding, no
    newline normalization) so that serializing the tokens reproduces the
    source modulo attribute quoting. Tokens are produced lazily by
    :meth:`tokens`.
    """

    DATA = 0
    TAG_OPEN = 1
    END_TAG_OPEN = 2
    TAG_NAME = 3
    BEFORE_ATTRIBUTE_NAME = 4
    ATTRIBUTE_NAME = 5
    AFTER_ATTRIBUTE_NAME = 6
    BEFORE_ATTRIBUTE_VALUE = 7
    ATTRIBUTE_VALUE_DOUBLE = 8
    ATTRIBUTE_VALUE_SINGLE = 9
    ATTRIBUTE_VALUE_UNQUOTED = 10
    AFTER_ATTRIBUTE_VALUE_QUOTED = 11
    SELF_CLOSING_START_TAG = 12
    MARKUP_DECLARATION_OPEN = 13
    COMMENT = 14
    BOGUS_COMMENT = 15
    DOCTYPE = 16
    RAWTEXT = 17

    __slots__ = (
        "_handlers",
        "buffer",
        "comment_start",
        "current_attr_name",
        "current_attr_value",
        "current_tag_attrs",
        "current_tag_kind",
        "current_tag_name",
        "current_tag_self_closing",
        "errors",
        "length",
        "opts",
        "pending",
        "pos",
        "rawtext_elements",
        "rawtext_tag_name",
        "state",
        "text_buffer",
        "text_start",
        "token_start",
    )

    def __init__(self, opts=None):
        self.opts = opts or TokenizerOpts()
        self.rawtext_elements = frozenset(self.opts.rawtext_elements)
        self.errors = []
        self.pending = deque()

        self.state = self.DATA
        self.buffer = ""
        self.length = 0
        self.pos = 0
        self.token_start = 0
        self.comment_start = 0

        self.text_buffer = []
        self.text_start = 0
        self.current_tag_kind = Tag.START
        self.current_tag_name = ""
        self.current_tag_attrs = []
        self.current_tag_self_closing = False
        self.current_attr_name = []
        self.current_attr_value = None
        self.rawtext_tag_name = None

        # Indexed by state number.
        self._handlers = (
            self._state_data,
            self._state_tag_open,
            self._state_end_tag_open,
            self._state_tag_name,
            self._state_before_attribute_name,
            self._state_attribute_name,
            self._state_after_attribute_name,
            self._state_before_attribute_value,
            self._state_attribute_value_double,
            self._state_attribute_value_single,
            self._state_attribute_value_unquoted,
            self._state_after_attribute_value_quoted,
            self._state_self_closing_start_tag,
            self._state_markup_declaration_open,
            self._state_comment,
            self._state_bogus_comment,
            self._state_doctype,
            self._state_rawtext,
        )

    def tokens(self, html):
        """Yield the tokens of ``html``, running the state machine only as far as needed."""
        self._reset(html)
        handlers = self._handlers
        pending = self.pending
        done = False
        while not done:
            done = handlers[self.state]()
            while pending:
                yield pending.popleft()
        self._flush_text()
        while pending:
            yield pending.popleft()

    def _reset(self, html):
        if html and html[0] == "\ufeff" and self.opts.discard_bom:
            html = html[1:]
        self.buffer = html or ""
        self.length = len(self.buffer)
        self.pos = 0
        self.token_start = 0
        self.comment_start = 0
        self.state = self.DATA
        self.errors = []
        self.pending.clear()
        self.text_buffer.clear()
        self.rawtext_tag_name = None
        self._start_tag(Tag.START)

    # ---------------------
    # Helper methods
    # ---------------------

    def _get_char(self):
        pos = self.pos
        if pos >= self.length:
            return None
        self.pos = pos + 1
        return self.buffer[pos]

    def _reconsume(self):
        self.pos -= 1

    def _skip_whitespace(self):
        buffer = self.buffer
        pos = self.pos
        length = self.length
        while pos < length and buffer[pos] in _WHITESPACE:
            pos += 1
        self.pos = pos

    def _consume_if(self, literal):
        end = self.pos + len(literal)
        if end > self.length:
            return False
        if self.buffer[self.pos : end] != literal:
            return False
        self.pos = end
        return True

    def _consume_case_insensitive(self, literal):
        end = self.pos + len(literal)
        if end > self.length:
            return False
        if self.buffer[self.pos : end].lower() != literal.lower():
            return False
        self.pos = end
        return True

    def _append_text(self, start, end):
        if end <= start:
            return
        if not self.text_buffer:
            self.text_start = start
        self.text_buffer.append(self.buffer[start:end])

    def _flush_text(self):
        if not self.text_buffer:
            return
        data = "".join(self.text_buffer)
        self.text_buffer.clear()
        self.pending.append(CharacterTokens(data, self.text_start))

    def _emit_token(self, token):
        self._flush_text()
        self.pending.append(token)

    def _emit_error(self, code):
        if not self.opts.collect_errors:
            return
        at = max(min(self.pos, self.length) - 1, 0)
        line = self.buffer.count("\n", 0, at) + 1
        column = at - self.buffer.rfind("\n", 0, at)
        self.errors.append(ParseError(code, line, column))

    def _start_tag(self, kind):
        self.current_tag_kind = kind
        self.current_tag_name = ""
        self.current_tag_attrs = []
        self.current_tag_self_closing = False
        self._start_attribute()

    def _start_attribute(self):
        self.current_attr_name.clear()
        self.current_attr_value = None

    def _finish_attribute(self):
        if not self.current_attr_name:
            self.current_attr_value = None
            return
        name = "".join(self.current_attr_name)
        self.current_tag_attrs.append((name, self.current_attr_value))
        self._start_attribute()

    def _emit_current_tag(self):
        self._finish_attribute()
        name = sys.intern(self.current_tag_name)
        kind = self.current_tag_kind
        tag = Tag(kind, name, self.current_tag_attrs, self.current_tag_self_closing, self.token_start)
        self._emit_token(tag)
        self._start_tag(Tag.START)
        if kind == Tag.START and name in self.rawtext_elements:
            self.rawtext_tag_name = name
            self.state = self.RAWTEXT
        else:
            self.rawtext_tag_name = None
            self.state = self.DATA

    # ---------------------
    # State handlers
    # ---------------------

    def _state_data(self):
        pos = self.pos
        lt = self.buffer.find("<", pos)
        if lt == -1:
            self._append_text(pos, self.length)
            self.pos = self.length
            return True
        self._append_text(pos, lt)
        self.token_start = lt
        self.pos = lt + 1
        self.state = self.TAG_OPEN
        return False

    def _state_tag_open(self):
        c = self._get_char()
        if c is None:
            self._emit_error("eof-before-tag-name")
            self._append_text(self.token_start, self.length)
            return True
        if c == "!":
            self.state = self.MARKUP_DECLARATION_OPEN
            return False
        if c == "/":
            self.state = self.END_TAG_OPEN
            return False
        if c == "?":
            self._emit_error("unexpected-question-mark-instead-of-tag-name")
            self.comment_start = self.token_start + 1
            self.state = self.BOGUS_COMMENT
            return False
        if c.isascii() and c.isalpha():
            self._start_tag(Tag.START)
            self._reconsume()
            self.state = self.TAG_NAME
            return False

        self._emit_error("invalid-first-character-of-tag-name")
        self._append_text(self.token_start, self.token_start + 1)
        self._reconsume()
        self.state = self.DATA
        return False

    def _state_end_tag_open(self):
        c = self._get_char()
        if c is None:
            self._emit_error("eof-before-tag-name")
            self._append_text(self.token_start, self.length)
            return True
        if c.isascii() and c.isalpha():
            self._start_tag(Tag.END)
            self._reconsume()
            self.state = self.TAG_NAME
            return False
        if c == ">":
            self._emit_error("missing-end-tag-name")
            self.state = self.DATA
            return False

        self._emit_error("invalid-first-character-of-tag-name")
        self.comment_start = self.token_start + 2
        self.state = self.BOGUS_COMMENT
        return False

    def _state_tag_name(self):
        buffer = self.buffer
        pos = self.pos
        match = _TAG_NAME_TERMINATOR_PATTERN.search(buffer, pos)
        if match is None:
            # The incomplete tag is discarded, not emitted as text.
            self.pos = self.length
            self._emit_error("eof-in-tag")
            return True
        end = match.start()
        if end > pos:
            self.current_tag_name += buffer[pos:end].translate(_ASCII_LOWER_TABLE)
        self.pos = end + 1
        c = match.group()
        if c == ">":
            self._emit_current_tag()
        elif c == "/":
            self.state = self.SELF_CLOSING_START_TAG
        else:
            self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_before_attribute_name(self):
        self._skip_whitespace()
        c = self._get_char()
        if c is None:
            self._emit_error("eof-in-tag")
            return True
        if c == "/":
            self.state = self.SELF_CLOSING_START_TAG
            return False
        if c == ">":
            self._emit_current_tag()
            return False
        self._start_attribute()
        if c == "=":
            self._emit_error("unexpected-equals-sign-before-attribute-name")
            self.current_attr_name.append("=")
        else:
            self._reconsume()
        self.state = self.ATTRIBUTE_NAME
        return False

    def _state_attribute_name(self):
        buffer = self.buffer
        pos = self.pos
        match = _ATTR_NAME_TERMINATOR_PATTERN.search(buffer, pos)
        if match is None:
            self.pos = self.length
            self._emit_error("eof-in-tag")
            return True
        end = match.start()
        if end > pos:
            self.current_attr_name.append(buffer[pos:end].translate(_ASCII_LOWER_TABLE))
        self.pos = end + 1
        c = match.group()
        if c == "=":
            self.state = self.BEFORE_ATTRIBUTE_VALUE
        elif c == ">":
            self._emit_current_tag()
        elif c == "/":
            self._finish_attribute()
            self.state = self.SELF_CLOSING_START_TAG
        else:
            self.state = self.AFTER_ATTRIBUTE_NAME
        return False

    def _state_after_attribute_name(self):
        self._skip_whitespace()
        c = self._get_char()
        if c is None:
            self._emit_error("eof-in-tag")
            return True
        if c == "=":
            self.state = self.BEFORE_ATTRIBUTE_VALUE
            return False
        self._finish_attribute()
        if c == "/":
            self.state = self.SELF_CLOSING_START_TAG
        elif c == ">":
            self._emit_current_tag()
        else:
            self._reconsume()
            self.state = self.ATTRIBUTE_NAME
        return False

    def _state_before_attribute_value(self):
        self._skip_whitespace()
        c = self._get_char()
        if c is None:
            self._emit_error("eof-in-tag")
            return True
        if c == '"':
            self.state = self.ATTRIBUTE_VALUE_DOUBLE
        elif c == "'":
            self.state = self.ATTRIBUTE_VALUE_SINGLE
        elif c == ">":
            self._emit_error("missing-attribute-value")
            self.current_attr_value = ""
            self._emit_current_tag()
        else:
            self._reconsume()
            self.state = self.ATTRIBUTE_VALUE_UNQUOTED
        return False

    def _consume_quoted_value(self, quote):
        pos = self.pos
        end = self.buffer.find(quote, pos)
        if end == -1:
            self.pos = self.length
            self._emit_error("eof-in-tag")
            return True
        self.current_attr_value = self.buffer[pos:end]
        self._finish_attribute()
        self.pos = end + 1
        self.state = self.AFTER_ATTRIBUTE_VALUE_QUOTED
        return False

    def _state_attribute_value_double(self):
        return self._consume_quoted_value('"')

    def _state_attribute_value_single(self):
        return self._consume_quoted_value("'")

    def _state_attribute_value_unquoted(self):
        buffer = self.buffer
        pos = self.pos
        match = _ATTR_VALUE_UNQUOTED_PATTERN.search(buffer, pos)
        if match is None:
            self.pos = self.length
            self._emit_error("eof-in-tag")
            return True
        end = match.start()
        self.current_attr_value = buffer[pos:end]
        self._finish_attribute()
        self.pos = end + 1
        if match.group() == ">":
            self._emit_current_tag()
        else:
            self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_after_attribute_value_quoted(self):
        c = self._get_char()
        if c is None:
            self._emit_error("eof-in-tag")
            return True
        if c in _WHITESPACE:
            self.state = self.BEFORE_ATTRIBUTE_NAME
        elif c == "/":
            self.state = self.SELF_CLOSING_START_TAG
        elif c == ">":
            self._emit_current_tag()
        else:
            self._emit_error("missing-whitespace-between-attributes")
            self._reconsume()
            self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_self_closing_start_tag(self):
        c = self._get_char()
        if c is None:
            self._emit_error("eof-in-tag")
            return True
        if c == ">":
            self.current_tag_self_closing = True
            self._emit_current_tag()
            return False
        self._emit_error("unexpected-solidus-in-tag")
        self._reconsume()
        self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_markup_declaration_open(self):
        if self._consume_if("--"):
            self.state = self.COMMENT
        elif self._consume_case_insensitive("doctype"):
            self.state = self.DOCTYPE
        else:
            self._emit_error("incorrectly-opened-comment")
            self.comment_start = self.pos
            self.state = self.BOGUS_COMMENT
        return False

    def _state_comment(self):
        buffer = self.buffer
        pos = self.pos
        # <!--> and <!---> are complete, empty comments.
        for closer in (">", "->"):
            if buffer.startswith(closer, pos):
                self._emit_error("abrupt-closing-of-empty-comment")
                self._emit_token(CommentToken("", self.token_start))
                self.pos = pos + len(closer)
                self.state = self.DATA
                return False
        match = _COMMENT_END_PATTERN.search(buffer, pos)
        if match is None:
            self.pos = self.length
            self._emit_error("eof-in-comment")
            self._emit_token(CommentToken(buffer[pos:], self.token_start))
            return True
        self._emit_token(CommentToken(buffer[pos : match.start()], self.token_start))
        self.pos = match.end()
        self.state = self.DATA
        return False

    def _state_bogus_comment(self):
        buffer = self.buffer
        start = self.comment_start
        end = buffer.find(">", start)
        if end == -1:
            self._emit_token(CommentToken(buffer[start:], self.token_start, raw=buffer[self.token_start :]))
            self.pos = self.length
            return True
        self._emit_token(CommentToken(buffer[start:end], self.token_start, raw=buffer[self.token_start : end + 1]))
        self.pos = end + 1
        self.state = self.DATA
        return False

    def _state_doctype(self):
        buffer = self.buffer
        end = buffer.find(">", self.pos)
        if end == -1:
            self.pos = self.length
            self._emit_error("eof-in-doctype")
            self._emit_token(DoctypeToken(buffer[self.token_start + 2 :], self.token_start))
            return True
        self._emit_token(DoctypeToken(buffer[self.token_start + 2 : end], self.token_start))
        self.pos = end + 1
        self.state = self.DATA
        return False

    def _state_rawtext(self):
        pos = self.pos
        name = self.rawtext_tag_name
        match = _rawtext_end_pattern(name).search(self.buffer, pos)
        if match is None:
            self._append_text(pos, self.length)
            self.pos = self.length
            return True
        self._append_text(pos, match.start())
        self.token_start = match.start()
        self._start_tag(Tag.END)
        self.current_tag_name = name
        self.pos = match.end()
        self.state = self.TAG_NAME
        return False


def tokenize(html, opts=None):
    """Lazily tokenize ``html`` with a fresh :class:`Tokenizer`."""
    return Tokenizer(opts).tokens(html)
