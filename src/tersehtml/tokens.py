class Tag:
    __slots__ = ("attrs", "kind", "name", "pos", "self_closing")

    START = 0
    END = 1

    def __init__(self, kind, name, attrs=None, self_closing=False, pos=0):
        self.kind = kind
        self.name = name
        # Ordered (name, value) pairs; names may repeat, value is None for a bare attribute.
        self.attrs = attrs if attrs is not None else []
        self.self_closing = bool(self_closing)
        self.pos = pos

    def get(self, name, default=None):
        for key, value in self.attrs:
            if key == name:
                return value
        return default

    def has_attr(self, *names):
        for key, _ in self.attrs:
            if key in names:
                return True
        return False

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.name == other.name
            and list(self.attrs) == list(other.attrs)
            and self.self_closing == other.self_closing
        )

    __hash__ = None

    def __repr__(self):
        attrs = " ".join(f"{name}={value!r}" for name, value in self.attrs)
        closing = " /" if self.self_closing else ""
        kind_str = "start" if self.kind == self.START else "end"
        return f"<{kind_str}:{self.name}{closing} {attrs}>"


class CharacterTokens:
    __slots__ = ("data", "pos")

    def __init__(self, data, pos=0):
        self.data = data
        self.pos = pos

    def __eq__(self, other):
        if not isinstance(other, CharacterTokens):
            return NotImplemented
        return self.data == other.data

    __hash__ = None

    def __repr__(self):
        return f"CharacterTokens({self.data!r})"


class CommentToken:
    __slots__ = ("data", "pos", "raw")

    def __init__(self, data, pos=0, raw=None):
        self.data = data
        self.pos = pos
        # Literal source of a bogus comment (<!...>, <?...>), serialized as-is.
        self.raw = raw

    def __eq__(self, other):
        if not isinstance(other, CommentToken):
            return NotImplemented
        return self.data == other.data and self.raw == other.raw

    __hash__ = None

    def __repr__(self):
        return f"CommentToken({self.data!r})"


class DoctypeToken:
    __slots__ = ("data", "pos")

    def __init__(self, data, pos=0):
        self.data = data
        self.pos = pos

    def __eq__(self, other):
        if not isinstance(other, DoctypeToken):
            return NotImplemented
        return self.data == other.data

    __hash__ = None

    def __repr__(self):
        return f"DoctypeToken({self.data!r})"


class ParseError:
    """Represents a parse error with location information."""

    __slots__ = ("code", "column", "line", "message")

    def __init__(self, code, line=None, column=None, message=None):
        self.code = code
        self.line = line
        self.column = column
        self.message = message or code

    def __repr__(self):
        if self.line is not None and self.column is not None:
            return f"ParseError({self.code!r}, line={self.line}, column={self.column})"
        return f"ParseError({self.code!r})"

    def __str__(self):
        if self.line is not None and self.column is not None:
            if self.message != self.code:
                return f"({self.line},{self.column}): {self.code} - {self.message}"
            return f"({self.line},{self.column}): {self.code}"
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.code == other.code and self.line == other.line and self.column == other.column

    __hash__ = None  # Unhashable since we define __eq__
