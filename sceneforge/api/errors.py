from enum import Enum

class Position:
    """A 1-based line/column location in a source text."""
    __slots__ = ('line', 'column')

    def __init__(self, line: int, column: int):
        self.line = line
        self.column = column

    @classmethod
    def from_offset(cls, text: str, offset: int) -> 'Position':
        """Computes the line/column of a character offset into `text`."""
        line = text.count('\n', 0, offset) + 1
        column = offset - (text.rfind('\n', 0, offset) + 1) + 1
        return cls(line, column)

    def to_offset(self, text: str) -> int:
        """Inverse of `from_offset`."""
        start = 0
        for _ in range(self.line - 1):
            start = text.index('\n', start) + 1
        return start + self.column - 1

    def __eq__(self, other):
        return isinstance(other, Position) and (self.line, self.column) == (other.line, other.column)

    def __hash__(self):
        return hash((self.line, self.column))

    def __repr__(self):
        return f"Position(line={self.line}, column={self.column})"

    def __str__(self):
        return f"line {self.line}, column {self.column}"


class SceneError(Exception):
    """Base class for every error raised while compiling a scene file."""
    def __init__(self, message: str, position: Position = None):
        self.message = message
        self.position = position
        super().__init__(self._format(message, position))

    @staticmethod
    def _format(message, position):
        return f"{message} (at {position})" if position else message

    def relocate(self, position: Position):
        """Points the error at `position`, rewriting its message."""
        self.position = position
        self.args = (self._format(self.message, position),)


class LexError(SceneError):
    """A malformed token, unterminated tag or unterminated string."""


class ParseErrorKind(Enum):
    UNEXPECTED_TOKEN = 'UnexpectedToken'
    UNTERMINATED_BLOCK = 'UnterminatedBlock'
    MALFORMED_LITERAL = 'MalformedLiteral'


class ParseError(SceneError):
    """A structural violation in template or scene syntax."""
    def __init__(self, kind: ParseErrorKind, message: str, position: Position = None):
        self.kind = kind
        super().__init__(f"{kind.value}: {message}", position)


class UndefinedVariable(SceneError, NameError):
    """An identifier was read before it was declared."""
    def __init__(self, name: str, position: Position = None):
        super().__init__(f"Undefined variable '{name}'", position)
        # NameError.__init__ resets `name`, so bind it afterwards.
        self.name = name


class TypeMismatch(SceneError, TypeError):
    """A field value does not have the shape its block expects."""
    def __init__(self, field: str, expected: str, actual: str, block: str = None, position: Position = None):
        self.field = field
        self.expected = expected
        self.actual = actual
        self.block = block
        where = f"'{block}.{field}'" if block else f"'{field}'"
        super().__init__(f"Field {where} expects {expected}, got {actual}", position)


class MalformedFilterExpression(SceneError, ValueError):
    """Unknown filter, bad operands, division by zero or a non-finite result."""


class LoopRangeError(SceneError, ValueError):
    """A loop range with non-integer or inverted bounds."""


class SceneInvariantViolation(SceneError):
    """A scene-level rule is broken: camera cardinality, missing or unknown fields, bad values."""
