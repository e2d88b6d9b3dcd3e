import re
from .errors import LexError, Position

# --- Tokens ---

class Token:
    """A lexical token with its source position."""
    __slots__ = ('type', 'value', 'position')

    def __init__(self, type: str, value, position: Position):
        self.type = type
        self.value = value
        self.position = position

    def __repr__(self):
        return f"Token({self.type}, {self.value!r}, {self.position})"


class Segment:
    """
    A top-level piece of a templated source: literal text, a `{% tag %}`
    or an `{{ output }}`. `offset` is where the content starts in the source.
    """
    __slots__ = ('kind', 'content', 'offset', 'position')

    def __init__(self, kind: str, content: str, offset: int, position: Position):
        self.kind = kind
        self.content = content
        self.offset = offset
        self.position = position

    def __repr__(self):
        return f"Segment({self.kind}, {self.content!r})"


TEXT, TAG, OUTPUT = 'TEXT', 'TAG', 'OUTPUT'

_MARKER = re.compile(r"\{\{|\{%")
_CLOSERS = {'{{': ('}}', OUTPUT), '{%': ('%}', TAG)}


def tokenize_template(source: str) -> list:
    """
    Splits a templated source into TEXT, TAG and OUTPUT segments.

    Handles Liquid whitespace control: a `-` just inside a delimiter
    (`{%-`, `-%}`, `{{-`, `-}}`) strips the whitespace on that side.
    """
    def at(offset):
        return Position.from_offset(source, offset)

    segments = []
    pos = 0
    strip_next = False
    while pos < len(source):
        m = _MARKER.search(source, pos)
        text = source[pos:m.start()] if m else source[pos:]
        if strip_next:
            lead = len(text) - len(text.lstrip())
            pos += lead
            text = text[lead:]
            strip_next = False
        if not m:
            if text:
                segments.append(Segment(TEXT, text, pos, at(pos)))
            break

        closer, kind = _CLOSERS[m.group()]
        end = source.find(closer, m.end())
        if end < 0:
            raise LexError(f"Unterminated '{m.group()}' (missing '{closer}')", at(m.start()))

        inner_start, inner_end = m.end(), end
        if source.startswith('-', inner_start):
            text = text.rstrip()
            inner_start += 1
        if inner_end > inner_start and source[inner_end - 1] == '-':
            inner_end -= 1
            strip_next = True

        if text:
            segments.append(Segment(TEXT, text, pos, at(pos)))
        segments.append(Segment(kind, source[inner_start:inner_end], inner_start, at(m.start())))
        pos = end + len(closer)
    return segments

# --- Directive expressions ---

_EXPR_TOKENS = re.compile(r"""
    (?P<WS>\s+)
   |(?P<NUMBER>-?\d+(?:\.\d+)?)
   |(?P<STRING>"[^"]*"|'[^']*')
   |(?P<RANGE>\.\.)
   |(?P<IDENT>[A-Za-z_][A-Za-z0-9_]*)
   |(?P<OP>[|:,=().])
""", re.VERBOSE)

_EXPR_OPS = {'|': 'PIPE', ':': 'COLON', ',': 'COMMA', '=': 'EQUALS',
             '(': 'LPAREN', ')': 'RPAREN', '.': 'DOT'}


def tokenize_expression(source: str, start: int = 0, end: int = None) -> list:
    """
    Tokenizes the inside of a `{% %}` or `{{ }}` delimiter. Positions refer
    to the full `source`, so errors point at the raw template text.
    """
    end = len(source) if end is None else end
    tokens = []
    pos = start
    while pos < end:
        m = _EXPR_TOKENS.match(source, pos, end)
        if not m:
            ch = source[pos]
            if ch in '"\'':
                raise LexError("Unterminated string literal", Position.from_offset(source, pos))
            raise LexError(f"Unexpected character {ch!r} in directive", Position.from_offset(source, pos))
        kind = m.lastgroup
        if kind == 'NUMBER':
            text = m.group()
            value = float(text) if '.' in text else int(text)
            tokens.append(Token('NUMBER', value, Position.from_offset(source, pos)))
        elif kind == 'STRING':
            tokens.append(Token('STRING', m.group()[1:-1], Position.from_offset(source, pos)))
        elif kind == 'RANGE':
            tokens.append(Token('RANGE', '..', Position.from_offset(source, pos)))
        elif kind == 'IDENT':
            tokens.append(Token('IDENT', m.group(), Position.from_offset(source, pos)))
        elif kind == 'OP':
            tokens.append(Token(_EXPR_OPS[m.group()], m.group(), Position.from_offset(source, pos)))
        pos = m.end()
    tokens.append(Token('EOF', None, Position.from_offset(source, end)))
    return tokens

# --- Scene text ---

_SCENE_TOKENS = re.compile(r"""
    (?P<NEWLINE>\n)
   |(?P<WS>[ \t\r\f\v]+)
   |(?P<COMMENT>//[^\n]*)
   |(?P<NUMBER>[-+]?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)
   |(?P<IDENT>[A-Za-z_][A-Za-z0-9_]*)
   |(?P<PUNCT>[{}:,=])
""", re.VERBOSE)

_SCENE_PUNCT = {'{': 'LBRACE', '}': 'RBRACE', ':': 'COLON', ',': 'COMMA', '=': 'EQUALS'}
_NUMBER_TAIL = re.compile(r"[A-Za-z0-9_.]")


def tokenize(text: str) -> list:
    """Tokenizes expanded (template-free) scene text."""
    tokens = []
    pos, line, line_start = 0, 1, 0
    while pos < len(text):
        m = _SCENE_TOKENS.match(text, pos)
        here = Position(line, pos - line_start + 1)
        if not m:
            raise LexError(f"Unexpected character {text[pos]!r}", here)
        kind = m.lastgroup
        if kind == 'NEWLINE':
            line += 1
            line_start = m.end()
        elif kind == 'NUMBER':
            if _NUMBER_TAIL.match(text, m.end()):
                bad = re.match(r"[-+\w.]+", text[pos:]).group()
                raise LexError(f"Malformed number {bad!r}", here)
            tokens.append(Token('NUMBER', float(m.group()), here))
        elif kind == 'IDENT':
            tokens.append(Token('IDENT', m.group(), here))
        elif kind == 'PUNCT':
            tokens.append(Token(_SCENE_PUNCT[m.group()], m.group(), here))
        pos = m.end()
    tokens.append(Token('EOF', None, Position(line, pos - line_start + 1)))
    return tokens
