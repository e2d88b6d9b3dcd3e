from .errors import ParseError, ParseErrorKind, LoopRangeError, UndefinedVariable, Position
from .environment import Environment
from .filters import apply_chain
from .lexer import tokenize_template, tokenize_expression, TEXT, TAG, OUTPUT
from .utils import _format_value, _type_name, _report

MAX_LOOP_ITERATIONS = 100_000

# --- Directives ---

class Literal:
    def __init__(self, value, position=None):
        self.value = value
        self.position = position

    def __repr__(self):
        return f"Literal({self.value!r})"


class Variable:
    """A (possibly dotted) variable reference such as `x` or `forloop.index`."""
    def __init__(self, path: list, position=None):
        self.path = path
        self.position = position

    @property
    def name(self) -> str:
        return '.'.join(self.path)

    def __repr__(self):
        return f"Variable({self.name})"


class FilterExpression:
    """A value piped through zero or more filters, applied left to right."""
    def __init__(self, base, filters: list, position=None):
        self.base = base
        self.filters = filters  # [(name, [operand, ...], position)]
        self.position = position


class Text:
    def __init__(self, text: str, offset: int = 0):
        self.text = text
        self.offset = offset  # into the raw source


class Assignment:
    def __init__(self, name: str, expr: FilterExpression, position=None):
        self.name = name
        self.expr = expr
        self.position = position


class Interpolation:
    def __init__(self, expr: FilterExpression, position=None, offset: int = 0):
        self.expr = expr
        self.position = position
        self.offset = offset


class Loop:
    """
    `{% for v in (lo..hi) %}`. The range is inclusive of both bounds; the
    bounds are expressions evaluated when the loop is entered.
    """
    def __init__(self, var: str, lo, hi, body: list, reversed: bool = False, position=None):
        self.var = var
        self.lo = lo
        self.hi = hi
        self.body = body
        self.reversed = reversed
        self.position = position

# --- Directive parsing ---

class _ExpressionParser:
    def __init__(self, tokens: list):
        self.tokens = tokens
        self.i = 0

    def peek(self, type: str = None):
        tok = self.tokens[self.i]
        if type is None:
            return tok
        return tok if tok.type == type else None

    def advance(self):
        tok = self.tokens[self.i]
        if tok.type != 'EOF':
            self.i += 1
        return tok

    def expect(self, type: str, what: str = None):
        tok = self.peek()
        if tok.type != type:
            found = 'end of directive' if tok.type == 'EOF' else repr(tok.value)
            raise ParseError(ParseErrorKind.UNEXPECTED_TOKEN,
                             f"Expected {what or type}, found {found}", tok.position)
        return self.advance()

    def expect_keyword(self, word: str):
        tok = self.expect('IDENT', f"'{word}'")
        if tok.value != word:
            raise ParseError(ParseErrorKind.UNEXPECTED_TOKEN,
                             f"Expected '{word}', found {tok.value!r}", tok.position)
        return tok

    def end(self):
        self.expect('EOF', 'end of directive')

    def operand(self):
        tok = self.peek()
        if tok.type in ('NUMBER', 'STRING'):
            self.advance()
            return Literal(tok.value, tok.position)
        if tok.type == 'IDENT':
            self.advance()
            if tok.value in ('true', 'false'):
                return Literal(tok.value == 'true', tok.position)
            path = [tok.value]
            while self.peek('DOT'):
                self.advance()
                path.append(self.expect('IDENT', 'attribute name').value)
            return Variable(path, tok.position)
        found = 'end of directive' if tok.type == 'EOF' else repr(tok.value)
        raise ParseError(ParseErrorKind.UNEXPECTED_TOKEN, f"Expected a value, found {found}", tok.position)

    def filter_expression(self):
        start = self.peek().position
        base = self.operand()
        filters = []
        while self.peek('PIPE'):
            self.advance()
            name_tok = self.expect('IDENT', 'filter name')
            args = []
            if self.peek('COLON'):
                self.advance()
                args.append(self.operand())
                while self.peek('COMMA'):
                    self.advance()
                    args.append(self.operand())
            filters.append((name_tok.value, args, name_tok.position))
        return FilterExpression(base, filters, start)


def _tag_parser(source, segment):
    tokens = tokenize_expression(source, segment.offset, segment.offset + len(segment.content))
    return _ExpressionParser(tokens)


def parse_template(source: str) -> list:
    """Parses a templated source into a tree of directives."""
    segments = tokenize_template(source)
    root = []
    stack = []  # [(loop, enclosing body)]
    body = root
    i = 0
    while i < len(segments):
        seg = segments[i]
        i += 1
        if seg.kind == TEXT:
            body.append(Text(seg.content, seg.offset))
            continue

        p = _tag_parser(source, seg)
        if seg.kind == OUTPUT:
            expr = p.filter_expression()
            p.end()
            body.append(Interpolation(expr, seg.position, seg.offset))
            continue

        head = p.expect('IDENT', 'tag name')
        tag = head.value
        if tag == 'assign':
            name = p.expect('IDENT', 'variable name').value
            p.expect('EQUALS', "'='")
            expr = p.filter_expression()
            p.end()
            body.append(Assignment(name, expr, seg.position))
        elif tag == 'for':
            var = p.expect('IDENT', 'loop variable').value
            p.expect_keyword('in')
            p.expect('LPAREN', "'('")
            lo = p.operand()
            p.expect('RANGE', "'..'")
            hi = p.operand()
            p.expect('RPAREN', "')'")
            is_reversed = False
            if p.peek('IDENT') and p.peek().value == 'reversed':
                p.advance()
                is_reversed = True
            p.end()
            loop = Loop(var, lo, hi, [], is_reversed, seg.position)
            body.append(loop)
            stack.append((loop, body))
            body = loop.body
        elif tag == 'endfor':
            p.end()
            if not stack:
                raise ParseError(ParseErrorKind.UNEXPECTED_TOKEN, "'endfor' without matching 'for'", seg.position)
            _, body = stack.pop()
        elif tag == 'comment':
            p.end()
            i = _skip_comment(source, segments, i, seg)
        elif tag == 'endcomment':
            raise ParseError(ParseErrorKind.UNEXPECTED_TOKEN, "'endcomment' without matching 'comment'", seg.position)
        else:
            raise ParseError(ParseErrorKind.UNEXPECTED_TOKEN, f"Unknown tag '{tag}'", head.position)

    if stack:
        loop, _ = stack[-1]
        raise ParseError(ParseErrorKind.UNTERMINATED_BLOCK, f"'for {loop.var}' is missing 'endfor'", loop.position)
    return root


def _skip_comment(source, segments, i, opener):
    depth = 1
    while i < len(segments):
        seg = segments[i]
        i += 1
        if seg.kind != TAG:
            continue
        words = seg.content.split()
        if words and words[0] == 'comment':
            depth += 1
        elif words and words[0] == 'endcomment':
            depth -= 1
            if depth == 0:
                return i
    raise ParseError(ParseErrorKind.UNTERMINATED_BLOCK, "'comment' is missing 'endcomment'", opener.position)

# --- Expansion ---

class Expander:
    """Evaluates a directive tree against an Environment, producing plain scene text."""

    def __init__(self, env: Environment, max_iterations: int = MAX_LOOP_ITERATIONS):
        self.env = env
        self.max_iterations = max_iterations
        self.iterations = 0
        self.offsets = []  # raw source offset of each emitted character

    def expand(self, directives: list) -> str:
        parts = []
        self.offsets = []
        self._emit(directives, parts)
        return ''.join(parts)

    def _emit(self, directives, parts):
        for d in directives:
            if isinstance(d, Text):
                parts.append(d.text)
                self.offsets.extend(range(d.offset, d.offset + len(d.text)))
            elif isinstance(d, Interpolation):
                text = _format_value(self.evaluate(d.expr))
                parts.append(text)
                self.offsets.extend([d.offset] * len(text))
            elif isinstance(d, Assignment):
                self.env.assign(d.name, self.evaluate(d.expr))
            elif isinstance(d, Loop):
                self._loop(d, parts)
            else:
                raise TypeError(f"Unknown directive {d!r}")

    def _operand(self, operand):
        if isinstance(operand, Literal):
            return operand.value
        value = self.env.lookup(operand.path[0], operand.position)
        for attr in operand.path[1:]:
            if not isinstance(value, dict) or attr not in value:
                raise UndefinedVariable(operand.name, operand.position)
            value = value[attr]
        return value

    def evaluate(self, expr: FilterExpression):
        filters = [(name, [self._operand(a) for a in args], position) for name, args, position in expr.filters]
        return apply_chain(self._operand(expr.base), filters)

    def _bound(self, operand, loop):
        value = self._operand(operand)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int) or isinstance(value, bool):
            raise LoopRangeError(
                f"Range bound of 'for {loop.var}' must be an integer, got {_type_name(value)} {value!r}",
                operand.position or loop.position)
        return value

    def _loop(self, loop: Loop, parts):
        lo = self._bound(loop.lo, loop)
        hi = self._bound(loop.hi, loop)
        if lo > hi:
            raise LoopRangeError(f"Inverted range ({lo}..{hi}) in 'for {loop.var}'", loop.position)
        values = list(range(lo, hi + 1))
        if loop.reversed:
            values.reverse()

        self.iterations += len(values)
        if self.iterations > self.max_iterations:
            raise LoopRangeError(
                f"Loop expansion exceeds {self.max_iterations} iterations", loop.position)

        length = len(values)
        for index, value in enumerate(values):
            forloop = {
                'index': index + 1, 'index0': index,
                'rindex': length - index, 'rindex0': length - index - 1,
                'first': index == 0, 'last': index == length - 1,
                'length': length,
            }
            with self.env.scope(**{'forloop': forloop, loop.var: value}):
                self._emit(loop.body, parts)


class SourceMap:
    """Translates positions in expanded text back to the raw template."""

    def __init__(self, source: str, text: str, offsets: list):
        self.source = source
        self.text = text
        self.offsets = offsets

    def position(self, position: Position) -> Position:
        if position is None:
            return None
        offset = position.to_offset(self.text)
        if offset < len(self.offsets):
            return Position.from_offset(self.source, self.offsets[offset])
        return Position.from_offset(self.source, len(self.source))


def expand_with_map(source: str, variables: dict = None, max_iterations: int = MAX_LOOP_ITERATIONS,
                    verbose: bool = False):
    """Like `expand`, also returning a SourceMap for the expanded text."""
    env = Environment(variables)
    directives = parse_template(source)
    expander = Expander(env, max_iterations)
    text = expander.expand(directives)
    if verbose:
        _report('INFO', f"Expanded template: {len(source)} -> {len(text)} characters, "
                        f"{expander.iterations} loop iterations.")
    return text, env, SourceMap(source, text, expander.offsets)


def expand(source: str, variables: dict = None, max_iterations: int = MAX_LOOP_ITERATIONS,
           verbose: bool = False):
    """
    Expands every template directive in `source`.

    Args:
        source (str): The raw, templated scene text.
        variables (dict, optional): Initial bindings visible to the template.
        max_iterations (int, optional): Upper bound on unrolled loop iterations.
        verbose (bool, optional): Report progress on stderr.

    Returns:
        tuple: The expanded text and the final file-level Environment.
    """
    text, env, _ = expand_with_map(source, variables, max_iterations, verbose)
    return text, env
