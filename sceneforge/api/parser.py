from .errors import ParseError, ParseErrorKind
from .lexer import tokenize
from .syntax import Number, Reference, VectorLiteral, Field, Block, NodeList, LetBinding, SceneFile

_DESCRIBE = {'LBRACE': "'{'", 'RBRACE': "'}'", 'COLON': "':'", 'COMMA': "','",
             'EQUALS': "'='", 'EOF': 'end of input'}


def _describe(tok) -> str:
    if tok.type in _DESCRIBE:
        return _DESCRIBE[tok.type]
    return repr(tok.value)


class Parser:
    """Recursive-descent parser for expanded scene text."""

    def __init__(self, tokens: list):
        self.tokens = tokens
        self.i = 0

    def peek(self, offset: int = 0):
        return self.tokens[min(self.i + offset, len(self.tokens) - 1)]

    def advance(self):
        tok = self.tokens[self.i]
        if tok.type != 'EOF':
            self.i += 1
        return tok

    def _unexpected(self, expected: str, tok=None):
        tok = tok or self.peek()
        return ParseError(ParseErrorKind.UNEXPECTED_TOKEN,
                          f"Expected {expected}, found {_describe(tok)}", tok.position)

    def expect(self, type: str, expected: str, opener=None):
        tok = self.peek()
        if tok.type == type:
            return self.advance()
        if tok.type == 'EOF' and opener is not None:
            raise self._unterminated(opener)
        raise self._unexpected(expected, tok)

    def _unterminated(self, opener):
        return ParseError(ParseErrorKind.UNTERMINATED_BLOCK,
                          "Block opened here is never closed", opener.position)

    # --- Grammar ---

    def scene(self) -> SceneFile:
        items = []
        while self.peek().type != 'EOF':
            tok = self.peek()
            if tok.type == 'IDENT' and tok.value == 'let' and self.peek(1).type == 'IDENT':
                items.append(self.let_binding())
            elif tok.type == 'IDENT':
                items.append(self.block())
            else:
                raise self._unexpected('a block or let binding')
        return SceneFile(items)

    def let_binding(self) -> LetBinding:
        let_tok = self.advance()
        name = self.expect('IDENT', 'binding name').value
        self.expect('EQUALS', "'='")
        return LetBinding(name, self.value(), let_tok.position)

    def block(self) -> Block:
        kind = self.expect('IDENT', 'block name')
        if self.peek().type != 'LBRACE':
            raise self._unexpected(f"'{{' after '{kind.value}'")
        node = self.braced(kind.value, kind.position)
        if not isinstance(node, Block):
            raise ParseError(ParseErrorKind.UNEXPECTED_TOKEN,
                             f"Expected fields in '{kind.value}' block", kind.position)
        return node

    def value(self):
        tok = self.peek()
        if tok.type == 'NUMBER':
            self.advance()
            return Number(tok.value, tok.position)
        if tok.type == 'IDENT':
            self.advance()
            if self.peek().type == 'LBRACE':
                return self.braced(tok.value, tok.position)
            return Reference(tok.value, tok.position)
        if tok.type == 'LBRACE':
            return self.braced(None, tok.position)
        if tok.type == 'EOF':
            raise self._unexpected('a value')
        raise self._unexpected('a value', tok)

    def braced(self, kind, position):
        """Dispatches on what follows a `{`: fields, a node list or a vector."""
        opener = self.peek()
        first, second = self.peek(1), self.peek(2)
        if first.type == 'RBRACE':
            self.advance()
            self.advance()
            return Block(kind, [], position)
        if first.type == 'IDENT' and second.type == 'COLON':
            return self.fields(kind, position)
        if first.type == 'IDENT' and second.type == 'LBRACE' and kind is None:
            return self.node_list(position)
        if first.type == 'NUMBER' or (first.type == 'IDENT' and second.type in ('COMMA', 'RBRACE')):
            return self.vector(kind, position)
        if first.type == 'EOF':
            self.advance()
            raise self._unterminated(opener)
        self.advance()
        raise self._unexpected('a field, vector component or nested block')

    def fields(self, kind, position) -> Block:
        opener = self.advance()
        fields = []
        while True:
            name = self.expect('IDENT', 'field name', opener)
            self.expect('COLON', f"':' after '{name.value}'", opener)
            fields.append(Field(name.value, self.value(), name.position))
            sep = self.peek()
            if sep.type == 'COMMA':
                self.advance()
                if self.peek().type == 'RBRACE':
                    self.advance()
                    break
            elif sep.type == 'RBRACE':
                self.advance()
                break
            elif sep.type == 'EOF':
                raise self._unterminated(opener)
            else:
                raise self._unexpected("',' or '}'")
        return Block(kind, fields, position)

    def node_list(self, position) -> NodeList:
        opener = self.advance()
        blocks = []
        while self.peek().type != 'RBRACE':
            if self.peek().type == 'EOF':
                raise self._unterminated(opener)
            blocks.append(self.block())
            if self.peek().type == 'COMMA':
                self.advance()
        self.advance()
        return NodeList(blocks, position)

    def vector(self, kind, position) -> VectorLiteral:
        opener = self.advance()
        components = []
        while True:
            tok = self.peek()
            if tok.type == 'NUMBER':
                components.append(Number(tok.value, tok.position))
            elif tok.type == 'IDENT':
                components.append(Reference(tok.value, tok.position))
            elif tok.type == 'EOF':
                raise self._unterminated(opener)
            else:
                raise ParseError(ParseErrorKind.MALFORMED_LITERAL,
                                 f"Vector component must be a number or name, found {_describe(tok)}",
                                 tok.position)
            self.advance()
            sep = self.peek()
            if sep.type == 'COMMA':
                self.advance()
            elif sep.type == 'RBRACE':
                self.advance()
                break
            elif sep.type == 'EOF':
                raise self._unterminated(opener)
            else:
                raise ParseError(ParseErrorKind.MALFORMED_LITERAL,
                                 f"Expected ',' or '}}' in vector literal, found {_describe(sep)}",
                                 sep.position)
        if len(components) != 3:
            raise ParseError(ParseErrorKind.MALFORMED_LITERAL,
                             f"Vector literal needs exactly 3 components, got {len(components)}",
                             position)
        return VectorLiteral(components, kind, position)


def parse(text: str) -> SceneFile:
    """Parses expanded scene text into a SceneFile."""
    return Parser(tokenize(text)).scene()
