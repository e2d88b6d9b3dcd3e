"""Syntax tree produced by the scene parser, before any name resolution."""

class Node:
    position = None


class Number(Node):
    def __init__(self, value: float, position=None):
        self.value = value
        self.position = position

    def __repr__(self):
        return f"Number({self.value})"


class Reference(Node):
    """A bare identifier used as a value, e.g. `colour: white`."""
    def __init__(self, name: str, position=None):
        self.name = name
        self.position = position

    def __repr__(self):
        return f"Reference({self.name})"


class VectorLiteral(Node):
    """
    `{a, b, c}`, optionally typed as in `colour {1, 1, 1}`. Components are
    Numbers or References.
    """
    def __init__(self, components: list, kind: str = None, position=None):
        self.components = components
        self.kind = kind
        self.position = position

    def __repr__(self):
        prefix = f"{self.kind} " if self.kind else ""
        return f"VectorLiteral({prefix}{self.components})"


class Field(Node):
    def __init__(self, name: str, value: Node, position=None):
        self.name = name
        self.value = value
        self.position = position

    def __repr__(self):
        return f"Field({self.name}: {self.value!r})"


class Block(Node):
    """`kind { name: value, ... }`; `kind` is None for an anonymous block."""
    def __init__(self, kind: str, fields: list, position=None):
        self.kind = kind
        self.fields = fields
        self.position = position

    def __repr__(self):
        return f"Block({self.kind}, {self.fields})"


class NodeList(Node):
    """`{ sphere {...} box {...} }`, the children of a group."""
    def __init__(self, blocks: list, position=None):
        self.blocks = blocks
        self.position = position

    def __repr__(self):
        return f"NodeList({self.blocks})"


class LetBinding(Node):
    """`let name = value`, a scene-level binding visible to later blocks."""
    def __init__(self, name: str, value: Node, position=None):
        self.name = name
        self.value = value
        self.position = position

    def __repr__(self):
        return f"LetBinding({self.name} = {self.value!r})"


class SceneFile(Node):
    """The ordered top-level items (LetBindings and Blocks) of one file."""
    def __init__(self, items: list):
        self.items = items

    @property
    def blocks(self) -> list:
        return [item for item in self.items if isinstance(item, Block)]

    def __repr__(self):
        return f"SceneFile({self.items})"
