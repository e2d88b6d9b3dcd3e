"""
Resolved field values. Every field of a resolved block holds exactly one of
Scalar, Vector3, Colour, String or NestedNode; `kind` names the variant.
"""
from dataclasses import dataclass, field
from typing import Tuple

SCALAR, VECTOR3, COLOUR, STRING, NODE = 'scalar', 'vector3', 'colour', 'string', 'node'


@dataclass(frozen=True)
class Scalar:
    value: float
    kind = SCALAR


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float
    kind = VECTOR3

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Colour:
    r: float
    g: float
    b: float
    kind = COLOUR

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class String:
    text: str
    kind = STRING


@dataclass(frozen=True)
class NestedNode:
    """
    A resolved block: a material or finish used as a field value, or a
    scene node. Groups keep their resolved members in `children`.
    """
    block: str
    fields: tuple  # ((name, value), ...) in declaration order
    children: tuple = ()
    position: object = field(default=None, compare=False)
    kind = NODE

    def get(self, name: str, default=None):
        for key, value in self.fields:
            if key == name:
                return value
        return default

    def __contains__(self, name: str) -> bool:
        return any(key == name for key, _ in self.fields)


def describe(value) -> str:
    """The kind of a resolved value as used in TypeMismatch messages."""
    if isinstance(value, NestedNode):
        return f"'{value.block}' block" if value.block else 'block'
    return value.kind
