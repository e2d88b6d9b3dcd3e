import numpy as np
from .transforms import Transform, check_invertible

class Placement:
    """A leaf node together with its cumulative world matrix and effective material."""
    def __init__(self, node, matrix: np.ndarray, material=None, depth: int = 0):
        self.node = node
        self.matrix = matrix
        self.material = material
        self.depth = depth

    @property
    def kind(self) -> str:
        return self.node.block

    def __repr__(self):
        return f"Placement({self.kind}, depth={self.depth})"


def local_matrix(node) -> np.ndarray:
    """The matrix of a node's own `transform` field (identity when absent)."""
    matrix = Transform.from_node(node.get('transform')).matrix
    check_invertible(matrix, node.position)
    return matrix


def compose(nodes, parent: np.ndarray = None, material=None, depth: int = 0):
    """
    Walks resolved nodes depth-first in declaration order, yielding a
    Placement for every light and primitive.

    A group's transform wraps its members' own transforms, so
    `world = parent @ group @ member`. A group's material applies to
    members that declare none.
    """
    parent = np.identity(4) if parent is None else parent
    for node in nodes:
        world = parent @ local_matrix(node) if 'transform' in node else parent
        own = node.get('material') or material
        if node.block == 'group':
            yield from compose(node.children, world, own, depth + 1)
        else:
            yield Placement(node, world, own, depth)
