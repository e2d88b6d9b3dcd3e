"""
World-space primitives. Each keeps the geometry it was declared with
(`local_*`) alongside the cumulative `matrix` that places it, so a scene
can be written back out unchanged.
"""
from dataclasses import dataclass
from itertools import product
from typing import Optional, Tuple
import numpy as np
from .errors import SceneInvariantViolation
from .material import Material
from .transforms import transform_point, transform_points, transform_normal, uniform_scale

Vec3 = Tuple[float, float, float]
Matrix = Tuple[Tuple[float, ...], ...]

def _vec(v) -> Vec3:
    return tuple(float(c) for c in v)

def _matrix(m: np.ndarray) -> Matrix:
    return tuple(tuple(float(c) for c in row) for row in m)


@dataclass(frozen=True)
class Sphere:
    """
    A sphere carried into world space. Under a non-uniform scale it becomes
    an ellipsoid: `kind` is then 'ellipsoid' and `radius` is None, and the
    shape is described by `semi_axes`, the world images of the local
    radius along X, Y and Z.
    """
    kind: str
    centre: Vec3
    radius: Optional[float]
    semi_axes: Tuple[Vec3, Vec3, Vec3]
    matrix: Matrix
    local_centre: Vec3
    local_radius: float
    material: Optional[Material] = None

    @classmethod
    def from_placement(cls, placement, material=None) -> 'Sphere':
        node, m = placement.node, placement.matrix
        c = node.get('centre').as_tuple()
        r = node.get('radius').value
        s = uniform_scale(m)
        axes = tuple(_vec(r * m[:3, i]) for i in range(3))
        return cls(
            kind='sphere' if s is not None else 'ellipsoid',
            centre=_vec(transform_point(m, c)),
            radius=r * s if s is not None else None,
            semi_axes=axes, matrix=_matrix(m),
            local_centre=c, local_radius=r, material=material,
        )


@dataclass(frozen=True)
class Plane:
    """
    The plane `dot(normal, p) == offset` with a unit world normal. The
    declared normal is normalised before the offset applies.
    """
    normal: Vec3
    offset: float
    matrix: Matrix
    local_normal: Vec3
    local_offset: float
    material: Optional[Material] = None
    kind = 'plane'

    @classmethod
    def from_placement(cls, placement, material=None) -> 'Plane':
        node, m = placement.node, placement.matrix
        n = np.array(node.get('normal').as_tuple())
        d = node.get('offset').value
        length = np.linalg.norm(n)
        if length == 0:
            raise SceneInvariantViolation("Plane normal must not be zero", node.position)
        unit = n / length
        world_normal = transform_normal(m, unit)
        world_point = transform_point(m, unit * d)
        return cls(
            normal=_vec(world_normal), offset=float(world_normal @ world_point), matrix=_matrix(m),
            local_normal=_vec(n), local_offset=d, material=material,
        )


@dataclass(frozen=True)
class Box:
    """An axis-aligned box; `bounds` is the world AABB of its transformed corners."""
    bounds: Tuple[Vec3, Vec3]
    corners: Tuple[Vec3, ...]
    matrix: Matrix
    lower: Vec3
    upper: Vec3
    material: Optional[Material] = None
    kind = 'box'

    @classmethod
    def from_placement(cls, placement, material=None) -> 'Box':
        node, m = placement.node, placement.matrix
        lower, upper = node.get('lower').as_tuple(), node.get('upper').as_tuple()
        if any(lo > hi for lo, hi in zip(lower, upper)):
            raise SceneInvariantViolation(
                f"Box lower corner {lower} exceeds upper corner {upper}", node.position)
        corners = transform_points(m, list(product(*zip(lower, upper))))
        return cls(
            bounds=(_vec(corners.min(axis=0)), _vec(corners.max(axis=0))),
            corners=tuple(_vec(c) for c in corners), matrix=_matrix(m),
            lower=lower, upper=upper, material=material,
        )


PRIMITIVES = {'sphere': Sphere, 'plane': Plane, 'box': Box}

def build_primitive(placement):
    """Turns a composed sphere, plane or box into its world-space record."""
    return PRIMITIVES[placement.kind].from_placement(placement, Material.from_node(placement.material))
