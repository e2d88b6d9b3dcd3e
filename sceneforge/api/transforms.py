import numpy as np
from .errors import SceneInvariantViolation
from .schema import TRANSFORM_FIELDS

# Tolerance for deciding that a linear map is a similarity or singular.
EPSILON = 1e-9

def translation_matrix(offset) -> np.ndarray:
    m = np.identity(4)
    m[:3, 3] = offset
    return m

def scaling_matrix(factor) -> np.ndarray:
    return np.diag([factor[0], factor[1], factor[2], 1.0])

def x_rotation_matrix(degrees: float) -> np.ndarray:
    c, s = np.cos(np.radians(degrees)), np.sin(np.radians(degrees))
    return np.array([[1, 0, 0, 0], [0, c, -s, 0], [0, s, c, 0], [0, 0, 0, 1]], dtype=float)

def y_rotation_matrix(degrees: float) -> np.ndarray:
    c, s = np.cos(np.radians(degrees)), np.sin(np.radians(degrees))
    return np.array([[c, 0, s, 0], [0, 1, 0, 0], [-s, 0, c, 0], [0, 0, 0, 1]], dtype=float)

def z_rotation_matrix(degrees: float) -> np.ndarray:
    c, s = np.cos(np.radians(degrees)), np.sin(np.radians(degrees))
    return np.array([[c, -s, 0, 0], [s, c, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1]], dtype=float)

def rotation_matrix(angles) -> np.ndarray:
    """Rotation by Euler angles in degrees: about X first, then Y, then Z."""
    return z_rotation_matrix(angles[2]) @ y_rotation_matrix(angles[1]) @ x_rotation_matrix(angles[0])

def affine_matrix(x, y, z, w) -> np.ndarray:
    """Builds a matrix from the images of the three unit axes and the origin."""
    m = np.identity(4)
    m[:3, 0], m[:3, 1], m[:3, 2], m[:3, 3] = x, y, z, w
    return m


class Transform:
    """
    A local transform: scale, then rotate (degrees), then translate, or an
    explicit affine matrix.
    """
    def __init__(self, scale=(1.0, 1.0, 1.0), rotate=(0.0, 0.0, 0.0), translate=(0.0, 0.0, 0.0), affine=None):
        self.scale = tuple(scale)
        self.rotate = tuple(rotate)
        self.translate = tuple(translate)
        self.affine = affine

    @classmethod
    def from_node(cls, node) -> 'Transform':
        """Reads a resolved 'transform' block."""
        if node is None:
            return cls()
        affine = node.get('affine')
        if affine is not None:
            columns = [affine.get(axis).as_tuple() for axis in ('x', 'y', 'z', 'w')]
            return cls(affine=affine_matrix(*columns))
        scale, rotate, translate = (node.get(name).as_tuple() for name in TRANSFORM_FIELDS)
        return cls(scale, rotate, translate)

    @property
    def matrix(self) -> np.ndarray:
        if self.affine is not None:
            return np.array(self.affine, dtype=float)
        return translation_matrix(self.translate) @ rotation_matrix(self.rotate) @ scaling_matrix(self.scale)

    def __repr__(self):
        if self.affine is not None:
            return f"Transform(affine={self.affine.tolist()})"
        return f"Transform(scale={self.scale}, rotate={self.rotate}, translate={self.translate})"


def check_invertible(matrix: np.ndarray, position=None):
    """Raises if the linear part of `matrix` collapses space."""
    if abs(np.linalg.det(matrix[:3, :3])) < EPSILON:
        raise SceneInvariantViolation("Transform is singular (a scale component is zero)", position)

def transform_points(matrix: np.ndarray, points) -> np.ndarray:
    """Applies `matrix` to an (N, 3) array of points."""
    points = np.atleast_2d(np.asarray(points, dtype=float))
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    return (homogeneous @ matrix.T)[:, :3]

def transform_point(matrix: np.ndarray, point) -> np.ndarray:
    return transform_points(matrix, point)[0]

def transform_vector(matrix: np.ndarray, vector) -> np.ndarray:
    return matrix[:3, :3] @ np.asarray(vector, dtype=float)

def transform_normal(matrix: np.ndarray, normal) -> np.ndarray:
    """Carries a normal through the inverse-transpose and renormalises it."""
    n = np.linalg.inv(matrix[:3, :3]).T @ np.asarray(normal, dtype=float)
    return n / np.linalg.norm(n)

def uniform_scale(matrix: np.ndarray):
    """Returns s if the linear part is a similarity (LᵀL = s²I), else None."""
    linear = matrix[:3, :3]
    gram = linear.T @ linear
    s2 = np.trace(gram) / 3.0
    if np.allclose(gram, s2 * np.identity(3), rtol=0, atol=EPSILON * max(1.0, s2)):
        return float(np.sqrt(s2))
    return None
