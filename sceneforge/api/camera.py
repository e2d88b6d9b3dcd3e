from dataclasses import dataclass
from typing import Tuple
import numpy as np
from .errors import SceneInvariantViolation

DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 768

Vec3 = Tuple[float, float, float]

def _normalize(v: np.ndarray) -> np.ndarray:
    return v / np.linalg.norm(v)

def _as_tuple(v) -> Vec3:
    return tuple(float(c) for c in v)


@dataclass(frozen=True)
class Camera:
    """
    The scene camera and its derived orthonormal basis.

    `direction` points from `location` to `look_at`, `right` is
    `sky x direction` and `up` completes the basis. `hfov` is the configured
    field of view in radians; `vfov` follows from the image aspect ratio.
    """
    location: Vec3
    look_at: Vec3
    sky: Vec3
    field_of_view: float
    direction: Vec3
    right: Vec3
    up: Vec3
    hfov: float
    vfov: float

    @classmethod
    def create(cls, location, look_at, sky=(0.0, 1.0, 0.0), field_of_view=39.0,
               width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT, position=None) -> 'Camera':
        """
        Builds a camera and derives its basis.

        Args:
            location (tuple): Eye position.
            look_at (tuple): Point the camera is aimed at.
            sky (tuple, optional): Approximate up vector. Defaults to (0, 1, 0).
            field_of_view (float, optional): Horizontal field of view in degrees.
            width (int, optional): Image width, used for the aspect ratio.
            height (int, optional): Image height, used for the aspect ratio.
        """
        loc = np.asarray(location, dtype=float)
        target = np.asarray(look_at, dtype=float)
        sky_v = np.asarray(sky, dtype=float)
        if np.allclose(loc, target):
            raise SceneInvariantViolation("Camera location and look_at coincide", position)
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")

        direction = _normalize(target - loc)
        right = np.cross(sky_v, direction)
        if np.linalg.norm(right) < 1e-12:
            raise SceneInvariantViolation("Camera sky vector is parallel to its viewing direction", position)
        right = _normalize(right)
        up = _normalize(np.cross(direction, right))

        hfov = float(np.radians(field_of_view))
        return cls(
            location=_as_tuple(loc), look_at=_as_tuple(target), sky=_as_tuple(sky_v),
            field_of_view=float(field_of_view),
            direction=_as_tuple(direction), right=_as_tuple(right), up=_as_tuple(up),
            hfov=hfov, vfov=hfov / (width / height),
        )

    @classmethod
    def from_node(cls, node, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> 'Camera':
        return cls.create(
            node.get('location').as_tuple(), node.get('look_at').as_tuple(),
            node.get('sky').as_tuple(), node.get('field_of_view').value,
            width, height, node.position,
        )
