from dataclasses import dataclass
from typing import Tuple
from .transforms import transform_point

@dataclass(frozen=True)
class PointLight:
    """
    An omnidirectional light in world space.

    Args:
        location (tuple): World-space position, after any group transforms.
        colour (tuple): (r, g, b) intensity. Components are expected in
                        [0, 1] but are not enforced.
    """
    location: Tuple[float, float, float]
    colour: Tuple[float, float, float] = (1.0, 1.0, 1.0)

    @classmethod
    def from_placement(cls, placement) -> 'PointLight':
        node = placement.node
        location = transform_point(placement.matrix, node.get('location').as_tuple())
        return cls(tuple(float(c) for c in location), node.get('colour').as_tuple())
