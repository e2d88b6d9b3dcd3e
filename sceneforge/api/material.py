from dataclasses import dataclass
from typing import Optional, Tuple

@dataclass(frozen=True)
class SolidPigment:
    """A uniform surface colour as an (r, g, b) triple."""
    colour: Tuple[float, float, float]
    kind = 'solid'


@dataclass(frozen=True)
class Finish:
    """
    Surface response to light.

    Args:
        reflection (float): Mirror reflectivity in [0, 1]. Defaults to 0.
        ambient (float): Light the surface shows without any source. Defaults to 0.1.
        diffuse (float): Lambertian response. Defaults to 0.75.
        highlight (float): Specular highlight hardness. Defaults to 500.
    """
    reflection: float = 0.0
    ambient: float = 0.1
    diffuse: float = 0.75
    highlight: float = 500.0

    @classmethod
    def from_node(cls, node) -> 'Finish':
        return cls(*(node.get(name).value for name in ('reflection', 'ambient', 'diffuse', 'highlight')))


@dataclass(frozen=True)
class Opacity:
    alpha: float = 1.0
    refractive_index: float = 1.0

    @classmethod
    def from_node(cls, node) -> 'Opacity':
        return cls(node.get('alpha').value, node.get('refractive_index').value)


@dataclass(frozen=True)
class Material:
    """
    A pigment with an optional finish and opacity. An absent finish means
    the surface has no reflective property; the renderer picks its own.
    """
    pigment: SolidPigment
    finish: Optional[Finish] = None
    opacity: Optional[Opacity] = None

    @classmethod
    def from_node(cls, node) -> Optional['Material']:
        """Builds a Material from a resolved 'material' block, or None."""
        if node is None:
            return None
        pigment = node.get('pigment')
        finish = node.get('finish')
        opacity = node.get('opacity')
        return cls(
            SolidPigment(pigment.get('colour').as_tuple()),
            Finish.from_node(finish) if finish is not None else None,
            Opacity.from_node(opacity) if opacity is not None else None,
        )
