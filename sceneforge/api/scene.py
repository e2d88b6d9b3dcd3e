from dataclasses import dataclass
from typing import Tuple
from .camera import Camera, DEFAULT_WIDTH, DEFAULT_HEIGHT
from .compositor import compose
from .light import PointLight
from .parser import parse
from .primitives import build_primitive
from .resolver import resolve
from .errors import SceneError
from .template import expand_with_map
from .utils import _report

@dataclass(frozen=True)
class Scene:
    """
    The compiled scene handed to a renderer.

    Attributes:
        camera (Camera): The single camera with its derived basis.
        lights (tuple): PointLights in declaration order, in world space.
        primitives (tuple): Spheres, planes and boxes in world space,
                            depth-first in declaration order.
    """
    camera: Camera
    lights: Tuple[PointLight, ...] = ()
    primitives: Tuple[object, ...] = ()

    def __iter__(self):
        return iter(self.primitives)

    def __len__(self):
        return len(self.primitives)


class SceneBuilder:
    """Flattens a ResolvedScene into a Scene."""
    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT, verbose: bool = False):
        self.width = width
        self.height = height
        self.verbose = verbose

    def build(self, resolved) -> Scene:
        camera = Camera.from_node(resolved.camera, self.width, self.height)
        lights, primitives = [], []
        for placement in compose(resolved.nodes):
            if placement.kind == 'point_light':
                lights.append(PointLight.from_placement(placement))
            else:
                primitives.append(build_primitive(placement))
        if self.verbose:
            _report('INFO', f"Built scene with {len(lights)} lights and {len(primitives)} primitives.")
        return Scene(camera, tuple(lights), tuple(primitives))


def compile(source: str, variables: dict = None, strict: bool = True,
            width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT, verbose: bool = False) -> Scene:
    """
    Compiles templated scene text into a Scene.

    Args:
        source (str): The scene file contents.
        variables (dict, optional): Bindings visible to the template layer
                                    before the file's own `assign`s.
        strict (bool, optional): Reject unknown and duplicate fields.
                                 Defaults to True.
        width (int, optional): Image width; with `height` fixes the camera's
                               vertical field of view.
        height (int, optional): Image height.
        verbose (bool, optional): Report each stage on stderr.

    Returns:
        Scene: The immutable scene graph. Any error aborts compilation.

    Example:
        >>> scene = compile('''
        ...     camera { location: {0, 1, -5}, look_at: {0, 0, 0} }
        ...     sphere { centre: {0, 0, 0}, radius: 1 }
        ... ''')
        >>> scene.primitives[0].radius
        1.0
    """
    text, env, source_map = expand_with_map(source, variables, verbose=verbose)
    try:
        scene_file = parse(text)
        if verbose:
            _report('INFO', f"Parsed {len(scene_file.items)} top-level items.")
        resolved = resolve(scene_file, env, strict=strict, verbose=verbose)
        return SceneBuilder(width, height, verbose).build(resolved)
    except SceneError as e:
        # Positions refer to the file as written, not the unrolled text.
        e.relocate(source_map.position(e.position))
        raise
