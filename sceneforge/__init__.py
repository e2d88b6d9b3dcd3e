from .api.errors import (
    Position, SceneError, LexError, ParseError, ParseErrorKind, UndefinedVariable,
    TypeMismatch, MalformedFilterExpression, LoopRangeError, SceneInvariantViolation,
)
from .api.environment import Environment
from .api.template import expand, MAX_LOOP_ITERATIONS
from .api.parser import parse
from .api.resolver import resolve
from .api.schema import DEFAULT_FOV
from .api.camera import Camera, DEFAULT_WIDTH, DEFAULT_HEIGHT
from .api.light import PointLight
from .api.material import Material, SolidPigment, Finish, Opacity
from .api.primitives import Sphere, Plane, Box
from .api.transforms import Transform
from .api.scene import Scene, SceneBuilder, compile
from .api.io import load, dumps, save, watch

__version__ = '0.1.0'
