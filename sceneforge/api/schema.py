"""Field layout of every block kind the resolver understands."""
from .values import Scalar, Vector3, Colour, SCALAR, VECTOR3, COLOUR

NODES = 'nodes'

class FieldSpec:
    """
    Expected shape of one field.

    Args:
        expected (str): 'scalar', 'vector3', 'colour', a nested block kind
                        ('material', 'finish', ...) or 'nodes'.
        required (bool): Whether the field must be present.
        default: Value used when an optional field is absent.
        bounds (tuple, optional): Inclusive (low, high) range for scalars.
        positive (bool): Scalars must be strictly greater than zero.
    """
    def __init__(self, expected: str, required: bool = False, default=None, bounds=None, positive=False):
        self.expected = expected
        self.required = required
        self.default = default
        self.bounds = bounds
        self.positive = positive


IDENTITY_SCALE = Vector3(1.0, 1.0, 1.0)
ZERO = Vector3(0.0, 0.0, 0.0)
WHITE = Colour(1.0, 1.0, 1.0)
DEFAULT_FOV = 39.0

TRANSFORM_FIELDS = ('scale', 'rotate', 'translate')

SCHEMAS = {
    'camera': {
        'location': FieldSpec(VECTOR3, required=True),
        'look_at': FieldSpec(VECTOR3, required=True),
        'sky': FieldSpec(VECTOR3, default=Vector3(0.0, 1.0, 0.0)),
        'field_of_view': FieldSpec(SCALAR, default=Scalar(DEFAULT_FOV), bounds=(0.0, 180.0), positive=True),
    },
    'point_light': {
        'location': FieldSpec(VECTOR3, required=True),
        'colour': FieldSpec(COLOUR, default=WHITE),
    },
    'sphere': {
        'centre': FieldSpec(VECTOR3, required=True),
        'radius': FieldSpec(SCALAR, required=True, positive=True),
        'material': FieldSpec('material'),
        'transform': FieldSpec('transform'),
    },
    'plane': {
        'normal': FieldSpec(VECTOR3, required=True),
        'offset': FieldSpec(SCALAR, default=Scalar(0.0)),
        'material': FieldSpec('material'),
        'transform': FieldSpec('transform'),
    },
    'box': {
        'lower': FieldSpec(VECTOR3, required=True),
        'upper': FieldSpec(VECTOR3, required=True),
        'material': FieldSpec('material'),
        'transform': FieldSpec('transform'),
    },
    'group': {
        'scale': FieldSpec(VECTOR3),
        'rotate': FieldSpec(VECTOR3),
        'translate': FieldSpec(VECTOR3),
        'transform': FieldSpec('transform'),
        'material': FieldSpec('material'),
        'objects': FieldSpec(NODES),
    },
    'material': {
        'pigment': FieldSpec('pigment', required=True),
        'finish': FieldSpec('finish'),
        'opacity': FieldSpec('opacity'),
    },
    'solid': {
        'colour': FieldSpec(COLOUR, required=True),
    },
    'finish': {
        'reflection': FieldSpec(SCALAR, default=Scalar(0.0), bounds=(0.0, 1.0)),
        'ambient': FieldSpec(SCALAR, default=Scalar(0.1)),
        'diffuse': FieldSpec(SCALAR, default=Scalar(0.75)),
        'highlight': FieldSpec(SCALAR, default=Scalar(500.0)),
    },
    'opacity': {
        'alpha': FieldSpec(SCALAR, default=Scalar(1.0), bounds=(0.0, 1.0)),
        'refractive_index': FieldSpec(SCALAR, default=Scalar(1.0), positive=True),
    },
    'transform': {
        'scale': FieldSpec(VECTOR3, default=IDENTITY_SCALE),
        'rotate': FieldSpec(VECTOR3, default=ZERO),
        'translate': FieldSpec(VECTOR3, default=ZERO),
        'affine': FieldSpec('affine'),
    },
    'affine': {
        'x': FieldSpec(VECTOR3, required=True),
        'y': FieldSpec(VECTOR3, required=True),
        'z': FieldSpec(VECTOR3, required=True),
        'w': FieldSpec(VECTOR3, required=True),
    },
}

# Block kinds that may appear in a scene or inside a group's `objects`.
NODE_KINDS = ('point_light', 'sphere', 'plane', 'box', 'group')
PIGMENT_KINDS = ('solid',)
ALIASES = {'union': 'group'}
FIELD_ALIASES = {'color': 'colour', 'center': 'centre'}

# `kind {a, b, c}` typed vector literals.
VECTOR_KINDS = {'vector': VECTOR3, 'point': VECTOR3, 'colour': COLOUR, 'color': COLOUR, 'rgb': COLOUR}

# Nested kinds a field may expect; 'pigment' is satisfied by any pigment kind.
NESTED_KINDS = ('material', 'pigment', 'finish', 'opacity', 'transform', 'affine')


def accepts(expected: str, block_kind: str) -> bool:
    """Whether a resolved block of `block_kind` satisfies a field expecting `expected`."""
    if expected == 'pigment':
        return block_kind in PIGMENT_KINDS
    return expected == block_kind
