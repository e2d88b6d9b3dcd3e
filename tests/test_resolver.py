import pytest
from sceneforge import (parse, resolve, expand, Environment, TypeMismatch, UndefinedVariable,
                        SceneInvariantViolation)
from sceneforge.api.values import Scalar, Vector3, Colour, NestedNode

CAMERA = "camera { location: {0, 0, -10}, look_at: {0, 0, 0} }\n"

def _resolve(body, env=None, strict=True):
    return resolve(parse(CAMERA + body), env, strict=strict)

def _only(body, **options):
    resolved = _resolve(body, **options)
    (node,) = resolved.nodes
    return node

# --- Values and defaults ---

def test_camera_defaults():
    camera = _resolve("").camera
    assert camera.get('location') == Vector3(0.0, 0.0, -10.0)
    assert camera.get('sky') == Vector3(0.0, 1.0, 0.0)
    assert camera.get('field_of_view') == Scalar(39.0)

def test_sphere_fields_and_identity_transform():
    sphere = _only("sphere { centre: {1, 2, 3}, radius: 2 }")
    assert sphere.block == 'sphere'
    assert sphere.get('centre') == Vector3(1.0, 2.0, 3.0)
    assert sphere.get('radius') == Scalar(2.0)
    assert sphere.get('material') is None
    transform = sphere.get('transform')
    assert transform.get('scale') == Vector3(1.0, 1.0, 1.0)
    assert transform.get('rotate') == Vector3(0.0, 0.0, 0.0)

def test_untyped_vector_becomes_colour_by_context():
    light = _only("point_light { location: {0, 5, 0}, colour: {1, 0.5, 0} }")
    assert light.get('colour') == Colour(1.0, 0.5, 0.0)
    assert light.get('location') == Vector3(0.0, 5.0, 0.0)

def test_light_colour_defaults_to_white():
    light = _only("point_light { location: {0, 5, 0} }")
    assert light.get('colour') == Colour(1.0, 1.0, 1.0)

def test_field_aliases():
    sphere = _only("sphere { center: {0, 0, 0}, radius: 1, material: material { pigment: solid { color: {1, 1, 1} } } }")
    assert 'centre' in sphere
    assert sphere.get('material').get('pigment').get('colour') == Colour(1.0, 1.0, 1.0)

def test_finish_defaults():
    sphere = _only("sphere { centre: {0,0,0}, radius: 1, material: { pigment: solid { colour: {1,0,0} }, finish: { reflection: 0.5 } } }")
    finish = sphere.get('material').get('finish')
    assert finish.get('reflection') == Scalar(0.5)
    assert finish.get('ambient') == Scalar(0.1)
    assert finish.get('diffuse') == Scalar(0.75)
    assert finish.get('highlight') == Scalar(500.0)

def test_plane_offset_default():
    plane = _only("plane { normal: {0, 1, 0} }")
    assert plane.get('offset') == Scalar(0.0)

# --- Bindings ---

def test_let_binding_is_resolved_at_use():
    sphere = _only("let r = 3\nsphere { centre: {0,0,0}, radius: r }")
    assert sphere.get('radius') == Scalar(3.0)

def test_let_vector_takes_use_site_type():
    resolved = _resolve("let c = {1, 0, 0}\n"
                        "point_light { location: c, colour: c }")
    light = resolved.nodes[0]
    assert light.get('location') == Vector3(1.0, 0.0, 0.0)
    assert light.get('colour') == Colour(1.0, 0.0, 0.0)
    assert resolved.bindings['c'] == Vector3(1.0, 0.0, 0.0)

def test_let_material_is_reused():
    resolved = _resolve("let red = material { pigment: solid { colour: {1, 0, 0} } }\n"
                        "sphere { centre: {0,0,0}, radius: 1, material: red }\n"
                        "box { lower: {0,0,0}, upper: {1,1,1}, material: red }")
    a, b = resolved.nodes
    assert a.get('material') == b.get('material')
    assert isinstance(a.get('material'), NestedNode)

def test_let_may_refer_to_earlier_let():
    sphere = _only("let a = 2\nlet c = {a, a, 0}\npoint_light { location: c }")
    assert sphere.get('location') == Vector3(2.0, 2.0, 0.0)

def test_let_cannot_refer_to_later_let():
    with pytest.raises(UndefinedVariable) as e:
        _resolve("let c = {a, 0, 0}\nlet a = 1\npoint_light { location: c }")
    assert e.value.name == 'a'

def test_reference_to_template_variable():
    _, env = expand("{% assign size = 4 %}")
    sphere = _only("sphere { centre: {0,0,0}, radius: size }", env=env)
    assert sphere.get('radius') == Scalar(4.0)

def test_let_shadows_template_variable():
    env = Environment({'r': 1})
    sphere = _only("let r = 2\nsphere { centre: {0,0,0}, radius: r }", env=env)
    assert sphere.get('radius') == Scalar(2.0)

def test_undefined_reference():
    with pytest.raises(UndefinedVariable) as e:
        _resolve("sphere { centre: {0,0,0}, radius: missing }")
    assert e.value.name == 'missing'
    assert e.value.position.line == 2

def test_string_template_value_is_a_type_mismatch():
    env = Environment({'name': 'big'})
    with pytest.raises(TypeMismatch) as e:
        _resolve("sphere { centre: {0,0,0}, radius: name }", env=env)
    assert e.value.actual == 'string'

# --- Type checks ---

def test_scalar_where_vector_expected():
    with pytest.raises(TypeMismatch) as e:
        _resolve("sphere { centre: 1, radius: 1 }")
    assert (e.value.field, e.value.block, e.value.expected, e.value.actual) == \
           ('centre', 'sphere', 'vector3', 'scalar')

def test_typed_colour_rejected_where_vector_expected():
    with pytest.raises(TypeMismatch):
        _resolve("point_light { location: colour {1, 1, 1} }")

def test_wrong_nested_block_kind():
    with pytest.raises(TypeMismatch) as e:
        _resolve("sphere { centre: {0,0,0}, radius: 1, material: finish { } }")
    assert e.value.expected == "'material' block"

def test_type_mismatch_is_a_type_error():
    with pytest.raises(TypeError):
        _resolve("sphere { centre: {0,0,0}, radius: {1,1,1} }")

# --- Invariants ---

def test_missing_required_field():
    with pytest.raises(SceneInvariantViolation, match="Missing required field 'radius' in 'sphere'"):
        _resolve("sphere { centre: {0,0,0} }")

def test_no_camera():
    with pytest.raises(SceneInvariantViolation, match="no camera"):
        resolve(parse("sphere { centre: {0,0,0}, radius: 1 }"))

def test_two_cameras():
    with pytest.raises(SceneInvariantViolation, match="more than one camera"):
        _resolve(CAMERA)

def test_camera_inside_group():
    with pytest.raises(SceneInvariantViolation, match="scene level"):
        _resolve("group { objects: { camera { location: {0,0,0}, look_at: {0,0,1} } } }")

def test_unknown_block_kind():
    with pytest.raises(SceneInvariantViolation):
        _resolve("torus { radius: 1 }")

def test_radius_must_be_positive():
    with pytest.raises(SceneInvariantViolation, match="positive"):
        _resolve("sphere { centre: {0,0,0}, radius: 0 }")

def test_reflection_range():
    with pytest.raises(SceneInvariantViolation, match=r"\[0.0, 1.0\]"):
        _resolve("sphere { centre: {0,0,0}, radius: 1, material: { pigment: solid { colour: {1,1,1} }, finish: { reflection: 1.5 } } }")

# --- Strict mode ---

def test_unknown_field_strict():
    with pytest.raises(SceneInvariantViolation, match="Unknown field 'mass'"):
        _resolve("sphere { centre: {0,0,0}, radius: 1, mass: 3 }")

def test_duplicate_field_strict():
    with pytest.raises(SceneInvariantViolation, match="Duplicate field 'radius'"):
        _resolve("sphere { centre: {0,0,0}, radius: 1, radius: 2 }")

def test_non_strict_ignores_unknown_and_keeps_last_duplicate(capsys):
    sphere = _only("sphere { centre: {0,0,0}, radius: 1, mass: 3, radius: 2 }", strict=False)
    assert 'mass' not in sphere
    assert sphere.get('radius') == Scalar(2.0)
    err = capsys.readouterr().err
    assert "WARNING: Unknown field 'mass'" in err
    assert "WARNING: Duplicate field 'radius'" in err

# --- Groups and transforms ---

def test_group_direct_transform_fields():
    group = _only("group { scale: {2, 1, 1}, translate: {0, 2, 0}, objects: { sphere { centre: {0,0,0}, radius: 1 } } }")
    transform = group.get('transform')
    assert transform.get('scale') == Vector3(2.0, 1.0, 1.0)
    assert transform.get('rotate') == Vector3(0.0, 0.0, 0.0)
    assert transform.get('translate') == Vector3(0.0, 2.0, 0.0)
    assert 'scale' not in group
    assert [c.block for c in group.children] == ['sphere']

def test_union_is_a_group():
    group = _only("union { objects: { box { lower: {0,0,0}, upper: {1,1,1} } } }")
    assert group.block == 'group'

def test_group_transform_block():
    group = _only("group { transform: { rotate: {0, 90, 0} }, objects: { } }")
    assert group.get('transform').get('rotate') == Vector3(0.0, 90.0, 0.0)
    assert group.children == ()

def test_group_cannot_mix_transform_styles():
    with pytest.raises(SceneInvariantViolation, match="not both"):
        _resolve("group { scale: {2,2,2}, transform: { rotate: {0,0,0} }, objects: { } }")

def test_affine_cannot_mix_with_components():
    with pytest.raises(SceneInvariantViolation, match="affine"):
        _resolve("sphere { centre: {0,0,0}, radius: 1, transform: { scale: {1,1,1}, "
                 "affine: { x: {1,0,0}, y: {0,1,0}, z: {0,0,1}, w: {0,0,0} } } }")

def test_objects_must_be_a_node_list():
    with pytest.raises(TypeMismatch):
        _resolve("group { objects: {1, 2, 3} }")

def test_nested_groups():
    group = _only("group { objects: { group { objects: { sphere { centre: {0,0,0}, radius: 1 } } } } }")
    inner = group.children[0]
    assert inner.block == 'group'
    assert inner.children[0].block == 'sphere'
