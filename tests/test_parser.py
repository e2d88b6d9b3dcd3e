import pytest
from sceneforge import parse, ParseError, ParseErrorKind, LexError, Position
from sceneforge.api.syntax import Block, VectorLiteral, Number, Reference, NodeList, LetBinding

def test_single_block():
    scene = parse("sphere { centre: {1, 2, 3}, radius: 0.5 }")
    (block,) = scene.blocks
    assert block.kind == 'sphere'
    assert [f.name for f in block.fields] == ['centre', 'radius']
    centre = block.fields[0].value
    assert isinstance(centre, VectorLiteral)
    assert [c.value for c in centre.components] == [1.0, 2.0, 3.0]
    assert isinstance(block.fields[1].value, Number)

def test_fields_keep_declaration_order_and_trailing_comma():
    block = parse("box { upper: {1,1,1}, lower: {0,0,0}, }").blocks[0]
    assert [f.name for f in block.fields] == ['upper', 'lower']

def test_empty_block():
    block = parse("finish {}").blocks[0]
    assert block.kind == 'finish' and block.fields == []

def test_references_and_named_components():
    block = parse("sphere { centre: {x, 0, z}, radius: r }").blocks[0]
    centre, radius = (f.value for f in block.fields)
    assert isinstance(centre.components[0], Reference) and centre.components[0].name == 'x'
    assert isinstance(radius, Reference) and radius.name == 'r'

def test_nested_named_blocks():
    block = parse("sphere { material: material { pigment: solid { colour: {1, 0, 0} } } }").blocks[0]
    material = block.fields[0].value
    assert isinstance(material, Block) and material.kind == 'material'
    pigment = material.fields[0].value
    assert pigment.kind == 'solid'

def test_typed_vector():
    block = parse("point_light { location: {0,0,0}, colour: colour {1, 0.5, 0} }").blocks[0]
    colour = block.fields[1].value
    assert isinstance(colour, VectorLiteral) and colour.kind == 'colour'

def test_anonymous_block():
    block = parse("sphere { transform: { scale: {2,2,2} } }").blocks[0]
    transform = block.fields[0].value
    assert isinstance(transform, Block) and transform.kind is None

def test_node_list():
    block = parse("group { objects: { sphere { radius: 1 } box { lower: {0,0,0} } } }").blocks[0]
    objects = block.fields[0].value
    assert isinstance(objects, NodeList)
    assert [b.kind for b in objects.blocks] == ['sphere', 'box']

def test_let_binding():
    scene = parse("let red = colour {1, 0, 0}\nsphere { radius: 1 }")
    let, sphere = scene.items
    assert isinstance(let, LetBinding) and let.name == 'red'
    assert isinstance(let.value, VectorLiteral)
    assert scene.blocks == [sphere]

def test_comments_are_ignored():
    scene = parse("// header\nsphere { radius: 1 } // trailing")
    assert len(scene.blocks) == 1

@pytest.mark.parametrize("vector", ["{1, 2}", "{1, 2, 3, 4}"])
def test_vector_needs_three_components(vector):
    with pytest.raises(ParseError) as e:
        parse(f"sphere {{ centre: {vector} }}")
    assert e.value.kind == ParseErrorKind.MALFORMED_LITERAL

def test_vector_component_must_be_number_or_name():
    with pytest.raises(ParseError) as e:
        parse("sphere { centre: {1, {2}, 3} }")
    assert e.value.kind == ParseErrorKind.MALFORMED_LITERAL

def test_unterminated_block_points_at_opener():
    with pytest.raises(ParseError) as e:
        parse("sphere {\n  radius: 1,\n")
    assert e.value.kind == ParseErrorKind.UNTERMINATED_BLOCK
    assert e.value.position == Position(1, 8)

def test_unterminated_vector():
    with pytest.raises(ParseError) as e:
        parse("sphere { centre: {1, 2")
    assert e.value.kind == ParseErrorKind.UNTERMINATED_BLOCK

def test_missing_colon():
    with pytest.raises(ParseError) as e:
        parse("sphere { radius 1 }")
    assert e.value.kind == ParseErrorKind.UNEXPECTED_TOKEN

def test_missing_comma_between_fields():
    with pytest.raises(ParseError, match="',' or '}'"):
        parse("sphere { radius: 1 centre: {0,0,0} }")

def test_stray_top_level_token():
    with pytest.raises(ParseError) as e:
        parse("sphere { radius: 1 } }")
    assert e.value.kind == ParseErrorKind.UNEXPECTED_TOKEN
    assert e.value.position == Position(1, 22)

def test_block_without_body():
    with pytest.raises(ParseError):
        parse("sphere radius")

def test_lex_errors_propagate():
    with pytest.raises(LexError):
        parse("sphere { radius: 1.2.3 }")
