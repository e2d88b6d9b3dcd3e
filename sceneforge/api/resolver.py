from .environment import Environment
from .errors import TypeMismatch, UndefinedVariable, SceneInvariantViolation
from .schema import (SCHEMAS, NODES, NODE_KINDS, NESTED_KINDS, ALIASES, FIELD_ALIASES,
                     VECTOR_KINDS, TRANSFORM_FIELDS, accepts)
from .syntax import Number, Reference, VectorLiteral, Block, NodeList, LetBinding
from .utils import _format_value, _is_number, _report
from .values import Scalar, Vector3, Colour, String, NestedNode, SCALAR, VECTOR3, COLOUR, describe

class LetEntry:
    """A `let` value kept unresolved, with the bindings visible where it was declared."""
    def __init__(self, node, scope: Environment):
        self.node = node
        self.scope = scope


class ResolvedScene:
    """The type-checked scene: one camera block plus the ordered scene nodes."""
    def __init__(self, camera: NestedNode, nodes: tuple, bindings: dict = None):
        self.camera = camera
        self.nodes = nodes
        self.bindings = bindings or {}


def _expected_name(expected: str) -> str:
    if expected in NESTED_KINDS:
        return f"'{expected}' block"
    if expected == NODES:
        return 'node list'
    return expected


def _from_template(raw):
    """Lifts a template-level value into the scene value variant."""
    if _is_number(raw):
        return Scalar(float(raw))
    if isinstance(raw, str):
        return String(raw)
    return String(_format_value(raw))


def _identity_transform():
    spec = SCHEMAS['transform']
    return NestedNode('transform', tuple((name, spec[name].default) for name in TRANSFORM_FIELDS))


class Resolver:
    """
    Binds `let` declarations, resolves references and type-checks every block.

    Args:
        env (Environment, optional): Final environment of the template pass;
                                     bare names not bound by `let` fall back to it.
        strict (bool, optional): Reject unknown and duplicate fields. When False
                                 they are reported on stderr and ignored
                                 (duplicates keep the last value).
        verbose (bool, optional): Report progress on stderr.
    """
    def __init__(self, env: Environment = None, strict: bool = True, verbose: bool = False):
        self.env = env if env is not None else Environment()
        self.strict = strict
        self.verbose = verbose
        self.lets = Environment()
        self.bindings = {}

    def resolve(self, scene_file) -> ResolvedScene:
        cameras = []
        nodes = []
        for item in scene_file.items:
            if isinstance(item, LetBinding):
                self._let(item)
                continue
            kind = ALIASES.get(item.kind, item.kind)
            if kind == 'camera':
                if cameras:
                    raise SceneInvariantViolation("Scene declares more than one camera", item.position)
                cameras.append(self._block(item, kind, self.lets))
            else:
                nodes.append(self._node(item, self.lets))

        if not cameras:
            raise SceneInvariantViolation("Scene declares no camera; exactly one is required")
        if self.verbose:
            _report('INFO', f"Resolved {len(nodes)} top-level nodes and {len(self.bindings)} let bindings.")
        return ResolvedScene(cameras[0], tuple(nodes), dict(self.bindings))

    # --- Bindings ---

    def _let(self, item: LetBinding):
        scope = self.lets.copy()
        self.bindings[item.name] = self._value(item.value, None, item.name, 'let', scope)
        self.lets.assign(item.name, LetEntry(item.value, scope))

    def _reference(self, ref: Reference, expected, field, block, scope, at=None):
        at = at or ref.position
        if ref.name in scope:
            entry = scope.lookup(ref.name)
            return self._value(entry.node, expected, field, block, entry.scope, at)
        if ref.name in self.env:
            value = _from_template(self.env.lookup(ref.name))
            return self._expect(value, expected, field, block, at)
        raise UndefinedVariable(ref.name, ref.position)

    # --- Values ---

    def _value(self, node, expected, field, block, scope, at=None):
        at = at or node.position
        if isinstance(node, Reference):
            return self._reference(node, expected, field, block, scope, at)
        if isinstance(node, Number):
            value = Scalar(node.value)
        elif isinstance(node, VectorLiteral):
            value = self._vector(node, expected, field, block, scope)
        elif isinstance(node, Block):
            value = self._nested(node, expected, field, block, scope, at)
        elif isinstance(node, NodeList):
            raise TypeMismatch(field, _expected_name(expected) if expected else 'a value',
                               'node list', block, at)
        else:
            raise TypeError(f"Unexpected syntax node {node!r}")
        return self._expect(value, expected, field, block, at)

    def _expect(self, value, expected, field, block, at):
        if expected is None:
            return value
        if expected in (SCALAR, VECTOR3, COLOUR):
            ok = value.kind == expected
        elif expected in NESTED_KINDS:
            ok = isinstance(value, NestedNode) and accepts(expected, value.block)
        else:
            ok = False
        if not ok:
            raise TypeMismatch(field, _expected_name(expected), describe(value), block, at)
        return value

    def _component(self, node, field, block, scope) -> float:
        if isinstance(node, Number):
            return float(node.value)
        return self._reference(node, SCALAR, field, block, scope).value

    def _vector(self, node: VectorLiteral, expected, field, block, scope):
        x, y, z = (self._component(c, field, block, scope) for c in node.components)
        if node.kind is None:
            vector_kind = COLOUR if expected == COLOUR else VECTOR3
        elif node.kind in VECTOR_KINDS:
            vector_kind = VECTOR_KINDS[node.kind]
        else:
            raise SceneInvariantViolation(f"Unknown vector type '{node.kind}'", node.position)
        return Colour(x, y, z) if vector_kind == COLOUR else Vector3(x, y, z)

    def _nested(self, node: Block, expected, field, block, scope, at):
        kind = ALIASES.get(node.kind, node.kind)
        if kind is None:
            if expected in NESTED_KINDS and expected != 'pigment':
                kind = expected
            elif expected is None:
                fields = tuple((f.name, self._value(f.value, None, f.name, block, scope)) for f in node.fields)
                return NestedNode(None, fields, position=node.position)
            else:
                raise TypeMismatch(field, _expected_name(expected), 'anonymous block', block, at)
        if kind not in SCHEMAS or kind == 'camera':
            raise SceneInvariantViolation(f"Unknown block kind '{kind}'", node.position)
        return self._block(node, kind, scope)

    # --- Blocks ---

    def _node(self, block: Block, scope, in_group: bool = False) -> NestedNode:
        kind = ALIASES.get(block.kind, block.kind)
        if kind == 'camera':
            raise SceneInvariantViolation("A camera must be declared at scene level, not inside a group",
                                          block.position)
        if kind not in NODE_KINDS:
            where = "inside a group" if in_group else "at scene level"
            raise SceneInvariantViolation(f"Block '{block.kind}' is not allowed {where}", block.position)
        return self._block(block, kind, scope)

    def _children(self, node, field, block, scope) -> tuple:
        if isinstance(node, NodeList):
            return tuple(self._node(b, scope, in_group=True) for b in node.blocks)
        if isinstance(node, Block) and node.kind is None and not node.fields:
            return ()
        actual = 'name' if isinstance(node, Reference) else type(node).__name__.lower()
        raise TypeMismatch(field, 'node list', actual, block, node.position)

    def _reject(self, message: str, position):
        if self.strict:
            raise SceneInvariantViolation(message, position)
        _report('WARNING', f"{message} (at {position}); ignoring.")

    def _check_range(self, value, spec, field, block, position):
        if not isinstance(value, Scalar):
            return
        if spec.positive and value.value <= 0:
            raise SceneInvariantViolation(
                f"Field '{block}.{field}' must be positive, got {value.value}", position)
        if spec.bounds is not None:
            lo, hi = spec.bounds
            if not lo <= value.value <= hi:
                raise SceneInvariantViolation(
                    f"Field '{block}.{field}' must be within [{lo}, {hi}], got {value.value}", position)

    def _block(self, block: Block, kind: str, scope) -> NestedNode:
        schema = SCHEMAS[kind]
        values = {}
        children = None
        for f in block.fields:
            name = FIELD_ALIASES.get(f.name, f.name)
            spec = schema.get(name)
            if spec is None:
                self._reject(f"Unknown field '{f.name}' in '{kind}' block", f.position)
                continue
            if name in values or (name == 'objects' and children is not None):
                self._reject(f"Duplicate field '{f.name}' in '{kind}' block", f.position)
            if spec.expected == NODES:
                children = self._children(f.value, name, kind, scope)
                continue
            value = self._value(f.value, spec.expected, name, kind, scope)
            self._check_range(value, spec, name, kind, f.position)
            values[name] = value

        for name, spec in schema.items():
            if spec.required and name not in values:
                raise SceneInvariantViolation(f"Missing required field '{name}' in '{kind}' block",
                                              block.position)

        finish = getattr(self, f"_finish_{kind}", None)
        if finish is not None:
            finish(values, block)
        else:
            for name, spec in schema.items():
                if name not in values and spec.default is not None:
                    values[name] = spec.default
        return NestedNode(kind, tuple(values.items()), tuple(children or ()), block.position)

    def _finish_transform(self, values, block):
        if 'affine' in values:
            if any(name in values for name in TRANSFORM_FIELDS):
                raise SceneInvariantViolation(
                    "A transform with 'affine' cannot also set scale, rotate or translate", block.position)
            return
        for name in TRANSFORM_FIELDS:
            values.setdefault(name, SCHEMAS['transform'][name].default)

    def _finish_group(self, values, block):
        direct = [name for name in TRANSFORM_FIELDS if name in values]
        if direct and 'transform' in values:
            raise SceneInvariantViolation(
                "A group sets its transform either with 'transform' or with scale/rotate/translate, not both",
                block.position)
        if direct:
            spec = SCHEMAS['transform']
            fields = tuple((name, values.pop(name, spec[name].default)) for name in TRANSFORM_FIELDS)
            values['transform'] = NestedNode('transform', fields)
        values.setdefault('transform', _identity_transform())

    def _finish_primitive(self, values, block):
        values.setdefault('transform', _identity_transform())
        for name, spec in SCHEMAS[block.kind].items():
            if name not in values and spec.default is not None:
                values[name] = spec.default

    _finish_sphere = _finish_plane = _finish_box = _finish_primitive


def resolve(scene_file, env: Environment = None, strict: bool = True, verbose: bool = False) -> ResolvedScene:
    """Type-checks a parsed SceneFile against the template environment."""
    return Resolver(env, strict=strict, verbose=verbose).resolve(scene_file)
