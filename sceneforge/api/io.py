from pathlib import Path
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
from .errors import SceneError
from .scene import compile, Scene
from .utils import _format_value, _report

INDENT = '    '

def load(path, **options) -> Scene:
    """
    Reads and compiles a scene file.

    Args:
        path (str or Path): The scene file, read as UTF-8.
        **options: Passed through to `compile` (variables, strict, width, height, verbose).
    """
    path = Path(path)
    source = path.read_text(encoding='utf-8')
    if options.get('verbose'):
        _report('INFO', f"Loading scene '{path.name}' ({len(source)} characters)...")
    return compile(source, **options)

# --- Serialization ---

def _vec(v) -> str:
    return _format_value([float(c) for c in v])

def _num(x) -> str:
    return _format_value(float(x))

def _block(kind, fields, depth=0) -> str:
    pad = INDENT * (depth + 1)
    head = f"{kind} {{" if kind else "{"
    body = ",\n".join(f"{pad}{name}: {value}" for name, value in fields)
    return f"{head}\n{body}\n{INDENT * depth}}}"

def _material(material, depth) -> str:
    fields = [('pigment', _block('solid', [('colour', _vec(material.pigment.colour))], depth + 1))]
    if material.finish is not None:
        f = material.finish
        fields.append(('finish', _block('finish', [
            ('reflection', _num(f.reflection)), ('ambient', _num(f.ambient)),
            ('diffuse', _num(f.diffuse)), ('highlight', _num(f.highlight)),
        ], depth + 1)))
    if material.opacity is not None:
        o = material.opacity
        fields.append(('opacity', _block('opacity', [
            ('alpha', _num(o.alpha)), ('refractive_index', _num(o.refractive_index)),
        ], depth + 1)))
    return _block('material', fields, depth)

def _transform(matrix, depth) -> str:
    columns = [(axis, _vec(row[i] for row in matrix[:3])) for i, axis in enumerate('xyzw')]
    return _block(None, [('affine', _block(None, columns, depth + 1))], depth)

def _primitive(p) -> str:
    if p.kind in ('sphere', 'ellipsoid'):
        kind, fields = 'sphere', [('centre', _vec(p.local_centre)), ('radius', _num(p.local_radius))]
    elif p.kind == 'plane':
        kind, fields = 'plane', [('normal', _vec(p.local_normal)), ('offset', _num(p.local_offset))]
    elif p.kind == 'box':
        kind, fields = 'box', [('lower', _vec(p.lower)), ('upper', _vec(p.upper))]
    else:
        raise TypeError(f"Cannot serialize primitive of kind '{p.kind}'")
    if p.material is not None:
        fields.append(('material', _material(p.material, 1)))
    fields.append(('transform', _transform(p.matrix, 1)))
    return _block(kind, fields)

def dumps(scene: Scene) -> str:
    """
    Serializes a Scene as plain scene text.

    Primitives are written with their declared geometry and an `affine`
    transform holding their world matrix, so compiling the result gives
    back an equal Scene.
    """
    cam = scene.camera
    parts = [_block('camera', [
        ('location', _vec(cam.location)), ('look_at', _vec(cam.look_at)),
        ('sky', _vec(cam.sky)), ('field_of_view', _num(cam.field_of_view)),
    ])]
    for light in scene.lights:
        parts.append(_block('point_light', [('location', _vec(light.location)), ('colour', _vec(light.colour))]))
    parts.extend(_primitive(p) for p in scene.primitives)
    return "\n\n".join(parts) + "\n"

def save(scene: Scene, path):
    """Writes `dumps(scene)` to `path`."""
    Path(path).write_text(dumps(scene), encoding='utf-8')

# --- Watching ---

class SceneFileHandler(FileSystemEventHandler):
    """Recompiles a scene file whenever it is modified."""
    def __init__(self, path, on_change, on_error=None, **options):
        self.path = Path(path).resolve()
        self.on_change = on_change
        self.on_error = on_error
        self.options = options

    def on_modified(self, event):
        if event.is_directory or Path(event.src_path).resolve() != self.path:
            return
        self.reload()

    def reload(self):
        try:
            scene = load(self.path, **self.options)
        except (SceneError, OSError, UnicodeDecodeError) as e:
            if self.on_error is None:
                _report('ERROR', f"Failed to compile '{self.path.name}': {e}")
                return
            self.on_error(e)
            return
        self.on_change(scene)


def watch(path, on_change, on_error=None, **options) -> Observer:
    """
    Watches a scene file and recompiles it on every change.

    Args:
        path (str or Path): The scene file to watch.
        on_change (callable): Called with the new Scene after each successful compile.
        on_error (callable, optional): Called with the exception when compilation
                                       fails. Without it, failures are reported on stderr.
        **options: Passed through to `compile`.

    Returns:
        Observer: The started watchdog observer; call `stop()` and `join()` to end it.
    """
    handler = SceneFileHandler(path, on_change, on_error, **options)
    observer = Observer()
    observer.schedule(handler, str(handler.path.parent), recursive=False)
    observer.daemon = True
    observer.start()
    if options.get('verbose'):
        _report('INFO', f"Watching '{handler.path.name}' for changes...")
    return observer
