import pytest
import numpy as np
from unittest.mock import MagicMock, patch
from sceneforge import compile, load, dumps, save, watch, SceneInvariantViolation
from sceneforge.api.io import SceneFileHandler

SCENE = """
camera { location: {0, 2, -8}, look_at: {0, 0, 0}, field_of_view: 45 }
point_light { location: {-5, 10, -5}, colour: {1, 0.9, 0.8} }
let red = material {
    pigment: solid { colour: {1, 0, 0} },
    finish: finish { reflection: 0.3 },
    opacity: opacity { alpha: 0.75 }
}
{% for i in (0..2) %}
sphere { centre: { {{ i | times: 1.25 }}, 0, 0 }, radius: 0.5, material: red }
{% endfor %}
group {
    scale: {2, 1, 1},
    rotate: {0, 30, 0},
    translate: {0, 2, 0},
    objects: {
        sphere { centre: {0, 0, 0}, radius: 1 }
        box { lower: {-1, -1, -1}, upper: {1, 1, 1} }
        point_light { location: {0, 1, 0} }
    }
}
plane { normal: {0, 1, 0}, offset: -1 }
"""

@pytest.fixture
def scene_file(tmp_path):
    path = tmp_path / "demo.scene"
    path.write_text(SCENE, encoding='utf-8')
    return path

def test_load_compiles_file(scene_file):
    scene = load(scene_file)
    assert [p.kind for p in scene.primitives] == ['sphere', 'sphere', 'sphere', 'ellipsoid', 'box', 'plane']
    assert len(scene.lights) == 2

def test_load_passes_options(scene_file):
    scene = load(scene_file, width=100, height=100)
    assert scene.camera.vfov == pytest.approx(scene.camera.hfov)

def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load(tmp_path / "missing.scene")

def test_dumps_is_plain_scene_text(scene_file):
    text = dumps(load(scene_file))
    assert "{%" not in text and "{{" not in text
    assert text.count("camera {") == 1
    assert "affine" in text

def test_dumps_round_trip(scene_file):
    scene = load(scene_file)
    again = compile(dumps(scene))
    assert again == scene

def test_round_trip_keeps_world_geometry(scene_file):
    scene = load(scene_file)
    again = compile(dumps(scene))
    for a, b in zip(scene.primitives, again.primitives):
        assert a.kind == b.kind
        assert np.allclose(a.matrix, b.matrix)
    assert np.allclose(again.primitives[3].semi_axes, scene.primitives[3].semi_axes)

def test_save_writes_file(scene_file, tmp_path):
    scene = load(scene_file)
    out = tmp_path / "out.scene"
    save(scene, out)
    assert load(out) == scene

# --- Watching ---

def test_handler_reloads_on_modification(scene_file):
    on_change = MagicMock()
    handler = SceneFileHandler(scene_file, on_change)
    event = MagicMock(is_directory=False, src_path=str(scene_file))
    handler.on_modified(event)
    on_change.assert_called_once()
    assert len(on_change.call_args[0][0].primitives) == 6

def test_handler_ignores_other_files(scene_file, tmp_path):
    on_change = MagicMock()
    handler = SceneFileHandler(scene_file, on_change)
    handler.on_modified(MagicMock(is_directory=False, src_path=str(tmp_path / "other.scene")))
    on_change.assert_not_called()

def test_handler_reports_errors_to_callback(scene_file):
    scene_file.write_text("sphere { centre: {0,0,0}, radius: 1 }", encoding='utf-8')
    on_change, on_error = MagicMock(), MagicMock()
    SceneFileHandler(scene_file, on_change, on_error).reload()
    on_change.assert_not_called()
    assert isinstance(on_error.call_args[0][0], SceneInvariantViolation)

def test_handler_prints_errors_without_callback(scene_file, capsys):
    scene_file.write_text("sphere {", encoding='utf-8')
    SceneFileHandler(scene_file, MagicMock()).reload()
    assert "ERROR: Failed to compile 'demo.scene'" in capsys.readouterr().err

def test_handler_reports_undecodable_file(scene_file):
    scene_file.write_bytes(b"camera { location: {0, 0, -1} } \xff\xfe")
    on_change, on_error = MagicMock(), MagicMock()
    SceneFileHandler(scene_file, on_change, on_error).reload()
    on_change.assert_not_called()
    assert isinstance(on_error.call_args[0][0], UnicodeDecodeError)

@patch('sceneforge.api.io.Observer')
def test_watch_starts_observer(mock_observer, scene_file):
    observer = watch(scene_file, MagicMock())
    assert observer is mock_observer.return_value
    observer.schedule.assert_called_once()
    handler, directory = observer.schedule.call_args[0]
    assert isinstance(handler, SceneFileHandler)
    assert directory == str(scene_file.resolve().parent)
    observer.start.assert_called_once()
