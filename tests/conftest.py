import pytest
import numpy as np
from sceneforge import compile

CAMERA = "camera { location: {0, 0, -10}, look_at: {0, 0, 0} }\n"

@pytest.fixture
def camera_text():
    """A minimal valid camera block, since every scene needs exactly one."""
    return CAMERA

@pytest.fixture
def compile_with_camera():
    """Compiles a scene body with the minimal camera prepended."""
    def _compile(body: str, **options):
        return compile(CAMERA + body, **options)
    return _compile

@pytest.fixture
def assert_vec():
    def _asserter(actual, expected, atol=1e-9):
        assert np.allclose(actual, expected, atol=atol), f"{actual} != {expected}"
    return _asserter
