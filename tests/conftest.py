import numpy as np
import pytest

from engine import pipeline


@pytest.fixture(autouse=True)
def _reset_pipeline_state():
    """Health and timing are process-wide; isolate every test."""
    pipeline.reset_effect_health()
    pipeline.flush_timing()
    yield
    pipeline.reset_effect_health()
    pipeline.flush_timing()


@pytest.fixture
def opaque_frame():
    """Deterministic random opaque RGBA frame, 48x64."""
    rng = np.random.default_rng(42)
    frame = rng.integers(0, 256, (48, 64, 4), dtype=np.uint8)
    frame[:, :, 3] = 255
    return frame
