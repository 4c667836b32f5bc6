"""Effect pipeline — persistent effect application and random selection.

Includes auto-disable for effects that fail consecutively and rolling
per-effect timing stats with a slow-effect warning.
"""

import logging
import math
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass

import numpy as np
import sentry_sdk

from effects import registry
from engine.container import EffectContainer
from engine.determinism import ensure_rng
from engine.errors import InputError, PartialFailure, ResourceUnavailable

logger = logging.getLogger(__name__)

# Per-effect timing threshold (milliseconds)
EFFECT_WARN_MS = 250

# Random-catalog intensity draw
INTENSITY_RANGE = (0.3, 1.0)

# Auto-disable threshold: consecutive failures before disabling
DISABLE_THRESHOLD = 3

# Thread-safe failure tracking (persistent calls and preview renders share it)
_health_lock = threading.Lock()
_failure_counts: dict[str, int] = defaultdict(int)
_disabled_effects: set[str] = set()

# Rolling timing stats per effect
_effect_timing: dict[str, deque] = defaultdict(lambda: deque(maxlen=100))


@dataclass(frozen=True)
class EffectRequest:
    type: str
    intensity: float


@dataclass(frozen=True)
class EffectResult:
    """Descriptive metadata about an applied effect (not the pixels)."""

    type: str
    name: str
    description: str
    intensity: float

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "intensity": self.intensity,
        }


def _record_failure(effect_id: str) -> bool:
    """Record a failure. Returns True if effect was just disabled."""
    with _health_lock:
        _failure_counts[effect_id] += 1
        if _failure_counts[effect_id] == DISABLE_THRESHOLD:
            _disabled_effects.add(effect_id)
            return True
    return False


def _record_success(effect_id: str):
    """Reset consecutive failure counter on success."""
    with _health_lock:
        _failure_counts[effect_id] = 0


def get_effect_health() -> dict:
    """Side-channel: returns current health state."""
    with _health_lock:
        return {
            "failure_counts": dict(_failure_counts),
            "disabled_effects": sorted(_disabled_effects),
        }


def reset_effect_health(effect_id: str | None = None):
    """Reset health tracking. If effect_id given, reset just that effect."""
    with _health_lock:
        if effect_id:
            _failure_counts.pop(effect_id, None)
            _disabled_effects.discard(effect_id)
        else:
            _failure_counts.clear()
            _disabled_effects.clear()


def record_timing(effect_id: str, elapsed_ms: float):
    """Record a timing sample for an effect."""
    _effect_timing[effect_id].append(elapsed_ms)


def get_effect_stats() -> dict[str, dict]:
    """Return p50/p95/max per effect."""
    result = {}
    for eid, samples in _effect_timing.items():
        s = sorted(samples)
        result[eid] = {
            "p50": s[len(s) // 2] if s else 0,
            "p95": s[int(len(s) * 0.95)] if len(s) >= 20 else None,
            "max": max(s) if s else 0,
            "samples": len(s),
        }
    return result


def flush_timing():
    """Clear all timing stats."""
    _effect_timing.clear()


def validate_frame(frame) -> np.ndarray:
    """Check that ``frame`` is a non-empty (H, W, 4) uint8 RGBA array."""
    if not isinstance(frame, np.ndarray):
        raise InputError(f"frame must be a numpy array, got {type(frame).__name__}")
    if frame.ndim != 3 or frame.shape[2] != 4:
        raise InputError(f"frame must have shape (H, W, 4), got {frame.shape}")
    if frame.shape[0] <= 0 or frame.shape[1] <= 0:
        raise InputError(f"frame dimensions must be > 0, got {frame.shape[:2]}")
    if frame.dtype != np.uint8:
        raise InputError(f"frame must be uint8, got {frame.dtype}")
    return frame


def validate_intensity(intensity) -> float:
    if isinstance(intensity, bool) or not isinstance(intensity, (int, float, np.floating)):
        raise InputError(f"intensity must be a number, got {intensity!r}")
    value = float(intensity)
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise InputError(f"intensity must be in [0, 1], got {intensity!r}")
    return value


def describe(effect_type: str, intensity: float) -> EffectResult:
    effect_id = registry.resolve_id(effect_type)
    if effect_id is None:
        raise InputError(f"unknown effect: {effect_type!r}")
    info = registry.get(effect_id)
    return EffectResult(effect_id, info["name"], info["description"], intensity)


def run_effect(
    frame: np.ndarray,
    effect_id: str,
    intensity: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Run one registered effect inside a container with health and timing.

    Raises:
        PartialFailure: If the effect raised or returned an invalid frame.
            The caller's frame is untouched.
    """
    effect_info = registry.get(effect_id)

    # Conditional breadcrumbs: only for effects with prior failures
    with _health_lock:
        prior_failures = _failure_counts.get(effect_id, 0)
    if prior_failures > 0:
        sentry_sdk.add_breadcrumb(
            category="effect",
            message=f"Processing {effect_id} (prior failures: {prior_failures})",
            data={"intensity": intensity},
            level="warning",
        )

    container = EffectContainer(effect_info["fn"], effect_id)

    t0 = time.monotonic()
    output = container.process(frame, intensity, rng)
    elapsed_ms = (time.monotonic() - t0) * 1000

    record_timing(effect_id, elapsed_ms)

    if container.last_error is not None:
        just_disabled = _record_failure(effect_id)
        if just_disabled:
            logger.warning(
                "Effect %s auto-disabled after %d consecutive failures",
                effect_id,
                DISABLE_THRESHOLD,
                extra={"effect_id": effect_id, "intensity": intensity},
            )
        raise PartialFailure(effect_id, container.last_error) from container.last_error

    _record_success(effect_id)

    if elapsed_ms > EFFECT_WARN_MS:
        logger.warning(
            "Effect %s took %.0fms (>%dms warn threshold) on %dx%d frame",
            effect_id,
            elapsed_ms,
            EFFECT_WARN_MS,
            frame.shape[1],
            frame.shape[0],
            extra={"effect_id": effect_id, "intensity": intensity, "duration_ms": elapsed_ms},
        )

    return output


def apply_effect(
    frame: np.ndarray,
    effect_type: str,
    intensity: float,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Persistent mode: return a new frame with ``effect_type`` applied.

    The input is never modified. Accepts snake_case, camelCase and legacy
    ids (``galaxySwirl``, ``crystalize``).

    Raises:
        InputError: Invalid frame, intensity outside [0, 1] or unknown effect.
        PartialFailure: The effect failed; nothing was produced.
    """
    validate_frame(frame)
    intensity = validate_intensity(intensity)
    effect_id = registry.resolve_id(effect_type)
    if effect_id is None:
        raise InputError(f"unknown effect: {effect_type!r}")

    return run_effect(frame, effect_id, intensity, ensure_rng(rng))


def select_effect(rng: np.random.Generator | None = None) -> EffectRequest:
    """Pick a catalog effect uniformly, skipping auto-disabled ones.

    Raises:
        ResourceUnavailable: Every catalog effect is auto-disabled.
    """
    rng = ensure_rng(rng)
    with _health_lock:
        disabled = set(_disabled_effects)
    candidates = [eid for eid in registry.catalog_ids() if eid not in disabled]
    if not candidates:
        raise ResourceUnavailable("every catalog effect is auto-disabled")

    effect_id = candidates[int(rng.integers(len(candidates)))]
    low, high = INTENSITY_RANGE
    intensity = float(low + rng.random() * (high - low))
    return EffectRequest(effect_id, intensity)


def apply_random_effect(
    frame: np.ndarray,
    rng: np.random.Generator | None = None,
) -> tuple[np.ndarray, EffectResult]:
    """Persistent mode with a random catalog effect and intensity."""
    rng = ensure_rng(rng)
    request = select_effect(rng)
    output = apply_effect(frame, request.type, request.intensity, rng)
    return output, describe(request.type, request.intensity)
