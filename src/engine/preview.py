"""Preview mode — transient, clock-driven effect animations on a live surface.

A preview renders the effect once, fades it in and back out over
``PREVIEW_DURATION_MS`` and then restores the surface to its exact
pre-effect pixels. The fade is an explicit state machine:

    IDLE -> RUNNING -> COMPLETED
         |          -> CANCELLED
         -> CANCELLED

Both terminal states write the snapshot back once anything was rendered. At most one preview runs per
surface; starting another cancels (and restores) the previous one first.
"""

import asyncio
import enum
import logging
import math
import time

import numpy as np

from engine.determinism import ensure_rng
from engine.errors import InputError, PartialFailure, ResourceUnavailable
from engine.pipeline import EffectResult, describe, run_effect, select_effect, validate_frame

logger = logging.getLogger(__name__)

PREVIEW_DURATION_MS = 2000.0
PREVIEW_FPS = 60


class Surface:
    """The caller's live raster. Writes land in the wrapped array in place."""

    def __init__(self, frame: np.ndarray):
        self._frame = validate_frame(frame)

    @property
    def shape(self) -> tuple[int, ...]:
        return self._frame.shape

    def read(self) -> np.ndarray:
        return self._frame.copy()

    def write(self, frame: np.ndarray):
        if frame.shape != self._frame.shape:
            raise InputError(f"cannot write shape {frame.shape} to surface {self._frame.shape}")
        self._frame[...] = frame


class PreviewState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PreviewAnimation:
    """One fade-in/fade-out of a rendered effect against a snapshot."""

    def __init__(
        self,
        surface: Surface,
        effect_id: str,
        intensity: float,
        rng: np.random.Generator,
        duration_ms: float = PREVIEW_DURATION_MS,
    ):
        if not math.isfinite(duration_ms) or duration_ms <= 0:
            raise InputError(f"duration_ms must be > 0, got {duration_ms!r}")
        self.surface = surface
        self.effect_id = effect_id
        self.intensity = intensity
        self.duration_ms = duration_ms
        self.state = PreviewState.IDLE
        self.progress = 0.0
        self._rng = rng
        self._start_ms: float | None = None
        self._snapshot: np.ndarray | None = None
        self._rendered: np.ndarray | None = None

    @property
    def result(self) -> EffectResult:
        return describe(self.effect_id, self.intensity)

    def start(self, now_ms: float):
        """Snapshot the surface and render the effect into a working copy.

        Raises:
            PartialFailure: The render failed; the surface is restored and
                the animation is CANCELLED.
        """
        if self.state is PreviewState.CANCELLED:
            return
        if self.state is not PreviewState.IDLE:
            raise RuntimeError(f"cannot start a preview in state {self.state.value}")

        self._snapshot = self.surface.read()
        try:
            self._rendered = run_effect(self._snapshot, self.effect_id, self.intensity, self._rng)
        except PartialFailure:
            self._restore(PreviewState.CANCELLED)
            raise

        self._start_ms = now_ms
        self.state = PreviewState.RUNNING
        logger.debug(
            "Preview %s started (intensity %.2f)",
            self.effect_id,
            self.intensity,
            extra=self._log_fields(),
        )

    def tick(self, now_ms: float) -> bool:
        """Advance to ``now_ms``. Returns True while the animation is running."""
        if self.state is not PreviewState.RUNNING:
            return False

        elapsed = now_ms - self._start_ms
        self.progress = min(1.0, max(0.0, elapsed / self.duration_ms))
        if self.progress >= 1.0:
            self._restore(PreviewState.COMPLETED)
            return False

        weight = math.sin(math.pi * self.progress)
        base = self._snapshot.astype(np.float32)
        frame = base + (self._rendered.astype(np.float32) - base) * weight
        self.surface.write(np.clip(np.rint(frame), 0, 255).astype(np.uint8))
        return True

    def cancel(self) -> bool:
        """Stop immediately and restore the snapshot.

        An animation that has not started goes straight to CANCELLED and a
        later ``start`` does nothing. Returns True if the state changed.
        """
        if self.state is PreviewState.IDLE:
            self.state = PreviewState.CANCELLED
            logger.debug(
                "Preview %s cancelled before its first frame",
                self.effect_id,
                extra=self._log_fields(),
            )
            return True
        if self.state is not PreviewState.RUNNING:
            return False
        self._restore(PreviewState.CANCELLED)
        logger.debug(
            "Preview %s cancelled at %.0f%%",
            self.effect_id,
            self.progress * 100,
            extra=self._log_fields(),
        )
        return True

    def _log_fields(self) -> dict:
        return {
            "effect_id": self.effect_id,
            "intensity": self.intensity,
            "preview_state": self.state.value,
        }

    def _restore(self, state: PreviewState):
        if self._snapshot is not None:
            self.surface.write(self._snapshot)
        self.state = state
        self._rendered = None


class RefreshClock:
    """Display refresh clock: one callback per frame at ``fps``."""

    def __init__(self, fps: int = PREVIEW_FPS):
        if fps <= 0:
            raise InputError(f"fps must be > 0, got {fps}")
        self.interval = 1.0 / fps

    async def next_frame(self) -> float:
        """Wait for the next refresh and return its timestamp in ms."""
        await asyncio.sleep(self.interval)
        return time.monotonic() * 1000.0


class Stage:
    """Display container owning the animation clock and active previews.

    ``clock`` is any object with ``async next_frame() -> float`` (ms).
    """

    def __init__(self, clock=None):
        self.clock = clock if clock is not None else RefreshClock()
        self.closed = False
        self._active: dict[Surface, PreviewAnimation] = {}

    def active(self, surface: Surface) -> PreviewAnimation | None:
        return self._active.get(surface)

    def cancel(self, surface: Surface) -> bool:
        """Cancel the preview running on ``surface``, restoring its pixels."""
        animation = self._active.pop(surface, None)
        return animation.cancel() if animation is not None else False

    def close(self):
        """Cancel every preview; the stage accepts no new ones afterwards."""
        self.closed = True
        for surface in list(self._active):
            self.cancel(surface)

    async def play(self, animation: PreviewAnimation) -> PreviewState:
        """Drive ``animation`` to a terminal state on this stage's clock."""
        if self.closed:
            raise ResourceUnavailable("stage is closed")

        surface = animation.surface
        self.cancel(surface)
        self._active[surface] = animation
        try:
            now = await self.clock.next_frame()
            # close() or a newer preview may have landed while we waited
            if self.closed or self._active.get(surface) is not animation:
                animation.cancel()
            else:
                animation.start(now)
            while animation.state is PreviewState.RUNNING:
                now = await self.clock.next_frame()
                animation.tick(now)
        except asyncio.CancelledError:
            animation.cancel()
            raise
        finally:
            if self._active.get(surface) is animation:
                del self._active[surface]
        return animation.state


async def apply_preview_effect(
    surface: Surface | None,
    stage: Stage | None,
    *,
    rng: np.random.Generator | None = None,
    duration_ms: float = PREVIEW_DURATION_MS,
) -> EffectResult:
    """Preview a random catalog effect on ``surface`` and return its metadata.

    The surface ends bit-identical to its state before the call, whether the
    preview completes, is cancelled through the stage, or the awaiting task
    is cancelled.

    Raises:
        ResourceUnavailable: ``surface`` or ``stage`` is missing or closed.
        PartialFailure: The effect failed to render; the surface is untouched.
    """
    if surface is None or stage is None:
        raise ResourceUnavailable("no drawing surface or stage for preview")

    rng = ensure_rng(rng)
    request = select_effect(rng)
    animation = PreviewAnimation(surface, request.type, request.intensity, rng, duration_ms)

    state = await stage.play(animation)
    logger.info(
        "Preview %s finished: %s (intensity %.2f)",
        request.type,
        state.value,
        request.intensity,
        extra=animation._log_fields(),
    )
    return animation.result
