"""Effect container — wraps pure effect functions with snapshot + validation."""

import logging

import numpy as np
import sentry_sdk

logger = logging.getLogger(__name__)


def _capture_with_context(e: Exception, effect_id: str, extra: dict):
    """Capture exception to Sentry with effect-level context and fingerprint dedup."""
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("effect_id", effect_id)
        scope.fingerprint = ["effect-crash", effect_id, type(e).__name__]
        scope.set_context("effect", extra)
        sentry_sdk.capture_exception(e, scope=scope)


def read_only_snapshot(frame: np.ndarray) -> np.ndarray:
    """Private copy of ``frame`` that raises on any write."""
    snapshot = frame.copy()
    snapshot.flags.writeable = False
    return snapshot


class EffectContainer:
    """Container that wraps an effect's apply() function.

    Pipeline: snapshot → process → validate
    Effect authors write only the processing stage. The effect sees a
    read-only snapshot, so a failing effect can never leave the caller's
    frame half-written. On failure the untouched frame is returned and
    ``last_error`` is set.
    """

    def __init__(self, effect_fn, effect_id: str):
        self.effect_fn = effect_fn
        self.effect_id = effect_id
        self.last_error: Exception | None = None

    def process(
        self,
        frame: np.ndarray,
        intensity: float,
        rng: np.random.Generator,
    ) -> np.ndarray:
        self.last_error = None
        snapshot = read_only_snapshot(frame)

        log_ctx = {"effect_id": self.effect_id, "intensity": intensity}
        # Context for Sentry (no pixel data)
        sentry_ctx = {
            "intensity": intensity,
            "frame_shape": list(frame.shape),
        }

        # 1. Run effect (the pure function)
        try:
            output = self.effect_fn(snapshot, intensity, rng)
        except Exception as e:
            self.last_error = e
            _capture_with_context(e, self.effect_id, sentry_ctx)
            logger.error(
                "Effect %s failed at intensity %.2f: %s",
                self.effect_id,
                intensity,
                type(e).__name__,
                extra=log_ctx,
            )
            logger.debug("Effect %s exception detail: %s", self.effect_id, e, extra=log_ctx)
            return frame.copy()

        # 2. Validate effect output
        try:
            if not isinstance(output, np.ndarray):
                raise TypeError(
                    f"Effect returned {type(output).__name__}, expected ndarray"
                )
            if output.shape != frame.shape:
                raise ValueError(
                    f"Effect returned shape {output.shape}, expected {frame.shape}"
                )
            if output.dtype != np.uint8:
                output = np.clip(output, 0, 255).astype(np.uint8)
        except (TypeError, ValueError) as e:
            self.last_error = e
            _capture_with_context(e, self.effect_id, sentry_ctx)
            logger.error(
                "Effect %s produced invalid output: %s",
                self.effect_id,
                type(e).__name__,
                extra=log_ctx,
            )
            logger.debug("Effect %s output error detail: %s", self.effect_id, e, extra=log_ctx)
            return frame.copy()

        # Never hand back the read-only snapshot itself
        if output is snapshot or not output.flags.writeable:
            output = output.copy()
        return output
