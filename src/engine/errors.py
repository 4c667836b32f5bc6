"""Error taxonomy shared by terrain synthesis, effects and the preview stage."""


class LandscapeError(Exception):
    """Base class for all library errors."""


class InputError(LandscapeError, ValueError):
    """Invalid dimensions, non-finite options or out-of-range arguments."""


class ResourceUnavailable(LandscapeError, RuntimeError):
    """No drawing surface or display container to run a preview against."""


class PartialFailure(LandscapeError, RuntimeError):
    """An effect failed mid-way; the caller's buffer was left untouched."""

    def __init__(self, effect_id: str, cause: BaseException | None = None):
        self.effect_id = effect_id
        self.cause = cause
        detail = type(cause).__name__ if cause is not None else "unknown error"
        super().__init__(f"effect {effect_id} failed: {detail}")
