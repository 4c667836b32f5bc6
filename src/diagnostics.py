"""Diagnostics — structured logging, faulthandler, consent-gated Sentry.

Layers:
1. JSON lines with effect context, rotated by size and pruned by age
2. faulthandler: C-level crash tracebacks (numpy/OpenCV/SciPy segfaults)
3. Sentry error reporting, only when the user opted in

Engine modules attach effect context to their records through ``extra``::

    logger.warning("slow", extra={"effect_id": "vortex", "intensity": 0.7})

and the formatter lifts those keys into the JSON entry.
"""

import datetime
import faulthandler
import json
import logging
import logging.handlers
import numbers
import os
import time
from importlib import metadata
from pathlib import Path

import sentry_sdk

logger = logging.getLogger(__name__)

APP_DIR = "~/.landscape"

LOG_NAME = "landscape.log"
FAULT_LOG_NAME = "landscape_fault.log"
LOG_MAX_BYTES = 10_000_000
LOG_BACKUPS = 7
MAX_LOG_AGE_DAYS = 7

# Record attributes copied into the JSON entry when present
CONTEXT_FIELDS = ("effect_id", "intensity", "duration_ms", "preview_state")

_fault_file = None


def resolve_log_dir(requested: str | None = None) -> Path:
    """Return ``requested`` when it lies inside ``~/.landscape``, else ``~/.landscape/logs``."""
    app_dir = Path(APP_DIR).expanduser()
    default = app_dir / "logs"
    if not requested:
        return default
    candidate = Path(requested).expanduser().resolve()
    if not candidate.is_relative_to(app_dir.resolve()):
        logger.warning("Log directory %s is outside %s, using %s", candidate, app_dir, default)
        return default
    return candidate


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with effect context when the call supplied it."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is None:
                continue
            if isinstance(value, numbers.Real) and not isinstance(value, bool):
                # numpy scalars are not JSON serializable
                value = round(float(value), 3)
            entry[name] = value
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry, default=str)


def prune_logs(log_dir: Path, max_age_days: float = MAX_LOG_AGE_DAYS) -> int:
    """Delete rotated log files older than ``max_age_days``. Returns how many went."""
    cutoff = time.time() - max_age_days * 86400
    removed = 0
    for path in Path(log_dir).glob(f"{LOG_NAME}*"):
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink(missing_ok=True)
                removed += 1
        except OSError as e:
            logger.warning("Could not prune %s: %s", path.name, type(e).__name__)
    return removed


def setup_structured_logging(log_dir: str | None = None) -> Path:
    """Attach a rotating JSON handler to the root logger.

    The directory comes from ``log_dir`` or ``LANDSCAPE_LOG_DIR`` and must
    sit inside ``~/.landscape``; the level from ``LANDSCAPE_LOG_LEVEL``.
    """
    resolved_dir = resolve_log_dir(log_dir or os.environ.get("LANDSCAPE_LOG_DIR"))
    resolved_dir.mkdir(mode=0o700, parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        resolved_dir / LOG_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUPS,
    )
    handler.setFormatter(JSONFormatter())

    level_name = os.environ.get("LANDSCAPE_LOG_LEVEL", "INFO").upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    root.addHandler(handler)

    prune_logs(resolved_dir)
    return resolved_dir


def setup_faulthandler(log_dir: Path) -> bool:
    """Send C-level crash tracebacks to their own file under ``log_dir``.

    The fault file is never rotated: faulthandler holds its descriptor.
    """
    global _fault_file
    fault_path = Path(log_dir) / FAULT_LOG_NAME
    try:
        _fault_file = open(fault_path, "a", buffering=1)  # noqa: SIM115
        fault_path.chmod(0o600)
    except OSError as e:
        logger.warning("faulthandler disabled: %s", e)
        return False
    faulthandler.enable(file=_fault_file, all_threads=True)
    return True


def strip_home_paths(event: dict, hint: dict) -> dict:
    """Sentry before_send hook. Replaces the home directory and user name."""
    home = os.path.expanduser("~")
    username = os.path.basename(home)
    event_str = json.dumps(event).replace(home, "<HOME>")
    if username:
        event_str = event_str.replace(username, "<USER>")
    return json.loads(event_str)


def _telemetry_consented() -> bool:
    consent_path = Path(os.path.expanduser(f"{APP_DIR}/telemetry_consent"))
    try:
        return consent_path.read_text().strip() == "yes"
    except OSError:
        return False


def _version() -> str:
    try:
        return metadata.version("landscape-fx")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def setup_sentry() -> bool:
    """Consent-gated Sentry init. Returns True when events will be sent."""
    dsn = os.environ.get("SENTRY_DSN", "") if _telemetry_consented() else ""
    sentry_sdk.init(
        dsn=dsn,
        release=f"landscape-fx@{_version()}",
        environment=os.environ.get("SENTRY_ENV", "development"),
        traces_sample_rate=0.1,
        before_send=strip_home_paths,
        max_breadcrumbs=50,
    )
    return bool(dsn)


def init_diagnostics(log_dir: str | None = None) -> Path:
    """Initialize all diagnostic layers. Call once at application start."""
    resolved_dir = setup_structured_logging(log_dir)
    faults = setup_faulthandler(resolved_dir)
    reporting = setup_sentry()
    logger.info(
        "Diagnostics initialized: logging=%s, faulthandler=%s, sentry=%s",
        resolved_dir,
        "enabled" if faults else "disabled",
        "enabled" if reporting else "disabled",
    )
    return resolved_dir
