"""Effect intensity calibration — verifies every effect produces visible change.

Run:  python -m effects._calibration   (from src/)
"""

import sys

import numpy as np

from effects.registry import get, list_all

LEVELS = (0.0, 0.25, 0.5, 0.75, 1.0)


def _test_frame(w: int = 96, h: int = 72) -> np.ndarray:
    """Create a deterministic test frame (RGBA uint8, opaque)."""
    rng = np.random.default_rng(42)
    frame = rng.integers(0, 256, (h, w, 4), dtype=np.uint8)
    frame[:, :, 3] = 255
    return frame


def _mean_diff(a: np.ndarray, b: np.ndarray) -> float:
    """Mean absolute pixel difference across RGB channels."""
    return float(
        np.mean(np.abs(a[:, :, :3].astype(np.float32) - b[:, :, :3].astype(np.float32)))
    )


def calibrate_all(frame: np.ndarray | None = None, seed: int = 12345) -> list[dict]:
    """Render every registered effect at each intensity in LEVELS.

    Returns a list of result dicts:
      {effect_id, category, intensity, mean_pixel_diff}
    """
    if frame is None:
        frame = _test_frame()
    results: list[dict] = []

    for effect_info in list_all():
        eid = effect_info["id"]
        fn = get(eid)["fn"]
        for level in LEVELS:
            out = fn(frame, level, np.random.default_rng(seed))
            results.append(
                {
                    "effect_id": eid,
                    "category": effect_info["category"],
                    "intensity": level,
                    "mean_pixel_diff": round(_mean_diff(frame, out), 2),
                }
            )

    return results


def flat_effects(results: list[dict], threshold: float = 0.5) -> list[str]:
    """Effects whose strongest level changes less than ``threshold`` on average."""
    peak: dict[str, float] = {}
    for r in results:
        peak[r["effect_id"]] = max(peak.get(r["effect_id"], 0.0), r["mean_pixel_diff"])
    return [eid for eid, diff in peak.items() if diff < threshold]


def print_report(results: list[dict]) -> None:
    """Pretty-print calibration results."""
    print(f"{'Effect':<20} {'Intensity':>9} {'PixDiff':>8}")
    print("-" * 40)

    current_effect = ""
    for r in results:
        eid = r["effect_id"] if r["effect_id"] != current_effect else ""
        current_effect = r["effect_id"]
        print(f"{eid:<20} {r['intensity']:>9.2f} {r['mean_pixel_diff']:>8.2f}")

    flat = flat_effects(results)
    print("\n--- Potential calibration issues ---")
    for eid in flat:
        print(f"  WARNING: {eid} barely changes the frame at any intensity")
    if not flat:
        print("  All effects produce visible change.")


if __name__ == "__main__":
    results = calibrate_all()
    print_report(results)
    sys.exit(1 if flat_effects(results) else 0)
