"""
Adaptive thresholds for multi-label tag scores.

MCut places the cutoff in the middle of the largest gap between consecutive
sorted scores, see
https://search.r-project.org/CRAN/refmans/utiml/html/mcut_threshold.html
"""

from typing import Optional, Sequence
import numpy as np

# MCut-derived character thresholds never go below this
CHARACTER_MCUT_FLOOR = 0.15


def mcut_threshold(probs: Sequence[float]) -> float:
    """Return the midpoint of the largest gap between sorted scores."""
    scores = np.asarray(probs, dtype=np.float64).ravel()

    if scores.size == 0:
        return 0.0
    if scores.size == 1:
        return float(scores[0])

    sorted_scores = np.sort(scores)[::-1]
    gaps = sorted_scores[:-1] - sorted_scores[1:]
    # argmax keeps the first of equal gaps
    i = int(np.argmax(gaps))
    return float((sorted_scores[i] + sorted_scores[i + 1]) / 2)


def resolve_threshold(
    scores: np.ndarray,
    threshold: float,
    mcut_enabled: bool,
    floor: Optional[float] = None,
) -> float:
    """
    Pick the effective threshold for one category of one image.

    With MCut disabled the caller's threshold is used unmodified; otherwise the
    MCut threshold over scores, clamped to floor when one is given.
    """
    if not mcut_enabled:
        return threshold
    computed = mcut_threshold(scores)
    if floor is not None and computed < floor:
        return floor
    return computed
