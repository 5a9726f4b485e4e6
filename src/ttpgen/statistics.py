# src/ttpgen/statistics.py

import logging
from typing import Dict, Optional, Sequence, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

HISTOGRAM_BINS = 20


def _median(values: Sequence[int]) -> float:
    return float(pd.Series(values, dtype="float64").median())


def quartiles(distances: Sequence[int]) -> Tuple[float, float, float]:
    """
    (Q1, Q2, Q3) with Q1/Q3 the medians of the lower/upper halves; the middle
    value of an odd-sized sample belongs to neither half.
    """
    ordered = sorted(distances)
    n = len(ordered)
    q2 = _median(ordered)
    if n < 2:
        return q2, q2, q2
    return _median(ordered[: n // 2]), q2, _median(ordered[(n + 1) // 2:])


def describe_distances(distances: Sequence[int]) -> Dict[str, object]:
    """
    Mean, median, population variance and standard deviation, min/max and
    quartiles of a finished distance collection.
    """
    if len(distances) == 0:
        raise ValueError("Cannot describe an empty distance collection")

    s = pd.Series([int(d) for d in distances], dtype="int64")
    return {
        "count": int(s.count()),
        "mean": float(s.mean()),
        "median": float(s.median()),
        "variance": float(s.var(ddof=0)),
        "std_dev": float(s.std(ddof=0)),
        "min_max": (int(s.min()), int(s.max())),
        "quartiles": quartiles(list(s)),
    }


def histogram(distances: Sequence[int], bins: int = HISTOGRAM_BINS) -> pd.DataFrame:
    """
    Equal-width integer bins [start, end) starting at the minimum; the last bin
    also takes everything up to and including the maximum.
    """
    if len(distances) == 0:
        raise ValueError("Cannot build a histogram of an empty distance collection")

    lo, hi = min(distances), max(distances)
    step = max((hi - lo) // bins, 1)
    counts = [0] * bins
    for v in distances:
        counts[min((v - lo) // step, bins - 1)] += 1

    return pd.DataFrame({
        "start": [lo + b * step for b in range(bins)],
        "end": [lo + (b + 1) * step if b < bins - 1 else max(lo + bins * step, hi + 1)
                for b in range(bins)],
        "count": counts,
    })


def generate_statistics(distances: Sequence[int], histogram_path: Optional[str] = None) -> Dict[str, object]:
    stats = describe_distances(distances)
    for key in ("mean", "median", "variance", "std_dev", "min_max", "quartiles"):
        logger.info("%s: %s", key.replace("_", " ").title(), stats[key])

    if histogram_path:
        histogram(distances).to_csv(histogram_path, index=False)
        logger.info("Histogram saved to %s", histogram_path)
    return stats
