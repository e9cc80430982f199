"""Numeric primitives over execution-time samples.

Every function accepts any numeric sequence and returns a plain ``float``;
an empty sequence yields 0.0 rather than an error.
"""

from typing import Optional, Sequence

import numpy as np


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for empty input."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    # Clamp so floating-point summation error cannot push the mean outside [min, max]
    return float(np.clip(np.mean(arr), np.min(arr), np.max(arr)))


def median(values: Sequence[float]) -> float:
    """Middle value (mean of the two middle values for even length)."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.median(arr))


def std_dev(values: Sequence[float], center: Optional[float] = None) -> float:
    """Population standard deviation (divides by N).

    Args:
        values: Sample values
        center: Precomputed mean; computed from ``values`` when omitted
    """
    arr = _as_array(values)
    if arr.size == 0 or np.all(arr == arr[0]):
        return 0.0
    if center is None:
        center = mean(arr)
    return float(np.sqrt(np.mean((arr - center) ** 2)))


def percentile(values: Sequence[float], p: float) -> float:
    """Percentile with linear interpolation at index ``(p/100) * (n-1)``.

    ``p`` of 0 and 100 return the minimum and maximum exactly.
    """
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.percentile(arr, p, method="linear"))


def coefficient_of_variation(std: float, avg: float) -> float:
    """CV in percent (``std / avg * 100``); 0.0 when the mean is zero."""
    if avg == 0:
        return 0.0
    return std / avg * 100
