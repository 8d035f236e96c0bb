"""
In-place column scaling kernels used by Dataset.normalize / Dataset.standardize.

Both operate on rows [start, end) of a single column and leave every other
row untouched.
"""

import numba
import numpy as np
from sklearn.preprocessing import StandardScaler


@numba.njit(cache=True)
def _min_max_kernel(values, start, end):
    lo = values[start]
    hi = values[start]
    for i in range(start + 1, end):
        v = values[i]
        if v < lo:
            lo = v
        if v > hi:
            hi = v

    span = hi - lo
    if span == 0.0:
        for i in range(start, end):
            values[i] = 0.0
        return False

    if np.isfinite(span):
        for i in range(start, end):
            values[i] = (values[i] - lo) / span
    else:
        # finite bounds whose difference overflows; halving is exact
        half_lo = lo / 2.0
        half_span = hi / 2.0 - half_lo
        for i in range(start, end):
            values[i] = (values[i] / 2.0 - half_lo) / half_span
    return True


def min_max_rescale(column: np.ndarray, start: int, end: int) -> bool:
    """
    Rescale column[start:end] to [0, 1] in place.

    The minimum maps to exactly 0.0 and the maximum to exactly 1.0. A segment
    without spread is set to 0.0.

    Returns:
        False if the segment had no spread, True otherwise
    """
    if end <= start:
        return True
    return bool(_min_max_kernel(column, start, end))


def standardize(column: np.ndarray, start: int, end: int) -> bool:
    """
    Z-score column[start:end] in place using the segment's own mean and
    population standard deviation. A zero-variance segment is set to 0.0.

    Returns:
        False if the segment had zero variance, True otherwise
    """
    if end <= start:
        return True
    segment = column[start:end]
    scaler = StandardScaler()
    scaled = scaler.fit_transform(segment.reshape(-1, 1))
    if scaler.var_[0] == 0.0:
        # the fitted mean can be off by an ulp, leaving residue after centring
        segment[:] = 0.0
        return False
    segment[:] = scaled.ravel()
    return True
