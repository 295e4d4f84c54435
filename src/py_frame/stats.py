"""
Numeric reductions used by numeric columns and table statistics.

Every function takes a plain Python sequence of numbers and returns a
Python number. Empty input raises EmptyInputError; functions that need an
ordering raise PyFrameValueError when NaN is present.
"""

from __future__ import annotations
import math
from typing import Sequence

from .errors import EmptyInputError
from .errors import PyFrameLengthError
from .errors import PyFrameValueError


INTERPOLATIONS = ("nearest", "lower", "higher", "midpoint", "linear")


def _require(values: Sequence, what: str, minimum: int = 1) -> None:
    if len(values) < minimum:
        if minimum == 1:
            raise EmptyInputError(f"{what} of an empty array")
        raise EmptyInputError(f"{what} requires at least {minimum} values, got {len(values)}")


def _is_nan(x) -> bool:
    return isinstance(x, float) and math.isnan(x)


def _check_order(values: Sequence, what: str) -> None:
    if any(_is_nan(x) for x in values):
        raise PyFrameValueError(f"{what}: undefined order, array contains NaN")


def drop_nan(values: Sequence) -> list:
    return [x for x in values if not _is_nan(x)]


def mean(values: Sequence) -> float:
    _require(values, "mean")
    return math.fsum(values) / len(values)


def sum_of_squares(values: Sequence) -> float:
    """Sum of squared deviations from the mean."""
    mu = mean(values)
    return math.fsum((x - mu) ** 2 for x in values)


def variance(values: Sequence, ddof: int = 1) -> float:
    _require(values, "variance", minimum=ddof + 1)
    return sum_of_squares(values) / (len(values) - ddof)


def pvariance(values: Sequence) -> float:
    return variance(values, ddof=0)


def stdev(values: Sequence, ddof: int = 1) -> float:
    return math.sqrt(variance(values, ddof))


def pstdev(values: Sequence) -> float:
    return math.sqrt(pvariance(values))


def central_moment(values: Sequence, order: int) -> float:
    """The ``order``-th central moment, (1/n) * sum((x - mean) ** order)."""
    _require(values, "central moment")
    if order < 0:
        raise PyFrameValueError(f"Moment order must be non-negative, got {order}")
    if order == 0:
        return 1.0
    if order == 1:
        return 0.0
    mu = mean(values)
    return math.fsum((x - mu) ** order for x in values) / len(values)


def central_moments(values: Sequence, order: int) -> list[float]:
    """Central moments 0 through ``order`` inclusive."""
    _require(values, "central moments")
    return [central_moment(values, k) for k in range(order + 1)]


def skewness(values: Sequence) -> float:
    """Pearson's moment coefficient of skewness, m3 / m2 ** 1.5."""
    _require(values, "skewness")
    m2 = central_moment(values, 2)
    m3 = central_moment(values, 3)
    if m2 == 0:
        return math.nan
    return m3 / m2 ** 1.5


def kurtosis(values: Sequence) -> float:
    """Pearson's kurtosis, m4 / m2 ** 2. Subtract 3 for Fisher's (excess) kurtosis."""
    _require(values, "kurtosis")
    m2 = central_moment(values, 2)
    m4 = central_moment(values, 4)
    if m2 == 0:
        return math.nan
    return m4 / m2 ** 2


def geometric_mean(values: Sequence) -> float:
    _require(values, "geometric mean")
    if any(x < 0 for x in values):
        raise PyFrameValueError("geometric mean is undefined for negative values")
    if any(x == 0 for x in values):
        return 0.0
    return math.exp(math.fsum(math.log(x) for x in values) / len(values))


def harmonic_mean(values: Sequence) -> float:
    _require(values, "harmonic mean")
    if any(x <= 0 for x in values):
        raise PyFrameValueError("harmonic mean requires strictly positive values")
    return len(values) / math.fsum(1 / x for x in values)


def minimum(values: Sequence):
    _require(values, "min")
    _check_order(values, "min")
    return min(values)


def maximum(values: Sequence):
    _require(values, "max")
    _check_order(values, "max")
    return max(values)


def argmin(values: Sequence) -> int:
    _require(values, "argmin")
    _check_order(values, "argmin")
    return min(range(len(values)), key=values.__getitem__)


def argmax(values: Sequence) -> int:
    _require(values, "argmax")
    _check_order(values, "argmax")
    return max(range(len(values)), key=values.__getitem__)


def min_skipnan(values: Sequence):
    clean = drop_nan(values)
    if not clean:
        _require(values, "min")
        return math.nan
    return min(clean)


def max_skipnan(values: Sequence):
    clean = drop_nan(values)
    if not clean:
        _require(values, "max")
        return math.nan
    return max(clean)


def argmin_skipnan(values: Sequence) -> int:
    _require(values, "argmin")
    positions = [i for i, x in enumerate(values) if not _is_nan(x)]
    if not positions:
        raise PyFrameValueError("argmin: all values are NaN")
    return min(positions, key=values.__getitem__)


def argmax_skipnan(values: Sequence) -> int:
    _require(values, "argmax")
    positions = [i for i, x in enumerate(values) if not _is_nan(x)]
    if not positions:
        raise PyFrameValueError("argmax: all values are NaN")
    return max(positions, key=values.__getitem__)


def quantile(values: Sequence, q: float, interpolation: str = "nearest") -> float:
    """
    The ``q``-th quantile of ``values``, 0 <= q <= 1.

    NaN entries are removed from the ranking input (the caller's data is
    untouched). ``nearest`` rounds half up to the higher rank.
    """
    if not 0 <= q <= 1:
        raise PyFrameValueError(f"Quantile must be between 0 and 1, got {q}")
    if interpolation not in INTERPOLATIONS:
        raise PyFrameValueError(
            f"Unknown interpolation '{interpolation}', expected one of {', '.join(INTERPOLATIONS)}"
        )
    ranked = sorted(drop_nan(values))
    _require(ranked, "quantile")

    pos = q * (len(ranked) - 1)
    lo = math.floor(pos)
    hi = math.ceil(pos)
    frac = pos - lo

    if interpolation == "lower":
        return ranked[lo]
    if interpolation == "higher":
        return ranked[hi]
    if interpolation == "nearest":
        return ranked[hi] if frac >= 0.5 else ranked[lo]
    if interpolation == "midpoint":
        return (ranked[lo] + ranked[hi]) / 2
    return ranked[lo] + (ranked[hi] - ranked[lo]) * frac


def median(values: Sequence) -> float:
    return quantile(values, 0.5, interpolation="midpoint")


def _check_same_length(a: Sequence, b: Sequence) -> None:
    if len(a) != len(b):
        raise PyFrameLengthError(len(a), len(b))


def weighted_sum(values: Sequence, weights: Sequence) -> float:
    _check_same_length(values, weights)
    _require(values, "weighted sum")
    return math.fsum(x * w for x, w in zip(values, weights))


def weighted_mean(values: Sequence, weights: Sequence) -> float:
    total = weighted_sum(values, weights)
    wsum = math.fsum(weights)
    if wsum == 0:
        raise PyFrameValueError("weighted mean: weights sum to zero")
    return total / wsum


def cov(a: Sequence, b: Sequence, ddof: int = 1) -> float:
    _check_same_length(a, b)
    _require(a, "covariance", minimum=ddof + 1)
    mu_a = mean(a)
    mu_b = mean(b)
    return math.fsum((x - mu_a) * (y - mu_b) for x, y in zip(a, b)) / (len(a) - ddof)


def corr(a: Sequence, b: Sequence) -> float:
    """Pearson correlation coefficient."""
    c = cov(a, b)
    denom = stdev(a) * stdev(b)
    if denom == 0:
        return math.nan
    return c / denom
