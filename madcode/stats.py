"""Running estimate of an integral from a stream of samples."""

from __future__ import annotations

import math


def _divide(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


class RunningIntegral:
    """Mean and variance accumulated with Welford's algorithm."""

    def __init__(self) -> None:
        self._mean = 0.0
        self._var_sum = 0.0
        self._count = 0

    def push(self, value: float) -> None:
        self._count += 1
        if self._count == 1:
            self._mean = value
            self._var_sum = 0.0
        else:
            mean_diff = value - self._mean
            self._mean += mean_diff / self._count
            self._var_sum += mean_diff * (value - self._mean)

    def reset(self) -> None:
        self._mean = 0.0
        self._var_sum = 0.0
        self._count = 0

    def mean(self) -> float:
        return self._mean

    def variance(self) -> float:
        return self._var_sum / (self._count - 1) if self._count > 1 else 0.0

    def error(self) -> float:
        return math.sqrt(_divide(self.variance(), self._count))

    def rel_error(self) -> float:
        return _divide(self.error(), self.mean())

    def rel_std_dev(self) -> float:
        return _divide(math.sqrt(self.variance()), self._mean)

    def count(self) -> int:
        return self._count