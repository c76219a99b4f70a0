"""Linear trend estimation for monthly income/expense forecasting"""

from typing import Sequence
from insights_gateway.domain.models import TrendModel


def calculate_linear_trend(values: Sequence[float]) -> TrendModel:
    """
    Ordinary least-squares fit of `values` against their indices 0..n-1.

    Degenerate inputs never produce NaN:
    - n <= 1 (zero variance in x): slope 0, intercept = mean
    - constant series (zero variance in y): R² reported as 0.0

    Example:
        [1000, 1100, 1200] -> slope 100, intercept 1000, R² 1.0, predict(3) == 1300
    """
    n = len(values)
    if n == 0:
        return TrendModel(slope=0.0, intercept=0.0, r2=0.0)

    xs = range(n)
    sum_x = sum(xs)
    sum_y = sum(values)
    sum_xy = sum(x * y for x, y in zip(xs, values))
    sum_x2 = sum(x * x for x in xs)

    denominator = n * sum_x2 - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator != 0 else 0.0
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_total = sum((y - y_mean) ** 2 for y in values)
    ss_residual = sum((y - (slope * x + intercept)) ** 2 for x, y in zip(xs, values))
    r2 = 1 - ss_residual / ss_total if ss_total > 0 else 0.0

    return TrendModel(slope=slope, intercept=intercept, r2=r2)
