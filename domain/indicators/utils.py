"""Utility functions for technical analysis.

All series helpers take values in chronological order (oldest first) and
return a list of the same length, with None where the value cannot be
computed yet (warm-up period).
"""

import math
from typing import Optional

from domain.indicators.base import OHLCVPoint, SeriesPoint
from domain.models import IndicatorConfig


def source_price(point: OHLCVPoint, source: str = "close") -> float:
    """Select the price an indicator is computed from.

    Args:
        point: OHLCV bar
        source: One of close, open, high, low, hl2, hlc3, ohlc4

    Returns:
        The selected (or derived) price. Unknown sources fall back to close.
    """
    if source == "open":
        return point.open
    if source == "high":
        return point.high
    if source == "low":
        return point.low
    if source == "hl2":
        return (point.high + point.low) / 2
    if source == "hlc3":
        return (point.high + point.low + point.close) / 3
    if source == "ohlc4":
        return (point.open + point.high + point.low + point.close) / 4
    return point.close


def int_param(config: IndicatorConfig, key: str, default: int) -> int:
    """Read an integer parameter, falling back to the default when unset."""
    value = config.get(key)
    if value is None or isinstance(value, (str, bool)):
        return default
    return int(value)


def float_param(config: IndicatorConfig, key: str, default: float) -> float:
    value = config.get(key)
    if value is None or isinstance(value, (str, bool)):
        return default
    return float(value)


def bool_param(config: IndicatorConfig, key: str, default: bool) -> bool:
    value = config.get(key)
    if value is None:
        return default
    return bool(value)


def str_param(config: IndicatorConfig, key: str, default: str) -> str:
    value = config.get(key)
    if not isinstance(value, str) or not value:
        return default
    return value


def is_missing(value: Optional[float]) -> bool:
    """True for warm-up placeholders (None) and NaN."""
    return value is None or (isinstance(value, float) and math.isnan(value))


def to_points(data: list[OHLCVPoint], values: list[Optional[float]]) -> list[SeriesPoint]:
    """Pair indicator values with candle times, dropping missing values.

    Example:
        >>> to_points(data, [None, None, 11.0])  # doctest: +SKIP
        [SeriesPoint(time=..., value=11.0)]

    Notes:
        - Charts must never draw a flat 0 where a value is not computable,
          so None and NaN are removed rather than substituted.
    """
    return [
        SeriesPoint(time=point.time, value=value)
        for point, value in zip(data, values)
        if not is_missing(value)
    ]


def sma(values: list[Optional[float]], period: int) -> list[Optional[float]]:
    """Calculate Simple Moving Average.

    Args:
        values: List of values to calculate SMA over
        period: Number of periods for the moving average

    Returns:
        List of SMA values, with None for insufficient data points

    Example:
        >>> sma([10, 11, 12, 13, 14, 15], 3)
        [None, None, 11.0, 12.0, 13.0, 14.0]
    """
    if not values or period <= 0 or len(values) < period:
        return [None] * len(values) if values else []

    result: list[Optional[float]] = [None] * (period - 1)

    for i in range(period - 1, len(values)):
        window = values[i - period + 1:i + 1]
        # A window touching the warm-up of an upstream series is itself warm-up
        valid_values = [v for v in window if not is_missing(v)]
        if len(valid_values) < period:
            result.append(None)
        else:
            result.append(sum(valid_values) / period)

    return result


def ema(values: list[Optional[float]], period: int) -> list[Optional[float]]:
    """Calculate Exponential Moving Average.

    Uses alpha = 2/(period+1), seeded with the SMA of the first `period`
    valid values. Leading None values (an upstream warm-up) are skipped.

    Example:
        >>> ema([10, 11, 12, 13, 14, 15], 3)
        [None, None, 11.0, 12.0, 13.0, 14.0]
    """
    if not values or period <= 0:
        return [None] * len(values) if values else []

    start = 0
    while start < len(values) and is_missing(values[start]):
        start += 1

    if len(values) - start < period:
        return [None] * len(values)

    alpha = 2.0 / (period + 1)
    result: list[Optional[float]] = [None] * (start + period - 1)

    # First EMA value is the SMA of the first 'period' values
    prev_ema = sum(values[start:start + period]) / period
    result.append(prev_ema)

    for i in range(start + period, len(values)):
        prev_ema = (values[i] * alpha) + (prev_ema * (1 - alpha))
        result.append(prev_ema)

    return result


def wma(values: list[Optional[float]], period: int) -> list[Optional[float]]:
    """Calculate Weighted Moving Average.

    Weights increase linearly; the most recent value has the highest weight.

    Example:
        >>> wma([10, 11, 12, 13, 14, 15], 3)
        [None, None, 11.666..., 12.666..., 13.666..., 14.666...]
    """
    if not values or period <= 0 or len(values) < period:
        return [None] * len(values) if values else []

    result: list[Optional[float]] = [None] * (period - 1)
    weights = list(range(1, period + 1))
    weight_sum = sum(weights)

    for i in range(period - 1, len(values)):
        window = values[i - period + 1:i + 1]
        weighted_sum = sum(v * w for v, w in zip(window, weights))
        result.append(weighted_sum / weight_sum)

    return result


def std_dev(values: list[float], period: int) -> list[Optional[float]]:
    """Population standard deviation over a rolling window.

    Example:
        >>> std_dev([2, 4, 4, 4, 5, 5, 7, 9], 8)[-1]
        2.0
    """
    if not values or period <= 0 or len(values) < period:
        return [None] * len(values) if values else []

    means = sma(values, period)
    result: list[Optional[float]] = [None] * (period - 1)

    for i in range(period - 1, len(values)):
        mean = means[i]
        window = values[i - period + 1:i + 1]
        variance = sum((x - mean) ** 2 for x in window) / period
        result.append(variance ** 0.5)

    return result


def true_range(data: list[OHLCVPoint]) -> list[float]:
    """True Range per bar.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close));
    the first bar has no previous close and uses high - low.
    """
    result = []
    for i, point in enumerate(data):
        if i == 0:
            result.append(point.high - point.low)
            continue
        prev_close = data[i - 1].close
        result.append(max(
            point.high - point.low,
            abs(point.high - prev_close),
            abs(point.low - prev_close),
        ))
    return result


def highest(values: list[Optional[float]], period: int) -> list[Optional[float]]:
    """Find highest value over rolling period.

    Example:
        >>> highest([10, 12, 11, 15, 14, 13], 3)
        [None, None, 12, 15, 15, 15]

    Notes:
        - Returns None for first (period - 1) values
        - Handles None values in input
    """
    if not values or period <= 0:
        return [None] * len(values) if values else []

    if len(values) < period:
        return [None] * len(values)

    result: list[Optional[float]] = [None] * (period - 1)

    for i in range(period - 1, len(values)):
        window = values[i - period + 1:i + 1]
        valid_values = [v for v in window if not is_missing(v)]

        if not valid_values:
            result.append(None)
        else:
            result.append(max(valid_values))

    return result


def lowest(values: list[Optional[float]], period: int) -> list[Optional[float]]:
    """Find lowest value over rolling period.

    Example:
        >>> lowest([10, 12, 11, 15, 14, 13], 3)
        [None, None, 10, 11, 11, 13]
    """
    if not values or period <= 0:
        return [None] * len(values) if values else []

    if len(values) < period:
        return [None] * len(values)

    result: list[Optional[float]] = [None] * (period - 1)

    for i in range(period - 1, len(values)):
        window = values[i - period + 1:i + 1]
        valid_values = [v for v in window if not is_missing(v)]

        if not valid_values:
            result.append(None)
        else:
            result.append(min(valid_values))

    return result


def change(values: list[float], period: int = 1) -> list[Optional[float]]:
    """Calculate change over specified period.

    Example:
        >>> change([10, 11, 12, 11, 10], 2)
        [None, None, 2, 0, -2]

    Notes:
        - change[i] = values[i] - values[i - period]
    """
    if not values or period <= 0:
        return [None] * len(values) if values else []

    if len(values) <= period:
        return [None] * len(values)

    result: list[Optional[float]] = [None] * period

    for i in range(period, len(values)):
        result.append(values[i] - values[i - period])

    return result


def percent_change(values: list[float], period: int = 1) -> list[Optional[float]]:
    """Calculate percentage change over specified period.

    Example:
        >>> percent_change([100, 110, 121], 1)
        [None, 10.0, 10.0]

    Notes:
        - A zero past value yields 0 rather than a division error
        - Formula: 100 * (current - past) / past
    """
    if not values or period <= 0:
        return [None] * len(values) if values else []

    if len(values) <= period:
        return [None] * len(values)

    result: list[Optional[float]] = [None] * period

    for i in range(period, len(values)):
        past = values[i - period]
        if past == 0:
            result.append(0.0)
        else:
            result.append(100.0 * (values[i] - past) / past)

    return result


def compact(values: list[Optional[float]]) -> list[float]:
    """Drop warm-up placeholders, keeping order."""
    return [v for v in values if not is_missing(v)]
