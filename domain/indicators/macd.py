"""MACD (Moving Average Convergence Divergence) indicator."""

from typing import Optional

from domain.enums import IndicatorCategory, SeriesType
from domain.indicators.base import (
    ColorParameter,
    IndicatorDefinition,
    IndicatorModule,
    MultiLineOutput,
    NumericParameter,
    OHLCVPoint,
    OutputSeries,
    ReferenceLine,
    SeriesPoint,
    ValueRange,
)
from domain.indicators.utils import ema, int_param, str_param, to_points
from domain.models import IndicatorConfig


def macd(
    closes: list[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9
) -> tuple[list[Optional[float]], list[Optional[float]], list[Optional[float]]]:
    """Calculate MACD indicator.

    MACD Line = EMA(fast) - EMA(slow)
    Signal Line = EMA(MACD Line, signal periods)
    Histogram = MACD Line - Signal Line

    Args:
        closes: List of closing prices
        fast: Fast EMA period (default: 12)
        slow: Slow EMA period (default: 26)
        signal: Signal line EMA period (default: 9)

    Returns:
        Tuple of (macd_line, signal_line, histogram)
        Each is a list with None for insufficient data points

    Notes:
        - MACD line requires 'slow' periods of data
        - Signal line requires additional 'signal' periods
    """
    if not closes or len(closes) < slow:
        n = len(closes) if closes else 0
        return ([None] * n, [None] * n, [None] * n)

    fast_ema = ema(closes, fast)
    slow_ema = ema(closes, slow)

    macd_line: list[Optional[float]] = []
    for fast_value, slow_value in zip(fast_ema, slow_ema):
        if fast_value is None or slow_value is None:
            macd_line.append(None)
        else:
            macd_line.append(fast_value - slow_value)

    # Signal is the EMA of the MACD line; ema() skips the leading warm-up
    signal_line = ema(macd_line, signal)

    histogram: list[Optional[float]] = []
    for macd_value, signal_value in zip(macd_line, signal_line):
        if macd_value is None or signal_value is None:
            histogram.append(None)
        else:
            histogram.append(macd_value - signal_value)

    return (macd_line, signal_line, histogram)


MACD_DEFINITION = IndicatorDefinition(
    id="MACD",
    name="Moving Average Convergence Divergence",
    short_name="MACD",
    description=(
        "Trend-following momentum indicator showing the relationship between two EMAs. "
        "Includes MACD line, signal line, and histogram."
    ),
    category=IndicatorCategory.PANEL,
    group="Momentum",
    icon="ChartBar",
    parameters=(
        NumericParameter("fastPeriod", "Fast Period", default=12, min=2, max=50,
                         description="Period for the fast EMA"),
        NumericParameter("slowPeriod", "Slow Period", default=26, min=5, max=100,
                         description="Period for the slow EMA"),
        NumericParameter("signalPeriod", "Signal Period", default=9, min=2, max=50,
                         description="Period for the signal line EMA"),
        ColorParameter("macdColor", "MACD Line Color", default="#3B82F6"),
        ColorParameter("signalColor", "Signal Line Color", default="#EF4444"),
        ColorParameter("histogramPositiveColor", "Histogram Positive", default="#22C55E"),
        ColorParameter("histogramNegativeColor", "Histogram Negative", default="#EF4444"),
    ),
    outputs=(
        OutputSeries("macd", "MACD", SeriesType.LINE, "#3B82F6", line_width=2),
        OutputSeries("signal", "Signal", SeriesType.LINE, "#EF4444", line_width=2),
        OutputSeries("histogram", "Histogram", SeriesType.HISTOGRAM, "#8B5CF6"),
    ),
    min_data_points=26,
    value_range=ValueRange(symmetric=True),
    reference_lines=(ReferenceLine(0, "Zero", "#6B7280", "solid"),),
)


def calculate_macd(data: list[OHLCVPoint], config: IndicatorConfig) -> MultiLineOutput:
    fast = int_param(config, "fastPeriod", 12)
    slow = int_param(config, "slowPeriod", 26)
    signal = int_param(config, "signalPeriod", 9)
    positive_color = str_param(config, "histogramPositiveColor", "#22C55E")
    negative_color = str_param(config, "histogramNegativeColor", "#EF4444")

    macd_line, signal_line, histogram = macd([p.close for p in data], fast, slow, signal)

    histogram_points = [
        SeriesPoint(
            time=point.time,
            value=value,
            color=positive_color if value >= 0 else negative_color,
        )
        for point, value in zip(data, histogram)
        if value is not None
    ]

    return MultiLineOutput(series={
        "macd": to_points(data, macd_line),
        "signal": to_points(data, signal_line),
        "histogram": histogram_points,
    })


MODULES = (IndicatorModule(MACD_DEFINITION, calculate_macd),)
