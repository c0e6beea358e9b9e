"""Stochastic Oscillator indicator."""

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
    ValueRange,
)
from domain.indicators.utils import int_param, sma, to_points
from domain.models import IndicatorConfig


def stochastic(
    highs: list[float],
    lows: list[float],
    closes: list[float],
    k_period: int = 14,
    d_period: int = 3,
    smooth: int = 1,
) -> tuple[list[Optional[float]], list[Optional[float]]]:
    """Calculate Stochastic Oscillator (%K and %D).

    %K = 100 * (Close - Lowest Low) / (Highest High - Lowest Low)
    %D = SMA of %K

    Args:
        highs: List of high prices
        lows: List of low prices
        closes: List of closing prices
        k_period: Lookback period for %K (default: 14)
        d_period: SMA period for %D (default: 3)
        smooth: SMA applied to raw %K for the slow stochastic (default: 1)

    Returns:
        Tuple of (k_values, d_values)
        Each is a list with None for insufficient data points

    Example:
        >>> highs = [50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63, 64]
        >>> lows = [48, 49, 50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62]
        >>> closes = [49, 50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63]
        >>> k, d = stochastic(highs, lows, closes, 14, 3)
        >>> round(k[-1], 2)
        93.33

    Notes:
        - Returns values on 0-100 scale
        - A flat window (high == low) yields 50
    """
    if not (highs and lows and closes):
        return ([], [])

    if len(highs) != len(lows) or len(highs) != len(closes):
        raise ValueError("highs, lows, and closes must have same length")

    if len(closes) < k_period:
        n = len(closes)
        return ([None] * n, [None] * n)

    raw_k: list[Optional[float]] = [None] * (k_period - 1)

    for i in range(k_period - 1, len(closes)):
        highest_high = max(highs[i - k_period + 1:i + 1])
        lowest_low = min(lows[i - k_period + 1:i + 1])

        # Prevent division by zero in flat markets
        if highest_high == lowest_low:
            raw_k.append(50.0)
        else:
            raw_k.append(100.0 * (closes[i] - lowest_low) / (highest_high - lowest_low))

    k_values = sma(raw_k, smooth) if smooth > 1 else raw_k
    d_values = sma(k_values, d_period)

    return (k_values, d_values)


STOCHASTIC_DEFINITION = IndicatorDefinition(
    id="Stochastic",
    name="Stochastic Oscillator",
    short_name="Stoch",
    description=(
        "Momentum indicator comparing closing price to price range over a period. "
        "%K is the main line, %D is the smoothed signal."
    ),
    category=IndicatorCategory.PANEL,
    group="Momentum",
    icon="ChartPie",
    parameters=(
        NumericParameter("kPeriod", "%K Period", default=14, min=3, max=100,
                         description="Lookback period for %K calculation"),
        NumericParameter("dPeriod", "%D Period", default=3, min=1, max=20,
                         description="Smoothing period for %D (signal line)"),
        NumericParameter("smooth", "Smooth %K", default=3, min=1, max=10,
                         description="Smoothing for slow stochastic"),
        NumericParameter("overbought", "Overbought Level", default=80, min=60, max=95),
        NumericParameter("oversold", "Oversold Level", default=20, min=5, max=40),
        ColorParameter("kColor", "%K Color", default="#3B82F6"),
        ColorParameter("dColor", "%D Color", default="#EF4444"),
    ),
    outputs=(
        OutputSeries("k", "%K", SeriesType.LINE, "#3B82F6", line_width=2),
        OutputSeries("d", "%D", SeriesType.LINE, "#EF4444", line_width=1, line_style=2),
    ),
    min_data_points=14,
    value_range=ValueRange(min=0, max=100),
    reference_lines=(
        ReferenceLine(80, "Overbought", "#EF4444", "dashed"),
        ReferenceLine(50, "Middle", "#6B7280", "dotted"),
        ReferenceLine(20, "Oversold", "#10B981", "dashed"),
    ),
)


def calculate_stochastic(data: list[OHLCVPoint], config: IndicatorConfig) -> MultiLineOutput:
    k_values, d_values = stochastic(
        [p.high for p in data],
        [p.low for p in data],
        [p.close for p in data],
        k_period=int_param(config, "kPeriod", 14),
        d_period=int_param(config, "dPeriod", 3),
        smooth=int_param(config, "smooth", 3),
    )
    return MultiLineOutput(series={
        "k": to_points(data, k_values),
        "d": to_points(data, d_values),
    })


MODULES = (IndicatorModule(STOCHASTIC_DEFINITION, calculate_stochastic),)
