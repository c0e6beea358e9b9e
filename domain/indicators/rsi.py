"""Relative Strength Index (RSI) and Stochastic RSI indicators."""

from typing import Optional

from domain.enums import IndicatorCategory, SeriesType
from domain.indicators.base import (
    BooleanParameter,
    ColorParameter,
    IndicatorDefinition,
    IndicatorModule,
    LineOutput,
    MultiLineOutput,
    NumericParameter,
    OHLCVPoint,
    OutputSeries,
    ReferenceLine,
    ValueRange,
)
from domain.indicators.utils import compact, highest, int_param, lowest, sma, to_points
from domain.models import IndicatorConfig


def rsi(closes: list[float], period: int = 14) -> list[Optional[float]]:
    """Calculate RSI using Wilder's smoothing method.

    Matches PineScript ta.rsi behavior. Returns values on 0-100 scale.

    Args:
        closes: List of closing prices
        period: RSI period (default: 14)

    Returns:
        List of RSI values (0-100), with None for insufficient data points

    Example:
        >>> prices = [44, 44.34, 44.09, 43.61, 44.33, 44.83, 45.10, 45.42,
        ...           45.84, 46.08, 45.89, 46.03, 45.61, 46.28, 46.28, 46.00]
        >>> result = rsi(prices, 14)
        >>> result[-1]  # Most recent RSI
        70.46...

    Notes:
        - Wilder's smoothing: New avg = (prev_avg * (period-1) + current) / period
        - First RSI value appears at index (period), not (period-1)
    """
    if not closes or period <= 0 or len(closes) <= period:
        return [None] * len(closes) if closes else []

    result: list[Optional[float]] = [None] * period

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        delta = closes[i] - closes[i - 1]
        gains += max(delta, 0)
        losses += max(-delta, 0)

    # First average is a simple average
    avg_gain = gains / period
    avg_loss = losses / period
    result.append(_rsi_value(avg_gain, avg_loss))

    for i in range(period + 1, len(closes)):
        delta = closes[i] - closes[i - 1]
        avg_gain = (avg_gain * (period - 1) + max(delta, 0)) / period
        avg_loss = (avg_loss * (period - 1) + max(-delta, 0)) / period
        result.append(_rsi_value(avg_gain, avg_loss))

    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


RSI_DEFINITION = IndicatorDefinition(
    id="RSI",
    name="Relative Strength Index",
    short_name="RSI",
    description=(
        "Momentum oscillator that measures the speed and magnitude of price movements. "
        "Values above 70 indicate overbought, below 30 indicate oversold."
    ),
    category=IndicatorCategory.PANEL,
    group="Momentum",
    icon="ChartPie",
    parameters=(
        NumericParameter("period", "Period", default=14, min=2, max=100,
                         description="Number of periods for RSI calculation"),
        NumericParameter("overbought", "Overbought Level", default=70, min=50, max=95),
        NumericParameter("oversold", "Oversold Level", default=30, min=5, max=50),
        ColorParameter("color", "Line Color", default="#F59E0B"),
        BooleanParameter("showZones", "Show Overbought/Oversold Zones", default=True),
    ),
    outputs=(OutputSeries("rsi", "RSI", SeriesType.LINE, "#F59E0B", line_width=2),),
    min_data_points=14,
    value_range=ValueRange(min=0, max=100),
    reference_lines=(
        ReferenceLine(70, "Overbought", "#EF4444", "dashed"),
        ReferenceLine(50, "Middle", "#6B7280", "dotted"),
        ReferenceLine(30, "Oversold", "#10B981", "dashed"),
    ),
)


def calculate_rsi(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    period = int_param(config, "period", 14)
    closes = [p.close for p in data]
    return LineOutput(data=to_points(data, rsi(closes, period)))


STOCHASTIC_RSI_DEFINITION = IndicatorDefinition(
    id="StochasticRSI",
    name="Stochastic RSI",
    short_name="StochRSI",
    description="Applies the Stochastic formula to RSI values for increased sensitivity.",
    category=IndicatorCategory.PANEL,
    group="Momentum",
    icon="ChartPie",
    parameters=(
        NumericParameter("rsiPeriod", "RSI Period", default=14, min=5, max=50),
        NumericParameter("stochPeriod", "Stoch Period", default=14, min=5, max=50),
        NumericParameter("kPeriod", "%K Smooth", default=3, min=1, max=10),
        NumericParameter("dPeriod", "%D Smooth", default=3, min=1, max=10),
        ColorParameter("kColor", "%K Color", default="#3B82F6"),
        ColorParameter("dColor", "%D Color", default="#EF4444"),
    ),
    outputs=(
        OutputSeries("k", "%K", SeriesType.LINE, "#3B82F6", line_width=2),
        OutputSeries("d", "%D", SeriesType.LINE, "#EF4444", line_width=1, line_style=2),
    ),
    min_data_points=28,
    value_range=ValueRange(min=0, max=100),
    reference_lines=(
        ReferenceLine(80, "Overbought", "#EF4444", "dashed"),
        ReferenceLine(20, "Oversold", "#10B981", "dashed"),
    ),
)


def calculate_stochastic_rsi(data: list[OHLCVPoint], config: IndicatorConfig) -> MultiLineOutput:
    """Stochastic oscillator applied to the RSI series, smoothed into %K and %D."""
    rsi_period = int_param(config, "rsiPeriod", 14)
    stoch_period = int_param(config, "stochPeriod", 14)
    k_period = int_param(config, "kPeriod", 3)
    d_period = int_param(config, "dPeriod", 3)

    rsi_values = rsi([p.close for p in data], rsi_period)
    highs = highest(rsi_values, stoch_period)
    lows = lowest(rsi_values, stoch_period)

    raw: list[Optional[float]] = []
    for value, high, low in zip(rsi_values, highs, lows):
        # Windows reaching into the RSI warm-up are not yet valid
        if value is None or high is None or low is None:
            raw.append(None)
        elif high == low:
            raw.append(50.0)
        else:
            raw.append(100.0 * (value - low) / (high - low))

    # Re-align: the stochastic window needs a full stoch_period of RSI values
    first_full = rsi_period + stoch_period - 1
    raw = [None if i < first_full else v for i, v in enumerate(raw)]

    k_values = _smooth(raw, k_period)
    d_values = _smooth(k_values, d_period)

    return MultiLineOutput(series={
        "k": to_points(data, k_values),
        "d": to_points(data, d_values),
    })


def _smooth(values: list[Optional[float]], period: int) -> list[Optional[float]]:
    """SMA over the valid tail of a series, mapped back to original indices."""
    valid = compact(values)
    smoothed = sma(valid, period)
    offset = len(values) - len(valid)
    return [None] * offset + smoothed


MODULES = (
    IndicatorModule(RSI_DEFINITION, calculate_rsi),
    IndicatorModule(STOCHASTIC_RSI_DEFINITION, calculate_stochastic_rsi),
)
