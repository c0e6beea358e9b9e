"""Average True Range (ATR) indicator."""

from typing import Optional

from domain.enums import IndicatorCategory, SeriesType
from domain.indicators.base import (
    BooleanParameter,
    ColorParameter,
    IndicatorDefinition,
    IndicatorModule,
    LineOutput,
    NumericParameter,
    OHLCVPoint,
    OutputSeries,
)
from domain.indicators.utils import bool_param, int_param, to_points, true_range
from domain.models import IndicatorConfig


def atr(data: list[OHLCVPoint], period: int = 14) -> list[Optional[float]]:
    """Calculate Average True Range using Wilder's smoothing.

    True Range = max(high - low, abs(high - prev_close), abs(low - prev_close))
    ATR = Wilder's smoothed average of True Range

    Matches PineScript ta.atr behavior.

    Args:
        data: Ascending OHLCV bars
        period: ATR period (default: 14)

    Returns:
        List of ATR values, with None for insufficient data points

    Notes:
        - First ATR value is simple average of first 'period' true ranges
          that have a previous close (bars 1..period)
        - Returns None for first 'period' values
    """
    if not data:
        return []

    if period <= 0 or len(data) <= period:
        return [None] * len(data)

    true_ranges = true_range(data)
    result: list[Optional[float]] = [None] * period

    atr_value = sum(true_ranges[1:period + 1]) / period
    result.append(atr_value)

    for i in range(period + 1, len(data)):
        # Wilder's smoothing formula
        atr_value = (atr_value * (period - 1) + true_ranges[i]) / period
        result.append(atr_value)

    return result


ATR_DEFINITION = IndicatorDefinition(
    id="ATR",
    name="Average True Range",
    short_name="ATR",
    description="Measures market volatility as the smoothed average of true ranges.",
    category=IndicatorCategory.PANEL,
    group="Volatility",
    icon="ChartLine",
    parameters=(
        NumericParameter("period", "Period", default=14, min=2, max=100),
        ColorParameter("color", "Line Color", default="#3B82F6"),
        BooleanParameter("showPercentage", "Show as % of Price", default=False),
    ),
    outputs=(OutputSeries("atr", "ATR", SeriesType.LINE, "#3B82F6", line_width=2),),
    min_data_points=14,
)


def calculate_atr(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    values = atr(data, int_param(config, "period", 14))

    if bool_param(config, "showPercentage", False):
        values = [
            None if value is None or point.close == 0 else value / point.close * 100
            for point, value in zip(data, values)
        ]

    return LineOutput(data=to_points(data, values))


MODULES = (IndicatorModule(ATR_DEFINITION, calculate_atr),)
