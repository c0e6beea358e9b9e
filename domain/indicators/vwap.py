"""Volume Weighted Average Price (VWAP) indicator."""

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
from domain.indicators.utils import to_points
from domain.models import IndicatorConfig


def vwap(data: list[OHLCVPoint]) -> list[float]:
    """Calculate Volume Weighted Average Price.

    VWAP = Cumulative(Typical Price * Volume) / Cumulative(Volume)
    Typical Price = (High + Low + Close) / 3

    Args:
        data: Ascending OHLCV bars

    Returns:
        List of VWAP values, one per bar

    Example:
        >>> bars = [OHLCVPoint(1, 101, 102, 100, 101, 1000),
        ...         OHLCVPoint(2, 102, 103, 101, 102, 1000)]
        >>> vwap(bars)
        [101.0, 101.5]

    Notes:
        - Cumulative over the whole series (no session reset)
        - While no volume has traded the typical price is used
    """
    result = []
    cumulative_tp_volume = 0.0
    cumulative_volume = 0.0

    for point in data:
        typical_price = (point.high + point.low + point.close) / 3.0

        cumulative_tp_volume += typical_price * point.volume
        cumulative_volume += point.volume

        if cumulative_volume == 0:
            result.append(typical_price)
        else:
            result.append(cumulative_tp_volume / cumulative_volume)

    return result


VWAP_DEFINITION = IndicatorDefinition(
    id="VWAP",
    name="Volume Weighted Average Price",
    short_name="VWAP",
    description="Average price weighted by volume, commonly used as intraday benchmark.",
    category=IndicatorCategory.OVERLAY,
    group="Volume",
    icon="TrendingUp",
    parameters=(
        ColorParameter("color", "Line Color", default="#8B5CF6"),
        BooleanParameter("showBands", "Show StdDev Bands", default=False),
        NumericParameter("bandMultiplier", "Band Multiplier", default=2, min=1, max=4, step=0.5),
    ),
    outputs=(OutputSeries("vwap", "VWAP", SeriesType.LINE, "#8B5CF6", line_width=2),),
    min_data_points=1,
)


def calculate_vwap(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    return LineOutput(data=to_points(data, vwap(data)))


MODULES = (IndicatorModule(VWAP_DEFINITION, calculate_vwap),)
