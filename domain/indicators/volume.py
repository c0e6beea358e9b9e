"""Volume-based indicators."""

from domain.enums import IndicatorCategory, SeriesType
from domain.indicators.base import (
    ColorParameter,
    IndicatorDefinition,
    IndicatorModule,
    LineOutput,
    OHLCVPoint,
    OutputSeries,
)
from domain.indicators.utils import to_points
from domain.models import IndicatorConfig


def accumulation_distribution(data: list[OHLCVPoint]) -> list[float]:
    """Calculate the Accumulation/Distribution line.

    Money Flow Multiplier = ((Close - Low) - (High - Close)) / (High - Low)
    A/D = Cumulative(Multiplier * Volume)

    Example:
        >>> bars = [OHLCVPoint(1, 10, 12, 10, 12, 100),
        ...         OHLCVPoint(2, 12, 12, 10, 10, 50)]
        >>> accumulation_distribution(bars)
        [100.0, 50.0]

    Notes:
        - Bars with high == low contribute nothing
    """
    result = []
    ad = 0.0

    for point in data:
        price_range = point.high - point.low
        if price_range != 0:
            multiplier = ((point.close - point.low) - (point.high - point.close)) / price_range
            ad += multiplier * point.volume
        result.append(ad)

    return result


ACCUMULATION_DISTRIBUTION_DEFINITION = IndicatorDefinition(
    id="AccumulationDistribution",
    name="Accumulation/Distribution",
    short_name="A/D",
    description="Volume-based indicator that measures cumulative money flow.",
    category=IndicatorCategory.PANEL,
    group="Volume",
    icon="ChartBar",
    parameters=(ColorParameter("color", "Line Color", default="#0EA5E9"),),
    outputs=(OutputSeries("ad", "A/D", SeriesType.LINE, "#0EA5E9", line_width=2),),
    min_data_points=1,
)


def calculate_accumulation_distribution(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    return LineOutput(data=to_points(data, accumulation_distribution(data)))


MODULES = (IndicatorModule(ACCUMULATION_DISTRIBUTION_DEFINITION, calculate_accumulation_distribution),)
