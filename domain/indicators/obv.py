"""On-Balance Volume (OBV) indicator."""

from domain.enums import IndicatorCategory, SeriesType
from domain.indicators.base import (
    BooleanParameter,
    ColorParameter,
    IndicatorDefinition,
    IndicatorModule,
    MultiLineOutput,
    NumericParameter,
    OHLCVPoint,
    OutputSeries,
)
from domain.indicators.utils import bool_param, ema, int_param, to_points
from domain.models import IndicatorConfig


def obv(closes: list[float], volumes: list[float]) -> list[float]:
    """Calculate On-Balance Volume.

    OBV is a cumulative indicator that adds volume on up bars
    and subtracts volume on down bars.

    Args:
        closes: List of closing prices
        volumes: List of volume values

    Returns:
        List of OBV values

    Example:
        >>> closes = [10, 11, 10, 12, 11]
        >>> volumes = [1000, 1500, 1200, 1800, 1000]
        >>> obv(closes, volumes)
        [1000, 2500, 1300, 3100, 2100]

    Notes:
        - Seeded with the first bar's volume
        - If price unchanged, volume is not added or subtracted
    """
    if not closes or not volumes:
        return []

    if len(closes) != len(volumes):
        raise ValueError("closes and volumes must have same length")

    cumulative = volumes[0]
    result = [cumulative]

    for i in range(1, len(closes)):
        if closes[i] > closes[i - 1]:
            cumulative += volumes[i]
        elif closes[i] < closes[i - 1]:
            cumulative -= volumes[i]
        # If equal, cumulative stays the same

        result.append(cumulative)

    return result


OBV_DEFINITION = IndicatorDefinition(
    id="OBV",
    name="On-Balance Volume",
    short_name="OBV",
    description="Cumulative volume indicator that adds volume on up days and subtracts on down days.",
    category=IndicatorCategory.PANEL,
    group="Volume",
    icon="ChartBar",
    parameters=(
        ColorParameter("obvColor", "OBV Color", default="#0EA5E9"),
        BooleanParameter("showSignalLine", "Show Signal Line", default=True),
        NumericParameter("signalPeriod", "Signal Period", default=21, min=5, max=100),
        ColorParameter("signalColor", "Signal Line Color", default="#F59E0B"),
    ),
    outputs=(
        OutputSeries("obv", "OBV", SeriesType.LINE, "#0EA5E9", line_width=2),
        OutputSeries("signal", "Signal", SeriesType.LINE, "#F59E0B", line_width=1, line_style=2),
    ),
    min_data_points=2,
)


def calculate_obv(data: list[OHLCVPoint], config: IndicatorConfig) -> MultiLineOutput:
    values = obv([p.close for p in data], [p.volume for p in data])
    series = {"obv": to_points(data, values)}

    if bool_param(config, "showSignalLine", True):
        signal = ema(values, int_param(config, "signalPeriod", 21))
        series["signal"] = to_points(data, signal)

    return MultiLineOutput(series=series)


MODULES = (IndicatorModule(OBV_DEFINITION, calculate_obv),)
