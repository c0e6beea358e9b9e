"""Moving average overlays: SMA, EMA, WMA and VWMA."""

from domain.enums import IndicatorCategory, SeriesType
from domain.indicators.base import (
    ColorParameter,
    IndicatorDefinition,
    IndicatorModule,
    LineOutput,
    NumericParameter,
    OHLCVPoint,
    OutputSeries,
    SelectOption,
    SelectParameter,
    SeriesPoint,
)
from domain.indicators.utils import ema, int_param, sma, source_price, str_param, to_points, wma
from domain.models import IndicatorConfig

GROUP = "Moving Averages"

SOURCE_PARAMETER = SelectParameter(
    key="source",
    label="Source",
    default="close",
    options=(
        SelectOption("close", "Close"),
        SelectOption("open", "Open"),
        SelectOption("high", "High"),
        SelectOption("low", "Low"),
        SelectOption("hl2", "HL/2"),
        SelectOption("hlc3", "HLC/3"),
        SelectOption("ohlc4", "OHLC/4"),
    ),
)

LINE_WIDTH_PARAMETER = NumericParameter(
    key="lineWidth", label="Line Width", default=2, min=1, max=5, step=1,
)


def _period_parameter(description: str) -> NumericParameter:
    return NumericParameter(
        key="period",
        label="Period",
        default=20,
        min=2,
        max=500,
        step=1,
        description=description,
    )


def _average_definition(
    indicator_id: str,
    name: str,
    description: str,
    color: str,
    output_key: str,
    with_source: bool = True,
) -> IndicatorDefinition:
    parameters = [_period_parameter("Number of periods for the moving average calculation")]
    if with_source:
        parameters.append(SOURCE_PARAMETER)
    parameters += [ColorParameter(key="color", label="Color", default=color), LINE_WIDTH_PARAMETER]

    return IndicatorDefinition(
        id=indicator_id,
        name=name,
        short_name=indicator_id,
        description=description,
        category=IndicatorCategory.OVERLAY,
        group=GROUP,
        icon="TrendingUp",
        parameters=tuple(parameters),
        outputs=(
            OutputSeries(
                key=output_key,
                label=indicator_id,
                type=SeriesType.LINE,
                default_color=color,
                line_width=2,
            ),
        ),
        min_data_points=2,
    )


SMA_DEFINITION = _average_definition(
    "SMA",
    "Simple Moving Average",
    "The arithmetic mean of prices over a specified period.",
    "#3B82F6",
    "sma",
)

EMA_DEFINITION = _average_definition(
    "EMA",
    "Exponential Moving Average",
    "A moving average that places greater weight on the most recent prices.",
    "#FBBF24",
    "ema",
)

WMA_DEFINITION = _average_definition(
    "WMA",
    "Weighted Moving Average",
    "A moving average with linearly increasing weights towards recent prices.",
    "#A855F7",
    "wma",
)

VWMA_DEFINITION = _average_definition(
    "VWMA",
    "Volume Weighted Moving Average",
    "A moving average that incorporates volume, giving more weight to high-volume periods.",
    "#06B6D4",
    "vwma",
    with_source=False,
)


def _source_prices(data: list[OHLCVPoint], config: IndicatorConfig) -> list[float]:
    source = str_param(config, "source", "close")
    return [source_price(point, source) for point in data]


def calculate_sma(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    """SMA of the configured source price.

    Example:
        >>> calculate_sma(data, {"period": 3, "source": "close"})  # doctest: +SKIP
        LineOutput(data=[SeriesPoint(time=..., value=11.0), ...])
    """
    period = int_param(config, "period", 20)
    return LineOutput(data=to_points(data, sma(_source_prices(data, config), period)))


def calculate_ema(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    period = int_param(config, "period", 20)
    return LineOutput(data=to_points(data, ema(_source_prices(data, config), period)))


def calculate_wma(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    period = int_param(config, "period", 20)
    return LineOutput(data=to_points(data, wma(_source_prices(data, config), period)))


def calculate_vwma(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    """Volume weighted moving average of closes.

    Notes:
        - Windows with zero total volume produce no point
    """
    period = int_param(config, "period", 20)
    points = []

    for i in range(period - 1, len(data)):
        window = data[i - period + 1:i + 1]
        volume_sum = sum(p.volume for p in window)
        if volume_sum > 0:
            price_volume = sum(p.close * p.volume for p in window)
            points.append(SeriesPoint(time=data[i].time, value=price_volume / volume_sum))

    return LineOutput(data=points)


MODULES = (
    IndicatorModule(SMA_DEFINITION, calculate_sma),
    IndicatorModule(EMA_DEFINITION, calculate_ema),
    IndicatorModule(WMA_DEFINITION, calculate_wma),
    IndicatorModule(VWMA_DEFINITION, calculate_vwma),
)
