"""Volatility bands: Bollinger Bands and Keltner Channel."""

from typing import Optional

from domain.enums import IndicatorCategory, SeriesType
from domain.indicators.base import (
    BandOutput,
    ColorParameter,
    IndicatorDefinition,
    IndicatorModule,
    NumericParameter,
    OHLCVPoint,
    OutputSeries,
)
from domain.indicators.utils import ema, float_param, int_param, sma, std_dev, to_points, true_range
from domain.models import IndicatorConfig

GROUP = "Volatility Bands"

Bands = tuple[list[Optional[float]], list[Optional[float]], list[Optional[float]]]


def bollinger_bands(
    closes: list[float],
    period: int = 20,
    multiplier: float = 2.0
) -> Bands:
    """Calculate Bollinger Bands.

    Upper Band = SMA + (multiplier * standard_deviation)
    Middle Band = SMA
    Lower Band = SMA - (multiplier * standard_deviation)

    Args:
        closes: List of closing prices
        period: Period for SMA and standard deviation (default: 20)
        multiplier: Number of standard deviations for bands (default: 2.0)

    Returns:
        Tuple of (upper_band, middle_band, lower_band)
        Each is a list with None for insufficient data points

    Example:
        >>> prices = [20, 21, 22, 23, 24, 25, 24, 23, 22, 21,
        ...           20, 21, 22, 23, 24, 25, 26, 27, 28, 29,
        ...           30, 29, 28, 27, 26]
        >>> upper, middle, lower = bollinger_bands(prices, period=20)
        >>> middle[-1]  # Most recent SMA
        24.95
    """
    if not closes or period <= 0 or len(closes) < period:
        n = len(closes) if closes else 0
        return ([None] * n, [None] * n, [None] * n)

    middle_band = sma(closes, period)
    deviations = std_dev(closes, period)

    upper_band: list[Optional[float]] = []
    lower_band: list[Optional[float]] = []

    for mean, std in zip(middle_band, deviations):
        if mean is None or std is None:
            upper_band.append(None)
            lower_band.append(None)
        else:
            upper_band.append(mean + multiplier * std)
            lower_band.append(mean - multiplier * std)

    return (upper_band, middle_band, lower_band)


def keltner_channel(
    data: list[OHLCVPoint],
    ema_period: int = 20,
    atr_period: int = 10,
    multiplier: float = 2.0,
) -> Bands:
    """Calculate Keltner Channel.

    Middle = EMA(close, ema_period)
    Upper/Lower = Middle +/- multiplier * EMA(true range, atr_period)
    """
    middle = ema([p.close for p in data], ema_period)
    ranges = ema(true_range(data), atr_period)

    upper: list[Optional[float]] = []
    lower: list[Optional[float]] = []

    for mid, rng in zip(middle, ranges):
        # A point is only valid once both averages are warmed up
        if mid is None or rng is None:
            upper.append(None)
            lower.append(None)
        else:
            upper.append(mid + rng * multiplier)
            lower.append(mid - rng * multiplier)

    middle = [mid if up is not None else None for mid, up in zip(middle, upper)]
    return (upper, middle, lower)


def _band_outputs(upper_color: str, middle_color: str, lower_color: str, names: tuple[str, str, str]):
    return (
        OutputSeries("upper", names[0], SeriesType.LINE, upper_color, line_width=1, line_style=2),
        OutputSeries("middle", names[1], SeriesType.LINE, middle_color, line_width=1, line_style=1),
        OutputSeries("lower", names[2], SeriesType.LINE, lower_color, line_width=1, line_style=2),
    )


BOLLINGER_DEFINITION = IndicatorDefinition(
    id="BollingerBands",
    name="Bollinger Bands",
    short_name="BB",
    description="Volatility bands placed above and below a moving average, based on standard deviation.",
    category=IndicatorCategory.OVERLAY,
    group=GROUP,
    icon="ViewGrid",
    parameters=(
        NumericParameter("period", "Period", default=20, min=5, max=100,
                         description="Number of periods for the middle band (SMA)"),
        NumericParameter("stdDev", "Standard Deviation", default=2, min=0.5, max=5, step=0.1,
                         description="Number of standard deviations for the bands"),
        ColorParameter("upperColor", "Upper Band Color", default="#F59E0B"),
        ColorParameter("middleColor", "Middle Band Color", default="#3B82F6"),
        ColorParameter("lowerColor", "Lower Band Color", default="#EF4444"),
        NumericParameter("fillOpacity", "Fill Opacity", default=0.1, min=0, max=0.5, step=0.05),
    ),
    outputs=_band_outputs("#F59E0B", "#3B82F6", "#EF4444", ("Upper Band", "Middle Band", "Lower Band")),
    min_data_points=20,
)

KELTNER_DEFINITION = IndicatorDefinition(
    id="KeltnerChannel",
    name="Keltner Channel",
    short_name="KC",
    description="Volatility-based envelope using EMA and ATR, useful for identifying trends and breakouts.",
    category=IndicatorCategory.OVERLAY,
    group=GROUP,
    icon="ViewGrid",
    parameters=(
        NumericParameter("emaPeriod", "EMA Period", default=20, min=5, max=100),
        NumericParameter("atrPeriod", "ATR Period", default=10, min=5, max=50),
        NumericParameter("multiplier", "ATR Multiplier", default=2, min=0.5, max=5, step=0.1),
        ColorParameter("upperColor", "Upper Band Color", default="#10B981"),
        ColorParameter("middleColor", "Middle Band Color", default="#6366F1"),
        ColorParameter("lowerColor", "Lower Band Color", default="#EF4444"),
    ),
    outputs=_band_outputs("#10B981", "#6366F1", "#EF4444", ("Upper Channel", "Middle Line", "Lower Channel")),
    min_data_points=20,
)


def _to_band_output(data: list[OHLCVPoint], bands: Bands) -> BandOutput:
    upper, middle, lower = bands
    return BandOutput(
        upper=to_points(data, upper),
        middle=to_points(data, middle),
        lower=to_points(data, lower),
    )


def calculate_bollinger(data: list[OHLCVPoint], config: IndicatorConfig) -> BandOutput:
    closes = [p.close for p in data]
    bands = bollinger_bands(
        closes,
        period=int_param(config, "period", 20),
        multiplier=float_param(config, "stdDev", 2.0),
    )
    return _to_band_output(data, bands)


def calculate_keltner(data: list[OHLCVPoint], config: IndicatorConfig) -> BandOutput:
    bands = keltner_channel(
        data,
        ema_period=int_param(config, "emaPeriod", 20),
        atr_period=int_param(config, "atrPeriod", 10),
        multiplier=float_param(config, "multiplier", 2.0),
    )
    return _to_band_output(data, bands)


MODULES = (
    IndicatorModule(BOLLINGER_DEFINITION, calculate_bollinger),
    IndicatorModule(KELTNER_DEFINITION, calculate_keltner),
)
