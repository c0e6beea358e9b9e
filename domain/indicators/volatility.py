"""Volatility panels: Standard Deviation and Historical Volatility."""

import math
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
from domain.indicators.utils import bool_param, int_param, std_dev, to_points
from domain.models import IndicatorConfig

TRADING_DAYS = 252


def historical_volatility(
    closes: list[float],
    period: int = 21,
    annualize: bool = True,
) -> list[Optional[float]]:
    """Rolling sample standard deviation of log returns.

    Annualized values are expressed in percent (x sqrt(252) x 100).

    Notes:
        - First value appears at index `period`
        - Non-positive closes break the log return and yield None
    """
    if period <= 1 or len(closes) <= period:
        return [None] * len(closes)

    log_returns: list[Optional[float]] = [None]
    for prev, curr in zip(closes, closes[1:]):
        log_returns.append(math.log(curr / prev) if prev > 0 and curr > 0 else None)

    result: list[Optional[float]] = [None] * period

    for i in range(period, len(closes)):
        window = log_returns[i - period + 1:i + 1]
        if any(r is None for r in window):
            result.append(None)
            continue

        mean = sum(window) / period
        variance = sum((r - mean) ** 2 for r in window) / (period - 1)
        hv = math.sqrt(variance)
        if annualize:
            hv = hv * math.sqrt(TRADING_DAYS) * 100
        result.append(hv)

    return result


STANDARD_DEVIATION_DEFINITION = IndicatorDefinition(
    id="StandardDeviation",
    name="Standard Deviation",
    short_name="StdDev",
    description="Rolling standard deviation of closing prices.",
    category=IndicatorCategory.PANEL,
    group="Volatility",
    icon="ChartLine",
    parameters=(
        NumericParameter("period", "Period", default=20, min=2, max=100),
        ColorParameter("color", "Line Color", default="#A855F7"),
    ),
    outputs=(OutputSeries("stdDev", "StdDev", SeriesType.LINE, "#A855F7", line_width=2),),
    min_data_points=20,
)

HISTORICAL_VOLATILITY_DEFINITION = IndicatorDefinition(
    id="HistoricalVolatility",
    name="Historical Volatility",
    short_name="HV",
    description="Standard deviation of logarithmic returns, optionally annualized.",
    category=IndicatorCategory.PANEL,
    group="Volatility",
    icon="ChartLine",
    parameters=(
        NumericParameter("period", "Period", default=21, min=5, max=100),
        BooleanParameter("annualize", "Annualize", default=True),
        ColorParameter("color", "Line Color", default="#F97316"),
    ),
    outputs=(OutputSeries("hv", "HV", SeriesType.LINE, "#F97316", line_width=2),),
    min_data_points=21,
)


def calculate_standard_deviation(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    closes = [p.close for p in data]
    return LineOutput(data=to_points(data, std_dev(closes, int_param(config, "period", 20))))


def calculate_historical_volatility(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    values = historical_volatility(
        [p.close for p in data],
        period=int_param(config, "period", 21),
        annualize=bool_param(config, "annualize", True),
    )
    return LineOutput(data=to_points(data, values))


MODULES = (
    IndicatorModule(STANDARD_DEVIATION_DEFINITION, calculate_standard_deviation),
    IndicatorModule(HISTORICAL_VOLATILITY_DEFINITION, calculate_historical_volatility),
)
