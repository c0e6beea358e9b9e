"""Momentum oscillators: CCI, MFI, Momentum, ROC and Williams %R."""

from typing import Optional

from domain.enums import IndicatorCategory, SeriesType
from domain.indicators.base import (
    ColorParameter,
    IndicatorDefinition,
    IndicatorModule,
    LineOutput,
    NumericParameter,
    OHLCVPoint,
    OutputSeries,
    ReferenceLine,
    ValueRange,
)
from domain.indicators.utils import change, int_param, percent_change, to_points
from domain.models import IndicatorConfig

GROUP = "Momentum"


def roc(closes: list[float], period: int = 12) -> list[Optional[float]]:
    """Calculate Rate of Change.

    ROC = 100 * (Close - Close[period ago]) / Close[period ago]

    Example:
        >>> prices = [100, 105, 110, 115, 120, 125, 130, 135, 140, 145, 150, 155, 160]
        >>> roc(prices, 12)[-1]
        60.0

    Notes:
        - Returns None for first 'period' values
        - Values are percentages (not decimals)
    """
    return percent_change(closes, period)


def momentum(closes: list[float], period: int = 10) -> list[Optional[float]]:
    """Price difference versus `period` bars ago."""
    return change(closes, period)


def cci(
    highs: list[float],
    lows: list[float],
    closes: list[float],
    period: int = 20
) -> list[Optional[float]]:
    """Calculate Commodity Channel Index.

    CCI = (Typical Price - SMA of Typical Price) / (0.015 * Mean Deviation)
    Typical Price = (High + Low + Close) / 3

    Example:
        >>> cci([102] * 25, [98] * 25, [100] * 25, 20)[-1]
        0.0

    Notes:
        - Returns None for first (period - 1) values
        - 0.015 constant ensures ~70-80% of values fall between -100 and +100
    """
    if not (highs and lows and closes):
        return []

    if len(highs) != len(lows) or len(highs) != len(closes):
        raise ValueError("highs, lows, and closes must have same length")

    if len(closes) < period:
        return [None] * len(closes)

    typical_prices = [(h + l + c) / 3.0 for h, l, c in zip(highs, lows, closes)]
    result: list[Optional[float]] = [None] * (period - 1)

    for i in range(period - 1, len(closes)):
        tp_window = typical_prices[i - period + 1:i + 1]
        sma_tp = sum(tp_window) / period
        mean_deviation = sum(abs(tp - sma_tp) for tp in tp_window) / period

        if mean_deviation == 0:
            result.append(0.0)
        else:
            result.append((typical_prices[i] - sma_tp) / (0.015 * mean_deviation))

    return result


def williams_r(
    highs: list[float],
    lows: list[float],
    closes: list[float],
    period: int = 14
) -> list[Optional[float]]:
    """Calculate Williams %R.

    Williams %R = -100 * (Highest High - Close) / (Highest High - Lowest Low)

    Notes:
        - Values range from -100 (oversold) to 0 (overbought)
        - A flat window yields -50
    """
    if not (highs and lows and closes):
        return []

    if len(highs) != len(lows) or len(highs) != len(closes):
        raise ValueError("highs, lows, and closes must have same length")

    if len(closes) < period:
        return [None] * len(closes)

    result: list[Optional[float]] = [None] * (period - 1)

    for i in range(period - 1, len(closes)):
        highest_high = max(highs[i - period + 1:i + 1])
        lowest_low = min(lows[i - period + 1:i + 1])

        if highest_high == lowest_low:
            result.append(-50.0)
        else:
            result.append(-100.0 * (highest_high - closes[i]) / (highest_high - lowest_low))

    return result


def mfi(data: list[OHLCVPoint], period: int = 14) -> list[Optional[float]]:
    """Money Flow Index: a volume-weighted RSI of the typical price.

    Notes:
        - First value appears at index `period`
        - No negative flow in the window yields 100
    """
    if len(data) <= period or period <= 0:
        return [None] * len(data)

    typical = [(p.high + p.low + p.close) / 3 for p in data]
    money_flow = [tp * p.volume for tp, p in zip(typical, data)]
    result: list[Optional[float]] = [None] * period

    for i in range(period, len(data)):
        positive = 0.0
        negative = 0.0
        for j in range(i - period + 1, i + 1):
            if typical[j] > typical[j - 1]:
                positive += money_flow[j]
            elif typical[j] < typical[j - 1]:
                negative += money_flow[j]

        if negative == 0:
            result.append(100.0)
        else:
            result.append(100.0 - 100.0 / (1.0 + positive / negative))

    return result


def _panel_definition(
    indicator_id: str,
    name: str,
    description: str,
    parameters: tuple,
    output_key: str,
    color: str,
    min_data_points: int,
    short_name: str | None = None,
    value_range: ValueRange | None = None,
    reference_lines: tuple[ReferenceLine, ...] = (),
) -> IndicatorDefinition:
    return IndicatorDefinition(
        id=indicator_id,
        name=name,
        short_name=short_name or indicator_id,
        description=description,
        category=IndicatorCategory.PANEL,
        group=GROUP,
        icon="ChartLine",
        parameters=parameters + (ColorParameter("color", "Line Color", default=color),),
        outputs=(OutputSeries(output_key, short_name or indicator_id, SeriesType.LINE, color, line_width=2),),
        min_data_points=min_data_points,
        value_range=value_range,
        reference_lines=reference_lines,
    )


CCI_DEFINITION = _panel_definition(
    "CCI",
    "Commodity Channel Index",
    "Measures the deviation of the typical price from its average.",
    (
        NumericParameter("period", "Period", default=20, min=5, max=100),
        NumericParameter("overbought", "Overbought Level", default=100, min=50, max=200),
        NumericParameter("oversold", "Oversold Level", default=-100, min=-200, max=-50),
    ),
    "cci",
    "#06B6D4",
    min_data_points=20,
    reference_lines=(
        ReferenceLine(100, "Overbought", "#EF4444", "dashed"),
        ReferenceLine(0, "Zero", "#6B7280", "dotted"),
        ReferenceLine(-100, "Oversold", "#10B981", "dashed"),
    ),
)

MFI_DEFINITION = _panel_definition(
    "MFI",
    "Money Flow Index",
    "Volume-weighted momentum oscillator of the typical price.",
    (
        NumericParameter("period", "Period", default=14, min=5, max=100),
        NumericParameter("overbought", "Overbought Level", default=80, min=60, max=95),
        NumericParameter("oversold", "Oversold Level", default=20, min=5, max=40),
    ),
    "mfi",
    "#10B981",
    min_data_points=14,
    value_range=ValueRange(min=0, max=100),
    reference_lines=(
        ReferenceLine(80, "Overbought", "#EF4444", "dashed"),
        ReferenceLine(20, "Oversold", "#10B981", "dashed"),
    ),
)

MOMENTUM_DEFINITION = _panel_definition(
    "Momentum",
    "Momentum",
    "Difference between the current close and the close a number of periods ago.",
    (NumericParameter("period", "Period", default=10, min=1, max=100),),
    "momentum",
    "#14B8A6",
    min_data_points=10,
    short_name="MOM",
    value_range=ValueRange(symmetric=True),
    reference_lines=(ReferenceLine(0, "Zero", "#6B7280", "solid"),),
)

ROC_DEFINITION = _panel_definition(
    "ROC",
    "Rate of Change",
    "Percentage change between the current close and the close a number of periods ago.",
    (NumericParameter("period", "Period", default=12, min=1, max=100),),
    "roc",
    "#EC4899",
    min_data_points=12,
    value_range=ValueRange(symmetric=True),
    reference_lines=(ReferenceLine(0, "Zero", "#6B7280", "solid"),),
)

WILLIAMS_R_DEFINITION = _panel_definition(
    "Williams%R",
    "Williams %R",
    "Momentum oscillator showing the close relative to the high-low range.",
    (
        NumericParameter("period", "Period", default=14, min=5, max=100),
        NumericParameter("overbought", "Overbought Level", default=-20, min=-50, max=0),
        NumericParameter("oversold", "Oversold Level", default=-80, min=-100, max=-50),
    ),
    "williamsR",
    "#8B5CF6",
    min_data_points=14,
    short_name="%R",
    value_range=ValueRange(min=-100, max=0),
    reference_lines=(
        ReferenceLine(-20, "Overbought", "#EF4444", "dashed"),
        ReferenceLine(-80, "Oversold", "#10B981", "dashed"),
    ),
)


def _hlc(data: list[OHLCVPoint]) -> tuple[list[float], list[float], list[float]]:
    return [p.high for p in data], [p.low for p in data], [p.close for p in data]


def calculate_cci(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    return LineOutput(data=to_points(data, cci(*_hlc(data), int_param(config, "period", 20))))


def calculate_mfi(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    return LineOutput(data=to_points(data, mfi(data, int_param(config, "period", 14))))


def calculate_momentum(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    closes = [p.close for p in data]
    return LineOutput(data=to_points(data, momentum(closes, int_param(config, "period", 10))))


def calculate_roc(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    closes = [p.close for p in data]
    return LineOutput(data=to_points(data, roc(closes, int_param(config, "period", 12))))


def calculate_williams_r(data: list[OHLCVPoint], config: IndicatorConfig) -> LineOutput:
    return LineOutput(data=to_points(data, williams_r(*_hlc(data), int_param(config, "period", 14))))


MODULES = (
    IndicatorModule(WILLIAMS_R_DEFINITION, calculate_williams_r),
    IndicatorModule(CCI_DEFINITION, calculate_cci),
    IndicatorModule(MFI_DEFINITION, calculate_mfi),
    IndicatorModule(ROC_DEFINITION, calculate_roc),
    IndicatorModule(MOMENTUM_DEFINITION, calculate_momentum),
)
