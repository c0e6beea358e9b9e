"""Base types for technical indicators.

An indicator is a pair of a static IndicatorDefinition (metadata, parameter
schema, output schema) and a pure calculate function with the signature
``calculate(data: list[OHLCVPoint], config: dict) -> IndicatorOutput``.
"""

from dataclasses import dataclass, field
from typing import Callable, Union

from domain.enums import IndicatorCategory, OutputType, ParameterType, SeriesType
from domain.models import IndicatorConfig, IndicatorInstance


@dataclass(frozen=True)
class OHLCVPoint:
    """Standard ascending-time OHLCV bar.

    Attributes:
        time: UTC epoch seconds
        open: Opening price
        high: High price
        low: Low price
        close: Closing price
        volume: Traded volume (0 when the feed has none)

    Example:
        >>> OHLCVPoint(time=1704067200, open=100.0, high=102.0,
        ...            low=99.0, close=101.0, volume=1_000_000)
    """
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True)
class SeriesPoint:
    """One value of an indicator series. Histogram points may carry a color."""
    time: int
    value: float
    color: str | None = None


# ============================================================================
# Parameter schema
# ============================================================================

@dataclass(frozen=True)
class NumericParameter:
    key: str
    label: str
    default: float
    min: float
    max: float
    step: float = 1
    description: str | None = None
    type: ParameterType = field(default=ParameterType.NUMBER, init=False)


@dataclass(frozen=True)
class ColorParameter:
    key: str
    label: str
    default: str
    description: str | None = None
    type: ParameterType = field(default=ParameterType.COLOR, init=False)


@dataclass(frozen=True)
class SelectOption:
    value: str
    label: str


@dataclass(frozen=True)
class SelectParameter:
    key: str
    label: str
    default: str
    options: tuple[SelectOption, ...]
    description: str | None = None
    type: ParameterType = field(default=ParameterType.SELECT, init=False)


@dataclass(frozen=True)
class BooleanParameter:
    key: str
    label: str
    default: bool
    description: str | None = None
    type: ParameterType = field(default=ParameterType.BOOLEAN, init=False)


IndicatorParameter = Union[NumericParameter, ColorParameter, SelectParameter, BooleanParameter]


# ============================================================================
# Output schema
# ============================================================================

@dataclass(frozen=True)
class OutputSeries:
    """Describes one named output series of an indicator.

    line_style follows the chart library convention:
    0=solid, 1=dotted, 2=dashed, 3=large-dashed, 4=sparse-dotted.
    """
    key: str
    label: str
    type: SeriesType
    default_color: str
    line_width: int | None = None
    line_style: int | None = None


@dataclass(frozen=True)
class ReferenceLine:
    """Horizontal level drawn in an indicator panel (e.g. RSI 70/30)."""
    value: float
    label: str
    color: str | None = None
    style: str = "solid"


@dataclass(frozen=True)
class ValueRange:
    """Fixed scale hints for panel indicators."""
    min: float | None = None
    max: float | None = None
    symmetric: bool = False


@dataclass(frozen=True)
class IndicatorDefinition:
    """Static description of an indicator. Never mutated at runtime."""
    id: str
    name: str
    short_name: str
    description: str
    category: IndicatorCategory
    group: str
    parameters: tuple[IndicatorParameter, ...]
    outputs: tuple[OutputSeries, ...]
    min_data_points: int
    reference_lines: tuple[ReferenceLine, ...] = ()
    value_range: ValueRange | None = None
    icon: str | None = None

    def parameter(self, key: str) -> IndicatorParameter | None:
        for param in self.parameters:
            if param.key == key:
                return param
        return None


# ============================================================================
# Calculation outputs (closed tagged union)
# ============================================================================

@dataclass(frozen=True)
class LineOutput:
    data: list[SeriesPoint]
    type: OutputType = field(default=OutputType.LINE, init=False)


@dataclass(frozen=True)
class HistogramOutput:
    data: list[SeriesPoint]
    type: OutputType = field(default=OutputType.HISTOGRAM, init=False)


@dataclass(frozen=True)
class BandOutput:
    upper: list[SeriesPoint]
    middle: list[SeriesPoint]
    lower: list[SeriesPoint]
    type: OutputType = field(default=OutputType.BAND, init=False)


@dataclass(frozen=True)
class MultiLineOutput:
    series: dict[str, list[SeriesPoint]]
    type: OutputType = field(default=OutputType.MULTI_LINE, init=False)


IndicatorOutput = Union[LineOutput, HistogramOutput, BandOutput, MultiLineOutput]

IndicatorCalculator = Callable[[list[OHLCVPoint], IndicatorConfig], IndicatorOutput]


@dataclass(frozen=True)
class IndicatorModule:
    """Definition plus calculator, the unit held by the registry."""
    definition: IndicatorDefinition
    calculate: IndicatorCalculator


@dataclass(frozen=True)
class CalculatedIndicator:
    """Indicator result handed to the renderer.

    output is None and error is set when data was insufficient or the
    calculation failed.
    """
    instance: IndicatorInstance
    definition: IndicatorDefinition
    output: IndicatorOutput | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.output is not None
