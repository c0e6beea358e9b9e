"""Technical indicators library for chart overlays and panels.

This package provides pure Python implementations of common technical indicators.
Each indicator is a static IndicatorDefinition plus a pure calculate function
over ascending OHLCV points; the registry maps ids to both.

Indicators:
    - Moving Averages: SMA, EMA, WMA, VWMA
    - Momentum: RSI, MACD, Stochastic, Stochastic RSI, Williams %R, CCI, MFI, ROC, Momentum
    - Volatility: Bollinger Bands, Keltner Channel, ATR, Standard Deviation, Historical Volatility
    - Volume: OBV, VWAP, Accumulation/Distribution
    - Utils: sma, ema, wma, std_dev, true_range, highest, lowest, change

Example:
    >>> from domain.indicators import calculate, get_default_config
    >>>
    >>> output = calculate("RSI", points, get_default_config("RSI"))  # doctest: +SKIP
    >>> output.data[-1].value  # doctest: +SKIP
    61.7
"""

from domain.indicators.atr import atr
from domain.indicators.base import (
    BandOutput,
    BooleanParameter,
    CalculatedIndicator,
    ColorParameter,
    HistogramOutput,
    IndicatorCalculator,
    IndicatorDefinition,
    IndicatorModule,
    IndicatorOutput,
    IndicatorParameter,
    LineOutput,
    MultiLineOutput,
    NumericParameter,
    OHLCVPoint,
    OutputSeries,
    ReferenceLine,
    SelectOption,
    SelectParameter,
    SeriesPoint,
    ValueRange,
)
from domain.indicators.bollinger import bollinger_bands, keltner_channel
from domain.indicators.macd import macd
from domain.indicators.momentum import cci, mfi, momentum, roc, williams_r
from domain.indicators.obv import obv
from domain.indicators.registry import (
    IndicatorGroup,
    IndicatorRegistry,
    calculate,
    default_registry,
    get_all_indicators,
    get_calculator,
    get_default_config,
    get_indicator,
    get_indicator_module,
    get_indicators_by_category,
    get_indicators_grouped,
    get_max_lookback,
    register,
    required_data_points,
    validate_config,
)
from domain.indicators.rsi import rsi
from domain.indicators.stochastic import stochastic
from domain.indicators.utils import change, ema, highest, lowest, percent_change, sma, std_dev, true_range, wma
from domain.indicators.volatility import historical_volatility
from domain.indicators.volume import accumulation_distribution
from domain.indicators.vwap import vwap

__all__ = [
    # Base types
    "OHLCVPoint",
    "SeriesPoint",
    "IndicatorDefinition",
    "IndicatorModule",
    "IndicatorCalculator",
    "IndicatorParameter",
    "NumericParameter",
    "ColorParameter",
    "SelectParameter",
    "SelectOption",
    "BooleanParameter",
    "OutputSeries",
    "ReferenceLine",
    "ValueRange",
    "IndicatorOutput",
    "LineOutput",
    "HistogramOutput",
    "BandOutput",
    "MultiLineOutput",
    "CalculatedIndicator",
    # Registry
    "IndicatorRegistry",
    "IndicatorGroup",
    "default_registry",
    "register",
    "get_indicator",
    "get_indicator_module",
    "get_calculator",
    "get_all_indicators",
    "get_indicators_by_category",
    "get_indicators_grouped",
    "get_default_config",
    "validate_config",
    "get_max_lookback",
    "required_data_points",
    "calculate",
    # Indicators
    "rsi",
    "macd",
    "stochastic",
    "bollinger_bands",
    "keltner_channel",
    "atr",
    "historical_volatility",
    "obv",
    "vwap",
    "accumulation_distribution",
    "roc",
    "cci",
    "mfi",
    "momentum",
    "williams_r",
    # Utilities
    "sma",
    "ema",
    "wma",
    "std_dev",
    "true_range",
    "highest",
    "lowest",
    "change",
    "percent_change",
]
