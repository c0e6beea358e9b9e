from .enums import (
    IndicatorCategory,
    OutputType,
    ParameterType,
    PriceSeriesType,
    ReplayStatus,
    SeriesType,
)
from .models import (
    BarPoint,
    Candle,
    ConfigValue,
    IndicatorConfig,
    IndicatorInstance,
    ReplayState,
    to_epoch_seconds,
)

__all__ = [
    # Enums
    "IndicatorCategory",
    "OutputType",
    "ParameterType",
    "PriceSeriesType",
    "ReplayStatus",
    "SeriesType",
    # Models
    "BarPoint",
    "Candle",
    "ConfigValue",
    "IndicatorConfig",
    "IndicatorInstance",
    "ReplayState",
    "to_epoch_seconds",
]
