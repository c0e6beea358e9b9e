from .cache import CalculationCache, evaluate_instance, hash_all_configs, hash_config
from .engine import EngineResult, EngineState, IndicatorEngine, recompute
from .instances import InstanceStore
from .normalizer import (
    CandleNormalizer,
    DerivedSeries,
    candles_to_ohlcv,
    derive_series,
    has_valid_volume,
    parse_candles,
)
from .replay import ReplayController, ReplayView, animate_candle
from .replay_buffer import ReplayBuffer, ReplayBufferEntry
from .scheduler import AsyncioScheduler
from .time_filter import filter_calculated, filter_output_by_time

__all__ = [
    "IndicatorEngine",
    "EngineState",
    "EngineResult",
    "recompute",
    "CandleNormalizer",
    "DerivedSeries",
    "candles_to_ohlcv",
    "derive_series",
    "has_valid_volume",
    "parse_candles",
    "InstanceStore",
    "CalculationCache",
    "evaluate_instance",
    "hash_config",
    "hash_all_configs",
    "ReplayBuffer",
    "ReplayBufferEntry",
    "filter_output_by_time",
    "filter_calculated",
    "ReplayController",
    "ReplayView",
    "animate_candle",
    "AsyncioScheduler",
]
