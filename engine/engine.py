"""
Indicator engine.

`recompute` is a pure transform over an explicit EngineState: the host
keeps the state and calls it whenever candles, instances or the replay
position change. IndicatorEngine wraps that loop for hosts that prefer an
object.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace

from config.schema import EngineConfig
from domain.enums import IndicatorCategory
from domain.indicators.base import CalculatedIndicator, OHLCVPoint
from domain.indicators.registry import IndicatorRegistry, default_registry
from domain.models import Candle, IndicatorInstance
from engine.cache import CacheEntry, compute_with_cache
from engine.normalizer import NormalizedSeries, normalize_with_cache
from engine.replay_buffer import ReplayBufferEntry, compute_with_buffer
from ports.sources import CandleSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineState:
    """Everything the engine remembers between calls."""
    series: NormalizedSeries | None = None
    cache: Mapping[str, CacheEntry] = field(default_factory=dict)
    buffer: ReplayBufferEntry | None = None
    recompute_count: int = 0

    @property
    def data(self) -> list[OHLCVPoint]:
        return self.series.points if self.series else []


@dataclass(frozen=True)
class EngineResult:
    """Calculated indicators, also split by where they are drawn."""
    calculated: list[CalculatedIndicator]
    overlays: list[CalculatedIndicator]
    panels: list[CalculatedIndicator]

    @classmethod
    def from_results(cls, results: list[CalculatedIndicator]) -> "EngineResult":
        return cls(
            calculated=results,
            overlays=[r for r in results if r.definition.category == IndicatorCategory.OVERLAY],
            panels=[r for r in results if r.definition.category == IndicatorCategory.PANEL],
        )


def recompute(
    state: EngineState,
    candles: Sequence[Candle],
    instances: Iterable[IndicatorInstance],
    replay_step: int | None = None,
    registry: IndicatorRegistry | None = None,
    config: EngineConfig | None = None,
) -> tuple[EngineState, EngineResult]:
    """
    Derive indicator results for the current inputs.

    Args:
        state: Previous engine state (EngineState() to start)
        candles: Newest-first candle feed
        instances: Indicator instances; hidden ones are skipped
        replay_step: 1-based replay position, or None outside replay
        registry: Indicator registry (default registry when omitted)
        config: Engine configuration (defaults when omitted)

    Returns:
        Tuple of (new_state, result). Unchanged inputs return cached
        result objects so identity checks can skip redraws.
    """
    config = config or EngineConfig()
    instances = list(instances)
    series = normalize_with_cache(state.series, candles)
    data = series.points

    if not any(i.visible for i in instances):
        # Nothing to show; drop caches and buffers
        return EngineState(series=series), EngineResult.from_results([])

    if replay_step is None:
        entries, results = compute_with_cache(state.cache, data, instances, registry)
        new_state = replace(state, series=series, cache=entries, buffer=None)
        return new_state, EngineResult.from_results(results)

    outcome = compute_with_buffer(
        state.buffer,
        data,
        instances,
        replay_step,
        ahead=config.replay.buffer_ahead,
        threshold=config.replay.buffer_threshold,
        registry=registry,
    )
    new_state = replace(
        state,
        series=series,
        buffer=outcome.entry,
        recompute_count=state.recompute_count + int(outcome.recomputed),
    )
    return new_state, EngineResult.from_results(outcome.results)


class IndicatorEngine:
    """
    Host-facing engine object.

    Example:
        >>> engine = IndicatorEngine()
        >>> result = engine.update(candles, store)  # doctest: +SKIP
        >>> [r.definition.id for r in result.overlays]  # doctest: +SKIP
        ['SMA']
    """

    def __init__(self, registry: IndicatorRegistry | None = None, config: EngineConfig | None = None):
        self.registry = registry or default_registry
        self.config = config or EngineConfig()
        self.state = EngineState()

    @property
    def data(self) -> list[OHLCVPoint]:
        """Ascending OHLCV series from the last update."""
        return self.state.data

    @property
    def recompute_count(self) -> int:
        """Replay buffer rebuilds so far."""
        return self.state.recompute_count

    def update(
        self,
        candles: Sequence[Candle],
        instances: Iterable[IndicatorInstance],
        replay_step: int | None = None,
    ) -> EngineResult:
        self.state, result = recompute(
            self.state,
            candles,
            instances,
            replay_step=replay_step,
            registry=self.registry,
            config=self.config,
        )
        return result

    def update_from(
        self,
        source: CandleSource,
        instances: Iterable[IndicatorInstance],
        replay_step: int | None = None,
    ) -> EngineResult:
        """Recompute against the current candles of a live source."""
        return self.update(source.candles, instances, replay_step=replay_step)

    def max_lookback(self, instances: Iterable[IndicatorInstance]) -> int:
        """History a host should load, floored at the configured default lookback."""
        return self.registry.get_max_lookback(instances, floor=self.config.indicators.default_lookback)

    def clear(self) -> None:
        """Drop cached results and buffers; keep the normalized series."""
        self.state = EngineState(series=self.state.series, recompute_count=self.state.recompute_count)

    def dispose(self) -> None:
        logger.debug("Indicator engine disposed")
        self.state = EngineState()
