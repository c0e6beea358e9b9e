"""
Replay lookahead buffer.

Indicators are computed once over the prefix data[:end] with end a fixed
distance ahead of the playhead, then cut down to the playhead by time on
every step. The buffer is rebuilt only when the playhead nears its end or
the inputs change.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from domain.indicators.base import CalculatedIndicator, OHLCVPoint
from domain.indicators.registry import IndicatorRegistry, default_registry, required_data_points
from domain.models import IndicatorInstance
from engine.cache import DataKey, data_key, evaluate_instance, hash_all_configs
from engine.time_filter import filter_calculated
from ports.errors import InsufficientDataError

logger = logging.getLogger(__name__)

DEFAULT_AHEAD = 50
DEFAULT_THRESHOLD = 10


@dataclass(frozen=True)
class ReplayBufferEntry:
    """Results computed over data[start:end] for one config set."""
    start: int
    end: int
    data_key: DataKey
    config_hash: str
    results: tuple[CalculatedIndicator, ...]


@dataclass(frozen=True)
class BufferOutcome:
    entry: ReplayBufferEntry | None
    results: list[CalculatedIndicator]
    recomputed: bool


def needs_recompute(
    entry: ReplayBufferEntry | None,
    key: DataKey,
    config_hash: str,
    current_step: int,
    threshold: int = DEFAULT_THRESHOLD,
) -> bool:
    """Whether the buffer must be rebuilt before serving current_step."""
    if entry is None:
        return True
    if entry.config_hash != config_hash:
        return True
    if entry.data_key != key:
        return True
    # Approaching the right edge; start is always 0 so the second check
    # only fires for a never-filled buffer
    if current_step >= entry.end - threshold:
        return True
    return current_step < entry.start


def _gate(result: CalculatedIndicator, current_step: int) -> CalculatedIndicator:
    """Report insufficient data while the visible prefix is too short."""
    required = required_data_points(result.definition, result.instance.config)
    if current_step >= required or result.error is not None:
        return result
    error = InsufficientDataError(required, current_step, result.instance.indicator_id)
    return CalculatedIndicator(
        instance=result.instance,
        definition=result.definition,
        output=None,
        error=error.message,
    )


def compute_with_buffer(
    entry: ReplayBufferEntry | None,
    data: list[OHLCVPoint],
    instances: Iterable[IndicatorInstance],
    current_step: int,
    ahead: int = DEFAULT_AHEAD,
    threshold: int = DEFAULT_THRESHOLD,
    registry: IndicatorRegistry | None = None,
) -> BufferOutcome:
    """
    Serve the results visible at current_step (1-based).

    Returns:
        BufferOutcome with the (possibly new) buffer entry, the filtered
        results, and whether a recompute happened.
    """
    instances = [i for i in instances if i.visible]
    if not data or not instances:
        return BufferOutcome(entry=None, results=[], recomputed=False)

    step = min(max(current_step, 1), len(data))
    config_hash = hash_all_configs(instances)
    key = data_key(data)
    recomputed = False

    if needs_recompute(entry, key, config_hash, step, threshold):
        end = min(step + ahead, len(data))
        window = data[:end]
        results = []
        for instance in instances:
            result = evaluate_instance(instance, window, registry)
            if result is not None:
                results.append(result)

        entry = ReplayBufferEntry(
            start=0,
            end=end,
            data_key=key,
            config_hash=config_hash,
            results=tuple(results),
        )
        recomputed = True
        logger.debug(f"Replay buffer recomputed at step {step}: end={end}")

    max_time = data[step - 1].time
    visible = [_gate(r, step) for r in filter_calculated(entry.results, max_time)]
    return BufferOutcome(entry=entry, results=visible, recomputed=recomputed)


class ReplayBuffer:
    """Stateful wrapper around compute_with_buffer."""

    def __init__(
        self,
        registry: IndicatorRegistry | None = None,
        ahead: int = DEFAULT_AHEAD,
        threshold: int = DEFAULT_THRESHOLD,
    ):
        self._registry = registry or default_registry
        self.ahead = ahead
        self.threshold = threshold
        self.entry: ReplayBufferEntry | None = None
        self.recompute_count = 0

    def compute(
        self,
        data: list[OHLCVPoint],
        instances: Iterable[IndicatorInstance],
        current_step: int,
    ) -> list[CalculatedIndicator]:
        outcome = compute_with_buffer(
            self.entry,
            data,
            instances,
            current_step,
            ahead=self.ahead,
            threshold=self.threshold,
            registry=self._registry,
        )
        self.entry = outcome.entry
        if outcome.recomputed:
            self.recompute_count += 1
        return outcome.results

    def clear(self) -> None:
        self.entry = None
