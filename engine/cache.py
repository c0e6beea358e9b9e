"""
Per-instance calculation cache (non-replay mode).

Entries are keyed by instance_id and valid while the config hash and the
input series key (length, time bounds, newest point) are unchanged. A
valid entry is returned verbatim so callers can rely on identity to skip
redraws.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from domain.indicators.base import CalculatedIndicator, OHLCVPoint
from domain.indicators.registry import IndicatorRegistry, default_registry, required_data_points
from domain.models import IndicatorConfig, IndicatorInstance
from ports.errors import CalculationError, InsufficientDataError

logger = logging.getLogger(__name__)

DataKey = tuple[int, int, int, OHLCVPoint | None]


@dataclass(frozen=True)
class CacheEntry:
    config_hash: str
    data_key: DataKey
    result: CalculatedIndicator


def data_key(data: list[OHLCVPoint]) -> DataKey:
    """
    Validity key of an ascending series.

    Length and time bounds catch appends; the newest point itself catches
    a live candle changing in place.
    """
    if not data:
        return (0, 0, 0, None)
    return (len(data), data[0].time, data[-1].time, data[-1])


def hash_config(config: IndicatorConfig) -> str:
    """Canonical serialization of a config; key order does not matter."""
    return json.dumps(config, sort_keys=True, separators=(",", ":"), default=str)


def hash_all_configs(instances: Iterable[IndicatorInstance]) -> str:
    """Combined hash of every visible instance, independent of order."""
    parts = sorted(f"{i.instance_id}:{hash_config(i.config)}" for i in instances if i.visible)
    return "|".join(parts)


def evaluate_instance(
    instance: IndicatorInstance,
    data: list[OHLCVPoint],
    registry: IndicatorRegistry | None = None,
) -> CalculatedIndicator | None:
    """
    Compute one instance inside a failure boundary.

    Returns:
        The result, an error result for insufficient data or a failing
        calculator, or None when the indicator id is unknown.
    """
    registry = registry or default_registry
    module = registry.get_indicator_module(instance.indicator_id)
    if module is None:
        logger.warning(f"No calculator found for indicator: {instance.indicator_id}")
        return None

    definition = module.definition
    required = required_data_points(definition, instance.config)
    if len(data) < required:
        error = InsufficientDataError(required, len(data), instance.indicator_id)
        return CalculatedIndicator(instance=instance, definition=definition, output=None, error=error.message)

    try:
        output = module.calculate(data, instance.config)
    except Exception as e:
        # One failing calculator must not take down the others
        error = CalculationError(instance.indicator_id, e)
        logger.warning(f"{instance.instance_id}: {error}")
        return CalculatedIndicator(instance=instance, definition=definition, output=None, error=error.message)

    return CalculatedIndicator(instance=instance, definition=definition, output=output)


def compute_with_cache(
    entries: Mapping[str, CacheEntry],
    data: list[OHLCVPoint],
    instances: Iterable[IndicatorInstance],
    registry: IndicatorRegistry | None = None,
) -> tuple[dict[str, CacheEntry], list[CalculatedIndicator]]:
    """
    Resolve every visible instance against the cache.

    Returns:
        Tuple of (new_entries, results). new_entries only holds visible
        instances, so hidden or removed ones are dropped.
    """
    key = data_key(data)
    new_entries: dict[str, CacheEntry] = {}
    results: list[CalculatedIndicator] = []

    for instance in instances:
        if not instance.visible:
            continue

        config_hash = hash_config(instance.config)
        entry = entries.get(instance.instance_id)

        if entry is not None and entry.config_hash == config_hash and entry.data_key == key:
            logger.debug(f"Cache hit: {instance.instance_id}")
        else:
            logger.debug(f"Cache miss: {instance.instance_id}")
            result = evaluate_instance(instance, data, registry)
            if result is None:
                continue
            entry = CacheEntry(config_hash=config_hash, data_key=key, result=result)

        new_entries[instance.instance_id] = entry
        results.append(entry.result)

    return new_entries, results


class CalculationCache:
    """Stateful wrapper around compute_with_cache."""

    def __init__(self, registry: IndicatorRegistry | None = None):
        self._registry = registry or default_registry
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, instance_id: str) -> bool:
        return instance_id in self._entries

    def compute(self, data: list[OHLCVPoint], instances: Iterable[IndicatorInstance]) -> list[CalculatedIndicator]:
        self._entries, results = compute_with_cache(self._entries, data, instances, self._registry)
        return results

    def clear(self) -> None:
        self._entries = {}
