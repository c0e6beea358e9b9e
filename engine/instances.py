"""
Indicator instance store.

The host is the only writer; the engine iterates it read-only. Mutations
replace instances instead of editing them, so objects already handed to
the engine never change under it.
"""

import itertools
import logging
from collections.abc import Iterable, Iterator

from domain.indicators.registry import IndicatorRegistry, default_registry
from domain.models import IndicatorConfig, IndicatorInstance
from ports.errors import InstanceNotFoundError, UnknownIndicatorError

logger = logging.getLogger(__name__)


class InstanceStore:
    """Ordered collection of indicator instances keyed by instance_id."""

    def __init__(
        self,
        instances: Iterable[IndicatorInstance] = (),
        registry: IndicatorRegistry | None = None,
    ):
        self._registry = registry or default_registry
        self._instances: dict[str, IndicatorInstance] = {}
        self._counter = itertools.count(1)
        for instance in instances:
            self._instances[instance.instance_id] = instance

    def __iter__(self) -> Iterator[IndicatorInstance]:
        return iter(list(self._instances.values()))

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, instance_id: str) -> bool:
        return instance_id in self._instances

    @property
    def instances(self) -> list[IndicatorInstance]:
        return list(self._instances.values())

    def visible(self) -> list[IndicatorInstance]:
        return [i for i in self._instances.values() if i.visible]

    def get(self, instance_id: str) -> IndicatorInstance | None:
        return self._instances.get(instance_id)

    def _require(self, instance_id: str) -> IndicatorInstance:
        instance = self._instances.get(instance_id)
        if instance is None:
            raise InstanceNotFoundError(instance_id)
        return instance

    def _new_id(self, indicator_id: str) -> str:
        while True:
            instance_id = f"{indicator_id}_{next(self._counter)}"
            if instance_id not in self._instances:
                return instance_id

    def add(
        self,
        indicator_id: str,
        config: IndicatorConfig | None = None,
        label: str | None = None,
        instance_id: str | None = None,
    ) -> IndicatorInstance:
        """
        Add an instance with the definition's defaults overlaid by `config`.

        Raises:
            UnknownIndicatorError: If the indicator id is not registered
        """
        if indicator_id not in self._registry:
            raise UnknownIndicatorError(indicator_id)

        merged = {**self._registry.get_default_config(indicator_id), **(config or {})}
        instance = IndicatorInstance(
            instance_id=instance_id or self._new_id(indicator_id),
            indicator_id=indicator_id,
            config=merged,
            label=label,
        )
        self._instances[instance.instance_id] = instance
        logger.debug(f"Added indicator instance {instance.instance_id}")
        return instance

    def remove(self, instance_id: str) -> bool:
        """Remove one instance. Returns False when it was not present."""
        return self._instances.pop(instance_id, None) is not None

    def update_config(self, instance_id: str, changes: IndicatorConfig) -> IndicatorInstance:
        instance = self._require(instance_id)
        updated = instance.model_copy(update={"config": {**instance.config, **changes}})
        self._instances[instance_id] = updated
        return updated

    def toggle_visibility(self, instance_id: str) -> IndicatorInstance:
        instance = self._require(instance_id)
        updated = instance.model_copy(update={"visible": not instance.visible})
        self._instances[instance_id] = updated
        return updated

    def update_label(self, instance_id: str, label: str | None) -> IndicatorInstance:
        instance = self._require(instance_id)
        updated = instance.model_copy(update={"label": label})
        self._instances[instance_id] = updated
        return updated

    def remove_by_indicator(self, indicator_id: str) -> int:
        """Remove every instance of an indicator. Returns how many were removed."""
        doomed = [k for k, v in self._instances.items() if v.indicator_id == indicator_id]
        for instance_id in doomed:
            del self._instances[instance_id]
        return len(doomed)

    def clear(self) -> None:
        self._instances.clear()
