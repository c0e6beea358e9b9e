"""Indicator registry.

Central, open catalog of IndicatorModules keyed by indicator id. The
default registry is built from the family modules; hosts and tests may
build their own and register extra modules.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from domain.enums import IndicatorCategory, ParameterType
from domain.indicators.atr import MODULES as ATR_MODULES
from domain.indicators.base import (
    IndicatorCalculator,
    IndicatorDefinition,
    IndicatorModule,
    IndicatorOutput,
    OHLCVPoint,
    SelectParameter,
)
from domain.indicators.bollinger import MODULES as BAND_MODULES
from domain.indicators.macd import MACD_DEFINITION, calculate_macd
from domain.indicators.momentum import MODULES as MOMENTUM_MODULES
from domain.indicators.moving_averages import MODULES as MOVING_AVERAGE_MODULES
from domain.indicators.obv import MODULES as OBV_MODULES
from domain.indicators.rsi import RSI_DEFINITION, STOCHASTIC_RSI_DEFINITION, calculate_rsi, calculate_stochastic_rsi
from domain.indicators.stochastic import STOCHASTIC_DEFINITION, calculate_stochastic
from domain.indicators.volatility import MODULES as VOLATILITY_PANEL_MODULES
from domain.indicators.volume import MODULES as AD_MODULES
from domain.indicators.vwap import MODULES as VWAP_MODULES
from domain.models import IndicatorConfig, IndicatorInstance
from ports.errors import RegistryError, UnknownIndicatorError

logger = logging.getLogger(__name__)

# Floor for get_max_lookback (handles SMA 200 etc.)
DEFAULT_LOOKBACK = 200

# Keys equal to these are treated as lookback parameters
LOOKBACK_KEYS = {"fast", "slow", "signal"}

# Lookback parameters that only apply while a boolean toggle is on
LOOKBACK_TOGGLES = {"signalPeriod": "showSignalLine"}

MOVING_AVERAGES = MOVING_AVERAGE_MODULES
OSCILLATORS = (
    IndicatorModule(RSI_DEFINITION, calculate_rsi),
    IndicatorModule(MACD_DEFINITION, calculate_macd),
    IndicatorModule(STOCHASTIC_DEFINITION, calculate_stochastic),
    IndicatorModule(STOCHASTIC_RSI_DEFINITION, calculate_stochastic_rsi),
    *MOMENTUM_MODULES,
)
VOLATILITY = BAND_MODULES + ATR_MODULES + VOLATILITY_PANEL_MODULES
VOLUME = OBV_MODULES + VWAP_MODULES + AD_MODULES

ALL_MODULES: tuple[IndicatorModule, ...] = MOVING_AVERAGES + OSCILLATORS + VOLATILITY + VOLUME


@dataclass
class IndicatorGroup:
    """Indicators sharing a category and group, for pickers."""
    name: str
    category: IndicatorCategory
    indicators: list[IndicatorDefinition] = field(default_factory=list)


def is_lookback_key(key: str) -> bool:
    """True for parameter keys that describe a lookback window."""
    lowered = key.lower()
    return "period" in lowered or "length" in lowered or lowered in LOOKBACK_KEYS


def _lookback_enabled(definition: IndicatorDefinition, config: IndicatorConfig, key: str) -> bool:
    toggle = definition.parameter(LOOKBACK_TOGGLES.get(key, ""))
    if toggle is None:
        return True
    return bool(config.get(toggle.key, toggle.default))


def _lookback_values(definition: IndicatorDefinition, config: IndicatorConfig) -> list[int]:
    values = []
    for param in definition.parameters:
        if param.type != ParameterType.NUMBER or not is_lookback_key(param.key):
            continue
        if not _lookback_enabled(definition, config, param.key):
            continue
        value = config.get(param.key, param.default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        values.append(int(value))
    return values


def required_data_points(definition: IndicatorDefinition, config: IndicatorConfig) -> int:
    """Minimum candle count before an instance is computed.

    The larger of the definition's static minimum and any lookback
    parameter of the config, so SMA(20) needs 20 candles.

    Example:
        >>> required_data_points(SMA_DEFINITION, {"period": 20})  # doctest: +SKIP
        20
    """
    return max([definition.min_data_points, *_lookback_values(definition, config)])


class IndicatorRegistry:
    """Maps indicator ids to their modules."""

    def __init__(self, modules: Iterable[IndicatorModule] = ()):
        self._modules: dict[str, IndicatorModule] = {}
        for module in modules:
            self.register(module)

    def __contains__(self, indicator_id: str) -> bool:
        return indicator_id in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def register(self, module: IndicatorModule) -> None:
        """Add a module. Raises RegistryError on a duplicate id."""
        indicator_id = module.definition.id
        if indicator_id in self._modules:
            raise RegistryError(indicator_id, f"Indicator already registered: {indicator_id}")
        self._modules[indicator_id] = module
        logger.debug(f"Registered indicator: {indicator_id}")

    def get_indicator(self, indicator_id: str) -> IndicatorDefinition | None:
        module = self._modules.get(indicator_id)
        return module.definition if module else None

    def get_indicator_module(self, indicator_id: str) -> IndicatorModule | None:
        return self._modules.get(indicator_id)

    def get_calculator(self, indicator_id: str) -> IndicatorCalculator | None:
        module = self._modules.get(indicator_id)
        return module.calculate if module else None

    def get_all_indicators(self) -> list[IndicatorDefinition]:
        """All definitions in registration order."""
        return [module.definition for module in self._modules.values()]

    def get_indicators_by_category(self, category: IndicatorCategory | str) -> list[IndicatorDefinition]:
        category = IndicatorCategory(category)
        return [d for d in self.get_all_indicators() if d.category == category]

    def get_indicators_grouped(self) -> list[IndicatorGroup]:
        """Group definitions by (category, group).

        Overlay groups come first, then groups are ordered by name.
        """
        groups: dict[tuple[IndicatorCategory, str], IndicatorGroup] = {}
        for definition in self.get_all_indicators():
            key = (definition.category, definition.group)
            if key not in groups:
                groups[key] = IndicatorGroup(name=definition.group, category=definition.category)
            groups[key].indicators.append(definition)

        return sorted(
            groups.values(),
            key=lambda g: (g.category != IndicatorCategory.OVERLAY, g.name.lower()),
        )

    def get_default_config(self, indicator_id: str) -> IndicatorConfig:
        """Config built from every parameter's default; empty for unknown ids."""
        definition = self.get_indicator(indicator_id)
        if definition is None:
            return {}
        return {param.key: param.default for param in definition.parameters}

    def validate_config(self, indicator_id: str, config: IndicatorConfig) -> tuple[bool, list[str]]:
        """Check numeric ranges and select options.

        Returns:
            Tuple of (valid, errors). Unknown indicators are invalid.
        """
        definition = self.get_indicator(indicator_id)
        if definition is None:
            return False, ["Unknown indicator"]

        errors: list[str] = []
        for param in definition.parameters:
            value = config.get(param.key)
            if value is None:
                continue

            if param.type == ParameterType.NUMBER:
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    errors.append(f"{param.label} must be a number")
                elif value < param.min or value > param.max:
                    errors.append(f"{param.label} must be between {param.min} and {param.max}")
            elif isinstance(param, SelectParameter):
                allowed = [option.value for option in param.options]
                if value not in allowed:
                    errors.append(f"{param.label} must be one of {', '.join(allowed)}")

        return not errors, errors

    def get_max_lookback(self, instances: Iterable[IndicatorInstance], floor: int = DEFAULT_LOOKBACK) -> int:
        """Largest lookback parameter across instances, never below `floor`.

        Used by hosts to decide how much history to load.
        """
        max_period = 0
        for instance in instances:
            definition = self.get_indicator(instance.indicator_id)
            if definition is None:
                continue
            max_period = max([max_period, *_lookback_values(definition, instance.config)])
        return max(max_period, floor)

    def calculate(self, indicator_id: str, data: list[OHLCVPoint], config: IndicatorConfig) -> IndicatorOutput:
        """Run an indicator's calculator.

        Raises:
            UnknownIndicatorError: If the id is not registered
        """
        calculator = self.get_calculator(indicator_id)
        if calculator is None:
            raise UnknownIndicatorError(indicator_id)
        return calculator(data, config)


default_registry = IndicatorRegistry(ALL_MODULES)

# Module-level access to the default registry
register = default_registry.register
get_indicator = default_registry.get_indicator
get_indicator_module = default_registry.get_indicator_module
get_calculator = default_registry.get_calculator
get_all_indicators = default_registry.get_all_indicators
get_indicators_by_category = default_registry.get_indicators_by_category
get_indicators_grouped = default_registry.get_indicators_grouped
get_default_config = default_registry.get_default_config
validate_config = default_registry.validate_config
get_max_lookback = default_registry.get_max_lookback
calculate = default_registry.calculate
