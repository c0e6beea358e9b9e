"""
Tests for the indicator registry.
"""

import pytest

from domain.enums import IndicatorCategory
from domain.indicators.base import IndicatorModule, LineOutput, OHLCVPoint
from domain.indicators.moving_averages import MODULES as MOVING_AVERAGE_MODULES
from domain.indicators.moving_averages import SMA_DEFINITION
from domain.indicators.registry import IndicatorRegistry, default_registry, required_data_points
from domain.models import IndicatorInstance
from ports.errors import RegistryError, UnknownIndicatorError

EXPECTED_IDS = {
    "SMA", "EMA", "WMA", "VWMA",
    "RSI", "MACD", "Stochastic", "StochasticRSI",
    "Williams%R", "CCI", "MFI", "ROC", "Momentum",
    "BollingerBands", "KeltnerChannel", "ATR", "StandardDeviation", "HistoricalVolatility",
    "OBV", "VWAP", "AccumulationDistribution",
}


class TestCatalog:
    """Lookups over the default registry."""

    def test_all_indicators_registered(self):
        assert {d.id for d in default_registry.get_all_indicators()} == EXPECTED_IDS
        assert len(default_registry) == len(EXPECTED_IDS)

    def test_by_category(self):
        overlays = {d.id for d in default_registry.get_indicators_by_category(IndicatorCategory.OVERLAY)}
        panels = {d.id for d in default_registry.get_indicators_by_category("panel")}

        assert {"SMA", "BollingerBands", "VWAP"} <= overlays
        assert {"RSI", "MACD", "OBV"} <= panels
        assert not overlays & panels

    def test_grouped_overlays_first(self):
        groups = default_registry.get_indicators_grouped()
        categories = [g.category for g in groups]

        first_panel = categories.index(IndicatorCategory.PANEL)
        assert all(c == IndicatorCategory.OVERLAY for c in categories[:first_panel])
        assert all(c == IndicatorCategory.PANEL for c in categories[first_panel:])

    def test_default_config(self):
        assert default_registry.get_default_config("SMA")["period"] == 20
        assert default_registry.get_default_config("Nope") == {}

    def test_unknown_lookups(self):
        assert default_registry.get_indicator("Nope") is None
        assert default_registry.get_calculator("Nope") is None
        assert "Nope" not in default_registry


class TestRegistration:
    """Registries are open to new modules."""

    def test_duplicate_rejected(self):
        registry = IndicatorRegistry(MOVING_AVERAGE_MODULES)
        with pytest.raises(RegistryError):
            registry.register(MOVING_AVERAGE_MODULES[0])

    def test_custom_module(self):
        def constant(data, config):
            return LineOutput([])

        registry = IndicatorRegistry()
        registry.register(IndicatorModule(SMA_DEFINITION, constant))

        assert registry.calculate("SMA", [], {}) == LineOutput([])
        # The default registry is untouched
        assert default_registry.get_calculator("SMA") is not constant


class TestValidation:
    """Config validation against parameter definitions."""

    def test_valid(self):
        assert default_registry.validate_config("SMA", {"period": 50, "source": "hl2"}) == (True, [])

    def test_out_of_range(self):
        valid, errors = default_registry.validate_config("SMA", {"period": 1})
        assert not valid
        assert errors == ["Period must be between 2 and 500"]

    def test_not_a_number(self):
        valid, errors = default_registry.validate_config("SMA", {"period": "twenty"})
        assert not valid
        assert errors == ["Period must be a number"]

    def test_bad_select_option(self):
        valid, errors = default_registry.validate_config("SMA", {"source": "median"})
        assert not valid
        assert len(errors) == 1

    def test_unknown_indicator(self):
        assert default_registry.validate_config("Nope", {}) == (False, ["Unknown indicator"])


class TestLookback:
    """Required data points and history lookback."""

    def test_required_from_period(self):
        assert required_data_points(SMA_DEFINITION, {"period": 20}) == 20
        assert required_data_points(SMA_DEFINITION, {"period": 50}) == 50

    def test_required_uses_defaults(self):
        # Falls back to the parameter default
        assert required_data_points(SMA_DEFINITION, {}) == 20

    def test_required_static_minimum(self):
        macd = default_registry.get_indicator("MACD")
        assert required_data_points(macd, {"fastPeriod": 3, "slowPeriod": 6, "signalPeriod": 3}) == 26

    def test_signal_period_counts(self):
        obv = default_registry.get_indicator("OBV")
        assert required_data_points(obv, {}) == 21

    def test_disabled_signal_line_drops_signal_period(self):
        obv = default_registry.get_indicator("OBV")
        assert required_data_points(obv, {"showSignalLine": False}) == 2
        assert required_data_points(obv, {"showSignalLine": False, "signalPeriod": 50}) == 2
        assert required_data_points(obv, {"showSignalLine": True, "signalPeriod": 50}) == 50

    def test_max_lookback(self):
        short = IndicatorInstance(instance_id="a", indicator_id="SMA", config={"period": 20})
        long = IndicatorInstance(instance_id="b", indicator_id="SMA", config={"period": 300})

        assert default_registry.get_max_lookback([short]) == 200
        assert default_registry.get_max_lookback([short, long]) == 300
        assert default_registry.get_max_lookback([]) == 200


class TestCalculate:
    """Running calculators through the registry."""

    def test_calculate(self):
        data = [OHLCVPoint(time=i, open=i, high=i, low=i, close=i, volume=1) for i in range(1, 6)]
        output = default_registry.calculate("SMA", data, {"period": 5})
        assert [p.value for p in output.data] == [3.0]

    def test_unknown(self):
        with pytest.raises(UnknownIndicatorError):
            default_registry.calculate("Nope", [], {})
