"""Tests for technical indicators library."""

import math

import pytest
from domain.indicators import (
    OHLCVPoint,
    accumulation_distribution,
    atr,
    bollinger_bands,
    cci,
    change,
    ema,
    highest,
    historical_volatility,
    keltner_channel,
    lowest,
    macd,
    mfi,
    momentum,
    obv,
    percent_change,
    roc,
    rsi,
    sma,
    std_dev,
    stochastic,
    vwap,
    williams_r,
    wma,
)
from domain.indicators.atr import calculate_atr
from domain.indicators.bollinger import calculate_keltner
from domain.indicators.macd import calculate_macd
from domain.indicators.moving_averages import calculate_sma, calculate_vwma
from domain.indicators.obv import calculate_obv
from domain.indicators.rsi import calculate_rsi, calculate_stochastic_rsi
from domain.indicators.utils import to_points

START = 1_704_067_200


def make_bars(closes, volume=1000.0, spread=1.0):
    return [
        OHLCVPoint(
            time=START + i * 60,
            open=c,
            high=c + spread,
            low=c - spread,
            close=c,
            volume=volume,
        )
        for i, c in enumerate(closes)
    ]


class TestMovingAverages:
    """Test moving average indicators."""

    def test_sma_basic(self):
        prices = [10, 11, 12, 13, 14, 15]
        result = sma(prices, 3)
        assert result[2] == 11.0
        assert result[3] == 12.0
        assert result[-1] == 14.0

    def test_sma_insufficient_data(self):
        prices = [10, 11]
        result = sma(prices, 3)
        assert all(v is None for v in result)

    def test_ema_basic(self):
        prices = [10, 11, 12, 13, 14, 15]
        result = ema(prices, 3)
        assert result == [None, None, 11.0, 12.0, 13.0, 14.0]

    def test_ema_skips_leading_warmup(self):
        result = ema([None, None, 1, 2, 3, 4], 2)
        assert result[:3] == [None, None, None]
        assert result[3:] == pytest.approx([1.5, 2.5, 3.5])

    def test_wma_basic(self):
        prices = [10, 11, 12, 13, 14, 15]
        result = wma(prices, 3)
        assert result[2] is not None
        # WMA should weight recent values more
        assert result[2] > sma(prices, 3)[2]

    def test_calculate_sma_drops_warmup(self):
        bars = make_bars([10, 11, 12, 13, 14, 15])
        output = calculate_sma(bars, {"period": 3})

        assert len(output.data) == 4
        assert output.data[0].time == bars[2].time
        assert output.data[0].value == 11.0

    def test_calculate_sma_source(self):
        bars = make_bars([10, 11, 12, 13, 14, 15])
        output = calculate_sma(bars, {"period": 3, "source": "high"})
        assert output.data[0].value == 12.0

    def test_vwma_equal_volume_matches_sma(self):
        bars = make_bars([10, 11, 12, 13, 14, 15])
        vwma_output = calculate_vwma(bars, {"period": 3})
        sma_output = calculate_sma(bars, {"period": 3})
        assert [p.value for p in vwma_output.data] == pytest.approx([p.value for p in sma_output.data])

    def test_vwma_skips_zero_volume(self):
        bars = make_bars([10, 11, 12, 13], volume=0.0)
        assert calculate_vwma(bars, {"period": 2}).data == []

    def test_calculators_do_not_mutate_input(self):
        bars = make_bars([10, 11, 12, 13, 14, 15])
        snapshot = list(bars)
        calculate_sma(bars, {"period": 3})
        assert bars == snapshot


class TestRSI:
    """Test RSI indicator."""

    def test_rsi_basic(self):
        closes = [44, 44.34, 44.09, 43.61, 44.33, 44.83, 45.10, 45.42,
                  45.84, 46.08, 45.89, 46.03, 45.61, 46.28, 46.28, 46.00]
        result = rsi(closes, 14)

        # Should have valid RSI after period
        assert result[14] is not None
        assert 0 <= result[14] <= 100

        # First period values should be None
        assert all(v is None for v in result[:14])

    def test_rsi_range(self):
        # Strongly uptrending should give high RSI
        uptrend = list(range(1, 20))
        result = rsi(uptrend, 14)
        assert result[-1] > 70

        # Strongly downtrending should give low RSI
        downtrend = list(range(20, 1, -1))
        result = rsi(downtrend, 14)
        assert result[-1] < 30

    def test_calculate_rsi_first_point(self):
        bars = make_bars(list(range(1, 21)))
        output = calculate_rsi(bars, {"period": 14})

        assert output.data[0].time == bars[14].time
        assert len(output.data) == 6

    def test_stochastic_rsi_alignment(self):
        closes = [100 + (i % 7) - (i % 3) for i in range(40)]
        bars = make_bars(closes)
        output = calculate_stochastic_rsi(bars, {"rsiPeriod": 14, "stochPeriod": 14, "kPeriod": 3, "dPeriod": 3})

        # raw values start at 14 + 14 - 1, then two SMA(3) smoothings
        assert output.series["k"][0].time == bars[29].time
        assert output.series["d"][0].time == bars[31].time
        assert all(0 <= p.value <= 100 for p in output.series["k"])


class TestMACD:
    """Test MACD indicator."""

    def test_macd_basic(self):
        closes = list(range(10, 50))
        macd_line, signal_line, histogram = macd(closes)

        # Should have values after slow period
        assert macd_line[-1] is not None
        assert signal_line[-1] is not None
        assert histogram[-1] is not None

        # Histogram should be difference
        assert abs(histogram[-1] - (macd_line[-1] - signal_line[-1])) < 0.001

    def test_macd_uptrend(self):
        closes = list(range(10, 50))
        macd_line, _, _ = macd(closes)

        # MACD should be positive in uptrend
        valid_values = [v for v in macd_line if v is not None]
        assert valid_values[-1] > 0

    def test_signal_starts_after_macd_warmup(self):
        closes = [100 + math.sin(i / 3) * 5 for i in range(60)]
        macd_line, signal_line, _ = macd(closes, 12, 26, 9)

        assert macd_line[25] is not None and macd_line[24] is None
        assert signal_line[33] is not None and signal_line[32] is None

    def test_histogram_colors(self):
        closes = [100 + math.sin(i / 4) * 10 for i in range(80)]
        output = calculate_macd(make_bars(closes), {
            "histogramPositiveColor": "#00FF00",
            "histogramNegativeColor": "#FF0000",
        })

        histogram = output.series["histogram"]
        assert histogram
        for point in histogram:
            assert point.color == ("#00FF00" if point.value >= 0 else "#FF0000")


class TestBollingerBands:
    """Test Bollinger Bands indicator."""

    def test_bollinger_basic(self):
        closes = [20, 21, 22, 23, 24, 25, 24, 23, 22, 21,
                  20, 21, 22, 23, 24, 25, 26, 27, 28, 29, 30]
        upper, middle, lower = bollinger_bands(closes, period=20)

        # Upper > Middle > Lower
        assert upper[-1] > middle[-1]
        assert middle[-1] > lower[-1]

        # Middle should be SMA
        sma_20 = sma(closes, 20)
        assert abs(middle[-1] - sma_20[-1]) < 0.001

    def test_bollinger_width(self):
        # Low volatility should give narrow bands
        stable = [100] * 25
        upper, middle, lower = bollinger_bands(stable, period=20)
        assert upper[-1] == middle[-1] == lower[-1]

    def test_keltner_flat_market(self):
        # True range is a constant 2 for these bars
        bars = make_bars([100] * 25)
        upper, middle, lower = keltner_channel(bars, ema_period=20, atr_period=10, multiplier=2.0)

        assert upper[-1] == pytest.approx(104.0)
        assert middle[-1] == pytest.approx(100.0)
        assert lower[-1] == pytest.approx(96.0)

    def test_keltner_sub_series_share_warmup(self):
        bars = make_bars([100] * 25)
        output = calculate_keltner(bars, {"emaPeriod": 20, "atrPeriod": 10, "multiplier": 2})
        assert len(output.upper) == len(output.middle) == len(output.lower) == 6


class TestATR:
    """Test ATR indicator."""

    def test_atr_basic(self):
        bars = make_bars([47, 48, 49, 50, 51] * 5)
        result = atr(bars, 14)

        # Should have values after period
        assert result[13] is None
        assert result[14] is not None
        assert result[-1] > 0

    def test_atr_constant_range(self):
        bars = make_bars([100] * 20)
        result = atr(bars, 14)
        assert result[14] == pytest.approx(2.0)
        assert result[-1] == pytest.approx(2.0)

    def test_atr_increasing_volatility(self):
        calm = make_bars([100] * 20, spread=1.0)
        wild = make_bars([100] * 20, spread=10.0)
        assert atr(wild, 14)[-1] > atr(calm, 14)[-1]

    def test_show_percentage(self):
        bars = make_bars([200] * 20)
        output = calculate_atr(bars, {"period": 14, "showPercentage": True})
        assert output.data[-1].value == pytest.approx(1.0)


class TestVolatility:
    """Test standard deviation and historical volatility."""

    def test_std_dev_population(self):
        assert std_dev([2, 4, 4, 4, 5, 5, 7, 9], 8)[-1] == 2.0

    def test_historical_volatility_constant_growth(self):
        closes = [100 * 1.01 ** i for i in range(30)]
        result = historical_volatility(closes, period=21)

        assert result[20] is None
        assert result[21] == pytest.approx(0.0, abs=1e-9)

    def test_historical_volatility_annualization(self):
        closes = [100, 110] * 10
        raw = historical_volatility(closes, period=4, annualize=False)
        annual = historical_volatility(closes, period=4, annualize=True)
        assert annual[-1] / raw[-1] == pytest.approx(math.sqrt(252) * 100)


class TestStochastic:
    """Test Stochastic Oscillator."""

    def test_stochastic_basic(self):
        # Need k_period + d_period values for valid %D
        highs = [50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63, 64, 65, 66, 67, 68]
        lows = [48, 49, 50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63, 64, 65, 66]
        closes = [49, 50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63, 64, 65, 66, 67]

        k, d = stochastic(highs, lows, closes, 14, 3)

        assert k[-1] is not None
        assert d[-1] is not None
        assert 0 <= k[-1] <= 100
        assert 0 <= d[-1] <= 100

    def test_flat_window(self):
        k, _ = stochastic([10] * 15, [10] * 15, [10] * 15, 14, 3)
        assert k[-1] == 50.0


class TestVolumeIndicators:
    """Test volume-based indicators."""

    def test_obv_basic(self):
        closes = [10, 11, 10, 12, 11]
        volumes = [1000, 1500, 1200, 1800, 1000]

        result = obv(closes, volumes)

        assert result[0] == 1000  # Seeded with first volume
        assert result[1] == 2500  # Price up
        assert result[2] == 1300  # Price down
        assert result[3] == 3100  # Price up
        assert result[4] == 2100  # Price down

    def test_obv_signal_optional(self):
        bars = make_bars(list(range(1, 31)))
        with_signal = calculate_obv(bars, {"showSignalLine": True, "signalPeriod": 5})
        without_signal = calculate_obv(bars, {"showSignalLine": False})

        assert len(with_signal.series["signal"]) == 26
        assert "signal" not in without_signal.series
        assert len(without_signal.series["obv"]) == 30

    def test_vwap_basic(self):
        bars = [
            OHLCVPoint(START, 101, 102, 100, 101, 1000),
            OHLCVPoint(START + 60, 102, 103, 101, 102, 1500),
        ]
        assert vwap(bars) == pytest.approx([101.0, 101.6])

    def test_vwap_without_volume(self):
        bars = [OHLCVPoint(START, 101, 102, 100, 101, 0)]
        assert vwap(bars) == [101.0]

    def test_accumulation_distribution(self):
        bars = [
            OHLCVPoint(START, 10, 12, 10, 12, 100),
            OHLCVPoint(START + 60, 12, 12, 10, 10, 50),
            OHLCVPoint(START + 120, 10, 10, 10, 10, 500),  # no range, no flow
        ]
        assert accumulation_distribution(bars) == [100.0, 50.0, 50.0]


class TestMomentumIndicators:
    """Test momentum indicators."""

    def test_roc_basic(self):
        prices = [100, 105, 110, 115, 120, 125, 130, 135, 140, 145, 150, 155, 160]
        result = roc(prices, 12)

        assert result[-1] == 60.0  # 60% change

    def test_momentum_basic(self):
        assert momentum([10, 11, 12, 11, 10], 2) == [None, None, 2, 0, -2]

    def test_cci_basic(self):
        highs = [102] * 25
        lows = [98] * 25
        closes = [100] * 25

        result = cci(highs, lows, closes, 20)

        # Flat prices should give CCI near 0
        assert result[-1] == 0.0

    def test_williams_r_basic(self):
        highs = [50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63, 64]
        lows = [48, 49, 50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62]
        closes = [49, 50, 51, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63]

        result = williams_r(highs, lows, closes, 14)

        assert -100 <= result[-1] <= 0

    def test_mfi_only_inflows(self):
        bars = make_bars(list(range(1, 20)))
        result = mfi(bars, 14)
        assert result[13] is None
        assert result[14] == 100.0


class TestUtilities:
    """Test utility functions."""

    def test_highest(self):
        prices = [10, 12, 11, 15, 14, 13]
        result = highest(prices, 3)

        assert result[2] == 12
        assert result[3] == 15
        assert result[-1] == 15

    def test_lowest(self):
        prices = [10, 12, 11, 15, 14, 13]
        result = lowest(prices, 3)

        assert result[2] == 10
        assert result[3] == 11
        assert result[-1] == 13

    def test_change(self):
        prices = [10, 11, 12, 11, 10]
        result = change(prices, 1)

        assert result[1] == 1
        assert result[2] == 1
        assert result[3] == -1
        assert result[4] == -1

    def test_percent_change(self):
        prices = [100, 110, 121, 110, 100]
        result = percent_change(prices, 1)

        assert result[1] == 10.0
        assert result[2] == 10.0
        assert abs(result[3] - (-9.090909)) < 0.001

    def test_to_points_drops_missing(self):
        bars = make_bars([1, 2, 3, 4])
        points = to_points(bars, [None, float("nan"), 3.0, 0.0])

        assert [p.time for p in points] == [bars[2].time, bars[3].time]
        # A real zero is kept
        assert points[-1].value == 0.0


class TestEdgeCases:
    """Test edge cases and error handling."""

    def test_empty_lists(self):
        assert rsi([], 14) == []
        assert sma([], 20) == []
        assert obv([], []) == []
        assert atr([], 14) == []
        assert calculate_sma([], {"period": 20}).data == []

    def test_insufficient_data(self):
        short_list = [1, 2, 3]
        result = rsi(short_list, 14)
        assert all(v is None for v in result)

    def test_mismatched_lengths(self):
        with pytest.raises(ValueError):
            cci([1, 2], [1, 2], [1, 2, 3], 14)

        with pytest.raises(ValueError):
            obv([1, 2], [1, 2, 3])

    def test_none_values_in_input(self):
        # Utility functions should handle None gracefully
        values = [10, None, 12, 13, 14]
        result = highest(values, 3)
        assert result[2] is not None  # Should ignore None

    def test_zero_division(self):
        # Flat prices shouldn't cause division by zero
        flat = [100] * 25
        result = bollinger_bands(flat, period=20)
        assert result[0][-1] == result[1][-1] == result[2][-1]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
