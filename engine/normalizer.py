"""
Candle normalization.

Turns the newest-first candle feed into the ascending OHLCV series the
calculators expect, and derives the price/volume display series.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from config.schema import DisplayConfig
from domain.enums import PriceSeriesType
from domain.indicators.base import OHLCVPoint, SeriesPoint
from domain.models import BarPoint, Candle

logger = logging.getLogger(__name__)

NormalizeKey = tuple[int, int, int, str]

DisplayPoint = Union[BarPoint, SeriesPoint]


@dataclass(frozen=True)
class NormalizedSeries:
    """Ascending points plus the key they were built for."""
    key: NormalizeKey
    points: list[OHLCVPoint]


@dataclass(frozen=True)
class DerivedSeries:
    """Display series for the main chart and the volume histogram."""
    price: list[DisplayPoint]
    volume: list[SeriesPoint]


def parse_candles(raw: Iterable[Union[Candle, Mapping[str, Any]]]) -> list[Candle]:
    """Validate raw mappings into Candle models. Candles pass through."""
    return [c if isinstance(c, Candle) else Candle.model_validate(c) for c in raw]


def candles_to_ohlcv(candles: Sequence[Candle]) -> list[OHLCVPoint]:
    """Uncached conversion of newest-first candles to ascending points."""
    return [
        OHLCVPoint(
            time=candle.timestamp,
            open=candle.open,
            high=candle.high,
            low=candle.low,
            close=candle.close,
            volume=candle.volume if candle.volume is not None else 0.0,
        )
        for candle in reversed(candles)
    ]


def normalize_key(candles: Sequence[Candle]) -> NormalizeKey:
    """
    Validity key of a candle list.

    Length and date bounds catch appends and pagination; the fingerprint of
    the newest candle catches a live bar changing in place.
    """
    if not candles:
        return (0, 0, 0, "")
    return (len(candles), candles[0].timestamp, candles[-1].timestamp, candles[0].fingerprint)


def normalize_with_cache(cached: NormalizedSeries | None, candles: Sequence[Candle]) -> NormalizedSeries:
    """Return `cached` untouched when its key still matches, else rebuild."""
    key = normalize_key(candles)
    if cached is not None and cached.key == key:
        return cached

    logger.debug(f"Normalizing {len(candles)} candles")
    return NormalizedSeries(key=key, points=candles_to_ohlcv(candles))


class CandleNormalizer:
    """
    Stateful normalizer.

    Returns the same list object while the candle key is unchanged so that
    downstream identity checks stay cheap.
    """

    def __init__(self):
        self._cached: NormalizedSeries | None = None

    def normalize(self, candles: Sequence[Candle]) -> list[OHLCVPoint]:
        self._cached = normalize_with_cache(self._cached, candles)
        return self._cached.points

    def invalidate(self) -> None:
        self._cached = None


def has_valid_volume(candles: Iterable[Candle]) -> bool:
    """True when any candle carries a positive volume."""
    return any((candle.volume or 0) > 0 for candle in candles)


def derive_series(
    points: Sequence[OHLCVPoint],
    series_type: PriceSeriesType | str = PriceSeriesType.OHLC,
    display: DisplayConfig | None = None,
) -> DerivedSeries:
    """
    Build the main price series and the colored volume histogram.

    Args:
        points: Ascending OHLCV points
        series_type: ohlc for bars, price for a close line
        display: Volume colors; up when close >= previous close

    Returns:
        DerivedSeries with one price and one volume point per input point
    """
    series_type = PriceSeriesType(series_type)
    display = display or DisplayConfig()

    if series_type == PriceSeriesType.OHLC:
        price: list[DisplayPoint] = [
            BarPoint(time=p.time, open=p.open, high=p.high, low=p.low, close=p.close)
            for p in points
        ]
    else:
        price = [SeriesPoint(time=p.time, value=p.close) for p in points]

    volume = []
    for i, point in enumerate(points):
        previous_close = points[i - 1].close if i > 0 else point.close
        color = display.volume_up_color if point.close >= previous_close else display.volume_down_color
        volume.append(SeriesPoint(time=point.time, value=point.volume, color=color))

    return DerivedSeries(price=price, volume=volume)
