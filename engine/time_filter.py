"""Truncate indicator outputs to a replay position by timestamp."""

from collections.abc import Iterable
from dataclasses import replace

from domain.indicators.base import (
    BandOutput,
    CalculatedIndicator,
    HistogramOutput,
    IndicatorOutput,
    LineOutput,
    MultiLineOutput,
    SeriesPoint,
)


def _until(points: list[SeriesPoint], max_time: int) -> list[SeriesPoint]:
    return [p for p in points if p.time <= max_time]


def filter_output_by_time(output: IndicatorOutput | None, max_time: int | None) -> IndicatorOutput | None:
    """
    Keep points with time <= max_time.

    Outputs may be shorter than their input, so positions are compared by
    time, never by index. Every sub-series is cut independently and may end
    up a different length.

    Notes:
        - None output or None max_time is returned unchanged
    """
    if output is None or max_time is None:
        return output

    if isinstance(output, LineOutput):
        return LineOutput(data=_until(output.data, max_time))
    if isinstance(output, HistogramOutput):
        return HistogramOutput(data=_until(output.data, max_time))
    if isinstance(output, BandOutput):
        return BandOutput(
            upper=_until(output.upper, max_time),
            middle=_until(output.middle, max_time),
            lower=_until(output.lower, max_time),
        )
    if isinstance(output, MultiLineOutput):
        return MultiLineOutput(series={k: _until(v, max_time) for k, v in output.series.items()})

    raise TypeError(f"Unsupported indicator output: {type(output).__name__}")


def filter_calculated(results: Iterable[CalculatedIndicator], max_time: int | None) -> list[CalculatedIndicator]:
    """Apply filter_output_by_time to each result, keeping instance and error."""
    return [replace(r, output=filter_output_by_time(r.output, max_time)) for r in results]
