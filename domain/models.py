"""
Domain models - data structures with validation.

Candles, indicator instances and replay state are validated pydantic
models. The numeric points that flow through the calculators are plain
frozen dataclasses (see domain.indicators.base) to keep the hot path cheap.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from pydantic import BaseModel, Field, field_validator, model_validator

# Parameter values an indicator instance can carry
ConfigValue = Union[bool, int, float, str]
IndicatorConfig = dict[str, ConfigValue]


def to_epoch_seconds(value: datetime | int | float) -> int:
    """
    Convert a candle date to UTC epoch seconds.

    Naive datetimes are treated as UTC. Numbers are assumed to already be
    epoch seconds.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a valid candle date")
    if isinstance(value, (int, float)):
        return int(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


# ============================================================================
# Feed models
# ============================================================================

class Candle(BaseModel):
    """
    One bar as delivered by the candle source.

    The source sends candles newest-first. Dates may be given as datetimes,
    ISO-8601 strings or epoch seconds.
    """
    model_config = {"frozen": True, "extra": "forbid"}

    date: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def high_not_below_low(self) -> "Candle":
        if self.high < self.low:
            raise ValueError(f"high ({self.high}) must be >= low ({self.low})")
        return self

    @property
    def fingerprint(self) -> str:
        """Value fingerprint used to spot a live candle changing in place."""
        volume = self.volume if self.volume is not None else 0
        return f"{self.open}-{self.high}-{self.low}-{self.close}-{volume}"

    @property
    def timestamp(self) -> int:
        return to_epoch_seconds(self.date)


# ============================================================================
# Indicator instances
# ============================================================================

class IndicatorInstance(BaseModel):
    """
    One configured use of an indicator definition.

    The instance_id is stable across recalculation and is the cache key.
    Several instances of the same indicator may coexist.
    """
    model_config = {"extra": "forbid", "validate_assignment": True}

    instance_id: str = Field(min_length=1)
    indicator_id: str = Field(min_length=1)
    config: IndicatorConfig = Field(default_factory=dict)
    visible: bool = True
    label: str | None = None


# ============================================================================
# Replay state
# ============================================================================

class ReplayState(BaseModel):
    """
    Replay playhead state.

    current_step is a 1-based position into the ascending series;
    animation_progress of 1 means the current candle is fully formed.
    """
    model_config = {"validate_assignment": True}

    enabled: bool = False
    playing: bool = False
    speed: float = Field(default=1.0, gt=0)
    current_step: int = Field(default=0, ge=0)
    total_steps: int = Field(default=0, ge=0)
    animate: bool = False
    animation_progress: float = 1.0

    @field_validator("animation_progress")
    @classmethod
    def clamp_progress(cls, v: float) -> float:
        return max(0.0, min(1.0, v))


# ============================================================================
# Display series points
# ============================================================================

@dataclass(frozen=True)
class BarPoint:
    """OHLC point of the main price series."""
    time: int
    open: float
    high: float
    low: float
    close: float
