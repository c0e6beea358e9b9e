"""
Configuration schema with validation.

All configuration is validated at load time using Pydantic.
"""

from pydantic import BaseModel, Field, field_validator


class ReplayConfig(BaseModel):
    """Replay playhead and lookahead buffer configuration."""

    # Lookahead buffer
    buffer_ahead: int = Field(default=50, ge=1, le=10_000, description="Candles computed beyond the playhead")
    buffer_threshold: int = Field(default=10, ge=0, le=10_000, description="Recompute when this close to the buffer end")

    # Playback cadence
    base_interval_ms: float = Field(default=800.0, gt=0, description="Tick interval at speed 1")
    min_interval_ms: float = Field(default=120.0, gt=0)
    animation_frame_ms: float = Field(default=16.0, gt=0, le=1000)

    default_speed: float = Field(default=1.0, gt=0)
    min_speed: float = Field(default=0.25, gt=0)
    max_speed: float = Field(default=16.0, gt=0)

    @field_validator("buffer_threshold")
    @classmethod
    def threshold_below_ahead(cls, v: int, info) -> int:
        ahead = info.data.get("buffer_ahead", 50)
        if v >= ahead:
            raise ValueError("buffer_threshold must be smaller than buffer_ahead")
        return v

    @field_validator("max_speed")
    @classmethod
    def max_speed_above_min(cls, v: float, info) -> float:
        min_speed = info.data.get("min_speed", 0.25)
        if v < min_speed:
            raise ValueError("max_speed must be greater than or equal to min_speed")
        return v

    def interval_ms(self, speed: float) -> float:
        """Tick interval for a playback speed, floored at min_interval_ms."""
        return max(self.min_interval_ms, round(self.base_interval_ms / speed))


class IndicatorsConfig(BaseModel):
    """Indicator calculation configuration."""

    # Floor for the history a host should load (handles SMA 200 etc.)
    default_lookback: int = Field(default=200, ge=1, le=10_000)


class DisplayConfig(BaseModel):
    """Display series preferences."""

    volume_up_color: str = Field(default="#26a69a80", min_length=4)
    volume_down_color: str = Field(default="#ef535080", min_length=4)
    label_format: str = Field(default="%b %d, %Y, %H:%M:%S")

    @field_validator("volume_up_color", "volume_down_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not v.startswith("#"):
            raise ValueError(f"Colors must be hex strings, got: {v}")
        return v


class EngineConfig(BaseModel):
    """
    Root configuration model.

    All settings are validated on load.
    """

    replay: ReplayConfig = Field(default_factory=ReplayConfig)
    indicators: IndicatorsConfig = Field(default_factory=IndicatorsConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
