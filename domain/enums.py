from enum import Enum


class IndicatorCategory(str, Enum):
    """Where an indicator is drawn."""
    OVERLAY = "overlay"  # main price axis
    PANEL = "panel"      # own axis below the price chart


class OutputType(str, Enum):
    """Shape of a calculated indicator output."""
    LINE = "line"
    HISTOGRAM = "histogram"
    BAND = "band"
    MULTI_LINE = "multi-line"


class SeriesType(str, Enum):
    """Rendering type of a single output series."""
    LINE = "line"
    HISTOGRAM = "histogram"
    AREA = "area"


class ParameterType(str, Enum):
    """Kind of user-configurable indicator parameter."""
    NUMBER = "number"
    COLOR = "color"
    SELECT = "select"
    BOOLEAN = "boolean"


class ReplayStatus(str, Enum):
    """Replay controller state."""
    STOPPED = "stopped"  # replay disabled, full series shown
    PAUSED = "paused"
    PLAYING = "playing"


class PriceSeriesType(str, Enum):
    """Main chart series flavour."""
    OHLC = "ohlc"
    PRICE = "price"
