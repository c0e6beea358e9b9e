from .errors import (
    CalculationError,
    EngineError,
    ErrorCode,
    InstanceNotFoundError,
    InsufficientDataError,
    RegistryError,
    ReplayError,
    UnknownIndicatorError,
)
from .sources import CancelToken, CandleSource, Scheduler

__all__ = [
    "CandleSource",
    "Scheduler",
    "CancelToken",
    "EngineError",
    "ErrorCode",
    "RegistryError",
    "UnknownIndicatorError",
    "InsufficientDataError",
    "CalculationError",
    "ReplayError",
    "InstanceNotFoundError",
]
