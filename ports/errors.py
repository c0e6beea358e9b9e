"""
Engine error types.

Structured errors with codes and context. Per-instance calculation problems
are converted into CalculatedIndicator.error strings inside the engine and
never escape as exceptions; these types are raised for host programming
errors (unknown instance, bad speed, duplicate registration) and used
internally by the failure boundary.
"""

from enum import Enum
from typing import Any


# ============================================================================
# Error Codes
# ============================================================================

class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # Data errors (4xx)
    DATA_INSUFFICIENT = "E403"

    # Validation errors (5xx)
    VALIDATION_PARAM = "E502"
    VALIDATION_CONFIG = "E503"
    VALIDATION_INDICATOR = "E504"
    VALIDATION_DUPLICATE = "E505"
    VALIDATION_REPLAY = "E506"

    # Internal errors (9xx)
    INTERNAL = "E901"
    CALCULATION = "E902"
    UNKNOWN = "E999"


# ============================================================================
# Error Classes
# ============================================================================

class EngineError(Exception):
    """
    Base exception for engine failures.

    Provides structured error information for debugging and logging.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        self.message = message
        super().__init__(f"[{code.value}] {message}")

    def __str__(self) -> str:
        text = super().__str__()
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            text = f"{text} ({details})"
        return text

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
        }

    def with_context(self, **kwargs: Any) -> "EngineError":
        """Add additional context and return self for chaining."""
        self.context.update(kwargs)
        return self


class RegistryError(EngineError):
    """Raised when an indicator module cannot be registered."""

    def __init__(self, indicator_id: str, reason: str):
        self.indicator_id = indicator_id
        super().__init__(
            message=reason,
            code=ErrorCode.VALIDATION_DUPLICATE,
            context={"indicator_id": indicator_id},
        )


class UnknownIndicatorError(EngineError):
    """Raised when an indicator id is not in the registry."""

    def __init__(self, indicator_id: str):
        self.indicator_id = indicator_id
        super().__init__(
            message=f"Unknown indicator: {indicator_id}",
            code=ErrorCode.VALIDATION_INDICATOR,
            context={"indicator_id": indicator_id},
        )


class InsufficientDataError(EngineError):
    """Fewer candles than the indicator needs."""

    def __init__(self, required: int, available: int, indicator_id: str | None = None):
        self.required = required
        self.available = available
        context: dict[str, Any] = {"required": required, "available": available}
        if indicator_id:
            context["indicator_id"] = indicator_id

        super().__init__(
            message=f"Insufficient data: requires {required} points",
            code=ErrorCode.DATA_INSUFFICIENT,
            context=context,
        )


class CalculationError(EngineError):
    """A calculator raised while computing an instance."""

    def __init__(self, indicator_id: str, cause: Exception):
        self.indicator_id = indicator_id
        super().__init__(
            message=f"Calculation error: {cause}",
            code=ErrorCode.CALCULATION,
            context={"indicator_id": indicator_id},
            cause=cause,
        )


class ReplayError(EngineError):
    """Invalid replay controller operation."""

    def __init__(self, reason: str, field: str | None = None, value: Any = None):
        context: dict[str, Any] = {}
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)[:50]

        super().__init__(
            message=reason,
            code=ErrorCode.VALIDATION_REPLAY,
            context=context,
        )

    @classmethod
    def invalid_speed(cls, speed: float) -> "ReplayError":
        return cls(f"Replay speed must be positive, got {speed}", field="speed", value=speed)


class InstanceNotFoundError(EngineError):
    """Raised when an update targets an instance id that is not in the store."""

    def __init__(self, instance_id: str):
        self.instance_id = instance_id
        super().__init__(
            message=f"Indicator instance not found: {instance_id}",
            code=ErrorCode.VALIDATION_PARAM,
            context={"instance_id": instance_id},
        )
