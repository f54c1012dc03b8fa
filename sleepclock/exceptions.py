"""
Standardized exception hierarchy for sleepclock
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class SleepClockError(Exception):
    """
    Base exception for all sleepclock errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise SleepClockError(
            message="Failed to load settings",
            operation="load_settings",
            context={"key": "settings"}
        )
    """

    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for UI collaborators"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (Schedule Input)
# ==========================================

class ValidationError(SleepClockError):
    """
    Raised when schedule configuration fails validation

    Examples:
    - Hour outside 0-23
    - Minute outside 0-59
    - Time-of-day not in HH:mm form

    Example:
        raise ValidationError(
            message="Hour must be between 0 and 23",
            field="bedtime",
            value="25:00"
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Nap State Errors
# ==========================================

NAP_ALREADY_ACTIVE = "nap already active"
NOT_IDLE = "not idle"
NAP_OVERLAPS_BEDTIME = "nap would overlap bedtime"
NAP_NOT_ACTIVE = "nap not active"


class InvalidStateError(SleepClockError):
    """
    Raised when a nap operation is not allowed in the current state

    The reason is one of the module-level constants above so the UI can
    pick a message per case. Logged at WARNING: these are expected,
    recoverable conditions.

    Example:
        raise InvalidStateError(NAP_ALREADY_ACTIVE, operation="start_nap")
    """

    log_level = logging.WARNING

    USER_MESSAGES: Dict[str, str] = {
        NAP_ALREADY_ACTIVE: "A nap is already running.",
        NOT_IDLE: "Naps can only start during the day.",
        NAP_OVERLAPS_BEDTIME: "The nap would run past bedtime.",
        NAP_NOT_ACTIVE: "There is no nap to cancel.",
    }

    def __init__(self, reason: str, **kwargs):
        self.reason = reason
        context = kwargs.pop("context", None) or {}
        context.setdefault("reason", reason)
        super().__init__(
            message=reason,
            user_message=self.USER_MESSAGES.get(reason, "That can't be done right now."),
            context=context,
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(SleepClockError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The clock is not properly configured. Please check your settings.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Storage Errors
# ==========================================

class StorageError(SleepClockError):
    """Reading or writing the settings store failed"""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        **kwargs
    ):
        self.key = key
        super().__init__(
            message=message,
            user_message="We couldn't save your settings. Please try again.",
            context={"key": key},
            **kwargs
        )
