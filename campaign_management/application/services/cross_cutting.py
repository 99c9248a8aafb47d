"""
Cross-cutting concern services for the campaign management service.

Provides structured logging, audit trail and performance monitoring used
throughout the application layer.
"""

import inspect
import json
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from functools import wraps
from typing import Any, Callable, Dict, Optional

from ...core.config import get_settings


class LogLevel(str, Enum):
    """Application log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AuditEvent(str, Enum):
    """Types of audit events, one per campaign use case."""
    CAMPAIGN_CREATED = "campaign_created"
    CAMPAIGN_ACTIVATED = "campaign_activated"
    CAMPAIGN_PAUSED = "campaign_paused"
    CAMPAIGN_RESUMED = "campaign_resumed"
    CAMPAIGN_COMPLETED = "campaign_completed"
    CAMPAIGN_CANCELLED = "campaign_cancelled"
    CAMPAIGN_UPDATED = "campaign_updated"
    CAMPAIGN_DELETED = "campaign_deleted"
    CAMPAIGN_EVENT_TRACKED = "campaign_event_tracked"


SLOW_OPERATION_MS = 1000


class ApplicationLogger:
    """
    Structured logging service for application layer operations.

    Provides consistent logging format with audit trail capabilities
    and performance monitoring.
    """

    def __init__(self, logger_name: str = "campaign_management"):
        self.logger = logging.getLogger(logger_name)
        self._configure_logger()

    def _configure_logger(self):
        """Configure structured logging format from settings."""
        if not self.logger.handlers:
            config = get_settings()
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
            self.logger.addHandler(handler)
            self.logger.setLevel(config.LOG_LEVEL)

    @staticmethod
    def _timestamp() -> str:
        return datetime.now(timezone.utc).isoformat()

    def log_operation(
        self,
        operation: str,
        campaign_id: Optional[str] = None,
        user_id: Optional[str] = None,
        level: LogLevel = LogLevel.INFO,
        **kwargs
    ) -> None:
        """
        Log application operation with structured data.

        Args:
            operation: Operation being performed
            campaign_id: Campaign the operation targets, if any
            user_id: User performing operation
            level: Log level
            **kwargs: Additional structured data
        """
        message = f"Operation: {operation} | Campaign: {campaign_id} | User: {user_id}"
        if kwargs:
            message += f" | Data: {json.dumps(kwargs, default=str)}"

        self.logger.log(logging.getLevelName(level.value), message)

    def log_performance(
        self,
        operation: str,
        duration_ms: float,
        success: bool = True,
        **kwargs
    ) -> None:
        """Log performance metrics for operations."""
        level = LogLevel.INFO if success else LogLevel.WARNING
        message = (
            f"Performance: {operation} | Duration: {round(duration_ms, 2)}ms | Success: {success}"
        )

        if duration_ms > SLOW_OPERATION_MS:
            level = LogLevel.WARNING
            message += " | SLOW_OPERATION"
        if kwargs:
            message += f" | Data: {json.dumps(kwargs, default=str)}"

        self.logger.log(logging.getLevelName(level.value), message)

    def log_audit_event(
        self,
        event: AuditEvent,
        user_id: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log audit events for compliance.

        Args:
            event: Type of audit event
            user_id: User performing action
            resource_id: ID of resource being acted upon
            details: Additional audit details
        """
        message = f"AUDIT: {event.value} | User: {user_id}"
        if resource_id:
            message += f" | Resource: {resource_id}"
        if details:
            message += f" | Details: {json.dumps(details, default=str)}"
        message += f" | At: {self._timestamp()}"

        # All audit events are logged as INFO level for compliance
        self.logger.info(message)

    def log_error(
        self,
        error: Exception,
        operation: str,
        **kwargs
    ) -> None:
        """Log application errors with context."""
        message = f"ERROR: {operation} | {type(error).__name__}: {error}"
        if kwargs:
            message += f" | Data: {json.dumps(kwargs, default=str)}"
        self.logger.error(message)


def performance_monitor(logger: ApplicationLogger):
    """
    Decorator for monitoring operation performance.

    Automatically logs operation duration and success/failure, then
    re-raises whatever the wrapped callable raised.
    """
    def decorator(func: Callable) -> Callable:
        operation_name = f"{func.__module__}.{func.__qualname__}"

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.log_performance(operation_name, duration_ms, success=False, error=str(e))
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.log_performance(operation_name, duration_ms, success=True)
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.log_performance(operation_name, duration_ms, success=False, error=str(e))
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.log_performance(operation_name, duration_ms, success=True)
            return result

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper

    return decorator
