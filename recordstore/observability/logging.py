"""
Structured logging with JSON output for production observability.

Features:
- JSON output for log aggregation
- Operation context propagation (operation_id, zone)
- Redaction of credentials and contact details
- Operation timing

Architecture:
- structlog for structured logging
- Context variables for operation-scoped data
- Processors for formatting and enrichment
- Multiple output formats (JSON for prod, console for dev)
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import TextIO

import structlog
from structlog.types import EventDict, Processor

# Context variables for operation-scoped data
# These propagate across async boundaries automatically
operation_id_var: ContextVar[str | None] = ContextVar("operation_id", default=None)
zone_var: ContextVar[str | None] = ContextVar("zone", default=None)


# ============================================================================
# CUSTOM PROCESSORS
# ============================================================================


def add_operation_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Add operation context to log events.

    Injects:
    - operation_id: Unique ID for each client operation
    - zone: Zone the operation targets
    """
    operation_id = operation_id_var.get()
    if operation_id:
        event_dict["operation_id"] = operation_id

    zone = zone_var.get()
    if zone:
        event_dict.setdefault("zone", zone)

    return event_dict


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add ISO 8601 timestamp with microsecond precision.

    Format: 2025-01-15T10:30:45.123456Z
    """
    event_dict["timestamp"] = (
        time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime())
        + f".{int((time.time() % 1) * 1000000):06d}Z"
    )
    return event_dict


def add_service_metadata(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Add service metadata for log aggregation.

    Configured via LOGGING_SERVICE_NAME, LOGGING_SERVICE_VERSION and
    LOGGING_ENVIRONMENT.
    """
    # Import here to avoid circular dependency
    try:
        from recordstore.config import get_settings

        settings = get_settings()
        event_dict["service"] = settings.logging.service_name
        event_dict["version"] = settings.logging.service_version
        event_dict["environment"] = settings.logging.environment
    except Exception:
        # Fallback if config not available
        event_dict["service"] = "customer-record-store"
        event_dict["version"] = "0.1.0"
        event_dict["environment"] = "development"
    return event_dict


SENSITIVE_FIELDS = {"api_key", "authorization", "password", "secret", "token"}
EMAIL_FIELDS = {"email", "contact_email"}


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Redact credentials and contact emails.

    - api_key/token/...: first 12 chars kept for debugging, rest masked
    - email, contact_email: domain only (tim@apple.com -> ***@apple.com)
    """
    for key in list(event_dict.keys()):
        value = event_dict[key]
        if not isinstance(value, str):
            continue

        if key.lower() in SENSITIVE_FIELDS:
            if len(value) > 12:
                event_dict[key] = f"{value[:12]}***{value[-3:]}"
            else:
                event_dict[key] = "***REDACTED***"
        elif key.lower() in EMAIL_FIELDS and "@" in value:
            event_dict[key] = f"***@{value.split('@')[1]}"

    return event_dict


def add_exception_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Add structured exception information (exception_type, exception_message).
    """
    exc_info = event_dict.get("exc_info")
    if exc_info and isinstance(exc_info, tuple) and len(exc_info) == 3:
        exc_type, exc_value, exc_tb = exc_info
        event_dict["exception_type"] = exc_type.__name__ if exc_type else "Unknown"
        event_dict["exception_message"] = str(exc_value) if exc_value else ""
    return event_dict


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True,
    colorized: bool = False,
    stream: TextIO = sys.stdout,
) -> None:
    """
    Configure structured logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Use JSON output (True for production, False for development)
        colorized: Colorize console output (only for development)
        stream: Where log lines are written

    Output formats:

    JSON (production):
        {
          "timestamp": "2025-01-15T10:30:45.123456Z",
          "level": "info",
          "event": "save completed",
          "service": "customer-record-store",
          "operation_id": "op_abc123",
          "zone": "customerRecordZone",
          "latency_ms": 45.2
        }

    Console (development):
        2025-01-15 10:30:45 [info] save completed
            operation_id=op_abc123 zone=customerRecordZone latency_ms=45.2
    """
    # Shared processors (run for all outputs)
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_operation_context,
        add_service_metadata,
        redact_sensitive_fields,
        add_timestamp,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        add_exception_info,
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=colorized),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, log_level.upper()),
    )


# ============================================================================
# LOGGER FACTORY
# ============================================================================


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Usage:
        logger = get_logger(__name__)
        logger.info("Zone created", zone="customerRecordZone")
    """
    return structlog.get_logger(name)


# ============================================================================
# CONTEXT MANAGERS
# ============================================================================


class OperationContext:
    """
    Context manager for operation-level logging with timing.

    Sets operation_id and zone for everything logged inside it, and logs
    operation start, completion (or failure) and latency.

    Usage:
        with OperationContext("save", zone="customerRecordZone", guid=guid):
            await store.upsert(...)
        # Logs: "save completed" with latency_ms
    """

    def __init__(self, operation: str, zone: str | None = None, **kwargs):
        """
        Args:
            operation: Operation name
            zone: Zone the operation targets
            **kwargs: Additional context (logged with operation)
        """
        self.operation = operation
        self.zone = zone
        self.context = kwargs
        self.operation_id = f"op_{uuid.uuid4().hex[:16]}"
        self.logger = get_logger(f"operation.{operation}")
        self.start_time: float | None = None
        self.duration_seconds: float | None = None

        self._operation_id_token = None
        self._zone_token = None

    def __enter__(self):
        """Set context variables, log start and begin timing."""
        self._operation_id_token = operation_id_var.set(self.operation_id)
        self._zone_token = zone_var.set(self.zone)
        self.start_time = time.perf_counter()
        self.logger.debug(f"{self.operation} started", **self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Log completion with latency and reset context variables."""
        self.duration_seconds = time.perf_counter() - self.start_time
        latency_ms = round(self.duration_seconds * 1000, 2)

        try:
            if exc_type is None:
                self.logger.info(
                    f"{self.operation} completed", latency_ms=latency_ms, **self.context
                )
            else:
                self.logger.error(
                    f"{self.operation} failed",
                    latency_ms=latency_ms,
                    exception_type=exc_type.__name__,
                    **self.context,
                    exc_info=(exc_type, exc_val, exc_tb),
                )
        finally:
            operation_id_var.reset(self._operation_id_token)
            zone_var.reset(self._zone_token)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def get_operation_id() -> str | None:
    """Get operation ID from current context."""
    return operation_id_var.get()


def get_zone() -> str | None:
    """Get zone from current context."""
    return zone_var.get()
