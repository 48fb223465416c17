"""Audit logging for certificate management operations.

Provides structured logging with correlation IDs for tracing calls through
the certificate lifecycle. Every method call sent to a server, its status
outcome, and every locally downgraded or rejected reply is logged.
"""

from __future__ import annotations

import sys
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from certmgmt_adapter.config import AuditConfig


# Context variable for request correlation ID
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Get the current correlation ID for request tracing."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set correlation ID for current request context."""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    """Clear the correlation ID after request completes."""
    _correlation_id.set("")


# Structured format for audit logs
_AUDIT_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} [{level}] "
    "[{extra[correlation_id]}] <{extra[event]}> {message} | {extra}"
)


def configure_audit_logger(config: AuditConfig) -> None:
    """Configure the audit logger based on settings."""
    logger.remove()

    # Console handler for development
    logger.add(
        sys.stderr,
        level="DEBUG",
        format=_AUDIT_FORMAT,
        filter=lambda r: r["extra"].get("audit", False),
    )

    # File handler for audit trail
    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        str(log_path),
        level=config.log_level.value,
        format=_AUDIT_FORMAT,
        rotation="10 MB",
        retention="90 days",
        compression="gz",
        filter=lambda r: r["extra"].get("audit", False),
    )


def _get_audit_logger() -> Any:
    """Get logger bound with audit context."""
    return logger.bind(
        audit=True,
        correlation_id=get_correlation_id() or "-",
        event="",
    )


def log_method_call(*, method: str, object_id: str, argument_count: int) -> None:
    """Log a method call about to be sent through the session."""
    audit = _get_audit_logger().bind(
        event="method_call",
        method=method,
        object_id=object_id,
        argument_count=argument_count,
    )
    audit.info("Calling {} on {}", method, object_id)


def log_method_result(*, method: str, status: str, good: bool, output_count: int) -> None:
    """Log the status outcome returned for a method call."""
    audit = _get_audit_logger().bind(
        event="method_result",
        method=method,
        status=status,
        output_count=output_count,
    )
    if good:
        audit.info("{} returned {}", method, status)
    else:
        audit.warning("{} returned {}", method, status)


def log_shape_violation(*, method: str, expected: str, received: str, substituted_status: str) -> None:
    """Log a nominally successful reply downgraded because of its output shape."""
    audit = _get_audit_logger().bind(
        event="shape_violation",
        method=method,
        expected=expected,
        received=received,
        substituted_status=substituted_status,
    )
    audit.warning("{} reply downgraded to {}: expected {}, received {}", method, substituted_status, expected, received)


def log_protocol_violation(*, method: str, status: str, output_count: int) -> None:
    """Log a reply that cannot be reconciled with the method contract."""
    audit = _get_audit_logger().bind(
        event="protocol_violation",
        method=method,
        status=status,
        output_count=output_count,
    )
    audit.error("{} returned {} unexpected output argument(s)", method, output_count)


def log_auth_attempt(
    *,
    method: str,
    success: bool,
    username: str | None = None,
    reason: str | None = None,
) -> None:
    """Log an authentication attempt on the administration API."""
    event = "auth_success" if success else "auth_failure"
    audit = _get_audit_logger().bind(
        event=event,
        auth_method=method,
        username=username,
        reason=reason,
    )

    result = "succeeded" if success else "failed"
    if success:
        audit.info("Authentication {} via {}", result, method)
    else:
        audit.warning("Authentication {} via {}", result, method)


def log_error(*, error: Exception, context: str) -> None:
    """Log an error with full context."""
    audit = _get_audit_logger().bind(
        event="error",
        error_type=type(error).__name__,
        error_message=str(error),
        context=context,
    )
    audit.exception("Error during {}: {}", context, error)


def log_startup(*, version: str, host: str, port: int) -> None:
    """Log server startup."""
    audit = _get_audit_logger().bind(
        event="startup",
        version=version,
        host=host,
        port=port,
    )
    audit.info("Certificate Management Adapter v{} starting", version)


def log_shutdown() -> None:
    """Log server shutdown."""
    audit = _get_audit_logger().bind(event="shutdown")
    audit.info("Certificate Management Adapter shutting down")
