"""Custom exception hierarchy for the Certificate Management Adapter.

All exceptions inherit from CertMgmtAdapterError for consistent handling.
Each exception maps to an HTTP status code for the administration API.

Remote status failures are never raised: they are returned in the status
field of the operation result. Errors raised by the session collaborator are
never wrapped by this hierarchy.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

from certmgmt_adapter.protocol.status import StatusCode, StatusCodes

if TYPE_CHECKING:
    from collections.abc import Mapping


class CertMgmtAdapterError(Exception):
    """Base exception for all Certificate Management Adapter errors.

    Attributes:
        message: Human-readable error description.
        http_status: HTTP status code for REST API responses.
        details: Additional context for audit logging.
    """

    http_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        details: Mapping[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Human-readable error description.
            details: Additional context for audit logging.
        """
        super().__init__(message)
        self.message = message
        self.details = dict(details) if details else {}

    def to_audit_dict(self) -> dict[str, str | int | bool | None]:
        """Return dictionary suitable for audit logging.

        Returns:
            Dictionary with exception type, message, and details.
        """
        return {
            "exception_type": self.__class__.__name__,
            "message": self.message,
            **self.details,
        }


class InvalidArgumentsError(CertMgmtAdapterError):
    """Caller supplied arguments that break the method's argument contract.

    HTTP Status: 400 Bad Request
    """

    http_status = HTTPStatus.BAD_REQUEST

    @classmethod
    def empty_private_key(cls, *, part: str) -> InvalidArgumentsError:
        """Create exception for a private key upload missing one of its halves.

        Args:
            part: Which half of the pair is empty ("format" or "key").

        Returns:
            InvalidArgumentsError instance.
        """
        return cls(
            f"Private key upload requires a non-empty {part}",
            details={"argument": "private_key", "part": part},
        )

    @classmethod
    def malformed_node_id(cls, *, value: str) -> InvalidArgumentsError:
        """Create exception for an unparsable NodeId string.

        Args:
            value: The rejected text.

        Returns:
            InvalidArgumentsError instance.
        """
        return cls(f"Cannot resolve NodeId from '{value}'", details={"argument": "node_id", "value": value})

    @classmethod
    def unknown_certificate_type(cls, *, name: str, allowed: list[str]) -> InvalidArgumentsError:
        """Create exception for a certificate type name with no registered NodeId.

        Args:
            name: The rejected certificate type name.
            allowed: Names that can be resolved.

        Returns:
            InvalidArgumentsError instance.
        """
        return cls(
            f"Unknown certificate type '{name}', must be one of: {', '.join(allowed)}",
            details={"argument": "certificate_type", "name": name},
        )

    @classmethod
    def invalid_encoding(cls, *, argument: str, reason: str) -> InvalidArgumentsError:
        """Create exception for a byte payload that could not be decoded.

        Args:
            argument: Name of the offending argument.
            reason: Why decoding failed.

        Returns:
            InvalidArgumentsError instance.
        """
        return cls(
            f"Invalid encoding for '{argument}': {reason}",
            details={"argument": argument, "reason": reason},
        )


class VariantMismatchError(InvalidArgumentsError):
    """A typed value whose content does not agree with its declared kind.

    This is a local contract violation, never a remote error.

    HTTP Status: 400 Bad Request
    """

    @classmethod
    def content_mismatch(cls, *, data_type: str, array_type: str, value_type: str) -> VariantMismatchError:
        """Create exception for a value that does not match its data type.

        Args:
            data_type: Declared data type name.
            array_type: Declared array type name.
            value_type: Python type name of the supplied content.

        Returns:
            VariantMismatchError instance.
        """
        return cls(
            f"{array_type} {data_type} variant cannot hold a value of type {value_type}",
            details={"data_type": data_type, "array_type": array_type, "value_type": value_type},
        )


class ProtocolViolationError(CertMgmtAdapterError):
    """The server replied in a shape the method contract does not allow.

    HTTP Status: 502 Bad Gateway
    """

    http_status = HTTPStatus.BAD_GATEWAY

    @classmethod
    def unexpected_outputs(cls, *, method: str, count: int) -> ProtocolViolationError:
        """Create exception for output arguments on a method that has none.

        Args:
            method: Name of the called method.
            count: Number of output arguments received.

        Returns:
            ProtocolViolationError instance.
        """
        return cls(
            f"Invalid output arguments: {method} returned {count} value(s), expected none",
            details={"method": method, "output_count": count},
        )


class CertificateGroupNotImplementedError(CertMgmtAdapterError):
    """Certificate group name cannot be resolved.

    Only the DefaultApplicationGroup is known; other names are not looked up.

    HTTP Status: 501 Not Implemented
    """

    http_status = HTTPStatus.NOT_IMPLEMENTED

    def __init__(
        self,
        message: str,
        *,
        status_code: StatusCode,
        details: Mapping[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Human-readable error description.
            status_code: OPC UA status classification of the failure.
            details: Additional context for audit logging.
        """
        super().__init__(message, details=details)
        self.status_code = status_code

    @classmethod
    def unknown_group(cls, *, name: str) -> CertificateGroupNotImplementedError:
        """Create exception for a group name other than the default one.

        Args:
            name: The requested certificate group name.

        Returns:
            CertificateGroupNotImplementedError instance.
        """
        return cls(
            f"Certificate group lookup not implemented for '{name}'",
            status_code=StatusCodes.BAD_NOT_IMPLEMENTED,
            details={"group_name": name, "status_code": StatusCodes.BAD_NOT_IMPLEMENTED.value},
        )


class AuthenticationError(CertMgmtAdapterError):
    """Authentication failed - invalid or missing credentials.

    HTTP Status: 401 Unauthorized
    """

    http_status = HTTPStatus.UNAUTHORIZED

    @classmethod
    def invalid_credentials(cls, *, username: str | None = None) -> AuthenticationError:
        """Create exception for invalid username/password.

        Args:
            username: Username that failed authentication (for logging).

        Returns:
            AuthenticationError instance.
        """
        details = {"auth_method": "basic"}
        if username:
            details["username"] = username
        return cls("Invalid username or password", details=details)


class ConfigurationError(CertMgmtAdapterError):
    """Configuration error.

    HTTP Status: 500 Internal Server Error (startup failure)
    """

    http_status = HTTPStatus.INTERNAL_SERVER_ERROR

    @classmethod
    def invalid_config(cls, *, field: str, reason: str) -> ConfigurationError:
        """Create exception for invalid configuration.

        Args:
            field: The configuration field with the error.
            reason: Why the configuration is invalid.

        Returns:
            ConfigurationError instance.
        """
        return cls(f"Invalid configuration for '{field}': {reason}", details={"field": field, "reason": reason})

    @classmethod
    def missing_required(cls, *, field: str) -> ConfigurationError:
        """Create exception for missing required configuration.

        Args:
            field: The missing configuration field.

        Returns:
            ConfigurationError instance.
        """
        return cls(f"Missing required configuration: {field}", details={"field": field})
