"""OPC UA status codes.

Only the codes this adapter produces or is likely to receive from the
ServerConfiguration methods are registered by name. Codes returned by a
server that are not registered are still representable.
"""

from __future__ import annotations

from dataclasses import dataclass

# Top two bits of a status code carry its severity.
_SEVERITY_MASK = 0xC0000000
_SEVERITY_GOOD = 0x00000000
_SEVERITY_BAD = 0x80000000

_NAMES: dict[int, str] = {}


@dataclass(frozen=True)
class StatusCode:
    """Status classification of a method call outcome."""

    value: int

    @property
    def name(self) -> str:
        """Registered name, or the hex value for unregistered codes."""
        return _NAMES.get(self.value, f"0x{self.value:08X}")

    @property
    def is_good(self) -> bool:
        """True for any code with Good severity."""
        return (self.value & _SEVERITY_MASK) == _SEVERITY_GOOD

    @property
    def is_bad(self) -> bool:
        """True for any code with Bad severity."""
        return (self.value & _SEVERITY_MASK) == _SEVERITY_BAD

    def __str__(self) -> str:
        return f"{self.name} (0x{self.value:08X})"


def _register(name: str, value: int) -> StatusCode:
    _NAMES[value] = name
    return StatusCode(value)


class StatusCodes:
    """Registered status code constants."""

    GOOD = _register("Good", 0x00000000)
    BAD_UNEXPECTED_ERROR = _register("BadUnexpectedError", 0x80010000)
    BAD_INTERNAL_ERROR = _register("BadInternalError", 0x80020000)
    BAD_COMMUNICATION_ERROR = _register("BadCommunicationError", 0x80050000)
    BAD_TIMEOUT = _register("BadTimeout", 0x800A0000)
    BAD_NOTHING_TO_DO = _register("BadNothingToDo", 0x800F0000)
    BAD_CERTIFICATE_INVALID = _register("BadCertificateInvalid", 0x80120000)
    BAD_SECURITY_CHECKS_FAILED = _register("BadSecurityChecksFailed", 0x80130000)
    BAD_USER_ACCESS_DENIED = _register("BadUserAccessDenied", 0x801F0000)
    BAD_NODE_ID_UNKNOWN = _register("BadNodeIdUnknown", 0x80340000)
    BAD_NOT_IMPLEMENTED = _register("BadNotImplemented", 0x80400000)
    BAD_TYPE_MISMATCH = _register("BadTypeMismatch", 0x80740000)
    BAD_METHOD_INVALID = _register("BadMethodInvalid", 0x80750000)
    BAD_ARGUMENTS_MISSING = _register("BadArgumentsMissing", 0x80760000)
    BAD_INVALID_ARGUMENT = _register("BadInvalidArgument", 0x80AB0000)
    BAD_INVALID_STATE = _register("BadInvalidState", 0x80AF0000)
    BAD_TOO_MANY_ARGUMENTS = _register("BadTooManyArguments", 0x80E50000)
