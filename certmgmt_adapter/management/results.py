"""Typed results of the ServerConfiguration methods.

Fields other than status_code are set only when status_code is Good.
"""

from __future__ import annotations

from dataclasses import dataclass

from certmgmt_adapter.protocol.status import StatusCode


@dataclass(frozen=True)
class CreateSigningRequestResult:
    """Result of CreateSigningRequest."""

    status_code: StatusCode
    certificate_signing_request: bytes | None = None


@dataclass(frozen=True)
class GetRejectedListResult:
    """Result of GetRejectedList."""

    status_code: StatusCode
    certificates: tuple[bytes, ...] | None = None


@dataclass(frozen=True)
class UpdateCertificateResult:
    """Result of UpdateCertificate.

    apply_changes_required tells whether ApplyChanges must be called before
    the new certificate is used.
    """

    status_code: StatusCode
    apply_changes_required: bool | None = None
