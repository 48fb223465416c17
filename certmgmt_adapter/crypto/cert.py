"""Certificate encoding helpers for the administration API.

The OPC UA methods exchange DER; operators usually hold PEM. These helpers
convert between the two and summarise certificates for display. They do not
validate certificates: the server does that on UpdateCertificate.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from datetime import datetime

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from certmgmt_adapter.exceptions import InvalidArgumentsError

_PEM_MARKER = b"-----BEGIN"


@dataclass(frozen=True)
class CertificateSummary:
    """Display fields of a certificate."""

    subject: str
    issuer: str
    serial_number: int
    not_after: datetime


def certificate_to_der(data: bytes | str, *, argument: str = "certificate") -> bytes:
    """Normalise a certificate given as PEM, base64 DER or DER to DER.

    Args:
        data: The certificate as PEM text/bytes, base64 text, or raw DER.
        argument: Argument name reported on failure.

    Returns:
        DER encoded certificate.

    Raises:
        InvalidArgumentsError: If the data cannot be decoded.
    """
    if isinstance(data, str):
        text = data.strip()
        try:
            data = text.encode("ascii") if text.startswith("-----BEGIN") else base64.b64decode(text, validate=True)
        except ValueError as e:
            raise InvalidArgumentsError.invalid_encoding(argument=argument, reason=str(e)) from e

    try:
        if data.lstrip().startswith(_PEM_MARKER):
            cert = x509.load_pem_x509_certificate(data)
        else:
            cert = x509.load_der_x509_certificate(data)
    except ValueError as e:
        raise InvalidArgumentsError.invalid_encoding(argument=argument, reason=str(e)) from e

    return cert.public_bytes(serialization.Encoding.DER)


def encode_csr_pem(csr_der: bytes) -> str:
    """PEM encode a DER signing request as returned by CreateSigningRequest."""
    body = base64.b64encode(csr_der).decode("ascii")
    lines = [body[i : i + 64] for i in range(0, len(body), 64)]
    return "\n".join(["-----BEGIN CERTIFICATE REQUEST-----", *lines, "-----END CERTIFICATE REQUEST-----", ""])


def summarize_certificate(der: bytes) -> CertificateSummary | None:
    """Summarise a DER certificate, or None if it cannot be parsed.

    Rejected certificates are often malformed; a summary failure must not
    hide the rest of the list.
    """
    try:
        cert = x509.load_der_x509_certificate(der)
    except ValueError:
        return None
    return CertificateSummary(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        serial_number=cert.serial_number,
        not_after=cert.not_valid_after_utc,
    )
