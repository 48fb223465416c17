"""Interpretation of method call outcomes into typed results.

A server that reports Good but returns output arguments of the wrong shape
is not trusted: the result is downgraded to a Bad status so that untyped data
never reaches the caller. ApplyChanges has no outputs at all, so any output
there is raised as a protocol violation instead.
"""

from __future__ import annotations

from certmgmt_adapter.audit.logger import log_protocol_violation, log_shape_violation
from certmgmt_adapter.exceptions import ProtocolViolationError
from certmgmt_adapter.management.results import (
    CreateSigningRequestResult,
    GetRejectedListResult,
    UpdateCertificateResult,
)
from certmgmt_adapter.protocol.call import CallMethodResult
from certmgmt_adapter.protocol.status import StatusCode, StatusCodes
from certmgmt_adapter.protocol.variant import DataType, Variant, VariantArrayType


def _describe(outputs: tuple[Variant, ...]) -> str:
    if not outputs:
        return "no outputs"
    return ", ".join(f"{v.array_type.value} {v.data_type.name}" for v in outputs)


def _downgrade(method: str, expected: str, outputs: tuple[Variant, ...], status: StatusCode) -> StatusCode:
    log_shape_violation(
        method=method,
        expected=expected,
        received=_describe(outputs),
        substituted_status=status.name,
    )
    return status


def interpret_create_signing_request(result: CallMethodResult) -> CreateSigningRequestResult:
    """Extract the PKCS #10 DER encoded signing request."""
    if result.status_code != StatusCodes.GOOD:
        return CreateSigningRequestResult(status_code=result.status_code)

    outputs = result.output_arguments
    if len(outputs) != 1 or not outputs[0].is_kind(DataType.BYTE_STRING):
        status = _downgrade("CreateSigningRequest", "one Scalar BYTE_STRING", outputs, StatusCodes.BAD_INTERNAL_ERROR)
        return CreateSigningRequestResult(status_code=status)

    return CreateSigningRequestResult(
        status_code=result.status_code,
        certificate_signing_request=outputs[0].value,
    )


def interpret_get_rejected_list(result: CallMethodResult) -> GetRejectedListResult:
    """Extract the DER encoded certificates rejected by the server."""
    if result.status_code != StatusCodes.GOOD:
        return GetRejectedListResult(status_code=result.status_code)

    outputs = result.output_arguments
    if len(outputs) != 1 or not outputs[0].is_kind(DataType.BYTE_STRING, VariantArrayType.ARRAY):
        status = _downgrade("GetRejectedList", "one Array BYTE_STRING", outputs, StatusCodes.BAD_INVALID_ARGUMENT)
        return GetRejectedListResult(status_code=status)

    return GetRejectedListResult(
        status_code=result.status_code,
        certificates=outputs[0].value,
    )


def interpret_update_certificate(result: CallMethodResult) -> UpdateCertificateResult:
    """Extract the applyChangesRequired flag."""
    if result.status_code != StatusCodes.GOOD:
        return UpdateCertificateResult(status_code=result.status_code)

    outputs = result.output_arguments
    if len(outputs) != 1 or not outputs[0].is_kind(DataType.BOOLEAN):
        status = _downgrade("UpdateCertificate", "one Scalar BOOLEAN", outputs, StatusCodes.BAD_INTERNAL_ERROR)
        return UpdateCertificateResult(status_code=status)

    return UpdateCertificateResult(
        status_code=result.status_code,
        apply_changes_required=outputs[0].value,
    )


def interpret_apply_changes(result: CallMethodResult) -> StatusCode:
    """Return the raw status of ApplyChanges.

    Raises:
        ProtocolViolationError: If the server returned any output argument,
            whatever its status.
    """
    count = len(result.output_arguments)
    if count:
        log_protocol_violation(method="ApplyChanges", status=result.status_code.name, output_count=count)
        raise ProtocolViolationError.unexpected_outputs(method="ApplyChanges", count=count)
    return result.status_code
