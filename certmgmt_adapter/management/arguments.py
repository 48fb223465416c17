"""Input argument records for the ServerConfiguration methods.

Each record turns typed call parameters into a CallMethodRequest whose input
arguments follow the method's positional signature. The argument order is
part of the server contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from certmgmt_adapter.exceptions import InvalidArgumentsError
from certmgmt_adapter.protocol.call import CallMethodRequest
from certmgmt_adapter.protocol.node_id import NodeId, ObjectIds
from certmgmt_adapter.protocol.variant import DataType, Variant, VariantArrayType


class PrivateKeyFormat(str, Enum):
    """Private key encodings accepted by UpdateCertificate."""

    PEM = "PEM"
    PFX = "PFX"


@dataclass(frozen=True)
class PrivateKeyUpload:
    """A new private key together with its encoding.

    The format and key are sent as a pair; a key without a format (or the
    reverse) cannot be expressed.
    """

    format: PrivateKeyFormat | str
    key: bytes

    def __post_init__(self) -> None:
        fmt = self.format.value if isinstance(self.format, PrivateKeyFormat) else self.format
        if not fmt:
            raise InvalidArgumentsError.empty_private_key(part="format")
        if not self.key:
            raise InvalidArgumentsError.empty_private_key(part="key")
        object.__setattr__(self, "format", fmt)


def _group_variant(certificate_group_id: NodeId | None) -> Variant:
    # A null group id selects the DefaultApplicationGroup on the server.
    if certificate_group_id is None:
        certificate_group_id = NodeId.null()
    return Variant(DataType.NODE_ID, certificate_group_id)


@dataclass(frozen=True)
class CreateSigningRequestArguments:
    """Inputs of CreateSigningRequest.

    Attributes:
        certificate_group_id: Certificate group affected, or None for the
            DefaultApplicationGroup.
        certificate_type_id: Type of certificate being requested.
        subject_name: X.500 name pairs separated by '/', e.g.
            ``CN=ApplicationName/OU=Group/O=Company``. Blank is the only way
            to let the server choose a default; it is sent as an empty String
            and never as a null.
        regenerate_private_key: Ask the server to create a new private key.
        nonce: Additional entropy, expected when regenerating the key.
    """

    certificate_group_id: NodeId | None
    certificate_type_id: NodeId
    subject_name: str
    regenerate_private_key: bool = False
    nonce: bytes | None = None

    def to_call_request(self) -> CallMethodRequest:
        nonce = Variant(DataType.BYTE_STRING, self.nonce) if self.nonce is not None else Variant.null()
        return CallMethodRequest(
            object_id=ObjectIds.SERVER_CONFIGURATION,
            method_id=ObjectIds.SERVER_CONFIGURATION_CREATE_SIGNING_REQUEST,
            input_arguments=(
                _group_variant(self.certificate_group_id),
                Variant(DataType.NODE_ID, self.certificate_type_id),
                Variant(DataType.STRING, self.subject_name),
                Variant(DataType.BOOLEAN, bool(self.regenerate_private_key)),
                nonce,
            ),
        )


@dataclass(frozen=True)
class UpdateCertificateArguments:
    """Inputs of UpdateCertificate.

    Attributes:
        certificate_group_id: Certificate group affected, or None for the
            DefaultApplicationGroup.
        certificate_type_id: Type of certificate being updated.
        certificate: DER encoded certificate replacing the current one.
        issuer_certificates: DER encoded issuers needed to verify it.
        private_key: New private key, when it was created outside the server.
    """

    certificate_group_id: NodeId | None
    certificate_type_id: NodeId
    certificate: bytes
    issuer_certificates: tuple[bytes, ...] = field(default=())
    private_key: PrivateKeyUpload | None = None

    def to_call_request(self) -> CallMethodRequest:
        if self.private_key is None:
            key_format, key = Variant.null(), Variant.null()
        else:
            key_format = Variant(DataType.STRING, self.private_key.format)
            key = Variant(DataType.BYTE_STRING, self.private_key.key)

        return CallMethodRequest(
            object_id=ObjectIds.SERVER_CONFIGURATION,
            method_id=ObjectIds.SERVER_CONFIGURATION_UPDATE_CERTIFICATE,
            input_arguments=(
                _group_variant(self.certificate_group_id),
                Variant(DataType.NODE_ID, self.certificate_type_id),
                Variant(DataType.BYTE_STRING, self.certificate),
                Variant(DataType.BYTE_STRING, tuple(self.issuer_certificates), VariantArrayType.ARRAY),
                key_format,
                key,
            ),
        )


def get_rejected_list_request() -> CallMethodRequest:
    """GetRejectedList takes no input arguments."""
    return CallMethodRequest(
        object_id=ObjectIds.SERVER_CONFIGURATION,
        method_id=ObjectIds.SERVER_CONFIGURATION_GET_REJECTED_LIST,
    )


def apply_changes_request() -> CallMethodRequest:
    """ApplyChanges takes no input arguments."""
    return CallMethodRequest(
        object_id=ObjectIds.SERVER_CONFIGURATION,
        method_id=ObjectIds.SERVER_CONFIGURATION_APPLY_CHANGES,
    )
