"""Administration endpoints for server certificate management.

Implements:
- POST /server-configuration/signing-request - CreateSigningRequest
- GET  /server-configuration/rejected-certificates - GetRejectedList
- POST /server-configuration/certificate - UpdateCertificate
- POST /server-configuration/apply-changes - ApplyChanges
- GET  /server-configuration/certificate-groups/{name} - group NodeId lookup

A Bad status reported by the server is returned in the response body with
HTTP 200; it is a normal outcome of the call, not an API failure.
"""

from __future__ import annotations

import base64
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel

from certmgmt_adapter.audit.logger import clear_correlation_id, set_correlation_id
from certmgmt_adapter.auth.handler import BasicAuthHandler
from certmgmt_adapter.config import Settings
from certmgmt_adapter.crypto.cert import certificate_to_der, encode_csr_pem, summarize_certificate
from certmgmt_adapter.exceptions import AuthenticationError, InvalidArgumentsError
from certmgmt_adapter.management.arguments import PrivateKeyFormat, PrivateKeyUpload
from certmgmt_adapter.management.client import PullCertificateManagementClient
from certmgmt_adapter.protocol.node_id import NodeId, resolve_certificate_type
from certmgmt_adapter.protocol.status import StatusCode

router = APIRouter(prefix="/server-configuration")


@dataclass
class RouteState:
    """Mutable state container for route dependencies."""

    client: PullCertificateManagementClient | None = None
    auth_handler: BasicAuthHandler | None = None
    settings: Settings | None = None


# Module-level state instance
_state = RouteState()


def configure_routes(
    client: PullCertificateManagementClient,
    auth_handler: BasicAuthHandler,
    settings: Settings,
) -> None:
    """Configure routes with backend instances.

    Called by main.py during startup.
    """
    _state.client = client
    _state.auth_handler = auth_handler
    _state.settings = settings


def get_client() -> PullCertificateManagementClient:
    """Dependency to get the certificate management client."""
    if _state.client is None:
        msg = "Certificate management client not configured"
        raise RuntimeError(msg)
    return _state.client


def get_settings() -> Settings:
    """Dependency to get settings."""
    if _state.settings is None:
        msg = "Settings not configured"
        raise RuntimeError(msg)
    return _state.settings


def require_operator(authorization: Annotated[str | None, Header()] = None) -> str:
    """Dependency authenticating the operator; returns their identity."""
    if _state.auth_handler is None:
        msg = "Auth handler not configured"
        raise RuntimeError(msg)
    result = _state.auth_handler.authenticate(authorization)
    if not result.authenticated:
        raise AuthenticationError.invalid_credentials()
    return result.identity


async def with_correlation_id() -> AsyncIterator[None]:
    """Dependency scoping a correlation ID to one request."""
    set_correlation_id()
    try:
        yield None
    finally:
        clear_correlation_id()


Operator = Annotated[str, Depends(require_operator)]
Client = Annotated[PullCertificateManagementClient, Depends(get_client)]
CurrentSettings = Annotated[Settings, Depends(get_settings)]


# --- Request / response bodies ---


class PrivateKeyBody(BaseModel):
    """New private key: PEM text, or base64 PFX."""

    format: PrivateKeyFormat
    key: str


class SigningRequestBody(BaseModel):
    certificate_group: str | None = None
    certificate_type: str | None = None
    subject_name: str = ""
    regenerate_private_key: bool = False
    nonce: str | None = None


class UpdateCertificateBody(BaseModel):
    certificate_group: str | None = None
    certificate_type: str | None = None
    certificate: str
    issuer_certificates: list[str] = []
    private_key: PrivateKeyBody | None = None


class StatusResponse(BaseModel):
    status: str
    status_code: int


class SigningRequestResponse(StatusResponse):
    certificate_signing_request: str | None = None


class RejectedCertificate(BaseModel):
    der: str
    subject: str | None = None
    issuer: str | None = None
    serial_number: str | None = None
    not_after: datetime | None = None


class RejectedListResponse(StatusResponse):
    certificates: list[RejectedCertificate] | None = None


class UpdateCertificateResponse(StatusResponse):
    apply_changes_required: bool | None = None


class CertificateGroupResponse(BaseModel):
    name: str
    node_id: str


# --- Helpers ---


def _status_fields(status_code: StatusCode) -> dict[str, str | int]:
    return {"status": status_code.name, "status_code": status_code.value}


def _b64decode(value: str, *, argument: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except ValueError as e:
        raise InvalidArgumentsError.invalid_encoding(argument=argument, reason=str(e)) from e


async def _resolve_target(
    client: PullCertificateManagementClient,
    settings: Settings,
    group: str | None,
    certificate_type: str | None,
) -> tuple[NodeId, NodeId]:
    group_id = await client.get_certificate_group_id(group or settings.certificates.group)
    type_id = resolve_certificate_type(certificate_type or settings.certificates.certificate_type)
    return group_id, type_id


def _private_key_upload(body: PrivateKeyBody) -> PrivateKeyUpload:
    if body.format == PrivateKeyFormat.PEM:
        key = body.key.encode("utf-8")
    else:
        key = _b64decode(body.key, argument="private_key")
    return PrivateKeyUpload(format=body.format, key=key)


# --- Endpoints ---


@router.post("/signing-request", dependencies=[Depends(with_correlation_id)])
async def create_signing_request(
    body: SigningRequestBody,
    _operator: Operator,
    client: Client,
    settings: CurrentSettings,
) -> SigningRequestResponse:
    """Ask the server for a signing request; returned PEM encoded."""
    group_id, type_id = await _resolve_target(client, settings, body.certificate_group, body.certificate_type)
    nonce = _b64decode(body.nonce, argument="nonce") if body.nonce is not None else None

    result = await client.create_signing_request(
        group_id,
        type_id,
        body.subject_name,
        regenerate_private_key=body.regenerate_private_key,
        nonce=nonce,
    )

    csr = result.certificate_signing_request
    return SigningRequestResponse(
        **_status_fields(result.status_code),
        certificate_signing_request=encode_csr_pem(csr) if csr is not None else None,
    )


@router.get("/rejected-certificates", dependencies=[Depends(with_correlation_id)])
async def get_rejected_certificates(_operator: Operator, client: Client) -> RejectedListResponse:
    """List certificates the server has rejected."""
    result = await client.get_rejected_list()
    if result.certificates is None:
        return RejectedListResponse(**_status_fields(result.status_code))

    certificates = []
    for der in result.certificates:
        summary = summarize_certificate(der)
        fields: dict[str, str | datetime] = {}
        if summary is not None:
            fields = {
                "subject": summary.subject,
                "issuer": summary.issuer,
                "serial_number": format(summary.serial_number, "x"),
                "not_after": summary.not_after,
            }
        certificates.append(RejectedCertificate(der=base64.b64encode(der).decode("ascii"), **fields))

    return RejectedListResponse(**_status_fields(result.status_code), certificates=certificates)


@router.post("/certificate", dependencies=[Depends(with_correlation_id)])
async def update_certificate(
    body: UpdateCertificateBody,
    _operator: Operator,
    client: Client,
    settings: CurrentSettings,
) -> UpdateCertificateResponse:
    """Upload a new server certificate, optionally with a new private key."""
    group_id, type_id = await _resolve_target(client, settings, body.certificate_group, body.certificate_type)
    certificate = certificate_to_der(body.certificate)
    issuers = [certificate_to_der(issuer, argument="issuer_certificates") for issuer in body.issuer_certificates]
    private_key = _private_key_upload(body.private_key) if body.private_key is not None else None

    result = await client.update_certificate(group_id, type_id, certificate, issuers, private_key=private_key)

    return UpdateCertificateResponse(
        **_status_fields(result.status_code),
        apply_changes_required=result.apply_changes_required,
    )


@router.post("/apply-changes", dependencies=[Depends(with_correlation_id)])
async def apply_changes(_operator: Operator, client: Client) -> StatusResponse:
    """Tell the server to apply pending security changes."""
    status_code = await client.apply_changes()
    return StatusResponse(**_status_fields(status_code))


@router.get("/certificate-groups/{name}", dependencies=[Depends(with_correlation_id)])
async def get_certificate_group(name: str, _operator: Operator, client: Client) -> CertificateGroupResponse:
    """Resolve a certificate group name to its NodeId."""
    node_id = await client.get_certificate_group_id(name)
    return CertificateGroupResponse(name=name, node_id=str(node_id))
