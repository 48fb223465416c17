"""Pull certificate management client for an OPC UA server.

Drives the ServerConfiguration object's certificate methods. Every method
here requires the session to use an encrypted channel and credentials with
administrative rights on the server; that is the session's responsibility.

Typical renewal sequence::

    client = PullCertificateManagementClient(session)
    group = await client.get_certificate_group_id("DefaultApplicationGroup")
    csr = await client.create_signing_request(group, cert_type, "CN=App/O=Org")
    # ... have a CA sign csr.certificate_signing_request ...
    update = await client.update_certificate(group, cert_type, cert_der, [ca_der])
    if update.apply_changes_required:
        await client.apply_changes()
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar

from certmgmt_adapter.management.arguments import (
    CreateSigningRequestArguments,
    PrivateKeyUpload,
    UpdateCertificateArguments,
    apply_changes_request,
    get_rejected_list_request,
)
from certmgmt_adapter.management.groups import resolve_certificate_group_id
from certmgmt_adapter.management.interpreter import (
    interpret_apply_changes,
    interpret_create_signing_request,
    interpret_get_rejected_list,
    interpret_update_certificate,
)
from certmgmt_adapter.management.results import (
    CreateSigningRequestResult,
    GetRejectedListResult,
    UpdateCertificateResult,
)
from certmgmt_adapter.protocol.call import MethodDispatcher, Session
from certmgmt_adapter.protocol.node_id import CERTIFICATE_TYPES, NodeId
from certmgmt_adapter.protocol.status import StatusCode


class PullCertificateManagementClient:
    """Client side of the ServerConfiguration certificate methods.

    Holds no state besides the session. Calls are independent; whether they
    may be interleaved on one session is up to the session.
    """

    RSA_SHA256_APPLICATION_CERTIFICATE_TYPE: ClassVar[NodeId] = CERTIFICATE_TYPES[
        "RsaSha256ApplicationCertificateType"
    ]

    def __init__(self, session: Session) -> None:
        """Initialize with a secure session.

        Args:
            session: Session collaborator that performs the method calls.
        """
        self._dispatcher = MethodDispatcher(session)

    @property
    def session(self) -> Session:
        return self._dispatcher.session

    async def create_signing_request(
        self,
        certificate_group_id: NodeId | None,
        certificate_type_id: NodeId,
        subject_name: str,
        regenerate_private_key: bool = False,
        nonce: bytes | None = None,
    ) -> CreateSigningRequestResult:
        """Ask the server for a PKCS #10 DER encoded certificate request.

        The request is signed with the server's private key and can be sent
        to a CA expecting requests in this format.

        Args:
            certificate_group_id: Certificate group affected. None selects the
                DefaultApplicationGroup.
            certificate_type_id: Type of certificate being requested; must be
                one of the group's CertificateTypes.
            subject_name: X.500 name pairs separated by '/'. Application
                certificate subjects need an O= or DC= field. Pass a blank
                string to let the server generate a suitable default; a null
                subject cannot be sent.
            regenerate_private_key: If True the server creates a new private
                key and keeps it until the matching certificate is uploaded
                with update_certificate.
            nonce: Additional entropy, at least 32 bytes, to be supplied when
                regenerate_private_key is True.

        Returns:
            Result with the signing request when the status is Good. The
            server reports BadInvalidArgument for an invalid group, type or
            subject, and BadUserAccessDenied without administrative rights.
        """
        arguments = CreateSigningRequestArguments(
            certificate_group_id=certificate_group_id,
            certificate_type_id=certificate_type_id,
            subject_name=subject_name,
            regenerate_private_key=regenerate_private_key,
            nonce=nonce,
        )
        result = await self._dispatcher.submit(arguments.to_call_request())
        return interpret_create_signing_request(result)

    async def get_rejected_list(self) -> GetRejectedListResult:
        """Get the certificates the server has rejected.

        The server decides how long certificates stay in this list and may
        omit older entries if the reply would exceed its message size.

        Returns:
            Result with the DER encoded certificates when the status is Good.
        """
        result = await self._dispatcher.submit(get_rejected_list_request())
        return interpret_get_rejected_list(result)

    async def update_certificate(
        self,
        certificate_group_id: NodeId | None,
        certificate_type_id: NodeId,
        certificate: bytes,
        issuer_certificates: Sequence[bytes],
        private_key: PrivateKeyUpload | None = None,
    ) -> UpdateCertificateResult:
        """Replace a certificate of the server.

        Use without a private key when the certificate was signed from a
        create_signing_request request or from the old certificate's data.
        Pass a private key when both were created outside the server.

        The server checks the certificate and its issuers and reports
        BadSecurityChecksFailed on errors, or an error when the public key
        does not match the current certificate and no private key was given.

        Args:
            certificate_group_id: Certificate group affected. None selects the
                DefaultApplicationGroup.
            certificate_type_id: Type of certificate being updated.
            certificate: DER encoded replacement certificate.
            issuer_certificates: DER encoded issuer certificates needed to
                verify the new certificate's signature.
            private_key: New private key with its format (PEM or PFX).

        Returns:
            Result telling whether apply_changes must be called before the new
            certificate is used.
        """
        arguments = UpdateCertificateArguments(
            certificate_group_id=certificate_group_id,
            certificate_type_id=certificate_type_id,
            certificate=certificate,
            issuer_certificates=tuple(issuer_certificates),
            private_key=private_key,
        )
        result = await self._dispatcher.submit(arguments.to_call_request())
        return interpret_update_certificate(result)

    async def apply_changes(self) -> StatusCode:
        """Tell the server to apply pending security changes.

        Only needed after a call that returned apply_changes_required=True.
        Secure channels using an old server certificate will be interrupted,
        so callers should expect to reconnect.

        Returns:
            The status reported by the server, e.g. BadUserAccessDenied.

        Raises:
            ProtocolViolationError: If the server returned output arguments.
        """
        result = await self._dispatcher.submit(apply_changes_request())
        return interpret_apply_changes(result)

    async def get_certificate_group_id(self, certificate_group_name: str) -> NodeId:
        """Resolve a certificate group name to its NodeId.

        Raises:
            CertificateGroupNotImplementedError: For any group other than
                DefaultApplicationGroup.
        """
        return resolve_certificate_group_id(certificate_group_name)
