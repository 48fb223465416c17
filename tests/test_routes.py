"""Integration tests for the administration API.

Tests the full request/response cycle against a fake session.
"""

from __future__ import annotations

import base64
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID
from fastapi.testclient import TestClient

from certmgmt_adapter.auth.handler import hash_password_for_config
from certmgmt_adapter.config import AuditConfig, AuthConfig, BasicAuthUser, SessionConfig, Settings
from certmgmt_adapter.exceptions import ConfigurationError
from certmgmt_adapter.main import create_app
from certmgmt_adapter.protocol.node_id import NodeId, ObjectIds
from certmgmt_adapter.protocol.status import StatusCodes
from certmgmt_adapter.protocol.variant import DataType, Variant, VariantArrayType

if TYPE_CHECKING:
    from conftest import FakeSession

# --- Fixtures ---


@pytest.fixture(scope="module")
def certificate() -> x509.Certificate:
    """Certificate to upload."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Boiler Server")])
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(datetime.now(UTC))
        .not_valid_after(datetime.now(UTC) + timedelta(days=365))
        .sign(key, hashes.SHA256())
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with one operator and audit log in a temp dir."""
    password_hash = hash_password_for_config("testpass", rounds=4)
    return Settings(
        auth=AuthConfig(users=[BasicAuthUser(username="operator", password_hash=password_hash)]),
        audit=AuditConfig(log_file=tmp_path / "audit.log"),
    )


@pytest.fixture
def client(settings: Settings, fake_session: FakeSession) -> Generator[TestClient, None, None]:
    """Test client for the app wired to the fake session."""
    with patch("certmgmt_adapter.main.log_startup"), patch("certmgmt_adapter.main.log_shutdown"):
        app = create_app(settings, session=fake_session)
        with TestClient(app) as c:
            yield c


@pytest.fixture
def auth_header() -> dict[str, str]:
    """Authorization header for operator:testpass."""
    credentials = base64.b64encode(b"operator:testpass").decode()
    return {"Authorization": f"Basic {credentials}"}


# --- Health / auth ---


class TestHealthAndAuth:
    """Tests for health check and authentication."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_missing_credentials_rejected(self, client: TestClient, fake_session: FakeSession) -> None:
        response = client.post("/server-configuration/apply-changes")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Basic"
        assert fake_session.calls == []

    def test_wrong_password_rejected(self, client: TestClient) -> None:
        credentials = base64.b64encode(b"operator:nope").decode()

        response = client.get(
            "/server-configuration/rejected-certificates",
            headers={"Authorization": f"Basic {credentials}"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"


# --- Signing request ---


class TestSigningRequest:
    """Tests for POST /server-configuration/signing-request."""

    def test_returns_pem_signing_request(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
    ) -> None:
        fake_session.reply(StatusCodes.GOOD, Variant(DataType.BYTE_STRING, b"\xaa\xbb"))

        response = client.post(
            "/server-configuration/signing-request",
            json={"subject_name": "CN=Boiler/O=Plant"},
            headers=auth_header,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "Good"
        assert body["status_code"] == 0
        assert body["certificate_signing_request"].startswith("-----BEGIN CERTIFICATE REQUEST-----")

        inputs = fake_session.calls[0].input_arguments
        assert inputs[0].value == ObjectIds.DEFAULT_APPLICATION_GROUP
        assert inputs[1].value == NodeId(0, 12560)
        assert inputs[4].data_type == DataType.NULL

    def test_nonce_forwarded(self, client: TestClient, fake_session: FakeSession, auth_header: dict[str, str]) -> None:
        fake_session.reply(StatusCodes.BAD_USER_ACCESS_DENIED)
        nonce = bytes(range(32))

        response = client.post(
            "/server-configuration/signing-request",
            json={"regenerate_private_key": True, "nonce": base64.b64encode(nonce).decode()},
            headers=auth_header,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "BadUserAccessDenied"
        assert response.json()["certificate_signing_request"] is None
        assert fake_session.calls[0].input_arguments[4].value == nonce

    def test_unknown_group_not_implemented(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
    ) -> None:
        response = client.post(
            "/server-configuration/signing-request",
            json={"certificate_group": "DefaultHttpsGroup"},
            headers=auth_header,
        )

        assert response.status_code == 501
        assert fake_session.calls == []

    def test_unknown_certificate_type_bad_request(self, client: TestClient, auth_header: dict[str, str]) -> None:
        response = client.post(
            "/server-configuration/signing-request",
            json={"certificate_type": "DsaCertificateType"},
            headers=auth_header,
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("nonce", ["not base64!", "é" * 44])
    def test_undecodable_nonce_bad_request(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
        nonce: str,
    ) -> None:
        response = client.post(
            "/server-configuration/signing-request",
            json={"regenerate_private_key": True, "nonce": nonce},
            headers=auth_header,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidArgumentsError"
        assert response.json()["details"]["argument"] == "nonce"
        assert fake_session.calls == []


# --- Rejected list ---


class TestRejectedCertificates:
    """Tests for GET /server-configuration/rejected-certificates."""

    def test_lists_certificates_with_summary(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
        certificate: x509.Certificate,
    ) -> None:
        der = certificate.public_bytes(Encoding.DER)
        fake_session.reply(StatusCodes.GOOD, Variant(DataType.BYTE_STRING, [der, b"junk"], VariantArrayType.ARRAY))

        response = client.get("/server-configuration/rejected-certificates", headers=auth_header)

        assert response.status_code == 200
        certificates = response.json()["certificates"]
        assert len(certificates) == 2
        assert base64.b64decode(certificates[0]["der"]) == der
        assert certificates[0]["subject"] == "CN=Boiler Server"
        assert certificates[1]["subject"] is None

    def test_malformed_reply_reported_as_status(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
    ) -> None:
        fake_session.reply(StatusCodes.GOOD, Variant(DataType.STRING, "oops"))

        response = client.get("/server-configuration/rejected-certificates", headers=auth_header)

        assert response.status_code == 200
        assert response.json()["status"] == "BadInvalidArgument"
        assert response.json()["certificates"] is None


# --- Update certificate ---


class TestUpdateCertificate:
    """Tests for POST /server-configuration/certificate."""

    def test_pem_certificate_sent_as_der(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
        certificate: x509.Certificate,
    ) -> None:
        fake_session.reply(StatusCodes.GOOD, Variant(DataType.BOOLEAN, True))
        pem = certificate.public_bytes(Encoding.PEM).decode()

        response = client.post(
            "/server-configuration/certificate",
            json={"certificate": pem, "issuer_certificates": [pem]},
            headers=auth_header,
        )

        assert response.status_code == 200
        assert response.json()["apply_changes_required"] is True
        inputs = fake_session.calls[0].input_arguments
        der = certificate.public_bytes(Encoding.DER)
        assert inputs[2].value == der
        assert inputs[3].value == (der,)
        assert inputs[4].data_type == DataType.NULL
        assert inputs[5].data_type == DataType.NULL

    def test_private_key_forwarded(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
        certificate: x509.Certificate,
    ) -> None:
        fake_session.reply(StatusCodes.GOOD, Variant(DataType.BOOLEAN, False))
        pfx = b"\x30\x82\x01\x00"

        response = client.post(
            "/server-configuration/certificate",
            json={
                "certificate": base64.b64encode(certificate.public_bytes(Encoding.DER)).decode(),
                "private_key": {"format": "PFX", "key": base64.b64encode(pfx).decode()},
            },
            headers=auth_header,
        )

        assert response.status_code == 200
        inputs = fake_session.calls[0].input_arguments
        assert inputs[4] == Variant(DataType.STRING, "PFX")
        assert inputs[5] == Variant(DataType.BYTE_STRING, pfx)

    def test_invalid_certificate_bad_request(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
    ) -> None:
        response = client.post(
            "/server-configuration/certificate",
            json={"certificate": "not a certificate"},
            headers=auth_header,
        )

        assert response.status_code == 400
        assert fake_session.calls == []

    @pytest.mark.parametrize("key", ["not base64!", "é" * 44])
    def test_undecodable_pfx_key_bad_request(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
        certificate: x509.Certificate,
        key: str,
    ) -> None:
        response = client.post(
            "/server-configuration/certificate",
            json={
                "certificate": base64.b64encode(certificate.public_bytes(Encoding.DER)).decode(),
                "private_key": {"format": "PFX", "key": key},
            },
            headers=auth_header,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidArgumentsError"
        assert response.json()["details"]["argument"] == "private_key"
        assert fake_session.calls == []


# --- Apply changes ---


class TestApplyChanges:
    """Tests for POST /server-configuration/apply-changes."""

    def test_good(self, client: TestClient, fake_session: FakeSession, auth_header: dict[str, str]) -> None:
        fake_session.reply(StatusCodes.GOOD)

        response = client.post("/server-configuration/apply-changes", headers=auth_header)

        assert response.status_code == 200
        assert response.json() == {"status": "Good", "status_code": 0}

    def test_protocol_violation_is_bad_gateway(
        self,
        client: TestClient,
        fake_session: FakeSession,
        auth_header: dict[str, str],
    ) -> None:
        fake_session.reply(StatusCodes.GOOD, Variant(DataType.BOOLEAN, True))

        response = client.post("/server-configuration/apply-changes", headers=auth_header)

        assert response.status_code == 502
        assert response.json()["error"] == "ProtocolViolationError"


# --- Certificate groups ---


class TestCertificateGroups:
    """Tests for GET /server-configuration/certificate-groups/{name}."""

    def test_default_group(self, client: TestClient, auth_header: dict[str, str]) -> None:
        response = client.get("/server-configuration/certificate-groups/DefaultApplicationGroup", headers=auth_header)

        assert response.status_code == 200
        assert response.json() == {"name": "DefaultApplicationGroup", "node_id": "i=14156"}

    def test_other_group(self, client: TestClient, auth_header: dict[str, str]) -> None:
        response = client.get("/server-configuration/certificate-groups/DefaultUserTokenGroup", headers=auth_header)

        assert response.status_code == 501
        assert response.json()["details"]["status_code"] == StatusCodes.BAD_NOT_IMPLEMENTED.value


# --- App factory ---


class TestCreateApp:
    """Tests for session wiring in create_app."""

    def test_missing_session_factory(self, settings: Settings) -> None:
        with pytest.raises(ConfigurationError, match="session.factory"):
            create_app(settings)

    def test_session_factory_loaded(self, settings: Settings) -> None:
        configured = settings.model_copy(update={"session": SessionConfig(factory="conftest:FakeSession")})

        app = create_app(configured)

        assert app.title == "Certificate Management Adapter"

    def test_unimportable_session_factory(self, settings: Settings) -> None:
        configured = settings.model_copy(update={"session": SessionConfig(factory="no_such_module:connect")})

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            create_app(configured)
