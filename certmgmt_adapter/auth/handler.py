"""HTTP Basic authentication for the administration API.

Certificate management methods change the server's identity, so every
endpoint that reaches the session requires an authenticated operator.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass

import bcrypt

from certmgmt_adapter.audit.logger import log_auth_attempt
from certmgmt_adapter.config import AuthConfig

# Compared against when the username is unknown, so both paths cost one bcrypt check.
_DUMMY_HASH = "$2b$12$" + "0" * 53


@dataclass(frozen=True)
class AuthResult:
    """Result of authentication attempt."""

    authenticated: bool
    identity: str

    @classmethod
    def success(cls, identity: str) -> AuthResult:
        """Create successful authentication result."""
        return cls(authenticated=True, identity=identity)

    @classmethod
    def failure(cls) -> AuthResult:
        """Create failed authentication result."""
        return cls(authenticated=False, identity="")


class BasicAuthHandler:
    """HTTP Basic authentication handler."""

    def __init__(self, users: dict[str, str]) -> None:
        """Initialize with username to password hash mapping.

        Args:
            users: Dictionary mapping usernames to bcrypt password hashes.
        """
        self._users = users

    @classmethod
    def from_config(cls, config: AuthConfig) -> BasicAuthHandler:
        """Create handler from configuration."""
        users = {user.username: user.password_hash for user in config.users}
        return cls(users)

    def authenticate(self, authorization_header: str | None) -> AuthResult:
        """Authenticate using HTTP Basic credentials.

        Args:
            authorization_header: The Authorization header value.

        Returns:
            AuthResult indicating success or failure.
        """
        if not authorization_header:
            log_auth_attempt(method="basic", success=False, reason="no credentials")
            return AuthResult.failure()

        if not authorization_header.startswith("Basic "):
            log_auth_attempt(method="basic", success=False, reason="invalid auth scheme")
            return AuthResult.failure()

        try:
            decoded = base64.b64decode(authorization_header[6:], validate=True).decode("utf-8")
            username, password = decoded.split(":", 1)
        except (ValueError, UnicodeDecodeError):
            log_auth_attempt(method="basic", success=False, reason="malformed credentials")
            return AuthResult.failure()

        stored_hash = self._users.get(username)
        if not stored_hash:
            _verify_password("dummy", _DUMMY_HASH)
            log_auth_attempt(method="basic", success=False, username=username, reason="unknown user")
            return AuthResult.failure()

        if not _verify_password(password, stored_hash):
            log_auth_attempt(method="basic", success=False, username=username, reason="invalid password")
            return AuthResult.failure()

        log_auth_attempt(method="basic", success=True, username=username)
        return AuthResult.success(identity=username)


def _verify_password(password: str, stored_hash: str) -> bool:
    """Check a password against a bcrypt hash; malformed hashes never match."""
    try:
        return bool(bcrypt.checkpw(password.encode("utf-8"), stored_hash.encode("utf-8")))
    except ValueError:
        return False


def hash_password_for_config(password: str, rounds: int = 12) -> str:
    """Hash a password for use in configuration file.

    Args:
        password: Plain text password.
        rounds: bcrypt work factor.

    Returns:
        bcrypt hash suitable for config file.
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return str(bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8"))
