"""NodeId values and the well-known identifiers of the ServerConfiguration object.

The numeric identifiers below are registered in namespace 0 by the OPC UA
specification (Part 12) and must match bit-exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from certmgmt_adapter.exceptions import InvalidArgumentsError

# ns=<n>;i=<n> | ns=<n>;s=<text> | i=<n> | s=<text>
_NODE_ID_PATTERN = re.compile(r"^(?:ns=(?P<ns>\d+);)?(?P<kind>[is])=(?P<ident>.+)$")


class IdentifierType(str, Enum):
    """NodeId identifier encodings supported by this adapter."""

    NUMERIC = "i"
    STRING = "s"


@dataclass(frozen=True)
class NodeId:
    """Opaque reference to a node in a server address space."""

    namespace: int
    identifier: int | str
    identifier_type: IdentifierType = IdentifierType.NUMERIC

    @classmethod
    def null(cls) -> NodeId:
        """The null NodeId (ns=0;i=0)."""
        return cls(0, 0)

    @property
    def is_null(self) -> bool:
        return self.namespace == 0 and self.identifier_type == IdentifierType.NUMERIC and self.identifier == 0

    def __str__(self) -> str:
        prefix = f"ns={self.namespace};" if self.namespace else ""
        return f"{prefix}{self.identifier_type.value}={self.identifier}"


def resolve_node_id(value: NodeId | int | str) -> NodeId:
    """Resolve a NodeId from its text form, a numeric id, or a NodeId.

    Args:
        value: A NodeId, a namespace 0 numeric identifier, or text such as
            ``i=12637``, ``ns=2;i=5`` or ``ns=1;s=Boiler``.

    Returns:
        The resolved NodeId.

    Raises:
        InvalidArgumentsError: If the text cannot be parsed.
    """
    if isinstance(value, NodeId):
        return value
    if isinstance(value, bool):
        raise InvalidArgumentsError.malformed_node_id(value=str(value))
    if isinstance(value, int):
        return NodeId(0, value)
    if not isinstance(value, str):
        raise InvalidArgumentsError.malformed_node_id(value=repr(value))

    match = _NODE_ID_PATTERN.match(value.strip())
    if match is None:
        raise InvalidArgumentsError.malformed_node_id(value=value)

    namespace = int(match.group("ns") or 0)
    ident = match.group("ident")
    if match.group("kind") == IdentifierType.NUMERIC.value:
        if not ident.isdigit():
            raise InvalidArgumentsError.malformed_node_id(value=value)
        return NodeId(namespace, int(ident))
    return NodeId(namespace, ident, IdentifierType.STRING)


class ObjectIds:
    """Registered identifiers used by pull certificate management."""

    SERVER_CONFIGURATION = resolve_node_id("i=12637")
    SERVER_CONFIGURATION_CREATE_SIGNING_REQUEST = resolve_node_id("i=12737")
    SERVER_CONFIGURATION_APPLY_CHANGES = resolve_node_id("i=12740")
    SERVER_CONFIGURATION_GET_REJECTED_LIST = resolve_node_id("i=12777")
    SERVER_CONFIGURATION_UPDATE_CERTIFICATE = resolve_node_id("i=13737")
    SERVER_CONFIGURATION_CERTIFICATE_GROUPS = resolve_node_id("i=14053")
    DEFAULT_APPLICATION_GROUP = resolve_node_id("i=14156")


# Certificate types usable with the DefaultApplicationGroup
CERTIFICATE_TYPES: dict[str, NodeId] = {
    "ApplicationCertificateType": resolve_node_id("i=12557"),
    "HttpsCertificateType": resolve_node_id("i=12558"),
    "RsaMinApplicationCertificateType": resolve_node_id("i=12559"),
    "RsaSha256ApplicationCertificateType": resolve_node_id("i=12560"),
}

_METHOD_NAMES: dict[NodeId, str] = {
    ObjectIds.SERVER_CONFIGURATION_CREATE_SIGNING_REQUEST: "CreateSigningRequest",
    ObjectIds.SERVER_CONFIGURATION_APPLY_CHANGES: "ApplyChanges",
    ObjectIds.SERVER_CONFIGURATION_GET_REJECTED_LIST: "GetRejectedList",
    ObjectIds.SERVER_CONFIGURATION_UPDATE_CERTIFICATE: "UpdateCertificate",
}


def resolve_certificate_type(name: str) -> NodeId:
    """Resolve a certificate type name to its registered NodeId.

    Raises:
        InvalidArgumentsError: If the name is not a known certificate type.
    """
    try:
        return CERTIFICATE_TYPES[name]
    except KeyError:
        raise InvalidArgumentsError.unknown_certificate_type(name=name, allowed=list(CERTIFICATE_TYPES)) from None


def method_name(method_id: NodeId) -> str:
    """Display name of a ServerConfiguration method, for logging."""
    return _METHOD_NAMES.get(method_id, str(method_id))
