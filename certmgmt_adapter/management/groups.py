"""Certificate group name resolution.

Only the DefaultApplicationGroup is resolved. Other groups would need a
browse of the CertificateGroups folder, which this adapter does not do.
"""

from __future__ import annotations

from certmgmt_adapter.exceptions import CertificateGroupNotImplementedError
from certmgmt_adapter.protocol.node_id import NodeId, ObjectIds

DEFAULT_APPLICATION_GROUP = "DefaultApplicationGroup"


def resolve_certificate_group_id(name: str) -> NodeId:
    """Map a certificate group name to its NodeId.

    Raises:
        CertificateGroupNotImplementedError: For any name other than
            DefaultApplicationGroup.
    """
    if name == DEFAULT_APPLICATION_GROUP:
        return ObjectIds.DEFAULT_APPLICATION_GROUP
    raise CertificateGroupNotImplementedError.unknown_group(name=name)
