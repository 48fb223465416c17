"""Certificate Management Adapter - OPC UA pull certificate management client.

Drives the CreateSigningRequest, GetRejectedList, UpdateCertificate and
ApplyChanges methods of a server's ServerConfiguration object through an
externally supplied secure session.
"""

__version__ = "0.1.0"
