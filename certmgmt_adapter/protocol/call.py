"""Method call request/result values and the session they are sent through.

The session is an external collaborator: it owns the secure channel, the
encoding of the call, and any timeout or cancellation policy. This module
only defines the capability it must provide and the single await point where
it is used.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from certmgmt_adapter.audit.logger import log_method_call, log_method_result
from certmgmt_adapter.protocol.node_id import NodeId, method_name
from certmgmt_adapter.protocol.status import StatusCode
from certmgmt_adapter.protocol.variant import Variant


@dataclass(frozen=True)
class CallMethodRequest:
    """One fully built method call: target object, method, ordered inputs."""

    object_id: NodeId
    method_id: NodeId
    input_arguments: tuple[Variant, ...] = ()


@dataclass(frozen=True)
class CallMethodResult:
    """Raw outcome of one method call."""

    status_code: StatusCode
    output_arguments: tuple[Variant, ...] = ()


class Session(Protocol):
    """Capability consumed from the secure session collaborator."""

    async def call(self, method_to_call: CallMethodRequest) -> CallMethodResult:
        """Send a method call over an encrypted, authenticated channel."""
        ...


class MethodDispatcher:
    """Submits built method calls through a session.

    No retries, no timeout, no inspection of the call's arguments. Errors
    raised by the session propagate unchanged.
    """

    def __init__(self, session: Session) -> None:
        """Initialize with the session used for every call.

        Args:
            session: Secure session collaborator; never mutated here.
        """
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    async def submit(self, request: CallMethodRequest) -> CallMethodResult:
        """Send one call and await its outcome.

        Args:
            request: The call to send.

        Returns:
            The outcome produced by the server.
        """
        name = method_name(request.method_id)
        log_method_call(
            method=name,
            object_id=str(request.object_id),
            argument_count=len(request.input_arguments),
        )

        result = await self._session.call(request)

        log_method_result(
            method=name,
            status=result.status_code.name,
            good=result.status_code.is_good,
            output_count=len(result.output_arguments),
        )
        return result
