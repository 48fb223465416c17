"""Shared fixtures: an in-memory session standing in for the secure channel."""

from __future__ import annotations

import pytest

from certmgmt_adapter.protocol.call import CallMethodRequest, CallMethodResult
from certmgmt_adapter.protocol.status import StatusCode
from certmgmt_adapter.protocol.variant import Variant


class FakeSession:
    """Session returning queued outcomes and recording every call."""

    def __init__(self) -> None:
        self.calls: list[CallMethodRequest] = []
        self._replies: list[CallMethodResult | BaseException] = []

    def reply(self, status_code: StatusCode, *outputs: Variant) -> None:
        """Queue the outcome of the next call."""
        self._replies.append(CallMethodResult(status_code=status_code, output_arguments=outputs))

    def fail(self, error: BaseException) -> None:
        """Make the next call raise, as a broken channel would."""
        self._replies.append(error)

    async def call(self, method_to_call: CallMethodRequest) -> CallMethodResult:
        self.calls.append(method_to_call)
        reply = self._replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def fake_session() -> FakeSession:
    """Fresh fake session with no queued replies."""
    return FakeSession()
