from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class FakeTransport:
    """Replays queued GraphQL responses and records submitted requests."""

    def __init__(self, *responses: Mapping[str, Any] | Exception) -> None:
        self.responses = list(responses)
        self.requests: list[Any] = []
        self.closed = False

    def queue(self, *responses: Mapping[str, Any] | Exception) -> None:
        self.responses.extend(responses)

    async def async_submit(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def async_close(self) -> None:
        self.closed = True
