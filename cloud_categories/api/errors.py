"""Errors raised by the API category."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class APIError(RuntimeError):
    """Raised when a request cannot be completed by the transport or the service."""

    def __init__(self, message: str, *, reason: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.status = status


class GraphQLResponseError(APIError):
    """Raised when the service answers with GraphQL ``errors``."""

    def __init__(self, errors: Sequence[Any], *, data: Any = None) -> None:
        messages = [
            str(error.get("message")) if isinstance(error, dict) and error.get("message") else str(error)
            for error in errors
        ]
        super().__init__("; ".join(messages) or "GraphQL request failed", reason="graphql_error")
        self.errors = list(errors)
        self.data = data


class FilterReconstructionError(TypeError):
    """Raised when a stored list filter cannot be re-encoded for the next page.

    A programming error in whoever built the previous request; it is not an
    :class:`APIError`.
    """


__all__ = ["APIError", "FilterReconstructionError", "GraphQLResponseError"]
