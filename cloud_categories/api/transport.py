"""HTTP transport posting GraphQL requests to an AppSync-style endpoint."""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from aiohttp import ClientError, ClientSession

from ..const import (
    AUTH_MODE_API_KEY,
    AUTH_MODE_BEARER,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    RETRYABLE_STATUSES,
)
from ..utils.logging import warn_once
from .errors import APIError
from .request import GraphQLRequest

_LOGGER = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str] | str]


class AppSyncHTTPTransport:
    """Submit GraphQL requests with :mod:`aiohttp`.

    Rate limiting, server errors, timeouts and connection failures are
    retried with exponential backoff. Authorization failures and other client
    errors are raised immediately.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        session: ClientSession | None = None,
        auth_mode: str = AUTH_MODE_API_KEY,
        api_key: str | None = None,
        token_provider: TokenProvider | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_delay: float = 1.0,
    ) -> None:
        self._endpoint = endpoint
        self._session = session
        self._owns_session = session is None
        self._session_loop: asyncio.AbstractEventLoop | None = None
        self._auth_mode = auth_mode
        self._api_key = (api_key or "").strip()
        self._token_provider = token_provider
        self._timeout = timeout
        self._max_retries = max(0, max_retries)
        self._initial_delay = initial_delay

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _get_session(self) -> ClientSession:
        if not self._owns_session:
            assert self._session is not None
            return self._session
        loop = asyncio.get_running_loop()
        if self._session is None or self._session.closed or self._session_loop is not loop:
            self._session = ClientSession()
            self._session_loop = loop
        return self._session

    async def async_close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None
            self._session_loop = None

    async def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._auth_mode == AUTH_MODE_API_KEY:
            if not self._api_key:
                raise APIError("API key authorization requires an api_key", reason="not_configured")
            headers["x-api-key"] = self._api_key
        elif self._auth_mode == AUTH_MODE_BEARER:
            if self._token_provider is None:
                raise APIError("Bearer authorization requires a token provider", reason="not_configured")
            token = self._token_provider()
            if inspect.isawaitable(token):
                token = await token
            headers["Authorization"] = f"Bearer {token}"
        return headers

    # ------------------------------------------------------------------
    async def async_submit(self, request: GraphQLRequest) -> Mapping[str, Any]:
        session = self._get_session()
        headers = await self._headers()
        payload = {"query": request.document, "variables": request.variables}

        delay = self._initial_delay
        for attempt in range(self._max_retries + 1):
            try:
                async with asyncio.timeout(self._timeout):
                    result = await self._attempt(session, payload, headers)
            except (TimeoutError, ClientError) as err:
                result = APIError(f"GraphQL request failed: {str(err) or type(err).__name__}", reason="network")
            if not isinstance(result, APIError):
                return result
            warn_once(_LOGGER, f"graphql_{result.status or result.reason}", str(result))
            if attempt == self._max_retries:
                raise result
            await asyncio.sleep(delay + 0.25 * random.random())
            delay = min(delay * 2, 30)

        raise APIError("GraphQL request was not attempted", reason="network")  # pragma: no cover

    async def _attempt(
        self, session: ClientSession, payload: Mapping[str, Any], headers: Mapping[str, str]
    ) -> Mapping[str, Any] | APIError:
        """Run one POST; return a retryable error instead of raising it."""

        async with session.post(self._endpoint, json=payload, headers=headers) as resp:
            if resp.status in {401, 403}:
                raise APIError(
                    f"GraphQL request not authorized: HTTP {resp.status}",
                    reason="not_authorized",
                    status=resp.status,
                )
            if resp.status in RETRYABLE_STATUSES:
                return APIError(f"GraphQL service unavailable: HTTP {resp.status}", reason="http_error", status=resp.status)
            if resp.status >= 400:
                text = await resp.text()
                raise APIError(f"GraphQL request failed: HTTP {resp.status} {text}", reason="http_error", status=resp.status)
            try:
                data = await resp.json(content_type=None)
            except ValueError as err:
                raise APIError(f"GraphQL response is not JSON: {err}", reason="invalid_response") from err
        if not isinstance(data, Mapping):
            raise APIError("GraphQL response is not an object", reason="invalid_response")
        return data


__all__ = ["AppSyncHTTPTransport", "TokenProvider"]
