"""API category: issue GraphQL model queries and decode their results."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Mapping
from typing import Any, Protocol, TypeVar, cast

from ..collection.model import Model, ModelDecodeError, QueryPredicate
from ..collection.model_list import ModelList
from ..collection.registry import ListDecoderRegistry
from ..const import KEY_DATA, KEY_DOCUMENT, KEY_GRAPHQL_DATA, KEY_VARIABLES
from .errors import APIError, GraphQLResponseError
from .request import GraphQLRequest, RequestKind, get_request, list_request

_LOGGER = logging.getLogger(__name__)

M = TypeVar("M", bound=Model)
T = TypeVar("T")


class GraphQLTransport(Protocol):
    """Delivers one request and returns the raw GraphQL response object."""

    async def async_submit(self, request: GraphQLRequest) -> Mapping[str, Any]: ...

    async def async_close(self) -> None: ...


class APICategory:
    """Query models over a :class:`GraphQLTransport`.

    The coroutine methods are the primary interface. :meth:`query` blocks the
    calling thread until the single response arrives: when a loop is bound
    (see :meth:`bind_loop`) the query is scheduled on it and the caller waits
    on the resulting future, otherwise the query runs on a fresh loop and the
    transport is closed before that loop ends. It must not be called from the
    thread running the bound loop.
    """

    def __init__(
        self,
        transport: GraphQLTransport,
        registry: ListDecoderRegistry,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._transport = transport
        self._registry = registry
        self._loop = loop

    @property
    def registry(self) -> ListDecoderRegistry:
        return self._registry

    def bind_loop(self, loop: asyncio.AbstractEventLoop | None) -> None:
        self._loop = loop

    # ------------------------------------------------------------------
    async def async_query(self, request: GraphQLRequest) -> ModelList[Any] | Model | None:
        _LOGGER.debug("Submitting %s query %s", request.kind.value, request.decode_path)
        response = await self._transport.async_submit(request)
        errors = response.get("errors")
        if errors:
            raise GraphQLResponseError(errors if isinstance(errors, list) else [errors], data=response.get(KEY_DATA))
        data = response.get(KEY_DATA)
        if not isinstance(data, Mapping):
            raise APIError("GraphQL response is missing data", reason="invalid_response")
        value = data.get(request.decode_path)

        if request.kind is RequestKind.LIST:
            envelope = {
                KEY_DOCUMENT: request.document,
                KEY_VARIABLES: dict(request.variables),
                KEY_GRAPHQL_DATA: value,
            }
            return self._registry.decode(envelope, request.model_type)

        if value is None:
            return None
        try:
            return request.model_type.from_payload(value, registry=self._registry)
        except ModelDecodeError as err:
            raise APIError(f"Could not decode {request.model_type.model_name()}: {err}", reason="invalid_response") from err

    def query(self, request: GraphQLRequest) -> ModelList[Any] | Model | None:
        """Blocking form of :meth:`async_query`."""

        return self._run_blocking(self.async_query(request))

    def _run_blocking(self, coro: Coroutine[Any, Any, T]) -> T:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        loop = self._loop
        if loop is not None and loop.is_running():
            if loop is running:
                coro.close()
                raise APIError("Blocking query issued from the API event loop would deadlock", reason="deadlock")
            future = asyncio.run_coroutine_threadsafe(coro, loop)
            return future.result()
        if running is not None:
            coro.close()
            raise APIError("Blocking query issued from a running event loop would deadlock", reason="deadlock")
        return asyncio.run(self._run_and_release(coro))

    async def _run_and_release(self, coro: Coroutine[Any, Any, T]) -> T:
        # Sessions opened on a throwaway loop cannot outlive it
        try:
            return await coro
        finally:
            await self._transport.async_close()

    # ------------------------------------------------------------------
    async def async_list(
        self,
        model_type: type[M],
        *,
        where: QueryPredicate | None = None,
        limit: int | None = None,
    ) -> ModelList[M]:
        request = list_request(model_type, where=where, limit=limit)
        return cast(ModelList[M], await self.async_query(request))

    async def async_get(self, model_type: type[M], model_id: str) -> M | None:
        return cast("M | None", await self.async_query(get_request(model_type, model_id)))

    async def async_close(self) -> None:
        await self._transport.async_close()


__all__ = ["APICategory", "GraphQLTransport"]
