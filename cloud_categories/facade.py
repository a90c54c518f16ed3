"""Wire the API, data store and auth categories around one decoder registry."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, TypeVar

from aiohttp import ClientSession

from .api import APICategory, AppSyncHTTPTransport, AppSyncListDecoder, GraphQLTransport
from .api.transport import TokenProvider
from .auth import AuthenticationProvider, AuthenticationProviderAdapter
from .collection import ListDecoderRegistry, Model, ModelList
from .config import CategoriesConfig, ConfigurationError
from .const import AUTH_MODE_API_KEY, AUTH_MODE_BEARER
from .datastore import AssociationListDecoder, LocalModelStore

_LOGGER = logging.getLogger(__name__)

M = TypeVar("M", bound=Model)


class CloudCategories:
    """Own the categories configured from a :class:`CategoriesConfig`.

    The association decoder is registered ahead of the remote list decoder,
    so payloads referencing a local owner are never mistaken for remote pages.
    """

    def __init__(
        self,
        config: CategoriesConfig,
        *,
        session: ClientSession | None = None,
        auth_provider: AuthenticationProvider | None = None,
        token_provider: TokenProvider | None = None,
        transport: GraphQLTransport | None = None,
    ) -> None:
        if transport is None and config.api_auth_mode == AUTH_MODE_BEARER and token_provider is None:
            raise ConfigurationError("bearer authorization requires a token_provider")
        if transport is None and config.api_auth_mode == AUTH_MODE_API_KEY and not config.api_key:
            raise ConfigurationError("api_key authorization requires an api_key")
        self.config = config
        self.registry = ListDecoderRegistry()
        self.store = LocalModelStore(config.datastore_path, registry=self.registry)
        if transport is None:
            transport = AppSyncHTTPTransport(
                config.api_endpoint,
                session=session,
                auth_mode=config.api_auth_mode,
                api_key=config.api_key,
                token_provider=token_provider,
                timeout=config.request_timeout,
                max_retries=config.max_retries,
            )
        self.api = APICategory(transport, self.registry)
        self.auth = AuthenticationProviderAdapter(auth_provider) if auth_provider is not None else None

        self.registry.register(AssociationListDecoder(self.store, default_limit=config.list_limit))
        self.registry.register(AppSyncListDecoder(self.api))

    async def async_start(self) -> None:
        self.api.bind_loop(asyncio.get_running_loop())
        _LOGGER.debug("Cloud categories started for %s", self.config.api_endpoint)

    async def async_stop(self) -> None:
        self.api.bind_loop(None)
        try:
            await self.api.async_close()
        finally:
            self.store.close()
        _LOGGER.debug("Cloud categories stopped")

    def decode_list(self, payload: Any, model_type: type[M]) -> ModelList[M]:
        return self.registry.decode(payload, model_type)


__all__ = ["CloudCategories"]
