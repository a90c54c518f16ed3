"""Decode remote list responses and fetch the pages that follow them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar, cast

from ..collection.json_value import JSONValue, as_array, as_object
from ..collection.model import Model, ModelDecodeError
from ..collection.model_list import ModelList, PaginationError, RemotePage
from ..collection.registry import ListDecoderRegistry, decode_elements
from ..const import KEY_ITEMS
from .payload import AppSyncListPayload
from .request import GraphQLRequest, next_page_request

if TYPE_CHECKING:
    from .category import APICategory

_LOGGER = logging.getLogger(__name__)

M = TypeVar("M", bound=Model)


class AppSyncListDecoder:
    """List decoder and page fetcher for GraphQL list query results.

    Accepted shapes, tried in order:

    1. an :class:`AppSyncListPayload` envelope; the resulting list keeps the
       cursor, document and variables so the next page can be requested;
    2. a bare ``{"items": [...]}`` object, which carries no pagination state;
    3. a plain array of elements.
    """

    def __init__(self, api: APICategory | None = None) -> None:
        self._api = api

    # ------------------------------------------------------------------
    def should_decode(self, payload: JSONValue) -> bool:
        obj = as_object(payload)
        if obj is None:
            return False
        if as_array(obj.get(KEY_ITEMS)) is not None:
            return True
        return AppSyncListPayload.from_json(obj) is not None

    def decode(self, payload: JSONValue, model_type: type[M], registry: ListDecoderRegistry) -> ModelList[M]:
        try:
            return self._decode(payload, model_type, registry)
        except ModelDecodeError as err:
            _LOGGER.debug("Discarding %s page with malformed item: %s", model_type.model_name(), err)
            return ModelList(model_type)

    def _decode(self, payload: JSONValue, model_type: type[M], registry: ListDecoderRegistry) -> ModelList[M]:
        envelope = AppSyncListPayload.from_json(payload)
        if envelope is not None:
            elements = [model_type.from_payload(item, registry=registry) for item in envelope.items()]
            source = RemotePage(
                next_token=envelope.next_token(),
                document=envelope.document,
                variables=envelope.variables,
                fetcher=self,
            )
            return ModelList(model_type, elements, source=source)

        obj = as_object(payload)
        items = as_array(obj.get(KEY_ITEMS)) if obj is not None else None
        if items is not None:
            elements = [model_type.from_payload(item, registry=registry) for item in items]
            return ModelList(model_type, elements, source=RemotePage(fetcher=self))

        return decode_elements(payload, model_type, registry)

    # ------------------------------------------------------------------
    def _require_api(self) -> APICategory:
        if self._api is None:
            raise PaginationError("No API category is attached to this decoder", reason="unsupported")
        return self._api

    def next_page_request(self, model_type: type[Model], page: RemotePage) -> GraphQLRequest:
        if page.next_token is None:
            raise PaginationError("Missing next token, check has_next_page()", reason="missing_next_token")
        return next_page_request(model_type, page.variables, page.next_token)

    def fetch_next_page(self, model_type: type[M], page: RemotePage) -> ModelList[M]:
        api = self._require_api()
        request = self.next_page_request(model_type, page)
        _LOGGER.debug("Fetching next %s page", model_type.model_name())
        return cast(ModelList[M], api.query(request))

    async def async_fetch_next_page(self, model_type: type[M], page: RemotePage) -> ModelList[M]:
        api = self._require_api()
        request = self.next_page_request(model_type, page)
        _LOGGER.debug("Fetching next %s page", model_type.model_name())
        return cast(ModelList[M], await api.async_query(request))


__all__ = ["AppSyncListDecoder"]
