"""Decode references to associated records into lazily loaded lists."""

from __future__ import annotations

import logging
from typing import TypeVar

from ..collection.json_value import JSONValue, as_object, as_string
from ..collection.model import Model
from ..collection.model_list import AssociationLoader, LocalAssociation, ModelList
from ..collection.registry import ListDecoderRegistry
from ..const import DEFAULT_LIST_LIMIT, KEY_ASSOCIATED_FIELD, KEY_ASSOCIATED_ID

_LOGGER = logging.getLogger(__name__)

M = TypeVar("M", bound=Model)


class AssociationListDecoder:
    """Builds lists from ``{"associatedId": ..., "associatedField": ...}`` payloads.

    Nothing is read from the store at decode time. The query for records whose
    ``associatedField`` equals ``associatedId`` runs on the first access to
    the list, limited to ``default_limit`` records unless the caller changes
    it with :meth:`ModelList.limit`.
    """

    def __init__(self, loader: AssociationLoader, *, default_limit: int = DEFAULT_LIST_LIMIT) -> None:
        self._loader = loader
        self._default_limit = default_limit

    def should_decode(self, payload: JSONValue) -> bool:
        obj = as_object(payload)
        if obj is None:
            return False
        return as_string(obj.get(KEY_ASSOCIATED_ID)) is not None and as_string(obj.get(KEY_ASSOCIATED_FIELD)) is not None

    def decode(self, payload: JSONValue, model_type: type[M], registry: ListDecoderRegistry) -> ModelList[M]:
        obj = as_object(payload) or {}
        associated_id = as_string(obj.get(KEY_ASSOCIATED_ID))
        field_name = as_string(obj.get(KEY_ASSOCIATED_FIELD))
        if associated_id is None or field_name is None:
            return ModelList(model_type)
        associated_field = model_type.schema().field(field_name)
        if associated_field is None:
            _LOGGER.debug("%s has no field %r; association list left empty", model_type.model_name(), field_name)
            return ModelList(model_type)
        source = LocalAssociation(
            associated_id=associated_id,
            associated_field=associated_field,
            loader=self._loader,
        )
        return ModelList(model_type, source=source, limit=self._default_limit)


__all__ = ["AssociationListDecoder"]
