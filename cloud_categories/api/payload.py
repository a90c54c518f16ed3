"""Envelope wrapping a remote list response together with the request that produced it."""

from __future__ import annotations

from dataclasses import dataclass

from ..collection.json_value import (
    JSONArray,
    JSONObject,
    JSONValue,
    as_array,
    as_object,
    as_string,
    first_value,
)
from ..const import KEY_DATA, KEY_DOCUMENT, KEY_GRAPHQL_DATA, KEY_ITEMS, KEY_NEXT_TOKEN, KEY_VARIABLES


@dataclass(frozen=True, slots=True)
class AppSyncListPayload:
    """A list response plus the document and variables of its request.

    ``graphql_data`` is either the list object itself (``{"items": ...,
    "nextToken": ...}``) or an object wrapping it under the operation name.
    """

    document: str
    graphql_data: JSONValue
    variables: JSONObject | None = None

    @classmethod
    def from_json(cls, value: JSONValue) -> AppSyncListPayload | None:
        """Return the envelope held by ``value`` or ``None`` if it is not one."""

        obj = as_object(value)
        if obj is None:
            return None
        document = as_string(obj.get(KEY_DOCUMENT))
        if document is None:
            return None
        variables: JSONObject | None = None
        if obj.get(KEY_VARIABLES) is not None:
            variables = as_object(obj[KEY_VARIABLES])
            if variables is None:
                return None
        if KEY_GRAPHQL_DATA in obj:
            data = obj[KEY_GRAPHQL_DATA]
        elif KEY_DATA in obj:
            data = obj[KEY_DATA]
        else:
            data = {key: item for key, item in obj.items() if key not in (KEY_DOCUMENT, KEY_VARIABLES)}
            if not data:
                return None
        return cls(document=document, graphql_data=data, variables=variables)

    def to_json(self) -> JSONObject:
        return {
            KEY_DOCUMENT: self.document,
            KEY_VARIABLES: self.variables,
            KEY_GRAPHQL_DATA: self.graphql_data,
        }

    def items(self) -> JSONArray:
        data = as_object(self.graphql_data)
        if data is not None and as_array(data.get(KEY_ITEMS)) is not None:
            return data[KEY_ITEMS]  # type: ignore[return-value]
        nested = as_object(first_value(data))
        if nested is not None:
            items = as_array(nested.get(KEY_ITEMS))
            if items is not None:
                return items
        return []

    def next_token(self) -> str | None:
        data = as_object(self.graphql_data)
        if data is not None:
            token = as_string(data.get(KEY_NEXT_TOKEN))
            if token is not None:
                return token
        nested = as_object(first_value(data))
        return None if nested is None else as_string(nested.get(KEY_NEXT_TOKEN))


__all__ = ["AppSyncListPayload"]
