"""Model collections shared by the API and data store categories."""

from .json_value import (
    JSONArray,
    JSONObject,
    JSONValue,
    JSONValueError,
    as_array,
    as_number,
    as_object,
    as_string,
    dump_json_value,
    parse_json_value,
)
from .model import (
    FieldPredicate,
    Model,
    ModelDecodeError,
    ModelField,
    ModelSchema,
    PredicateGroup,
    QueryPredicate,
    has_many,
)
from .model_list import (
    Loaded,
    LoadState,
    LocalAssociation,
    ModelList,
    PaginationError,
    RemotePage,
)
from .registry import ListDecoder, ListDecoderRegistry

__all__ = [
    "FieldPredicate",
    "JSONArray",
    "JSONObject",
    "JSONValue",
    "JSONValueError",
    "ListDecoder",
    "ListDecoderRegistry",
    "LoadState",
    "Loaded",
    "LocalAssociation",
    "Model",
    "ModelDecodeError",
    "ModelField",
    "ModelList",
    "ModelSchema",
    "PaginationError",
    "PredicateGroup",
    "QueryPredicate",
    "RemotePage",
    "as_array",
    "as_number",
    "as_object",
    "as_string",
    "dump_json_value",
    "has_many",
    "parse_json_value",
]
