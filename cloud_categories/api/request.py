"""Build GraphQL requests for model queries."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from ..collection.json_value import (
    JSONObject,
    JSONValue,
    JSONValueError,
    as_number,
    as_object,
    parse_json_value,
)
from ..collection.model import Model, ModelSchema, QueryPredicate
from .errors import FilterReconstructionError


class RequestKind(StrEnum):
    LIST = "list"
    GET = "get"


@dataclass(frozen=True, slots=True)
class GraphQLRequest:
    """A query document with its variables and where to find the result."""

    document: str
    model_type: type[Model]
    decode_path: str
    variables: JSONObject = field(default_factory=dict)
    kind: RequestKind = RequestKind.LIST


def _selection(schema: ModelSchema, indent: str) -> str:
    return "\n".join(f"{indent}{item.name}" for item in schema.scalar_fields)


def _build_list_request(
    model_type: type[Model],
    filter_value: JSONObject | None,
    limit: int | None,
    next_token: str | None,
) -> GraphQLRequest:
    schema = model_type.schema()
    operation = f"list{schema.plural_name}"
    params: list[str] = []
    arguments: list[str] = []
    variables: JSONObject = {}
    if filter_value is not None:
        params.append(f"$filter: Model{schema.name}FilterInput")
        arguments.append("filter: $filter")
        variables["filter"] = filter_value
    if limit is not None:
        params.append("$limit: Int")
        arguments.append("limit: $limit")
        variables["limit"] = limit
    if next_token is not None:
        params.append("$nextToken: String")
        arguments.append("nextToken: $nextToken")
        variables["nextToken"] = next_token

    signature = f"({', '.join(params)})" if params else ""
    call = f"({', '.join(arguments)})" if arguments else ""
    document = (
        f"query List{schema.plural_name}{signature} {{\n"
        f"  {operation}{call} {{\n"
        f"    items {{\n"
        f"{_selection(schema, '      ')}\n"
        f"    }}\n"
        f"    nextToken\n"
        f"  }}\n"
        f"}}"
    )
    return GraphQLRequest(document=document, model_type=model_type, decode_path=operation, variables=variables)


def list_request(
    model_type: type[Model],
    *,
    where: QueryPredicate | None = None,
    limit: int | None = None,
    next_token: str | None = None,
) -> GraphQLRequest:
    """Return a paginated list query for ``model_type``."""

    if limit is not None and limit < 1:
        raise ValueError("limit must be at least 1")
    filter_value = where.to_filter() if where is not None else None
    return _build_list_request(model_type, filter_value, limit, next_token)


def next_page_request(
    model_type: type[Model],
    variables: Mapping[str, JSONValue] | None,
    next_token: str,
) -> GraphQLRequest:
    """Rebuild the list query that continues after ``next_token``.

    The predicate is gone once a request has been rendered, so the
    filter and limit are recovered from the previous request's variables.
    """

    filter_value: JSONObject | None = None
    limit: int | None = None
    if variables:
        stored_filter = variables.get("filter")
        if stored_filter is not None:
            filter_object = as_object(stored_filter)
            if filter_object is None:
                raise FilterReconstructionError("Filter variables is not a valid JSON object")
            try:
                reencoded = parse_json_value(filter_object)
            except JSONValueError as err:
                raise FilterReconstructionError(f"Filter variables is not valid JSON: {err}") from err
            filter_value = as_object(reencoded)
        stored_limit = as_number(variables.get("limit"))
        if stored_limit is not None and math.isfinite(stored_limit):
            limit = int(stored_limit)
    return _build_list_request(model_type, filter_value, limit, next_token)


def get_request(model_type: type[Model], model_id: str) -> GraphQLRequest:
    """Return a query fetching a single model by id."""

    schema = model_type.schema()
    operation = f"get{schema.name}"
    document = (
        f"query Get{schema.name}($id: ID!) {{\n"
        f"  {operation}(id: $id) {{\n"
        f"{_selection(schema, '    ')}\n"
        f"  }}\n"
        f"}}"
    )
    return GraphQLRequest(
        document=document,
        model_type=model_type,
        decode_path=operation,
        variables={"id": model_id},
        kind=RequestKind.GET,
    )


__all__ = ["GraphQLRequest", "RequestKind", "get_request", "list_request", "next_page_request"]
