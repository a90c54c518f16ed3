"""API category: GraphQL model queries with paginated list results."""

from .app_sync_list import AppSyncListDecoder
from .category import APICategory, GraphQLTransport
from .errors import APIError, FilterReconstructionError, GraphQLResponseError
from .payload import AppSyncListPayload
from .request import GraphQLRequest, RequestKind, get_request, list_request, next_page_request
from .transport import AppSyncHTTPTransport

__all__ = [
    "APICategory",
    "APIError",
    "AppSyncHTTPTransport",
    "AppSyncListDecoder",
    "AppSyncListPayload",
    "FilterReconstructionError",
    "GraphQLRequest",
    "GraphQLResponseError",
    "GraphQLTransport",
    "RequestKind",
    "get_request",
    "list_request",
    "next_page_request",
]
