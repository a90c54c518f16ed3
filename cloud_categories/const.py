from __future__ import annotations

# Option keys accepted by CategoriesConfig.from_options
CONF_API_ENDPOINT = "api_endpoint"
CONF_API_AUTH_MODE = "api_auth_mode"
CONF_API_KEY = "api_key"
CONF_API_REQUEST_TIMEOUT = "api_request_timeout"
CONF_API_MAX_RETRIES = "api_max_retries"
CONF_DATASTORE_PATH = "datastore_path"
CONF_LIST_LIMIT = "list_limit"

AUTH_MODE_API_KEY = "api_key"
AUTH_MODE_BEARER = "bearer"
AUTH_MODE_NONE = "none"
AUTH_MODES = (AUTH_MODE_API_KEY, AUTH_MODE_BEARER, AUTH_MODE_NONE)

DEFAULT_LIST_LIMIT = 100
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_DATASTORE_PATH = ":memory:"

# HTTP statuses the transport retries with backoff
RETRYABLE_STATUSES = (429, 500, 502, 503, 504)

# Wire keys
KEY_ITEMS = "items"
KEY_NEXT_TOKEN = "nextToken"
KEY_DOCUMENT = "document"
KEY_VARIABLES = "variables"
KEY_GRAPHQL_DATA = "graphQLData"
KEY_DATA = "data"
KEY_ASSOCIATED_ID = "associatedId"
KEY_ASSOCIATED_FIELD = "associatedField"
