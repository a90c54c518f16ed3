"""Validated options for :class:`~cloud_categories.facade.CloudCategories`."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import voluptuous as vol

from .const import (
    AUTH_MODE_API_KEY,
    AUTH_MODES,
    CONF_API_AUTH_MODE,
    CONF_API_ENDPOINT,
    CONF_API_KEY,
    CONF_API_MAX_RETRIES,
    CONF_API_REQUEST_TIMEOUT,
    CONF_DATASTORE_PATH,
    CONF_LIST_LIMIT,
    DEFAULT_DATASTORE_PATH,
    DEFAULT_LIST_LIMIT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
)


class ConfigurationError(ValueError):
    """Raised when options fail validation."""


def _endpoint(value: Any) -> str:
    text = vol.Coerce(str)(value).strip()
    if not text.startswith(("http://", "https://")):
        raise vol.Invalid("expected an http(s) url")
    return text.rstrip("/")


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_API_ENDPOINT): _endpoint,
        vol.Optional(CONF_API_AUTH_MODE, default=AUTH_MODE_API_KEY): vol.In(AUTH_MODES),
        vol.Optional(CONF_API_KEY): vol.Any(None, str),
        vol.Optional(CONF_DATASTORE_PATH, default=DEFAULT_DATASTORE_PATH): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_LIST_LIMIT, default=DEFAULT_LIST_LIMIT): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(CONF_API_REQUEST_TIMEOUT, default=DEFAULT_REQUEST_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(CONF_API_MAX_RETRIES, default=DEFAULT_MAX_RETRIES): vol.All(vol.Coerce(int), vol.Range(min=0)),
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True, slots=True)
class CategoriesConfig:
    api_endpoint: str
    api_auth_mode: str = AUTH_MODE_API_KEY
    api_key: str | None = None
    datastore_path: str = DEFAULT_DATASTORE_PATH
    list_limit: int = DEFAULT_LIST_LIMIT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> CategoriesConfig:
        """Validate raw ``options`` and return the normalised config.

        Unknown keys are dropped. Any schema violation is raised as a
        :class:`ConfigurationError` carrying the voluptuous message.
        """

        try:
            data = CONFIG_SCHEMA(dict(options))
        except vol.Invalid as err:
            raise ConfigurationError(f"invalid options: {err}") from err
        api_key = (data.get(CONF_API_KEY) or "").strip() or None
        if data[CONF_API_AUTH_MODE] == AUTH_MODE_API_KEY and api_key is None:
            raise ConfigurationError(
                f"invalid options: {CONF_API_KEY} is required for {AUTH_MODE_API_KEY} authorization"
            )
        return cls(
            api_endpoint=data[CONF_API_ENDPOINT],
            api_auth_mode=data[CONF_API_AUTH_MODE],
            api_key=api_key,
            datastore_path=data[CONF_DATASTORE_PATH],
            list_limit=data[CONF_LIST_LIMIT],
            request_timeout=data[CONF_API_REQUEST_TIMEOUT],
            max_retries=data[CONF_API_MAX_RETRIES],
        )

    def to_options(self) -> dict[str, Any]:
        opts: dict[str, Any] = {
            CONF_API_ENDPOINT: self.api_endpoint,
            CONF_API_AUTH_MODE: self.api_auth_mode,
            CONF_DATASTORE_PATH: self.datastore_path,
            CONF_LIST_LIMIT: self.list_limit,
            CONF_API_REQUEST_TIMEOUT: self.request_timeout,
            CONF_API_MAX_RETRIES: self.max_retries,
        }
        if self.api_key:
            opts[CONF_API_KEY] = self.api_key
        return opts


__all__ = ["CONFIG_SCHEMA", "CategoriesConfig", "ConfigurationError"]
