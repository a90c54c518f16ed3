"""Registry of list decoders competing to turn payloads into model lists."""

from __future__ import annotations

import logging
from typing import Any, Protocol, TypeVar

from .json_value import JSONValue, JSONValueError, as_array, parse_json_value
from .model import Model, ModelDecodeError
from .model_list import ModelList

_LOGGER = logging.getLogger(__name__)

M = TypeVar("M", bound=Model)


class ListDecoder(Protocol):
    """Strategy producing a concrete model list from a payload it recognises."""

    def should_decode(self, payload: JSONValue) -> bool:
        """Return ``True`` if this decoder handles ``payload``; must not have side effects."""

    def decode(self, payload: JSONValue, model_type: type[M], registry: ListDecoderRegistry) -> ModelList[M]:
        """Build the list; failures degrade to an empty list instead of raising."""


class ListDecoderRegistry:
    """Ordered, append-only set of list decoders.

    Registration order is priority: the first decoder whose sniff accepts a
    payload builds the list. Decoders are registered while the categories are
    being configured and only read afterwards, so the registry takes no locks.

    Decoding never raises. Payloads no decoder claims are read as a bare array
    of elements, and anything that fails on the way ends up as an empty list.
    That keeps a malformed page from breaking iteration over the rest of the
    data but also hides backend or schema mismatches, which are only visible
    in DEBUG logs.
    """

    def __init__(self) -> None:
        self._decoders: list[ListDecoder] = []

    def register(self, decoder: ListDecoder) -> None:
        self._decoders.append(decoder)
        _LOGGER.debug("Registered list decoder %s at position %d", type(decoder).__name__, len(self._decoders))

    @property
    def decoders(self) -> tuple[ListDecoder, ...]:
        return tuple(self._decoders)

    def decode(self, payload: Any, model_type: type[M]) -> ModelList[M]:
        try:
            value = parse_json_value(payload)
        except JSONValueError as err:
            _LOGGER.debug("Discarding unparseable %s list payload: %s", model_type.model_name(), err)
            return ModelList(model_type)

        for decoder in self._decoders:
            try:
                matched = decoder.should_decode(value)
            except Exception as err:
                _LOGGER.debug("%s failed to sniff %s list payload: %s", type(decoder).__name__, model_type.model_name(), err)
                continue
            if not matched:
                continue
            try:
                return decoder.decode(value, model_type, self)
            except Exception as err:
                _LOGGER.debug("%s failed to decode %s list: %s", type(decoder).__name__, model_type.model_name(), err)
                return ModelList(model_type)

        return decode_elements(value, model_type, self)


def decode_elements(value: JSONValue, model_type: type[M], registry: ListDecoderRegistry) -> ModelList[M]:
    """Decode a bare JSON array into a loaded list, or an empty list otherwise."""

    items = as_array(value)
    if items is None:
        _LOGGER.debug("Payload for %s list is not an array; using an empty list", model_type.model_name())
        return ModelList(model_type)
    try:
        elements = [model_type.from_payload(item, registry=registry) for item in items]
    except ModelDecodeError as err:
        _LOGGER.debug("Discarding %s list with malformed element: %s", model_type.model_name(), err)
        return ModelList(model_type)
    return ModelList(model_type, elements)


__all__ = ["ListDecoder", "ListDecoderRegistry", "decode_elements"]
