"""Lazily loaded, paginated list of models.

A :class:`ModelList` is one ordered container type whose behaviour is chosen
at construction by its source:

* :class:`Loaded` - elements were supplied in memory;
* :class:`RemotePage` - elements came from a remote list query and the
  response carried the state needed to request the following page;
* :class:`LocalAssociation` - elements are the records of the local store
  that point back to an owning record; they are queried on first access.

The list is not synchronised. Two threads touching a pending list for the
first time may both run the association query.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, TypeVar, overload

from ..const import DEFAULT_LIST_LIMIT, KEY_ASSOCIATED_FIELD, KEY_ASSOCIATED_ID
from .json_value import JSONObject, JSONValue
from .model import Model, ModelField

_LOGGER = logging.getLogger(__name__)

M = TypeVar("M", bound=Model)


class LoadState(StrEnum):
    PENDING = "pending"
    LOADED = "loaded"


class PaginationError(RuntimeError):
    """Raised when a next page is requested from a list that cannot provide one."""

    def __init__(self, message: str, *, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason


class PageFetcher(Protocol):
    def fetch_next_page(self, model_type: type[M], page: RemotePage) -> ModelList[M]: ...

    async def async_fetch_next_page(self, model_type: type[M], page: RemotePage) -> ModelList[M]: ...


class AssociationLoader(Protocol):
    def query_where(
        self, model_type: type[M], field: ModelField, value: JSONValue, *, limit: int | None = None
    ) -> list[M]: ...


@dataclass(frozen=True, slots=True)
class Loaded:
    """Source of lists built directly from in-memory elements."""


@dataclass(frozen=True, slots=True)
class RemotePage:
    """Pagination state carried over from a remote list response."""

    next_token: str | None = None
    document: str | None = None
    variables: JSONObject | None = None
    fetcher: PageFetcher | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class LocalAssociation:
    """Reference to the owner of an associated list in the local store."""

    associated_id: str
    associated_field: ModelField
    loader: AssociationLoader = field(compare=False, repr=False)


ListSource = Loaded | RemotePage | LocalAssociation

LOADED = Loaded()


class ModelList(Sequence[M]):
    """Ordered, read-only collection of models with optional deferred loading."""

    def __init__(
        self,
        model_type: type[M],
        elements: Iterable[M] = (),
        *,
        source: ListSource | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> None:
        self._model_type = model_type
        self._elements: list[M] = list(elements)
        self._source: ListSource = source if source is not None else LOADED
        self._limit = limit
        if isinstance(self._source, LocalAssociation):
            self._state = LoadState.PENDING
        else:
            self._state = LoadState.LOADED

    # ------------------------------------------------------------------
    @property
    def model_type(self) -> type[M]:
        return self._model_type

    @property
    def source(self) -> ListSource:
        return self._source

    @property
    def load_state(self) -> LoadState:
        return self._state

    @property
    def current_count(self) -> int:
        """Number of elements held right now, without triggering a load."""

        return len(self._elements)

    @property
    def count(self) -> int:
        return len(self)

    # ------------------------------------------------------------------
    def _load_if_needed(self) -> None:
        if self._state is LoadState.LOADED:
            return
        source = self._source
        if isinstance(source, LocalAssociation):
            _LOGGER.debug(
                "Loading %s where %s == %s (limit %s)",
                self._model_type.model_name(),
                source.associated_field.name,
                source.associated_id,
                self._limit,
            )
            self._elements = list(
                source.loader.query_where(
                    self._model_type,
                    source.associated_field,
                    source.associated_id,
                    limit=self._limit,
                )
            )
        self._state = LoadState.LOADED

    def __len__(self) -> int:
        self._load_if_needed()
        return len(self._elements)

    @overload
    def __getitem__(self, index: int) -> M: ...

    @overload
    def __getitem__(self, index: slice) -> list[M]: ...

    def __getitem__(self, index: int | slice) -> M | list[M]:
        self._load_if_needed()
        if isinstance(index, slice):
            return self._elements[index]
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"ModelList indices must be integers, not {type(index).__name__}")
        if index < 0 or index >= len(self._elements):
            raise IndexError(f"ModelList index {index} out of range [0, {len(self._elements)})")
        return self._elements[index]

    def __iter__(self) -> Iterator[M]:
        self._load_if_needed()
        return iter(tuple(self._elements))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModelList):
            return NotImplemented
        return (
            self._model_type is other._model_type
            and self._source == other._source
            and self._elements == other._elements
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"ModelList[{self._model_type.model_name()}]"
            f"(state={self._state.value}, count={len(self._elements)}, source={self._source!r})"
        )

    # ------------------------------------------------------------------
    def limit(self, limit: int) -> ModelList[M]:
        """Set the association page size; the next access re-runs the query."""

        if limit < 1:
            raise ValueError("limit must be at least 1")
        self._limit = limit
        if isinstance(self._source, LocalAssociation):
            self._state = LoadState.PENDING
        return self

    def has_next_page(self) -> bool:
        return isinstance(self._source, RemotePage) and self._source.next_token is not None

    def _require_next_page(self) -> tuple[RemotePage, PageFetcher]:
        source = self._source
        if not isinstance(source, RemotePage):
            raise PaginationError("Pagination is not supported by this list", reason="unsupported")
        if source.next_token is None or source.document is None:
            raise PaginationError("Missing next token, check has_next_page()", reason="missing_next_token")
        if source.fetcher is None:
            raise PaginationError("No fetcher is attached to this page", reason="unsupported")
        return source, source.fetcher

    def get_next_page(self) -> ModelList[M]:
        """Fetch the following page, blocking the calling thread until it arrives."""

        page, fetcher = self._require_next_page()
        return fetcher.fetch_next_page(self._model_type, page)

    async def async_get_next_page(self) -> ModelList[M]:
        page, fetcher = self._require_next_page()
        return await fetcher.async_fetch_next_page(self._model_type, page)

    # ------------------------------------------------------------------
    def to_payload(self) -> JSONValue:
        source = self._source
        if isinstance(source, LocalAssociation) and self._state is LoadState.PENDING:
            return {
                KEY_ASSOCIATED_ID: source.associated_id,
                KEY_ASSOCIATED_FIELD: source.associated_field.name,
            }
        return [element.to_payload() for element in self._elements]


__all__ = [
    "AssociationLoader",
    "ListSource",
    "LoadState",
    "Loaded",
    "LocalAssociation",
    "ModelList",
    "PageFetcher",
    "PaginationError",
    "RemotePage",
]
