"""SQLite store of model payloads and the queries behind association lists."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar, cast

from ..collection.json_value import JSONObject, JSONValue, dump_json_value, parse_json_value
from ..collection.model import FieldPredicate, Model, ModelField, PredicateGroup, QueryPredicate
from ..collection.registry import ListDecoderRegistry
from ..const import KEY_ASSOCIATED_FIELD, KEY_ASSOCIATED_ID

_LOGGER = logging.getLogger(__name__)

M = TypeVar("M", bound=Model)

_COMPARISONS = {
    "eq": "=",
    "ne": "!=",
    "gt": ">",
    "ge": ">=",
    "lt": "<",
    "le": "<=",
}


class DataStoreError(RuntimeError):
    """Raised when the local store cannot complete an operation."""


class LocalModelStore:
    """SQLite-backed store of model payloads keyed by model name and id."""

    def __init__(self, path: str | Path, *, registry: ListDecoderRegistry | None = None) -> None:
        self._is_memory = str(path) == ":memory:"
        self.path = Path(path)
        if not self._is_memory:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self._shared_conn: sqlite3.Connection | None = None
        self._registry = registry
        self._ensure_schema()

    def attach_registry(self, registry: ListDecoderRegistry) -> None:
        """Decode association fields of loaded models through ``registry``."""

        self._registry = registry

    # ------------------------------------------------------------------
    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        try:
            if self._is_memory:
                if self._shared_conn is None:
                    self._shared_conn = sqlite3.connect(":memory:", check_same_thread=False)
                    self._shared_conn.row_factory = sqlite3.Row
                yield self._shared_conn
            else:
                conn = sqlite3.connect(self.path)
                conn.row_factory = sqlite3.Row
                try:
                    yield conn
                finally:
                    conn.close()
        except sqlite3.Error as err:
            raise DataStoreError(f"local store operation failed: {err}") from err

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS models (
                    model_name TEXT NOT NULL,
                    model_id TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (model_name, model_id)
                );
                """
            )
            conn.commit()

    def close(self) -> None:
        if self._shared_conn is not None:
            self._shared_conn.close()
            self._shared_conn = None

    # ------------------------------------------------------------------
    def save(self, model: Model) -> None:
        model_id = model.identifier
        if model_id is None:
            raise DataStoreError(f"{model.model_name()} has no id and cannot be saved")
        payload = self._stored_payload(model)
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO models(model_name, model_id, payload, updated_at)
                VALUES(?, ?, ?, ?)
                ON CONFLICT(model_name, model_id)
                DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at
                """,
                (
                    model.model_name(),
                    model_id,
                    dump_json_value(payload),
                    datetime.now(tz=UTC).isoformat(),
                ),
            )
            conn.commit()

    def get(self, model_type: type[M], model_id: str) -> M | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT payload FROM models WHERE model_name = ? AND model_id = ?",
                (model_type.model_name(), str(model_id)),
            ).fetchone()
        if row is None:
            return None
        return self._load(model_type, row["payload"])

    def delete(self, model_type: type[Model], model_id: str) -> bool:
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM models WHERE model_name = ? AND model_id = ?",
                (model_type.model_name(), str(model_id)),
            )
            conn.commit()
        return cursor.rowcount > 0

    def count(self, model_type: type[Model]) -> int:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS total FROM models WHERE model_name = ?",
                (model_type.model_name(),),
            ).fetchone()
        return int(row["total"]) if row else 0

    def query(
        self,
        model_type: type[M],
        predicate: QueryPredicate | None = None,
        *,
        limit: int | None = None,
    ) -> list[M]:
        """Return models matching ``predicate`` in insertion order."""

        query = "SELECT payload FROM models WHERE model_name = ?"
        params: list[Any] = [model_type.model_name()]
        if predicate is not None:
            clause, clause_params = self._compile(model_type, predicate)
            query += f" AND {clause}"
            params.extend(clause_params)
        query += " ORDER BY rowid"
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))
        _LOGGER.debug("Local query: %s %s", query, params)
        with self._connection() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [self._load(model_type, row["payload"]) for row in rows]

    def query_where(
        self,
        model_type: type[M],
        field: ModelField,
        value: JSONValue,
        *,
        limit: int | None = None,
    ) -> list[M]:
        if field.model_name != model_type.model_name():
            raise DataStoreError(f"field {field.name!r} does not belong to {model_type.model_name()}")
        return self.query(model_type, field.eq(value), limit=limit)

    # ------------------------------------------------------------------
    def _compile(self, model_type: type[Model], predicate: QueryPredicate) -> tuple[str, list[Any]]:
        if isinstance(predicate, PredicateGroup):
            parts = [self._compile(model_type, member) for member in predicate.predicates]
            params = [param for _, member_params in parts for param in member_params]
            if predicate.kind == "not":
                return f"NOT ({parts[0][0]})", params
            joiner = " AND " if predicate.kind == "and" else " OR "
            return "(" + joiner.join(clause for clause, _ in parts) + ")", params
        if not isinstance(predicate, FieldPredicate):
            raise DataStoreError(f"unsupported predicate {type(predicate).__name__}")

        model_field = model_type.schema().field(predicate.field_name)
        if model_field is None or model_field.is_association:
            raise DataStoreError(f"{model_type.model_name()} has no queryable field {predicate.field_name!r}")
        column = "json_extract(payload, ?)"
        path = f"$.{predicate.field_name}"
        value = predicate.value
        if predicate.operator in {"eq", "ne"} and value is None:
            test = "IS NULL" if predicate.operator == "eq" else "IS NOT NULL"
            return f"{column} {test}", [path]
        if predicate.operator in _COMPARISONS:
            return f"{column} {_COMPARISONS[predicate.operator]} ?", [path, value]
        if predicate.operator == "beginsWith":
            return f"substr({column}, 1, length(?)) = ?", [path, value, value]
        return f"instr({column}, ?) > 0", [path, value]

    def _stored_payload(self, model: Model) -> JSONObject:
        payload = model.to_payload()
        for model_field in model.schema().fields.values():
            # associated records are saved on their own
            if model_field.associated_with is not None:
                payload.pop(model_field.name, None)
        return payload

    def _load(self, model_type: type[M], raw: str) -> M:
        payload = cast(JSONObject, parse_json_value(raw))
        owner_id = payload.get("id")
        for model_field in model_type.schema().fields.values():
            if model_field.associated_with is None or owner_id is None:
                continue
            payload[model_field.name] = {
                KEY_ASSOCIATED_ID: str(owner_id),
                KEY_ASSOCIATED_FIELD: model_field.associated_with,
            }
        return model_type.from_payload(payload, registry=self._registry)


__all__ = ["DataStoreError", "LocalModelStore"]
