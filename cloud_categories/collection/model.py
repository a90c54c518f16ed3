"""Model base class, schema resolution and query predicates."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from .json_value import JSONObject, JSONValue

if TYPE_CHECKING:
    from .model_list import ModelList
    from .registry import ListDecoderRegistry

ASSOCIATION_KEY = "cloud_categories.has_many"
ASSOCIATED_WITH_KEY = "cloud_categories.associated_with"

M = TypeVar("M", bound="Model")

_MODEL_TYPES: dict[str, type[Model]] = {}
_SCHEMAS: dict[type[Model], ModelSchema] = {}


class ModelDecodeError(ValueError):
    """Raised when a payload cannot be turned into a model instance."""


# ----------------------------------------------------------------------
# Predicates


class QueryPredicate:
    """Base for predicates usable both as GraphQL filters and local queries."""

    def to_filter(self) -> JSONObject:
        raise NotImplementedError

    def __and__(self, other: QueryPredicate) -> PredicateGroup:
        return PredicateGroup.combine("and", self, other)

    def __or__(self, other: QueryPredicate) -> PredicateGroup:
        return PredicateGroup.combine("or", self, other)

    def __invert__(self) -> PredicateGroup:
        return PredicateGroup("not", (self,))


OPERATORS = ("eq", "ne", "gt", "ge", "lt", "le", "beginsWith", "contains")


@dataclass(frozen=True, slots=True)
class FieldPredicate(QueryPredicate):
    field_name: str
    operator: str
    value: JSONValue

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValueError(f"unsupported predicate operator: {self.operator}")

    def to_filter(self) -> JSONObject:
        return {self.field_name: {self.operator: self.value}}


@dataclass(frozen=True, slots=True)
class PredicateGroup(QueryPredicate):
    kind: str
    predicates: tuple[QueryPredicate, ...]

    @classmethod
    def combine(cls, kind: str, left: QueryPredicate, right: QueryPredicate) -> PredicateGroup:
        members: list[QueryPredicate] = []
        for predicate in (left, right):
            if isinstance(predicate, PredicateGroup) and predicate.kind == kind:
                members.extend(predicate.predicates)
            else:
                members.append(predicate)
        return cls(kind, tuple(members))

    def to_filter(self) -> JSONObject:
        if self.kind == "not":
            return {"not": self.predicates[0].to_filter()}
        return {self.kind: [predicate.to_filter() for predicate in self.predicates]}


# ----------------------------------------------------------------------
# Schema


@dataclass(frozen=True, slots=True)
class ModelField:
    """Describes one field of a model; also the entry point for predicates."""

    name: str
    model_name: str
    required: bool = False
    association: str | None = None
    associated_with: str | None = None

    @property
    def is_association(self) -> bool:
        return self.association is not None

    def eq(self, value: JSONValue) -> FieldPredicate:
        return FieldPredicate(self.name, "eq", value)

    def ne(self, value: JSONValue) -> FieldPredicate:
        return FieldPredicate(self.name, "ne", value)

    def gt(self, value: JSONValue) -> FieldPredicate:
        return FieldPredicate(self.name, "gt", value)

    def ge(self, value: JSONValue) -> FieldPredicate:
        return FieldPredicate(self.name, "ge", value)

    def lt(self, value: JSONValue) -> FieldPredicate:
        return FieldPredicate(self.name, "lt", value)

    def le(self, value: JSONValue) -> FieldPredicate:
        return FieldPredicate(self.name, "le", value)

    def begins_with(self, value: str) -> FieldPredicate:
        return FieldPredicate(self.name, "beginsWith", value)

    def contains(self, value: str) -> FieldPredicate:
        return FieldPredicate(self.name, "contains", value)


@dataclass(frozen=True, slots=True)
class ModelSchema:
    name: str
    plural_name: str
    fields: Mapping[str, ModelField]

    def field(self, name: str) -> ModelField | None:
        return self.fields.get(name)

    @property
    def scalar_fields(self) -> tuple[ModelField, ...]:
        return tuple(item for item in self.fields.values() if not item.is_association)


def has_many(target: type[Model] | str, *, associated_with: str | None = None) -> Any:
    """Declare a one-to-many association field on a model dataclass.

    ``target`` may be the associated model class or its model name when the
    class is declared later in the module. ``associated_with`` names the field
    of the target that holds the owner's id; the local store uses it to turn
    the field into a lazily loaded list.
    """

    target_name = target if isinstance(target, str) else target.model_name()

    def _empty() -> ModelList[Any]:
        from .model_list import ModelList

        return ModelList(resolve_model_type(target_name))

    return field(
        default_factory=_empty,
        metadata={ASSOCIATION_KEY: target_name, ASSOCIATED_WITH_KEY: associated_with},
    )


def resolve_model_type(name: str) -> type[Model]:
    try:
        return _MODEL_TYPES[name]
    except KeyError as err:
        raise ModelDecodeError(f"unknown model type: {name}") from err


# ----------------------------------------------------------------------
# Model


class Model:
    """Base class for dataclass models exchanged with the cloud categories.

    Subclasses are plain dataclasses; the model name defaults to the class
    name and the plural name to the model name with an ``s`` suffix.
    """

    __model_name__: ClassVar[str | None] = None
    __plural_name__: ClassVar[str | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _MODEL_TYPES[cls.model_name()] = cls
        _SCHEMAS.pop(cls, None)

    @classmethod
    def model_name(cls) -> str:
        return cls.__dict__.get("__model_name__") or cls.__name__

    @classmethod
    def schema(cls) -> ModelSchema:
        cached = _SCHEMAS.get(cls)
        if cached is not None:
            return cached
        if not is_dataclass(cls):
            raise TypeError(f"{cls.__name__} must be a dataclass to expose a schema")
        name = cls.model_name()
        plural = cls.__dict__.get("__plural_name__") or f"{name}s"
        model_fields: dict[str, ModelField] = {}
        for item in fields(cls):
            required = item.default is MISSING and item.default_factory is MISSING
            model_fields[item.name] = ModelField(
                name=item.name,
                model_name=name,
                required=required,
                association=item.metadata.get(ASSOCIATION_KEY),
                associated_with=item.metadata.get(ASSOCIATED_WITH_KEY),
            )
        schema = ModelSchema(name=name, plural_name=plural, fields=model_fields)
        _SCHEMAS[cls] = schema
        return schema

    @classmethod
    def field(cls, name: str) -> ModelField:
        resolved = cls.schema().field(name)
        if resolved is None:
            raise KeyError(f"{cls.model_name()} has no field {name!r}")
        return resolved

    @classmethod
    def from_payload(
        cls: type[M],
        payload: Any,
        *,
        registry: ListDecoderRegistry | None = None,
    ) -> M:
        if not isinstance(payload, Mapping):
            raise ModelDecodeError(f"{cls.model_name()} payload must be an object")
        kwargs: dict[str, Any] = {}
        for model_field in cls.schema().fields.values():
            if model_field.name not in payload:
                if model_field.required:
                    raise ModelDecodeError(f"{cls.model_name()} payload missing {model_field.name!r}")
                continue
            value = payload[model_field.name]
            if model_field.association is not None:
                value = _decode_association(value, model_field.association, registry)
            kwargs[model_field.name] = value
        try:
            return cls(**kwargs)
        except TypeError as err:
            raise ModelDecodeError(f"cannot build {cls.model_name()}: {err}") from err

    def to_payload(self) -> JSONObject:
        from .model_list import ModelList

        payload: JSONObject = {}
        for item in fields(self):  # type: ignore[arg-type]
            value = getattr(self, item.name)
            if isinstance(value, ModelList):
                payload[item.name] = value.to_payload()
            elif isinstance(value, Model):
                payload[item.name] = value.to_payload()
            else:
                payload[item.name] = value
        return payload

    @property
    def identifier(self) -> str | None:
        value = getattr(self, "id", None)
        return None if value is None else str(value)


def _decode_association(
    value: Any, target_name: str, registry: ListDecoderRegistry | None
) -> ModelList[Any]:
    from .registry import ListDecoderRegistry

    target = resolve_model_type(target_name)
    return (registry or ListDecoderRegistry()).decode(value, target)


__all__ = [
    "FieldPredicate",
    "Model",
    "ModelDecodeError",
    "ModelField",
    "ModelSchema",
    "PredicateGroup",
    "QueryPredicate",
    "has_many",
    "resolve_model_type",
]
