"""Model lists shared by the API and data store categories of a cloud client."""

from .collection import (
    LoadState,
    Model,
    ModelList,
    PaginationError,
    has_many,
)
from .config import CategoriesConfig, ConfigurationError
from .facade import CloudCategories

__all__ = [
    "CategoriesConfig",
    "CloudCategories",
    "ConfigurationError",
    "LoadState",
    "Model",
    "ModelList",
    "PaginationError",
    "has_many",
]
