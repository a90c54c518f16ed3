"""Data store category: local model storage with lazily loaded associations."""

from .datastore_list import AssociationListDecoder
from .store import DataStoreError, LocalModelStore

__all__ = ["AssociationListDecoder", "DataStoreError", "LocalModelStore"]
