from __future__ import annotations

import pytest

from cloud_categories.api import APICategory, AppSyncListDecoder
from cloud_categories.collection import ListDecoderRegistry
from cloud_categories.datastore import AssociationListDecoder, LocalModelStore
from cloud_categories.utils.logging import reset_warnings
from fakes import FakeTransport


@pytest.fixture(autouse=True)
def _reset_warnings():
    reset_warnings()
    yield
    reset_warnings()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def registry() -> ListDecoderRegistry:
    return ListDecoderRegistry()


@pytest.fixture
def api(transport, registry) -> APICategory:
    category = APICategory(transport, registry)
    registry.register(AppSyncListDecoder(category))
    return category


@pytest.fixture
def store():
    local = LocalModelStore(":memory:")
    yield local
    local.close()


@pytest.fixture
def associated_store(store, registry):
    """Store whose loaded models carry lazily loaded association lists."""

    registry.register(AssociationListDecoder(store, default_limit=2))
    store.attach_registry(registry)
    return store
