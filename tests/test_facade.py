import pytest

from cloud_categories import CategoriesConfig, CloudCategories, ConfigurationError, LoadState
from cloud_categories.api import APIError, AppSyncHTTPTransport, AppSyncListDecoder
from cloud_categories.collection import LocalAssociation, RemotePage
from cloud_categories.datastore import AssociationListDecoder

from fakes import FakeTransport
from sample_models import Comment, Note, Post


def _config(**options):
    return CategoriesConfig.from_options({"api_endpoint": "https://api.test/graphql", "api_key": "k", **options})


@pytest.fixture
def categories():
    transport = FakeTransport()
    instance = CloudCategories(_config(list_limit=2), transport=transport)
    yield instance
    instance.store.close()


def test_association_decoder_registered_before_remote_decoder(categories):
    decoders = categories.registry.decoders
    assert [type(decoder) for decoder in decoders] == [AssociationListDecoder, AppSyncListDecoder]
    assert categories.auth is None


def test_default_transport_is_http():
    instance = CloudCategories(_config())
    assert isinstance(instance.api._transport, AppSyncHTTPTransport)
    instance.store.close()


def test_decode_list_dispatches_by_shape(categories):
    association = categories.decode_list({"associatedId": "p1", "associatedField": "post_id"}, Comment)
    remote = categories.decode_list(
        {"document": "query", "variables": {}, "graphQLData": {"items": [{"id": "n1"}], "nextToken": "t"}},
        Note,
    )
    assert isinstance(association.source, LocalAssociation)
    assert association.load_state is LoadState.PENDING
    assert isinstance(remote.source, RemotePage)
    assert remote.has_next_page() is True


def test_store_models_load_associations_lazily(categories):
    categories.store.save(Post(id="p1", title="Hello"))
    for index in range(3):
        categories.store.save(Comment(id=f"c{index}", content="x", post_id="p1"))

    post = categories.store.get(Post, "p1")

    assert post.comments.load_state is LoadState.PENDING
    assert len(post.comments) == 2
    assert len(post.comments.limit(5)) == 3


@pytest.mark.asyncio
async def test_remote_pagination_through_facade(categories):
    transport = categories.api._transport
    transport.queue(
        {"data": {"listNotes": {"items": [{"id": "n1"}], "nextToken": "t1"}}},
        {"data": {"listNotes": {"items": [{"id": "n2"}], "nextToken": None}}},
    )
    await categories.async_start()

    first = await categories.api.async_list(Note, limit=1)
    second = await first.async_get_next_page()

    assert [note.id for note in first] == ["n1"]
    assert [note.id for note in second] == ["n2"]
    assert second.has_next_page() is False
    assert transport.requests[1].variables == {"limit": 1, "nextToken": "t1"}

    with pytest.raises(APIError) as err:
        first.get_next_page()
    assert err.value.reason == "deadlock"


@pytest.mark.asyncio
async def test_stop_closes_transport(categories):
    await categories.async_start()
    await categories.async_stop()
    assert categories.api._transport.closed is True


def test_bearer_mode_requires_token_provider():
    config = CategoriesConfig.from_options({"api_endpoint": "https://api.test/graphql", "api_auth_mode": "bearer"})
    with pytest.raises(ConfigurationError, match="token_provider"):
        CloudCategories(config)


def test_bearer_mode_with_token_provider():
    config = CategoriesConfig.from_options({"api_endpoint": "https://api.test/graphql", "api_auth_mode": "bearer"})
    instance = CloudCategories(config, token_provider=lambda: "jwt")
    assert isinstance(instance.api._transport, AppSyncHTTPTransport)
    instance.store.close()


def test_api_key_mode_requires_key_when_built_directly():
    with pytest.raises(ConfigurationError, match="api_key"):
        CloudCategories(CategoriesConfig(api_endpoint="https://api.test/graphql"))


def test_supplied_transport_skips_credential_checks():
    instance = CloudCategories(CategoriesConfig(api_endpoint="https://api.test/graphql"), transport=FakeTransport())
    assert instance.api._transport.closed is False
    instance.store.close()
