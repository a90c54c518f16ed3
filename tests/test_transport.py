import logging
from unittest.mock import AsyncMock

import pytest
from aiohttp import ClientError

from cloud_categories.api import APICategory, APIError, AppSyncHTTPTransport, AppSyncListDecoder, list_request
from cloud_categories.collection import ListDecoderRegistry
from cloud_categories.const import AUTH_MODE_BEARER, AUTH_MODE_NONE

from sample_models import Note

ENDPOINT = "https://example.appsync-api.test/graphql"


class DummyResp:
    def __init__(self, status, data=None, text="", json_error=None):
        self.status = status
        self._data = data if data is not None else {}
        self._text = text
        self._json_error = json_error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type="application/json"):
        if self._json_error is not None:
            raise self._json_error
        return self._data

    async def text(self):
        return self._text


class Session:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def post(self, url, json=None, headers=None):
        self.calls.append({"url": url, "json": json, "headers": headers})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def no_sleep(monkeypatch):
    sleep = AsyncMock()
    monkeypatch.setattr("cloud_categories.api.transport.asyncio.sleep", sleep)
    return sleep


def _transport(session, **kwargs):
    kwargs.setdefault("api_key", "da2-key")
    kwargs.setdefault("initial_delay", 0)
    return AppSyncHTTPTransport(ENDPOINT, session=session, **kwargs)


@pytest.mark.asyncio
async def test_submit_posts_query_and_variables():
    session = Session(DummyResp(200, {"data": {"listNotes": {"items": []}}}))
    transport = _transport(session)
    request = list_request(Note, limit=5)

    result = await transport.async_submit(request)

    assert result == {"data": {"listNotes": {"items": []}}}
    call = session.calls[0]
    assert call["url"] == ENDPOINT
    assert call["json"] == {"query": request.document, "variables": {"limit": 5}}
    assert call["headers"]["x-api-key"] == "da2-key"


@pytest.mark.asyncio
async def test_retry_then_success(no_sleep):
    session = Session(DummyResp(503), DummyResp(200, {"data": {}}))
    transport = _transport(session, max_retries=2)

    assert await transport.async_submit(list_request(Note)) == {"data": {}}
    assert len(session.calls) == 2
    assert no_sleep.await_count == 1


@pytest.mark.asyncio
async def test_retry_exhaustion_raises_last_failure(no_sleep, caplog):
    session = Session(DummyResp(500), DummyResp(500), DummyResp(500))
    transport = _transport(session, max_retries=2)

    with caplog.at_level(logging.DEBUG, logger="cloud_categories.api.transport"):
        with pytest.raises(APIError) as err:
            await transport.async_submit(list_request(Note))

    assert err.value.reason == "http_error"
    assert err.value.status == 500
    assert len(session.calls) == 3
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1


@pytest.mark.asyncio
async def test_network_errors_are_retried(no_sleep):
    session = Session(ClientError("reset"), ClientError("reset"))
    transport = _transport(session, max_retries=1)

    with pytest.raises(APIError) as err:
        await transport.async_submit(list_request(Note))

    assert err.value.reason == "network"
    assert "reset" in str(err.value)
    assert len(session.calls) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_unauthorized_is_not_retried(no_sleep, status):
    session = Session(DummyResp(status), DummyResp(200))
    transport = _transport(session, max_retries=3)

    with pytest.raises(APIError) as err:
        await transport.async_submit(list_request(Note))

    assert err.value.reason == "not_authorized"
    assert err.value.status == status
    assert len(session.calls) == 1
    no_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_client_error_includes_body(no_sleep):
    session = Session(DummyResp(400, text="bad query"))
    transport = _transport(session)

    with pytest.raises(APIError) as err:
        await transport.async_submit(list_request(Note))

    assert err.value.reason == "http_error"
    assert "bad query" in str(err.value)
    assert len(session.calls) == 1


@pytest.mark.asyncio
async def test_invalid_json_body():
    session = Session(DummyResp(200, json_error=ValueError("Expecting value")))
    with pytest.raises(APIError) as err:
        await _transport(session).async_submit(list_request(Note))
    assert err.value.reason == "invalid_response"


@pytest.mark.asyncio
async def test_non_object_body():
    session = Session(DummyResp(200, data=[1, 2]))
    with pytest.raises(APIError) as err:
        await _transport(session).async_submit(list_request(Note))
    assert err.value.reason == "invalid_response"


@pytest.mark.asyncio
async def test_missing_api_key():
    session = Session(DummyResp(200))
    transport = AppSyncHTTPTransport(ENDPOINT, session=session, api_key="  ")
    with pytest.raises(APIError) as err:
        await transport.async_submit(list_request(Note))
    assert err.value.reason == "not_configured"
    assert session.calls == []


@pytest.mark.asyncio
async def test_bearer_token_from_async_provider():
    session = Session(DummyResp(200))

    async def token():
        return "jwt-token"

    transport = AppSyncHTTPTransport(ENDPOINT, session=session, auth_mode=AUTH_MODE_BEARER, token_provider=token)
    await transport.async_submit(list_request(Note))

    headers = session.calls[0]["headers"]
    assert headers["Authorization"] == "Bearer jwt-token"
    assert "x-api-key" not in headers


@pytest.mark.asyncio
async def test_bearer_requires_provider():
    transport = AppSyncHTTPTransport(ENDPOINT, session=Session(), auth_mode=AUTH_MODE_BEARER)
    with pytest.raises(APIError) as err:
        await transport.async_submit(list_request(Note))
    assert err.value.reason == "not_configured"


@pytest.mark.asyncio
async def test_no_auth_mode_sends_plain_headers():
    session = Session(DummyResp(200))
    transport = AppSyncHTTPTransport(ENDPOINT, session=session, auth_mode=AUTH_MODE_NONE)
    await transport.async_submit(list_request(Note))
    assert set(session.calls[0]["headers"]) == {"Content-Type", "Accept"}


@pytest.mark.asyncio
async def test_supplied_session_is_not_closed():
    session = Session()
    transport = _transport(session)
    await transport.async_close()
    assert session.closed is False


def test_blocking_queries_release_owned_sessions(monkeypatch):
    sessions = []

    class OwnedSession(Session):
        def __init__(self):
            super().__init__(DummyResp(200, {"data": {"listNotes": {"items": [{"id": "n"}], "nextToken": "more"}}}))
            sessions.append(self)

        async def close(self):
            self.closed = True

    monkeypatch.setattr("cloud_categories.api.transport.ClientSession", OwnedSession)
    registry = ListDecoderRegistry()
    api = APICategory(AppSyncHTTPTransport(ENDPOINT, api_key="da2-key"), registry)
    registry.register(AppSyncListDecoder(api))

    page = api.query(list_request(Note))
    for _ in range(4):
        page = page.get_next_page()

    assert [note.id for note in page] == ["n"]
    assert len(sessions) == 5
    assert all(session.closed for session in sessions)
