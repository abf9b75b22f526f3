"""Tests for backfill/lib/client.py - request shapes against a mock transport."""

import httpx
import pytest

from backfill.lib.client import JSON_CONTENT_TYPE, StoreClient, response_text

from tests.fake_store import BASE_URL


def _client(handler):
    return StoreClient(BASE_URL + "/", client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestStoreClient:
    """Tests for StoreClient requests."""

    def test_select_returns_decoded_json(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"response": {"docs": []}, "nextCursorMark": "*"})

        data = _client(handler).select({"q": "category:[* TO *]", "rows": 20})

        assert data["nextCursorMark"] == "*"
        (request,) = seen
        assert request.method == "GET"
        assert request.url.path == "/solr/products/select"
        assert request.url.params["rows"] == "20"
        assert request.headers["User-Agent"].startswith("multivalue-backfill/1.0.0")

    def test_update_posts_json_body(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"responseHeader": {"status": 0}})

        _client(handler).update(b'[{"id": "1"}]')

        (request,) = seen
        assert request.method == "POST"
        assert request.url.path == "/solr/products/update"
        assert request.headers["Content-Type"] == JSON_CONTENT_TYPE
        assert request.content == b'[{"id": "1"}]'
        assert "commit" not in request.url.params

    def test_error_status_raises(self):
        client = _client(lambda request: httpx.Response(400, text="bad request"))

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            client.update(b"[]")

        assert response_text(exc_info.value) == (400, "bad request")

    def test_response_text_for_transport_error(self):
        assert response_text(httpx.ConnectError("refused")) == (None, None)

    def test_injected_client_is_not_closed(self):
        http = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))

        with StoreClient(BASE_URL, client=http):
            pass

        assert not http.is_closed

    def test_owned_client_is_closed(self):
        store = StoreClient(BASE_URL, timeout=5.0)
        store.close()
        assert store._client.is_closed
