# Tests for flexisync.remote.salesforce
# REST connection against a mocked transport

import json

import httpx
import pytest

from flexisync.errors import RemoteError
from flexisync.remote.salesforce import SalesforceConnection

INSTANCE = "https://example.my.salesforce.com"


def _connection(handler) -> SalesforceConnection:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SalesforceConnection(INSTANCE + "/", "token-123", client=client)


class TestQuery:
    """Tests for query and find."""

    def test_query_pages(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path.endswith("/query"):
                return httpx.Response(
                    200,
                    json={
                        "done": False,
                        "nextRecordsUrl": "/services/data/v58.0/query/01g-2000",
                        "records": [{"Id": "1"}],
                    },
                )
            return httpx.Response(200, json={"done": True, "records": [{"Id": "2"}]})

        records = list(_connection(handler).query("SELECT Id FROM Account"))

        assert records == [{"Id": "1"}, {"Id": "2"}]
        assert requests[0].url.params["q"] == "SELECT Id FROM Account"
        assert requests[0].headers["Authorization"] == "Bearer token-123"
        assert str(requests[1].url) == INSTANCE + "/services/data/v58.0/query/01g-2000"

    def test_find(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["q"] = request.url.params["q"]
            return httpx.Response(200, json={"done": True, "records": [{"Id": "001"}]})

        assert _connection(handler).find("Account", "Migration_ID__c in ('TEST')") == [{"Id": "001"}]
        assert seen["q"] == "SELECT Id FROM Account WHERE Migration_ID__c in ('TEST')"


class TestWrites:
    """Tests for upsert, delete and post."""

    def test_upsert(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[{"id": "001", "success": True, "errors": []}])

        results = _connection(handler).upsert(
            "Account", [{"Name": "A", "Migration_ID__c": "TEST"}], "Migration_ID__c", all_or_none=True
        )

        assert results == [{"id": "001", "success": True, "errors": []}]
        assert seen["method"] == "PATCH"
        assert seen["path"] == "/services/data/v58.0/composite/sobjects/Account/Migration_ID__c"
        assert seen["body"] == {
            "allOrNone": True,
            "records": [{"attributes": {"type": "Account"}, "Name": "A", "Migration_ID__c": "TEST"}],
        }

    def test_upsert_batches(self):
        batch_sizes = []

        def handler(request: httpx.Request) -> httpx.Response:
            records = json.loads(request.content)["records"]
            batch_sizes.append(len(records))
            return httpx.Response(200, json=[{"success": True}] * len(records))

        records = [{"Migration_ID__c": str(i)} for i in range(450)]
        results = _connection(handler).upsert("Account", records, "Migration_ID__c")

        assert batch_sizes == [200, 200, 50]
        assert len(results) == 450

    def test_delete(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[{"id": "001", "success": True}])

        results = _connection(handler).delete("Account", ["001"])

        assert results == [{"id": "001", "success": True}]
        assert seen["method"] == "DELETE"
        assert seen["params"] == {"ids": "001", "allOrNone": "false"}

    def test_post(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json='[{"success": true}]')

        response = _connection(handler).post("/JSON/bourne/v1", {"payload": []})

        assert seen["url"] == INSTANCE + "/services/apexrest/JSON/bourne/v1"
        assert seen["body"] == {"payload": []}
        assert response == '[{"success": true}]'

    def test_post_empty_response(self):
        assert _connection(lambda request: httpx.Response(204)).post("/x", {}) is None


class TestErrors:
    """Tests for error translation."""

    def test_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json=[{"errorCode": "MALFORMED_QUERY", "message": "bad"}])

        with pytest.raises(RemoteError) as exc_info:
            list(_connection(handler).query("SELECT"))

        assert exc_info.value.status_code == 400
        assert "MALFORMED_QUERY" in exc_info.value.detail

    def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RemoteError, match="communication error: ConnectError"):
            _connection(handler).post("/x", {})

    def test_context_manager_closes_client(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))

        with SalesforceConnection(INSTANCE, "token", client=client):
            pass

        assert client.is_closed
