# FlexiSync Save Operation Tests
# Tests for the standard and bulk REST save operations and chunk dispatch

import json
import threading
import time

import pytest

from flexisync.config.schema import DataConfig, DataOperation, ObjectConfig
from flexisync.errors import RemoteError
from flexisync.sync.operations import (
    NO_RESULT_MESSAGE,
    SaveContext,
    bulk_rest_save,
    dispatch_requests,
    external_id_predicate,
    standard_save,
)
from flexisync.sync.requests import SaveRequest
from flexisync.sync.results import RecordSaveResult
from flexisync.utils.records import escape_set_value


@pytest.fixture
def account() -> ObjectConfig:
    return ObjectConfig(object_type="Account", external_id="Migration_ID__c")


def _context(connection, object_config, records, operation=DataOperation.UPSERT, config=None, allow_partial=False):
    request = SaveRequest(
        object_type=object_config.object_type,
        operation=operation,
        external_id_field=object_config.external_id,
        records=records,
    )
    return SaveContext(
        config=config or DataConfig(),
        object_config=object_config,
        request=request,
        connection=connection,
        allow_partial=allow_partial,
    )


class TestStandardUpsert:
    """Tests for standard_save upserts."""

    def test_upsert_success(self, connection, account):
        connection.upsert_responses.append([{"id": "test-id-1", "success": True}])
        records = [{"Name": "Test Account", "Migration_ID__c": "TEST"}]

        results = standard_save(_context(connection, account, records))

        assert results == [RecordSaveResult(record_id="test-id-1", external_id="TEST", success=True)]
        assert connection.upserts[0]["external_id_field"] == "Migration_ID__c"
        assert connection.upserts[0]["all_or_none"] is True

    def test_allow_partial_disables_all_or_none(self, connection, account):
        standard_save(_context(connection, account, [{"Migration_ID__c": "A"}], allow_partial=True))
        assert connection.upserts[0]["all_or_none"] is False

    def test_failure_messages_joined(self, connection, account):
        connection.upsert_responses.append(
            [
                {"id": None, "success": False, "errors": [{"message": "Bad value"}, {"message": "Required"}]},
            ]
        )

        results = standard_save(_context(connection, account, [{"Migration_ID__c": "A"}]))

        assert results[0].success is False
        assert results[0].record_id is None
        assert results[0].message == "Bad value;Required"

    def test_missing_results_marked_failed(self, connection, account):
        connection.upsert_responses.append([{"id": "x", "success": True}])
        records = [{"Migration_ID__c": "A"}, {"Migration_ID__c": "B"}]

        results = standard_save(_context(connection, account, records))

        assert len(results) == 2
        assert results[0].success is True
        assert results[1] == RecordSaveResult(external_id="B", message=NO_RESULT_MESSAGE, success=False)

    def test_remote_error_propagates(self, connection, account):
        connection.upsert_responses.append(RemoteError("boom"))

        with pytest.raises(RemoteError):
            standard_save(_context(connection, account, [{"Migration_ID__c": "A"}]))


class TestStandardDelete:
    """Tests for standard_save deletes."""

    def test_delete_predicate_and_ids(self, connection, account):
        connection.find_results = [{"Id": "001A"}]
        records = [{"Name": "Test Account", "Migration_ID__c": "TEST"}]

        results = standard_save(_context(connection, account, records, DataOperation.DELETE))

        assert connection.finds == [("Account", "Migration_ID__c in ('TEST')")]
        assert connection.deletes == [("Account", ["001A"])]
        assert results == [RecordSaveResult(record_id="001A", success=True)]

    def test_delete_dedups_and_escapes(self, connection, account):
        records = [{"Migration_ID__c": "O'Brien"}, {"Migration_ID__c": "O'Brien"}, {"Migration_ID__c": "B"}]

        standard_save(_context(connection, account, records, DataOperation.DELETE))

        assert connection.finds[0][1] == "Migration_ID__c in ('O\\'Brien','B')"

    def test_delete_nothing_found(self, connection, account):
        results = standard_save(_context(connection, account, [{"Migration_ID__c": "X"}], DataOperation.DELETE))

        assert results == []
        assert connection.deletes == []

    def test_delete_keeps_falsy_external_ids(self, connection, account):
        records = [{"Migration_ID__c": 0}, {"Migration_ID__c": ""}, {"Migration_ID__c": None}]

        standard_save(_context(connection, account, records, DataOperation.DELETE))

        assert connection.finds == [("Account", "Migration_ID__c in ('0')")]

    def test_delete_without_external_ids(self, connection, account):
        results = standard_save(_context(connection, account, [{"Name": "no id"}], DataOperation.DELETE))

        assert results == []
        assert connection.finds == []


class TestEscaping:
    """Tests for predicate escaping."""

    def test_escape_set_value(self):
        assert escape_set_value("plain") == "plain"
        assert escape_set_value("it's") == "it\\'s"
        assert escape_set_value('say "hi"') == 'say \\"hi\\"'
        assert escape_set_value("back\\slash") == "back\\\\slash"

    def test_external_id_predicate(self):
        assert external_id_predicate("Ext__c", ["A", "B"]) == "Ext__c in ('A','B')"


class TestBulkRestSave:
    """Tests for bulk_rest_save."""

    def test_posts_request_to_rest_path(self, connection, account):
        config = DataConfig.model_validate({"bulk": {"rest_path": "/custom/v1"}})
        records = [{"Migration_ID__c": "A"}, {"Migration_ID__c": "B"}]

        results = bulk_rest_save(_context(connection, account, records, config=config))

        path, body = connection.posts[0]
        assert path == "/custom/v1"
        assert body == {
            "sObjectType": "Account",
            "operation": "upsert",
            "extIdField": "Migration_ID__c",
            "payload": records,
        }
        assert [result.external_id for result in results] == ["A", "B"]
        assert all(result.success for result in results)

    def test_string_response_decoded(self, connection, account):
        connection.post_responses.append(
            json.dumps([{"recordId": "001", "externalId": "A", "message": None, "success": True}])
        )

        results = bulk_rest_save(_context(connection, account, [{"Migration_ID__c": "A"}]))

        assert results == [RecordSaveResult(record_id="001", external_id="A", success=True)]

    def test_empty_response(self, connection, account):
        connection.post_responses.append(None)
        assert bulk_rest_save(_context(connection, account, [{"Migration_ID__c": "A"}])) == []

    def test_unexpected_response(self, connection, account):
        connection.post_responses.append({"error": "nope"})

        with pytest.raises(RemoteError, match="Unexpected bulk save response"):
            bulk_rest_save(_context(connection, account, [{"Migration_ID__c": "A"}]))


class TestDispatchRequests:
    """Tests for sequential and fan-out chunk dispatch."""

    def _requests(self, account, count):
        return [
            SaveRequest("Account", DataOperation.UPSERT, "Migration_ID__c", [{"Migration_ID__c": str(i)}])
            for i in range(count)
        ]

    def _echo(self, context):
        return [RecordSaveResult(external_id=context.records[0]["Migration_ID__c"], success=True)]

    def test_sequential_keeps_order(self, connection, account):
        requests = self._requests(account, 4)
        context = _context(connection, account, requests[0].records)

        results = dispatch_requests(requests, self._echo, context)

        assert [result.external_id for result in results] == ["0", "1", "2", "3"]

    def test_fan_out_keeps_emission_order(self, connection, account):
        requests = self._requests(account, 4)
        context = _context(connection, account, requests[0].records)
        threads = set()

        def slow_first(chunk_context):
            threads.add(threading.get_ident())
            if chunk_context.records[0]["Migration_ID__c"] == "0":
                time.sleep(0.05)
            return self._echo(chunk_context)

        results = dispatch_requests(requests, slow_first, context, fan_out=True)

        assert [result.external_id for result in results] == ["0", "1", "2", "3"]
        assert threading.get_ident() not in threads

    def test_fan_out_failure_fails_whole_attempt(self, connection, account):
        requests = self._requests(account, 3)
        context = _context(connection, account, requests[0].records)

        def fail_second(chunk_context):
            if chunk_context.records[0]["Migration_ID__c"] == "1":
                raise RemoteError("chunk failed")
            return self._echo(chunk_context)

        with pytest.raises(RemoteError, match="chunk failed"):
            dispatch_requests(requests, fail_second, context, fan_out=True)

    def test_context_per_request(self, connection, account):
        requests = self._requests(account, 2)
        context = _context(connection, account, requests[0].records, allow_partial=True)
        seen = []

        def capture(chunk_context):
            seen.append(chunk_context)
            return []

        dispatch_requests(requests, capture, context)

        assert [ctx.request for ctx in seen] == requests
        assert all(ctx.allow_partial for ctx in seen)
