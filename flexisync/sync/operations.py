# FlexiSync Save Operations
# Built-in strategies persisting a chunk of records on the remote platform

import json
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Optional

from flexisync.config.schema import DataConfig, DataOperation, ObjectConfig
from flexisync.errors import RemoteError
from flexisync.remote.connection import Connection
from flexisync.sync.requests import SaveRequest
from flexisync.sync.results import RecordSaveResult
from flexisync.utils.records import Record, escape_set_value

DEFAULT_MAX_WORKERS = 8
NO_RESULT_MESSAGE = "No result returned for record"


@dataclass
class SaveContext:
    """Everything a save operation needs to persist one save request."""

    config: DataConfig
    object_config: ObjectConfig
    request: SaveRequest
    connection: Connection
    allow_partial: bool = False

    @property
    def operation(self) -> DataOperation:
        return self.request.operation

    @property
    def is_delete(self) -> bool:
        return self.request.operation == DataOperation.DELETE

    @property
    def records(self) -> list[Record]:
        return self.request.records


SaveOperation = Callable[[SaveContext], list[RecordSaveResult]]


def standard_save(context: SaveContext) -> list[RecordSaveResult]:
    """
    Save records with the platform's native upsert and delete calls.

    Args:
        context: Save context for one request.

    Returns:
        One result per upserted record, or one per deleted remote record.
    """
    if context.is_delete:
        return _standard_delete(context)

    object_config = context.object_config
    upsert_results = context.connection.upsert(
        object_config.object_type,
        context.records,
        object_config.external_id,
        all_or_none=not context.allow_partial,
    )

    results: list[RecordSaveResult] = []
    for record, upsert_result in zip(context.records, upsert_results or []):
        success = bool(upsert_result.get("success"))
        external_id = record.get(object_config.external_id)
        results.append(
            RecordSaveResult(
                record_id=upsert_result.get("id") if success else None,
                external_id=str(external_id) if external_id is not None else None,
                message=None if success else _error_message(upsert_result.get("errors")),
                success=success,
            )
        )
    results.extend(missing_results(context.records[len(results):], object_config.external_id))
    return results


def missing_results(records: list[Record], external_id_field: str) -> list[RecordSaveResult]:
    """Failed results for records the platform returned no result for."""
    results = []
    for record in records:
        external_id = record.get(external_id_field)
        results.append(
            RecordSaveResult(
                external_id=str(external_id) if external_id is not None else None,
                message=NO_RESULT_MESSAGE,
                success=False,
            )
        )
    return results


def external_id_predicate(external_id_field: str, external_ids: list[str]) -> str:
    """Build an ``<field> in ('a','b')`` predicate with escaped values."""
    values = ",".join(f"'{escape_set_value(value)}'" for value in external_ids)
    return f"{external_id_field} in ({values})"


def _standard_delete(context: SaveContext) -> list[RecordSaveResult]:
    """Resolve remote ids by external id, then delete them."""
    object_config = context.object_config

    external_ids: list[str] = []
    for record in context.records:
        external_id = record.get(object_config.external_id)
        if external_id is not None and external_id != "" and str(external_id) not in external_ids:
            external_ids.append(str(external_id))

    if not external_ids:
        return []

    existing = context.connection.find(
        object_config.object_type,
        external_id_predicate(object_config.external_id, external_ids),
    )
    if not existing:
        return []

    ids = [record["Id"] for record in existing]
    delete_results = context.connection.delete(object_config.object_type, ids)
    return [
        RecordSaveResult(
            record_id=delete_result.get("id") or record_id,
            success=bool(delete_result.get("success")),
            message=None if delete_result.get("success") else _error_message(delete_result.get("errors")),
        )
        for record_id, delete_result in zip(ids, delete_results)
    ]


def bulk_rest_save(context: SaveContext) -> list[RecordSaveResult]:
    """
    Save records by posting the save request as JSON to the bulk REST path.

    The response is a JSON list of results; a JSON document encoded as a
    string is decoded again.
    """
    response = context.connection.post(context.config.bulk.rest_path, context.request.to_dict())
    if isinstance(response, (str, bytes)):
        response = json.loads(response)
    if not response:
        return []
    if not isinstance(response, list):
        raise RemoteError(f"Unexpected bulk save response for {context.request.object_type}: {response!r}")
    return [RecordSaveResult.from_dict(item) for item in response]


def dispatch_requests(
    requests: list[SaveRequest],
    save_operation: SaveOperation,
    context: SaveContext,
    *,
    fan_out: bool = False,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[RecordSaveResult]:
    """
    Run a save operation for every request and concatenate the results.

    Sequential mode awaits each request before sending the next. Fan-out mode
    sends all requests concurrently; results keep request order and any
    failure discards the whole batch.

    Args:
        requests: Save requests in emission order.
        save_operation: Resolved save operation.
        context: Template context; its request is replaced per call.
        fan_out: Dispatch requests concurrently.
        max_workers: Thread pool size for fan-out.

    Returns:
        Results in request order.
    """
    contexts = [replace(context, request=request) for request in requests]

    if fan_out and len(contexts) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(contexts))) as executor:
            chunk_results = list(executor.map(save_operation, contexts))
    else:
        chunk_results = [save_operation(chunk_context) for chunk_context in contexts]

    results: list[RecordSaveResult] = []
    for items in chunk_results:
        if items:
            results.extend(items)
    return results


def _error_message(errors: Optional[Any]) -> Optional[str]:
    """Join platform error entries into a single message."""
    if not errors:
        return None
    if isinstance(errors, str):
        return errors
    messages = []
    for error in errors:
        if isinstance(error, dict):
            messages.append(str(error.get("message") or error.get("statusCode") or error))
        else:
            messages.append(str(error))
    return ";".join(messages)
