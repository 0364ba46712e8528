# FlexiSync Save Requests
# Split record batches into save requests that fit the payload size limit

import json
from dataclasses import dataclass
from typing import Any, Optional

from flexisync.config.schema import DataOperation, ObjectConfig
from flexisync.utils.records import Record


@dataclass
class SaveRequest:
    """A chunk of records destined for one save operation call."""

    object_type: str
    operation: DataOperation
    external_id_field: str
    records: list[Record]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON body posted by the bulk REST operation."""
        return {
            "sObjectType": self.object_type,
            "operation": self.operation.value,
            "extIdField": self.external_id_field,
            "payload": self.records,
        }


def serialize_records(records: list[Record]) -> str:
    """Compact JSON serialization used to measure payload size."""
    return json.dumps(records, separators=(",", ":"), ensure_ascii=False, default=str)


def serialized_size(records: list[Record]) -> int:
    """Serialized length of a record list."""
    return len(serialize_records(records))


def build_requests(
    records: list[Record],
    object_config: ObjectConfig,
    max_size: Optional[int],
    operation: DataOperation = DataOperation.UPSERT,
) -> list[SaveRequest]:
    """
    Build save requests whose serialized payload fits within max_size.

    A batch that is too large is split at its midpoint and each half is
    processed independently, so concatenating the requests in order yields
    the original records. A single record is emitted even if it alone
    exceeds max_size.

    Args:
        records: Records to save.
        object_config: Object the records belong to.
        max_size: Maximum serialized size of a request; None disables splitting.
        operation: Upsert or delete.

    Returns:
        Save requests in record order; empty for no records.
    """
    requests: list[SaveRequest] = []
    if records:
        _split(records, 0, len(records), object_config, max_size, operation, requests)
    return requests


def _split(
    records: list[Record],
    start: int,
    end: int,
    object_config: ObjectConfig,
    max_size: Optional[int],
    operation: DataOperation,
    requests: list[SaveRequest],
) -> None:
    chunk = records[start:end]
    if max_size is None or len(chunk) == 1 or serialized_size(chunk) <= max_size:
        requests.append(
            SaveRequest(
                object_type=object_config.object_type,
                operation=operation,
                external_id_field=object_config.external_id,
                records=chunk,
            )
        )
        return

    middle = start + (end - start) // 2
    _split(records, start, middle, object_config, max_size, operation, requests)
    _split(records, middle, end, object_config, max_size, operation, requests)
