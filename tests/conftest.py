# FlexiSync Test Fixtures
# Pytest fixtures for FlexiSync tests

import copy
import json
import re
import tempfile
from collections.abc import Generator
from io import StringIO
from pathlib import Path
from typing import Any

import pytest
import yaml
from rich.console import Console as RichConsole

from flexisync.config.schema import DataConfig
from flexisync.logger import SyncLogger


class FakeConnection:
    """
    In-memory Connection recording every call.

    Queries return the records stored under the object type named in the
    FROM clause. Queued responses (or exceptions) are consumed first by
    upsert and post; afterwards every record succeeds.
    """

    def __init__(self):
        self.records: dict[str, list[dict[str, Any]]] = {}
        self.find_results: list[dict[str, Any]] = []
        self.upsert_responses: list[Any] = []
        self.post_responses: list[Any] = []
        self.queries: list[str] = []
        self.finds: list[tuple[str, str]] = []
        self.upserts: list[dict[str, Any]] = []
        self.deletes: list[tuple[str, list[str]]] = []
        self.posts: list[tuple[str, Any]] = []

    def query(self, query: str):
        self.queries.append(query)
        match = re.search(r"\bFROM\s+(\w+)", query, re.IGNORECASE)
        records = self.records.get(match.group(1), []) if match else []
        return iter(copy.deepcopy(records))

    def find(self, object_type: str, predicate: str) -> list[dict[str, Any]]:
        self.finds.append((object_type, predicate))
        return list(self.find_results)

    def upsert(self, object_type, records, external_id_field, *, all_or_none=False):
        self.upserts.append(
            {
                "object_type": object_type,
                "records": copy.deepcopy(records),
                "external_id_field": external_id_field,
                "all_or_none": all_or_none,
            }
        )
        if self.upsert_responses:
            return _next_response(self.upsert_responses)
        return [{"id": f"{object_type}-{i}", "success": True, "errors": []} for i in range(1, len(records) + 1)]

    def delete(self, object_type: str, ids: list[str]) -> list[dict[str, Any]]:
        self.deletes.append((object_type, list(ids)))
        return [{"id": record_id, "success": True, "errors": []} for record_id in ids]

    def post(self, path: str, body: Any) -> Any:
        self.posts.append((path, copy.deepcopy(body)))
        if self.post_responses:
            return _next_response(self.post_responses)
        ext_field = body["extIdField"]
        return [
            {"recordId": f"bulk-{i}", "externalId": record.get(ext_field), "success": True}
            for i, record in enumerate(body["payload"], 1)
        ]


def _next_response(queue: list[Any]) -> Any:
    response = queue.pop(0)
    if isinstance(response, Exception):
        raise response
    return response


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def connection() -> FakeConnection:
    """Create an in-memory remote connection."""
    return FakeConnection()


@pytest.fixture
def quiet_logger() -> SyncLogger:
    """Logger writing to an in-memory buffer."""
    return SyncLogger(RichConsole(file=StringIO(), no_color=True, width=200))


@pytest.fixture
def sample_config_dict() -> dict:
    """Create a sample data configuration dict."""
    return {
        "data_dir": "data",
        "import_retries": 0,
        "objects": [
            {
                "object_type": "Account",
                "query": "SELECT Id, Name, Migration_ID__c FROM Account",
                "external_id": "Migration_ID__c",
                "directory": "accounts",
            },
            {
                "object_type": "Contact",
                "query": "SELECT Id, LastName, Migration_ID__c FROM Contact",
                "external_id": "Migration_ID__c",
                "directory": "contacts",
            },
        ],
    }


@pytest.fixture
def sample_config(sample_config_dict: dict) -> DataConfig:
    """Validated sample configuration."""
    return DataConfig.model_validate(sample_config_dict)


@pytest.fixture
def config_file(temp_dir: Path, sample_config_dict: dict) -> Path:
    """Create a config file in temp directory."""
    config_path = temp_dir / "flexisync.yaml"
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config_dict, f)
    return config_path


@pytest.fixture
def write_records():
    """Write one JSON file per record, named after the key field."""

    def _write(directory: Path, records: list[dict[str, Any]], key: str = "Migration_ID__c") -> None:
        directory.mkdir(parents=True, exist_ok=True)
        for record in records:
            (directory / f"{record[key]}.json").write_text(json.dumps(record), encoding="utf-8")

    return _write
