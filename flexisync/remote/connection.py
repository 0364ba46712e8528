# FlexiSync Remote Connection
# Contract for the remote record platform used by the sync engines

from collections.abc import Iterable
from typing import Any, Protocol

from flexisync.utils.records import Record


class Connection(Protocol):
    """
    Connection to the remote record platform.

    Implementations raise RemoteError for transport and platform failures.
    """

    def query(self, query: str) -> Iterable[Record]:
        """Run a query and return (or stream) every matching record."""
        ...

    def find(self, object_type: str, predicate: str) -> list[Record]:
        """Find records of an object type matching a predicate; each result carries its Id."""
        ...

    def upsert(
        self,
        object_type: str,
        records: list[Record],
        external_id_field: str,
        *,
        all_or_none: bool = False,
    ) -> list[dict[str, Any]]:
        """Upsert records keyed by an external id; returns one {id, success, errors} per record."""
        ...

    def delete(self, object_type: str, ids: list[str]) -> list[dict[str, Any]]:
        """Delete records by id; returns one {id, success, errors} per id."""
        ...

    def post(self, path: str, body: Any) -> Any:
        """Post a JSON body to a custom REST path and return the decoded response."""
        ...
