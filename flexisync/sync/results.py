# FlexiSync Save Results
# Per-record and per-object outcomes of save operations

from dataclasses import dataclass, field
from typing import Any, Optional

from flexisync.utils.records import Record


@dataclass(frozen=True)
class RecordSaveResult:
    """Outcome of saving a single record."""

    record_id: Optional[str] = None
    external_id: Optional[str] = None
    message: Optional[str] = None
    success: bool = False

    @property
    def status(self) -> str:
        """Human-readable status."""
        return "SUCCESS" if self.success else "FAILED"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, using the wire field names."""
        return {
            "recordId": self.record_id,
            "externalId": self.external_id,
            "message": self.message,
            "success": self.success,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordSaveResult":
        """Create from a wire dictionary (camelCase or snake_case keys)."""
        external_id = data.get("externalId", data.get("external_id"))
        return cls(
            record_id=data.get("recordId", data.get("record_id")),
            external_id=str(external_id) if external_id is not None else None,
            message=data.get("message"),
            success=bool(data.get("success")),
        )


@dataclass
class ObjectSaveResult:
    """Summary of saving all records for one object type."""

    object_type: str
    path: str
    records: list[Record] = field(default_factory=list)
    results: list[RecordSaveResult] = field(default_factory=list)
    total: int = 0
    success: int = 0
    failure: int = 0
    failure_results: list[RecordSaveResult] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        """Check if any record failed."""
        return self.failure > 0

    @classmethod
    def from_results(
        cls,
        object_type: str,
        path: str,
        records: list[Record],
        results: list[RecordSaveResult],
    ) -> "ObjectSaveResult":
        """Build a summary from per-record results."""
        failure_results = [result for result in results if not result.success]
        return cls(
            object_type=object_type,
            path=path,
            records=records,
            results=results,
            total=len(results),
            success=len(results) - len(failure_results),
            failure=len(failure_results),
            failure_results=failure_results,
        )

    @classmethod
    def empty(cls, object_type: str, path: str) -> "ObjectSaveResult":
        """Zero-totals result for an object with no records."""
        return cls(object_type=object_type, path=path)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "objectType": self.object_type,
            "path": self.path,
            "total": self.total,
            "success": self.success,
            "failure": self.failure,
            "results": [result.to_dict() for result in self.results],
        }
