# FlexiSync Record Type Resolver
# Rewrite record type developer names to record type ids before import

from typing import TYPE_CHECKING, Optional

from flexisync.errors import DataShapeError
from flexisync.remote.connection import Connection
from flexisync.utils.records import Record, escape_set_value

if TYPE_CHECKING:
    from flexisync.logger import SyncLogger

RECORD_TYPE_FIELD = "RecordType"
RECORD_TYPE_ID_FIELD = "RecordTypeId"
DEVELOPER_NAME_FIELD = "DeveloperName"


class RecordTypeResolver:
    """
    Resolves record type references for object types with record types.

    Each object type is queried at most once per resolver; create one
    resolver per run.
    """

    def __init__(self, connection: Connection, logger: Optional["SyncLogger"] = None):
        self.connection = connection
        self.logger = logger
        self._cache: dict[str, dict[str, str]] = {}

    def resolve(self, object_type: str) -> dict[str, str]:
        """
        Get the developer name to id lookup for an object type.

        Args:
            object_type: Object type to look up.

        Returns:
            Mapping of record type developer name to id.
        """
        if object_type in self._cache:
            return self._cache[object_type]

        query = (
            "SELECT Id, Name, DeveloperName FROM RecordType "
            f"WHERE SobjectType = '{escape_set_value(object_type)}'"
        )
        lookup = {
            record[DEVELOPER_NAME_FIELD]: record["Id"]
            for record in self.connection.query(query)
            if record.get(DEVELOPER_NAME_FIELD)
        }
        self._cache[object_type] = lookup
        return lookup

    def apply(self, object_type: str, records: list[Record]) -> list[Record]:
        """
        Replace each record's record type reference with the resolved id.

        Records without a reference pass through unchanged with a warning.

        Raises:
            DataShapeError: If a reference names an unknown record type.
        """
        lookup = self.resolve(object_type)
        for record in records:
            apply_record_type(record, lookup, object_type, self.logger)
        return records


def apply_record_type(
    record: Record,
    lookup: dict[str, str],
    object_type: str,
    logger: Optional["SyncLogger"] = None,
) -> Record:
    """Rewrite a single record's record type reference in place."""
    reference = record.get(RECORD_TYPE_FIELD)
    developer_name = reference.get(DEVELOPER_NAME_FIELD) if isinstance(reference, dict) else None

    if not developer_name:
        if logger:
            logger.warning(f"{object_type} record has no record type reference, skipping transformation")
        return record

    record_type_id = lookup.get(developer_name)
    if record_type_id is None:
        raise DataShapeError(f"Record type not found for {object_type}: {developer_name}")

    record[RECORD_TYPE_ID_FIELD] = record_type_id
    del record[RECORD_TYPE_FIELD]
    return record
