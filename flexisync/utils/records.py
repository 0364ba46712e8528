# FlexiSync Record Utilities
# Helpers for schema-less records (ordered field -> value mappings)

import re
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

Record = dict[str, Any]

T = TypeVar("T")

RELATIONSHIP_SUFFIX = "__r"
CUSTOM_ID_SUFFIX = "__c"
STANDARD_ID_SUFFIX = "Id"

_WHITESPACE = re.compile(r"\s+")
_ESCAPED_CHARS = ("'", '"', "\\")


def remove_field(record: Any, field_name: str) -> None:
    """
    Recursively remove a field from a record and its child records.

    Args:
        record: Record (or nested list of records) to clean in place.
        field_name: Field to remove, e.g. the platform "attributes" metadata.
    """
    if isinstance(record, dict):
        record.pop(field_name, None)
        for value in record.values():
            if isinstance(value, (dict, list)):
                remove_field(value, field_name)
    elif isinstance(record, list):
        for value in record:
            remove_field(value, field_name)


def key_based_dedup(items: Iterable[T], key_getter: Callable[[T], str]) -> list[T]:
    """Deduplicate items by a generated key, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[T] = []
    for item in items:
        key = key_getter(item)
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result


def lookup_field_for(field_name: str) -> str:
    """
    Get the id field that backs a relationship field.

    Custom relationships swap the ``__r`` suffix for ``__c``; standard
    relationships append ``Id`` (``Account`` -> ``AccountId``).
    """
    if field_name.endswith(RELATIONSHIP_SUFFIX):
        return field_name[: -len(RELATIONSHIP_SUFFIX)] + CUSTOM_ID_SUFFIX
    return field_name + STANDARD_ID_SUFFIX


def clear_null_fields(record: Record, cleanup_fields: Iterable[str]) -> None:
    """
    Turn explicit null relationship fields into "clear this lookup" values.

    For every listed field holding an explicit null, the relationship field is
    deleted and its id field is set to null.
    """
    for field_name in cleanup_fields:
        if field_name in record and record[field_name] is None:
            del record[field_name]
            record[lookup_field_for(field_name)] = None


def escape_set_value(value: str) -> str:
    """Backslash-escape quotes and backslashes for use inside a query predicate."""
    escaped = []
    for ch in value:
        if ch in _ESCAPED_CHARS:
            escaped.append("\\")
        escaped.append(ch)
    return "".join(escaped)


def record_file_name(value: Any) -> str:
    """Build the file name for a record from its identifying value."""
    return f"{_WHITESPACE.sub('-', str(value))}.json"
