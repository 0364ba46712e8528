# FlexiSync Utilities Module
# Helpers for records, file stores and module loading

from flexisync.utils.module import load_function, load_module
from flexisync.utils.paths import (
    FileStore,
    LocalFileStore,
    atomic_write,
    clear_directory,
    ensure_dir,
)
from flexisync.utils.records import (
    Record,
    clear_null_fields,
    escape_set_value,
    key_based_dedup,
    lookup_field_for,
    record_file_name,
    remove_field,
)

__all__ = [
    # Records
    "Record",
    "remove_field",
    "key_based_dedup",
    "lookup_field_for",
    "clear_null_fields",
    "escape_set_value",
    "record_file_name",
    # Paths
    "FileStore",
    "LocalFileStore",
    "atomic_write",
    "clear_directory",
    "ensure_dir",
    # Modules
    "load_function",
    "load_module",
]
