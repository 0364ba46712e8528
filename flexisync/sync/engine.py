# FlexiSync Sync Engine
# Object processing orchestrators for export and import runs

import json
from pathlib import Path
from typing import Optional, Protocol

from flexisync.config.loader import get_objects_to_process
from flexisync.config.schema import DataConfig, DataOperation, ObjectConfig
from flexisync.errors import ConfigurationError, DataShapeError
from flexisync.logger import SyncLogger
from flexisync.remote.connection import Connection
from flexisync.sync.hooks import HookDispatcher, HookEvent, HookType
from flexisync.sync.operations import SaveContext, SaveOperation, dispatch_requests, missing_results
from flexisync.sync.record_types import RecordTypeResolver
from flexisync.sync.requests import build_requests
from flexisync.sync.resolver import SaveOperationRegistry, resolve_save_operation
from flexisync.sync.results import ObjectSaveResult, RecordSaveResult
from flexisync.sync.retry import RetryController
from flexisync.sync.state import RunState
from flexisync.utils.paths import FileStore, LocalFileStore, clear_directory
from flexisync.utils.records import Record, clear_null_fields, record_file_name, remove_field

ATTRIBUTES_FIELD = "attributes"
RECORD_FILE_SUFFIX = ".json"


class DataService(Protocol):
    """Record access offered to hooks while a run is in progress."""

    def get_records(self, object_type: str | ObjectConfig) -> list[Record]: ...

    def save_records(self, object_type: str | ObjectConfig, records: list[Record]) -> ObjectSaveResult: ...


class SyncEngine:
    """
    Base orchestrator.

    Processes the configured objects one at a time in scope order and fires
    run and object hooks around the pass. Subclasses supply the direction
    specific record loading and saving.
    """

    pre_run_hook: HookType
    pre_object_hook: HookType
    post_object_hook: HookType
    post_run_hook: HookType

    def __init__(
        self,
        config: DataConfig,
        connection: Connection,
        *,
        data_dir: Optional[str | Path] = None,
        base_path: Optional[Path] = None,
        store: Optional[FileStore] = None,
        dispatcher: Optional[HookDispatcher] = None,
        logger: Optional[SyncLogger] = None,
        object_names: Optional[list[str]] = None,
    ):
        """
        Initialize engine.

        Args:
            config: Data configuration.
            connection: Remote connection.
            data_dir: Base directory for record files (default: config data_dir).
            base_path: Directory relative data paths are resolved against.
            store: File store (default: local file system).
            dispatcher: Hook dispatcher (default: no hooks).
            logger: Logger for progress output.
            object_names: Object types to process (default: all configured).
        """
        self.config = config
        self.connection = connection
        self.base_path = base_path or Path.cwd()
        self.data_dir = self._resolve_dir(data_dir or config.data_dir)
        self.store = store or LocalFileStore()
        self.dispatcher = dispatcher or HookDispatcher()
        self.logger = logger or SyncLogger()
        self.object_names = object_names
        self.state = RunState()
        self.scope: list[ObjectConfig] = []

    @property
    def is_delete(self) -> bool:
        return False

    def _resolve_dir(self, path: str | Path) -> Path:
        path = Path(path).expanduser()
        return path if path.is_absolute() else self.base_path / path

    def get_object_config(self, object_type: str | ObjectConfig) -> ObjectConfig:
        """
        Resolve an object type name to its configuration.

        Raises:
            ConfigurationError: If the object type is not configured.
        """
        if isinstance(object_type, ObjectConfig):
            return object_type

        object_config = self.config.get_object(object_type)
        if object_config is None:
            raise ConfigurationError(f"There is no configuration specified for object: {object_type}")
        return object_config

    def object_path(self, object_config: ObjectConfig) -> Path:
        """Directory holding an object's record files."""
        return self.data_dir / object_config.directory_name

    def get_scope(self) -> list[ObjectConfig]:
        """Objects to process, in processing order."""
        return get_objects_to_process(self.config, self.object_names)

    def run(self) -> list[ObjectSaveResult]:
        """
        Process every object in scope.

        Returns:
            One result per processed object.

        Raises:
            FlexiSyncError: If processing any object fails; no results are returned.
        """
        self.scope = self.get_scope()
        self.state = RunState()
        self.on_run_start()

        results: list[ObjectSaveResult] = []
        self.fire(self.pre_run_hook, results=results)

        for object_config in self.scope:
            results.append(self.process_object(object_config))

        self.fire(self.post_run_hook, results=results)
        return results

    def on_run_start(self) -> None:
        """Reset per-run collaborators."""

    def process_object(self, object_config: ObjectConfig) -> ObjectSaveResult:
        """
        Load and save one object, firing the object hooks around the save.

        Objects without records return a zero result and fire no hooks.
        """
        records = self.get_records(object_config)
        if not records:
            self.logger.info(f"No {object_config.object_type} records to process")
            return ObjectSaveResult.empty(object_config.object_type, str(self.object_path(object_config)))

        self.fire(self.pre_object_hook, object_config=object_config, records=records)
        result = self.save_records(object_config, records)
        self.fire(self.post_object_hook, object_config=object_config, records=records, result=result)
        return result

    def fire(self, hook_type: HookType, **kwargs) -> None:
        """Fire a hook with the run's shared state."""
        event = HookEvent(
            hook_type=hook_type,
            config=self.config,
            scope=self.scope,
            service=self,
            state=self.state,
            is_delete=self.is_delete,
            **kwargs,
        )
        self.dispatcher.fire(hook_type, event)

    def get_records(self, object_type: str | ObjectConfig) -> list[Record]:
        raise NotImplementedError

    def save_records(self, object_type: str | ObjectConfig, records: list[Record]) -> ObjectSaveResult:
        raise NotImplementedError


class ExportEngine(SyncEngine):
    """Export records from the remote platform into one JSON file per record."""

    pre_run_hook = HookType.PRE_EXPORT
    pre_object_hook = HookType.PRE_EXPORT_OBJECT
    post_object_hook = HookType.POST_EXPORT_OBJECT
    post_run_hook = HookType.POST_EXPORT

    def get_records(self, object_type: str | ObjectConfig) -> list[Record]:
        """
        Query an object's records from the remote platform.

        Raises:
            ConfigurationError: If the object has no query.
        """
        object_config = self.get_object_config(object_type)
        if not object_config.query:
            raise ConfigurationError(f"No query configured for object: {object_config.object_type}")
        return list(self.connection.query(object_config.query))

    def save_records(self, object_type: str | ObjectConfig, records: list[Record]) -> ObjectSaveResult:
        """
        Replace an object's directory contents with one file per record.

        Args:
            object_type: Object type name or configuration.
            records: Queried records.

        Returns:
            Result with one successful entry per written file.

        Raises:
            ConfigurationError: If a record lacks the file name field.
            DataShapeError: If a record's file name field has no value.
        """
        object_config = self.get_object_config(object_type)
        path = self.object_path(object_config)
        name_field = object_config.filename_field

        removed = clear_directory(self.store, path)
        if removed:
            self.logger.info(f"Removed {removed} existing files from {path}")

        results: list[RecordSaveResult] = []
        for record in records:
            remove_field(record, ATTRIBUTES_FIELD)
            clear_null_fields(record, object_config.cleanup_fields)

            if name_field not in record:
                raise ConfigurationError(
                    f"Records for {object_config.object_type} have no {name_field} field, "
                    "add it to the query or configure a different external id"
                )
            value = record[name_field]
            if value is None or value == "":
                raise DataShapeError(
                    f"{object_config.object_type} record {record.get('Id', '')} has no value for {name_field}"
                )

            self.store.write(path / record_file_name(value), json.dumps(record, indent=2, ensure_ascii=False))
            results.append(RecordSaveResult(record_id=record.get("Id"), external_id=str(value), success=True))

        self.logger.success(f"Exported {len(records)} {object_config.object_type} records to {path}")
        return ObjectSaveResult.from_results(object_config.object_type, str(path), records, results)


class ImportEngine(SyncEngine):
    """Import record files into the remote platform, or remove them from it."""

    pre_run_hook = HookType.PRE_IMPORT
    pre_object_hook = HookType.PRE_IMPORT_OBJECT
    post_object_hook = HookType.POST_IMPORT_OBJECT
    post_run_hook = HookType.POST_IMPORT

    def __init__(
        self,
        config: DataConfig,
        connection: Connection,
        *,
        save_operation: Optional[str] = None,
        allow_partial: bool = False,
        remove: bool = False,
        registry: Optional[SaveOperationRegistry] = None,
        **kwargs,
    ):
        """
        Initialize import engine.

        Args:
            config: Data configuration.
            connection: Remote connection.
            save_operation: Save operation key overriding the configured default.
            allow_partial: Accept partial success even if the config does not.
            remove: Delete the records instead of upserting them.
            registry: Save operation registry.
            **kwargs: Passed to SyncEngine.
        """
        super().__init__(config, connection, **kwargs)
        self.save_operation_key = save_operation
        self.allow_partial = allow_partial or config.allow_partial
        self.remove = remove
        self.registry = registry or SaveOperationRegistry(self.base_path)
        self.record_types = RecordTypeResolver(connection, self.logger)

    @property
    def is_delete(self) -> bool:
        return self.remove

    @property
    def operation(self) -> DataOperation:
        return DataOperation.DELETE if self.remove else DataOperation.UPSERT

    def get_scope(self) -> list[ObjectConfig]:
        """Objects in configured order, reversed for removal so dependents go first."""
        scope = super().get_scope()
        return list(reversed(scope)) if self.remove else scope

    def on_run_start(self) -> None:
        self.record_types = RecordTypeResolver(self.connection, self.logger)

    def get_records(self, object_type: str | ObjectConfig) -> list[Record]:
        """
        Load an object's records from its directory.

        Only ``*.json`` files are read, in name order. A file may hold a single
        record or a list of records. Record type references are resolved to
        ids for objects with record types.

        Raises:
            DataShapeError: If a file is not valid JSON or a record type is unknown.
        """
        object_config = self.get_object_config(object_type)
        path = self.object_path(object_config)
        if not self.store.exists(path):
            return []

        records: list[Record] = []
        for name in self.store.list_files(path):
            if not name.endswith(RECORD_FILE_SUFFIX):
                continue
            try:
                data = json.loads(self.store.read(path / name))
            except json.JSONDecodeError as e:
                raise DataShapeError(f"Invalid record file {path / name}: {e}") from e

            if isinstance(data, list):
                records.extend(data)
            else:
                records.append(data)

        if records and object_config.has_record_types:
            records = self.record_types.apply(object_config.object_type, records)
        return records

    def save_records(self, object_type: str | ObjectConfig, records: list[Record]) -> ObjectSaveResult:
        """
        Save records with the object's save operation, retrying failed attempts.

        Args:
            object_type: Object type name or configuration.
            records: Records to save.

        Returns:
            Result of the last attempt.

        Raises:
            ConfigurationError: If the save operation cannot be resolved.
            PartialFailureError: If failures remain and partial success is not allowed.
        """
        object_config = self.get_object_config(object_type)
        path = str(self.object_path(object_config))
        save_operation = resolve_save_operation(object_config, self.config, self.save_operation_key, self.registry)

        def attempt(attempt_config: ObjectConfig, attempt_records: list[Record]) -> ObjectSaveResult:
            return self._attempt(attempt_config, attempt_records, save_operation, path)

        controller = RetryController(
            attempt,
            max_attempts=self.config.max_attempts,
            allow_partial=self.allow_partial,
            logger=self.logger,
        )
        result = controller.run(object_config, records, path=path)

        verb = "Removed" if self.remove else "Imported"
        if result.has_failures:
            self.logger.warning(
                f"{verb} {result.success} of {result.total} {object_config.object_type} records "
                f"({result.failure} failed)"
            )
        else:
            self.logger.success(f"{verb} {result.success} {object_config.object_type} records")
        return result

    def _attempt(
        self,
        object_config: ObjectConfig,
        records: list[Record],
        save_operation: SaveOperation,
        path: str,
    ) -> ObjectSaveResult:
        requests = build_requests(records, object_config, self.config.payload_length, self.operation)
        self.logger.debug(f"{object_config.object_type}: {len(records)} records in {len(requests)} save requests")
        results: list[RecordSaveResult] = []
        if requests:
            context = SaveContext(
                config=self.config,
                object_config=object_config,
                request=requests[0],
                connection=self.connection,
                allow_partial=self.allow_partial,
            )
            results = dispatch_requests(requests, save_operation, context, fan_out=object_config.fan_out)

        if not self.remove and len(results) != len(records):
            self.logger.warning(
                f"{object_config.object_type} save returned {len(results)} results for {len(records)} records"
            )
            # Records without a result count as failed
            results.extend(missing_results(records[len(results):], object_config.external_id))
        return ObjectSaveResult.from_results(object_config.object_type, path, records, results)
