# FlexiSync Sync Module
# Data synchronization engine and components

from flexisync.sync.engine import DataService, ExportEngine, ImportEngine, SyncEngine
from flexisync.sync.hooks import HookDispatcher, HookEvent, HookType
from flexisync.sync.operations import (
    SaveContext,
    SaveOperation,
    bulk_rest_save,
    dispatch_requests,
    missing_results,
    standard_save,
)
from flexisync.sync.record_types import RecordTypeResolver
from flexisync.sync.requests import SaveRequest, build_requests
from flexisync.sync.resolver import SaveOperationRegistry, resolve_save_operation
from flexisync.sync.results import ObjectSaveResult, RecordSaveResult
from flexisync.sync.retry import AttemptState, RetryController
from flexisync.sync.state import RunState

__all__ = [
    # Requests
    "SaveRequest",
    "build_requests",
    # Results
    "RecordSaveResult",
    "ObjectSaveResult",
    # Operations
    "SaveContext",
    "SaveOperation",
    "standard_save",
    "bulk_rest_save",
    "dispatch_requests",
    "missing_results",
    # Resolver
    "SaveOperationRegistry",
    "resolve_save_operation",
    # Record types
    "RecordTypeResolver",
    # Retry
    "AttemptState",
    "RetryController",
    # Hooks
    "HookType",
    "HookEvent",
    "HookDispatcher",
    "RunState",
    # Engine
    "DataService",
    "SyncEngine",
    "ExportEngine",
    "ImportEngine",
]
