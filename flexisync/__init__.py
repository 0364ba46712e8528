"""FlexiSync - record data export and import for multi-tenant record platforms.

Moves records between JSON files on disk and a remote org, one directory
per object type, with payload chunking, pluggable save operations,
retries and lifecycle hooks.
"""

__version__ = "1.0.0"
__author__ = "Equitania Software GmbH"
__email__ = "info@equitania.de"

__all__ = [
    "__version__",
    "DataConfig",
    "ObjectConfig",
    "load_config",
    "ExportEngine",
    "ImportEngine",
    "ObjectSaveResult",
    "RecordSaveResult",
    "SalesforceConnection",
    "FlexiSyncError",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("DataConfig", "ObjectConfig"):
        from flexisync.config import schema

        return getattr(schema, name)
    if name == "load_config":
        from flexisync.config.loader import load_config

        return load_config
    if name in ("ExportEngine", "ImportEngine"):
        from flexisync.sync import engine

        return getattr(engine, name)
    if name in ("ObjectSaveResult", "RecordSaveResult"):
        from flexisync.sync import results

        return getattr(results, name)
    if name == "SalesforceConnection":
        from flexisync.remote.salesforce import SalesforceConnection

        return SalesforceConnection
    if name == "FlexiSyncError":
        from flexisync.errors import FlexiSyncError

        return FlexiSyncError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
