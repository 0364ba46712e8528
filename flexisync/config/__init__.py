# FlexiSync Configuration Module
# Handles YAML-based data configuration loading, validation, and defaults

from flexisync.config.defaults import DEFAULT_CONFIG, generate_default_config
from flexisync.config.loader import (
    get_config_path,
    get_objects_to_process,
    load_config,
    parse_object_names,
    validate_config_file,
    write_default_config,
)
from flexisync.config.schema import (
    BulkConfig,
    DataConfig,
    DataOperation,
    ObjectConfig,
    SaveOperationKey,
)

__all__ = [
    # Schema
    "DataConfig",
    "ObjectConfig",
    "BulkConfig",
    "DataOperation",
    "SaveOperationKey",
    # Loader
    "load_config",
    "get_config_path",
    "get_objects_to_process",
    "parse_object_names",
    "validate_config_file",
    "write_default_config",
    # Defaults
    "DEFAULT_CONFIG",
    "generate_default_config",
]
