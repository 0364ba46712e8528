# FlexiSync Configuration Loader
# Load, validate and scope YAML/JSON data configuration files

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from flexisync.config.defaults import generate_default_config
from flexisync.config.schema import DataConfig, ObjectConfig
from flexisync.errors import ConfigurationError
from flexisync.utils.records import key_based_dedup

CONFIG_ENV_VAR = "FLEXISYNC_CONFIG"


def get_config_path(config_path: Optional[str | Path] = None, base_path: Optional[Path] = None) -> Path:
    """
    Resolve the data configuration file path.

    Args:
        config_path: Explicit path. Falls back to the FLEXISYNC_CONFIG environment variable.
        base_path: Base directory for relative paths (default: current directory).

    Returns:
        Absolute path to the configuration file.

    Raises:
        ConfigurationError: If no path is given or configured.
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)
    if not config_path:
        raise ConfigurationError("A configuration file path must be specified")

    path = Path(config_path).expanduser()
    if not path.is_absolute():
        path = (base_path or Path.cwd()) / path
    return path


def load_config(config_path: Path) -> DataConfig:
    """
    Load data configuration from a YAML or JSON file.

    Args:
        config_path: Path to config file.

    Returns:
        DataConfig: Validated configuration object.

    Raises:
        ConfigurationError: If the file doesn't exist or is invalid.
    """
    if not config_path.exists():
        raise ConfigurationError(f"Unable to find configuration file: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid configuration syntax in {config_path}: {e}") from e

    if data is None:
        data = {}

    try:
        return DataConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}:\n" + "\n".join(_format_errors(e))) from e


def write_default_config(config_path: Path, *, force: bool = False) -> bool:
    """
    Write the default configuration template.

    Args:
        config_path: Target file.
        force: Overwrite an existing file.

    Returns:
        True if the file was written.
    """
    if config_path.exists() and not force:
        return False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return True


def validate_config_file(config_path: Path) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without running anything.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]

    try:
        config = DataConfig.model_validate(data)
    except ValidationError as e:
        return False, _format_errors(e)

    errors: list[str] = []
    objects = config.object_list()
    if not objects:
        errors.append("No objects defined")

    for object_config in objects:
        if not object_config.object_type:
            errors.append("An object configuration is missing its object type")

    if isinstance(config.objects, dict) and config.all_objects:
        for name in config.all_objects:
            if name not in config.objects:
                errors.append(f"all_objects references unknown object: {name}")

    return len(errors) == 0, errors


def parse_object_names(value: str | list[str] | tuple[str, ...] | None) -> list[str] | None:
    """Split a comma separated object list (or repeated option values) into names."""
    if not value:
        return None
    if isinstance(value, str):
        value = [value]
    names = [name.strip() for item in value for name in item.split(",")]
    return [name for name in names if name] or None


def get_objects_to_process(config: DataConfig, object_names: Optional[list[str]] = None) -> list[ObjectConfig]:
    """
    Get the configurations of objects to process.

    Explicit names select configurations in the given order for the mapping form
    and filter the list form in declared order. Without names, all configured
    objects are returned. Duplicates are removed by object type, first wins.

    Args:
        config: Data configuration.
        object_names: Optional object types requested for this run.

    Returns:
        Ordered, deduplicated object configurations.

    Raises:
        ConfigurationError: If the scope is empty or a name has no configuration.
    """
    if isinstance(config.objects, list):
        configured = key_based_dedup(config.objects, _object_type)
        if object_names:
            known = {object_config.object_type for object_config in configured}
            for name in object_names:
                if name not in known:
                    raise ConfigurationError(f"There is no configuration specified for object: {name}")
            configured = [object_config for object_config in configured if object_config.object_type in object_names]
        if not configured:
            raise ConfigurationError("Please specify object types to process or configure objects correctly.")
        return configured

    names = object_names or config.all_objects or list(config.objects.keys())
    if not names:
        raise ConfigurationError("Please specify object types to process or configure objects correctly.")

    object_configs: list[ObjectConfig] = []
    for name in names:
        object_config = config.objects.get(name)
        if object_config is None:
            raise ConfigurationError(f"There is no configuration specified for object: {name}")
        object_configs.append(object_config)

    return key_based_dedup(object_configs, _object_type)


def _object_type(object_config: ObjectConfig) -> str:
    return object_config.object_type


def _format_errors(error: ValidationError) -> list[str]:
    messages: list[str] = []
    for item in error.errors():
        loc = " -> ".join(str(part) for part in item["loc"])
        messages.append(f"{loc}: {item['msg']}")
    return messages
