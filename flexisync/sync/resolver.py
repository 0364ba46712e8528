# FlexiSync Save Operation Resolver
# Registry of save operations and per-object resolution

from pathlib import Path
from typing import Optional

from flexisync.config.schema import DataConfig, ObjectConfig, SaveOperationKey
from flexisync.errors import ConfigurationError
from flexisync.sync.operations import SaveOperation, bulk_rest_save, standard_save
from flexisync.utils.module import is_module_reference, load_function


class SaveOperationRegistry:
    """
    Maps save operation keys to implementations.

    Keys that are not registered are loaded as ``module:function`` or
    ``file.py:function`` references and cached.
    """

    def __init__(self, base_path: Optional[Path] = None):
        """
        Initialize registry with the built-in operations.

        Args:
            base_path: Base directory for relative script references.
        """
        self.base_path = base_path
        self._operations: dict[str, SaveOperation] = {
            SaveOperationKey.STANDARD.value: standard_save,
            SaveOperationKey.DEFAULT.value: standard_save,
            SaveOperationKey.BULK.value: bulk_rest_save,
            SaveOperationKey.BOURNE.value: bulk_rest_save,
        }

    def register(self, key: str, operation: SaveOperation) -> None:
        """Register a save operation under a key."""
        self._operations[key] = operation

    def keys(self) -> list[str]:
        """Registered keys."""
        return list(self._operations.keys())

    def get(self, key: str) -> SaveOperation:
        """
        Get the save operation for a key.

        Raises:
            ConfigurationError: If the key names neither a registered nor a loadable operation.
        """
        operation = self._operations.get(key)
        if operation is not None:
            return operation

        if not is_module_reference(key):
            raise ConfigurationError(
                f"Unknown save operation: {key} (expected one of {', '.join(self.keys())} or module:function)"
            )

        try:
            operation = load_function(key, self.base_path)
        except ConfigurationError as e:
            raise ConfigurationError(f"Unable to resolve save operation {key}: {e.message}") from e

        self._operations[key] = operation
        return operation


def resolve_save_operation_key(
    object_config: ObjectConfig,
    config: DataConfig,
    override_key: Optional[str] = None,
) -> str:
    """
    Pick the save operation key for an object.

    Order: the object's own key, the run-time override, the configured
    default, then the standard operation.
    """
    return (
        object_config.save_operation
        or override_key
        or config.save_operation
        or SaveOperationKey.STANDARD.value
    )


def resolve_save_operation(
    object_config: ObjectConfig,
    config: DataConfig,
    override_key: Optional[str] = None,
    registry: Optional[SaveOperationRegistry] = None,
) -> SaveOperation:
    """
    Resolve the save operation for an object.

    Args:
        object_config: Object being saved.
        config: Run configuration.
        override_key: Key supplied for the whole run (e.g. a CLI flag).
        registry: Registry to resolve against (default: built-ins only).

    Returns:
        The save operation.

    Raises:
        ConfigurationError: If the resolved key cannot be satisfied.
    """
    registry = registry or SaveOperationRegistry()
    return registry.get(resolve_save_operation_key(object_config, config, override_key))
