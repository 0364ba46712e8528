# FlexiSync Hooks
# Lifecycle extension points fired around runs and objects

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from flexisync.config.schema import DataConfig, ObjectConfig
from flexisync.errors import ConfigurationError
from flexisync.sync.results import ObjectSaveResult
from flexisync.sync.state import RunState
from flexisync.utils.module import load_function
from flexisync.utils.records import Record

if TYPE_CHECKING:
    from flexisync.sync.engine import DataService


class HookType(str, Enum):
    """Lifecycle events a hook can subscribe to."""

    PRE_IMPORT = "preimport"
    PRE_IMPORT_OBJECT = "preimportobject"
    POST_IMPORT_OBJECT = "postimportobject"
    POST_IMPORT = "postimport"
    PRE_EXPORT = "preexport"
    PRE_EXPORT_OBJECT = "preexportobject"
    POST_EXPORT_OBJECT = "postexportobject"
    POST_EXPORT = "postexport"


@dataclass
class HookEvent:
    """Payload handed to every hook function."""

    hook_type: HookType
    config: DataConfig
    scope: list[ObjectConfig]
    service: "DataService"
    state: RunState
    is_delete: bool = False
    object_config: Optional[ObjectConfig] = None
    records: Optional[list[Record]] = None
    result: Optional[ObjectSaveResult] = None
    results: Optional[list[ObjectSaveResult]] = None


HookFunction = Callable[[HookEvent], Any]


class HookDispatcher:
    """
    Calls the hooks registered for each lifecycle event.

    Hooks run in registration order. Exceptions raised by a hook are not
    caught and fail the run.
    """

    def __init__(self):
        self._hooks: dict[HookType, list[HookFunction]] = {}

    def register(self, hook_type: HookType | str, func: HookFunction) -> None:
        """Register a hook function for an event."""
        self._hooks.setdefault(HookType(hook_type), []).append(func)

    def get_hooks(self, hook_type: HookType | str) -> list[HookFunction]:
        """Hooks registered for an event."""
        return list(self._hooks.get(HookType(hook_type), []))

    def fire(self, hook_type: HookType | str, event: HookEvent) -> None:
        """Call every hook registered for an event."""
        for func in self._hooks.get(HookType(hook_type), []):
            func(event)

    def __len__(self) -> int:
        return sum(len(funcs) for funcs in self._hooks.values())

    @classmethod
    def from_config(cls, hooks: dict[str, list[str]], base_path: Optional[Path] = None) -> "HookDispatcher":
        """
        Build a dispatcher from configured hook references.

        Args:
            hooks: Mapping of event name to ``module:function`` references.
            base_path: Base directory for relative script paths.

        Returns:
            Dispatcher with all hooks loaded.

        Raises:
            ConfigurationError: If an event name is unknown or a reference cannot be loaded.
        """
        dispatcher = cls()
        valid = ", ".join(hook_type.value for hook_type in HookType)

        for name, references in (hooks or {}).items():
            try:
                hook_type = HookType(name.lower())
            except ValueError:
                raise ConfigurationError(f"Unknown hook event: {name} (expected one of {valid})") from None

            for reference in references:
                try:
                    dispatcher.register(hook_type, load_function(reference, base_path))
                except ConfigurationError as e:
                    raise ConfigurationError(f"Unable to load {hook_type.value} hook {reference}: {e.message}") from e

        return dispatcher
