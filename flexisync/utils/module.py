# FlexiSync Module Loading
# Resolve user-supplied functions from modules or script files

import importlib
import importlib.util
from collections.abc import Callable
from pathlib import Path
from types import ModuleType
from typing import Any, Optional

from flexisync.errors import ConfigurationError

DEFAULT_EXPORT_NAMES = ("run", "main")


def is_module_reference(reference: str) -> bool:
    """Check whether a string looks like a module or file reference."""
    return ":" in reference or reference.endswith(".py") or "." in reference


def split_reference(reference: str) -> tuple[str, Optional[str]]:
    """
    Split a reference into its module part and optional export name.

    ``pkg.module:func`` -> (``pkg.module``, ``func``);
    ``scripts/hook.py`` -> (``scripts/hook.py``, None).
    """
    module_part, sep, export_name = reference.rpartition(":")
    # Windows drive letters ("C:\\...") are not export separators
    if not sep or not export_name or "/" in export_name or "\\" in export_name:
        return reference, None
    return module_part, export_name


def load_module(module_ref: str, base_path: Optional[Path] = None) -> ModuleType:
    """
    Load a module from a dotted name or a Python file path.

    Args:
        module_ref: Dotted module name or path to a ``.py`` file.
        base_path: Base directory for relative file paths.

    Returns:
        Loaded module.

    Raises:
        ConfigurationError: If the module cannot be loaded.
    """
    if module_ref.endswith(".py"):
        file_path = Path(module_ref).expanduser()
        if not file_path.is_absolute():
            file_path = (base_path or Path.cwd()) / file_path
        if not file_path.exists():
            raise ConfigurationError(f"Unable to find script: {file_path}")

        spec = importlib.util.spec_from_file_location(f"flexisync_script_{file_path.stem}", file_path)
        if spec is None or spec.loader is None:
            raise ConfigurationError(f"Cannot import script: {file_path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(module_ref)
    except ImportError as e:
        raise ConfigurationError(f"Unable to import module {module_ref}: {e}") from e


def get_function(module: Any, export_name: Optional[str] = None) -> Optional[Callable[..., Any]]:
    """Resolve a callable from a module by name, falling back to ``run`` or ``main``."""
    if export_name:
        func = getattr(module, export_name, None)
        return func if callable(func) else None

    for name in DEFAULT_EXPORT_NAMES:
        func = getattr(module, name, None)
        if callable(func):
            return func
    return None


def load_function(reference: str, base_path: Optional[Path] = None) -> Callable[..., Any]:
    """
    Load a function from ``module:function`` or ``path/to/file.py:function``.

    Raises:
        ConfigurationError: If the function cannot be resolved.
    """
    module_ref, export_name = split_reference(reference)
    func = get_function(load_module(module_ref, base_path), export_name)
    if func is None:
        suffix = f":{export_name}" if export_name else ""
        raise ConfigurationError(f"Unable to resolve function from {module_ref}{suffix}")
    return func
