# FlexiSync Path Utilities
# File store abstraction and safe file operations for record files

import os
import tempfile
from pathlib import Path
from typing import Protocol


class FileStore(Protocol):
    """File operations used by the engines to read and write record files."""

    def exists(self, path: Path) -> bool: ...

    def list_files(self, directory: Path) -> list[str]: ...

    def read(self, path: Path) -> str: ...

    def write(self, path: Path, content: str) -> None: ...

    def remove(self, path: Path) -> None: ...

    def make_dir(self, path: Path) -> None: ...


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: Path, content: str | bytes, *, encoding: str = "utf-8") -> None:
    """
    Atomically write content to file.

    Uses a temporary file and atomic rename.

    Args:
        path: Target file path.
        content: Content to write (str or bytes).
        encoding: Encoding for string content (default utf-8).
    """
    ensure_dir(path.parent)

    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if isinstance(content, str):
            with os.fdopen(fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


class LocalFileStore:
    """FileStore backed by the local file system."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def list_files(self, directory: Path) -> list[str]:
        if not directory.is_dir():
            return []
        return sorted(entry.name for entry in directory.iterdir() if entry.is_file())

    def read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write(self, path: Path, content: str) -> None:
        atomic_write(path, content)

    def remove(self, path: Path) -> None:
        path.unlink()

    def make_dir(self, path: Path) -> None:
        ensure_dir(path)


def clear_directory(store: FileStore, directory: Path) -> int:
    """
    Remove every file in a directory, creating the directory if absent.

    Args:
        store: File store to operate on.
        directory: Directory to clear.

    Returns:
        Number of files removed.
    """
    if not store.exists(directory):
        store.make_dir(directory)
        return 0

    names = store.list_files(directory)
    for name in names:
        store.remove(directory / name)
    return len(names)
