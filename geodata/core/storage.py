"""
Hierarchical storage used by the engine.

Paths are relative, '/'-separated and rooted at the top of the data tree; the
root itself is the empty string. Entries directly below the root have an
empty dirname.
"""

import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union


@dataclass(frozen=True)
class Entry:
    """One file or folder found by a listing."""

    path: str
    basename: str
    dirname: str
    is_dir: bool


def join_path(*parts: str) -> str:
    """Join path segments, ignoring empty ones."""
    return "/".join(part.strip("/") for part in parts if part and part.strip("/"))


def split_path(path: str) -> List[str]:
    return [part for part in path.split("/") if part]


def parent_path(path: str) -> str:
    return posixpath.dirname(path.strip("/"))


class Filesystem:
    """
    The storage interface consumed by the engine.

    Subclasses implement read/write/has/list over some hierarchical store.
    Failures surface as OSError.
    """

    def read(self, path: str) -> bytes:
        raise NotImplementedError

    def write(self, path: str, contents: bytes) -> None:
        raise NotImplementedError

    def has(self, path: str) -> bool:
        raise NotImplementedError

    def list(self, path: str = "", deep: bool = False) -> List[Entry]:
        raise NotImplementedError


class LocalFilesystem(Filesystem):
    """Storage backed by a directory on the local disk."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        parts = split_path(path)
        if ".." in parts:
            raise ValueError(f"Path escapes the data root: {path}")
        return self.root.joinpath(*parts)

    def _entry(self, path: Path) -> Entry:
        relative = path.relative_to(self.root).as_posix()
        return Entry(
            path=relative,
            basename=path.name,
            dirname=parent_path(relative),
            is_dir=path.is_dir(),
        )

    def read(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def write(self, path: str, contents: bytes) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(contents)

    def has(self, path: str) -> bool:
        return self._resolve(path).exists()

    def list(self, path: str = "", deep: bool = False) -> List[Entry]:
        """
        List the entries below a folder, sorted by path.

        Args:
            path: Folder to list, relative to the root
            deep: Whether to descend into sub-folders

        Returns:
            Every entry exactly once; an empty list if the folder does not exist
        """
        base = self._resolve(path)
        if not base.is_dir():
            return []

        children = base.rglob("*") if deep else base.iterdir()
        return sorted((self._entry(child) for child in children), key=lambda entry: entry.path)
