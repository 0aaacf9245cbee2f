"""
Enumeration of the data tree.

Each folder may hold a data.geojson describing its children, plus one
sub-folder per child place with its own data.geojson, flag.svg and LICENCE.md.
"""

from typing import Iterable, List

from .storage import Entry, Filesystem, join_path

DATA_FILE = "data.geojson"
FLAG_FILE = "flag.svg"
LICENCE_FILE = "LICENCE.md"


def walk(filesystem: Filesystem, root: str = "") -> List[Entry]:
    """Every entry below root, exactly once, sorted by path."""
    return sorted(filesystem.list(root, deep=True), key=lambda entry: entry.path)


def data_files(entries: Iterable[Entry]) -> List[Entry]:
    return [entry for entry in entries if entry.basename == DATA_FILE and not entry.is_dir]


def flag_files(entries: Iterable[Entry]) -> List[Entry]:
    return [entry for entry in entries if entry.basename == FLAG_FILE and not entry.is_dir]


def data_folders(entries: Iterable[Entry]) -> List[str]:
    """
    Folders that hold a data.geojson or a flag.svg.

    The root folder is excluded, as it has no parent to be listed in.
    """
    entries = list(entries)
    found = {
        entry.dirname
        for entry in data_files(entries) + flag_files(entries)
        if entry.dirname
    }
    return sorted(found)


def sort_by_parent(entries: Iterable[Entry]) -> List[Entry]:
    """Order entries so that a folder's files come before its descendants'."""
    return sorted(entries, key=lambda entry: (entry.dirname, entry.path))


def data_file_for(folder: str) -> str:
    """Path of the data.geojson that lists the children of folder."""
    return join_path(folder, DATA_FILE)
