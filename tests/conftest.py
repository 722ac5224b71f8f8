"""
Shared fixtures for ignorewalk tests
"""

import stat
from pathlib import Path
from typing import Dict, Optional, Set, Union

import pytest

from ignorewalk.fs import DirEntry, EntryStats, EntryType, FileSystem


def make_tree(root: Path, layout: Dict[str, Optional[str]]) -> Path:
    """
    Create files and directories below ``root``

    Args:
        root: Directory to populate
        layout: Relative path -> file content, or None for a directory
    """
    for rel_path, content in layout.items():
        target = root / rel_path
        if content is None:
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
    return root


class FakeFileSystem(FileSystem):
    """In-memory FileSystem that can be told to fail on chosen paths"""

    def __init__(self, layout: Dict[str, Optional[Union[str, bytes]]]):
        self.entries: Dict[str, Optional[bytes]] = {}
        self.fail_list: Set[str] = set()
        self.fail_stat: Set[str] = set()
        self.fail_read: Set[str] = set()
        self.list_calls = []
        for path, content in layout.items():
            self._add(path, content)

    def _add(self, path: str, content):
        path = Path(path)
        for parent in reversed(path.parents):
            self.entries.setdefault(str(parent), None)
        if isinstance(content, str):
            content = content.encode('utf-8')
        self.entries[str(path)] = content

    def _lookup(self, path) -> Optional[bytes]:
        key = str(Path(path))
        if key not in self.entries:
            raise FileNotFoundError(2, "No such file or directory", key)
        return self.entries[key]

    def list_directory(self, path):
        key = str(Path(path))
        self.list_calls.append(key)
        if key in self.fail_list:
            raise PermissionError(13, "Permission denied", key)
        if self._lookup(path) is not None:
            raise NotADirectoryError(20, "Not a directory", key)
        children = []
        for entry_path, content in self.entries.items():
            candidate = Path(entry_path)
            if entry_path != key and str(candidate.parent) == key:
                entry_type = EntryType.DIRECTORY if content is None else EntryType.FILE
                children.append(DirEntry(name=candidate.name, entry_type=entry_type))
        return sorted(children, key=lambda e: e.name)

    def read_file(self, path):
        key = str(Path(path))
        if key in self.fail_read:
            raise PermissionError(13, "Permission denied", key)
        content = self._lookup(path)
        if content is None:
            raise IsADirectoryError(21, "Is a directory", key)
        return content

    def lstat(self, path):
        key = str(Path(path))
        if key in self.fail_stat:
            raise PermissionError(13, "Permission denied", key)
        content = self._lookup(path)
        if content is None:
            return EntryStats(EntryType.DIRECTORY, 0, stat.S_IFDIR | 0o755)
        return EntryStats(EntryType.FILE, len(content), stat.S_IFREG | 0o644)

    def stat(self, path):
        return self.lstat(path)

    def realpath(self, path):
        return Path(path)


@pytest.fixture
def tree(tmp_path):
    """Factory building a real directory tree under tmp_path"""
    def _build(layout: Dict[str, Optional[str]]) -> Path:
        return make_tree(tmp_path, layout)
    return _build
