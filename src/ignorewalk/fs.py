"""
Filesystem access used by the walker.

The walker only talks to the filesystem through a ``FileSystem`` instance so
tests and embedding applications can substitute their own implementation.
Implementations raise ``OSError`` subclasses on failure and never retry.
"""

import os
import stat as stat_module
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Union

PathLike = Union[str, Path]


class EntryType(str, Enum):
    """Kind of filesystem entry reported in walk results"""
    FILE = "file"
    DIRECTORY = "directory"
    BLOCK_DEVICE = "block_device"
    CHARACTER_DEVICE = "character_device"
    FIFO = "fifo"
    SOCKET = "socket"
    SYMLINK = "symlink"
    UNKNOWN = "unknown"


def entry_type_from_mode(mode: int) -> EntryType:
    """Map an ``st_mode`` value to an EntryType"""
    if stat_module.S_ISDIR(mode):
        return EntryType.DIRECTORY
    if stat_module.S_ISREG(mode):
        return EntryType.FILE
    if stat_module.S_ISBLK(mode):
        return EntryType.BLOCK_DEVICE
    if stat_module.S_ISCHR(mode):
        return EntryType.CHARACTER_DEVICE
    if stat_module.S_ISFIFO(mode):
        return EntryType.FIFO
    if stat_module.S_ISSOCK(mode):
        return EntryType.SOCKET
    if stat_module.S_ISLNK(mode):
        return EntryType.SYMLINK
    return EntryType.UNKNOWN


@dataclass(frozen=True)
class EntryStats:
    """The subset of stat information the walker needs"""
    entry_type: EntryType
    size: int = 0
    mode: int = 0

    @classmethod
    def from_stat_result(cls, result: os.stat_result) -> "EntryStats":
        return cls(
            entry_type=entry_type_from_mode(result.st_mode),
            size=result.st_size,
            mode=result.st_mode,
        )

    @property
    def is_directory(self) -> bool:
        return self.entry_type is EntryType.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.entry_type is EntryType.FILE

    @property
    def is_symlink(self) -> bool:
        return self.entry_type is EntryType.SYMLINK


@dataclass(frozen=True)
class DirEntry:
    """A child reported by ``FileSystem.list_directory``"""
    name: str
    entry_type: EntryType


class FileSystem(ABC):
    """Filesystem primitives consumed by the walker"""

    @abstractmethod
    def list_directory(self, path: PathLike) -> List[DirEntry]:
        """Return the children of a directory, without '.' and '..'"""
        raise NotImplementedError

    @abstractmethod
    def read_file(self, path: PathLike) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def lstat(self, path: PathLike) -> EntryStats:
        """Stat without following a final symlink"""
        raise NotImplementedError

    @abstractmethod
    def stat(self, path: PathLike) -> EntryStats:
        """Stat following symlinks"""
        raise NotImplementedError

    @abstractmethod
    def realpath(self, path: PathLike) -> Path:
        """Resolve symlinks in ``path``"""
        raise NotImplementedError


class LocalFileSystem(FileSystem):
    """FileSystem backed by the ``os`` module"""

    def list_directory(self, path: PathLike) -> List[DirEntry]:
        entries = []
        with os.scandir(path) as it:
            for entry in it:
                if entry.is_symlink():
                    entry_type = EntryType.SYMLINK
                elif entry.is_dir(follow_symlinks=False):
                    entry_type = EntryType.DIRECTORY
                elif entry.is_file(follow_symlinks=False):
                    entry_type = EntryType.FILE
                else:
                    entry_type = EntryType.UNKNOWN
                entries.append(DirEntry(name=entry.name, entry_type=entry_type))
        # scandir order is arbitrary; sort so repeated walks agree
        entries.sort(key=lambda e: e.name)
        return entries

    def read_file(self, path: PathLike) -> bytes:
        with open(path, 'rb') as f:
            return f.read()

    def lstat(self, path: PathLike) -> EntryStats:
        return EntryStats.from_stat_result(os.lstat(path))

    def stat(self, path: PathLike) -> EntryStats:
        return EntryStats.from_stat_result(os.stat(path))

    def realpath(self, path: PathLike) -> Path:
        return Path(os.path.realpath(path))
