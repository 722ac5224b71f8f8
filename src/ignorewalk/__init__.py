"""
ignorewalk - ignore-aware breadth-first directory traversal
"""

__version__ = "0.1.0"

from .constants import IGNORE_FILENAME
from .exceptions import (
    IgnoreWalkError,
    InvalidPatternError,
    InvalidRootError,
    PathOutsideBaseError,
    WalkAlreadyStartedError,
)
from .fs import DirEntry, EntryStats, EntryType, FileSystem, LocalFileSystem
from .ignore import IgnoreManager, IgnoreRuleEngine, MatchResult, Rule
from .walker import DirectoryWalker, WalkEntry, WalkOptions, traverse_directory_bfs

__all__ = [
    '__version__',
    'IGNORE_FILENAME',
    'IgnoreWalkError',
    'InvalidPatternError',
    'InvalidRootError',
    'PathOutsideBaseError',
    'WalkAlreadyStartedError',
    'DirEntry',
    'EntryStats',
    'EntryType',
    'FileSystem',
    'LocalFileSystem',
    'IgnoreManager',
    'IgnoreRuleEngine',
    'MatchResult',
    'Rule',
    'DirectoryWalker',
    'WalkEntry',
    'WalkOptions',
    'traverse_directory_bfs',
]
