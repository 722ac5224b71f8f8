"""
Exception hierarchy for ignorewalk
"""

from typing import Optional


class IgnoreWalkError(Exception):
    """Base class for all ignorewalk errors"""


class InvalidRootError(IgnoreWalkError, NotADirectoryError):
    """The walk root does not exist or is not a directory"""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


class InvalidPatternError(IgnoreWalkError, ValueError):
    """An ignore pattern line could not be compiled"""

    def __init__(self, pattern: str, message: str, line: Optional[int] = None):
        location = f"line {line}: " if line else ""
        super().__init__(f"{location}invalid pattern '{pattern}': {message}")
        self.pattern = pattern
        self.message = message
        self.line = line


class PathOutsideBaseError(IgnoreWalkError, ValueError):
    """A candidate path escapes the base directory it must stay within"""


class WalkAlreadyStartedError(IgnoreWalkError, RuntimeError):
    """A DirectoryWalker was iterated a second time"""
