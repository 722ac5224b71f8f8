"""
Directory listing, tree and find helpers built on the walker
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pathspec

from .constants import DEFAULT_RESULT_LIMIT, SYMLINKS_SUPPORTED
from .exceptions import PathOutsideBaseError
from .fs import FileSystem
from .walker import DirectoryWalker, WalkEntry, WalkOptions
from .utils import get_logger

logger = get_logger(__name__)


@dataclass
class ListingResult:
    """Entries collected from a walk, plus whether a limit cut it short"""
    entries: List[Dict[str, Any]] = field(default_factory=list)
    is_limited: bool = False

    @property
    def total(self) -> int:
        return len(self.entries)


@dataclass
class TreeResult:
    """Nested mapping of path parts"""
    content: Dict[str, Any] = field(default_factory=dict)
    total: int = 0
    is_limited: bool = False


def validate_within_base_path(base_path: Union[str, Path], candidate_path: Union[str, Path]) -> Path:
    """
    Check that ``candidate_path`` lies within ``base_path``

    Args:
        base_path: Absolute base directory
        candidate_path: Absolute path to check

    Returns:
        The normalised candidate path

    Raises:
        PathOutsideBaseError: If either path is relative or the candidate escapes the base
    """
    if not os.path.isabs(base_path):
        raise PathOutsideBaseError(f"Base path must be an absolute path, got {base_path}")
    if not os.path.isabs(candidate_path):
        raise PathOutsideBaseError(f"Candidate path must be an absolute path, got {candidate_path}")

    base = Path(os.path.normpath(base_path))
    candidate = Path(os.path.normpath(candidate_path))
    if candidate != base and base not in candidate.parents:
        logger.error(f"Candidate path {candidate} is outside base path {base}")
        raise PathOutsideBaseError(f"Candidate path must be within base path: {candidate}")
    return candidate


def resolve_dirpath(base_path: Union[str, Path], dirpath: Optional[str] = None) -> Path:
    """Resolve a user supplied relative directory against ``base_path``, staying inside it"""
    base = Path(os.path.abspath(base_path))
    target = base / os.path.normpath(dirpath) if dirpath else base
    return validate_within_base_path(base, os.path.abspath(target))


def list_directory(base_path: Union[str, Path], dirpath: Optional[str] = None,
                   limit: int = DEFAULT_RESULT_LIMIT,
                   fs: Optional[FileSystem] = None) -> ListingResult:
    """
    List the direct children of a directory that are not ignored

    Args:
        base_path: Directory the listing must stay within
        dirpath: Directory to list, relative to base_path
        limit: Maximum number of entries
        fs: Filesystem implementation

    Returns:
        ListingResult with name, type, size and (on POSIX) permissions
    """
    target = resolve_dirpath(base_path, dirpath)
    walker = DirectoryWalker(target, WalkOptions(max_depth=1, max_entries=limit), fs=fs)

    result = ListingResult()
    for entry in walker.walk():
        item = {
            'name': entry.path.name,
            'type': entry.entry_type.value,
            'size': entry.size,
        }
        if SYMLINKS_SUPPORTED:
            item['permissions'] = entry.permissions
        result.entries.append(item)
    result.is_limited = walker.truncated
    return result


def tree_directory(base_path: Union[str, Path], dirpath: Optional[str] = None,
                   depth: Optional[int] = None, regexp: Optional[str] = None,
                   limit: int = DEFAULT_RESULT_LIMIT,
                   fs: Optional[FileSystem] = None) -> TreeResult:
    """
    Build a nested representation of a directory

    Args:
        base_path: Directory the tree must stay within
        dirpath: Tree root, relative to base_path
        depth: Maximum depth to traverse
        regexp: Only keep relative paths matching this case-insensitive regex
        limit: Maximum number of kept entries
        fs: Filesystem implementation

    Returns:
        TreeResult with the nested mapping
    """
    target = resolve_dirpath(base_path, dirpath)
    regex = re.compile(regexp, re.IGNORECASE) if regexp else None

    kept: List[WalkEntry] = []
    is_limited = False
    for entry in DirectoryWalker(target, WalkOptions(max_depth=depth), fs=fs).walk():
        if regex and not regex.search(entry.rel_path):
            continue
        if len(kept) >= limit:
            is_limited = True
            break
        kept.append(entry)

    result = TreeResult(total=len(kept), is_limited=is_limited)
    for entry in kept:
        current = result.content
        for part in entry.rel_path.split('/'):
            current = current.setdefault(part, {})
    return result


def find_paths(base_path: Union[str, Path], pattern: Optional[str] = None,
               include_globs: Optional[Sequence[str]] = None,
               max_results: Optional[int] = None,
               fs: Optional[FileSystem] = None) -> ListingResult:
    """
    Find walked paths matching a regex and/or gitignore-style globs

    Args:
        base_path: Directory to search
        pattern: Regex searched in forward-slash relative paths
        include_globs: Globs a relative path must match
        max_results: Maximum number of matches
        fs: Filesystem implementation

    Returns:
        ListingResult of matches sorted by path
    """
    if pattern is not None and not pattern.strip():
        raise ValueError("pattern cannot be empty")
    try:
        regex = re.compile(pattern) if pattern else None
    except re.error as e:
        raise ValueError(f"Invalid regex pattern: {e}")
    glob_spec = pathspec.PathSpec.from_lines('gitignore', include_globs) if include_globs else None

    result = ListingResult()
    for entry in DirectoryWalker(base_path, fs=fs).walk():
        if regex and not regex.search(entry.rel_path):
            continue
        if glob_spec and not glob_spec.match_file(entry.rel_path):
            continue
        if max_results is not None and len(result.entries) >= max_results:
            result.is_limited = True
            break
        result.entries.append({
            'path': entry.rel_path,
            'full_path': str(entry.path),
            'is_directory': entry.is_directory,
            'size': entry.size,
        })

    result.entries.sort(key=lambda m: m['path'])
    return result
