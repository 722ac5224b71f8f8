"""
Breadth-first directory traversal honouring nested ignore files.

The walker discovers ignore files while it descends. Because the queue is
processed breadth-first and a directory's ignore files are registered
before any of its children are queued, every rule that can apply to an
entry is known by the time that entry is evaluated.
"""

import logging
import os
import stat as stat_module
from collections import deque
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Deque, FrozenSet, Iterator, Optional, Sequence, Tuple, Union

from .constants import DEFAULT_IGNORE_FILES, SYMLINKS_SUPPORTED, VCS_METADATA_RULE
from .exceptions import InvalidRootError, WalkAlreadyStartedError
from .fs import EntryStats, EntryType, FileSystem, LocalFileSystem
from .ignore import IgnoreManager
from .ignore.rule_engine import is_within, normalize_path
from .utils import get_logger, log_with_context

logger = get_logger(__name__)


@dataclass
class WalkOptions:
    """
    Options for a breadth-first traversal

    Attributes:
        ignore_file_names: Names of files holding ignore patterns
        follow_symlinks: Follow symbolic links (never honoured on Windows)
        max_depth: Deepest level visited; 0 is the root itself, None is unbounded
        max_entries: Stop after yielding this many entries, None is unbounded
        include_empty_directories: Yield directories without children
    """
    ignore_file_names: Sequence[str] = DEFAULT_IGNORE_FILES
    follow_symlinks: bool = False
    max_depth: Optional[int] = None
    max_entries: Optional[int] = None
    include_empty_directories: bool = False

    def __post_init__(self):
        if isinstance(self.ignore_file_names, str):
            self.ignore_file_names = (self.ignore_file_names,)
        self.ignore_file_names = tuple(self.ignore_file_names)
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_entries is not None and self.max_entries < 0:
            raise ValueError(f"max_entries must be >= 0, got {self.max_entries}")


@dataclass(frozen=True)
class WalkEntry:
    """One traversal result"""
    rel_path: str
    entry_type: EntryType
    path: Path = field(compare=False)
    size: int = field(default=0, compare=False)
    mode: int = field(default=0, compare=False)

    @property
    def is_directory(self) -> bool:
        return self.entry_type is EntryType.DIRECTORY

    @property
    def permissions(self) -> str:
        return f"0{stat_module.S_IMODE(self.mode):o}"


@dataclass
class QueueItem:
    path: Path
    depth: int
    stats: EntryStats
    # Real path of the parent directory
    parent_real: str = ''
    # Real paths of every directory from the root down to the parent
    visited: FrozenSet[str] = frozenset()


class DirectoryWalker:
    """
    Owns the state of one walk: queue, visited directories and ignore rules

    Each queued item carries the real paths of the directories leading to it.
    A followed link whose target is already among them is reported as a link
    and not descended into, so mutually linked directories terminate.

    A walker can be iterated once. Run a new walker for a fresh walk.
    """

    def __init__(self, root: Union[str, Path], options: Optional[WalkOptions] = None,
                 fs: Optional[FileSystem] = None, **kwargs):
        if options is None:
            options = WalkOptions(**kwargs)
        elif kwargs:
            options = replace(options, **kwargs)
        self.root = Path(os.path.abspath(root))
        self.options = options
        self.fs = fs or LocalFileSystem()
        self.ignore_manager = IgnoreManager(self.fs)
        self.yielded_count = 0
        self.visited_count = 0
        self.truncated = False
        self._queue: Deque[QueueItem] = deque()
        self._started = False

    def __iter__(self) -> Iterator[WalkEntry]:
        return self.walk()

    def walk(self) -> Iterator[WalkEntry]:
        """
        Start the walk

        The root is validated immediately; entries are then produced lazily.

        Returns:
            Iterator of WalkEntry in breadth-first order

        Raises:
            InvalidRootError: If the root is missing or not a directory
            WalkAlreadyStartedError: If this walker was already iterated
        """
        if self._started:
            raise WalkAlreadyStartedError(f"Walk of {self.root} already started")
        self._started = True

        root_stats = self._validate_root()
        logger.info(f"Walking {self.root} (max_depth={self.options.max_depth}, "
                    f"max_entries={self.options.max_entries})")
        return self._walk(root_stats)

    def _validate_root(self) -> EntryStats:
        try:
            stats = self.fs.lstat(self.root)
            if stats.is_symlink:
                stats = self.fs.stat(self.root)
        except FileNotFoundError:
            raise InvalidRootError(str(self.root), "The provided path does not exist")
        except OSError as e:
            raise InvalidRootError(str(self.root), f"Cannot access the provided path ({e})")
        if not stats.is_directory:
            raise InvalidRootError(str(self.root), "The provided path is not a directory")
        return stats

    def _walk(self, root_stats: EntryStats) -> Iterator[WalkEntry]:
        opts = self.options
        self.ignore_manager.add(self.root, VCS_METADATA_RULE)
        self._queue.append(QueueItem(path=self.root, depth=0, stats=root_stats))

        while self._queue:
            if opts.max_entries is not None and self.yielded_count >= opts.max_entries:
                self.truncated = True
                logger.info(f"Entry limit {opts.max_entries} reached in {self.root}")
                break

            item = self._queue.popleft()
            # Breadth-first: every item still queued is at least as deep
            if opts.max_depth is not None and item.depth > opts.max_depth:
                break
            self.visited_count += 1

            stats, real_path = self._resolve_symlink(item)

            if stats.is_directory:
                if real_path is None:
                    real_path = self._real_directory_path(item)
                has_children = self._enqueue_children(item, real_path)
                if has_children is None:
                    continue
                yield_dir = (
                    (not has_children and opts.include_empty_directories)
                    or item.depth == opts.max_depth
                )
                should_yield = yield_dir and not self.ignore_manager.is_path_ignored(
                    item.path, is_directory=True
                )
            else:
                should_yield = not self.ignore_manager.is_path_ignored(item.path)

            if should_yield and item.depth > 0:
                self.yielded_count += 1
                yield WalkEntry(
                    rel_path=item.path.relative_to(self.root).as_posix(),
                    entry_type=stats.entry_type,
                    path=item.path,
                    size=stats.size,
                    mode=stats.mode,
                )

        log_with_context(
            logger, logging.DEBUG, f"Walk of {self.root} finished",
            entries=self.yielded_count,
            visited=self.visited_count,
            truncated=self.truncated,
            **self.ignore_manager.get_stats(),
        )

    def _real_directory_path(self, item: QueueItem) -> str:
        """Real path of a directory reached without following a link"""
        if item.depth == 0:
            return normalize_path(self.fs.realpath(item.path))
        return f"{item.parent_real.rstrip('/')}/{item.path.name}"

    def _resolve_symlink(self, item: QueueItem) -> Tuple[EntryStats, Optional[str]]:
        """
        Stats to use for an item, following it when it is a link we may follow

        Returns:
            Tuple of (stats, real path of the followed directory or None)
        """
        stats = item.stats
        if not (stats.is_symlink and self.options.follow_symlinks and SYMLINKS_SUPPORTED):
            return stats, None

        try:
            target_stats = self.fs.stat(item.path)
            if not target_stats.is_directory:
                return target_stats, None
            target = normalize_path(self.fs.realpath(item.path))
        except OSError as e:
            logger.error(f"Error accessing path {item.path}: {e}")
            return stats, None

        if target in item.visited or is_within(item.parent_real, target):
            logger.debug(f"Not following {item.path}: {target} is already being walked")
            return stats, None
        return target_stats, target

    def _enqueue_children(self, item: QueueItem, real_path: str) -> Optional[bool]:
        """
        List a directory and queue its children

        Ignore files among the children are registered before any child is
        queued, so no child can be evaluated ahead of its directory's rules.

        Args:
            item: Directory being processed
            real_path: The directory's real path, recorded on each child

        Returns:
            Whether the directory has children, or None if it could not be listed
        """
        # Children of a directory at the depth limit would never be visited
        if item.depth == self.options.max_depth:
            return True
        # A pruned directory is ignored itself, so it is never yielded either
        if not self.ignore_manager.could_directory_contain_allowed_files(item.path):
            return True

        try:
            children = self.fs.list_directory(item.path)
        except OSError as e:
            logger.error(f"Error listing directory {item.path}: {e}")
            return None

        if not children:
            return False

        visited = item.visited | {real_path}
        pending = []
        for child in children:
            child_path = item.path / child.name
            try:
                stats = self.fs.lstat(child_path)
            except OSError as e:
                logger.error(f"Error accessing path {child_path}: {e}")
                continue
            if stats.is_file and child.name in self.options.ignore_file_names:
                self.ignore_manager.add_file(child_path)
            pending.append(QueueItem(
                path=child_path,
                depth=item.depth + 1,
                stats=stats,
                parent_real=real_path,
                visited=visited,
            ))

        self._queue.extend(pending)
        return True


def traverse_directory_bfs(root: Union[str, Path], fs: Optional[FileSystem] = None,
                           **options) -> Iterator[WalkEntry]:
    """
    Traverse a directory breadth-first and yield entries that are not ignored

    Args:
        root: Directory to traverse
        fs: Filesystem implementation (defaults to the local one)
        **options: Fields of WalkOptions

    Returns:
        Lazy iterator of WalkEntry

    Raises:
        InvalidRootError: If the root is missing or not a directory
    """
    return DirectoryWalker(root, WalkOptions(**options), fs=fs).walk()
