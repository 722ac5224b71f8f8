"""
Main ignore manager API: scoped rule sets with last-match-wins evaluation
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from ..fs import FileSystem, LocalFileSystem
from ..utils import get_logger
from .file_loader import IgnoreFileInfo, IgnoreFileLoader
from .registry import IgnoreRuleRegistry
from .rule_engine import IgnoreRuleEngine, MatchResult, Rule, normalize_path

logger = get_logger(__name__)


class IgnoreManager:
    """
    Answers ignore questions for absolute paths

    Rule sets are appended as ignore files are discovered and never
    removed. One manager belongs to one walk; it is not thread-safe and
    must not be shared between concurrent walks.
    """

    def __init__(self, fs: Optional[FileSystem] = None):
        """
        Initialize the ignore manager

        Args:
            fs: Filesystem used by add_file (defaults to the local one)
        """
        self._rule_engine = IgnoreRuleEngine()
        self._file_loader = IgnoreFileLoader(self._rule_engine, fs or LocalFileSystem())
        self._registry = IgnoreRuleRegistry()
        self._files: Dict[str, IgnoreFileInfo] = {}

    def add(self, scope_dir: Union[str, Path], contents: Union[str, bytes],
            source: Optional[str] = None) -> IgnoreFileInfo:
        """
        Compile ignore-file text and append it as a new rule set

        Args:
            scope_dir: Directory the patterns are relative to
            contents: Ignore file text
            source: Path of the ignore file, for diagnostics

        Returns:
            IgnoreFileInfo with the compiled rules and any problems found
        """
        info = self._file_loader.parse(scope_dir, contents, source=source)
        self._register(info)
        return info

    def add_file(self, file_path: Union[str, Path]) -> IgnoreFileInfo:
        """
        Read an ignore file and append its rules, scoped to its directory

        Args:
            file_path: Path to the ignore file

        Returns:
            IgnoreFileInfo for the file
        """
        info = self._file_loader.load_file(Path(file_path))
        self._register(info)
        return info

    def match(self, path: Union[str, Path], is_directory: bool = False) -> MatchResult:
        """
        Find the rule deciding a path's status

        Args:
            path: Absolute path to check
            is_directory: Whether the path is a directory

        Returns:
            MatchResult with decision and deciding rule
        """
        posix = normalize_path(path)
        return self._rule_engine.match(self._registry.iter_rules(posix), posix, is_directory)

    def is_path_ignored(self, path: Union[str, Path], is_directory: bool = False) -> bool:
        """
        Check if a path should be ignored

        Args:
            path: Absolute path to check
            is_directory: Whether the path is a directory

        Returns:
            True if the last matching rule ignores the path
        """
        return self.match(path, is_directory).should_ignore

    def could_directory_contain_allowed_files(self, dir_path: Union[str, Path]) -> bool:
        """
        Decide whether a directory must be entered

        An ignored directory is only worth entering when a negation rule
        declared after the one that ignored it could match something inside.

        Args:
            dir_path: Absolute directory path

        Returns:
            False only when nothing below the directory can be re-included
        """
        posix = normalize_path(dir_path)
        result = self.match(posix, is_directory=True)
        if not result.should_ignore:
            return True

        for index, rule in self._registry.iter_rules(posix):
            if index <= result.index or not rule.is_negation:
                continue
            if rule.could_contain(posix):
                logger.trace(f"{posix}: entering for negation '{rule.pattern}' from {rule.scope_dir}")
                return True

        logger.debug(f"Pruning {posix} (ignored by '{result.matched_pattern}')")
        return False

    def get_rules_for_path(self, path: Union[str, Path]) -> List[Rule]:
        """
        Get all rules that could affect a path, in evaluation order

        Args:
            path: Path to check

        Returns:
            List of rules, root scopes first
        """
        posix = normalize_path(path)
        return [rule for _, rule in self._registry.iter_rules(posix)]

    def validate_all(self) -> Dict[str, IgnoreFileInfo]:
        """
        Validation results for every ignore file added from disk

        Returns:
            Dictionary mapping file paths to their validation info
        """
        return dict(self._files)

    def get_stats(self) -> Dict[str, int]:
        stats = self._registry.get_stats()
        stats['ignore_files'] = len(self._files)
        return stats

    def _register(self, info: IgnoreFileInfo):
        label = info.source or info.scope_dir
        for error in info.errors:
            logger.error(f"{label}:{error.line}: {error.message}")
        for warning in info.warnings:
            logger.warning(f"{label}:{warning.line}: {warning.message}")

        self._registry.add(info.scope_dir, info.rules, source=info.source)
        if info.source:
            self._files[info.source] = info
