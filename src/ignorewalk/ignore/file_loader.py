"""
File loader for parsing and validating ignore files
"""

from pathlib import Path
from typing import List, Optional, Dict, Union
from dataclasses import dataclass, field

from ..constants import MAX_IGNORE_FILE_SIZE, MAX_PATTERNS_PER_FILE
from ..exceptions import InvalidPatternError
from ..fs import FileSystem, LocalFileSystem
from ..utils import get_logger
from .rule_engine import IgnoreRuleEngine, Rule, trim_line

logger = get_logger(__name__)


@dataclass
class ValidationError:
    """Represents a validation error in an ignore file"""
    line: int
    pattern: str
    message: str


@dataclass
class ValidationWarning:
    """Represents a validation warning in an ignore file"""
    line: int
    pattern: str
    message: str


@dataclass
class IgnoreFileInfo:
    """Information about a loaded ignore file"""
    scope_dir: str
    source: Optional[str]
    patterns: List[str] = field(default_factory=list)
    valid_patterns: List[str] = field(default_factory=list)
    rules: List[Rule] = field(default_factory=list)
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=lambda: {
        'total_lines': 0,
        'empty_lines': 0,
        'comment_lines': 0,
        'pattern_lines': 0,
    })

    @property
    def is_valid(self) -> bool:
        """Check if file has no errors"""
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        """Check if file has warnings"""
        return len(self.warnings) > 0


def decode_content(content: Union[str, bytes]) -> str:
    """Decode ignore file bytes as UTF-8, dropping a BOM"""
    if isinstance(content, bytes):
        content = content.decode('utf-8', errors='replace')
    return content.lstrip('﻿')


class IgnoreFileLoader:
    """
    Handles loading, parsing, and validating ignore files
    """

    def __init__(self, rule_engine: Optional[IgnoreRuleEngine] = None,
                 fs: Optional[FileSystem] = None):
        """
        Initialize loader

        Args:
            rule_engine: Engine used to compile patterns
            fs: Filesystem used to read ignore files
        """
        self.rule_engine = rule_engine or IgnoreRuleEngine()
        self.fs = fs or LocalFileSystem()

    def load_file(self, file_path: Union[str, Path]) -> IgnoreFileInfo:
        """
        Load and compile an ignore file, scoped to its own directory

        Args:
            file_path: Path to the ignore file

        Returns:
            IgnoreFileInfo with rules and validation results
        """
        file_path = Path(file_path)
        scope_dir = str(file_path.parent)

        try:
            size = self.fs.lstat(file_path).size
        except OSError as e:
            info = IgnoreFileInfo(scope_dir=scope_dir, source=str(file_path))
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"Cannot stat file: {e}"
            ))
            return info

        if size > MAX_IGNORE_FILE_SIZE:
            info = IgnoreFileInfo(scope_dir=scope_dir, source=str(file_path))
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"File too large: {size} bytes (max: {MAX_IGNORE_FILE_SIZE})"
            ))
            return info

        try:
            content = self.fs.read_file(file_path)
        except OSError as e:
            info = IgnoreFileInfo(scope_dir=scope_dir, source=str(file_path))
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"Error reading file: {e}"
            ))
            return info

        return self.parse(scope_dir, content, source=str(file_path))

    def parse(self, scope_dir: Union[str, Path], content: Union[str, bytes],
              source: Optional[str] = None) -> IgnoreFileInfo:
        """
        Parse ignore-file text line by line

        A line that fails to compile is recorded as an error and skipped;
        the rest of the text is still compiled.

        Args:
            scope_dir: Directory the rules apply under
            content: Ignore file text (bytes are decoded as UTF-8)
            source: Ignore file path, for diagnostics

        Returns:
            IgnoreFileInfo with rules in file-line order
        """
        info = IgnoreFileInfo(scope_dir=str(scope_dir), source=source)
        lines = decode_content(content).splitlines()
        info.stats['total_lines'] = len(lines)

        for line_num, line in enumerate(lines, 1):
            stripped = trim_line(line)

            if not stripped:
                info.stats['empty_lines'] += 1
                continue

            if stripped.startswith('#'):
                info.stats['comment_lines'] += 1
                continue

            info.stats['pattern_lines'] += 1
            info.patterns.append(stripped)

            try:
                rule = self.rule_engine.compile_rule(
                    scope_dir, stripped, line=line_num, source=source
                )
            except InvalidPatternError as e:
                info.errors.append(ValidationError(
                    line=line_num,
                    pattern=stripped,
                    message=e.message
                ))
                continue

            if rule is not None:
                info.valid_patterns.append(stripped)
                info.rules.append(rule)

            for warning_msg in self._check_pattern_warnings(stripped):
                info.warnings.append(ValidationWarning(
                    line=line_num,
                    pattern=stripped,
                    message=warning_msg
                ))

        if len(info.rules) > MAX_PATTERNS_PER_FILE:
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"Too many patterns: {len(info.rules)} (max: {MAX_PATTERNS_PER_FILE})"
            ))
            info.valid_patterns = info.valid_patterns[:MAX_PATTERNS_PER_FILE]
            info.rules = info.rules[:MAX_PATTERNS_PER_FILE]

        return info

    def _check_pattern_warnings(self, pattern: str) -> List[str]:
        """
        Check pattern for potential issues that aren't errors

        Args:
            pattern: Pattern to check

        Returns:
            List of warning messages
        """
        warnings = []
        body = pattern[1:] if pattern.startswith('!') else pattern

        # Backslash followed by a path-like character is usually a Windows separator
        if '\\' in body and any(part and part[0].isalnum() for part in body.split('\\')[1:]):
            warnings.append(
                "Pattern contains backslash. Use forward slashes for paths."
            )

        if body in ['*', '**', '**/*', '/*', '/**']:
            warnings.append(
                "Very broad pattern - will exclude many files"
            )

        if body.startswith('*.') and '/' in body.rstrip('/'):
            warnings.append(
                "Extension pattern with path separator - this may not work as expected"
            )

        return warnings
