"""
Rule engine for pattern compilation and matching with multi-level support

Patterns are translated by pathspec's gitignore grammar. Every compiled
``Rule`` is pinned to the directory whose ignore file declared it and tests
paths relative to that directory:

* ``exact_matcher`` decides whether one specific path is matched.
* ``containment_matchers`` decide whether something below a directory
  could still be matched, which is what subtree pruning needs.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from pathspec.patterns.gitignore import GitIgnorePatternError
from pathspec.patterns.gitignore.spec import GitIgnoreSpecPattern

from ..constants import CASE_INSENSITIVE_PATHS
from ..exceptions import InvalidPatternError
from ..utils import get_logger

logger = get_logger(__name__)

REGEX_FLAGS = re.IGNORECASE if CASE_INSENSITIVE_PATHS else 0


def normalize_path(path: Union[str, Path]) -> str:
    """Return ``path`` normalised, forward-slash separated, without trailing slash"""
    posix = Path(os.path.normpath(str(path))).as_posix()
    if len(posix) > 1:
        posix = posix.rstrip('/')
    return posix


def is_within(path: str, scope: str) -> bool:
    """True when ``scope`` is ``path`` or one of its ancestors (both normalised)"""
    if CASE_INSENSITIVE_PATHS:
        path, scope = path.casefold(), scope.casefold()
    scope = scope.rstrip('/')
    return path == scope or path.startswith(scope + '/')


def relative_to_scope(path: str, scope: str) -> Optional[str]:
    """
    Path of ``path`` below ``scope``, forward-slash separated

    Returns:
        '' for the scope itself, None when ``path`` lies outside it
    """
    if not is_within(path, scope):
        return None
    return path[len(scope.rstrip('/')) + 1:]


def trim_line(line: str) -> str:
    """Strip leading whitespace and trailing whitespace that is not escaped"""
    text = line.lstrip()
    end = len(text)
    while end > 0 and text[end - 1] in ' \t\r\n':
        if end >= 2 and text[end - 2] == '\\':
            break
        end -= 1
    return text[:end]


def gitignore_regex(pattern: str, original: str) -> re.Pattern:
    """
    Compile a gitignore pattern with pathspec

    Args:
        pattern: Pattern text handed to pathspec, without a leading '!'
        original: Line as written in the ignore file, used in error messages

    Returns:
        Regex to search against a relative path ('/'-terminated for directories)

    Raises:
        InvalidPatternError: If pathspec rejects or discards the pattern
    """
    try:
        regex, _ = GitIgnoreSpecPattern.pattern_to_regex(pattern)
    except GitIgnorePatternError as e:
        raise InvalidPatternError(original, str(e))
    if regex is None:
        # pathspec drops lines git would drop, such as an unclosed '['
        raise InvalidPatternError(original, "invalid range notation")
    try:
        return re.compile(regex, REGEX_FLAGS)
    except re.error as e:
        raise InvalidPatternError(original, str(e))


@dataclass(frozen=True)
class Rule:
    """A compiled ignore pattern scoped to one directory"""
    pattern: str
    is_negation: bool
    is_directory_only: bool
    is_anchored: bool
    scope_dir: str
    exact_matcher: re.Pattern = field(repr=False, compare=False)
    # One regex per leading segment of an anchored location; empty otherwise
    containment_matchers: Tuple[re.Pattern, ...] = field(default=(), repr=False, compare=False)
    line: int = 0
    source: Optional[str] = None

    def applies_to(self, path: str) -> bool:
        return is_within(path, self.scope_dir)

    def matches(self, path: str, is_directory: bool = False) -> bool:
        """
        Check the exact matcher against a normalised absolute path

        A directory-only rule matches a non-directory only through one of
        its ancestor directories.
        """
        rel = relative_to_scope(path, self.scope_dir)
        if not rel:
            return False
        if is_directory:
            rel += '/'
        return self.exact_matcher.search(rel) is not None

    def could_contain(self, dir_path: str) -> bool:
        """Whether something at or below ``dir_path`` could match this rule"""
        rel = relative_to_scope(dir_path, self.scope_dir)
        if rel is None:
            return False
        if not rel or not self.is_anchored or not self.containment_matchers:
            return True
        depth = min(rel.count('/') + 1, len(self.containment_matchers))
        return self.containment_matchers[depth - 1].search(rel + '/') is not None


@dataclass
class MatchResult:
    """Result of matching a path against ignore rules"""
    should_ignore: bool
    rule: Optional[Rule] = None
    index: int = -1  # Global position of the deciding rule

    @property
    def matched_pattern(self) -> Optional[str]:
        return self.rule.pattern if self.rule else None

    @property
    def matched_scope(self) -> Optional[str]:
        return self.rule.scope_dir if self.rule else None


class IgnoreRuleEngine:
    """
    Handles pattern compilation and path matching with last-match-wins precedence
    """

    def __init__(self):
        # Matchers are scope-relative, so one compilation serves every scope
        self._compiled_cache: Dict[str, Tuple[re.Pattern, Tuple[re.Pattern, ...]]] = {}

    def validate_pattern(self, pattern: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a single pattern

        Args:
            pattern: Pattern to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            self.compile_rule('/', pattern)
        except InvalidPatternError as e:
            return False, e.message
        return True, None

    def compile_rule(self, scope_dir: Union[str, Path], pattern_line: str,
                     line: int = 0, source: Optional[str] = None) -> Optional[Rule]:
        """
        Compile one ignore-file line

        Args:
            scope_dir: Directory whose ignore file holds the line
            pattern_line: Raw line text
            line: 1-based line number, for diagnostics
            source: Ignore file path, for diagnostics

        Returns:
            The compiled Rule, or None for blank lines and comments

        Raises:
            InvalidPatternError: If the line cannot be compiled
        """
        text = trim_line(pattern_line)
        if not text or text.startswith('#'):
            return None

        body = text
        is_negation = body.startswith('!')
        if is_negation:
            body = body[1:]
        is_anchored = body.startswith('/')
        if is_anchored:
            body = body[1:]
        if not body or body == '/':
            return None

        # Only a leading '/' anchors: pathspec would also anchor "a/b", so
        # unanchored rules are given an explicit "**/" prefix.
        spec_pattern = ('/' if is_anchored else '**/') + body
        exact, containment = self._compile_matchers(spec_pattern, is_anchored, text)

        return Rule(
            pattern=text,
            is_negation=is_negation,
            is_directory_only=body.endswith('/'),
            is_anchored=is_anchored,
            scope_dir=normalize_path(scope_dir),
            exact_matcher=exact,
            containment_matchers=containment,
            line=line,
            source=source,
        )

    def match(self, rules: Iterable[Tuple[int, Rule]], path: Union[str, Path],
              is_directory: bool = False) -> MatchResult:
        """
        Match a path against rules in global order; the last match decides

        Args:
            rules: (global index, rule) pairs in discovery order
            path: Absolute path to check
            is_directory: Whether the path is a directory

        Returns:
            MatchResult naming the deciding rule, if any
        """
        posix = normalize_path(path)
        result = MatchResult(should_ignore=False)
        for index, rule in rules:
            if not rule.applies_to(posix):
                continue
            if rule.matches(posix, is_directory):
                result = MatchResult(should_ignore=not rule.is_negation, rule=rule, index=index)

        if result.rule is not None:
            logger.trace(
                f"{posix}: ignored={result.should_ignore} "
                f"(rule '{result.rule.pattern}' from {result.rule.scope_dir})"
            )
        return result

    def clear_cache(self):
        """Clear the compiled pattern cache"""
        self._compiled_cache.clear()

    def _compile_matchers(self, spec_pattern: str, is_anchored: bool,
                          text: str) -> Tuple[re.Pattern, Tuple[re.Pattern, ...]]:
        if spec_pattern in self._compiled_cache:
            return self._compiled_cache[spec_pattern]

        exact = gitignore_regex(spec_pattern, text)

        containment = []
        if is_anchored:
            segments = spec_pattern.strip('/').split('/')
            for depth, segment in enumerate(segments, start=1):
                if segment in ('', '**'):
                    break
                prefix = '/' + '/'.join(segments[:depth]) + '/'
                containment.append(gitignore_regex(prefix, text))

        compiled = (exact, tuple(containment))
        self._compiled_cache[spec_pattern] = compiled
        return compiled
