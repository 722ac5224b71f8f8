"""
Ignore file processing for ignorewalk

This package provides a multi-level ignore rule system that supports:
- Ignore files at any directory level, each scoped to its own directory
- Last-match-wins precedence across all discovered files
- Negation rules re-including paths inside ignored directories
- Subtree pruning decisions without listing the subtree
"""

from ..constants import IGNORE_FILENAME
from .manager import IgnoreManager
from .rule_engine import IgnoreRuleEngine, MatchResult, Rule
from .file_loader import IgnoreFileLoader, IgnoreFileInfo, ValidationError, ValidationWarning
from .registry import IgnoreRuleRegistry, RuleSet

__all__ = [
    'IGNORE_FILENAME',
    'IgnoreManager',
    'IgnoreRuleEngine',
    'MatchResult',
    'Rule',
    'IgnoreFileLoader',
    'IgnoreFileInfo',
    'ValidationError',
    'ValidationWarning',
    'IgnoreRuleRegistry',
    'RuleSet',
]
