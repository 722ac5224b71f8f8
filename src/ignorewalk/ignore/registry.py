"""
Registry holding compiled rule sets in discovery order
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from ..utils import get_logger
from .rule_engine import Rule, is_within, normalize_path

logger = get_logger(__name__)


@dataclass
class RuleSet:
    """Rules from one ignore-file text, in file-line order"""
    scope_dir: str
    rules: List[Rule] = field(default_factory=list)
    source: Optional[str] = None
    start_index: int = 0  # Global index of the first rule

    def __len__(self) -> int:
        return len(self.rules)


class IgnoreRuleRegistry:
    """
    Append-only store of rule sets

    Rule sets are kept in the order they were added. The global index of a
    rule is its position in the concatenation of all rule sets, so indices
    never change once assigned.
    """

    def __init__(self):
        self._rule_sets: List[RuleSet] = []
        self._by_scope: Dict[str, List[RuleSet]] = {}
        self._rule_count = 0

    def add(self, scope_dir: str, rules: List[Rule], source: Optional[str] = None) -> RuleSet:
        """
        Append a rule set after all known ones

        Args:
            scope_dir: Directory the rules are scoped to
            rules: Compiled rules in file-line order
            source: Ignore file the rules came from

        Returns:
            The registered RuleSet
        """
        scope = normalize_path(scope_dir)
        rule_set = RuleSet(
            scope_dir=scope,
            rules=list(rules),
            source=source,
            start_index=self._rule_count,
        )
        self._rule_sets.append(rule_set)
        self._by_scope.setdefault(scope, []).append(rule_set)
        self._rule_count += len(rule_set)

        logger.debug(f"Registered {len(rule_set)} rules for {scope} from {source or '<content>'}")
        return rule_set

    def iter_rules(self, path: Optional[str] = None) -> Iterator[Tuple[int, Rule]]:
        """
        Yield (global index, rule) pairs in discovery order

        Args:
            path: Only yield rules whose scope contains this normalised path
        """
        for rule_set in self._rule_sets:
            if path is not None and not is_within(path, rule_set.scope_dir):
                continue
            for offset, rule in enumerate(rule_set.rules):
                yield rule_set.start_index + offset, rule

    def get_rule_sets_for_path(self, path: str) -> List[RuleSet]:
        """Rule sets whose scope contains ``path``, in discovery order"""
        posix = normalize_path(path)
        return [rs for rs in self._rule_sets if is_within(posix, rs.scope_dir)]

    @property
    def rule_sets(self) -> List[RuleSet]:
        return list(self._rule_sets)

    def get_stats(self) -> Dict[str, int]:
        """
        Get registry statistics

        Returns:
            Dictionary with registry stats
        """
        negations = sum(
            1 for rule_set in self._rule_sets for rule in rule_set.rules if rule.is_negation
        )
        return {
            'rule_sets': len(self._rule_sets),
            'total_rules': self._rule_count,
            'negation_rules': negations,
            'scopes': len(self._by_scope),
        }

    def __len__(self) -> int:
        return self._rule_count
