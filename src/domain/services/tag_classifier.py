"""
Domain service: derive category tags from snippet content.

Pure regex heuristics over the literal code text, no I/O. Two rule tiers are
consulted and their results unioned:

- the common tier, applied to every snippet regardless of language
- an optional language tier keyed by the declared language

Comments and string literals are not stripped, so a keyword inside a comment
can trigger a category.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Mapping, Optional, Set

from src.domain.services.tag_rules import COMMON_RULES, LANGUAGE_RULES, RuleTable

logger = logging.getLogger(__name__)


class TagClassifier:
    """Assign category labels to code using the rule tables.

    Stateless and safe to share between threads.
    """

    def __init__(
        self,
        common_rules: RuleTable = COMMON_RULES,
        language_rules: Mapping[str, RuleTable] = LANGUAGE_RULES,
    ) -> None:
        self._common = common_rules
        self._by_language = language_rules

    def classify(self, code: Optional[str], language: Optional[str] = None) -> FrozenSet[str]:
        if not isinstance(code, str) or not code.strip():
            return frozenset()

        tags: Set[str] = set(self._match_table(self._common, code))

        language_table = self._by_language.get((language or "").strip().lower())
        if language_table is not None:
            tags |= self._match_table(language_table, code)

        logger.debug("classified snippet language=%s tags=%s", language, sorted(tags))
        return frozenset(tags)

    @staticmethod
    def _match_table(table: RuleTable, code: str) -> Set[str]:
        return {
            category
            for category, patterns in table.items()
            if any(pattern.search(code) for pattern in patterns)
        }


_default_classifier = TagClassifier()


def classify(code: Optional[str], language: Optional[str] = None) -> FrozenSet[str]:
    """Module-level shortcut using the default rule tables."""
    return _default_classifier.classify(code, language)
