"""Rule grammar and predicate library.

This module provides:
- RuleParser / parse_rules: split a rule chain into directives
- predicates: the pure ``violates_*`` checks behind every rule
"""

from validata.rules import predicates
from validata.rules.parser import (
    KNOWN_RULES,
    REQUIRED,
    RuleParser,
    parse_rules,
)

__all__ = [
    "KNOWN_RULES",
    "REQUIRED",
    "RuleParser",
    "parse_rules",
    "predicates",
]
