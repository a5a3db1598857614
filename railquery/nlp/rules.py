"""Decision-list primitives for the rule-based extractor.

Every extraction step is an ordered list of independent rules. A rule
is a named predicate/transform: it either returns a value or ``None``
("no match"). The first rule that matches wins, which keeps priority
and fallback explicit and each rule testable on its own.

Example
-------
    >>> rules = [Rule("digits", lambda t: t if t.isdigit() else None)]
    >>> first_match(rules, "152")
    ('digits', '152')
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Rule(Generic[T]):
    """A named rule of a decision list.

    Attributes
    ----------
    name:
        Identifier reported in ``ParsedIntent.matched_rules``.
    apply:
        Callable returning the extracted value, or ``None`` when the
        rule does not match.
    """

    name: str
    apply: Callable[[str], Optional[T]]

    def __call__(self, text: str) -> Optional[T]:
        return self.apply(text)


def first_match(rules: Sequence[Rule[T]], text: str) -> Optional[Tuple[str, T]]:
    """Run rules in order and return ``(rule_name, value)`` of the first hit."""
    for rule in rules:
        value = rule(text)
        if value is not None:
            return rule.name, value
    return None
