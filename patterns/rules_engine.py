"""Pure-function rules engine pattern.

A rule is a plain function that inspects its input and returns a
RuleResult; it never touches storage. Results are combined with
``evaluate_rules`` and the first failure (in the order the rules were
listed) is what gets reported.

The bookstore runs its order checks this way before a transaction is
opened, see verticals.bookstore.rules.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RuleResult:
    """Outcome of one rule."""

    passed: bool
    rule_name: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class RuleSetResult:
    """Combined outcome; ``failed`` keeps the order rules were evaluated in."""

    all_passed: bool
    results: list[RuleResult]
    failed: list[RuleResult] = field(default_factory=list)

    def __post_init__(self):
        self.failed = [r for r in self.results if not r.passed]
        self.all_passed = not self.failed

    @property
    def first_failure(self) -> RuleResult | None:
        return self.failed[0] if self.failed else None


def evaluate_rules(*rules: RuleResult) -> RuleSetResult:
    """Combine already-evaluated rule results.

    Example::

        checks = evaluate_rules(
            check_items_present(items),
            check_quantities(items),
        )
        if not checks.all_passed:
            raise UserError(checks.first_failure.message)
    """
    return RuleSetResult(
        all_passed=all(r.passed for r in rules),
        results=list(rules),
    )
