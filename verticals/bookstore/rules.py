"""Bookstore order rules: pure functions.

Checks run on a submitted item list before the order transaction opens.
Failure messages are returned to the caller verbatim.
"""

from typing import Sequence

from patterns.rules_engine import RuleResult, RuleSetResult, evaluate_rules
from verticals.bookstore.models.schemas import OrderItemIn


def check_items_present(items: Sequence[OrderItemIn]) -> RuleResult:
    passed = len(items) > 0
    return RuleResult(
        passed=passed,
        rule_name="items_present",
        message="Order has items" if passed else "At least one order item is required",
        details={"count": len(items)},
    )


def check_order_size(items: Sequence[OrderItemIn], max_items: int) -> RuleResult:
    passed = len(items) <= max_items
    return RuleResult(
        passed=passed,
        rule_name="order_size",
        message="Order size ok" if passed else "Too many items in order",
        details={"count": len(items), "max_items": max_items},
    )


def check_book_ids(items: Sequence[OrderItemIn]) -> RuleResult:
    invalid = [i.book_id for i in items if i.book_id <= 0]
    return RuleResult(
        passed=not invalid,
        rule_name="book_ids",
        message="Book IDs ok" if not invalid else "Invalid Book ID",
        details={"invalid": invalid},
    )


def check_quantities(items: Sequence[OrderItemIn]) -> RuleResult:
    invalid = [i.book_id for i in items if i.quantity <= 0]
    return RuleResult(
        passed=not invalid,
        rule_name="quantities",
        message="Quantities ok" if not invalid else "Quantity must be greater than zero",
        details={"book_ids": invalid},
    )


def validate_order_items(items: Sequence[OrderItemIn], max_items: int) -> RuleSetResult:
    """Run every order rule; the first failure is what callers report."""
    return evaluate_rules(
        check_items_present(items),
        check_order_size(items, max_items),
        check_book_ids(items),
        check_quantities(items),
    )


__all__ = [
    "check_items_present",
    "check_order_size",
    "check_book_ids",
    "check_quantities",
    "validate_order_items",
]
