"""Expense validation utilities."""
from typing import Iterable, List

from spliced.models.expense import Split


class ExpenseValidationError(Exception):
    """Custom exception for expense validation errors."""
    pass


class LedgerIntegrityError(ExpenseValidationError):
    """A stored ledger breaks an invariant the balance math relies on."""
    pass


def validate_amount(amount_cents: int) -> None:
    """Expense amounts must be positive integer cents."""
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise ExpenseValidationError(
            f"Amount must be integer cents, got {amount_cents!r}"
        )
    if amount_cents <= 0:
        raise ExpenseValidationError(
            f"Amount must be positive: {amount_cents}"
        )


def validate_splits(amount_cents: int, splits: List[Split]) -> None:
    """
    Validate splits of one expense.

    Rules:
    - at least one split
    - each split amount is non-negative
    - a participant appears at most once
    - sum of split amounts equals the expense amount exactly
    """
    if not splits:
        raise ExpenseValidationError("Expense must have at least one split")

    seen = set()
    for split in splits:
        if split.amount_cents < 0:
            raise ExpenseValidationError(
                f"Split for '{split.participant_id}' has negative amount: {split.amount_cents}"
            )
        if split.participant_id in seen:
            raise ExpenseValidationError(
                f"Participant '{split.participant_id}' appears in more than one split"
            )
        seen.add(split.participant_id)

    split_sum = sum(split.amount_cents for split in splits)
    if split_sum != amount_cents:
        raise ExpenseValidationError(
            f"Split sum ({split_sum}) does not equal amount ({amount_cents})"
        )


def validate_members(participant_ids: Iterable[str], allowed_ids: Iterable[str]) -> None:
    """Every referenced participant must belong to the group."""
    allowed = set(allowed_ids)
    unknown = [pid for pid in participant_ids if pid not in allowed]
    if unknown:
        raise ExpenseValidationError(
            f"Unknown participants: {', '.join(sorted(set(unknown)))}"
        )
