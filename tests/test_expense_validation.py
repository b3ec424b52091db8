from decimal import Decimal

import pytest

from spliced.models.expense import Split
from spliced.utils.expense_validation import (
    ExpenseValidationError,
    LedgerIntegrityError,
    validate_amount,
    validate_splits,
)
from spliced.utils.money import from_cents, is_settled


@pytest.mark.parametrize("amount", [0, -100, 10.5, True, "100"])
def test_validate_amount_rejects(amount):
    with pytest.raises(ExpenseValidationError):
        validate_amount(amount)


def test_validate_amount_accepts_positive_cents():
    validate_amount(1)


def test_validate_splits_requires_a_split():
    with pytest.raises(ExpenseValidationError, match="at least one split"):
        validate_splits(100, [])


def test_validate_splits_rejects_negative_share():
    splits = [
        Split(participant_id="a", amount_cents=150),
        Split(participant_id="b", amount_cents=-50),
    ]

    with pytest.raises(ExpenseValidationError, match="negative"):
        validate_splits(100, splits)


def test_ledger_integrity_error_is_a_validation_error():
    assert issubclass(LedgerIntegrityError, ExpenseValidationError)


def test_from_cents():
    assert from_cents(4500) == Decimal("45.00")
    assert from_cents(-1) == Decimal("-0.01")


@pytest.mark.parametrize("cents,settled", [(0, True), (1, True), (-1, True), (2, False), (-2, False)])
def test_is_settled(cents, settled):
    assert is_settled(cents) is settled
