import logging
from typing import Iterable, List, Sequence

from spliced.models.expense import Split, SplitType
from spliced.schemas.expense import ExpenseCreate
from spliced.utils.expense_validation import (
    ExpenseValidationError,
    validate_amount,
    validate_members,
    validate_splits,
)

logger = logging.getLogger(__name__)


def build_equal_splits(
    amount_cents: int,
    participant_ids: Sequence[str],
    excluded_ids: Iterable[str] = (),
) -> List[Split]:
    """
    Divide amount_cents equally among the participants that are not excluded.

    Excluded participants keep a zero split. Leftover cents go one each to
    the first included participants, so the shares always add up to the
    full amount.
    """
    excluded = set(excluded_ids)
    included = [pid for pid in participant_ids if pid not in excluded]
    if not included:
        raise ExpenseValidationError("At least one participant must share the expense")

    per_user = amount_cents // len(included)
    remainder = amount_cents % len(included)

    splits = []
    position = 0
    for pid in participant_ids:
        if pid in excluded:
            splits.append(Split(participant_id=pid, amount_cents=0))
            continue
        extra = 1 if position < remainder else 0
        splits.append(Split(participant_id=pid, amount_cents=per_user + extra))
        position += 1
    return splits


def build_splits(expense_in: ExpenseCreate, participant_ids: Sequence[str]) -> List[Split]:
    """
    Turn an expense request into validated splits over the group's participants.

    Raises ExpenseValidationError if the payer or any split participant is
    not in the group, or if custom splits do not add up to the amount.
    """
    validate_amount(expense_in.amount_cents)
    validate_members([expense_in.paid_by], participant_ids)

    if expense_in.split_type == SplitType.EQUAL:
        validate_members(expense_in.excluded_participant_ids, participant_ids)
        splits = build_equal_splits(
            expense_in.amount_cents,
            participant_ids,
            expense_in.excluded_participant_ids,
        )
    else:
        splits = [
            Split(participant_id=s.participant_id, amount_cents=s.amount_cents)
            for s in expense_in.splits
        ]
        validate_members([s.participant_id for s in splits], participant_ids)

    try:
        validate_splits(expense_in.amount_cents, splits)
    except ExpenseValidationError as exc:
        logger.warning("Rejected %s split: %s", expense_in.split_type.value, exc)
        raise
    return splits
