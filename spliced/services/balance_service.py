"""
Balance engine: fold a group's ledger into one net amount per participant.

Positive = the participant is owed money
Negative = the participant owes money
Zero     = settled up

Balances are never stored; they are recomputed from the full ledger.
"""

from typing import Dict, Iterable, List

from spliced.models.expense import Expense
from spliced.models.settlement import Balance
from spliced.utils.expense_validation import LedgerIntegrityError


def compute_balances(expenses: Iterable[Expense], participant_ids: Iterable[str]) -> Dict[str, int]:
    """
    Net balance in cents per participant id.

    Every known participant starts at 0 so members without expenses still
    show up as settled. Ids found only in the ledger (removed members) get
    their own entry. Raises LedgerIntegrityError on a malformed expense.
    """
    balances: Dict[str, int] = {pid: 0 for pid in participant_ids}

    for expense in expenses:
        _check_expense(expense)

        balances[expense.paid_by] = balances.get(expense.paid_by, 0) + expense.amount_cents
        for split in expense.splits:
            balances[split.participant_id] = balances.get(split.participant_id, 0) - split.amount_cents

    return balances


def total_spent(expenses: Iterable[Expense]) -> int:
    """Sum of regular expenses; settlement payments are not spending."""
    return sum(e.amount_cents for e in expenses if not e.is_settlement)


def to_balance_list(balances: Dict[str, int]) -> List[Balance]:
    """Balances ordered highest first."""
    ordered = sorted(balances.items(), key=lambda item: item[1], reverse=True)
    return [Balance(participant_id=pid, amount_cents=amount) for pid, amount in ordered]


def _check_expense(expense: Expense) -> None:
    if expense.amount_cents < 0:
        raise LedgerIntegrityError(
            f"Expense {expense.id} has negative amount: {expense.amount_cents}"
        )
    split_sum = sum(split.amount_cents for split in expense.splits)
    if split_sum != expense.amount_cents:
        raise LedgerIntegrityError(
            f"Expense {expense.id}: split sum ({split_sum}) does not equal amount ({expense.amount_cents})"
        )
