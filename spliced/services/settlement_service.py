"""
Settle-up suggestions.

Greedy matcher:
1. Split balances into debtors (most negative first) and creditors
   (most positive first); anything within one cent of zero is settled
2. Take the head debtor and pair it with the creditor that offsets it
   exactly, else the creditor whose balance is closest to the debt
3. Move min(debt, credit) from debtor to creditor
4. Drop whoever reached zero and repeat until one side is empty

Not guaranteed to be the minimum number of transfers, but deterministic
for a given input order.
"""

import logging
from datetime import date
from typing import Dict, List, Sequence

from spliced.models.expense import ExpenseKind, SplitType
from spliced.models.group import Group
from spliced.models.settlement import Balance, Transfer
from spliced.schemas.settlement import SettlementCreate
from spliced.utils.expense_validation import ExpenseValidationError, validate_members
from spliced.utils.money import EPSILON_CENTS, is_settled

logger = logging.getLogger(__name__)

SETTLEMENT_DESCRIPTION = "Settlement payment"


def compute_settlements(balances: Sequence[Balance]) -> List[Transfer]:
    """Transfers that bring every balance to within one cent of zero."""
    debtors = [
        {"participant_id": b.participant_id, "amount": b.amount_cents}
        for b in balances
        if b.amount_cents < -EPSILON_CENTS
    ]
    creditors = [
        {"participant_id": b.participant_id, "amount": b.amount_cents}
        for b in balances
        if b.amount_cents > EPSILON_CENTS
    ]

    debtors.sort(key=lambda x: x["amount"])
    creditors.sort(key=lambda x: x["amount"], reverse=True)

    transfers: List[Transfer] = []

    while debtors and creditors:
        debtor = debtors[0]
        creditor_idx = _find_best_match(debtor["amount"], creditors)
        creditor = creditors[creditor_idx]

        amount = min(-debtor["amount"], creditor["amount"])
        if amount > EPSILON_CENTS:
            transfers.append(Transfer(
                from_participant_id=debtor["participant_id"],
                to_participant_id=creditor["participant_id"],
                amount_cents=amount
            ))

        debtor["amount"] += amount
        creditor["amount"] -= amount

        if is_settled(debtor["amount"]):
            debtors.pop(0)
        if is_settled(creditor["amount"]):
            creditors.pop(creditor_idx)

    return transfers


def apply_transfers(balances: Dict[str, int], transfers: Sequence[Transfer]) -> Dict[str, int]:
    """Balances after every transfer has been paid."""
    result = dict(balances)
    for transfer in transfers:
        result[transfer.from_participant_id] = result.get(transfer.from_participant_id, 0) + transfer.amount_cents
        result[transfer.to_participant_id] = result.get(transfer.to_participant_id, 0) - transfer.amount_cents
    return result


def build_settlement_expense(group: Group, settlement_in: SettlementCreate) -> dict:
    """
    Ledger document recording that a transfer was paid.

    The payer is the debtor and the single split goes to the creditor, so
    folding it into the balances moves exactly amount_cents between them.
    """
    if settlement_in.from_participant_id == settlement_in.to_participant_id:
        raise ExpenseValidationError("A participant cannot settle with themselves")

    # Removed members can still settle their historical debts
    validate_members(
        [settlement_in.from_participant_id, settlement_in.to_participant_id],
        [p.id for p in group.participants]
    )

    logger.info(
        "Recording settlement in group %s: %s -> %s (%d cents)",
        group.id,
        settlement_in.from_participant_id,
        settlement_in.to_participant_id,
        settlement_in.amount_cents
    )

    return {
        "group_id": group.id,
        "description": SETTLEMENT_DESCRIPTION,
        "amount_cents": settlement_in.amount_cents,
        "currency": group.currency,
        "date": date.today().isoformat(),
        "paid_by": settlement_in.from_participant_id,
        "split_type": SplitType.CUSTOM.value,
        "splits": [
            {
                "participant_id": settlement_in.to_participant_id,
                "amount_cents": settlement_in.amount_cents
            }
        ],
        "kind": ExpenseKind.SETTLEMENT.value,
    }


def _find_best_match(debtor_amount: int, creditors: List[dict]) -> int:
    """Index of the creditor to pair with a debtor; first wins on ties."""
    for idx, creditor in enumerate(creditors):
        if abs(creditor["amount"] + debtor_amount) <= EPSILON_CENTS:
            return idx

    return min(
        range(len(creditors)),
        key=lambda idx: abs(creditors[idx]["amount"] + debtor_amount)
    )
