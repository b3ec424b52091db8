"""Integer-cent helpers shared by the balance and settlement math."""
from decimal import Decimal

# Balances within one cent of zero count as settled
EPSILON_CENTS = 1

CENTS = Decimal(100)


def is_settled(amount_cents: int) -> bool:
    return abs(amount_cents) <= EPSILON_CENTS


def from_cents(amount_cents: int) -> Decimal:
    """Presentation value with exactly two decimal places."""
    return (Decimal(amount_cents) / CENTS).quantize(Decimal("0.01"))
