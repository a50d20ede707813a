"""Audit replay: rebuild a user's available balance from their transactions.

Starting at 0.00 and walking the rows in creation order, every row must
continue the chain (its balance_before equals the previous balance_after),
be internally consistent (balance_before + amount == balance_after), and
the last balance_after must equal the stored balance exactly.
"""

from collections.abc import Iterable
from decimal import Decimal

from src.fm_common.money import ZERO
from src.fm_ledger.domain.models import Transaction


def replay_transactions(
    user_id: str, entries: Iterable[Transaction], stored_balance: Decimal
) -> list[str]:
    violations: list[str] = []
    running = ZERO
    for entry in entries:
        if entry.balance_before != running:
            violations.append(
                f"user {user_id} tx {entry.id}: balance_before {entry.balance_before} "
                f"!= previous balance_after {running}"
            )
        if entry.balance_before + entry.amount != entry.balance_after:
            violations.append(
                f"user {user_id} tx {entry.id}: {entry.balance_before} + {entry.amount} "
                f"!= balance_after {entry.balance_after}"
            )
        running = entry.balance_after
    if running != stored_balance:
        violations.append(
            f"user {user_id}: replayed balance {running} != stored balance {stored_balance}"
        )
    return violations
