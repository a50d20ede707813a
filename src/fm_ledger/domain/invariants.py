"""Global conservation check.

Money enters the system only through deposit transactions and leaves only
through approved withdrawals; orders, refunds and commission merely move it
between users and between the balance fields. Hence:

    Σ(balance + pending_balance + held_balance) over all users
        == Σ(deposit amounts) − Σ(approved withdrawal amounts)
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_TOTAL_FUNDS_SQL = text("""
    SELECT COALESCE(SUM(balance + pending_balance + held_balance), 0)
    FROM users
""")
_DEPOSITS_SQL = text("""
    SELECT COALESCE(SUM(amount), 0)
    FROM transactions
    WHERE type = 'deposit'
""")
_APPROVED_WITHDRAWALS_SQL = text("""
    SELECT COALESCE(SUM(amount), 0)
    FROM withdrawal_requests
    WHERE status = 'approved'
""")


async def verify_conservation(db: AsyncSession) -> list[str]:
    """Returns a list of violation strings (empty when money is conserved)."""
    total_funds = (await db.execute(_TOTAL_FUNDS_SQL)).scalar_one()
    deposits = (await db.execute(_DEPOSITS_SQL)).scalar_one()
    withdrawn = (await db.execute(_APPROVED_WITHDRAWALS_SQL)).scalar_one()

    expected = deposits - withdrawn
    if total_funds != expected:
        msg = (
            f"Conservation violated: user funds {total_funds} != "
            f"deposits {deposits} - approved withdrawals {withdrawn} = {expected}"
        )
        logger.error(msg)
        return [msg]
    return []
