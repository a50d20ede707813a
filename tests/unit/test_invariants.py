"""Unit tests for the global conservation check."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.fm_ledger.domain.invariants import verify_conservation


def _db(total: str, deposits: str, withdrawn: str) -> AsyncMock:
    results = []
    for value in (total, deposits, withdrawn):
        result = MagicMock()
        result.scalar_one.return_value = Decimal(value)
        results.append(result)
    db = AsyncMock()
    db.execute = AsyncMock(side_effect=results)
    return db


async def test_conserved() -> None:
    # 100 deposited, 20 withdrawn; the rest sits across the three balance fields
    assert await verify_conservation(_db("80.00", "100.00", "20.00")) == []


async def test_money_created_out_of_thin_air() -> None:
    violations = await verify_conservation(_db("80.01", "100.00", "20.00"))
    assert len(violations) == 1
    assert "80.01" in violations[0]
