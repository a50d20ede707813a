"""Decimal money utilities.

All prices, balances and ledger amounts are Decimal with two fractional
digits, stored as NUMERIC(12, 2). No float anywhere on the money path.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | str) -> Decimal:
    """Normalise to a two-place Decimal. Floats are rejected on purpose."""
    if isinstance(value, float):
        raise TypeError("float is not accepted as money, pass str or Decimal")
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid money amount: {value!r}") from exc


def money_str(value: Decimal) -> str:
    """Wire format: '30.00', '-50.00'."""
    return f"{to_money(value):.2f}"


def validate_commission_rate(rate: Decimal | int | str) -> Decimal:
    """Commission rate is a percentage in [0, 100]."""
    rate_dec = Decimal(rate)
    if not (Decimal(0) <= rate_dec <= Decimal(100)):
        raise ValueError(f"Commission rate must be between 0 and 100, got {rate}")
    return rate_dec


def calculate_commission(price: Decimal, rate_percent: Decimal | int) -> Decimal:
    """commission = price * rate / 100, rounded half-up to the cent.

    With rate in [0, 100] the result never exceeds price.
    """
    rate = validate_commission_rate(rate_percent)
    return to_money(price * rate / Decimal(100))
