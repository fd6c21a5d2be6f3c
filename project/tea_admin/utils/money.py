# tea_admin/utils/money.py

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")


def round2(value) -> Decimal:
    """Округление денежной суммы до копеек (половина вверх)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(price: Decimal, quantity: int) -> Decimal:
    return round2(Decimal(price) * quantity)


def sum_totals(totals: Iterable[Decimal]) -> Decimal:
    return round2(sum((Decimal(t) for t in totals), Decimal("0")))
