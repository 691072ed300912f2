"""Display rounding. All half-up, the way people round money by hand."""

from decimal import ROUND_HALF_UP, Decimal

DOLLAR = Decimal("1")
CENT = Decimal("0.01")
TENTH = Decimal("0.1")
HUNDRED = Decimal("100")


def round_dollars(amount: Decimal) -> Decimal:
    return amount.quantize(DOLLAR, rounding=ROUND_HALF_UP)


def round_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """`part` as a percentage of `whole`, one decimal place. 0 when whole is 0."""
    if whole == 0:
        return Decimal("0.0")
    return (part / whole * HUNDRED).quantize(TENTH, rounding=ROUND_HALF_UP)
