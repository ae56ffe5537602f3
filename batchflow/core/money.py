"""
Money helpers.

Single currency, stored as Decimal. Totals are kept in cents; unit costs
keep four places so catalog snapshots like 0.1275 survive a round trip.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
UNIT_COST_PLACES = Decimal("0.0001")
ZERO = Decimal("0.00")


def _as_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        # floats go through str() so 2.5 stays 2.5 and not 2.4999...
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a monetary amount: {value!r}") from e


def round_money(value: Decimal | int | float | str, places: Decimal = CENT) -> Decimal:
    """Quantize half-up to the given places (cents by default)."""
    return _as_decimal(value).quantize(places, rounding=ROUND_HALF_UP)


def to_unit_cost(value: Decimal | int | float | str) -> Decimal:
    """Normalize a per-unit cost snapshot."""
    return round_money(value, UNIT_COST_PLACES)


def line_total(quantity: int, unit_cost: Decimal | int | float | str) -> Decimal:
    """round(quantity * unit_cost) in cents."""
    return round_money(Decimal(quantity) * _as_decimal(unit_cost))


def weighted_unit_cost(total_cost: Decimal, quantity: int) -> Decimal:
    """Unit cost of a combined lot, rounded half-up to cents."""
    return round_money(total_cost / Decimal(quantity))
