from decimal import ROUND_HALF_UP, Decimal

from orderledger.config import get_settings


def to_money(value) -> Decimal:
    """Quantize ``value`` to the configured number of decimal places."""
    places = get_settings().MONEY_DECIMAL_PLACES
    exponent = Decimal(1).scaleb(-places)
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def line_total(quantity: int, unit_price) -> Decimal:
    return to_money(to_money(unit_price) * quantity)
