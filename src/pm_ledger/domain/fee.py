"""Fee calculation — truncating division, the fee sink absorbs the rounding residue."""


def calc_fee(amount: int, fee_rate: int, precision: int) -> int:
    """fee = floor(amount x fee_rate / precision).

    Applied independently to currency legs and unit legs. Never rounds up:
    the principal's receiver keeps the fractional remainder.
    """
    return amount * fee_rate // precision


def currency_value(amount: int, unit_base_price: int, precision: int) -> int:
    """Currency owed for `amount` units at the base price, truncated."""
    return amount * unit_base_price // precision
