"""Integer arithmetic utilities for the reference currency.

All currency amounts and unit balances are int in the currency's smallest
unit. No float, no Decimal.
"""


def precision_for(decimals: int) -> int:
    """Return the scaling factor for a currency with `decimals` places: 6 -> 1_000_000."""
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    return 10**decimals


def to_display(amount: int, decimals: int) -> str:
    """Format a smallest-unit amount: (1_234_500, 6) -> '1.234500', (-5, 2) -> '-0.05'."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), precision_for(decimals))
    if decimals == 0:
        return f"{sign}{whole:,}"
    return f"{sign}{whole:,}.{frac:0{decimals}d}"


def is_positive_int(value: object) -> bool:
    """True for int > 0. bool is rejected even though it subclasses int."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
