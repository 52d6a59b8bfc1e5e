"""
Rounding -- the single numeric rule for percentage-based tax amounts.

Every percentage component amount is ``(base * rate) / 100`` retained to four
fractional digits, rounding half-up.  The rule is applied identically
everywhere a percentage is computed so that downstream totals reconcile to
the smallest currency unit in audits.  It is not configurable.

Arithmetic runs under private decimal contexts, so results never depend on
the caller's ambient ``decimal.getcontext()`` settings.  Sums, fixed products
and the final quantize run without a precision limit and never round early.

Base amounts are bounded by ``MAX_AMOUNT`` (the integer part of the
``Numeric(38, 9)`` storage column).
"""

from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, ROUND_HALF_UP, Context, Decimal

AMOUNT_SCALE = 4
AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_SCALE)  # Decimal("0.0001")
HUNDRED = Decimal("100")
ZERO = Decimal("0")
MAX_AMOUNT_DIGITS = 29
MAX_AMOUNT = Decimal(10) ** MAX_AMOUNT_DIGITS

_CONTEXT = Context(prec=38, rounding=ROUND_HALF_UP)
_EXACT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN, rounding=ROUND_HALF_UP)


def quantize_amount(value: Decimal) -> Decimal:
    """Round a value to four fractional digits, half-up."""
    return _EXACT.quantize(value, AMOUNT_QUANTUM)


def percentage_amount(base_amount: Decimal, rate: Decimal) -> Decimal:
    """Compute ``base_amount * rate / 100`` rounded per the engine rule."""
    product = _CONTEXT.multiply(base_amount, rate)
    return quantize_amount(_CONTEXT.divide(product, HUNDRED))


def percentage_of(part: Decimal, whole: Decimal) -> Decimal:
    """``part / whole * 100`` at four digits; zero when ``whole`` is zero."""
    if whole == ZERO:
        return quantize_amount(ZERO)
    ratio = _CONTEXT.divide(part, whole)
    return quantize_amount(_CONTEXT.multiply(ratio, HUNDRED))


def add_amounts(*values: Decimal) -> Decimal:
    """Exact sum of decimal amounts; ``ZERO`` when called with nothing."""
    total = ZERO
    for value in values:
        total = _EXACT.add(total, value)
    return total


def multiply_exact(value: Decimal, factor: int | Decimal) -> Decimal:
    """Unrounded product, used for fixed per-unit amounts."""
    return _EXACT.multiply(value, Decimal(factor))


def within_amount_range(value: Decimal) -> bool:
    """True when ``abs(value)`` is below ``MAX_AMOUNT``."""
    return _EXACT.abs(value) < MAX_AMOUNT
