"""Fixed-point conversion between display amounts and scaled on-chain integers."""

from decimal import ROUND_HALF_UP, Decimal, localcontext

AMOUNT_DECIMALS = 18

# uint128 needs 39 digits, plus the fractional part
_PRECISION = 80


def to_scaled(amount: Decimal, decimals: int = AMOUNT_DECIMALS) -> int:
    """
    Convert a display amount into its scaled integer form.

    Parameters
    ----------
    amount : Decimal
        Display amount
    decimals : int
        Number of fractional digits of the fixed-point representation

    Returns
    -------
    int
        Scaled amount, rounded half-up at the last fractional digit

    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = Decimal(amount).scaleb(decimals)
        return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def from_scaled(value: int, decimals: int = AMOUNT_DECIMALS) -> Decimal:
    """
    Convert a scaled integer into a display amount.

    Parameters
    ----------
    value : int
        Scaled amount as stored on-chain
    decimals : int
        Number of fractional digits of the fixed-point representation

    Returns
    -------
    Decimal
        Display amount

    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(int(value)).scaleb(-decimals)


UINT128_MAX = 2**128 - 1

# Largest display amount that still fits a uint128 once scaled
MAX_AMOUNT = from_scaled(UINT128_MAX)
