import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Tuple

from defi_curve.utils.errors import InvalidPriceError
from defi_curve.utils.math_helpers import WAD

logger = logging.getLogger(__name__)

INVALID_PRICE_FRACTION: Tuple[None, None] = (None, None)


def _parse_price(price: Any) -> float:
    try:
        value = float(price)
    except (TypeError, ValueError):
        raise InvalidPriceError(f"not a valid price: {price!r}")
    if math.isnan(value) or math.isinf(value) or value <= 0:
        raise InvalidPriceError(f"not a valid price: {price!r}")
    return value


def _to_wad(value: float) -> int:
    if math.isinf(value):
        raise InvalidPriceError("price is out of range")
    # shortest repr of the float, rounded half up to 18 decimals
    scaled = Decimal(repr(value)) * WAD
    return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def compute_price_fraction(
    price: Any, decimals0: int, decimals1: int
) -> Tuple[Optional[int], Optional[int]]:
    """
    Convert a human price into the integer ``(price_x, price_y)`` pair of a pool.

    The price is quoted as units of asset 1 per unit of asset 0. Each side is
    scaled by its token decimals; a price below 1 is inverted first so the
    1e18 scaling lands on the denominator instead of truncating a small
    numerator.

    Parameters
    ----------
    price : Any
        Price as a number or a string typed by a user.
    decimals0 : int
        Decimals of asset 0.
    decimals1 : int
        Decimals of asset 1.

    Returns
    -------
    Tuple[Optional[int], Optional[int]]
        ``(price_x, price_y)``, or ``(None, None)`` when the price is not a
        positive finite number.
    """
    try:
        value = _parse_price(price)
        inverted = value < 1
        if inverted:
            value = 1 / value
        price_wad = _to_wad(value)
    except (InvalidPriceError, OverflowError) as exc:
        logger.debug("rejected price input: %s", exc)
        return INVALID_PRICE_FRACTION

    numerator = 10 ** int(decimals1)
    denominator = 10 ** int(decimals0)
    if not inverted:
        numerator = numerator * price_wad // WAD
    else:
        denominator = denominator * price_wad // WAD
    return numerator, denominator
