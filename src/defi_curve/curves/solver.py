import logging
from typing import Callable, Optional, Tuple

from defi_curve.curves.invariant import df_dx, df_dx_ray, f, verify
from defi_curve.curves.params import CurveParams
from defi_curve.utils.errors import DomainError, NoSolutionError, NotOnCurveError, SolveResult
from defi_curve.utils.math_helpers import RAY, WAD

logger = logging.getLogger(__name__)

# Upper bound for the exponential growth of the right-hand search.
MAX_RESERVE = 2**256 - 1

Reserves = Tuple[int, int]


def _slope_fn(scale: int) -> Callable[[int, int, int, int, int], int]:
    if scale == WAD:
        return df_dx
    if scale == RAY:
        return df_dx_ray
    raise ValueError(f"unsupported price scale {scale}")


def _price_at(params: CurveParams, reserve0: int, reserve1: int, scale: int) -> int:
    slope = _slope_fn(scale)
    px, py = params.price_x, params.price_y

    if reserve0 <= params.equilibrium_reserve0:
        if reserve0 == params.equilibrium_reserve0:
            return px * scale // py
        return -slope(reserve0, px, py, params.equilibrium_reserve0, params.concentration_x)

    if reserve1 == params.equilibrium_reserve1:
        return py * scale // px
    price = -slope(reserve1, py, px, params.equilibrium_reserve1, params.concentration_y)
    if price == 0:
        raise DomainError(f"price is not representable at reserves ({reserve0}, {reserve1})")
    # reported as units of asset 1 per asset 0
    return scale * scale // price


def get_current_price(params: CurveParams, reserve0: int, reserve1: int) -> int:
    """
    Instantaneous price at a reserve point, asset 1 per asset 0, 1e18 fixed point.

    At the apex the exact ratio ``price_x / price_y`` is returned.

    Args:
        params (CurveParams): Curve configuration.
        reserve0 (int): Reserve of asset 0.
        reserve1 (int): Reserve of asset 1.

    Returns:
        int: The marginal price.
    """
    return _price_at(params, reserve0, reserve1, WAD)


def get_current_price_ray(params: CurveParams, reserve0: int, reserve1: int) -> int:
    """Same as ``get_current_price`` with 1e27 fixed point."""
    return _price_at(params, reserve0, reserve1, RAY)


def _search_left(params: CurveParams, target: int, scale: int) -> Optional[Reserves]:
    px, py = params.price_x, params.price_y
    x0, y0 = params.equilibrium_reserve0, params.equilibrium_reserve1
    cx = params.concentration_x

    lo, hi = 1, x0
    steps = 0
    while lo <= hi:
        steps += 1
        mid = (lo + hi) >> 1
        y = f(mid, px, py, x0, y0, cx)
        p = _price_at(params, mid, y, scale)
        if p == target:
            logger.debug("left search matched reserve0=%d after %d steps", mid, steps)
            return mid, y
        if p > target:
            lo = mid + 1
        else:
            hi = mid - 1
    return None


def _search_right(params: CurveParams, target: int, scale: int) -> Optional[Reserves]:
    px, py = params.price_x, params.price_y
    x0, y0 = params.equilibrium_reserve0, params.equilibrium_reserve1
    cy = params.concentration_y

    lo = hi = y0
    while hi < MAX_RESERVE:
        x_at_hi = f(hi, py, px, y0, x0, cy)
        if x_at_hi <= 0 or _price_at(params, x_at_hi, hi, scale) >= target:
            break
        hi <<= 1

    steps = 0
    while lo <= hi:
        steps += 1
        mid = (lo + hi) >> 1
        x = f(mid, py, px, y0, x0, cy)
        if x <= 0:
            hi = mid - 1
            continue
        p = _price_at(params, x, mid, scale)
        if p == target:
            logger.debug("right search matched reserve1=%d after %d steps", mid, steps)
            return x, mid
        if p < target:
            lo = mid + 1
        else:
            hi = mid - 1
    return None


def _search_reserves(params: CurveParams, price: int, scale: int) -> Reserves:
    apex_price = params.price_x * scale // params.price_y
    if price < apex_price:
        raise DomainError(f"price {price} is below the apex price {apex_price}, no curve solution")
    if price == apex_price:
        return params.equilibrium_reserve0, params.equilibrium_reserve1

    found = _search_left(params, price, scale)
    if found is None:
        found = _search_right(params, price, scale)
    if found is None:
        raise NoSolutionError(f"no integer reserves produce the price {price} (scale {scale})")
    return found


def get_current_reserves(params: CurveParams, current_price: int) -> Reserves:
    """
    Reserves at which the curve quotes ``current_price`` (1e18 fixed point).

    Args:
        params (CurveParams): Curve configuration.
        current_price (int): Target price, asset 1 per asset 0.

    Returns:
        Tuple[int, int]: ``(reserve0, reserve1)`` on the curve.

    Raises:
        DomainError: If the price is below the apex price.
        NoSolutionError: If no integer point on the curve has exactly this price.
    """
    return _search_reserves(params, current_price, WAD)


def get_current_reserves_ray(params: CurveParams, current_price: int) -> Reserves:
    """Same as ``get_current_reserves`` for a 1e27 fixed point price."""
    return _search_reserves(params, current_price, RAY)


def solve_reserves(params: CurveParams, current_price: int, ray: bool = False) -> SolveResult:
    """Non-raising form of ``get_current_reserves``; failures come back as a ``SolveResult``."""
    try:
        return SolveResult.success(_search_reserves(params, current_price, RAY if ray else WAD))
    except (DomainError, NoSolutionError) as exc:
        return SolveResult.failure(exc)


def verify_point(params: CurveParams, reserve0: int, reserve1: int) -> bool:
    """True when ``(reserve0, reserve1)`` is on or above the curve."""
    return verify(
        reserve0,
        reserve1,
        params.price_x,
        params.price_y,
        params.equilibrium_reserve0,
        params.equilibrium_reserve1,
        params.concentration_x,
        params.concentration_y,
    )


def verify_on_curve_exact(params: CurveParams, x: int, y: int) -> bool:
    """True when ``(x, y)`` is valid and neither reserve can drop by one unit."""
    on_or_above = verify_point(params, x, y)
    tight_x = x == 0 or not verify_point(params, x - 1, y)
    tight_y = y == 0 or not verify_point(params, x, y - 1)
    return on_or_above and tight_x and tight_y


def _tighten_dimension(params: CurveParams, x: int, y: int, along_x: bool) -> Reserves:
    def step(amount: int) -> Reserves:
        return (x - amount, y) if along_x else (x, y - amount)

    # Phase 1: double the decrement while the point stays valid
    amount = 1
    while True:
        tx, ty = step(amount)
        if not verify_point(params, tx, ty):
            break
        x, y = tx, ty
        amount *= 2

    # Phase 2: halve it back down until a single unit no longer fits
    while True:
        if amount > 1:
            amount //= 2
        tx, ty = step(amount)
        if verify_point(params, tx, ty):
            x, y = tx, ty
        elif amount == 1:
            break
    return x, y


def tighten_to_curve(params: CurveParams, x: int, y: int) -> Reserves:
    """
    Walk a point on or above the curve down to the curve boundary.

    Reserve 0 is reduced first, then reserve 1, each by a galloping search
    (doubling, then halving the decrement).

    Args:
        params (CurveParams): Curve configuration.
        x (int): Reserve of asset 0.
        y (int): Reserve of asset 1.

    Returns:
        Tuple[int, int]: The tightened point.

    Raises:
        NotOnCurveError: If ``(x, y)`` is below the curve.
    """
    if not verify_point(params, x, y):
        raise NotOnCurveError(f"point ({x}, {y}) is not on or above the curve")
    if verify_on_curve_exact(params, x, y):
        return x, y

    x, y = _tighten_dimension(params, x, y, along_x=True)
    x, y = _tighten_dimension(params, x, y, along_x=False)
    logger.debug("tightened point to (%d, %d)", x, y)
    return x, y
