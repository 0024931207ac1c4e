"""
Invariant of the two-sided concentrated curve.

The curve has two pieces that meet at the apex ``(x0, y0)``. Left of the
apex the reserve of asset 1 required for a reserve ``x`` of asset 0 is
``f(x, px, py, x0, y0, cx)``; right of the apex the same function is used
with the roles of the two assets swapped. ``c = 1e18`` gives a flat
(constant-sum) piece, ``c = 0`` a hyperbolic (constant-product) piece.

Every division that decides whether a point is acceptable rounds up, so
the pool never accepts a point the contract would reject.
"""

from defi_curve.utils.errors import DomainError
from defi_curve.utils.math_helpers import (
    WAD,
    WAD_TO_RAY,
    ceil_div_positive,
    compute_scale,
    mul_div_ceil,
    sqrt_ceil,
    sqrt_floor,
)

# Above this magnitude B is scaled down before it is squared.
DIRECT_SQUARE_LIMIT = 10**36


def f(x: int, px: int, py: int, x0: int, y0: int, c: int) -> int:
    """
    Minimum ``y`` such that ``(x, y)`` is on or above the curve piece.

    Parameters
    ----------
    x : int
        Reserve on the side described by ``px``, ``x0`` and ``c``; ``0 < x <= x0``.
    px, py : int
        Price weights of this side and of the opposite side.
    x0, y0 : int
        Apex reserves of this side and of the opposite side.
    c : int
        Concentration of this side, 1e18 fixed point.

    Returns
    -------
    int
        ``y0 + ceil(ceil(px * (x0 - x) * (c * x + (1e18 - c) * x0) / (x * 1e18)) / py)``.
    """
    if x <= 0:
        raise DomainError(f"curve is undefined at reserve {x}")
    v = mul_div_ceil(px * (x0 - x), c * x + (WAD - c) * x0, x * WAD)
    return y0 + ceil_div_positive(v, py)


def verify(x: int, y: int, px: int, py: int, x0: int, y0: int, cx: int, cy: int) -> bool:
    """
    True when the point ``(x, y)`` lies on or above the curve.

    A point the contract could not evaluate (a zero reserve fed into the
    curve, or a negative reserve) is reported as invalid.
    """
    if x < 0 or y < 0:
        return False
    if x >= x0:
        if y >= y0:
            return True
        if y == 0:
            return False
        return x >= f(y, py, px, y0, x0, cy)
    if y < y0:
        return False
    if x == 0:
        return False
    return y >= f(x, px, py, x0, y0, cx)


def _slope_magnitude(x: int, px: int, py: int, x0: int, cx: int, unit: int) -> int:
    if x <= 0:
        raise DomainError(f"curve slope is undefined at reserve {x}")
    r = x0 * x0 // x * WAD // x
    return px * unit * (cx + (WAD - cx) * r // WAD) // py


def df_dx(x: int, px: int, py: int, x0: int, cx: int) -> int:
    """Derivative of the curve at ``x``, 1e18 fixed point. Always non-positive."""
    return -_slope_magnitude(x, px, py, x0, cx, 1)


def df_dx_ray(x: int, px: int, py: int, x0: int, cx: int) -> int:
    """Derivative of the curve at ``x``, 1e27 fixed point."""
    return -_slope_magnitude(x, px, py, x0, cx, WAD_TO_RAY)


def _quadratic_root(y: int, px: int, py: int, x0: int, y0: int, cx: int) -> int:
    # cx*x^2 + b*x - c = 0, every coefficient multiplied by 1e18.
    # Each rounding step moves the root up.
    b = py * WAD * (y - y0) // px - (2 * cx - WAD) * x0
    c = (WAD - cx) * x0 * x0
    four_ac = 4 * cx * c

    abs_b = abs(b)
    if b <= 0:
        if abs_b < DIRECT_SQUARE_LIMIT:
            root = sqrt_ceil(abs_b * abs_b + four_ac)
        else:
            scale = compute_scale(abs_b)
            scaled = mul_div_ceil(abs_b, abs_b, scale * scale) + ceil_div_positive(four_ac, scale * scale)
            root = sqrt_ceil(scaled) * scale
        return ceil_div_positive(abs_b + root, 2 * cx) + 1

    # the denominator is rounded down so the quotient stays high
    if abs_b < DIRECT_SQUARE_LIMIT:
        root = sqrt_floor(abs_b * abs_b + four_ac)
    else:
        scale = compute_scale(abs_b)
        root = sqrt_floor((abs_b // scale) ** 2 + four_ac // (scale * scale)) * scale
    return ceil_div_positive(2 * c, abs_b + root) + 1


def _left_boundary(estimate: int, y: int, px: int, py: int, x0: int, y0: int, cx: int) -> int:
    """Smallest ``x`` in ``[1, x0]`` with ``f(x) <= y``, searched outwards from ``estimate``."""

    def reaches(x: int) -> bool:
        return f(x, px, py, x0, y0, cx) <= y

    start = min(max(estimate, 1), x0)
    step = 1
    if reaches(start):
        hi, lo = start, start - step
        while lo >= 1 and reaches(lo):
            hi = lo
            step *= 2
            lo = start - step
        lo = max(lo, 0)
    else:
        lo, hi = start, start + step
        while hi < x0 and not reaches(hi):
            lo = hi
            step *= 2
            hi = start + step
        hi = min(hi, x0)

    # f(x0) == y0 <= y, so hi always reaches the curve; lo == 0 or lo does not
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if reaches(mid):
            hi = mid
        else:
            lo = mid
    return hi


def f_inverse(y: int, px: int, py: int, x0: int, y0: int, cx: int) -> int:
    """
    Solve ``f(x) = y`` for ``x`` on the left piece of the curve.

    Substituting ``f`` gives ``A*x^2 + B*x - C = 0`` with ``A = cx / 1e18``,
    ``B = py * (y - y0) / px - (2 * cx / 1e18 - 1) * x0`` and
    ``C = (1 - cx / 1e18) * x0^2``. The root is taken in the form that does
    not subtract two close numbers: ``(|B| + sqrt(D)) / 2A`` when ``B <= 0``
    and ``2C / (|B| + sqrt(D))`` otherwise. Above ``|B| = 1e36`` the
    discriminant is computed on ``B`` scaled down by ``compute_scale``.

    The root only seeds a search on the integer curve: the result is one
    more than the smallest ``x`` with ``f(x) <= y``, clamped to ``x0``. It
    is therefore never below the exact solution, and for a point
    ``y = f(x)`` with ``f(x - 1) > y`` it is ``x + 1``. Use ``tighten_to_curve`` to get
    the boundary point.

    Parameters
    ----------
    y : int
        Reserve of asset 1, ``y >= y0``.
    px, py, x0, y0, cx : int
        Curve parameters of the left piece.

    Returns
    -------
    int
        Reserve of asset 0, at most ``x0``.
    """
    if y < y0:
        raise DomainError(f"reserve {y} is below the equilibrium reserve {y0}")

    estimate = _quadratic_root(y, px, py, x0, y0, cx)
    x = _left_boundary(estimate, y, px, py, x0, y0, cx) + 1
    if x >= x0:
        return x0
    return x
