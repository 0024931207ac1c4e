import math

from defi_curve.utils.errors import DomainError

# Fixed-point units shared by the curve math.
WAD = 10**18
RAY = 10**27
WAD_TO_RAY = 10**9

SQRT_MAX_ITERATIONS = 512


def floor_div(a: int, b: int) -> int:
    """
    Floor division on exact integers.

    Parameters
    ----------
    a : int
        Dividend.
    b : int
        Divisor, must be non-zero.

    Returns
    -------
    int
        ``floor(a / b)``.
    """
    if b == 0:
        raise DomainError("division by zero")
    return a // b


def ceil_div_positive(a: int, b: int) -> int:
    """
    Ceiling division for a positive divisor.

    Parameters
    ----------
    a : int
        Dividend, expected to be non-negative.
    b : int
        Divisor, must be strictly positive.

    Returns
    -------
    int
        ``ceil(a / b)``.

    Raises
    ------
    DomainError
        If ``b`` is not positive.
    """
    if b <= 0:
        raise DomainError(f"ceil_div_positive requires a positive divisor, got {b}")
    return -((-a) // b)


def mul_div_ceil(x: int, y: int, denominator: int) -> int:
    """
    Compute ``ceil(x * y / denominator)`` with a full-width intermediate product.

    Every rounded step of the curve formulas goes through this helper so that
    off-chain results round the same way the pool contract does.
    """
    return ceil_div_positive(x * y, denominator)


def sqrt_ceil(n: int) -> int:
    """
    Smallest integer ``r`` such that ``r * r >= n``.

    Newton's method seeded from the bit length of ``n``. Iteration stops when
    two successive iterates are equal or differ by one, then the converged
    floor root is bumped by one if its square is still below ``n``.

    Parameters
    ----------
    n : int
        Radicand, must be non-negative.

    Returns
    -------
    int
        The ceiling square root.

    Raises
    ------
    DomainError
        If ``n`` is negative.
    """
    if n < 0:
        raise DomainError("square root of negative number")
    if n < 2:
        return n

    x0 = 1 << (n.bit_length() >> 1)
    for _ in range(SQRT_MAX_ITERATIONS):
        x1 = (n // x0 + x0) >> 1
        if x1 == x0 or x1 == x0 + 1:
            break
        x0 = x1
    else:
        raise DomainError(f"square root did not converge for {n}")

    # a seed below the root can stop one short of the floor root
    while x0 * x0 > n:
        x0 -= 1
    while (x0 + 1) * (x0 + 1) <= n:
        x0 += 1
    return x0 if x0 * x0 == n else x0 + 1


def sqrt_floor(n: int) -> int:
    """Largest integer ``r`` such that ``r * r <= n``."""
    if n < 0:
        raise DomainError("square root of negative number")
    return math.isqrt(n)


def compute_scale(x: int) -> int:
    """
    Smallest power of two ``s`` such that ``x // s`` fits in 128 bits.

    Returns 1 when ``x`` already fits.
    """
    bits = x.bit_length()
    if bits > 128:
        return 1 << (bits - 128)
    return 1
