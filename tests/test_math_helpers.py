import math
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from defi_curve.utils.errors import DomainError
from defi_curve.utils.math_helpers import (
    ceil_div_positive,
    compute_scale,
    floor_div,
    mul_div_ceil,
    sqrt_ceil,
    sqrt_floor,
)


def test_floor_div_rounds_towards_negative_infinity():
    assert floor_div(7, 2) == 3
    assert floor_div(-7, 2) == -4
    assert floor_div(6, 3) == 2
    with pytest.raises(DomainError):
        floor_div(1, 0)


def test_ceil_div_positive():
    assert ceil_div_positive(7, 2) == 4
    assert ceil_div_positive(6, 2) == 3
    assert ceil_div_positive(0, 5) == 0
    assert ceil_div_positive(-5, 3) == -1
    with pytest.raises(DomainError):
        ceil_div_positive(1, 0)
    with pytest.raises(DomainError):
        ceil_div_positive(1, -2)


def test_mul_div_ceil_uses_full_width_product():
    assert mul_div_ceil(7, 3, 2) == 11
    assert mul_div_ceil(6, 3, 2) == 9
    big = 2**255
    assert mul_div_ceil(big, big, big) == big
    assert mul_div_ceil(big + 1, big, big * 2) == big // 2 + 1
    with pytest.raises(DomainError):
        mul_div_ceil(1, 1, 0)


def test_sqrt_ceil_small_values():
    expected = {0: 0, 1: 1, 2: 2, 3: 2, 4: 2, 5: 3, 8: 3, 9: 3, 10: 4, 15: 4, 16: 4, 17: 5}
    for n, root in expected.items():
        assert sqrt_ceil(n) == root

    for n in range(1, 5000):
        r = sqrt_ceil(n)
        assert r * r >= n
        assert (r - 1) * (r - 1) < n


def test_sqrt_ceil_matches_isqrt_on_large_values():
    for n in [2**129 - 1, 2**129, 2**200 + 12345, 10**72 - 1, 10**72, 3**150, (10**20 + 1) ** 2 - 1]:
        floor_root = math.isqrt(n)
        expected = floor_root if floor_root * floor_root == n else floor_root + 1
        assert sqrt_ceil(n) == expected


def test_sqrt_ceil_negative_raises():
    with pytest.raises(DomainError):
        sqrt_ceil(-1)


def test_sqrt_floor_brackets_ceiling_root():
    for n in [0, 1, 2, 15, 16, 17, 10**72 - 1, 10**72, 3**150]:
        root = sqrt_floor(n)
        assert root * root <= n < (root + 1) * (root + 1)
        assert sqrt_ceil(n) - root in (0, 1)
    with pytest.raises(DomainError):
        sqrt_floor(-4)


def test_compute_scale():
    assert compute_scale(0) == 1
    assert compute_scale(2**128 - 1) == 1
    assert compute_scale(2**128) == 2
    assert compute_scale(2**200) == 2**73

    for x in [2**128, 10**40, 2**255 + 17]:
        scale = compute_scale(x)
        assert (x // scale) < 2**128
        assert (x // (scale // 2)) >= 2**128
