import random
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from defi_curve.curves.invariant import df_dx, df_dx_ray, f, f_inverse, verify
from defi_curve.curves.params import CurveParams
from defi_curve.curves.solver import tighten_to_curve, verify_on_curve_exact
from defi_curve.utils.errors import DomainError
from defi_curve.utils.math_helpers import WAD

WAD_HALF = WAD // 2

# (px, py, x0, y0, c)
UNIT_CURVES = [
    (1, 1, 1000, 1000, WAD),
    (1, 1, 1000, 1000, WAD_HALF),
    (1, 1, 1000, 1000, 0),
]


def test_fully_concentrated_example():
    assert f(500, 1, 1, 1000, 1000, WAD) == 1500
    assert verify(500, 1500, 1, 1, 1000, 1000, WAD, WAD) is True
    assert verify(500, 1499, 1, 1, 1000, 1000, WAD, WAD) is False


def test_f_known_values():
    # constant product: y = x0 * y0 / x
    assert f(400, 1, 1, 1000, 1000, 0) == 2500
    assert f(500, 1, 1, 1000, 1000, WAD_HALF) == 1750
    assert f(1000, 1, 1, 1000, 1000, WAD_HALF) == 1000
    # 1e6 / 3 is not an integer; the result rounds up
    assert f(3, 1, 1, 1000, 1000, 0) == 333334


def test_f_rejects_empty_reserve():
    with pytest.raises(DomainError):
        f(0, 1, 1, 1000, 1000, WAD_HALF)


@pytest.mark.parametrize("px,py,x0,y0,c", UNIT_CURVES + [(2 * WAD, WAD, 10**6, 3 * 10**6, 9 * 10**17)])
def test_f_returns_tight_boundary(px, py, x0, y0, c):
    step = max(1, x0 // 500)
    for x in range(1, x0 + 1, step):
        y = f(x, px, py, x0, y0, c)
        assert verify(x, y, px, py, x0, y0, c, c) is True
        assert verify(x, y - 1, px, py, x0, y0, c, c) is False


def test_verify_right_side_and_edges():
    args = (1, 1, 1000, 1000, WAD, WAD)
    assert verify(1500, 500, *args) is True
    assert verify(1499, 500, *args) is False
    assert verify(1000, 1000, *args) is True
    assert verify(5000, 5000, *args) is True
    assert verify(0, 5000, *args) is False
    assert verify(5000, 0, *args) is False
    assert verify(-1, 5000, *args) is False
    assert verify(999, 999, *args) is False


def test_df_dx():
    assert df_dx(500, 1, 1, 1000, WAD_HALF) == -25 * 10**17
    assert df_dx_ray(500, 1, 1, 1000, WAD_HALF) == -25 * 10**26
    # slope at the apex is exactly -px / py
    assert df_dx(1000, 3, 2, 1000, WAD_HALF) == -(3 * WAD // 2)
    with pytest.raises(DomainError):
        df_dx(0, 1, 1, 1000, WAD_HALF)


def test_f_inverse_known_values():
    assert f_inverse(1500, 1, 1, 1000, 1000, WAD) == 501
    assert f_inverse(2500, 1, 1, 1000, 1000, 0) == 401
    assert f_inverse(1750, 1, 1, 1000, 1000, WAD_HALF) == 501


def test_f_inverse_clamps_to_apex():
    for c in (0, WAD_HALF, WAD):
        assert f_inverse(1000, 1, 1, 1000, 1000, c) == 1000


def test_f_inverse_rejects_reserve_below_apex():
    with pytest.raises(DomainError):
        f_inverse(999, 1, 1, 1000, 1000, WAD_HALF)


# (px, py, x0, y0, c); the last two take the scaled discriminant path
INVERSE_CURVES = UNIT_CURVES + [
    (3 * WAD, 2 * WAD, 10**6, 10**6, WAD // 3),
    (2 * WAD, WAD, 10**6, 3 * 10**6, 9 * 10**17),
    (WAD, 3 * WAD, 10**6, 10**6, 7 * 10**17),
    (WAD, WAD, 10**20, 10**20, 0),
    (WAD, WAD, 10**40, 10**40, WAD),
]


@pytest.mark.parametrize("px,py,x0,y0,c", INVERSE_CURVES)
def test_f_inverse_overestimates_by_at_most_one(px, py, x0, y0, c):
    params = CurveParams(px, py, x0, y0, c, c)
    step = max(1, x0 // 400)
    for x in range(1, x0 + 1, step):
        y = f(x, px, py, x0, y0, c)
        estimate = f_inverse(y, px, py, x0, y0, c)
        assert verify(estimate, y, px, py, x0, y0, c, c)
        if x == 1 or f(x - 1, px, py, x0, y0, c) > y:
            assert estimate in (x, x + 1)
            assert tighten_to_curve(params, estimate, y) == (x, y)


@pytest.mark.parametrize("x", [23929, 38884])
def test_f_inverse_weighted_curve_stays_within_one(x):
    px, py, x0, y0, c = 3 * WAD, 2 * WAD, 10**6, 10**6, WAD // 3
    y = f(x, px, py, x0, y0, c)
    assert f_inverse(y, px, py, x0, y0, c) == x + 1


def test_f_inverse_scaled_path_with_positive_b_stays_on_curve():
    px, py, c = 947078, 241998596585859739630644, 522132645595499940
    x0, y0 = 3415746080045866665399747601791973, 549088049737867834389561015072676
    x = 2958354010808654039238073600191076
    params = CurveParams(px, py, x0, y0, c, c)
    y = f(x, px, py, x0, y0, c)

    estimate = f_inverse(y, px, py, x0, y0, c)
    assert estimate <= x + 1
    assert verify(estimate, y, px, py, x0, y0, c, c)
    assert tighten_to_curve(params, estimate, y) == (estimate - 1, y)


def test_f_inverse_on_random_pools():
    rng = random.Random(1014)
    for _ in range(300):
        px = rng.randint(1, 10**24)
        py = rng.randint(1, 10**24)
        x0 = rng.randint(1, 2**112 - 1)
        y0 = rng.randint(1, 2**112 - 1)
        c = rng.randint(0, WAD)
        x = rng.randint(1, x0)
        params = CurveParams(px, py, x0, y0, c, c)
        y = f(x, px, py, x0, y0, c)

        estimate = f_inverse(y, px, py, x0, y0, c)
        assert estimate <= x + 1
        assert verify(estimate, y, px, py, x0, y0, c, c)
        boundary = tighten_to_curve(params, estimate, y)
        assert boundary[1] == y
        assert verify_on_curve_exact(params, *boundary)


def test_f_inverse_scaled_path_never_undershoots():
    x0 = y0 = 10**40
    params = CurveParams(1, 1, x0, y0, WAD, WAD)
    x = 3 * 10**39 + 7
    y = f(x, 1, 1, x0, y0, WAD)
    assert y == y0 + (x0 - x)

    estimate = f_inverse(y, 1, 1, x0, y0, WAD)
    assert estimate == x + 1
    assert tighten_to_curve(params, estimate, y) == (x, y)
