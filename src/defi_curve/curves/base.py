from abc import ABC, abstractmethod
from typing import Tuple

from defi_curve.curves import solver
from defi_curve.curves.invariant import f, f_inverse
from defi_curve.curves.params import CurveParams


class BaseCurve(ABC):
    """
    Abstract base class for exact-integer AMM pricing curves.

    To implement a custom curve, subclass this and implement the three required methods:
    - compute_price
    - compute_reserves
    - verify_point
    """

    @abstractmethod
    def compute_price(self, reserve0: int, reserve1: int, ray: bool = False) -> int:
        """
        Marginal price at a reserve point.

        Args:
            reserve0 (int): Reserve of asset 0.
            reserve1 (int): Reserve of asset 1.
            ray (bool): Return the price at 1e27 instead of 1e18 fixed point.

        Returns:
            int: Price of asset 0 in units of asset 1.
        """
        pass

    @abstractmethod
    def compute_reserves(self, price: int, ray: bool = False) -> Tuple[int, int]:
        """
        Reserve point at which the curve quotes ``price``.

        Args:
            price (int): Target price, fixed point.
            ray (bool): Whether ``price`` is at 1e27 instead of 1e18.

        Returns:
            Tuple[int, int]: ``(reserve0, reserve1)``.
        """
        pass

    @abstractmethod
    def verify_point(self, reserve0: int, reserve1: int) -> bool:
        """
        Whether the pool would accept the reserve point.

        Args:
            reserve0 (int): Reserve of asset 0.
            reserve1 (int): Reserve of asset 1.

        Returns:
            bool: True when the point is on or above the curve.
        """
        pass


class ConcentratedCurve(BaseCurve):
    """
    Two-sided concentrated curve bound to a fixed ``CurveParams``.

    Thin object wrapper over ``defi_curve.curves.solver`` and
    ``defi_curve.curves.invariant``.
    """

    def __init__(self, params: CurveParams):
        self.params = params.validate()

    def compute_price(self, reserve0: int, reserve1: int, ray: bool = False) -> int:
        if ray:
            return solver.get_current_price_ray(self.params, reserve0, reserve1)
        return solver.get_current_price(self.params, reserve0, reserve1)

    def compute_reserves(self, price: int, ray: bool = False) -> Tuple[int, int]:
        if ray:
            return solver.get_current_reserves_ray(self.params, price)
        return solver.get_current_reserves(self.params, price)

    def verify_point(self, reserve0: int, reserve1: int) -> bool:
        return solver.verify_point(self.params, reserve0, reserve1)

    def reserve1_for(self, reserve0: int) -> int:
        """Minimum reserve of asset 1 for ``reserve0`` left of the apex."""
        p = self.params
        return f(reserve0, p.price_x, p.price_y, p.x0, p.y0, p.concentration_x)

    def reserve0_for(self, reserve1: int) -> int:
        """Minimum reserve of asset 0 for ``reserve1`` right of the apex."""
        p = self.params
        return f(reserve1, p.price_y, p.price_x, p.y0, p.x0, p.concentration_y)

    def reserve0_at_or_above(self, reserve1: int) -> int:
        """Upper estimate of the left-side reserve of asset 0 for ``reserve1``; never below the exact one."""
        p = self.params
        return f_inverse(reserve1, p.price_x, p.price_y, p.x0, p.y0, p.concentration_x)

    def tighten(self, reserve0: int, reserve1: int) -> Tuple[int, int]:
        return solver.tighten_to_curve(self.params, reserve0, reserve1)
