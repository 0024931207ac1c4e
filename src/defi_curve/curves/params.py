from typing import NamedTuple

from defi_curve.utils.math_helpers import WAD

# ABI types of the fields below, in declaration order.
CURVE_PARAMS_ABI_TYPES = ("uint256", "uint256", "uint112", "uint112", "uint256", "uint256")


class CurveParams(NamedTuple):
    """
    Immutable curve configuration of a pool, mirroring the on-chain parameters.

    Attributes:
        price_x (int): Relative price weight of asset 0, 1e18 fixed point.
        price_y (int): Relative price weight of asset 1, 1e18 fixed point.
        equilibrium_reserve0 (int): Reserve of asset 0 at the apex (x0).
        equilibrium_reserve1 (int): Reserve of asset 1 at the apex (y0).
        concentration_x (int): Concavity left of the apex, in [0, 1e18].
        concentration_y (int): Concavity right of the apex, in [0, 1e18].
    """

    price_x: int
    price_y: int
    equilibrium_reserve0: int
    equilibrium_reserve1: int
    concentration_x: int
    concentration_y: int

    @property
    def x0(self) -> int:
        return self.equilibrium_reserve0

    @property
    def y0(self) -> int:
        return self.equilibrium_reserve1

    def validate(self) -> "CurveParams":
        """
        Check the arithmetic preconditions of the curve formulas.

        Only guards against division by zero and out-of-range concentrations;
        business meaning of the values is left to the caller.

        Returns:
            CurveParams: ``self``, so the call can be chained.

        Raises:
            ValueError: If a field is not an int or breaks a precondition.
        """
        for name, value in zip(self._fields, self):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if self.price_x <= 0 or self.price_y <= 0:
            raise ValueError("price_x and price_y must be positive")
        if self.equilibrium_reserve0 <= 0 or self.equilibrium_reserve1 <= 0:
            raise ValueError("equilibrium reserves must be positive")
        for name in ("concentration_x", "concentration_y"):
            value = getattr(self, name)
            if not 0 <= value <= WAD:
                raise ValueError(f"{name} must be within [0, 1e18], got {value}")
        return self
