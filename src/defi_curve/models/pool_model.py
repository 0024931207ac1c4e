# src/defi_curve/models/pool_model.py

import logging
from typing import Optional, Tuple

import pandas as pd

from defi_curve.curves.base import ConcentratedCurve
from defi_curve.curves.params import CurveParams
from defi_curve.curves.solver import solve_reserves
from defi_curve.deploy.address_miner import gen_address
from defi_curve.deploy.bytecode import ImplementationReader
from defi_curve.utils.config_parser import curve_params_from_config, parse_uint
from defi_curve.utils.errors import SolveResult
from defi_curve.utils.math_helpers import RAY, WAD

logger = logging.getLogger(__name__)


class CurvePool:
    """
    Off-chain view of one curve-configured pool.

    - Wraps a ``ConcentratedCurve`` for price and reserve queries.
    - Knows the token symbols and decimals to turn raw prices into human ones.
    - Samples the curve into a pandas DataFrame for display.
    - Mines the deployment salt when a factory address is configured.
    """

    def __init__(
        self,
        params: CurveParams,
        token0: str = "TOKEN_0",
        token1: str = "TOKEN_1",
        decimals0: int = 18,
        decimals1: int = 18,
        factory: Optional[str] = None,
    ):
        self.curve = ConcentratedCurve(params)
        self.params = self.curve.params
        self.token0 = token0
        self.token1 = token1
        self.decimals0 = int(decimals0)
        self.decimals1 = int(decimals1)
        self.factory = factory

    @classmethod
    def from_config(cls, config: dict) -> "CurvePool":
        """
        Build a pool from the ``pool`` section of a loaded config.

        Token entries default to 18 decimals; the ``deploy`` section is optional.
        """
        pool_cfg = config.get("pool")
        if not isinstance(pool_cfg, dict):
            raise ValueError("Config must contain a 'pool' section.")

        token0_cfg = pool_cfg.get("token0", {})
        token1_cfg = pool_cfg.get("token1", {})
        decimals0 = parse_uint(token0_cfg.get("decimals", 18), "token0.decimals")
        decimals1 = parse_uint(token1_cfg.get("decimals", 18), "token1.decimals")

        curve_cfg = pool_cfg.get("curve")
        if not isinstance(curve_cfg, dict):
            raise ValueError("Pool config must contain a 'curve' section.")
        params = curve_params_from_config(curve_cfg, decimals0, decimals1)

        pool = cls(
            params,
            token0=token0_cfg.get("symbol", "TOKEN_0"),
            token1=token1_cfg.get("symbol", "TOKEN_1"),
            decimals0=decimals0,
            decimals1=decimals1,
            factory=(pool_cfg.get("deploy") or {}).get("factory"),
        )
        logger.info("Built %s/%s pool from config: %s", pool.token0, pool.token1, params)
        return pool

    def price(self, reserve0: int, reserve1: int, ray: bool = False) -> int:
        """Raw fixed-point price at a reserve point."""
        return self.curve.compute_price(reserve0, reserve1, ray=ray)

    def human_price(self, reserve0: int, reserve1: int) -> float:
        """Price of one whole token0 in whole token1, as a float for display."""
        raw = self.curve.compute_price(reserve0, reserve1, ray=True)
        return raw / RAY * 10 ** (self.decimals0 - self.decimals1)

    def reserves_at(self, price: int, ray: bool = False) -> Tuple[int, int]:
        return self.curve.compute_reserves(price, ray=ray)

    def solve(self, price: int, ray: bool = False) -> SolveResult:
        return solve_reserves(self.params, price, ray=ray)

    def is_valid(self, reserve0: int, reserve1: int) -> bool:
        return self.curve.verify_point(reserve0, reserve1)

    def tighten(self, reserve0: int, reserve1: int) -> Tuple[int, int]:
        return self.curve.tighten(reserve0, reserve1)

    def curve_table(self, points: int = 20) -> pd.DataFrame:
        """
        Sample the curve on both sides of the apex.

        Left of the apex reserve0 runs over ``x0 * i / points``; right of it
        reserve1 runs over ``y0 * i / points``. The apex itself is included once.

        Args:
            points (int): Samples per side.

        Returns:
            pd.DataFrame: Columns ``reserve0``, ``reserve1``, ``price``
            (1e18 fixed point) and ``price_float``, sorted by ``reserve0``.
        """
        if points < 1:
            raise ValueError("points must be at least 1")

        x0, y0 = self.params.x0, self.params.y0
        rows = []
        for reserve0 in sorted({max(1, x0 * i // points) for i in range(1, points + 1)}):
            reserve1 = self.curve.reserve1_for(reserve0)
            rows.append((reserve0, reserve1))
        for reserve1 in sorted({max(1, y0 * i // points) for i in range(1, points)}):
            if reserve1 < y0:
                rows.append((self.curve.reserve0_for(reserve1), reserve1))

        records = []
        for reserve0, reserve1 in rows:
            price = self.curve.compute_price(reserve0, reserve1)
            records.append(
                {
                    "reserve0": reserve0,
                    "reserve1": reserve1,
                    "price": price,
                    "price_float": price / WAD,
                }
            )
        df = pd.DataFrame.from_records(records, columns=["reserve0", "reserve1", "price", "price_float"])
        return df.sort_values("reserve0", kind="stable").reset_index(drop=True)

    def mine_address(
        self,
        read_implementation: ImplementationReader,
        salt: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ) -> Tuple[str, str]:
        """Mine the deployment address of this pool through the configured factory."""
        if not self.factory:
            raise ValueError("No factory address configured for this pool.")
        return gen_address(
            read_implementation, self.factory, self.params, salt=salt, max_attempts=max_attempts
        )
