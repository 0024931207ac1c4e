# examples/plot_curve.py

import os

import matplotlib.pyplot as plt

from defi_curve.models.pool_model import CurvePool
from defi_curve.utils.config_parser import load_config


def main():
    # 1. Load the pool configuration next to this script
    script_dir = os.path.dirname(os.path.abspath(__file__))
    config = load_config(os.path.join(script_dir, "config_pool.yaml"))

    # 2. Build the pool and sample its curve
    pool = CurvePool.from_config(config)
    df = pool.curve_table(points=40)

    print("\n=== Curve parameters ===")
    print(pool.params)
    print("\n=== Sampled curve (first 5 rows) ===")
    print(df.head())

    # 3. Round-trip the apex price back to reserves
    apex_price = pool.price(pool.params.x0, pool.params.y0)
    print("\nApex price:", apex_price, "->", pool.reserves_at(apex_price))

    # 4. Plot reserves and marginal price
    fig, ax1 = plt.subplots(figsize=(8, 4))
    ax1.plot(df["reserve0"].astype(float), df["reserve1"].astype(float), label="Curve", color="tab:blue")
    ax1.set_xlabel(f"{pool.token0} reserve")
    ax1.set_ylabel(f"{pool.token1} reserve", color="tab:blue")
    ax1.tick_params(axis="y", labelcolor="tab:blue")

    ax2 = ax1.twinx()
    ax2.plot(df["reserve0"].astype(float), df["price_float"], label="Price", color="tab:orange", linestyle="--")
    ax2.set_ylabel("Raw price (1e18)", color="tab:orange")
    ax2.tick_params(axis="y", labelcolor="tab:orange")

    fig.suptitle(f"{pool.token0}/{pool.token1} curve")
    fig.tight_layout()
    fig.legend(loc="upper right")
    plt.show()


if __name__ == "__main__":
    main()
