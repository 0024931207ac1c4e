import json
import os
from decimal import Decimal, InvalidOperation
from typing import Any

import yaml

from defi_curve.curves.params import CurveParams
from defi_curve.utils.price_fraction import compute_price_fraction

CONFIG_LOADERS = {".yaml": yaml.safe_load, ".yml": yaml.safe_load, ".json": json.load}


def load_config(path: str) -> dict:
    """
    Read a pool config file (YAML or JSON).

    Parameters
    ----------
    path : str
        Path to the file; the loader is picked from its extension.

    Returns
    -------
    dict
        The parsed config. Its root is a mapping with a ``pool`` mapping.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the extension is unsupported or there is no ``pool`` section.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    _, ext = os.path.splitext(path.lower())
    loader = CONFIG_LOADERS.get(ext)
    if loader is None:
        raise ValueError(f"Unsupported config extension {ext!r}. Use .yaml, .yml, or .json.")

    with open(path, "r") as fh:
        data = loader(fh)

    if not isinstance(data, dict) or not isinstance(data.get("pool"), dict):
        raise ValueError(f"{path}: config root must be a mapping with a 'pool' section.")
    return data


def parse_uint(value: Any, name: str = "value") -> int:
    """
    Read an exact non-negative integer from a config value.

    YAML turns ``1e18`` into a string and ``1.0e+18`` into a float, so both
    are accepted as long as they denote an integer exactly. Underscore
    separators are allowed in strings.
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, (float, str)):
        text = repr(value) if isinstance(value, float) else value.strip().replace("_", "")
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"{name} must be an integer, got {value!r}")
        if not number.is_finite() or number != number.to_integral_value():
            raise ValueError(f"{name} must be an integer, got {value!r}")
        result = int(number)
    else:
        raise ValueError(f"{name} must be an integer, got {value!r}")

    if result < 0:
        raise ValueError(f"{name} must not be negative, got {value!r}")
    return result


def curve_params_from_config(curve_cfg: dict, decimals0: int = 18, decimals1: int = 18) -> CurveParams:
    """
    Build validated ``CurveParams`` from the ``curve`` section of a pool config.

    Either ``price_x``/``price_y`` or a human ``price`` must be given; the
    latter is converted with ``compute_price_fraction`` using the token decimals.
    """
    if "price" in curve_cfg:
        price_x, price_y = compute_price_fraction(curve_cfg["price"], decimals0, decimals1)
        if price_x is None:
            raise ValueError(f"Invalid pool price: {curve_cfg['price']!r}")
    else:
        try:
            price_x = parse_uint(curve_cfg["price_x"], "price_x")
            price_y = parse_uint(curve_cfg["price_y"], "price_y")
        except KeyError as exc:
            raise ValueError(f"Missing curve parameter: {exc.args[0]}")

    fields = {}
    for key in ("equilibrium_reserve0", "equilibrium_reserve1", "concentration_x", "concentration_y"):
        if key not in curve_cfg:
            raise ValueError(f"Missing curve parameter: {key}")
        fields[key] = parse_uint(curve_cfg[key], key)

    return CurveParams(price_x=price_x, price_y=price_y, **fields).validate()
