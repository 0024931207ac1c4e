"""
Deployment bytecode of a curve pool.

A pool is a minimal proxy: a fixed code head, the address of the shared
implementation contract, a fixed code tail, then the ABI-encoded pool
parameters appended as immutable data.
"""

from typing import Any, Callable, Sequence, Union

from eth_abi import encode
from eth_utils import to_canonical_address, to_checksum_address

from defi_curve.curves.params import CURVE_PARAMS_ABI_TYPES

BYTECODE_HEAD = "600b380380600b3d393df3363d3d373d3d3d3d60368038038091363936013d73"
BYTECODE_TAIL = "5af43d3d93803e603457fd5bf3"

IMPLEMENTATION_GETTER = "eulerSwapImpl"
FACTORY_ABI = [
    {
        "type": "function",
        "name": IMPLEMENTATION_GETTER,
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    }
]

Address = Union[str, bytes]
ImplementationReader = Callable[[Address], Address]
ParamsEncoder = Callable[[Sequence[Any]], bytes]


def encode_params(values: Sequence[Any], abi_types: Sequence[str] = CURVE_PARAMS_ABI_TYPES) -> bytes:
    """
    ABI-encode a parameter tuple in the field order the pool contract decodes.

    Args:
        values (Sequence[Any]): Field values, e.g. a ``CurveParams``.
        abi_types (Sequence[str]): ABI type of each field.

    Returns:
        bytes: Canonical encoding of the tuple.
    """
    if len(values) != len(abi_types):
        raise ValueError(f"Expected {len(abi_types)} parameters, got {len(values)}")
    return encode([f"({','.join(abi_types)})"], [tuple(values)])


def contract_implementation_reader(w3: Any) -> ImplementationReader:
    """
    Return a reader that asks a factory contract for its implementation address.

    ``w3`` is a web3-style client; the returned callable performs one view
    call per invocation and lets any client error propagate.
    """

    def read(factory: Address) -> Address:
        contract = w3.eth.contract(address=to_checksum_address(factory), abi=FACTORY_ABI)
        return getattr(contract.functions, IMPLEMENTATION_GETTER)().call()

    return read


def creation_code(
    read_implementation: ImplementationReader,
    factory: Address,
    params: Sequence[Any],
    encode_fn: ParamsEncoder = encode_params,
) -> str:
    """
    Hex creation code (``0x``-prefixed, lower case) of a pool proxy.

    Args:
        read_implementation (Callable): Looks up the implementation address of ``factory``.
        factory (str | bytes): Factory contract address.
        params (Sequence[Any]): Pool parameters handed to ``encode_fn``.
        encode_fn (Callable): Parameter encoder, ``encode_params`` by default.

    Returns:
        str: ``0x`` + head + implementation + tail + encoded parameters.
    """
    implementation = to_canonical_address(read_implementation(factory))
    encoded = encode_fn(params)
    return "0x" + BYTECODE_HEAD + implementation.hex() + BYTECODE_TAIL + encoded.hex()
