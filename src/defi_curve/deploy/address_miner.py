import logging
import secrets
from itertools import islice
from typing import Any, Iterator, Optional, Sequence, Tuple

from eth_utils import keccak, to_canonical_address, to_checksum_address

from defi_curve.deploy.bytecode import (
    Address,
    ImplementationReader,
    ParamsEncoder,
    creation_code,
    encode_params,
)
from defi_curve.utils.errors import NoSolutionError

logger = logging.getLogger(__name__)

# The low 14 bits of a pool address carry its hook flags.
ADDRESS_MASK = (1 << 14) - 1
REQUIRED_ADDRESS_BITS = 10408

SALT_MODULUS = 1 << 256
CREATE2_PREFIX = b"\xff"


def salt_to_hex(salt: bytes) -> str:
    return "0x" + salt.hex()


def compute_create2_address(deployer: Address, salt: bytes, code_hash: bytes) -> str:
    """
    Checksummed address of a contract deployed with CREATE2.

    ``keccak256(0xff ++ deployer ++ salt ++ code_hash)``, last 20 bytes.
    """
    if len(salt) != 32 or len(code_hash) != 32:
        raise ValueError("salt and code hash must be 32 bytes")
    digest = keccak(CREATE2_PREFIX + to_canonical_address(deployer) + salt + code_hash)
    return to_checksum_address(digest[12:])


def _hashed_salts(deployer: Address, code_hash: bytes, salt: int) -> Iterator[Tuple[bytes, bytes]]:
    prefix = CREATE2_PREFIX + to_canonical_address(deployer)
    while True:
        salt = (salt + 1) % SALT_MODULUS
        salt_bytes = salt.to_bytes(32, "big")
        yield salt_bytes, keccak(prefix + salt_bytes + code_hash)


def iter_salt_candidates(
    deployer: Address,
    code_hash: bytes,
    salt: int,
    max_attempts: Optional[int] = None,
    mask: int = ADDRESS_MASK,
    required: int = REQUIRED_ADDRESS_BITS,
) -> Iterator[Tuple[str, str]]:
    """
    Yield ``(address, salt_hex)`` for each salt after ``salt`` whose address satisfies the mask.

    Salts are tried in order ``salt + 1, salt + 2, ...`` modulo 2**256.
    Without ``max_attempts`` the generator never stops on its own.
    """
    hashed = _hashed_salts(deployer, code_hash, salt)
    if max_attempts is not None:
        hashed = islice(hashed, max_attempts)
    for salt_bytes, digest in hashed:
        if int.from_bytes(digest, "big") & mask == required:
            yield to_checksum_address(digest[12:]), salt_to_hex(salt_bytes)


def mine_salt(
    deployer: Address,
    code_hash: bytes,
    salt: Optional[int] = None,
    max_attempts: Optional[int] = None,
    mask: int = ADDRESS_MASK,
    required: int = REQUIRED_ADDRESS_BITS,
) -> Tuple[str, str]:
    """
    Search for a salt whose CREATE2 address satisfies ``address & mask == required``.

    Args:
        deployer (str | bytes): Address of the deploying factory.
        code_hash (bytes): keccak256 of the creation code.
        salt (Optional[int]): Starting salt; a random 256-bit value when omitted.
            The first salt tried is ``salt + 1``.
        max_attempts (Optional[int]): Stop after this many salts; unbounded when None.
        mask (int): Bits of the address that are constrained.
        required (int): Value those bits must take.

    Returns:
        Tuple[str, str]: Checksummed address and ``0x``-prefixed 32-byte salt.

    Raises:
        NoSolutionError: If ``max_attempts`` salts were tried without a match.
    """
    if salt is None:
        salt = secrets.randbits(256)

    candidates = iter_salt_candidates(deployer, code_hash, salt, max_attempts, mask, required)
    found = next(candidates, None)
    if found is None:
        raise NoSolutionError(f"No salt found within {max_attempts} attempts")

    address, salt_hex = found
    logger.info("Found pool address %s with salt %s", address, salt_hex)
    return address, salt_hex


def gen_address(
    read_implementation: ImplementationReader,
    factory: Address,
    params: Sequence[Any],
    salt: Optional[int] = None,
    max_attempts: Optional[int] = None,
    encode_fn: ParamsEncoder = encode_params,
) -> Tuple[str, str]:
    """
    Find a deployment salt and the resulting pool address for ``params``.

    The implementation address is read once from the factory, then salts are
    searched on the calling thread until the address carries the required
    low bits.

    Returns:
        Tuple[str, str]: Checksummed pool address and ``0x``-prefixed salt.
    """
    code = creation_code(read_implementation, factory, params, encode_fn)
    code_hash = keccak(hexstr=code)
    return mine_salt(factory, code_hash, salt=salt, max_attempts=max_attempts)
