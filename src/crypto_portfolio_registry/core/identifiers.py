"""
Derivation of fixed-width on-chain asset ids from asset identifier strings.

Two schemes are available:

``keccak256-v1``
    keccak-256 of the canonical identifier: surrounding whitespace stripped,
    Unicode NFC normalised, UTF-8 encoded. Any client can compute the same key
    with a stock keccak implementation.

``djb2-legacy``
    32-bit djb2-xor hash of the raw UTF-8 bytes, left-padded with zeros to
    32 bytes. Not collision resistant; only kept to read and write keys that
    were stored by the earlier browser client.

"""

import unicodedata
from collections.abc import Callable, Iterable

from eth_utils import keccak

ASSET_ID_SIZE = 32

KECCAK256_V1 = "keccak256-v1"
DJB2_LEGACY = "djb2-legacy"
DEFAULT_SCHEME = KECCAK256_V1


def canonicalize(identifier: str) -> str:
    """Return the canonical text form hashed by ``keccak256-v1``."""
    return unicodedata.normalize("NFC", identifier.strip())


def _keccak256_v1(identifier: str) -> bytes:
    return keccak(text=canonicalize(identifier))


def _djb2_legacy(identifier: str) -> bytes:
    value = 5381
    for byte in identifier.encode("utf-8"):
        value = (((value << 5) + value) & 0xFFFFFFFF) ^ byte
    return value.to_bytes(ASSET_ID_SIZE, "big")


SCHEMES: dict[str, Callable[[str], bytes]] = {
    KECCAK256_V1: _keccak256_v1,
    DJB2_LEGACY: _djb2_legacy,
}


def derive_asset_id(identifier: str, scheme: str = DEFAULT_SCHEME) -> bytes:
    """
    Derive the 32-byte on-chain key for an asset identifier.

    Parameters
    ----------
    identifier : str
        Asset identifier (e.g., 'coingecko:bitcoin')
    scheme : str
        Derivation scheme name

    Returns
    -------
    bytes
        32-byte asset id

    Raises
    ------
    ValueError
        If the scheme is unknown

    """
    try:
        derive = SCHEMES[scheme]
    except KeyError:
        msg = f"Unknown asset id scheme '{scheme}'. Available: {', '.join(SCHEMES)}"
        raise ValueError(msg) from None
    return derive(identifier)


def derive_asset_ids(identifiers: Iterable[str], scheme: str = DEFAULT_SCHEME) -> list[bytes]:
    """Derive asset ids for several identifiers, preserving order."""
    return [derive_asset_id(identifier, scheme) for identifier in identifiers]


def to_hex(asset_id: bytes) -> str:
    """Format an asset id as a 0x-prefixed bytes32 hex string."""
    return "0x" + asset_id.hex()
