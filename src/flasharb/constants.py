__all__ = (
    "DODO_V2_WETH_POOL",
    "MAX_UINT256",
    "MIN_UINT256",
    "POLYGON_CHAIN_ID",
    "POLYGON_USDC",
    "POLYGON_WETH",
    "USDC_DECIMALS",
    "WETH_DECIMALS",
    "ZERO_ADDRESS",
)

import typing

from eth_typing import ChecksumAddress

from flasharb.checksum_cache import get_checksum_address


def _min_uint(_: int) -> int:
    return 0


def _max_uint(bits: int) -> int:
    return typing.cast("int", 2**bits - 1)


MIN_UINT256 = _min_uint(256)
MAX_UINT256 = _max_uint(256)

ZERO_ADDRESS: ChecksumAddress = get_checksum_address("0x0000000000000000000000000000000000000000")

POLYGON_CHAIN_ID = 137

# Polygon PoS tokens
POLYGON_WETH: ChecksumAddress = get_checksum_address("0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619")
POLYGON_USDC: ChecksumAddress = get_checksum_address("0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174")

WETH_DECIMALS = 18
USDC_DECIMALS = 6

# DODO V2 private pool holding WETH, used as the flash loan source
DODO_V2_WETH_POOL: ChecksumAddress = get_checksum_address(
    "0x5333Eb1E32522F1893B7C9feA3c263807A02d561"
)
