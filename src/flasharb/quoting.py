"""
Price quotes for a token pair from Uniswap V2-style venues.

A quote is the amount of quote token returned by the venue router's `quote` function for one whole
unit of base token, evaluated against the pair's current reserves. The router does the arithmetic so
the result matches on-chain rounding exactly.
"""

import asyncio
import contextlib
from collections.abc import Generator, Iterator, Sequence
from typing import Any, TypeAlias

from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from web3 import AsyncBaseProvider, AsyncWeb3, Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, Web3Exception
from web3.types import BlockIdentifier

from flasharb.arbitrage.types import Quote, QuoteSweep
from flasharb.checksum_cache import get_checksum_address
from flasharb.connection import RPC_CONNECTION_ERRORS
from flasharb.constants import WETH_DECIMALS, ZERO_ADDRESS
from flasharb.exceptions import (
    FlashArbConnectionError,
    FlashArbError,
    NoLiquidity,
    PoolNotFound,
    QuoteDecodingError,
    QuoteError,
)
from flasharb.functions import encode_function_calldata, raw_call, raw_call_async
from flasharb.logging import logger
from flasharb.venues import Venue, VenueDeployment

FACTORY_GET_PAIR_FUNCTION_PROTOTYPE = "getPair(address,address)"
PAIR_GET_RESERVES_FUNCTION_PROTOTYPE = "getReserves()"
ROUTER_QUOTE_FUNCTION_PROTOTYPE = "quote(uint256,uint256,uint256)"


@contextlib.contextmanager
def _quote_errors(venue: Venue) -> Iterator[None]:
    """
    Re-raise third-party exceptions from the RPC calls as package exceptions.
    """

    try:
        yield
    except QuoteError:
        raise
    except RPC_CONNECTION_ERRORS as exc:
        raise FlashArbConnectionError(
            message=f"RPC connection failed while quoting {venue}: {exc}"
        ) from exc
    except (BadFunctionCallOutput, ContractLogicError, DecodingError) as exc:
        raise QuoteDecodingError(message=f"Could not decode contract data from {venue}") from exc
    except Web3Exception as exc:
        raise QuoteDecodingError(message=f"RPC call to {venue} failed: {exc}") from exc


def _sort_reserves(
    pool: ChecksumAddress,
    base_token: ChecksumAddress,
    quote_token: ChecksumAddress,
    reserves: tuple[int, int],
) -> tuple[int, int]:
    """
    Return the pool reserves as (base, quote). Uniswap V2 pairs hold the numerically lower token
    address as token0.
    """

    reserves_token0, reserves_token1 = reserves
    if reserves_token0 == 0 or reserves_token1 == 0:
        raise NoLiquidity(pool=pool)

    if int(base_token, 16) < int(quote_token, 16):
        return reserves_token0, reserves_token1
    return reserves_token1, reserves_token0


_QuoteCall: TypeAlias = tuple[ChecksumAddress, bytes, list[str]]


def _quote_calls(
    router: ChecksumAddress | str,
    factory: ChecksumAddress | str,
    base_token: ChecksumAddress | str,
    quote_token: ChecksumAddress | str,
    venue: Venue,
    base_token_decimals: int,
) -> Generator[_QuoteCall, tuple[Any, ...], Quote]:
    """
    Yield the `eth_call` requests needed to quote a venue as (address, calldata, return types), and
    receive each decoded response in turn. The generator returns the finished quote, so the sync and
    async versions share everything except the transport.
    """

    router = get_checksum_address(router)
    factory = get_checksum_address(factory)
    base_token = get_checksum_address(base_token)
    quote_token = get_checksum_address(quote_token)

    (pool_address,) = yield (
        factory,
        encode_function_calldata(
            function_prototype=FACTORY_GET_PAIR_FUNCTION_PROTOTYPE,
            function_arguments=[base_token, quote_token],
        ),
        ["address"],
    )
    pool_address = get_checksum_address(pool_address)
    if pool_address == ZERO_ADDRESS:
        raise PoolNotFound(factory=factory, token_a=base_token, token_b=quote_token)

    reserves_token0, reserves_token1, _ = yield (
        pool_address,
        encode_function_calldata(
            function_prototype=PAIR_GET_RESERVES_FUNCTION_PROTOTYPE,
            function_arguments=None,
        ),
        ["uint112", "uint112", "uint32"],
    )
    reserves_base, reserves_quote = _sort_reserves(
        pool=pool_address,
        base_token=base_token,
        quote_token=quote_token,
        reserves=(reserves_token0, reserves_token1),
    )

    (price,) = yield (
        router,
        encode_function_calldata(
            function_prototype=ROUTER_QUOTE_FUNCTION_PROTOTYPE,
            function_arguments=[10**base_token_decimals, reserves_base, reserves_quote],
        ),
        ["uint256"],
    )

    logger.debug(
        f"{venue}: pool {pool_address}, reserves {(reserves_token0, reserves_token1)}, "
        f"price {price}"
    )
    return Quote(venue=venue, price=price, reserves=(reserves_token0, reserves_token1))


def get_quote(
    router: ChecksumAddress | str,
    factory: ChecksumAddress | str,
    base_token: ChecksumAddress | str,
    quote_token: ChecksumAddress | str,
    venue: Venue,
    w3: Web3,
    *,
    base_token_decimals: int = WETH_DECIMALS,
    block_identifier: BlockIdentifier | None = None,
) -> Quote:
    """
    Fetch the price of one whole base token, denominated in quote token base units, from a venue.

    Raises `PoolNotFound` if the factory has no pair for the tokens, `NoLiquidity` if the pair is
    empty, `FlashArbConnectionError` if the RPC endpoint fails, and `QuoteDecodingError` for any
    other failed read.
    """

    calls = _quote_calls(
        router=router,
        factory=factory,
        base_token=base_token,
        quote_token=quote_token,
        venue=venue,
        base_token_decimals=base_token_decimals,
    )
    with _quote_errors(venue):
        address, calldata, return_types = next(calls)
        while True:
            response = raw_call(
                w3=w3,
                address=address,
                calldata=calldata,
                return_types=return_types,
                block_identifier=block_identifier,
            )
            try:
                address, calldata, return_types = calls.send(response)
            except StopIteration as finished:
                return finished.value


async def get_quote_async(
    router: ChecksumAddress | str,
    factory: ChecksumAddress | str,
    base_token: ChecksumAddress | str,
    quote_token: ChecksumAddress | str,
    venue: Venue,
    w3: AsyncWeb3[AsyncBaseProvider],
    *,
    base_token_decimals: int = WETH_DECIMALS,
    block_identifier: BlockIdentifier | None = None,
) -> Quote:
    """
    Async version of get_quote.
    """

    calls = _quote_calls(
        router=router,
        factory=factory,
        base_token=base_token,
        quote_token=quote_token,
        venue=venue,
        base_token_decimals=base_token_decimals,
    )
    with _quote_errors(venue):
        address, calldata, return_types = next(calls)
        while True:
            response = await raw_call_async(
                w3=w3,
                address=address,
                calldata=calldata,
                return_types=return_types,
                block_identifier=block_identifier,
            )
            try:
                address, calldata, return_types = calls.send(response)
            except StopIteration as finished:
                return finished.value


async def fetch_quotes(
    deployments: Sequence[VenueDeployment],
    base_token: ChecksumAddress | str,
    quote_token: ChecksumAddress | str,
    w3: AsyncWeb3[AsyncBaseProvider],
    *,
    base_token_decimals: int = WETH_DECIMALS,
    block_identifier: BlockIdentifier | None = None,
) -> QuoteSweep:
    """
    Quote every venue concurrently. A venue that fails is left out of the result and recorded with
    its exception, so one failure never discards the quotes from the others.

    Quotes keep the order of `deployments`, which the detector relies on to break ties.
    """

    results = await asyncio.gather(
        *(
            get_quote_async(
                router=deployment.router,
                factory=deployment.factory,
                base_token=base_token,
                quote_token=quote_token,
                venue=deployment.venue,
                w3=w3,
                base_token_decimals=base_token_decimals,
                block_identifier=block_identifier,
            )
            for deployment in deployments
        ),
        return_exceptions=True,
    )

    quotes: list[Quote] = []
    failures: dict[Venue, FlashArbError] = {}
    for deployment, result in zip(deployments, results, strict=True):
        match result:
            case Quote():
                quotes.append(result)
            case FlashArbError():
                logger.warning(f"Skipping {deployment.venue}: {result}")
                failures[deployment.venue] = result
            case BaseException():
                raise result

    return QuoteSweep(quotes=tuple(quotes), failures=failures)
