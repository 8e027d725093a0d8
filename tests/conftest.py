import logging
from typing import Any

import eth_abi.abi
import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress

from flasharb.checksum_cache import get_checksum_address
from flasharb.constants import POLYGON_CHAIN_ID, POLYGON_USDC, POLYGON_WETH, ZERO_ADDRESS
from flasharb.functions import function_selector
from flasharb.logging import logger
from flasharb.quoting import (
    FACTORY_GET_PAIR_FUNCTION_PROTOTYPE,
    PAIR_GET_RESERVES_FUNCTION_PROTOTYPE,
    ROUTER_QUOTE_FUNCTION_PROTOTYPE,
)
from flasharb.venues import Venue, VenueDeployment, get_deployment

TEST_PRIVATE_KEY = "0x" + "11" * 32
FLASH_LOAN_CONTRACT_ADDRESS = get_checksum_address("0x000000000000000000000000000000000000F1a5")

GET_PAIR_SELECTOR = function_selector(FACTORY_GET_PAIR_FUNCTION_PROTOTYPE)
GET_RESERVES_SELECTOR = function_selector(PAIR_GET_RESERVES_FUNCTION_PROTOTYPE)
QUOTE_SELECTOR = function_selector(ROUTER_QUOTE_FUNCTION_PROTOTYPE)


@pytest.fixture(scope="session", autouse=True)
def _set_flasharb_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


class FakeChain:
    """
    In-memory stand-in for the Uniswap V2 factory, pair and router contracts of each venue. Calls
    are answered with ABI-encoded data, exactly as a node would return them from `eth_call`.
    """

    def __init__(self) -> None:
        self.pairs: dict[tuple[ChecksumAddress, frozenset[ChecksumAddress]], ChecksumAddress] = {}
        self.reserves: dict[ChecksumAddress, tuple[int, int]] = {}
        self.routers: set[ChecksumAddress] = set()
        self.overrides: dict[ChecksumAddress, bytes | BaseException] = {}
        self.calls: list[ChecksumAddress] = []

    @staticmethod
    def usdc_weth_reserves(price_usdc: int, weth_reserve: int = 100) -> tuple[int, int]:
        """
        Pool-ordered reserves for a WETH/USDC pair quoting `price_usdc` (in USDC base units) per
        WETH. USDC has the lower address on Polygon, so it is token0.
        """

        assert int(POLYGON_USDC, 16) < int(POLYGON_WETH, 16)
        return (price_usdc * weth_reserve, weth_reserve * 10**18)

    def add_pool(
        self,
        deployment: VenueDeployment,
        reserves: tuple[int, int],
        token_a: ChecksumAddress = POLYGON_WETH,
        token_b: ChecksumAddress = POLYGON_USDC,
    ) -> ChecksumAddress:
        """
        Register a pair on the venue's factory. Reserves are given in pool order, i.e. the reserve
        of the numerically lower token address first.
        """

        pair_address = get_checksum_address(f"0x{'ab' * 19}{int(deployment.venue) + 1:02x}")
        self.pairs[deployment.factory, frozenset((token_a, token_b))] = pair_address
        self.reserves[pair_address] = reserves
        self.routers.add(deployment.router)
        return pair_address

    def call(self, transaction: dict[str, Any]) -> bytes:
        address = get_checksum_address(transaction["to"])
        calldata = bytes(transaction["data"])
        selector, arguments = calldata[:4], calldata[4:]
        self.calls.append(address)

        if address in self.overrides:
            override = self.overrides[address]
            if isinstance(override, BaseException):
                raise override
            return override

        if selector == GET_PAIR_SELECTOR:
            token_a, token_b = eth_abi.abi.decode(["address", "address"], arguments)
            pair = self.pairs.get(
                (address, frozenset(get_checksum_address(t) for t in (token_a, token_b))),
                ZERO_ADDRESS,
            )
            return eth_abi.abi.encode(["address"], [pair])

        if selector == GET_RESERVES_SELECTOR and address in self.reserves:
            reserve0, reserve1 = self.reserves[address]
            return eth_abi.abi.encode(
                ["uint112", "uint112", "uint32"], [reserve0, reserve1, 1_700_000_000]
            )

        if selector == QUOTE_SELECTOR and address in self.routers:
            amount_a, reserve_a, reserve_b = eth_abi.abi.decode(
                ["uint256", "uint256", "uint256"], arguments
            )
            return eth_abi.abi.encode(["uint256"], [amount_a * reserve_b // reserve_a])

        # Calls to an address without code return empty data
        return b""


class FakeEth:
    def __init__(self, chain: FakeChain) -> None:
        self._chain = chain

    def call(self, transaction: dict[str, Any], block_identifier: Any = None) -> bytes:
        return self._chain.call(transaction)


class FakeAsyncEth:
    def __init__(self, chain: FakeChain) -> None:
        self._chain = chain

    async def call(self, transaction: dict[str, Any], block_identifier: Any = None) -> bytes:
        return self._chain.call(transaction)


class FakeWeb3:
    def __init__(self, chain: FakeChain) -> None:
        self.eth = FakeEth(chain)


class FakeAsyncProvider:
    def __init__(self) -> None:
        self.disconnected = False

    async def disconnect(self) -> None:
        self.disconnected = True


class FakeAsyncWeb3:
    def __init__(self, chain: FakeChain) -> None:
        self.eth = FakeAsyncEth(chain)
        self.provider = FakeAsyncProvider()


@pytest.fixture
def fake_chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def polygon_chain(fake_chain: FakeChain) -> FakeChain:
    """
    WETH/USDC pools on Sushiswap, Quickswap and Apeswap, quoting 3000.00, 3000.40 and 3000.10 USDC.
    """

    for venue, price in (
        (Venue.SUSHISWAP, 3_000_000_000),
        (Venue.QUICKSWAP, 3_000_400_000),
        (Venue.APESWAP, 3_000_100_000),
    ):
        fake_chain.add_pool(
            deployment=get_deployment(venue, POLYGON_CHAIN_ID),
            reserves=fake_chain.usdc_weth_reserves(price),
        )
    return fake_chain


@pytest.fixture
def fake_w3(polygon_chain: FakeChain) -> FakeWeb3:
    return FakeWeb3(polygon_chain)


@pytest.fixture
def fake_async_w3(polygon_chain: FakeChain) -> FakeAsyncWeb3:
    return FakeAsyncWeb3(polygon_chain)


@pytest.fixture
def signer() -> LocalAccount:
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def flash_loan_contract() -> ChecksumAddress:
    return FLASH_LOAN_CONTRACT_ADDRESS
