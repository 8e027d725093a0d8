import enum
from collections.abc import Mapping
from dataclasses import dataclass

from eth_typing import ChecksumAddress

from flasharb.checksum_cache import get_checksum_address
from flasharb.constants import POLYGON_CHAIN_ID
from flasharb.exceptions import FlashArbValueError, UnknownVenue
from flasharb.types.aliases import ChainId


class Venue(enum.IntEnum):
    """
    A liquidity venue quoting the token pair. The integer value is the protocol id passed to the
    flash loan contract for each hop.
    """

    UNISWAP_V2 = 0
    SUSHISWAP = 1
    QUICKSWAP = 2
    APESWAP = 3

    def __str__(self) -> str:
        return self.name


@dataclass(slots=True, frozen=True)
class VenueDeployment:
    venue: Venue
    chain_id: ChainId
    router: ChecksumAddress
    factory: ChecksumAddress


def register_venue(deployment: VenueDeployment) -> None:
    chain_deployments = VENUE_DEPLOYMENTS.setdefault(deployment.chain_id, {})

    if deployment.venue in chain_deployments:
        raise FlashArbValueError(message=f"Venue {deployment.venue} is already registered.")

    chain_deployments[deployment.venue] = deployment


def get_deployment(venue: Venue, chain_id: ChainId) -> VenueDeployment:
    try:
        return VENUE_DEPLOYMENTS[chain_id][venue]
    except KeyError:
        raise UnknownVenue(venue) from None


class RouterLookup:
    """
    Static venue-to-router table for a single chain, callable as `router_for(venue)`.
    """

    def __init__(self, deployments: Mapping[Venue, VenueDeployment]) -> None:
        self._routers = {venue: deployment.router for venue, deployment in deployments.items()}

    @classmethod
    def for_chain(cls, chain_id: ChainId) -> "RouterLookup":
        return cls(VENUE_DEPLOYMENTS.get(chain_id, {}))

    def __call__(self, venue: Venue) -> ChecksumAddress:
        try:
            return self._routers[venue]
        except KeyError:
            raise UnknownVenue(venue) from None


# Polygon DEX --------------- START
PolygonUniswapV2 = VenueDeployment(
    venue=Venue.UNISWAP_V2,
    chain_id=POLYGON_CHAIN_ID,
    router=get_checksum_address("0xedf6066a2b290C185783862C7F4776A2C8077AD1"),
    factory=get_checksum_address("0x9e5A52f57b3038F1B8EeE45F28b3C1967e22799C"),
)
PolygonSushiswap = VenueDeployment(
    venue=Venue.SUSHISWAP,
    chain_id=POLYGON_CHAIN_ID,
    router=get_checksum_address("0x1b02dA8Cb0d097eB8D57A175b88c7D8b47997506"),
    factory=get_checksum_address("0xc35DADB65012eC5796536bD9864eD8773aBc74C4"),
)
PolygonQuickswap = VenueDeployment(
    venue=Venue.QUICKSWAP,
    chain_id=POLYGON_CHAIN_ID,
    router=get_checksum_address("0xa5E0829CaCEd8fFDD4De3c43696c57F7D7A678ff"),
    factory=get_checksum_address("0x5757371414417b8C6CAad45bAeF941aBc7d3Ab32"),
)
PolygonApeswap = VenueDeployment(
    venue=Venue.APESWAP,
    chain_id=POLYGON_CHAIN_ID,
    router=get_checksum_address("0xC0788A3aD43d79aa53B09c2EaCc313A787d1d607"),
    factory=get_checksum_address("0xCf083Be4164828f00cAE704EC15a36D711491284"),
)
# Polygon DEX --------------- END


VENUE_DEPLOYMENTS: dict[ChainId, dict[Venue, VenueDeployment]] = {}

for _deployment in (
    PolygonUniswapV2,
    PolygonSushiswap,
    PolygonQuickswap,
    PolygonApeswap,
):
    register_venue(_deployment)
