import enum
from collections.abc import Callable, Sequence
from typing import TypeAlias

import eth_abi.abi
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress

from flasharb.arbitrage.types import FlashLoanRequest, Hop, SpreadDecision
from flasharb.checksum_cache import get_checksum_address
from flasharb.constants import WETH_DECIMALS
from flasharb.exceptions import (
    FlashArbValueError,
    InvalidDecision,
    InvalidHopSequence,
    InvalidParameter,
    UnknownVenue,
)
from flasharb.logging import logger
from flasharb.venues import Venue

RouterFor: TypeAlias = Callable[[Venue], ChecksumAddress | str | None]


class HopOrder(enum.Enum):
    """
    Which venue of a spread decision takes the first leg of the round trip.

    `RICH_FIRST` sells the loaned asset on the venue quoting the highest price, then buys it back on
    the cheapest venue. `CHEAP_FIRST` reverses the legs. The correct choice depends on the swap
    semantics of the deployed flash loan contract.
    """

    RICH_FIRST = "rich_first"
    CHEAP_FIRST = "cheap_first"


def encode_hop_data(router: ChecksumAddress) -> bytes:
    """
    Encode the routing data for a single hop, as consumed by the flash loan contract.
    """

    return eth_abi.abi.encode(types=["address"], args=[router])


def validate_hop_sequence(hops: Sequence[Hop], loan_asset: ChecksumAddress) -> None:
    """
    Check that the hops form a chain starting and ending with the loaned asset.

    Raises `InvalidHopSequence` on the first defect found.
    """

    if not hops:
        raise InvalidHopSequence(message="A flash loan request requires at least one hop.")

    for i, hop in enumerate(hops):
        if len(hop.path) != 2:
            raise InvalidHopSequence(message=f"Hop {i} path must contain exactly two tokens.")
        if hop.token_in == hop.token_out:
            raise InvalidHopSequence(message=f"Hop {i} swaps {hop.token_in} for itself.")

    for i, (hop, next_hop) in enumerate(zip(hops, hops[1:])):
        if hop.token_out != next_hop.token_in:
            raise InvalidHopSequence(
                message=f"Hop {i} outputs {hop.token_out}, but hop {i + 1} expects "
                f"{next_hop.token_in}."
            )

    if hops[0].token_in != loan_asset:
        raise InvalidHopSequence(
            message=f"The first hop does not spend the loan asset {loan_asset}."
        )
    if hops[-1].token_out != loan_asset:
        raise InvalidHopSequence(
            message=f"The last hop does not return the loan asset {loan_asset}."
        )


class FlashLoanRequestBuilder:
    """
    Assembles a two-hop round trip flash loan request from a spread decision.

    The builder holds the values that are fixed for a deployment (the flash loan contract, the pool
    lending the asset, and the venue router table), and is otherwise stateless.
    """

    def __init__(
        self,
        contract_address: ChecksumAddress | str,
        pool_id: ChecksumAddress | str,
        router_for: RouterFor,
        *,
        hop_order: HopOrder = HopOrder.RICH_FIRST,
    ) -> None:
        """
        Arguments
        ---------
        contract_address:
            The address of the deployed flash loan contract.
        pool_id:
            The address of the pool that lends the asset.
        router_for:
            A callable returning the router address for a venue. It may raise `UnknownVenue`, or
            return `None` for an unregistered venue.
        hop_order:
            The venue taking the first leg. Defaults to the richest venue.
        """

        self.contract_address = get_checksum_address(contract_address)
        self.pool_id = get_checksum_address(pool_id)
        self.router_for = router_for
        self.hop_order = hop_order

    def _router(self, venue: Venue) -> ChecksumAddress:
        router = self.router_for(venue)
        if router is None:
            raise UnknownVenue(venue)
        return get_checksum_address(router)

    def _build_hop(
        self, venue: Venue, token_in: ChecksumAddress, token_out: ChecksumAddress
    ) -> Hop:
        router = self._router(venue)

        logger.debug(f"HOP: {venue} router {router}, {token_in} -> {token_out}")

        return Hop(
            venue=venue,
            router_address=router,
            path=(token_in, token_out),
            data=encode_hop_data(router),
        )

    def build(
        self,
        decision: SpreadDecision,
        loan_amount: int,
        loan_asset: ChecksumAddress | str,
        quote_asset: ChecksumAddress | str,
        gas_limit: int,
        gas_price: int,
        signer: LocalAccount,
        *,
        loan_asset_decimals: int = WETH_DECIMALS,
    ) -> FlashLoanRequest:
        """
        Build the flash loan request for an actionable spread decision. The first hop swaps the loan
        asset for the quote asset, and the second hop swaps it back.

        Raises `InvalidDecision` if the decision does not call for action, `InvalidParameter` for a
        non-positive loan amount or gas limit, `UnknownVenue` if a venue has no router, and
        `InvalidHopSequence` if the hops would not return the loaned asset.
        """

        if not decision.act:
            raise InvalidDecision
        if decision.cheap_venue == decision.rich_venue:
            raise InvalidDecision(message="The spread decision uses one venue for both legs.")
        if loan_amount <= 0:
            raise InvalidParameter(name="loan_amount", value=loan_amount)
        if gas_limit <= 0:
            raise InvalidParameter(name="gas_limit", value=gas_limit)

        loan_asset = get_checksum_address(loan_asset)
        quote_asset = get_checksum_address(quote_asset)

        match self.hop_order:
            case HopOrder.RICH_FIRST:
                first_venue, second_venue = decision.rich_venue, decision.cheap_venue
            case HopOrder.CHEAP_FIRST:
                first_venue, second_venue = decision.cheap_venue, decision.rich_venue
            case _:
                raise FlashArbValueError(message=f"Unknown hop order {self.hop_order!r}")

        hops = (
            self._build_hop(venue=first_venue, token_in=loan_asset, token_out=quote_asset),
            self._build_hop(venue=second_venue, token_in=quote_asset, token_out=loan_asset),
        )
        validate_hop_sequence(hops=hops, loan_asset=loan_asset)

        return FlashLoanRequest(
            contract_address=self.contract_address,
            pool_id=self.pool_id,
            loan_amount=loan_amount,
            loan_asset_decimals=loan_asset_decimals,
            hops=hops,
            gas_limit=gas_limit,
            gas_price=gas_price,
            signer=signer,
        )
