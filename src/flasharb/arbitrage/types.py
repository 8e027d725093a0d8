import dataclasses

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress

from flasharb.exceptions import FlashArbError
from flasharb.venues import Venue


@dataclasses.dataclass(slots=True, frozen=True)
class Quote:
    """
    The amount of quote token a venue returns for one whole unit of base token, in the quote
    token's base units, with the pool reserves it was computed from (in pool token order).
    """

    venue: Venue
    price: int
    reserves: tuple[int, int]


@dataclasses.dataclass(slots=True, frozen=True)
class QuoteSweep:
    """
    The outcome of quoting every configured venue. Venues that failed are excluded from `quotes`
    and recorded in `failures`.
    """

    quotes: tuple[Quote, ...]
    failures: dict[Venue, FlashArbError] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(slots=True, frozen=True)
class SpreadDecision:
    cheap_venue: Venue
    rich_venue: Venue
    cheap_price: int
    rich_price: int
    spread: int
    act: bool

    def __post_init__(self) -> None:
        assert self.spread == self.rich_price - self.cheap_price
        assert self.spread >= 0


@dataclasses.dataclass(slots=True, frozen=True)
class Hop:
    venue: Venue
    router_address: ChecksumAddress
    path: tuple[ChecksumAddress, ChecksumAddress]
    data: bytes

    @property
    def token_in(self) -> ChecksumAddress:
        return self.path[0]

    @property
    def token_out(self) -> ChecksumAddress:
        return self.path[1]


@dataclasses.dataclass(slots=True, frozen=True)
class FlashLoanRequest:
    """
    A fully specified flash loan execution, ready to be signed and broadcast by a submitter.
    """

    contract_address: ChecksumAddress
    pool_id: ChecksumAddress
    loan_amount: int
    loan_asset_decimals: int
    hops: tuple[Hop, ...]
    gas_limit: int
    gas_price: int
    signer: LocalAccount

    @property
    def loan_asset(self) -> ChecksumAddress:
        return self.hops[0].token_in
