import asyncio
import dataclasses
from collections.abc import Sequence

from eth_account.signers.local import LocalAccount
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.types import TxReceipt

from flasharb.arbitrage import (
    FlashLoanRequest,
    FlashLoanRequestBuilder,
    QuoteSweep,
    SpreadDecision,
    detect,
)
from flasharb.config import Settings
from flasharb.functions import format_units
from flasharb.logging import logger
from flasharb.quoting import fetch_quotes
from flasharb.submission import FlashLoanSubmitter
from flasharb.venues import RouterLookup, VenueDeployment, get_deployment


@dataclasses.dataclass(slots=True, frozen=True)
class ArbitrageCheckResult:
    """
    Everything produced by one check cycle. Later stages are `None` if the cycle stopped early.
    """

    sweep: QuoteSweep
    decision: SpreadDecision | None
    request: FlashLoanRequest | None = None
    receipt: TxReceipt | None = None


class ArbitrageWorkflow:
    """
    Runs the quote, detect, build and submit cycle for the configured token pair and venues.

    Collaborators are injected. Without a builder and signer the cycle stops after the decision,
    and without a submitter it stops after building the request.
    """

    def __init__(
        self,
        settings: Settings,
        w3: AsyncWeb3[AsyncBaseProvider],
        *,
        deployments: Sequence[VenueDeployment] | None = None,
        builder: FlashLoanRequestBuilder | None = None,
        signer: LocalAccount | None = None,
        submitter: FlashLoanSubmitter | None = None,
    ) -> None:
        self.settings = settings
        self.w3 = w3
        self.deployments = (
            tuple(deployments)
            if deployments is not None
            else tuple(get_deployment(venue, settings.chain_id) for venue in settings.venues)
        )

        if builder is None and settings.loan.contract is not None:
            builder = FlashLoanRequestBuilder(
                contract_address=settings.loan.contract,
                pool_id=settings.loan.pool,
                router_for=RouterLookup(
                    {deployment.venue: deployment for deployment in self.deployments}
                ),
                hop_order=settings.hop_order,
            )
        self.builder = builder
        self.signer = signer
        self.submitter = submitter

    def _format_quote_amount(self, amount: int) -> str:
        return f"{format_units(amount, self.settings.quote_token_decimals):f}"

    async def check(self, min_spread: int | None = None) -> ArbitrageCheckResult:
        """
        Run a single check cycle. The request, if one is built, is submitted at most once.

        Exceptions from the builder and the submitter are not caught, and end the cycle.
        """

        settings = self.settings
        min_spread = min_spread if min_spread is not None else settings.min_spread

        sweep = await fetch_quotes(
            deployments=self.deployments,
            base_token=settings.base_token,
            quote_token=settings.quote_token,
            w3=self.w3,
            base_token_decimals=settings.base_token_decimals,
        )
        for quote in sweep.quotes:
            logger.info(f"Price on {quote.venue}: {self._format_quote_amount(quote.price)}")

        decision = detect(sweep.quotes, min_spread)
        if decision is None:
            logger.info(f"Only {len(sweep.quotes)} venue(s) quoted, nothing to compare")
            return ArbitrageCheckResult(sweep=sweep, decision=None)

        logger.info(
            f"Biggest price difference: {self._format_quote_amount(decision.spread)} "
            f"({decision.cheap_venue} -> {decision.rich_venue})"
        )
        if not decision.act:
            return ArbitrageCheckResult(sweep=sweep, decision=decision)

        if self.builder is None or self.signer is None:
            logger.info("Spread is actionable, but no flash loan contract or signer is configured")
            return ArbitrageCheckResult(sweep=sweep, decision=decision)

        request = self.builder.build(
            decision=decision,
            loan_amount=settings.loan.amount,
            loan_asset=settings.base_token,
            quote_asset=settings.quote_token,
            gas_limit=settings.gas.limit,
            gas_price=settings.gas.price,
            signer=self.signer,
            loan_asset_decimals=settings.loan.asset_decimals,
        )
        if self.submitter is None:
            return ArbitrageCheckResult(sweep=sweep, decision=decision, request=request)

        receipt = await asyncio.to_thread(self.submitter.submit, request)
        return ArbitrageCheckResult(
            sweep=sweep,
            decision=decision,
            request=request,
            receipt=receipt,
        )
