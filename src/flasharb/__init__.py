from .checksum_cache import get_checksum_address
from .config import Settings, load_settings
from .connection import connect_async_web3, connect_web3
from .version import __version__

# isort: split

from .arbitrage import (
    FlashLoanRequest,
    FlashLoanRequestBuilder,
    Hop,
    HopOrder,
    Quote,
    QuoteSweep,
    SpreadDecision,
    detect,
)
from .logging import logger
from .quoting import fetch_quotes, get_quote, get_quote_async
from .submission import Web3FlashLoanSubmitter, encode_flash_loan_calldata
from .venues import VENUE_DEPLOYMENTS, RouterLookup, Venue, VenueDeployment
from .workflow import ArbitrageCheckResult, ArbitrageWorkflow

__all__ = (
    "VENUE_DEPLOYMENTS",
    "ArbitrageCheckResult",
    "ArbitrageWorkflow",
    "FlashLoanRequest",
    "FlashLoanRequestBuilder",
    "Hop",
    "HopOrder",
    "Quote",
    "QuoteSweep",
    "RouterLookup",
    "Settings",
    "SpreadDecision",
    "Venue",
    "VenueDeployment",
    "Web3FlashLoanSubmitter",
    "__version__",
    "arbitrage",
    "connect_async_web3",
    "connect_web3",
    "constants",
    "detect",
    "encode_flash_loan_calldata",
    "exceptions",
    "fetch_quotes",
    "functions",
    "get_checksum_address",
    "get_quote",
    "get_quote_async",
    "load_settings",
    "logger",
    "types",
    "validation",
)
