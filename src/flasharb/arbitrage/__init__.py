from flasharb.arbitrage.builder import (
    FlashLoanRequestBuilder,
    HopOrder,
    encode_hop_data,
    validate_hop_sequence,
)
from flasharb.arbitrage.detector import detect
from flasharb.arbitrage.types import FlashLoanRequest, Hop, Quote, QuoteSweep, SpreadDecision

__all__ = (
    "FlashLoanRequest",
    "FlashLoanRequestBuilder",
    "Hop",
    "HopOrder",
    "Quote",
    "QuoteSweep",
    "SpreadDecision",
    "detect",
    "encode_hop_data",
    "validate_hop_sequence",
)
