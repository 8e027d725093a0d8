from flasharb.exceptions.base import FlashArbError, FlashArbValueError
from flasharb.exceptions.connection import ConnectionTimeout, FlashArbConnectionError
from flasharb.exceptions.quote import NoLiquidity, PoolNotFound, QuoteDecodingError, QuoteError
from flasharb.exceptions.request import (
    InvalidDecision,
    InvalidHopSequence,
    InvalidParameter,
    RequestBuildError,
    UnknownVenue,
)
from flasharb.exceptions.submission import RevertError, SubmissionError

from . import connection, quote, request, submission

__all__ = (
    "ConnectionTimeout",
    "FlashArbConnectionError",
    "FlashArbError",
    "FlashArbValueError",
    "InvalidDecision",
    "InvalidHopSequence",
    "InvalidParameter",
    "NoLiquidity",
    "PoolNotFound",
    "QuoteDecodingError",
    "QuoteError",
    "RequestBuildError",
    "RevertError",
    "SubmissionError",
    "UnknownVenue",
    "connection",
    "quote",
    "request",
    "submission",
)
