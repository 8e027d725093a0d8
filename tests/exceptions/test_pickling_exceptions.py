import pickle

import pytest

from flasharb.constants import DODO_V2_WETH_POOL, POLYGON_USDC, POLYGON_WETH
from flasharb.exceptions import (
    ConnectionTimeout,
    FlashArbError,
    InvalidDecision,
    InvalidParameter,
    NoLiquidity,
    PoolNotFound,
    QuoteDecodingError,
    RevertError,
    SubmissionError,
    UnknownVenue,
)
from flasharb.venues import Venue


def test_base_exception_pickling() -> None:
    """
    Test that exceptions using the base initializer keep their message after a pickle round trip.
    """

    for exception_type in (FlashArbError, QuoteDecodingError, SubmissionError):
        original_exception = exception_type(message="Custom error message")
        unpickled_exception = pickle.loads(pickle.dumps(original_exception))

        assert type(unpickled_exception) is exception_type
        assert unpickled_exception.message == "Custom error message"
        assert str(unpickled_exception) == "Custom error message"


@pytest.mark.parametrize(
    ("original_exception", "attributes"),
    [
        (
            ConnectionTimeout(resource="AsyncWeb3", timeout_seconds=10),
            {"resource": "AsyncWeb3", "timeout_seconds": 10},
        ),
        (
            PoolNotFound(factory=DODO_V2_WETH_POOL, token_a=POLYGON_WETH, token_b=POLYGON_USDC),
            {"factory": DODO_V2_WETH_POOL, "token_a": POLYGON_WETH, "token_b": POLYGON_USDC},
        ),
        (
            NoLiquidity(pool=DODO_V2_WETH_POOL),
            {"pool": DODO_V2_WETH_POOL},
        ),
        (
            InvalidParameter(name="gas_limit", value=0),
            {"name": "gas_limit", "value": 0},
        ),
        (
            UnknownVenue(Venue.APESWAP),
            {"venue": Venue.APESWAP},
        ),
        (
            RevertError(reason="Arbitrage not profitable", tx_hash="0x" + "12" * 32),
            {"reason": "Arbitrage not profitable", "tx_hash": "0x" + "12" * 32},
        ),
    ],
)
def test_exception_with_attributes_pickling(
    original_exception: FlashArbError, attributes: dict
) -> None:
    """
    Test that each exception's `__reduce__` method allows the exception to be pickled and
    unpickled with its attributes and message intact.
    """

    unpickled_exception = pickle.loads(pickle.dumps(original_exception))

    assert type(unpickled_exception) is type(original_exception)
    assert unpickled_exception.message == original_exception.message
    assert str(unpickled_exception) == str(original_exception)
    for name, value in attributes.items():
        assert getattr(unpickled_exception, name) == value


def test_invalid_decision_pickling() -> None:
    original_exception = InvalidDecision()
    unpickled_exception = pickle.loads(pickle.dumps(original_exception))
    assert type(unpickled_exception) is InvalidDecision
    assert unpickled_exception.message == "The spread decision does not call for action."

    original_exception = InvalidDecision(message="The decision uses one venue for both legs.")
    unpickled_exception = pickle.loads(pickle.dumps(original_exception))
    assert unpickled_exception.message == original_exception.message
