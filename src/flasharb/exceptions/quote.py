from typing import Any

from eth_typing import ChecksumAddress

from flasharb.exceptions.base import FlashArbError

"""
Exceptions defined here are raised by the quoting functions in the `quoting` module.
"""


class QuoteError(FlashArbError):
    """
    Exception raised while fetching a price quote from a venue.
    """


class PoolNotFound(QuoteError):
    """
    Raised when the venue factory has no pool registered for the requested token pair.
    """

    def __init__(
        self, factory: ChecksumAddress, token_a: ChecksumAddress, token_b: ChecksumAddress
    ) -> None:
        self.factory = factory
        self.token_a = token_a
        self.token_b = token_b
        super().__init__(message=f"Factory {factory} has no pool for {token_a}-{token_b}.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.factory, self.token_a, self.token_b)


class NoLiquidity(QuoteError):
    """
    Raised when a pool exists but holds no reserves of one or both tokens.
    """

    def __init__(self, pool: ChecksumAddress) -> None:
        self.pool = pool
        super().__init__(message=f"Pool {pool} has no liquidity.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.pool,)


class QuoteDecodingError(QuoteError):
    """
    Raised when a venue contract returns data that cannot be decoded, or reverts on a read call.
    """
