from typing import Any

from flasharb.exceptions.base import FlashArbError

"""
Exceptions defined here are raised by the flash loan submitters in the `submission` module.
Neither is retried automatically.
"""


class SubmissionError(FlashArbError):
    """
    Raised when a signed transaction could not be broadcast, or its receipt never arrived.
    """


class RevertError(SubmissionError):
    """
    Raised when a broadcast transaction was mined but reverted during execution.
    """

    def __init__(self, reason: str, tx_hash: str | None = None) -> None:
        self.reason = reason
        self.tx_hash = tx_hash
        message = f"Transaction reverted: {reason}"
        if tx_hash is not None:
            message += f" (tx {tx_hash})"
        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.reason, self.tx_hash)
