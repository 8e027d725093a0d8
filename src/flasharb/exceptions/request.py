from typing import Any

from flasharb.exceptions.base import FlashArbError

"""
Exceptions defined here are raised while assembling a flash loan request. All of them indicate a
programming or configuration error, and abort construction of the current request.
"""


class RequestBuildError(FlashArbError):
    """
    Exception raised inside the flash loan request builder.
    """


class InvalidDecision(RequestBuildError):
    """
    Raised when a request is built from a spread decision that does not call for action.
    """

    def __init__(self, message: str = "The spread decision does not call for action.") -> None:
        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.message,)


class InvalidParameter(RequestBuildError):
    """
    Raised when a caller-supplied request parameter is out of range.
    """

    def __init__(self, name: str, value: int) -> None:
        self.name = name
        self.value = value
        super().__init__(message=f"Invalid value {value} for parameter '{name}'.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.name, self.value)


class InvalidHopSequence(RequestBuildError):
    """
    Raised when the hops of a request do not form a chain that returns the loaned asset.
    """


class UnknownVenue(RequestBuildError):
    """
    Raised when no router address is registered for a venue.
    """

    def __init__(self, venue: object) -> None:
        self.venue = venue
        super().__init__(message=f"No router is registered for venue {venue}.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.venue,)
