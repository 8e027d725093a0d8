"""
Connection-related exceptions for the flasharb package.

These are transient and local to a single endpoint or venue. Callers may retry the operation or
drop the venue for the current check.
"""

from typing import Any

from flasharb.exceptions.base import FlashArbError


class FlashArbConnectionError(FlashArbError):
    """
    Raised when an RPC endpoint cannot be reached or stops responding mid-call.
    """


class ConnectionTimeout(FlashArbConnectionError):
    """
    Raised when a connection attempt times out.
    """

    def __init__(self, resource: str, timeout_seconds: float | None = None) -> None:
        """
        Initialize ConnectionTimeout.

        Args:
            resource: The resource that failed to connect (e.g., "Web3", "IPC socket")
            timeout_seconds: The timeout duration in seconds, if known
        """
        self.resource = resource
        self.timeout_seconds = timeout_seconds

        message = f"Timed out waiting for {resource} connection"
        if timeout_seconds is not None:
            message += f" after {timeout_seconds} seconds"
        message += "."

        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.resource, self.timeout_seconds)
