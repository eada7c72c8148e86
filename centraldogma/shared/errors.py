"""Central Dogma client error hierarchy.

All client errors inherit from CentralDogmaError for easy catching.
Transport failures are left as the underlying httpx exceptions.
"""


class CentralDogmaError(Exception):
    """Base error for all client operations."""


class RequestBuildError(CentralDogmaError):
    """A request could not be constructed (bad URL, unrepresentable header)."""


class InvalidParams(CentralDogmaError):
    """Arguments rejected before any request was sent."""


class DecodeError(CentralDogmaError):
    """A response body could not be decoded into the expected model."""


class ErrorResponse(CentralDogmaError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Error response: [{status_code}] {message}")
