"""Error taxonomy shared by the upstream client and the HTTP routes."""


class GatewayError(Exception):
    """Base class for errors raised by this service."""


class FetchError(GatewayError):
    """An upstream GET failed or returned a body that is not a JSON object.

    Attributes:
        url: The URL that was being fetched.
        cause: The underlying exception (transport, status or decode error).
    """

    def __init__(self, url: str, cause: BaseException) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Error fetching data from {url}: {cause}")


class ValidationError(GatewayError, ValueError):
    """Client input rejected before any upstream call (HTTP 400)."""
