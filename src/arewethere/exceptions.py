"""Library exceptions for the arewethere package."""


class ArewethereError(Exception):
    """Base exception for arewethere library."""

    pass


class StatusFetchError(ArewethereError):
    """Raised when the status endpoint cannot be reached or returns an error."""

    def __init__(self, url: str, message: str, status: int | None = None) -> None:
        self.url = url
        self.status = status
        status_info = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"Failed to fetch status from {url}{status_info}: {message}")


class StatusParseError(ArewethereError):
    """Raised when the status payload is not valid JSON or has an unexpected shape."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"Invalid status payload from {url}: {message}")


class StoreError(ArewethereError):
    """Raised when the key-value store cannot read or write a value."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"Key-value store error for {key!r}: {message}")
