"""Exception types raised across the gatherer.

Per-script problems (bad reference, failed fetch, undecodable map) are caught
inside the fetcher and reported as failure outcomes. ``DriverError`` raised
while toggling the debugger and ``CaptureStateError`` are the only ones that
reach callers.
"""

from __future__ import annotations


class SourceMapsError(Exception):
    """Base class for every error raised by this package."""


class DriverError(SourceMapsError):
    """A protocol command sent to the remote driver failed."""


class ProtocolTimeoutError(DriverError):
    def __init__(self, method: str, timeout: float) -> None:
        super().__init__(f"Protocol method {method} timed out after {timeout:g}s")
        self.method = method
        self.timeout = timeout


class PageEvaluationError(DriverError):
    """The expression evaluated in the page threw."""


class CaptureStateError(SourceMapsError):
    """Capture window operations were called out of order."""


class FetchStatusError(SourceMapsError):
    def __init__(self, status: int, url: str) -> None:
        super().__init__(f"Received status code {status} for {url}")
        self.status = status
        self.url = url


class FetchTimeoutError(SourceMapsError):
    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout:g}s fetching {url}")
        self.url = url
        self.timeout = timeout


class FetchTooLargeError(SourceMapsError):
    def __init__(self, url: str, size: int, limit: int) -> None:
        super().__init__(f"Source map too large ({size} bytes > {limit} limit) for {url}")
        self.url = url
        self.size = size
        self.limit = limit


class InvalidSourceMapError(SourceMapsError, ValueError):
    """Decoded content is not a structurally valid source map document."""


class BlockedHostError(SourceMapsError):
    def __init__(self, url: str, host: str) -> None:
        super().__init__(f"Refusing to fetch {url}: {host} is not a public host")
        self.url = url
        self.host = host
