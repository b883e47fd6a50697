"""Page fetcher for downloading encrypted page containers."""

import logging

import httpx

from .context import RunContext
from .exceptions import FetchError, OperationCancelledError

logger = logging.getLogger(__name__)

PAGE_TIMEOUT = 30.0
CHUNK_SIZE = 64 * 1024


class PageFetcher:
    """Downloads the raw bytes of one page container.

    Every fetch runs under its own per-page timeout nested inside the
    caller's RunContext. The body is streamed so that a cancellation is
    noticed between chunks, but the returned buffer is always complete.
    No retry happens here; when the fetcher builds its own client, connect
    retries are left to the httpx transport.

    Example:
        with PageFetcher() as fetcher:
            content = fetcher.fetch(RunContext(), "https://cdn.example.com/p/0.pdf")
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        timeout: float = PAGE_TIMEOUT,
        transport_retries: int = 0,
    ):
        """Initialize the page fetcher.

        Args:
            http_client: Optional HTTP client for downloading pages.
                         If not provided, one will be created internally.
            timeout: Per-page timeout in seconds
            transport_retries: Connect retries for an internally created client
        """
        self._client = http_client
        self._owns_client = http_client is None
        self.timeout = timeout
        self.transport_retries = transport_retries

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                follow_redirects=True,
                transport=httpx.HTTPTransport(retries=self.transport_retries),
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def fetch(self, context: RunContext, url: str) -> bytes:
        """Fetch one page container.

        Args:
            context: Caller's context; the per-page timeout nests inside it
            url: URL of the page container

        Returns:
            The full response body

        Raises:
            FetchError: On network failure, non-2xx status, read failure,
                        cancellation or timeout
        """
        page_context = context.with_timeout(self.timeout)
        if page_context.cancelled:
            raise FetchError(f"Fetch of {url} cancelled before it started", url=url)

        client = self._get_client()
        chunks: list[bytes] = []

        try:
            with client.stream(
                "GET", url, timeout=page_context.remaining()
            ) as response:
                if not response.is_success:
                    raise FetchError(
                        f"HTTP {response.status_code} fetching {url}",
                        url=url,
                        status_code=response.status_code,
                    )
                for chunk in response.iter_bytes(CHUNK_SIZE):
                    page_context.check()
                    chunks.append(chunk)
        except OperationCancelledError as e:
            raise FetchError(f"Fetch of {url} aborted: {e.message}", url=url) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch {url}: {e}", url=url) from e

        content = b"".join(chunks)
        logger.debug(f"Fetched {len(content)} bytes from {url}")
        return content
