"""HTTP client factory shared by the strategy and provider modules."""

import httpx

DEFAULT_TIMEOUT = 30.0


def create_http_client() -> httpx.AsyncClient:
    """Create the async client used for every outbound provider call.

    Modules import this name directly so tests can patch it per module.
    """
    return httpx.AsyncClient(follow_redirects=True, timeout=httpx.Timeout(DEFAULT_TIMEOUT))
