"""HTTP transport used by the couchclient store client."""

import logging
from typing import Any

import httpx

from .exceptions import ConnectionError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
USER_AGENT = "couchclient/0.1.0"


class Transport:
    """Issue single HTTP requests against a database URL.

    Non-2xx statuses are returned to the caller as data; only a failed
    exchange (DNS, connect, timeout, protocol error) raises.

    Args:
        base_url: Database URL, ending with a slash
            (e.g., "http://localhost:5984/mydb/").
        timeout: Request timeout in seconds.
        user_agent: Value of the User-Agent header sent on every request.
        transport: Optional httpx transport, used to route requests
            somewhere other than the network.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def invoke(
        self,
        path: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: str | None = None,
        timeout: float | None = None,
    ) -> tuple[int, Any]:
        """Send one request and return its status and decoded body.

        Args:
            path: Path relative to the base URL, query string included.
            method: HTTP verb.
            headers: Extra request headers.
            body: Already serialized request body.
            timeout: Override of the client timeout for this request.

        Returns:
            Tuple of the HTTP status code and the JSON-decoded body. An empty
            or non-JSON body decodes to None.

        Raises:
            ConnectionError: If no response could be obtained.
        """
        url = self.base_url + path
        try:
            response = self._client.request(
                method,
                url,
                headers=headers,
                content=body,
                timeout=self.timeout if timeout is None else timeout,
            )
        except httpx.HTTPError as e:
            raise ConnectionError(
                f"{method} {url} failed: {e}", method=method, path=path
            )

        log.debug("%s %s -> %d", method, url, response.status_code)
        return response.status_code, self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None
