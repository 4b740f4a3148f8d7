"""CouchDB HTTP client."""

import json
import logging
import threading
from typing import Any
from urllib.parse import urlencode

import httpx

from .document import Document
from .exceptions import ConflictError, ResponseError
from .transport import DEFAULT_TIMEOUT, USER_AGENT, Transport
from .types import ViewQuery, iter_row_values, normalize_write_result, quote_id

log = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}

_MISS = object()


class CouchClient:
    """HTTP client for one CouchDB database.

    Successful document and GET view reads are cached per instance until
    the document is deleted or the cache is cleared.

    Args:
        host: Hostname of the CouchDB server.
        database: Database name.
        port: Port number.
        scheme: "http" or "https".
        timeout: Request timeout in seconds.
        user_agent: User-Agent header sent on every request.
        transport: Optional httpx transport (e.g., ``httpx.MockTransport``).

    Example:
        >>> client = CouchClient("localhost", "my_database")
        >>> doc = client.get("8128173972d50affdb6724ecbd00d9fc")
        >>> print(doc["_id"])
        >>> for doc in client.as_documents().get_view("mydesign", "myview", ["k1", "k2"]):
        ...     print(doc.id)
    """

    def __init__(
        self,
        host: str,
        database: str,
        port: int = 5984,
        scheme: str = "http",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.url = f"{scheme}://{host}:{port}/{database}/"
        self._transport = Transport(
            self.url,
            timeout=timeout,
            user_agent=user_agent,
            transport=transport,
        )
        self._cache: dict[str, Any] = {}
        self._cache_lock = threading.Lock()
        self._as_docs = False

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "CouchClient":
        """Create a client from a database URL.

        Example:
            >>> client = CouchClient.from_url("https://db.example.com:6984/notes")
        """
        parsed = httpx.URL(url)
        default_port = 443 if parsed.scheme == "https" else 5984
        return cls(
            parsed.host,
            parsed.path.strip("/"),
            port=parsed.port or default_port,
            scheme=parsed.scheme,
            **kwargs,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._transport.close()

    def __enter__(self) -> "CouchClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def as_documents(self, docs: bool = True) -> "CouchClient":
        """Return results as ``Document`` objects (True) or dicts (False).

        Returns the client itself so calls can be chained.
        """
        self._as_docs = docs
        return self

    def get(self, doc_id: str, use_cache: bool = True) -> Any:
        """Get a document by ID, from the cache if previously fetched.

        Args:
            doc_id: Document ID.
            use_cache: Whether a cached copy may be returned.

        Returns:
            The document, or None if the server did not answer 200. Any
            non-200 status is a miss, not an error.
        """
        path = quote_id(doc_id)
        doc = self._get_cache(path) if use_cache else _MISS

        if doc is _MISS:
            status, body = self._transport.invoke(path)
            if status == 200:
                doc = self._set_cache(path, body)
            else:
                log.info("GET %s returned %d, treating as missing", doc_id, status)
                doc = None

        return self._to_document(doc) if self._as_docs else doc

    def put(self, doc_id: str, doc: dict[str, Any]) -> Any:
        """Create or update a document by ID.

        Args:
            doc_id: ID to create or update.
            doc: Document to store. Its ``_rev`` is sent when present.

        Returns:
            ``{"_id": ..., "_rev": ...}`` or the raw response if it has no id.

        Raises:
            ConflictError: The stored revision differs from ``doc["_rev"]``.
            ResponseError: Any other status than 201.
            ConnectionError: The server could not be reached.
        """
        path = quote_id(doc_id)
        if doc.get("_rev") is not None:
            path += "?" + urlencode({"rev": doc["_rev"]})

        status, response = self._transport.invoke(
            path, "PUT", headers=JSON_HEADERS, body=json.dumps(doc)
        )

        if status == 409:
            raise ConflictError(
                f"PUT /{doc_id} failed: revision conflict",
                status,
                "PUT",
                path,
            )
        if status != 201:
            raise ResponseError(
                f"PUT /{doc_id} - unexpected response status {status}",
                status,
                "PUT",
                path,
            )

        return normalize_write_result(response)

    def post(self, doc: dict[str, Any]) -> Any:
        """Create a document, letting the server assign its ID.

        Raises:
            ResponseError: Any other status than 201.
            ConnectionError: The server could not be reached.
        """
        status, response = self._transport.invoke(
            "", "POST", headers=JSON_HEADERS, body=json.dumps(doc)
        )

        if status != 201:
            raise ResponseError(
                f"POST - unexpected response status {status}", status, "POST", ""
            )

        return normalize_write_result(response)

    def delete(self, doc_id: str, rev: str) -> bool:
        """Delete a document and drop it from the cache.

        Raises:
            ResponseError: Any other status than 200.
            ConnectionError: The server could not be reached.
        """
        path = f"{quote_id(doc_id)}?{urlencode({'rev': rev})}"
        status, _ = self._transport.invoke(path, "DELETE")

        if status != 200:
            raise ResponseError(
                f"DELETE /{doc_id} - unexpected response status {status}",
                status,
                "DELETE",
                path,
            )

        self._evict_cache(quote_id(doc_id))
        return True

    def get_all_documents(self, params: dict[str, Any] | None = None) -> Any:
        """Get all documents in the database (the ``_all_docs`` view)."""
        return self._get_view_by_get(ViewQuery(None, "_all_docs", params=params or {}))

    def get_view(
        self,
        design: str,
        view: str,
        key: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Query a view.

        Args:
            design: Design document name.
            view: View name.
            key: A single key, or a list of keys (sent by POST).
            params: Extra query string parameters, JSON-encoded per value.

        Returns:
            A list of ``Document`` objects when ``as_documents()`` is on,
            otherwise the decoded view response.

        Raises:
            ResponseError: A list-of-keys query did not return 200. Single
                key and keyless queries return an empty result instead.
        """
        query = ViewQuery(design, view, key, params or {})
        if query.uses_post:
            return self._get_view_by_post(query)
        return self._get_view_by_get(query)

    def clear_cache(self) -> None:
        """Drop every cached document and view result."""
        with self._cache_lock:
            self._cache.clear()

    def _get_view_by_get(self, query: ViewQuery) -> Any:
        path = query.path
        response = self._get_cache(path)

        if response is _MISS:
            status, body = self._transport.invoke(path)
            if status == 200:
                response = self._set_cache(path, body)
            else:
                log.info("GET %s returned %d, treating as empty", path, status)
                response = {}

        return self._to_documents(response) if self._as_docs else response

    def _get_view_by_post(self, query: ViewQuery) -> Any:
        path = query.path
        status, response = self._transport.invoke(
            path, "POST", headers=JSON_HEADERS, body=query.body
        )

        if status != 200:
            raise ResponseError(
                f"POST view {path} - unexpected response status {status}",
                status,
                "POST",
                path,
            )

        return self._to_documents(response) if self._as_docs else response

    def _get_cache(self, key: str) -> Any:
        """Return the cached value for a request path, or ``_MISS``."""
        with self._cache_lock:
            value = self._cache.get(key, _MISS)
        if value is not _MISS:
            log.debug("cache hit for %s", key)
        return value

    def _set_cache(self, key: str, value: Any) -> Any:
        with self._cache_lock:
            self._cache[key] = value
        return value

    def _evict_cache(self, key: str) -> None:
        with self._cache_lock:
            if self._cache.pop(key, _MISS) is not _MISS:
                log.debug("evicted %s from cache", key)

    def _to_document(self, doc: Any) -> Document | None:
        if isinstance(doc, dict) and "_id" in doc:
            return Document(self, doc)
        return None

    def _to_documents(self, response: Any) -> list[Document]:
        docs = (self._to_document(value) for value in iter_row_values(response))
        return [doc for doc in docs if doc is not None]
