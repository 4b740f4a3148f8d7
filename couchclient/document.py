"""Mutable wrapper around a single CouchDB document."""

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from .exceptions import CouchError

if TYPE_CHECKING:
    from .client import CouchClient

log = logging.getLogger(__name__)


class Document:
    """Local, mutable copy of a document's fields.

    Changes stay local until ``save()`` is called. Reading a field that is
    not set returns None instead of raising.

    Example:
        >>> doc = client.as_documents().get("8128173972d50affdb6724ecbd00d9fc")
        >>> doc["title"] = "Changing my doc."
        >>> doc.save()
        True
    """

    def __init__(self, client: "CouchClient", data: dict[str, Any] | None = None):
        self._client = client
        self._data = dict(data or {})

    def __repr__(self) -> str:
        return f"Document(id={self.id!r}, rev={self.rev!r})"

    def __getitem__(self, key: str) -> Any:
        return self._data.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    @property
    def id(self) -> str | None:
        return self._data.get("_id")

    @property
    def rev(self) -> str | None:
        return self._data.get("_rev")

    def save(self) -> bool:
        """Update the stored document, or create it if it has no ``_id``.

        The server's ``_id`` and ``_rev`` are merged into the local fields.

        Returns:
            True on success, False if the write failed for any reason,
            including fields that cannot be encoded as JSON.
        """
        try:
            if self._data.get("_id") is not None:
                response = self._client.put(self._data["_id"], self._data)
            else:
                response = self._client.post(self._data)
        except (CouchError, TypeError, ValueError) as e:
            log.warning("Saving document %r failed: %s", self.id, e)
            return False

        if isinstance(response, dict):
            self._data.update(response)
        return True

    def as_dict(self) -> dict[str, Any]:
        """Return the local fields as a plain dict."""
        return dict(self._data)
