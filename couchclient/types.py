"""Type definitions and value helpers for couchclient."""

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlencode


def quote_id(doc_id: str) -> str:
    """URL-encode a document ID as a single path segment."""
    return quote(str(doc_id), safe="")


def encode_query_value(value: Any) -> str:
    """Serialize a view parameter value to its JSON query form.

    Strings are quoted, booleans become ``true``/``false``, sequences and
    mappings are JSON-encoded and numbers are written literally.
    """
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def is_key_list(key: Any) -> bool:
    """Whether ``key`` is a set of keys rather than a single key."""
    return isinstance(key, Sequence) and not isinstance(key, (str, bytes))


@dataclass
class ViewQuery:
    """A view request: design document, view name, key and parameters.

    A list of keys is sent in the request body by POST, since the server
    limits URL length; a single key goes in the query string of a GET.
    """

    design: str | None
    view: str
    key: Any = None
    params: Mapping[str, Any] = field(default_factory=dict)

    @property
    def uses_post(self) -> bool:
        return is_key_list(self.key)

    @property
    def base_path(self) -> str:
        if self.design is None:
            return self.view
        return f"_design/{self.design}/_view/{self.view}"

    @property
    def path(self) -> str:
        """Request path relative to the database URL, query included."""
        pairs = [(k, encode_query_value(v)) for k, v in self.params.items()]
        if self.key is not None and not self.uses_post:
            pairs.append(("key", encode_query_value(self.key)))
        if not pairs:
            return self.base_path
        return f"{self.base_path}?{urlencode(pairs)}"

    @property
    def body(self) -> str | None:
        if not self.uses_post:
            return None
        return json.dumps({"keys": list(self.key)})


def normalize_write_result(response: Any) -> Any:
    """Reduce a write response to ``{"_id", "_rev"}`` when it carries an id."""
    if isinstance(response, dict) and "id" in response:
        return {"_id": response["id"], "_rev": response.get("rev")}
    return response


def iter_row_values(response: Any) -> list[dict[str, Any]]:
    """Extract the ``value`` mapping of each row in a view response."""
    if not isinstance(response, dict):
        return []
    values = []
    for row in response.get("rows") or []:
        if isinstance(row, dict) and isinstance(row.get("value"), dict):
            values.append(row["value"])
    return values
