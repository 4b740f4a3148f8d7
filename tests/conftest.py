"""Shared fixtures: an in-memory CouchDB served through httpx.MockTransport."""

from __future__ import annotations

import json
import uuid
from typing import Any
from urllib.parse import unquote

import httpx
import pytest

from couchclient import CouchClient

DB_PREFIX = "/testdb/"


class FakeCouch:
    """Just enough of CouchDB's document and view API to drive the client."""

    def __init__(self) -> None:
        self.docs: dict[str, dict[str, Any]] = {}
        self.views: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.forced_status: int | None = None

    def add(self, doc: dict[str, Any]) -> dict[str, Any]:
        stored = dict(doc)
        stored["_rev"] = self._next_rev(None)
        self.docs[stored["_id"]] = stored
        return stored

    def _next_rev(self, rev: str | None) -> str:
        generation = int(rev.split("-")[0]) + 1 if rev else 1
        return f"{generation}-{uuid.uuid4().hex}"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.forced_status is not None:
            return httpx.Response(self.forced_status, json={"error": "forced"})

        raw_path = request.url.raw_path.decode().split("?", 1)[0]
        assert raw_path.startswith(DB_PREFIX)
        path = raw_path[len(DB_PREFIX):]

        if path.startswith("_design/") or path == "_all_docs":
            return self._view(path)
        if path == "" and request.method == "POST":
            doc = json.loads(request.content)
            doc.setdefault("_id", uuid.uuid4().hex)
            return self._write(doc["_id"], doc, None)

        doc_id = unquote(path)
        if request.method == "GET":
            if doc_id not in self.docs:
                return httpx.Response(404, json={"error": "not_found"})
            return httpx.Response(200, json=self.docs[doc_id])
        if request.method == "PUT":
            return self._write(doc_id, json.loads(request.content), request.url.params.get("rev"))
        if request.method == "DELETE":
            current = self.docs.get(doc_id)
            if current is None:
                return httpx.Response(404, json={"error": "not_found"})
            if request.url.params.get("rev") != current["_rev"]:
                return httpx.Response(409, json={"error": "conflict"})
            del self.docs[doc_id]
            return httpx.Response(200, json={"ok": True, "id": doc_id})
        return httpx.Response(405, json={"error": "method_not_allowed"})

    def _write(self, doc_id: str, doc: dict[str, Any], rev: str | None) -> httpx.Response:
        current = self.docs.get(doc_id)
        current_rev = current["_rev"] if current else None
        if (rev or doc.get("_rev")) != current_rev:
            return httpx.Response(409, json={"error": "conflict"})
        stored = dict(doc, _id=doc_id, _rev=self._next_rev(current_rev))
        self.docs[doc_id] = stored
        return httpx.Response(201, json={"ok": True, "id": doc_id, "rev": stored["_rev"]})

    def _view(self, path: str) -> httpx.Response:
        if path not in self.views:
            return httpx.Response(404, json={"error": "not_found"})
        return httpx.Response(200, json=self.views[path])


@pytest.fixture
def couch() -> FakeCouch:
    return FakeCouch()


@pytest.fixture
def client(couch: FakeCouch):
    with CouchClient("couch.test", "testdb", transport=httpx.MockTransport(couch)) as client:
        yield client
