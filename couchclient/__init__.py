"""couchclient: a small CouchDB client.

Usage:
    from couchclient import CouchClient

    client = CouchClient("localhost", "my_database")

    # Get one document as a dict
    doc = client.get("8128173972d50affdb6724ecbd00d9fc")

    # Create and update documents
    result = client.post({"title": "Hello"})
    client.put(result["_id"], {"title": "Hello again", "_rev": result["_rev"]})

    # Query a view, getting Document objects back
    for doc in client.as_documents().get_view("mydesign", "myview", ["key1", "key2"]):
        doc["seen"] = True
        doc.save()
"""

from .client import CouchClient
from .document import Document
from .exceptions import ConflictError, ConnectionError, CouchError, ResponseError
from .transport import Transport

__version__ = "0.1.0"
__all__ = [
    "CouchClient",
    "Document",
    "Transport",
    "CouchError",
    "ConnectionError",
    "ConflictError",
    "ResponseError",
]
