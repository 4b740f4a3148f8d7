"""couchclient exceptions."""


class CouchError(Exception):
    """Base exception for couchclient errors."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        method: str | None = None,
        path: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.method = method
        self.path = path


class ConnectionError(CouchError):
    """Failed to complete an HTTP exchange with the server."""

    pass


class ConflictError(CouchError):
    """Write rejected because the revision does not match the stored one."""

    pass


class ResponseError(CouchError):
    """Server answered with an unexpected status code."""

    pass
