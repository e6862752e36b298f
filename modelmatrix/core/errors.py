# modelmatrix/core/errors.py
from fastapi import status


class APIError(Exception):
    """
    Base class for errors rendered as `{"error": true, "message": ...}`.

    Services raise these; the handlers registered in `modelmatrix.main`
    turn them into JSON responses with `status_code`.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthorized(APIError):
    """Missing, malformed or rejected bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "unauthorized access"


class Forbidden(APIError):
    """Authenticated, but not entitled to the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    message = "forbidden access"


class NotFound(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "not found"


class UpstreamFailure(APIError):
    """The store or the identity provider failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "upstream service failure"
