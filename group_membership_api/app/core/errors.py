"""
Error taxonomy shared by the data access layer, the services and the API.

Every error a caller may see derives from ``ApiError`` so that a single
exception handler (see ``main.py``) can translate it into an HTTP
response.  Anything else raised below the service boundary is wrapped
in ``DatabaseOperationError`` before it leaves the service.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional


class ApiError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500
    errorname = "generalError"

    def __init__(self, message: Optional[str] = None, parameter: Optional[str] = None):
        self.message = message or self.errorname
        self.parameter = parameter
        text = self.message if parameter is None else f"{self.message}: {parameter}"
        super().__init__(text)

    def as_dict(self) -> dict:
        return {
            "status": "error",
            "error": str(self),
            "errorname": self.errorname,
            "parameter": self.parameter,
        }


class ParameterError(ApiError):
    """Malformed or missing input, or a referenced entity that does not exist.

    ``message`` is a short key such as ``parameterEmpty`` or
    ``parameterNotFound``; ``parameter`` names the offending field or
    entity (``"name"``, ``"Group"``, ``"User"``).
    """

    status_code = 400
    errorname = "invalidParameter"

    def __init__(self, message: str, parameter: str):
        super().__init__(message, parameter)


class UnauthorizedError(ApiError):
    """The request carries no valid session."""

    status_code = 401
    errorname = "loginRequired"


class ForbiddenError(ApiError):
    """The authenticated user may not act on the target."""

    status_code = 403
    errorname = "userNotAllowed"


class NotFoundError(ApiError):
    """The target row does not exist."""

    status_code = 404
    errorname = "recordNotFound"


class DatabaseOperationError(ApiError):
    """Any failure of the persistence layer.

    The original exception is kept as ``__cause__`` for logging but its
    text is never exposed to the client.
    """

    status_code = 500
    errorname = "generalError"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)


@contextmanager
def database_operation(action: str) -> Iterator[None]:
    """Wrap foreign exceptions raised inside the block as ``DatabaseOperationError``.

    ``ApiError`` subclasses pass through unchanged.
    """
    try:
        yield
    except ApiError:
        raise
    except Exception as e:
        logging.getLogger(__name__).exception("Database operation failed while %s", action)
        raise DatabaseOperationError() from e
