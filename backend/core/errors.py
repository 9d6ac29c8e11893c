# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Application error taxonomy.

The ``crud`` modules raise these instead of ``HTTPException`` so they stay
usable outside a request (seed script, tests).  ``main.py`` registers a
single handler that renders every ``AppError`` as ``{"detail": message}``
with the class's status code.
"""

from fastapi import status


class AppError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Input that passed schema validation but breaks a business rule on shape."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(AppError):
    """Guard or login failure.  ``cause`` is for logs only, never the client."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", cause: str = "unauthorized"):
        super().__init__(message)
        self.cause = cause


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class UpstreamError(AppError):
    """The remote media store rejected or failed a call."""

    status_code = status.HTTP_502_BAD_GATEWAY
