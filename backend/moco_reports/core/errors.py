"""
Error taxonomy.

InvalidInput is raised by the aggregation core when a record breaks a
structural precondition. MocoApiError and its subclasses are raised by the
MoCo client and mapped to HTTP responses in main.py.
"""

from fastapi import status


class InvalidInput(ValueError):
    """A record (or a single value) cannot be aggregated."""


class MocoApiError(Exception):
    http_status: int = status.HTTP_502_BAD_GATEWAY
    default_message = "Unknown error accessing MoCo API."

    def __init__(self, message: str | None = None, upstream_status: int | None = None) -> None:
        self.message = message or self.default_message
        self.upstream_status = upstream_status
        super().__init__(self.message)


class InvalidParameters(MocoApiError):
    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid parameters. Please check your inputs."


class AuthFailed(MocoApiError):
    http_status = status.HTTP_401_UNAUTHORIZED
    default_message = "API authentication failed. Please check MOCO_API_KEY."


class AccessDenied(AuthFailed):
    http_status = status.HTTP_403_FORBIDDEN
    default_message = "Access denied. Please check your API permissions."


class NotFound(MocoApiError):
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found. Please check the provided IDs."


class ProjectNotAssigned(NotFound):
    def __init__(self, project_id: int) -> None:
        self.project_id = project_id
        super().__init__(
            f"Project {project_id} is not assigned to the current user or does not exist."
        )


class RateLimited(MocoApiError):
    http_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "API limit reached. Please try again in a few seconds."


class ServerError(MocoApiError):
    http_status = status.HTTP_502_BAD_GATEWAY
    default_message = "MoCo server error. Please try again later."


class InvalidResponse(MocoApiError):
    http_status = status.HTTP_502_BAD_GATEWAY
    default_message = "Unexpected response from MoCo API."


class NetworkError(MocoApiError):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Network error accessing MoCo API. Please check your internet connection."


def error_for_status(status_code: int) -> MocoApiError:
    """Build the error matching an unsuccessful MoCo HTTP status."""
    if status_code == 400:
        return InvalidParameters(upstream_status=status_code)
    if status_code == 401:
        return AuthFailed(upstream_status=status_code)
    if status_code == 403:
        return AccessDenied(upstream_status=status_code)
    if status_code == 404:
        return NotFound(upstream_status=status_code)
    if status_code == 422:
        return InvalidParameters(
            "Invalid data. Please check date formats and value ranges.",
            upstream_status=status_code,
        )
    if status_code == 429:
        return RateLimited(upstream_status=status_code)
    if status_code >= 500:
        return ServerError(upstream_status=status_code)
    return MocoApiError(
        f"HTTP error {status_code}. Please contact support.",
        upstream_status=status_code,
    )
