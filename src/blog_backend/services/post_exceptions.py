"""
Exceptions raised by the post service and repository.

Each exception carries the HTTP status the API answers with. The handlers
registered in `blog_backend.main` translate them into responses.
"""

from typing import Any, List, Optional


class PostServiceError(Exception):
    """Base class for post service failures."""

    status_code: int = 500

    def __init__(self, message: str = "", detail: Optional[Any] = None):
        super().__init__(message or self.__class__.__name__)
        self.detail = detail


class PostValidationError(PostServiceError):
    """Malformed or missing input. Raised before any store access."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message, detail=errors or [{"msg": message}])


class InvalidPostIdError(PostServiceError):
    """The path id is not a syntactically valid document id."""

    status_code = 400


class PostNotFoundError(PostServiceError):
    """No post has the requested id, or it was removed before the operation ran."""

    status_code = 404


class PostForbiddenError(PostServiceError):
    """The requester does not own the post."""

    status_code = 403


class InvalidUploadError(PostServiceError):
    """The uploaded file is missing or is not an image."""

    status_code = 400


class PostStoreError(PostServiceError):
    """Any persistence failure, wrapping the underlying driver error."""

    status_code = 500
