from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ForbiddenError(AppError):
    pass


class BadRequestError(AppError):
    pass


class ValidationError(AppError):
    pass


class StorageError(AppError):
    """The document store rejected or failed an operation.

    The detail is safe to return to clients; the driver error is kept as
    ``__cause__`` for logging.
    """

    def __init__(self, detail: str = "Server Error") -> None:
        super().__init__(detail)
