"""Application error carrying an HTTP status and a business code."""


class AppError(Exception):
    """An error that maps directly onto an API error response."""

    def __init__(self, http_status, code, message, cause=None):
        super().__init__(message)
        self.http_status = http_status
        self.code = code
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self):
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


def new(http_status, code, message):
    """Create an AppError with no underlying cause."""
    return AppError(http_status, code, message)


def wrap(http_status, code, message, cause):
    """Create an AppError that wraps ``cause``."""
    return AppError(http_status, code, message, cause)


def as_app_error(err):
    """Return the first AppError in the explicit cause chain of ``err``, or None."""
    seen = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, AppError):
            return err
        seen.add(id(err))
        err = err.__cause__
    return None