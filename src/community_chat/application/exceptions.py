from __future__ import annotations


class AppError(Exception):
    """Base application error; ``status_code`` is what the API answers with."""

    status_code = 400

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    status_code = 404


class ForbiddenError(AppError):
    status_code = 403


class ValidationError(AppError):
    status_code = 422


class UpstreamUnavailableError(AppError):
    """A collaborator the call depends on (store, key server) is unreachable."""

    status_code = 503
