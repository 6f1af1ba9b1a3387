"""Domain exceptions. Each carries the HTTP status the API layer maps it to."""


class BagsHubError(Exception):
    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(BagsHubError):
    """A required setting (API key, secret) is missing or invalid."""

    status_code = 500


class ExternalServiceError(BagsHubError):
    """An upstream HTTP API failed or returned something unusable."""

    status_code = 500

    def __init__(self, message: str = "", upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class BagsApiError(ExternalServiceError):
    pass


class DexScreenerError(ExternalServiceError):
    pass


class RateLimitExceededError(BagsHubError):
    status_code = 429

    def __init__(self, message: str = "", retry_after: int = 0) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class InvalidInputError(BagsHubError):
    status_code = 400


class AuthenticationError(BagsHubError):
    status_code = 401


class UserAlreadyExistsError(BagsHubError):
    status_code = 400


class NotFoundError(BagsHubError):
    status_code = 404


class DuplicateBookmarkError(BagsHubError):
    status_code = 409
