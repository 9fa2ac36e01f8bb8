"""Exception hierarchy for telegram-notify."""

from __future__ import annotations


class NotifyError(Exception):
    """Base class for every error the notifier reports as a failure."""


class MissingInputError(NotifyError):
    """Required input is missing; raised before any network activity."""


class TemplateNotFoundError(NotifyError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Template not found: {name}")


class FileSourceError(NotifyError):
    """The file to send is missing, too large, or of an unknown type."""


class TelegramAPIError(NotifyError):
    """A single failed Bot API call (transport error or ok=false envelope)."""

    def __init__(
        self,
        description: str,
        error_code: int | None = None,
        retry_after: int | None = None,
    ) -> None:
        self.description = description
        self.error_code = error_code
        self.retry_after = retry_after
        super().__init__(description)


class RetriesExhaustedError(NotifyError):
    def __init__(self, last_error: Exception, attempts: int) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Request failed after {attempts} attempts: {last_error}")


class RateLimitExhaustedError(NotifyError):
    def __init__(
        self, last_error: Exception, rate_limit_retries: int, retries: int = 0,
    ) -> None:
        self.last_error = last_error
        self.rate_limit_retries = rate_limit_retries
        self.retries = retries
        super().__init__(
            f"Rate limit persisted after {rate_limit_retries} retries: {last_error}"
        )


class InvalidEndpointError(NotifyError):
    """The Bot API URL cannot be built from the token and base URL; not retried."""
