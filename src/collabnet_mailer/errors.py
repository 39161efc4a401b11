"""
Exception types for the CollabNet mailer.

Everything the pipeline raises on purpose derives from MailerError, so the
CLI can report it with a single handler and exit non-zero. Mail transport
failures are deliberately NOT wrapped: they propagate as the smtplib/OSError
exceptions they are and abort the run.
"""


class MailerError(Exception):
    """Base class for all errors raised by the mailer pipeline."""


class ConfigurationError(MailerError):
    """The run configuration is invalid; the run never starts."""


class AuthenticationError(MailerError):
    """Login could not be performed, or its failure was detected downstream."""


class FetchError(MailerError):
    """An HTTP request to the forum failed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class PaginationError(MailerError):
    """A forum listing revisited a page or ran past the page ceiling."""
