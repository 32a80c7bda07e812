"""
Exception taxonomy for the reading pipeline and the API layer.
"""


class HealthTrackError(Exception):
    """Base class for application errors."""
    status_code = 500


class ValidationError(HealthTrackError):
    """Input violates domain constraints. Carries one message per violated field."""
    status_code = 400

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__('; '.join(self.errors) or 'Validation error')


class EnrichmentError(HealthTrackError):
    """The AI analysis call failed, timed out or returned unusable content.
    The triggering exception is chained as __cause__."""


class StorageError(HealthTrackError):
    """A read or write against the database failed."""


class RequestDeadlineExceeded(HealthTrackError):
    """The request as a whole ran past REQUEST_TIMEOUT_SECONDS."""
    status_code = 504
