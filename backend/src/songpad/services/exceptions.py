"""Service error hierarchy for song synthesis and task tracking.

This module defines the exception hierarchy for service-level errors:
- ServiceError: Base for all service errors
- TransientError: Errors that may succeed when attempted again (network, rate limits)
- PermanentError: Errors that will not (authentication, validation)
"""


class ServiceError(Exception):
    """Base exception for all service errors."""

    pass


class TransientError(ServiceError):
    """Transient error that may succeed on retry.

    Examples:
    - Network timeouts
    - Rate limit exceeded (429)
    - Service unavailable (503)
    """

    pass


class PermanentError(ServiceError):
    """Permanent error that will not succeed on retry.

    Examples:
    - Authentication failures (401, 403)
    - Invalid request parameters (400)
    - Configuration errors
    """

    pass


# Synthesis API errors
class SynthesisError(ServiceError):
    """Base exception for song synthesis API errors."""

    pass


class SynthesisNetworkError(SynthesisError, TransientError):
    """Network timeout or connection failure."""

    pass


class SynthesisRateLimitError(SynthesisError, TransientError):
    """Rate limit exceeded (429)."""

    pass


class SynthesisUnavailableError(SynthesisError, TransientError):
    """Server side failure (5xx)."""

    pass


class SynthesisAuthError(SynthesisError, PermanentError):
    """Authentication failure (401, 403)."""

    pass


class SynthesisConfigError(SynthesisAuthError):
    """API key is not configured; no request was sent."""

    pass


class SynthesisValidationError(SynthesisError, PermanentError):
    """Request rejected (400, 422)."""

    pass


class SynthesisResponseError(SynthesisError, PermanentError):
    """Unexpected status code or unparseable response body."""

    pass


# Song task tracker errors
class TrackerError(ServiceError):
    """Base exception for song task tracker errors."""

    pass


class LyricsValidationError(TrackerError, PermanentError):
    """Lyric text is missing or blank."""

    pass


class GenreValidationError(TrackerError, PermanentError):
    """Genre is not one of the presets."""

    pass


class DocumentNotFoundError(TrackerError, PermanentError):
    """Document does not exist."""

    pass


class DocumentAccessDeniedError(TrackerError, PermanentError):
    """Document belongs to another user."""

    pass


class SongTaskNotFoundError(TrackerError, PermanentError):
    """Song task does not exist (or not under the given document)."""

    pass
