"""Application-specific exceptions.

Every exception carries a stable `error_code` which lambda handlers forward
to clients, e.g. `{"errorCode": "validation:shortcode_taken"}`.

Example:
    >>> from linkshortener.exceptions import ShortcodeTakenError
    >>> ShortcodeTakenError.error_code
    'validation:shortcode_taken'
"""


class LinkShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:linkshortener_error'


class ValidationError(LinkShortenerError):
    """Base exception for invalid user input."""

    error_code = 'validation:validation_error'


class InvalidURLError(ValidationError):
    """Raised when the original URL is not an absolute URL."""

    error_code = 'validation:invalid_url'


class InvalidValidityError(ValidationError):
    """Raised when the validity period is outside the allowed range."""

    error_code = 'validation:invalid_validity'


class ShortcodeTakenError(ValidationError):
    """Raised when a custom shortcode is already used by a stored record."""

    error_code = 'validation:shortcode_taken'


class ShortcodeAllocationError(LinkShortenerError):
    """Raised when no unique shortcode could be generated within the retry budget."""

    error_code = 'app:shortcode_allocation_error'


class ConfigurationError(LinkShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class RemoteLoggingError(LinkShortenerError):
    """Raised when the remote log server rejects or cannot receive a request."""

    error_code = 'infra:remote_logging_error'
