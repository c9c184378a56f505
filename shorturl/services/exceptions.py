"""Exceptions raised by the service layer.

Classes:
    ServiceError:
        Generic base class for service-related exceptions.

    MalformedInputError:
        Base class for client input that can't be processed.

    MalformedUrlError:
        Raised when a long URL is empty, blank, not a string, or too long.

    MalformedShortcodeError:
        Raised when a shortcode isn't a positive decimal record id.

    UrlRecordNotFoundError:
        Raised when a shortcode doesn't resolve to a stored record.
"""

from shorturl.exceptions import ShortURLError


class ServiceError(ShortURLError):
    """Generic base class for service-related exceptions."""

    error_code = 'service:service_error'


class MalformedInputError(ServiceError):
    """Base class for client input that can't be processed."""

    error_code = 'service:malformed_input_error'


class MalformedUrlError(MalformedInputError):
    """Raised when a long URL is empty, blank, not a string, or too long."""

    error_code = 'service:malformed_url_error'


class MalformedShortcodeError(MalformedInputError):
    """Raised when a shortcode isn't a positive decimal record id."""

    error_code = 'service:malformed_shortcode_error'


class UrlRecordNotFoundError(ServiceError):
    """Raised when a shortcode doesn't resolve to a stored record."""

    error_code = 'service:url_record_not_found_error'
