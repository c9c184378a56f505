"""Helper utilities for AWS lambda functions.

Functions:
    base_url(event) -> str
        Public base URL of the service (configured, or derived from the API Gateway event)
    redirect_path_prefix() -> str
        Path segment under which short URLs are served (e.g. 'my')
    short_url_base(event) -> str
        Base address every short URL starts with
    get_short_url(shortcode, event) -> str
        Get string representation of short URL for a given shortcode
    http_method(event) -> str
        Upper-cased HTTP method of an API Gateway proxy event
    epoch_millis(dt) / from_epoch_millis(ms) / isoformat_z(dt)
        Timestamp conversions used by the data store and JSON responses
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected handler exceptions into HTTP 500 responses

Example:
    Typical usage inside a Lambda handler:

        >>> event = {
        ...     "requestContext": {
        ...         "domainName": "abc123.execute-api.us-east-1.amazonaws.com",
        ...         "stage": "Prod"
        ...     }
        ... }
        >>> get_short_url('42', event)
        'https://abc123.execute-api.us-east-1.amazonaws.com/Prod/my/42'

        >>> os.environ['PUBLIC_BASE_URL'] = 'http://localhost:8080'
        >>> get_short_url('42', event)
        'http://localhost:8080/my/42'
"""

import os
import json
import logging
import functools
from datetime import datetime, timedelta, UTC
from collections.abc import Callable

from shorturl.types import LambdaEvent
from shorturl.constants import ENV, Defaults, UNKNOWN_INTERNAL_SERVER_ERROR
from shorturl.exceptions import MissingEnvironmentVariableError
from shorturl.utils.runtime import running_locally


logger = logging.getLogger(__name__)

LOCAL_HOSTNAMES = ('localhost', '127.0.0.1')
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
ONE_MILLISECOND = timedelta(milliseconds=1)


def base_url(event: LambdaEvent) -> str:
    """Return the public base URL of the service

    The `PUBLIC_BASE_URL` environment variable always wins. Otherwise the URL
    is derived from the API Gateway event: custom domains omit the stage name,
    default execute-api domains include it, and local hosts use plain http.

    Args:
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: Base URL, e.g.:
             - "https://sho.rt"
             - "https://abc123.execute-api.us-east-1.amazonaws.com/Prod"
             - "http://localhost:3000"
    """
    configured = os.environ.get(ENV.App.PUBLIC_BASE_URL)
    if configured:
        return configured.rstrip('/')

    request_context = event.get('requestContext') or {}
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if not domain:
        # Local invocation (SAM CLI, tests, etc.)
        return Defaults.LOCAL_BASE_URL
    if domain.split(':')[0] in LOCAL_HOSTNAMES:
        return f'http://{domain}'
    if 'execute-api' in domain:
        return f'https://{domain}/{stage}'
    return f'https://{domain}'


def redirect_path_prefix() -> str:
    prefix = os.environ.get(ENV.App.REDIRECT_PATH_PREFIX, Defaults.REDIRECT_PATH_PREFIX)
    return prefix.strip('/')


def short_url_base(event: LambdaEvent) -> str:
    """Return the address every short URL starts with, e.g. 'https://sho.rt/my'"""
    prefix = redirect_path_prefix()
    return f'{base_url(event)}/{prefix}' if prefix else base_url(event)


def get_short_url(shortcode: str, event: LambdaEvent) -> str:
    return f'{short_url_base(event)}/{shortcode}'


def http_method(event: LambdaEvent) -> str:
    method = event.get('httpMethod') or (event.get('requestContext') or {}).get('httpMethod') or 'GET'
    return method.upper()


def epoch_millis(dt: datetime) -> int:
    """Convert an aware datetime to integer milliseconds since the Unix epoch."""
    return (dt - EPOCH) // ONE_MILLISECOND


def from_epoch_millis(ms: int | float) -> datetime:
    """Convert milliseconds since the Unix epoch to an aware UTC datetime."""
    return EPOCH + int(ms) * ONE_MILLISECOND


def isoformat_z(dt: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision, e.g. 2025-10-15T12:00:00.000Z"""
    # fmt: off
    return dt.astimezone(UTC) \
             .isoformat(timespec='milliseconds') \
             .replace('+00:00', 'Z')
    # fmt: on


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with HTTP 500 when a Lambda handler raises unexpectedly

    When running locally the exception is re-raised instead, so that SAM shows
    the full traceback.

    Example:
        >>> @guarantee_500_response
        ... def lambda_handler(event, context):
        ...     raise RuntimeError('boom')
        >>> lambda_handler({}, None)['statusCode']
        500
    """

    @functools.wraps(handler)
    def wrapper(event, context, *args, **kwargs):
        try:
            return handler(event, context, *args, **kwargs)
        except Exception:
            if running_locally():
                raise
            logger.exception(
                'Unhandled exception in Lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return {
                'statusCode': 500,
                'headers': {'Content-Type': 'application/json'},
                'body': json.dumps(
                    {
                        'message': 'Internal Server Error',
                        'errorCode': UNKNOWN_INTERNAL_SERVER_ERROR,
                    }
                ),
            }

    return wrapper
