import logging

from shorturl.types import LambdaEvent, LambdaContext, LambdaResponse
from shorturl.constants import CONFIGURATION_ERROR, DATA_STORE_ERROR, METHOD_NOT_ALLOWED
from shorturl.exceptions import ConfigurationError, InfrastructureError
from shorturl.dao.redis import UrlRecordRedisDAO
from shorturl.dao.exceptions import DataStoreError
from shorturl.services import RedirectorService, parse_shortcode
from shorturl.services.exceptions import MalformedShortcodeError, UrlRecordNotFoundError
from shorturl.utils import load_config, redis_config, app_prefix, short_url_base, get_short_url, http_method, guarantee_500_response
from shorturl.utils.responses import response_302, response_400, response_404, response_405, response_500
from shorturl.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    INVALID_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    REDIRECT_SUCCESS,
    ALLOWED_METHODS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Check the HTTP method
    - Step 2: Extract and validate shortcode from request path
    - Step 3: Load config and connect to the database
    - Step 4: Record the redirect (count + last access) and get the target URL
    - Step 5: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
                Cache-Control: no-cache, no-store, must-revalidate
        400: Bad client request
            message: missing or invalid shortcode in path parameters
        404: Not found
            message: no short URL with this shortcode
        405: Method not allowed
            headers:
                Allow: GET
        500: Internal server error
            message: server experienced an internal error

    Args:
        event (dict):
            API Gateway event payload containing the shortcode path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'httpMethod': 'GET', 'pathParameters': {'shortcode': '42'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 1- Check HTTP method
    method = http_method(event)
    if method not in ALLOWED_METHODS:
        logger.info(
            'Method %s not allowed. Responding with 405.',
            method,
            extra={'event': METHOD_NOT_ALLOWED},
        )
        return response_405(allowed=ALLOWED_METHODS, error_code=METHOD_NOT_ALLOWED)

    # 2- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info(
            'Missing "shortcode" in path. Responding with 400.',
            extra={'event': MISSING_SHORTCODE},
        )
        return response_400(message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)

    # Reject malformed shortcodes before touching AppConfig or Redis
    try:
        parse_shortcode(shortcode)
    except MalformedShortcodeError as e:
        logger.info(
            'Invalid "shortcode" in path. Responding with 400.',
            extra={'shortcode': shortcode, 'event': INVALID_SHORTCODE},
        )
        return response_400(message=str(e), error_code=INVALID_SHORTCODE)
    logger.debug('Client requested short URL %s.', get_short_url(shortcode, event))

    # 3- Load config and connect to database
    try:
        app_config = load_config('redirect_url')
        dao = UrlRecordRedisDAO(**redis_config(app_config), prefix=app_prefix())
    except (ConfigurationError, InfrastructureError):
        logger.exception(
            'Failed to load configuration for redirect URL function. Responding with 500.',
            extra={'event': CONFIGURATION_ERROR},
        )
        return response_500(error_code=CONFIGURATION_ERROR)
    except DataStoreError:
        logger.exception(
            'Database unreachable. Responding with 500.',
            extra={'event': DATA_STORE_ERROR},
        )
        return response_500(error_code=DATA_STORE_ERROR)

    # 4- Record the redirect and get the target URL
    service = RedirectorService(dao, short_url_base(event))
    try:
        record = service.resolve(shortcode)
    except UrlRecordNotFoundError:
        logger.info(
            'Short URL record not found in database. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return response_404(message=f"short url {get_short_url(shortcode, event)} doesn't exist", error_code=SHORT_URL_NOT_FOUND)
    except DataStoreError:
        logger.exception(
            'Database error while redirecting. Responding with 500.',
            extra={'shortcode': shortcode, 'event': DATA_STORE_ERROR},
        )
        return response_500(error_code=DATA_STORE_ERROR)

    # 5- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 302.',
        extra={'shortcode': shortcode, 'redirects': record.count, 'event': REDIRECT_SUCCESS},
    )
    return response_302(location=record.url)
