import json
import base64
import binascii
import logging

from shorturl.types import LambdaEvent, LambdaContext, LambdaResponse
from shorturl.constants import CONFIGURATION_ERROR, DATA_STORE_ERROR, METHOD_NOT_ALLOWED
from shorturl.exceptions import ConfigurationError, InfrastructureError
from shorturl.dao.redis import UrlRecordRedisDAO
from shorturl.dao.exceptions import ConcurrentWriteError, DataStoreError
from shorturl.services import ShortenerService, validate_url
from shorturl.services.exceptions import MalformedUrlError
from shorturl.utils import load_config, redis_config, app_prefix, short_url_base, http_method, guarantee_500_response
from shorturl.utils.responses import response_200, response_400, response_405, response_409, response_500
from shorturl.lambdas.shorten_url.constants import (
    MISSING_URL,
    INVALID_URL,
    INVALID_JSON,
    CONCURRENT_WRITE,
    SHORTEN_SUCCESS,
    QUERY_ROUTE,
    ALLOWED_METHODS,
)


logger = logging.getLogger(__name__)


class BadRequestBodyError(ValueError):
    """Raised when a POST body can't be decoded into a JSON object."""


def request_body(event: LambdaEvent) -> dict:
    """Decode the JSON object sent in a POST body

    Raises:
        BadRequestBodyError:
            If the body isn't valid (optionally base64-encoded) JSON, or isn't a JSON object.
    """
    body = event.get('body') or '{}'
    try:
        if event.get('isBase64Encoded'):
            body = base64.b64decode(body, validate=True).decode('utf-8')
        payload = json.loads(body)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise BadRequestBodyError('invalid JSON body') from e

    if not isinstance(payload, dict):
        raise BadRequestBodyError('JSON body must be an object')
    return payload


def request_route(event: LambdaEvent, method: str) -> str | None:
    """Pick the route a request was made on

    API Gateway sets `resource` to the matched route template. Events without a
    known resource (direct invocations, `sam local invoke`) fall back to the
    route that accepts the request method, or None when no route does.
    """
    resource = event.get('resource')
    if resource in ALLOWED_METHODS:
        return resource
    for route, methods in ALLOWED_METHODS.items():
        if method in methods:
            return route
    return None


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    Two routes share this handler and the same find-or-create logic:
        GET  /shorten_simple?url=<long url>
        POST /shorten   {"url": "<long url>"}

    Shortening a URL twice returns the same short URL.

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Check the HTTP method is allowed on the route
    - Step 2: Extract the long URL from the query string or the JSON body, by route
    - Step 3: Load config and connect to the database
    - Step 4: Find or create the URL record (via ShortenerService)
    - Step 5: Respond to user with 200 success

    HTTP responses:
        200: Successful URL shortening
            url: original url (as provided in the request)
            shortUrl: short url of the (new or existing) record
        400: Bad client request
            message: invalid JSON, missing or invalid url
        405: Method not allowed
            headers:
                Allow: GET on /shorten_simple, POST on /shorten
        409: Conflict
            message: the url stayed contended by concurrent requests
        500: Internal server error
            message: server experienced an internal error

    Args:
        event (dict):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'resource': '/shorten', 'httpMethod': 'POST', 'body': '{"url": "https://example.com"}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])
        {'url': 'https://example.com', 'shortUrl': 'http://localhost:3000/my/1'}
    """
    # 1- Check HTTP method against the route
    method = http_method(event)
    route = request_route(event, method)
    if route is None or method not in ALLOWED_METHODS[route]:
        allowed = ALLOWED_METHODS[route] if route else tuple(m for methods in ALLOWED_METHODS.values() for m in methods)
        logger.info(
            'Method %s not allowed on %s. Responding with 405.',
            method,
            route or event.get('resource'),
            extra={'event': METHOD_NOT_ALLOWED},
        )
        return response_405(allowed=allowed, error_code=METHOD_NOT_ALLOWED)

    # 2- Extract long URL from query string (/shorten_simple) or JSON body (/shorten)
    if route == QUERY_ROUTE:
        url = (event.get('queryStringParameters') or {}).get('url')
    else:
        try:
            url = request_body(event).get('url')
        except BadRequestBodyError as e:
            logger.info(
                'Invalid JSON body. Responding with 400.',
                extra={'event': INVALID_JSON},
            )
            return response_400(message=str(e), error_code=INVALID_JSON)

    if url is None or url == '':
        logger.info(
            'Missing "url" in request. Responding with 400.',
            extra={'event': MISSING_URL},
        )
        return response_400(message="missing 'url'", error_code=MISSING_URL)

    try:
        validate_url(url)
    except MalformedUrlError as e:
        logger.info(
            'Invalid "url" in request. Responding with 400.',
            extra={'event': INVALID_URL},
        )
        return response_400(message=str(e), error_code=INVALID_URL)

    # 3- Load config and connect to database
    try:
        app_config = load_config('shorten_url')
        dao = UrlRecordRedisDAO(**redis_config(app_config), prefix=app_prefix())
    except (ConfigurationError, InfrastructureError):
        logger.exception(
            'Failed to load configuration for shorten URL function. Responding with 500.',
            extra={'event': CONFIGURATION_ERROR},
        )
        return response_500(error_code=CONFIGURATION_ERROR)
    except DataStoreError:
        logger.exception(
            'Database unreachable. Responding with 500.',
            extra={'event': DATA_STORE_ERROR},
        )
        return response_500(error_code=DATA_STORE_ERROR)

    # 4- Find or create the URL record
    service = ShortenerService(dao, short_url_base(event))
    try:
        result = service.shorten(url)
    except ConcurrentWriteError:
        logger.warning(
            'URL stayed contended by concurrent requests. Responding with 409.',
            extra={'event': CONCURRENT_WRITE},
        )
        return response_409(message='concurrent requests for the same url, try again', error_code=CONCURRENT_WRITE)
    except DataStoreError:
        logger.exception(
            'Database error while shortening URL. Responding with 500.',
            extra={'event': DATA_STORE_ERROR},
        )
        return response_500(error_code=DATA_STORE_ERROR)

    # 5- Return successful response to user
    logger.info(
        'Shortened URL. Responding with 200.',
        extra={'record_id': result.record.id, 'event': SHORTEN_SUCCESS},
    )
    return response_200({'url': result.url, 'shortUrl': result.short_url})
