import logging

from shorturl.types import LambdaEvent, LambdaContext, LambdaResponse
from shorturl.constants import CONFIGURATION_ERROR, DATA_STORE_ERROR, METHOD_NOT_ALLOWED
from shorturl.exceptions import ConfigurationError, InfrastructureError
from shorturl.dao.redis import UrlRecordRedisDAO
from shorturl.dao.exceptions import DataStoreError
from shorturl.services import StatisticsService
from shorturl.utils import load_config, redis_config, app_prefix, short_url_base, http_method, guarantee_500_response
from shorturl.utils.responses import response_200, response_405, response_500
from shorturl.lambdas.list_stats.constants import STATS_SUCCESS, ALLOWED_METHODS


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle GET /stat: list redirect statistics of every short URL

    HTTP responses:
        200: JSON array, one entry per short URL:
            {"url": ..., "shortUrl": ..., "redirects": 3, "lastAccess": "2025-10-15T12:00:00.000Z"}
        405: Method not allowed
        500: Internal server error

    Example:
        >>> response = lambda_handler({'httpMethod': 'GET'}, None)
        >>> json.loads(response['body'])
        [{'url': 'https://example.com', 'shortUrl': 'http://localhost:3000/my/1', 'redirects': 1, 'lastAccess': '...'}]
    """
    method = http_method(event)
    if method not in ALLOWED_METHODS:
        logger.info(
            'Method %s not allowed. Responding with 405.',
            method,
            extra={'event': METHOD_NOT_ALLOWED},
        )
        return response_405(allowed=ALLOWED_METHODS, error_code=METHOD_NOT_ALLOWED)

    try:
        app_config = load_config('list_stats')
        dao = UrlRecordRedisDAO(**redis_config(app_config), prefix=app_prefix())
    except (ConfigurationError, InfrastructureError):
        logger.exception(
            'Failed to load configuration for list stats function. Responding with 500.',
            extra={'event': CONFIGURATION_ERROR},
        )
        return response_500(error_code=CONFIGURATION_ERROR)
    except DataStoreError:
        logger.exception(
            'Database unreachable. Responding with 500.',
            extra={'event': DATA_STORE_ERROR},
        )
        return response_500(error_code=DATA_STORE_ERROR)

    try:
        stats = StatisticsService(dao, short_url_base(event)).list_stats()
    except DataStoreError:
        logger.exception(
            'Database error while listing statistics. Responding with 500.',
            extra={'event': DATA_STORE_ERROR},
        )
        return response_500(error_code=DATA_STORE_ERROR)

    logger.info(
        'Listed statistics of %d short URLs. Responding with 200.',
        len(stats),
        extra={'event': STATS_SUCCESS},
    )
    return response_200([stat.to_dict() for stat in stats])
