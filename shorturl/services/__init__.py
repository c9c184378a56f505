from shorturl.services.shortener import ShortenerService, validate_url
from shorturl.services.redirector import RedirectorService, parse_shortcode
from shorturl.services.statistics import StatisticsService


__all__ = [
    'ShortenerService',
    'validate_url',
    'RedirectorService',
    'parse_shortcode',
    'StatisticsService',
]
