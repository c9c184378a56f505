from shorturl.utils.config import app_env, app_name, app_prefix, load_config, redis_config
from shorturl.utils.helpers import (
    base_url,
    redirect_path_prefix,
    short_url_base,
    get_short_url,
    http_method,
    require_environment,
    guarantee_500_response,
)
from shorturl.utils.logging import initialize_logging


__all__ = [
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'redis_config',
    'base_url',
    'redirect_path_prefix',
    'short_url_base',
    'get_short_url',
    'http_method',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
