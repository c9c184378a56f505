from enum import StrEnum


class Limits:
    """Input and retry limits."""

    MAX_URL_LENGTH = 2048  # Longest accepted long URL (characters)
    MAX_SHORTCODE_LENGTH = 19  # Redis INCR counters are signed 64-bit integers
    SHORTEN_MAX_ATTEMPTS = 5  # find-or-create attempts before giving up on a contended URL
    MIN_REDIS_VERSION = (6, 2, 0)  # ZADD GT


class Defaults:
    """Default values for optional configuration."""

    REDIRECT_PATH_PREFIX = 'my'
    LOCAL_BASE_URL = 'http://localhost:3000'
    LOG_LEVEL = 'INFO'
    APPCONFIG_PROFILE_NAME = 'backend-config'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'
        PUBLIC_BASE_URL = 'PUBLIC_BASE_URL'
        REDIRECT_PATH_PREFIX = 'REDIRECT_PATH_PREFIX'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'


# Redirect responses must never be cached: every hit updates statistics
NO_CACHE_HEADER_VALUE = 'no-cache, no-store, must-revalidate'

# Error codes shared by all handlers
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
CONFIGURATION_ERROR = 'CONFIGURATION_ERROR'
DATA_STORE_ERROR = 'DATA_STORE_ERROR'
METHOD_NOT_ALLOWED = 'METHOD_NOT_ALLOWED'
