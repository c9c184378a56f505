"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to access
configuration data stored in **AWS AppConfig**. Each environment (`APP_ENV`)
has a dedicated AppConfig *Environment* within the shared AppConfig
*Application* identified by `APP_NAME`. Configuration data is stored as a JSON
document under a configuration profile (typically `backend-config`).

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "shorten_url": {
                "redis": {"host": "...", "port": 6379, "db": 0}
            },
            "redirect_url": {
                "redis": { ... }
            },
            "list_stats": {
                "redis": { ... }
            }
        }
    }

Each Lambda loads its own section (e.g., `"shorten_url"`) from this AppConfig
document.

Typical usage inside a Lambda handler:
    >>> from shorturl.utils.config import load_config
    >>> config = load_config('shorten_url')
    >>> print(config['redis']['host'])
    redis-15501.host.docker.internal
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from collections.abc import Callable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shorturl.types import AppConfig, AppConfigDataClient, LambdaConfiguration
from shorturl.constants import ENV, Defaults
from shorturl.exceptions import AppConfigError, BadConfigurationError
from shorturl.utils.helpers import require_environment
from shorturl.utils.runtime import running_locally


logger = logging.getLogger(__name__)

LOCAL_AGENT_HOSTS = frozenset({'localhost', '127.0.0.1', 'host.docker.internal', 'appconfig-agent'})
LOCAL_AGENT_PORTS = frozenset({2772, None})


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return the Redis key prefix '<app name>:<app env>', or None if APP_NAME is not set."""
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def lambda_section(document: AppConfig, lambda_name: str) -> LambdaConfiguration:
    """Extract a Lambda's configuration for the active backend from an AppConfig document

    Raises:
        BadConfigurationError:
            If the document lacks the active backend or the Lambda's section.
    """
    try:
        backend = document['active_backend']
        return {backend: document['configs'][lambda_name][backend]}
    except (KeyError, TypeError) as e:
        raise BadConfigurationError(f"AppConfig document has no '{lambda_name}' section for the active backend.") from e


def validate_agent_url(url: str | None) -> str:
    """Return the local AppConfig agent URL if it is safe to use, '' if unset

    Raises:
        BadConfigurationError:
            If the URL has a bad scheme, a non-local host or an unexpected port.
    """
    if not url:
        return ''
    components = urllib.parse.urlparse(url)
    if components.scheme not in {'http', 'https'}:
        raise BadConfigurationError(f'Bad scheme {url}')
    if components.hostname not in LOCAL_AGENT_HOSTS:
        raise BadConfigurationError(f'Bad host {url}')
    if components.port not in LOCAL_AGENT_PORTS:
        raise BadConfigurationError(f'Bad port {url}')
    return url


def _sam_load_local_appconfig(func: Callable) -> Callable:
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM.

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local
          AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     : Base URL of the local AppConfig Agent (e.g., http://appconfig-agent:2772).
        APPCONFIG_PROFILE_NAME  : Optional profile name (default: "backend-config").
    """

    @functools.wraps(func)
    def wrapper(lambda_name: str) -> LambdaConfiguration:
        agent_url = validate_agent_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(lambda_name)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, Defaults.APPCONFIG_PROFILE_NAME)
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        try:
            with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
                document = json.load(r)
        except (OSError, json.JSONDecodeError) as e:
            raise AppConfigError(f'Failed to load AppConfig from local agent at {url}.') from e

        data = lambda_section(document, lambda_name)
        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
        return data

    return wrapper


def _fetch_appconfig_document(appconfig: AppConfigDataClient) -> AppConfig:
    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    return json.loads(content.decode('utf-8'))


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig.

    Fetches the AppConfig JSON once and returns the section relevant to the
    requested Lambda function (e.g., 'shorten_url', 'redirect_url', 'list_stats').

    Environment variables required:
        APPCONFIG_APP_ID       : AppConfig Application ID
        APPCONFIG_ENV_ID       : AppConfig Environment ID
        APPCONFIG_PROFILE_ID   : AppConfig Configuration Profile ID

    Returns:
        dict: {<active backend>: <lambda's backend section>}

    Raises:
        MissingEnvironmentVariableError:
            If any of the required environment variables is missing.
        AppConfigError:
            If AppConfig can't be reached or returns a document that isn't JSON.
        BadConfigurationError:
            If the document has no section for this Lambda.

    Example:
        >>> app_config = load_config('shorten_url')
        >>> app_config['redis']['host']
        'redis-15501.host.docker.internal'
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    try:
        document = _fetch_appconfig_document(boto3.client('appconfigdata'))
    except (BotoCoreError, ClientError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AppConfigError('Failed to load AppConfig from AWS AppConfig.') from e

    data = lambda_section(document, lambda_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return data


def redis_config(app_config: LambdaConfiguration) -> dict:
    """Map a Lambda's 'redis' section to DAO keyword arguments

    Example:
        >>> redis_config({'redis': {'host': 'redis.test', 'port': 6379}})
        {'redis_host': 'redis.test', 'redis_port': 6379}

    Raises:
        BadConfigurationError:
            If the configuration has no 'redis' section.
    """
    try:
        section = app_config['redis']
    except KeyError as e:
        raise BadConfigurationError("Only the 'redis' backend is supported.") from e
    return {f'redis_{k}': v for k, v in section.items()}
