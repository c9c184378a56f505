"""Unit tests for configuration utilities in config.py

Test coverage includes:

1. Environment variable resolution
   - Ensures app_env(), app_name(), app_prefix() correctly read environment variables.

2. Configuration loading behavior
   - Ensures load_config() returns the Lambda's section of the AppConfig document.
   - Ensures AppConfig failures and malformed documents raise AppConfigError.
   - Ensures missing Lambda sections raise BadConfigurationError.
   - Ensures missing AppConfig identifiers raise MissingEnvironmentVariableError.

3. Local AppConfig agent
   - Ensures the local agent is used only when running locally with a safe URL.
   - Ensures unsafe agent URLs raise BadConfigurationError.

4. Redis section mapping
   - Ensures redis_config() maps keys to DAO keyword arguments.
"""

import os
import json
from io import BytesIO
from unittest.mock import MagicMock

import pytest
import botocore

from shorturl.utils import config
from shorturl.exceptions import AppConfigError, BadConfigurationError, MissingEnvironmentVariableError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture(autouse=True)
def _appconfig_env(monkeypatch):
    """Set up environment variables for testing."""
    monkeypatch.setenv('APPCONFIG_APP_ID', 'app123')
    monkeypatch.setenv('APPCONFIG_ENV_ID', 'env123')
    monkeypatch.setenv('APPCONFIG_PROFILE_ID', 'prof123')
    monkeypatch.delenv('APPCONFIG_AGENT_URL', raising=False)
    monkeypatch.delenv('APPCONFIG_PROFILE_NAME', raising=False)


@pytest.fixture
def appconfig_payload():
    """Provide a default AppConfig payload used by multiple tests."""
    # fmt: off
    return {
        'build': 42,
        'active_backend': 'redis',
        'configs': {
            'test_lambda': {
                'redis': {
                    'host': 'monkey',
                    'port': 659595,
                    'db': 3
                }
            }
        },
    }
    # fmt: on


@pytest.fixture
def appconfig_client(monkeypatch, appconfig_payload):
    """Mock the AppConfig Data client returned by boto3.client('appconfigdata')."""
    client = MagicMock()
    client.start_configuration_session.return_value = {'InitialConfigurationToken': 'monkey_token'}
    client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8'))}
    monkeypatch.setattr(config.boto3, 'client', lambda service: client)
    return client


# -------------------------------
# 1. Environment variable resolution
# -------------------------------


def test_app_env(monkeypatch):
    """Ensure app_env() returns the lower-cased value of APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_ENV', 'Prod')
    assert config.app_env() == 'prod'


def test_app_env_defaults_to_local(monkeypatch):
    monkeypatch.delenv('APP_ENV', raising=False)
    assert config.app_env() == 'local'


def test_app_name(monkeypatch):
    """Ensure app_name() returns the correct environment value from APP_NAME"""
    monkeypatch.setitem(os.environ, 'APP_NAME', 'test-app')
    assert config.app_name() == 'test-app'


def test_app_prefix(monkeypatch):
    """Ensure app_prefix() combines APP_NAME and APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_NAME', 'test-app')
    monkeypatch.setitem(os.environ, 'APP_ENV', 'test')
    assert config.app_prefix() == 'test-app:test'


def test_app_prefix_without_app_name():
    """Ensure keys are left unprefixed when APP_NAME is not set"""
    assert config.app_prefix() is None


# -------------------------------
# 2. Configuration loading behavior
# -------------------------------


def test_load_config(appconfig_client):
    """Ensure load_config() returns the Lambda's section for the active backend."""
    result = config.load_config('test_lambda')

    assert result == {'redis': {'host': 'monkey', 'port': 659595, 'db': 3}}
    appconfig_client.start_configuration_session.assert_called_once_with(
        ApplicationIdentifier='app123',
        EnvironmentIdentifier='env123',
        ConfigurationProfileIdentifier='prof123',
    )
    appconfig_client.get_latest_configuration.assert_called_once_with(ConfigurationToken='monkey_token')


def test_load_config_with_appconfig_client_error(appconfig_client):
    """Ensure AppConfig errors surface as AppConfigError."""
    appconfig_client.start_configuration_session.side_effect = botocore.exceptions.ClientError(
        {'Error': {'Code': 'ResourceNotFoundException'}}, 'StartConfigurationSession'
    )

    with pytest.raises(AppConfigError) as exc_info:
        config.load_config('test_lambda')
    assert isinstance(exc_info.value.__cause__, botocore.exceptions.ClientError)


def test_load_config_with_malformed_document(appconfig_client):
    appconfig_client.get_latest_configuration.return_value = {'Configuration': BytesIO(b'{not json')}

    with pytest.raises(AppConfigError):
        config.load_config('test_lambda')


def test_load_config_with_missing_lambda_section(appconfig_client):
    with pytest.raises(BadConfigurationError, match="no 'other_lambda' section"):
        config.load_config('other_lambda')


@pytest.mark.parametrize('name', ['APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID', 'APPCONFIG_PROFILE_ID'])
def test_load_config_with_missing_environment(monkeypatch, appconfig_client, name):
    monkeypatch.delenv(name)

    with pytest.raises(MissingEnvironmentVariableError, match=name):
        config.load_config('test_lambda')

    appconfig_client.start_configuration_session.assert_not_called()


# -------------------------------
# 3. Local AppConfig agent
# -------------------------------


@pytest.mark.parametrize(
    'url',
    [
        'http://localhost:2772',
        'http://127.0.0.1:2772',
        'http://appconfig-agent:2772',
        'https://host.docker.internal',
    ],
)
def test_validate_agent_url(url):
    assert config.validate_agent_url(url) == url


def test_validate_agent_url_unset():
    assert config.validate_agent_url(None) == ''
    assert config.validate_agent_url('') == ''


@pytest.mark.parametrize(
    'url, reason',
    [
        ('ftp://localhost:2772', 'Bad scheme'),
        ('http://evil.example.com:2772', 'Bad host'),
        ('http://localhost:8080', 'Bad port'),
    ],
)
def test_validate_agent_url_rejects_unsafe_urls(url, reason):
    with pytest.raises(BadConfigurationError, match=reason):
        config.validate_agent_url(url)


def test_load_config_from_local_agent(monkeypatch, appconfig_client, appconfig_payload):
    """Ensure the local agent is used when running locally, bypassing boto3."""
    monkeypatch.setenv('APP_ENV', 'local')
    monkeypatch.setenv('APP_NAME', 'shorturl')
    monkeypatch.setenv('APPCONFIG_AGENT_URL', 'http://localhost:2772')

    response = MagicMock()
    response.__enter__.return_value = BytesIO(json.dumps(appconfig_payload).encode('utf-8'))
    urlopen = MagicMock(return_value=response)
    monkeypatch.setattr(config.urllib.request, 'urlopen', urlopen)

    result = config.load_config('test_lambda')

    assert result == {'redis': {'host': 'monkey', 'port': 659595, 'db': 3}}
    urlopen.assert_called_once_with(
        'http://localhost:2772/applications/shorturl/environments/local/configurations/backend-config',
        timeout=5,
    )
    appconfig_client.start_configuration_session.assert_not_called()


def test_load_config_from_unreachable_local_agent(monkeypatch, appconfig_client):
    monkeypatch.setenv('APP_ENV', 'local')
    monkeypatch.setenv('APPCONFIG_AGENT_URL', 'http://localhost:2772')
    monkeypatch.setattr(config.urllib.request, 'urlopen', MagicMock(side_effect=OSError('Connection refused')))

    with pytest.raises(AppConfigError, match='local agent'):
        config.load_config('test_lambda')


def test_load_config_ignores_agent_when_deployed(monkeypatch, appconfig_client):
    """Ensure deployed Lambdas always read AppConfig through boto3."""
    monkeypatch.setenv('APPCONFIG_AGENT_URL', 'http://localhost:2772')
    urlopen = MagicMock()
    monkeypatch.setattr(config.urllib.request, 'urlopen', urlopen)

    config.load_config('test_lambda')

    urlopen.assert_not_called()
    appconfig_client.start_configuration_session.assert_called_once()


# -------------------------------
# 4. Redis section mapping
# -------------------------------


def test_redis_config():
    section = {'redis': {'host': 'redis.test', 'port': 6379, 'db': 0, 'password': 'secret'}}
    assert config.redis_config(section) == {
        'redis_host': 'redis.test',
        'redis_port': 6379,
        'redis_db': 0,
        'redis_password': 'secret',
    }


def test_redis_config_without_redis_section():
    with pytest.raises(BadConfigurationError):
        config.redis_config({'dynamodb': {'table': 'links'}})
