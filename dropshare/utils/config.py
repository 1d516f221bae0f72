"""Per-lambda configuration pulled from AWS AppConfig

All lambdas of a deployment share one JSON document, deployed to the AppConfig
environment matching APP_ENV:

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "create_link": {
                "redis": {"host": "...", "port": 6379, "db": 0},
                "rate_limit": {"limit": 10, "window_seconds": 10}
            },
            "share": {"redis": {...}}
        }
    }

`load_config(name)` returns only the caller's slice of it: the active backend's
settings plus `rate_limit` when present. Under `sam local` the document is read
from a local AppConfig agent instead of the AppConfig data API.
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from collections.abc import Callable

import boto3

from dropshare.types import LambdaConfiguration
from dropshare.constants import ENV
from dropshare.exceptions import BadConfigurationError
from dropshare.utils.helpers import require_environment
from dropshare.utils.runtime import running_locally


logger = logging.getLogger(__name__)

AGENT_HOSTS = frozenset({'localhost', '127.0.0.1', 'host.docker.internal', 'appconfig-agent'})
AGENT_PORT = 2772
DEFAULT_PROFILE_NAME = 'backend-config'


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Key prefix for the DAOs, '<APP_NAME>:<app env>'. None without APP_NAME."""
    name = app_name()
    return f'{name}:{app_env()}' if name else None


def extract_lambda_config(document: dict, lambda_name: str) -> LambdaConfiguration:
    """Slice one lambda's settings out of the full document.

    Raises:
        BadConfigurationError:
            If the active backend or the lambda's section is missing.
    """
    try:
        backend = document['active_backend']
        section = document['configs'][lambda_name]
        data = {backend: section[backend]}
    except (KeyError, TypeError) as e:
        raise BadConfigurationError(f"AppConfig document has no usable section for '{lambda_name}'") from e

    if 'rate_limit' in section:
        data['rate_limit'] = section['rate_limit']
    return data


def agent_url() -> str | None:
    """APPCONFIG_AGENT_URL, accepted only when it points at a local agent over http(s)."""
    url = os.getenv(ENV.AppConfig.AGENT_URL)
    if not url:
        return None

    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        raise BadConfigurationError(f'AppConfig agent URL must use http(s): {url}')
    if parsed.hostname not in AGENT_HOSTS:
        raise BadConfigurationError(f'AppConfig agent URL must point at a local agent: {url}')
    if parsed.port not in (AGENT_PORT, None):
        raise BadConfigurationError(f'AppConfig agent URL must use port {AGENT_PORT}: {url}')
    return url


def _prefer_local_agent(func: Callable) -> Callable:
    """Decorator: serve `load_config` from the local AppConfig agent under SAM."""

    @functools.wraps(func)
    def wrapper(lambda_name: str) -> LambdaConfiguration:
        base = agent_url()
        if base is None or not running_locally():
            return func(lambda_name)

        profile = os.getenv(ENV.AppConfig.PROFILE_NAME, DEFAULT_PROFILE_NAME)
        url = f'{base}/applications/{app_name()}/environments/{app_env()}/configurations/{profile}'
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)

        data = extract_lambda_config(document, lambda_name)
        logger.debug('Loaded AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name, 'build': document.get('build')})
        return data

    return wrapper


@_prefer_local_agent
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Fetch the AppConfig document and return the section for `lambda_name`.

    Needs APPCONFIG_APP_ID, APPCONFIG_ENV_ID and APPCONFIG_PROFILE_ID. AWS API
    errors (botocore ClientError) propagate to the caller.

    Raises:
        MissingEnvironmentVariableError:
            If an AppConfig identifier is unset.
        BadConfigurationError:
            If the document has no section for the lambda.
    """
    client = boto3.client('appconfigdata')
    token = client.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']
    payload = client.get_latest_configuration(ConfigurationToken=token)['Configuration'].read()
    document = json.loads(payload)

    data = extract_lambda_config(document, lambda_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return data
