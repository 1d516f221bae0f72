from dropshare.utils.config import app_env, app_name, app_prefix, load_config
from dropshare.utils.helpers import (
    base_url,
    share_url,
    download_url,
    get_header,
    client_address,
    require_environment,
    guarantee_500_response,
)
from dropshare.utils.shortener import generate_share_id
from dropshare.utils.logging import initialize_logging


__all__ = [
    'generate_share_id',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'base_url',
    'share_url',
    'download_url',
    'get_header',
    'client_address',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
