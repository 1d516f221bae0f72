import os

from dropshare.constants import ENV


def running_locally() -> bool:
    """Whether the lambda runs under `sam local` (or with APP_ENV=local)."""
    return os.getenv(ENV.App.AWS_SAM_LOCAL) == 'true' or os.getenv(ENV.App.APP_ENV, '').lower() == 'local'
