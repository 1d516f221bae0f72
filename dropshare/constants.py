from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Share record retention period (10 minutes)
    SHARE = 600  # 60 * 10


class RateLimit:
    """Default sliding-window rate limit for link creation."""

    LIMIT = 10  # Requests allowed per client address ...
    WINDOW_SECONDS = 10  # ... within this rolling window


class ShareId:
    """Share identifier generation parameters."""

    # URL-safe alphabet: 26 uppercase + 26 lowercase + 10 digits + '_-'
    ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-'
    LENGTH = 10
    MAX_ATTEMPTS = 3  # Attempts to find a free identifier before giving up


class UploadLimits:
    """Client-side batch constraints."""

    MAX_FILES = 5
    MAX_FILE_SIZE = 4 * 1024 * 1024  # 4 MiB
    COMPLETE_DELAY_SECONDS = 1.0  # Pause at 100% before flipping to COMPLETE


# Client address used when no forwarded-address header is present
FALLBACK_CLIENT_ADDRESS = '127.0.0.1'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'

    class Upload(StrEnum):
        BUCKET = 'DROPSHARE_UPLOAD_BUCKET'
        API_URL = 'DROPSHARE_API_URL'

