from enum import StrEnum


# Key under which the whole short URL collection is stored (one JSON array)
STORAGE_KEY = 'url_shortener_data'


class Validity:
    """Validity period bounds in minutes."""

    DEFAULT = 30
    MIN = 1
    MAX = 1440  # 60 * 24


class Shortcode:
    """Shortcode generation parameters."""

    LENGTH = 6
    MAX_ATTEMPTS = 10


# Seconds to wait before navigating to the target URL
REDIRECT_DELAY_SECONDS = 1.5

# Maximum amount of URLs shortened by a single request
MAX_URLS_PER_REQUEST = 5

# Click metadata fallbacks
DIRECT_SOURCE = 'direct'
UNKNOWN_LOCATION = 'unknown'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        PROJECT_ROOT = 'PROJECT_ROOT'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'

    class RemoteLog(StrEnum):
        SERVER_URL = 'LOG_SERVER_URL'
        CLIENT_ID = 'LOG_CLIENT_ID'
        CLIENT_SECRET = 'LOG_CLIENT_SECRET'  # noqa: S105


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
