"""Constants used in the project."""

from enum import IntEnum


class FetchStatus(IntEnum):
    """Status codes recorded for fetch attempts.

    Mostly HTTP codes; 290, 490 and 491 are site-specific.
    """

    OK = 200
    HAS_INCOMPLETE_PACKAGES = 290
    FOUND = 302
    BAD_REQUEST = 400
    NOT_FOUND = 404
    ALTERNATIVE_MODULE = 490
    BAD_MODULE = 491
    INTERNAL_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504


RECOGNIZED_STATUSES = frozenset(int(s) for s in FetchStatus)
TERMINAL_STATUSES = frozenset({FetchStatus.ALTERNATIVE_MODULE, FetchStatus.BAD_MODULE})


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LATEST_VERSION = "latest"
    EXPERIMENT_NOT_AT_V1 = "not-at-v1"
    ALTERNATIVE_MODULE_FLASH = "tmp-redirected-from-alternative-module"
    PSEUDO_VERSION_LIMIT = 10
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "MODSERVE_LOG_LEVEL"
    DEFAULT_HOST = "127.0.0.1"
    DEFAULT_PORT = 8080
    DEFAULT_DB_PATH = "modserve.db"
    HEALTH_PATH = "/_modserve/health"
