"""Client settings.

Values are read once at import time from the environment (or a ``.env``
file) through *python-decouple*.
"""

from decouple import config

API_BASE_URL: str = config("HORTASHOP_API_BASE_URL", default="http://localhost:3000")

# Seconds before an HTTP request is abandoned.
REQUEST_TIMEOUT: float = config("HORTASHOP_REQUEST_TIMEOUT", default=25.0, cast=float)

DEFAULT_PAGE_SIZE: int = config("HORTASHOP_DEFAULT_PAGE_SIZE", default=20, cast=int)

# ---------------------------------------------------------------------------
# Background sync (token registration, notification deletes)
# ---------------------------------------------------------------------------
SYNC_MAX_ATTEMPTS: int = config("HORTASHOP_SYNC_MAX_ATTEMPTS", default=5, cast=int)
SYNC_BACKOFF_BASE: float = config(
    "HORTASHOP_SYNC_BACKOFF_BASE", default=0.5, cast=float
)
SYNC_BACKOFF_MAX: float = config("HORTASHOP_SYNC_BACKOFF_MAX", default=30.0, cast=float)

# Empty means tokens live only in memory for the lifetime of the process.
TOKEN_STORE_PATH: str = config("HORTASHOP_TOKEN_STORE_PATH", default="")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL: str = config("HORTASHOP_LOG_LEVEL", default="INFO")
LOG_JSON: bool = config("HORTASHOP_LOG_JSON", default=True, cast=bool)


def endpoint(path: str, base_url: str | None = None) -> str:
    """Join *path* to the API base URL."""
    base = (base_url or API_BASE_URL).rstrip("/")
    return f"{base}{path if path.startswith('/') else '/' + path}"
