"""
API endpoints, credential environment variables, and execution constants.

All constants used across the request pipeline are centralized here so that
config is separated from logic.  Credentials are never stored in this module;
only the names of the environment variables that hold them.
"""

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

API_BASE_URL = "https://api.soundcloud.com"

TRACKS_URL = f"{API_BASE_URL}/tracks"
USERS_URL = f"{API_BASE_URL}/users"
OAUTH_TOKEN_URL = f"{API_BASE_URL}/oauth2/token"

# ---------------------------------------------------------------------------
# Credentials (read with os.getenv when not passed explicitly)
# ---------------------------------------------------------------------------

CLIENT_ID_ENV = "SOUNDCLOUD_CLIENT_ID"
CLIENT_SECRET_ENV = "SOUNDCLOUD_CLIENT_SECRET"

# ---------------------------------------------------------------------------
# Execution parameters
# ---------------------------------------------------------------------------

REQUEST_TIMEOUT_SECONDS: int = 30  # HTTP request timeout, enforced by the transport
MAX_WORKERS: int = 4               # concurrent logical operations per client

# Statuses meaning "the credential was rejected"
AUTH_EXPIRED_STATUSES: frozenset[int] = frozenset({401})

# Error bodies that signal an expired token even when the status is not 401
AUTH_EXPIRED_MESSAGES: tuple[str, ...] = (
    "401 - unauthorized",
    "invalid_token",
    "expired_token",
)

# Every collection endpoint is asked for the cursor envelope
# {"collection": [...], "next_href": "..."}
LINKED_PARTITIONING: dict[str, str] = {"linked_partitioning": "true"}
