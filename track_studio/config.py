"""Central configuration for the track studio tooling.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Every tunable can be overridden from environment
variables (optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except ImportError:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------
# Slope (%) above which a step counts as climbing, below its negative as
# descending. Anything in between is flat.
METRICS_MIN_SLOPE = _env_float("METRICS_MIN_SLOPE", 1.0)

# Speed (m/s) and gap (seconds) thresholds used to flag idle steps.
METRICS_STOP_SPEED_LIMIT = _env_float("METRICS_STOP_SPEED_LIMIT", 0.3)
METRICS_STOP_DURATION = _env_float("METRICS_STOP_DURATION", 60.0)


# ---------------------------------------------------------------------------
# Elevation providers
# ---------------------------------------------------------------------------
# Chunk size used when a provider declares no limit.
ELEVATION_DEFAULT_MAX_PER_QUERY = _env_int(
    "ELEVATION_DEFAULT_MAX_PER_QUERY", 10_000_000
)

# Threads used to fetch chunks in parallel.
ELEVATION_MAX_WORKERS = _env_int("ELEVATION_MAX_WORKERS", 4)

# Upper bound (seconds) the join waits for a single chunk. Set to 0 to wait
# forever.
ELEVATION_CHUNK_TIMEOUT = _env_float("ELEVATION_CHUNK_TIMEOUT", 120.0)

OPEN_ELEVATION_URL = os.getenv(
    "OPEN_ELEVATION_URL", "https://api.open-elevation.com/api/v1/lookup"
)
IGN_GEOPORTAIL_URL = os.getenv(
    "IGN_GEOPORTAIL_URL",
    "https://data.geopf.fr/altimetrie/1.0/calcul/alti/rest/elevation.json",
)
IGN_GEOPORTAIL_RESOURCE = os.getenv("IGN_GEOPORTAIL_RESOURCE", "ign_rge_alti_wld")

# Documented hard cap of the IGN altimetry service.
IGN_MAX_PER_QUERY = _env_int("IGN_MAX_PER_QUERY", 5000)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
# HTTP session pool sizes for concurrent requests.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 15.0)

# Retries applied by the session adapter on 5xx responses.
HTTP_MAX_RETRIES = _env_int("HTTP_MAX_RETRIES", 3)
HTTP_BACKOFF_FACTOR = _env_float("HTTP_BACKOFF_FACTOR", 1.0)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
# Directory (absolute or relative) holding persisted journeys.
STORAGE_DIR = os.getenv("TRACK_STUDIO_STORAGE_DIR", "track_studio_data")

# Show start/stop flags only on the journey limits (first start, last stop).
POIS_ON_LIMITS = _env_bool("POIS_ON_LIMITS", True)
