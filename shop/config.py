"""Configuration and constants for the shop data layer."""

import os
from pathlib import Path

from dotenv import load_dotenv

__all__ = [
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_KEY",
    "REMOTE_TIMEOUT",
    "FALLBACK_DB_PATH",
    "BULK_MAX_WORKERS",
    "SENTINEL_COLLECTION",
    "SITE_CONFIG_ID",
    "LOG_LEVEL",
]

_PROJECT_ROOT = Path(__file__).parent.parent

# Environment overrides come from .env at the project root
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

# Hosted data service (PostgREST + auth). Keys come from .env in practice.
SUPABASE_URL = os.getenv("SUPABASE_URL", "http://localhost:54321").rstrip("/")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
# Optional; used for writes and admin calls when set
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")

# Request timeout in seconds
REMOTE_TIMEOUT = float(os.getenv("REMOTE_TIMEOUT", "10"))

# Local snapshot used when the remote store is unreachable at startup
FALLBACK_DB_PATH = os.getenv("FALLBACK_DB_PATH", str(_PROJECT_ROOT / "data" / "fallback.db"))

# Parallel remote calls for bulk product edits
BULK_MAX_WORKERS = int(os.getenv("BULK_MAX_WORKERS", "4"))

# Synthetic "all" collection; never stored on a product
SENTINEL_COLLECTION = "Todas"

# Primary key of the singleton site_config row
SITE_CONFIG_ID = 1

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
