# app/config.py
"""
Environment-driven settings for the exporter.

Values are read on every call (not cached at import) so scripts that load
.env late, and tests that monkeypatch the environment, both see the current
value.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env locally; in deployment the variables come from the environment
DOTENV_PATH = Path(__file__).resolve().parent.parent / ".env"
if DOTENV_PATH.exists():
    load_dotenv(DOTENV_PATH, override=False)

DEFAULT_SEARCH_PATH = "/coveo/rest/search/v2"
DEFAULT_COUNT = 500
DEFAULT_TIMEOUT = 30.0
DEFAULT_EXPORT_DIR = "tools/out"


def search_path() -> str:
    """URL fragment that marks an outbound request as the main search query."""
    return os.getenv("COVEO_SEARCH_PATH") or DEFAULT_SEARCH_PATH


def default_count() -> int:
    raw = os.getenv("EXPORT_DEFAULT_COUNT")
    try:
        return int(raw) if raw else DEFAULT_COUNT
    except ValueError:
        return DEFAULT_COUNT


def request_timeout() -> float:
    raw = os.getenv("EXPORT_TIMEOUT")
    try:
        return float(raw) if raw else DEFAULT_TIMEOUT
    except ValueError:
        return DEFAULT_TIMEOUT


def export_dir() -> str:
    return os.getenv("EXPORT_DIR") or DEFAULT_EXPORT_DIR
