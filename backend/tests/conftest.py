from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

# Load .env from backend root deterministically (…/backend/.env)
BACKEND_DIR = Path(__file__).resolve().parents[1]
DOTENV_PATH = BACKEND_DIR / ".env"
load_dotenv(dotenv_path=DOTENV_PATH, override=False)

# Keep test runs from writing logs into the working tree
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="export-logs-")

# Import FastAPI app after env is loaded, so startup sees correct settings
from app.main import app  # noqa: E402
from app.routers import export as export_router  # noqa: E402
from app.exporter import ExportSession  # noqa: E402


SAMPLE_RANKING_INFO = """Document weights:
Title: 0; Quality: 180; Date: 405; Adjacency: 0; Source: 500; Custom: 350; Collaborative rating: 0; QRE: 1000; Ranking functions: 0;

Total weight: 2435

Terms weights:
printer: 100, 4; printers: 50, 1;
Title: 800; Concept: 0; Summary: 300; URI: 0; Formatted: 0; Casing: 0; Relation: 0; Frequency: 1018;
ink: 80, 2;
Title: 0; Summary: 120; Frequency: 60;

Total weight: 2298

QRE:
Expression: "@source==Manuals" Score: 1000
Expression: "@filetype=pdf" Score: 250

Ranking Functions:
"""


@pytest.fixture
def sample_ranking_info() -> str:
    return SAMPLE_RANKING_INFO


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Session-wide FastAPI test client."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def fresh_export_session(monkeypatch):
    """Each test talks to its own export session (no captured request, idle status)."""
    monkeypatch.setattr(export_router, "session", ExportSession())
