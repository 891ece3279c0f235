"""
Test configuration and fixtures for the Page Audit API.

The environment is pinned before the app is imported so every test runs
against in-memory storage, a throwaway SQLite file and no generative calls.
"""

import os
import tempfile
from typing import Generator

from dotenv import load_dotenv

import pytest
from fastapi.testclient import TestClient

load_dotenv()

test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["GENERATIVE_ANALYSIS_ENABLED"] = "false"
os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "page_audit_test_logs")


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    This fixture provides a clean TestClient instance for each test function,
    ensuring proper isolation between tests.
    """
    with TestClient(test_app) as test_client:
        yield test_client
