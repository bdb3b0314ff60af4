"""
Shared pytest configuration for all tests.
Sets up test settings and common fixtures.
"""
import os
import sys
from datetime import date
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load test environment variables before any imports
from dotenv import load_dotenv

# Load test-specific environment variables
test_env_path = Path(__file__).parent.parent / ".env.test"
if test_env_path.exists():
    load_dotenv(test_env_path, override=True)
else:
    # Fallback to hardcoded test values if .env.test doesn't exist
    os.environ["NEO4J_URI"] = "bolt://localhost:7688"
    os.environ["NEO4J_USER"] = "neo4j"
    os.environ["NEO4J_PASSWORD"] = "testpassword123"
    os.environ["API_KEY"] = "test-api-key"


@pytest.fixture(autouse=True)
def requirement_table():
    """Load the bundled requirement table and restore it after each test"""
    from services import document_requirements
    table = document_requirements.reload_requirement_table()
    yield table
    document_requirements._table = table


@pytest.fixture
def reference_date():
    return date(2024, 1, 10)
