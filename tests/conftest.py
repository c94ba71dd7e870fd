"""Pytest configuration and fixtures for dupcheck tests."""

import json
import pytest
from unittest.mock import Mock
from typing import Any, Dict

# Add the project root to the Python path
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

FIXTURES_DIR = Path(__file__).parent / "fixtures"

from dupcheck.config import Config
from dupcheck.store.weaviate_store import VectorHit


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory so `run_tests.py unit|integration` works."""
    for item in items:
        path = str(item.path)
        if "/unit/" in path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in path:
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def test_config() -> Config:
    """Configuration isolated from any local .env file."""
    return Config(
        _env_file=None,
        llm_provider="openai",
        openai_api_key="test-openai-key",
        openai_model="gpt-4o",
        collection_name="BugzillaDefect_Test",
    )


@pytest.fixture
def sample_defect_payload() -> Dict[str, Any]:
    """Defect as stored in the ingestion JSON files (lowercase keys)."""
    return {
        "id": 1234567,
        "summary": "Browser crashes when rendering large canvas",
        "description": "Firefox crashes with a segfault in the graphics layer when a page draws a 16k x 16k canvas.",
        "severity": "critical",
        "status": "NEW",
        "resolution": "",
        "keywords": ["crash", "regression"],
        "component": "Graphics",
        "priority": "P1",
        "comments": ["Reproducible on nightly.", "Stack points at gfx texture upload."],
    }


@pytest.fixture
def valid_report_payload() -> Dict[str, Any]:
    return {
        "IsDuplicate": True,
        "Reason": "Same texture upload overflow in the graphics layer.",
        "Defects": [
            {
                "Id": 1234567,
                "Summary": "Browser crashes when rendering large canvas",
                "Description": "Firefox crashes with a segfault in the graphics layer.",
                "Severity": "critical",
                "Status": "NEW",
                "Component": "Graphics",
                "Priority": "P1",
            }
        ],
        "Confidence": 0.93,
    }


@pytest.fixture
def mock_embeddings():
    embeddings = Mock()
    embeddings.embed_query.return_value = [0.1, 0.2, 0.3]
    return embeddings


@pytest.fixture
def make_hit():
    """Build a VectorHit the way DefectVectorStore.near_vector returns it."""
    def _make(defect_id="1234567", summary="Crash", description="Crash on load", distance=0.1):
        props = {"summary": summary, "description": description}
        if defect_id is not None:
            props["defectId"] = defect_id
        return VectorHit(properties=props, distance=distance)
    return _make


@pytest.fixture
def mock_store(make_hit):
    store = Mock()
    store.near_vector.return_value = [make_hit()]
    return store


@pytest.fixture
def llm_returning():
    """Chat model double whose invoke() returns a message with ``content``."""
    def _make(content):
        llm = Mock()
        if isinstance(content, dict):
            content = json.dumps(content)
        llm.invoke.return_value = Mock(content=content)
        return llm
    return _make
