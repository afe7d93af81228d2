"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from pathlib import Path
from typing import Dict, Any

from policywatch.logger import get_logger
from policywatch.models import Snapshot

# Create the shared logger before policywatch.monitor binds it, without a logs/ file.
get_logger(enable_file=False, enable_console=False)


POLICY_URL = "https://support.example.com/policies/answer/1001"

BASE_POLICY = (
    "Home > Policies > Shopping ads\n"
    "Skip to main content\n"
    "Advertisers must provide accurate pricing information for every product they list. "
    "Listings that promote counterfeit goods are not allowed on the platform. "
    "Merchants shall display shipping costs clearly before checkout. "
    "Customers should be able to return items within a reasonable period. "
    "Ads for alcohol are allowed in supported countries only when they comply with local law.\n"
    "Was this helpful? Yes No\n"
    "Need more help? Post to the Help Community"
)


@pytest.fixture
def base_policy_text() -> str:
    """Policy page text with breadcrumb, skip link and feedback footer."""
    return BASE_POLICY


@pytest.fixture
def previous_snapshot() -> Snapshot:
    return Snapshot.capture(POLICY_URL, BASE_POLICY, title="Shopping ads policy")


@pytest.fixture
def make_snapshot():
    """Factory for snapshots of the monitored URL."""
    def _make(content: str, url: str = POLICY_URL, title: str = "Shopping ads policy") -> Snapshot:
        return Snapshot.capture(url, content, title=title)
    return _make


@pytest.fixture
def valid_snapshot_data() -> Dict[str, Any]:
    """Valid snapshot dict as produced by the extraction step."""
    return {
        "url": POLICY_URL,
        "title": "Shopping ads policy",
        "content": BASE_POLICY,
        "last_modified": "2026-09-01T10:00:00",
        "extracted_at": "2026-10-01T08:30:00",
    }


@pytest.fixture
def temp_store_file(tmp_path) -> Path:
    """Create an empty JSON snapshot store."""
    store_file = tmp_path / "snapshots.json"
    store_file.write_text(json.dumps({"snapshots": {}}))
    return store_file
