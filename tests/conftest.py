from __future__ import annotations

from datetime import datetime, timezone

import pytest

from nutcounter.services.config import Settings
from nutcounter.services.status_store import StatusStore

FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def status_store():
    return StatusStore()


@pytest.fixture
def settings():
    return Settings(
        roboflow_api_key="rf_secret_key_123",
        roboflow_workflow_url="http://workflow.test/run",
        google_sheet_id="sheet-id",
        google_credentials_json='{"client_email": "bot@x.iam", "private_key": "k"}',
        vocabulary=("walnut", "almond"),
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
