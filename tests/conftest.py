from __future__ import annotations

from datetime import datetime

import pytest

from taskreport.models import Task
from taskreport.pipeline.aggregate import aggregate


NOW = datetime(2024, 1, 15, 15, 4, 5)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def sample_report():
    # buckets inserted out of chronological order on purpose
    tasks = {
        "2024-01-15": [
            Task("t2", "Write report", True, "2024-01-15"),
            Task("t3", "Email client", False, "2024-01-15"),
        ],
        "2024-01-14": [Task("t1", "Buy groceries", True, "2024-01-14")],
    }
    return aggregate(tasks, "2024-01-09", "2024-01-15")
