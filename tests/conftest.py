from __future__ import annotations

import pytest

from compute_firewall import Compute
from tests.fakes import PROJECT_ID, FakeHttp


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def compute(http: FakeHttp) -> Compute:
    return Compute(PROJECT_ID, http, poll_interval=0, operation_timeout=1)  # type: ignore[arg-type]
