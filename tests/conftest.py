from typing import Any, List

import pytest

from datautils.core.exceptions import DatabaseConnectionError
from tests.fakes import FakeBatchHelper


@pytest.fixture
def batch_helper() -> FakeBatchHelper:
    return FakeBatchHelper()


@pytest.fixture
def connect_refused() -> DatabaseConnectionError:
    return DatabaseConnectionError("connection refused")


@pytest.fixture
def five_rows() -> List[List[Any]]:
    return [[i, f"name-{i}"] for i in range(1, 6)]
