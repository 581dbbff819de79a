"""Shared fixtures for the cfn-cleaner test suite."""

import pytest
from helpers import SleepRecorder


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()
