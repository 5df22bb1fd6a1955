"""Shared fixtures for the test suite."""

import pytest

from fakes import RecordingSleep


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
