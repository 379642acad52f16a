"""Shared fixtures."""

import pytest

from constants import Constants


@pytest.fixture(autouse=True)
def restore_constants():
    """Snapshot Constants tunables so config/CLI tests cannot leak overrides."""
    saved = {
        key: value for key, value in vars(Constants).items()
        if key.isupper()
    }
    yield
    for key, value in saved.items():
        setattr(Constants, key, value)
