"""Shared fixtures for Numu tests."""

from collections.abc import Iterator
from zoneinfo import ZoneInfo

import pytest

from numu.utils import dt_utils


@pytest.fixture(autouse=True)
def default_timezone_utc() -> Iterator[None]:
    """Run every test against the UTC local calendar."""
    previous = dt_utils.get_default_timezone()
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(previous)
