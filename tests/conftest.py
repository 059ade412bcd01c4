"""Pytest configuration for the landing page scenario tests."""
import pytest

from config import Settings
from fakes import BASE_URL, FakePage, landing_site


@pytest.fixture
def settings():
    """Settings with short wait windows so timeouts resolve quickly."""
    return Settings(
        base_url=BASE_URL,
        step_timeout_ms=200,
        navigation_timeout_ms=1000,
        poll_interval_ms=10,
        screenshot_delay_ms=0,
    )


@pytest.fixture
def landing_page():
    """A fake page on which every landing page check passes."""
    return FakePage(landing_site())
