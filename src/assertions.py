import asyncio
import logging
import re
import time

from playwright.async_api import Error as PlaywrightError

from errors import AssertionTimeout
from locators import is_visible


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_INTERVAL = 0.1


def as_pattern(expected) -> re.Pattern:
    if isinstance(expected, re.Pattern):
        return expected
    return re.compile(expected, re.I)


async def _poll(observe, check, subject: str, expected, timeout: float, interval: float):
    """Poll ``observe()`` until ``check(observed)`` holds; at least one observation is made."""
    deadline = time.monotonic() + timeout
    while True:
        observed = await observe()
        if check(observed):
            return observed
        if time.monotonic() >= deadline:
            raise AssertionTimeout(subject, expected, observed, timeout)
        await asyncio.sleep(interval)


async def assert_visible(locator, timeout: float = DEFAULT_TIMEOUT, interval: float = DEFAULT_INTERVAL, description: str = ""):
    subject = f"visibility of {description or locator}"
    await _poll(lambda: is_visible(locator), bool, subject, "visible", timeout, interval)


async def assert_url(page, pattern, timeout: float = DEFAULT_TIMEOUT, interval: float = DEFAULT_INTERVAL) -> str:
    regex = as_pattern(pattern)

    async def current_url():
        return page.url

    url = await _poll(current_url, lambda u: bool(regex.search(u or "")), "page URL", regex, timeout, interval)
    logger.debug("URL %s matches /%s/", url, regex.pattern)
    return url


async def assert_text(locator, expected, timeout: float = DEFAULT_TIMEOUT, interval: float = DEFAULT_INTERVAL, description: str = "") -> str:
    if isinstance(expected, re.Pattern):
        matches = lambda text: text is not None and bool(expected.search(text))
    else:
        matches = lambda text: text is not None and expected in text

    async def current_text():
        try:
            return await locator.inner_text(timeout=interval * 1000)
        except PlaywrightError:
            return None

    subject = f"text of {description or locator}"
    return await _poll(current_text, matches, subject, expected, timeout, interval)
