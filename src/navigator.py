import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from assertions import DEFAULT_INTERVAL, DEFAULT_TIMEOUT, assert_visible
from errors import AssertionTimeout, UnexpectedInteractionFailure
from locators import RoleLocator, resolve


logger = logging.getLogger(__name__)


async def navigate(
    page,
    url: str,
    landmark: RoleLocator | None = None,
    timeout: float = 30.0,
    landmark_timeout: float = DEFAULT_TIMEOUT,
    interval: float = DEFAULT_INTERVAL,
) -> None:
    """Open ``url`` and, if given, wait until ``landmark`` is visible."""
    logger.debug("navigate %s", url)
    try:
        await page.goto(url, timeout=timeout * 1000)
    except PlaywrightTimeoutError:
        raise AssertionTimeout(f"navigation to {url}", "page load", page.url, timeout) from None
    except PlaywrightError as e:
        raise UnexpectedInteractionFailure("navigate", url, e) from e
    if landmark is not None:
        await assert_visible(
            resolve(page, landmark),
            timeout=landmark_timeout,
            interval=interval,
            description=landmark.describe(),
        )


async def click(locator, timeout: float = DEFAULT_TIMEOUT, description: str = "") -> None:
    target = description or str(locator)
    logger.debug("click %s", target)
    try:
        await locator.click(timeout=timeout * 1000)
    except PlaywrightTimeoutError:
        raise AssertionTimeout(f"click on {target}", "actionable", "not actionable", timeout) from None
    except PlaywrightError as e:
        raise UnexpectedInteractionFailure("click", target, e) from e
