import asyncio
import logging
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from playwright.async_api import Error as PlaywrightError

from errors import ElementNotFound


logger = logging.getLogger(__name__)


class Role(str, Enum):
    HEADING = "heading"
    LINK = "link"
    BUTTON = "button"


@dataclass(frozen=True)
class RoleLocator:
    """Semantic query for an element: ARIA role plus accessible name.

    A descriptor, not a handle. Every ``resolve`` builds a fresh Playwright
    locator, which the driver re-evaluates against the live page on each
    query, so nothing goes stale after a navigation or a click.

    String names match like Playwright's default ``getByRole``: a
    case-insensitive substring, so "Login" also finds "Login now". Pass
    ``exact=True`` for a whole-string, case-sensitive match.
    """

    role: Role
    name: str | re.Pattern
    exact: bool = False

    def describe(self) -> str:
        if isinstance(self.name, re.Pattern):
            flags = "i" if self.name.flags & re.I else ""
            return f"{self.role.value} /{self.name.pattern}/{flags}"
        return f'{self.role.value} "{self.name}"'


def heading(name, exact: bool = False) -> RoleLocator:
    return RoleLocator(Role.HEADING, name, exact)


def link(name, exact: bool = False) -> RoleLocator:
    return RoleLocator(Role.LINK, name, exact)


def button(name, exact: bool = False) -> RoleLocator:
    return RoleLocator(Role.BUTTON, name, exact)


def resolve(page, descriptor: RoleLocator):
    # exact is ignored by Playwright when name is a regex
    return page.get_by_role(descriptor.role.value, name=descriptor.name, exact=descriptor.exact)


async def is_visible(locator) -> bool:
    """Visibility check that never raises; driver errors read as not visible."""
    try:
        return await locator.is_visible()
    except PlaywrightError as e:
        logger.debug("visibility check failed: %s", e)
        return False


async def resolve_first_visible(
    page,
    alternatives: Sequence[RoleLocator],
    timeout: float = 5.0,
    interval: float = 0.1,
):
    """Return ``(descriptor, locator)`` for the first alternative that is visible.

    Alternatives are tried left to right on every poll until one is visible or
    ``timeout`` elapses, then ``ElementNotFound`` lists everything attempted.
    """
    if not alternatives:
        raise ValueError("resolve_first_visible needs at least one descriptor")
    deadline = time.monotonic() + timeout
    while True:
        for descriptor in alternatives:
            loc = resolve(page, descriptor)
            if await is_visible(loc):
                logger.debug("resolved %s", descriptor.describe())
                return descriptor, loc
        if time.monotonic() >= deadline:
            raise ElementNotFound(alternatives, timeout)
        await asyncio.sleep(interval)
