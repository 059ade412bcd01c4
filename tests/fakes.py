"""In-memory stand-ins for the slice of the Playwright async API the runner uses."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urldefrag, urljoin

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


@dataclass
class FakeElement:
    role: str
    name: str
    href: str | None = None
    text: str | None = None
    hidden: bool = False
    # number of visibility checks that report hidden before the element shows up
    appears_after: int = 0
    click_error: Exception | None = None

    def __post_init__(self):
        self.checks = 0
        self.clicks = 0

    def visible(self) -> bool:
        self.checks += 1
        return not self.hidden and self.checks > self.appears_after


def _name_matches(actual: str, name, exact: bool) -> bool:
    if isinstance(name, re.Pattern):
        return bool(name.search(actual))
    if exact:
        return actual == name
    return name.lower() in actual.lower()


class FakeLocator:
    def __init__(self, page: FakePage, role: str, name, exact: bool):
        self.page = page
        self.role = role
        self.name = name
        self.exact = exact

    def __repr__(self):
        return f"FakeLocator(role={self.role!r}, name={self.name!r})"

    def matches(self) -> list[FakeElement]:
        return [
            el for el in self.page.elements
            if el.role == self.role and _name_matches(el.name, self.name, self.exact)
        ]

    def _single(self) -> FakeElement | None:
        found = self.matches()
        if len(found) > 1:
            raise PlaywrightError(f"strict mode violation: {self!r} resolved to {len(found)} elements")
        return found[0] if found else None

    async def is_visible(self) -> bool:
        el = self._single()
        return bool(el and el.visible())

    async def inner_text(self, timeout: float | None = None) -> str:
        el = self._single()
        if el is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self!r}")
        return el.text if el.text is not None else el.name

    async def click(self, timeout: float | None = None) -> None:
        el = self._single()
        if el is None or el.hidden:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self!r}")
        el.clicks += 1
        self.page.clicked.append(el.name)
        if el.click_error is not None:
            raise el.click_error
        if el.href is not None:
            self.page.load(urljoin(self.page.url, el.href))


class FakePage:
    """A tiny site: ``routes`` maps a URL (without fragment) to its elements."""

    def __init__(self, routes: dict[str, list[FakeElement]] | None = None, goto_error: Exception | None = None):
        self.routes = routes or {}
        self.goto_error = goto_error
        self.url = "about:blank"
        self.elements: list[FakeElement] = []
        self.visited: list[str] = []
        self.clicked: list[str] = []
        self.screenshots: list[str] = []
        self.waited_ms = 0

    def load(self, url: str) -> None:
        page_url, _ = urldefrag(url)
        current, _ = urldefrag(self.url)
        if page_url != current:
            self.elements = list(self.routes.get(page_url, []))
        self.url = url

    def get_by_role(self, role: str, name=None, exact: bool | None = None) -> FakeLocator:
        return FakeLocator(self, role, name, bool(exact))

    async def goto(self, url: str, timeout: float | None = None):
        self.visited.append(url)
        if self.goto_error is not None:
            raise self.goto_error
        self.load(url)

    async def wait_for_timeout(self, ms: float) -> None:
        self.waited_ms += ms

    async def screenshot(self, path: str, full_page: bool = False) -> bytes:
        Path(path).write_bytes(b"\x89PNG fake")
        self.screenshots.append(path)
        return b""


class FakeContext:
    def __init__(self, page: FakePage):
        self.page = page
        self.closed = False

    async def new_page(self) -> FakePage:
        return self.page

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    """Hands out a fresh page per context, built by ``page_factory``."""

    def __init__(self, page_factory):
        self.page_factory = page_factory
        self.contexts: list[FakeContext] = []
        self.closed = False

    async def new_context(self, **kwargs) -> FakeContext:
        context = FakeContext(self.page_factory())
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True


class FakePlaywright:
    """Replacement for ``async_playwright()`` that launches a FakeBrowser."""

    def __init__(self, browser: FakeBrowser):
        self.browser = browser
        self.chromium = self
        self.launch_kwargs = None

    def __call__(self):
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def launch(self, **kwargs) -> FakeBrowser:
        self.launch_kwargs = kwargs
        return self.browser


BASE_URL = "http://lp.test/"


def landing_site(cta_role: str | None = "button", cta_href: str = "/signup") -> dict[str, list[FakeElement]]:
    """Routes for a landing page whose links all go where they should."""
    home = [
        FakeElement("heading", "We Are Committed To People"),
        FakeElement("link", "Home", href="/#top"),
        FakeElement("link", "About us", href="#about"),
        FakeElement("link", "Services", href="#services"),
        FakeElement("link", "Blog", href="/blog/"),
        FakeElement("link", "Contact us", href="#contact"),
        FakeElement("link", "Login", href="/login"),
        FakeElement("link", "Sign up", href="/signup"),
    ]
    if cta_role:
        home.append(FakeElement(cta_role, "Get Started Now", href=cta_href))
    return {
        "http://lp.test/": home,
        "http://lp.test/blog/": [FakeElement("heading", "Blog")],
        "http://lp.test/login": [FakeElement("heading", "Login to SaaSto")],
        "http://lp.test/signup": [FakeElement("heading", "Sign up for free")],
        "http://lp.test/trial/": [FakeElement("heading", "Start your trial")],
    }
