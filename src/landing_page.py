"""Link and CTA checks for the SaaSto marketing landing page.

Every scenario starts on the base URL with the hero heading visible, then
follows one header link, the Login/Sign up links, or the hero CTA and
checks where it lands.
"""

import re

from assertions import assert_url, assert_visible
from config import Settings
from locators import button, heading, link, resolve, resolve_first_visible
from navigator import click, navigate
from scenario import NamedAction, Scenario, ScenarioCase, ScenarioSet


HERO_HEADING = heading(re.compile(r"Committed To People", re.I))

HEADER_LINKS = ScenarioSet([
    ScenarioCase("Home", re.compile(r"\/(#top)?$", re.I)),
    ScenarioCase("About us", re.compile(r"#about", re.I)),
    ScenarioCase("Services", re.compile(r"#services", re.I)),
    ScenarioCase("Blog", re.compile(r"\/blog(\/)?(#.*)?$", re.I)),
    ScenarioCase("Contact us", re.compile(r"#contact", re.I)),
])

LOGIN_URL = re.compile(r"\/login(\/)?$", re.I)
SIGNUP_URL = re.compile(r"\/signup(\/)?$", re.I)

CTA_LABEL = "Get Started Now"


class PageSteps:
    """Step bodies bound to one session page and the run settings."""

    def __init__(self, page, settings: Settings):
        self.page = page
        self.settings = settings

    async def open_landing(self):
        await navigate(
            self.page,
            self.settings.base_url,
            landmark=HERO_HEADING,
            timeout=self.settings.navigation_timeout_ms / 1000,
            landmark_timeout=self.settings.step_timeout,
            interval=self.settings.poll_interval,
        )

    async def see(self, descriptor):
        await assert_visible(
            resolve(self.page, descriptor),
            timeout=self.settings.step_timeout,
            interval=self.settings.poll_interval,
            description=descriptor.describe(),
        )

    async def click(self, descriptor):
        await click(resolve(self.page, descriptor), timeout=self.settings.step_timeout, description=descriptor.describe())

    async def see_and_click(self, descriptor):
        await self.see(descriptor)
        await self.click(descriptor)

    async def url_matches(self, pattern):
        await assert_url(self.page, pattern, timeout=self.settings.step_timeout, interval=self.settings.poll_interval)

    async def first_visible(self, alternatives):
        return await resolve_first_visible(
            self.page,
            alternatives,
            timeout=self.settings.step_timeout,
            interval=self.settings.poll_interval,
        )


def landing_setup(settings: Settings):
    def setup(page):
        steps = PageSteps(page, settings)
        return [NamedAction("open landing page and check hero heading", steps.open_landing)]
    return setup


def header_link_steps(case: ScenarioCase, page, settings: Settings) -> list[NamedAction]:
    steps = PageSteps(page, settings)
    target = link(case.label)
    return [
        NamedAction(f'"{case.label}" link is visible', lambda: steps.see(target)),
        NamedAction(f'click "{case.label}"', lambda: steps.click(target)),
        NamedAction(f'URL after clicking "{case.label}"', lambda: steps.url_matches(case.expected_url)),
    ]


def destination_steps(label: str, expected_url: re.Pattern, expected_heading: re.Pattern):
    """Click link ``label``, then require both the URL and the page heading."""
    def build(page, settings: Settings) -> list[NamedAction]:
        steps = PageSteps(page, settings)

        async def landed():
            await steps.url_matches(expected_url)
            await steps.see(heading(expected_heading))

        return [
            NamedAction(f'click "{label}" link', lambda: steps.see_and_click(link(label))),
            NamedAction(f"{label} page URL and heading", landed),
        ]
    return build


def cta_steps(page, settings: Settings) -> list[NamedAction]:
    steps = PageSteps(page, settings)
    # the CTA may be rendered as either role
    alternatives = (button(CTA_LABEL), link(CTA_LABEL))

    async def click_cta():
        descriptor, _ = await steps.first_visible(alternatives)
        await steps.click(descriptor)

    return [
        NamedAction(f'CTA "{CTA_LABEL}" is visible', lambda: steps.first_visible(alternatives)),
        NamedAction(f'click CTA "{CTA_LABEL}"', click_cta),
        NamedAction("URL after clicking CTA", lambda: steps.url_matches(settings.cta_url)),
    ]


def build_suite(settings: Settings | None = None) -> list[Scenario]:
    settings = settings or Settings.from_env()
    setup = landing_setup(settings)
    login = destination_steps("Login", LOGIN_URL, re.compile(r"Login", re.I))
    signup = destination_steps("Sign up", SIGNUP_URL, re.compile(r"Sign up", re.I))

    suite = HEADER_LINKS.expand(
        lambda case, page: header_link_steps(case, page, settings),
        name_format='header link "{label}" navigates to expected location',
        setup=setup,
    )
    suite.append(Scenario(
        "Login link navigates to login page",
        build=lambda page: login(page, settings),
        setup=setup,
    ))
    suite.append(Scenario(
        "Sign up link navigates to signup page",
        build=lambda page: signup(page, settings),
        setup=setup,
    ))
    suite.append(Scenario(
        f'hero CTA "{CTA_LABEL}" navigates to signup or trial page',
        build=lambda page: cta_steps(page, settings),
        setup=setup,
    ))
    return suite
