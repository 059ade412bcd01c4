"""Tests for role descriptors and fallback-OR resolution."""

import re

import pytest

from errors import ElementNotFound
from fakes import FakeElement, FakePage
from locators import Role, RoleLocator, button, heading, is_visible, link, resolve, resolve_first_visible


def page_with(*elements):
    page = FakePage({"http://lp.test/": list(elements)})
    page.load("http://lp.test/")
    return page


class TestDescribe:

    def test_string_name(self):
        assert link("Blog").describe() == 'link "Blog"'

    def test_pattern_name(self):
        assert heading(re.compile("Login", re.I)).describe() == "heading /Login/i"

    def test_helpers_set_role(self):
        assert button("Go").role is Role.BUTTON
        assert RoleLocator(Role.LINK, "x").exact is False


@pytest.mark.asyncio
async def test_resolve_is_lazy_against_current_page():
    page = page_with(FakeElement("link", "Blog"))
    loc = resolve(page, link("Blog"))
    assert await loc.is_visible()
    page.elements = []
    assert not await loc.is_visible()


@pytest.mark.asyncio
async def test_string_name_matches_case_insensitive_substring():
    page = page_with(FakeElement("link", "Blog posts"))
    assert await is_visible(resolve(page, link("blog")))
    assert not await is_visible(resolve(page, link("Blog", exact=True)))
    assert await is_visible(resolve(page, link("Blog posts", exact=True)))


@pytest.mark.asyncio
async def test_is_visible_swallows_driver_errors():
    page = page_with(FakeElement("link", "Home"), FakeElement("link", "Home"))
    assert await is_visible(resolve(page, link("Home"))) is False


class TestResolveFirstVisible:

    @pytest.mark.asyncio
    async def test_first_alternative_wins(self):
        page = page_with(FakeElement("button", "Get Started Now"), FakeElement("link", "Get Started Now"))
        descriptor, _ = await resolve_first_visible(page, [button("Get Started Now"), link("Get Started Now")], timeout=0.1, interval=0.01)
        assert descriptor == button("Get Started Now")

    @pytest.mark.asyncio
    async def test_falls_back_to_second(self):
        page = page_with(FakeElement("link", "Get Started Now"))
        descriptor, loc = await resolve_first_visible(page, [button("Get Started Now"), link("Get Started Now")], timeout=0.1, interval=0.01)
        assert descriptor.role is Role.LINK
        assert await loc.is_visible()

    @pytest.mark.asyncio
    async def test_hidden_element_is_skipped(self):
        page = page_with(
            FakeElement("button", "Get Started Now", hidden=True),
            FakeElement("link", "Get Started Now"),
        )
        descriptor, _ = await resolve_first_visible(page, [button("Get Started Now"), link("Get Started Now")], timeout=0.1, interval=0.01)
        assert descriptor.role is Role.LINK

    @pytest.mark.asyncio
    async def test_polls_until_element_appears(self):
        el = FakeElement("button", "Get Started Now", appears_after=3)
        page = page_with(el)
        descriptor, _ = await resolve_first_visible(page, [button("Get Started Now")], timeout=1.0, interval=0.01)
        assert descriptor.role is Role.BUTTON
        assert el.checks == 4

    @pytest.mark.asyncio
    async def test_none_visible_lists_all_attempts(self):
        page = page_with(FakeElement("link", "Pricing"))
        alternatives = [button("Get Started Now"), link("Get Started Now")]
        with pytest.raises(ElementNotFound) as excinfo:
            await resolve_first_visible(page, alternatives, timeout=0.05, interval=0.01)
        assert excinfo.value.descriptors == tuple(alternatives)
        message = str(excinfo.value)
        assert 'button "Get Started Now"' in message
        assert 'link "Get Started Now"' in message

    @pytest.mark.asyncio
    async def test_empty_alternatives_rejected(self):
        with pytest.raises(ValueError):
            await resolve_first_visible(page_with(), [], timeout=0.01)
