import asyncio
import dataclasses
import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from config import Settings
from errors import UnexpectedInteractionFailure
from scenario import Scenario, ScenarioResult, ScenarioState


logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1366, "height": 900}


def sanitize_for_filename(text: str) -> str:
    """Sanitize text for use in filenames."""
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s]+", "_", text)
    return text.strip("_").lower()[:100]


def get_screenshot_path(screenshots_dir: Path, test_name: str, step_index: int, action_type: str, context: str = "", extension: str = "png") -> Path:
    """Generate a descriptive screenshot path.

    Args:
        test_name: Name of the scenario
        step_index: Step number (1-based)
        action_type: Type of screenshot (failure, success)
        context: Additional context (e.g., the error type)
        extension: File extension (png or jpg)
    """
    test_slug = sanitize_for_filename(test_name)
    action_slug = sanitize_for_filename(action_type)
    context_slug = f"_{sanitize_for_filename(context)}" if context else ""
    filename = f"test_{test_slug}_step{step_index:02d}_{action_slug}{context_slug}.{extension}"
    return screenshots_dir / filename


async def capture_failure(page, result: ScenarioResult, screenshots_dir: Path, delay_ms: int, verbose: bool = False) -> str:
    error_context = result.error.split(":")[0].strip()[:50] if result.error else "error"
    shot = get_screenshot_path(screenshots_dir, result.name, result.failed_index, "failure", context=error_context)
    try:
        if delay_ms > 0:
            await page.wait_for_timeout(delay_ms)
        await page.screenshot(path=str(shot), full_page=True)
    except PlaywrightError as e:
        # the page may already be gone; the failure itself is still reported
        logger.warning("could not save failure screenshot for %s: %s", result.name, e)
        return ""
    if verbose:
        print(f"📸 Failure screenshot saved: {shot.name}")
    return str(shot)


def session_failure(scenario: Scenario, failed_step: str, error: BaseException, started_at: str, start: float) -> ScenarioResult:
    """Failed result for a scenario that never got to run its steps."""
    return ScenarioResult(
        name=scenario.name,
        state=ScenarioState.FAILED,
        steps=(),
        started_at=started_at,
        duration_ms=(time.monotonic() - start) * 1000,
        error=f"{type(error).__name__}: {error}",
        failed_step=failed_step,
    )


async def close_context(context, scenario: Scenario) -> None:
    try:
        await context.close()
    except PlaywrightError as e:
        logger.warning("could not close browser context for %s: %s", scenario.name, e)


async def run_scenario_in_session(browser, scenario: Scenario, screenshots_dir: Path, settings: Settings, listeners: list | None = None, verbose: bool = False) -> ScenarioResult:
    """Run one scenario in its own browser context; the context is always closed.

    A session that cannot be opened or a scenario whose steps cannot be built
    fails that scenario only, so sibling scenarios still report.
    """
    if verbose:
        print(f"\n===== Running Test: {scenario.name} =====")
    started_at = datetime.now(timezone.utc).isoformat()
    start = time.monotonic()
    context = None
    try:
        context = await browser.new_context(viewport=VIEWPORT)
        page = await context.new_page()
    except Exception as e:
        logger.exception("could not open browser session for %s", scenario.name)
        failure = UnexpectedInteractionFailure("open browser session", f"for {scenario.name!r}", e)
        result = session_failure(scenario, "open browser session", failure, started_at, start)
        page = None

    try:
        if page is not None:
            try:
                result = await scenario.run(page, listeners)
            except Exception as e:
                logger.exception("could not build steps for %s", scenario.name)
                result = session_failure(scenario, "build scenario steps", e, started_at, start)
            if not result.passed:
                current_url = page.url
                print(f"✖ Test failed: {scenario.name} — {result.failed_step}: {result.error} (url={current_url})")
                if result.steps:
                    shot = await capture_failure(page, result, screenshots_dir, settings.screenshot_delay_ms, verbose=verbose)
                    result = dataclasses.replace(result, screenshot=shot)
    finally:
        if context is not None:
            await close_context(context, scenario)

    if result.passed:
        print(f"✓ Passed: {scenario.name}")
    else:
        err_excerpt = result.error if len(result.error) < 300 else (result.error[:297] + "...")
        print(f"✖ Failed: {scenario.name} — {err_excerpt}")
    return result


async def run_test_suite(
    scenarios: list[Scenario],
    run_dir: Path,
    settings: Settings | None = None,
    headless: bool = True,
    verbose: bool = False,
    concurrency: int = 1,
    listeners: list | None = None,
) -> dict:
    settings = settings or Settings.from_env()
    screenshots_dir = run_dir / "screenshots"
    screenshots_dir.mkdir(parents=True, exist_ok=True)
    gate = asyncio.Semaphore(max(1, concurrency))

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            async def run_one(scenario: Scenario) -> ScenarioResult:
                async with gate:
                    return await run_scenario_in_session(browser, scenario, screenshots_dir, settings, listeners, verbose)

            results = await asyncio.gather(*(run_one(s) for s in scenarios))
        finally:
            await browser.close()

    return {"base_url": settings.base_url, "tests": [r.to_dict() for r in results]}
