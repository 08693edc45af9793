"""Playwright renderer that produces the HTML handed to the localizer."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Playwright

from .config import SnapshotConfig
from .models import RenderedPage

logger = logging.getLogger("site_snapshot")

# Steps through the page so lazy content loads, then returns to the top.
SCROLL_TO_BOTTOM_JS = """async () => {
    await new Promise(resolve => {
        let scrolled = 0;
        const step = Math.max(Math.floor(window.innerHeight * 0.85), 200);
        const timer = setInterval(() => {
            window.scrollBy(0, step);
            scrolled += step;
            if (scrolled >= document.documentElement.scrollHeight) {
                clearInterval(timer);
                resolve();
            }
        }, 100);
    });
    window.scrollTo(0, 0);
}"""
PAGE_SIZE_JS = """() => [
    Math.max(document.documentElement.scrollWidth, document.documentElement.clientWidth),
    Math.max(document.documentElement.scrollHeight, document.documentElement.clientHeight),
]"""


async def capture_screenshot(page: Page, mode: str, percent: int = 100) -> bytes:
    """PNG of the visible viewport, the whole page, or its top ``percent``."""
    if mode == "viewport":
        return await page.screenshot(type="png")

    await page.evaluate(SCROLL_TO_BOTTOM_JS)
    if mode == "full":
        return await page.screenshot(type="png", full_page=True)

    width, height = await page.evaluate(PAGE_SIZE_JS)
    clip = {"x": 0, "y": 0, "width": width, "height": max(int(height * percent / 100), 1)}
    return await page.screenshot(type="png", full_page=True, clip=clip)


async def render_page(
    playwright: Playwright,
    url: str,
    config: SnapshotConfig,
) -> RenderedPage:
    """Navigate to a URL and return the settled HTML and the final URL.

    A configured ``user_data_dir`` is opened as a persistent browser profile;
    otherwise a throwaway browser and context are launched. The HTML is read
    before any screenshot scrolling so both modes see the same document.
    """
    width, height = config.viewport
    context_options = {
        "user_agent": config.user_agent,
        "viewport": {"width": width, "height": height},
    }
    browser = None
    if config.user_data_dir is not None:
        context = await playwright.chromium.launch_persistent_context(
            str(config.user_data_dir),
            headless=config.headless,
            **context_options,
        )
    else:
        browser = await playwright.chromium.launch(headless=config.headless)
        context = await browser.new_context(**context_options)

    screenshot: Optional[bytes] = None
    try:
        page = await context.new_page()
        page.set_default_navigation_timeout(config.navigation_timeout * 1000)
        logger.info("Loading %s", url)
        await page.goto(url, wait_until="networkidle")
        if config.wait_after_load:
            await page.wait_for_timeout(int(config.wait_after_load * 1000))
        html = await page.content()
        final_url = page.url
        if config.screenshot:
            try:
                screenshot = await capture_screenshot(
                    page, config.screenshot, config.screenshot_percent
                )
            except PlaywrightError as exc:
                logger.warning("Screenshot of %s failed: %s", url, exc)
    finally:
        await context.close()
        if browser is not None:
            await browser.close()
    return RenderedPage(html=html, final_url=final_url, screenshot=screenshot)
