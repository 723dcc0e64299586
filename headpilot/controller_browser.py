"""
Browser controller that executes action intents on Chromium through Playwright.
"""
import logging
from typing import List, Optional, Tuple

from playwright.async_api import Browser, BrowserContext, Locator, Page, Playwright, async_playwright

from .types import EditOption

logger = logging.getLogger(__name__)

TEXT_FIELD_SELECTOR = (
    "input[type='text'], input[type='email'], input[type='search'], input[type='url'], "
    "input[type='tel'], input[type='password'], input:not([type]), textarea, "
    "[contenteditable='true']"
)

HIGHLIGHT_JS = """
([selector, index]) => {
    document.querySelectorAll(selector).forEach((el, i) => {
        el.style.outline = i === index ? '4px solid #FF9800' : '';
    });
}
"""

EVENT_JS = """
([name, detail]) => window.dispatchEvent(new CustomEvent(name, { detail }))
"""


class BrowserController:
    """
    Drives a Chromium page with Playwright's async API.

    Either launches its own browser or attaches to a running one over CDP
    (``cdp_url``, e.g. from ``http://127.0.0.1:9222/json/version``).
    """

    def __init__(self, cdp_url: Optional[str] = None, start_url: str = "https://example.com",
                 headless: bool = False):
        self.cdp_url = cdp_url
        self.start_url = start_url
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._cursor: Tuple[float, float] = (0.0, 0.0)
        self._fields: Optional[Locator] = None

    async def start(self) -> None:
        """Launch or connect to the browser and open the start page."""
        self._playwright = await async_playwright().start()
        chromium = self._playwright.chromium

        if self.cdp_url:
            self._browser = await chromium.connect_over_cdp(self.cdp_url)
            contexts = self._browser.contexts
            self._context = contexts[0] if contexts else await self._browser.new_context()
            pages = self._context.pages
            self._page = pages[0] if pages else await self._context.new_page()
            logger.info("Connected to browser over CDP: %s", self.cdp_url)
        else:
            self._browser = await chromium.launch(headless=self.headless)
            self._context = await self._browser.new_context()
            self._page = await self._context.new_page()
            await self._page.goto(self.start_url)
            logger.info("Launched Chromium at %s", self.start_url)

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("Browser controller closed")

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("BrowserController.start() must be awaited first")
        return self._page

    def _pages(self) -> List[Page]:
        return list(self._context.pages) if self._context is not None else []

    async def _activate(self, page: Page) -> None:
        self._page = page
        self._fields = None
        await page.bring_to_front()

    async def _viewport(self) -> Tuple[int, int]:
        size = self.page.viewport_size
        if size:
            return size["width"], size["height"]
        width, height = await self.page.evaluate("() => [window.innerWidth, window.innerHeight]")
        return int(width), int(height)

    # ===== Page interaction =====

    async def scroll(self, delta_x: float, delta_y: float) -> None:
        await self.page.mouse.wheel(delta_x, delta_y)

    async def move_cursor(self, x: float, y: float) -> None:
        width, height = await self._viewport()
        self._cursor = (x * width, y * height)
        await self.page.mouse.move(*self._cursor)

    async def click(self) -> None:
        await self.page.mouse.click(*self._cursor)

    async def go_back(self) -> None:
        await self.page.go_back()

    async def go_forward(self) -> None:
        await self.page.go_forward()

    async def refresh(self) -> None:
        await self.page.reload()

    # ===== Tabs =====

    async def new_tab(self) -> None:
        page = await self._context.new_page()
        await page.goto(self.start_url)
        await self._activate(page)

    async def close_tab(self) -> None:
        closing = self.page
        pages = self._pages()
        index = pages.index(closing) if closing in pages else 0
        await closing.close()

        remaining = self._pages()
        if not remaining:
            remaining = [await self._context.new_page()]
        await self._activate(remaining[min(index, len(remaining) - 1)])

    async def next_tab(self) -> None:
        await self._cycle_tab(1)

    async def previous_tab(self) -> None:
        await self._cycle_tab(-1)

    async def _cycle_tab(self, step: int) -> None:
        pages = self._pages()
        if len(pages) < 2:
            return
        index = pages.index(self.page) if self.page in pages else 0
        await self._activate(pages[(index + step) % len(pages)])

    # ===== Text fields =====

    async def enable_text_field_mode(self) -> int:
        self._fields = self.page.locator(TEXT_FIELD_SELECTOR)
        count = await self._fields.count()
        logger.info("Found %d editable text fields", count)
        return count

    async def disable_text_field_mode(self) -> None:
        await self.page.evaluate(HIGHLIGHT_JS, [TEXT_FIELD_SELECTOR, -1])
        self._fields = None

    async def next_text_field(self, index: int) -> None:
        await self._highlight(index)

    async def previous_text_field(self, index: int) -> None:
        await self._highlight(index)

    async def _highlight(self, index: int) -> None:
        # Edit-option navigation reuses these calls once a field is selected
        await self.page.evaluate(EVENT_JS, ["headpilot:highlight", index])
        if self._fields is None:
            return
        await self.page.evaluate(HIGHLIGHT_JS, [TEXT_FIELD_SELECTOR, index])
        if index < await self._fields.count():
            await self._fields.nth(index).scroll_into_view_if_needed()

    async def select_text_field(self, index: int) -> None:
        if self._fields is None or index >= await self._fields.count():
            return
        await self._fields.nth(index).focus()
        # Later indices address edit options, not fields
        self._fields = None

    async def confirm_edit_option(self, option: EditOption) -> None:
        await self.page.evaluate(EVENT_JS, ["headpilot:edit-option", option.name.lower()])
