"""Engine backends: one open/fetch/close contract over three collaborators."""

from abc import ABC, abstractmethod
from typing import Any, Callable

import httpx
from bs4 import BeautifulSoup
from playwright.async_api import async_playwright

from .exceptions import NotInitializedError, UnsupportedEngineError
from .extract import collect_from_page, collect_from_soup
from .types import Engine, ScrapeMetadata, ScraperOptions, SelectorSpec

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]

ClientFactory = Callable[[], httpx.AsyncClient]


class Backend(ABC):
    """Loads a URL and applies selector specs to it."""

    engine: Engine

    def __init__(self, options: ScraperOptions):
        self.options = options

    @property
    def has_session(self) -> bool:
        """Whether a browser session is currently held."""
        return False

    async def open(self) -> None:
        """Acquire whatever session the engine needs."""

    @abstractmethod
    async def fetch(
        self, url: str, selectors: list[SelectorSpec]
    ) -> tuple[dict[str, Any], ScrapeMetadata]:
        """Load ``url`` and return (data, metadata) without response_time."""

    async def close(self) -> None:
        """Release the session. Safe to call repeatedly."""


class BrowserBackend(Backend):
    """Shared lifecycle for the Playwright-driven engines."""

    def __init__(self, options: ScraperOptions):
        super().__init__(options)
        self._playwright = None
        self._browser = None
        self._page = None

    @property
    def has_session(self) -> bool:
        return self._browser is not None

    def _launch_options(self) -> dict:
        launch_options: dict[str, Any] = {"headless": self.options.headless}
        if self.options.proxy:
            launch_options["proxy"] = self.options.proxy.model_dump(exclude_none=True)
        return launch_options

    @abstractmethod
    async def _launch(self, playwright) -> None:
        """Launch the browser and open the single page, setting self._browser/_page."""

    async def open(self) -> None:
        self._playwright = await async_playwright().start()
        try:
            await self._launch(self._playwright)
        except Exception:
            await self.close()
            raise

    async def fetch(self, url, selectors):
        if self._page is None:
            raise NotInitializedError(f"{self.engine.value} engine requires init() before scraping")

        response = await self._page.goto(
            url,
            wait_until=self.options.wait_until,
            timeout=self.options.timeout,
        )
        data = await collect_from_page(self._page, selectors)
        title = await self._page.title()
        return data, ScrapeMetadata(
            title=title,
            status_code=response.status if response is not None else None,
        )

    async def close(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        self._page = None
        try:
            if browser is not None:
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()


class ChromiumBackend(BrowserBackend):
    """Full browser: Chromium with the sandbox disabled, UA and viewport on the page."""

    engine = Engine.CHROMIUM

    async def _launch(self, playwright) -> None:
        self._browser = await playwright.chromium.launch(
            args=CHROMIUM_ARGS, **self._launch_options()
        )
        self._page = await self._browser.new_page(
            viewport=self.options.viewport.model_dump(),
            user_agent=self.options.user_agent,
        )


class PlaywrightBackend(BrowserBackend):
    """Cross-browser: any Playwright browser type, UA sent as a request header."""

    engine = Engine.PLAYWRIGHT

    async def _launch(self, playwright) -> None:
        browser_type = getattr(playwright, self.options.browser_type)
        self._browser = await browser_type.launch(**self._launch_options())
        self._page = await self._browser.new_page()
        await self._page.set_viewport_size(self.options.viewport.model_dump())
        await self._page.set_extra_http_headers({"User-Agent": self.options.user_agent})


class SoupBackend(Backend):
    """Lightweight parser: plain HTTP fetch parsed with BeautifulSoup. No session."""

    engine = Engine.SOUP

    def __init__(self, options: ScraperOptions, client_factory: ClientFactory):
        super().__init__(options)
        self._client_factory = client_factory

    async def fetch(self, url, selectors):
        response = await self._client_factory().get(
            url,
            headers={"User-Agent": self.options.user_agent},
            timeout=self.options.timeout / 1000,
            follow_redirects=True,
        )
        response.raise_for_status()

        body = response.text
        soup = BeautifulSoup(body, "html.parser", multi_valued_attributes=None)
        data = await collect_from_soup(soup, selectors)
        return data, ScrapeMetadata(
            title=soup.title.get_text() if soup.title else "",
            status_code=response.status_code,
            content_length=len(body),
        )


def resolve_engine(value: str) -> Engine:
    """Map a configured engine name to an Engine, or raise UnsupportedEngineError."""
    try:
        return Engine(value)
    except ValueError:
        raise UnsupportedEngineError(value) from None


def create_backend(engine: Engine, options: ScraperOptions, client_factory: ClientFactory) -> Backend:
    if engine is Engine.CHROMIUM:
        return ChromiumBackend(options)
    if engine is Engine.PLAYWRIGHT:
        return PlaywrightBackend(options)
    return SoupBackend(options, client_factory)
