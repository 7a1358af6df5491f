"""Core scraping functionality: the Skyscraper facade."""

import asyncio
import inspect
import logging
import time
from typing import Any, Mapping

import httpx

from .backends import Backend, create_backend, resolve_engine
from .config import merge_options, resolve_options
from .exceptions import InitializationError, NotInitializedError, RequestError
from .logging_utils import log_event
from .types import (
    BatchConfig,
    BatchOutcome,
    Engine,
    RequestOptions,
    ScrapeError,
    ScrapeMetadata,
    ScrapeResult,
    ScraperOptions,
    SelectorSpec,
)

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class Skyscraper:
    """Scrape pages through a browser or an HTML parser with one result shape.

    Usage:
        async with Skyscraper(engine="soup", timeout=10000) as scraper:
            result = await scraper.scrape(url, [SelectorSpec(selector="h1", text=True)])

    A facade instance runs one operation at a time. ``init()`` must be called
    at most once before scraping with a browser engine; the soup engine works
    without it.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | ScraperOptions | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        **overrides: Any,
    ):
        if isinstance(options, ScraperOptions):
            options = options.model_dump()
        self._options = resolve_options({**(options or {}), **overrides})
        self._backend: Backend | None = None
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "Skyscraper":
        await self.init()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def has_session(self) -> bool:
        """True while a browser session is open."""
        return self._backend is not None and self._backend.has_session

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            proxy = None
            if self._options.proxy:
                proxy = str(
                    httpx.URL(self._options.proxy.server).copy_with(
                        username=self._options.proxy.username,
                        password=self._options.proxy.password,
                    )
                )
            self._client = httpx.AsyncClient(proxy=proxy)
            self._owns_client = True
        return self._client

    async def init(self) -> None:
        """Open the configured engine.

        Raises:
            UnsupportedEngineError: If the engine is not chromium, playwright or soup
            InitializationError: If the browser or page could not be acquired
        """
        engine = resolve_engine(self._options.engine)
        backend = create_backend(engine, self._options, self._get_client)
        if self._backend is not None:
            await self._backend.close()
            self._backend = None

        try:
            await backend.open()
        except Exception as e:
            raise InitializationError(f"Failed to initialize browser: {e}") from e

        self._backend = backend
        log_event(
            logger,
            logging.INFO,
            "engine_initialized",
            engine=engine.value,
            session=backend.has_session,
        )

    def _require_backend(self) -> Backend:
        if self._backend is not None:
            return self._backend
        engine = resolve_engine(self._options.engine)
        if engine is not Engine.SOUP:
            raise NotInitializedError(f"{engine.value} engine requires init() before scraping")
        self._backend = create_backend(engine, self._options, self._get_client)
        return self._backend

    async def scrape(
        self,
        url: str,
        selectors: list[SelectorSpec | Mapping[str, Any]] | None = None,
    ) -> ScrapeResult:
        """Scrape one URL. Never raises: failures come back with success=False.

        Args:
            url: Page to load
            selectors: Specs to extract; each yields one key in ``data``
        """
        start = time.monotonic()
        try:
            specs = [SelectorSpec.model_validate(s) for s in selectors or []]
            backend = self._require_backend()
            data, metadata = await backend.fetch(url, specs)
        except Exception as e:
            elapsed = _elapsed_ms(start)
            log_event(
                logger,
                logging.WARNING,
                "page_scrape_failed",
                url=url,
                engine=self._options.engine,
                error=str(e),
                error_type=type(e).__name__,
                response_time=elapsed,
            )
            return ScrapeResult(
                url=url,
                data=None,
                success=False,
                metadata=ScrapeMetadata(response_time=elapsed),
            )

        metadata.response_time = _elapsed_ms(start)
        log_event(
            logger,
            logging.INFO,
            "page_scraped",
            url=url,
            engine=self._options.engine,
            status_code=metadata.status_code,
            response_time=metadata.response_time,
        )
        return ScrapeResult(url=url, data=data, success=True, metadata=metadata)

    async def scrape_many(
        self,
        batch: BatchConfig | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> BatchOutcome:
        """Scrape URLs one after another, sleeping ``delay`` ms after each.

        Every result from ``scrape`` lands in ``results``; ``on_success`` only
        fires for successful ones. Errors are recorded only if ``scrape``
        itself raises. A failing ``on_success``/``on_error`` callback is
        logged and the batch moves on; ``on_complete`` failures propagate.
        """
        if batch is None:
            batch = BatchConfig(**kwargs)
        elif not isinstance(batch, BatchConfig):
            batch = BatchConfig.model_validate(batch)

        outcome = BatchOutcome()
        for url in batch.urls:
            try:
                result = await self.scrape(url, batch.selectors)
            except Exception as e:
                error = ScrapeError(url=url, error=str(e))
                outcome.errors.append(error)
                log_event(logger, logging.ERROR, "batch_item_failed", url=url, error=error.error)
                if batch.on_error:
                    await self._run_item_callback("on_error", url, batch.on_error, error)
            else:
                outcome.results.append(result)
                if result.success and batch.on_success:
                    await self._run_item_callback("on_success", url, batch.on_success, result)

            if self._options.delay > 0:
                await asyncio.sleep(self._options.delay / 1000)

        if batch.on_complete:
            await _maybe_await(batch.on_complete(outcome.results, outcome.errors))

        log_event(
            logger,
            logging.INFO,
            "batch_completed",
            urls=len(batch.urls),
            succeeded=sum(1 for r in outcome.results if r.success),
            failed=sum(1 for r in outcome.results if not r.success),
            errors=len(outcome.errors),
        )
        return outcome

    @staticmethod
    async def _run_item_callback(name: str, url: str, callback, record) -> None:
        # Per-item callbacks never stop the batch or change its counts
        try:
            await _maybe_await(callback(record))
        except Exception as e:
            log_event(
                logger,
                logging.ERROR,
                "callback_failed",
                callback=name,
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def request(self, options: RequestOptions | Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        """Make a single HTTP request and return the body.

        JSON responses are decoded; anything else is returned as text.

        Raises:
            RequestError: On invalid options, unencodable headers, transport
                failures, timeouts and non-2xx responses
        """
        raw = options if options is not None else kwargs
        if isinstance(raw, RequestOptions):
            url = raw.url
        else:
            url = str(raw.get("url", "")) if isinstance(raw, Mapping) else ""
        try:
            if not isinstance(raw, RequestOptions):
                options = RequestOptions.model_validate(raw)
            url = options.url

            body: dict[str, Any] = {}
            if isinstance(options.data, (dict, list)):
                body["json"] = options.data
            elif isinstance(options.data, (str, bytes)):
                body["content"] = options.data
            elif options.data is not None:
                body["content"] = str(options.data)

            headers = None
            if options.headers is not None:
                headers = {name: str(value) for name, value in options.headers.items()}

            timeout_ms = options.timeout or self._options.timeout
            response = await self._get_client().request(
                options.method,
                options.url,
                headers=headers,
                timeout=timeout_ms / 1000,
                follow_redirects=True,
                **body,
            )
            response.raise_for_status()
        except Exception as e:
            log_event(
                logger,
                logging.ERROR,
                "request_failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RequestError(url, str(e) or type(e).__name__) from e

        if "json" in response.headers.get("content-type", ""):
            try:
                return response.json()
            except ValueError:
                pass  # mislabelled body, fall through to text
        return response.text

    async def close(self) -> None:
        """Close the browser session and owned HTTP client, if any. Idempotent."""
        backend, self._backend = self._backend, None
        try:
            if backend is not None and backend.has_session:
                await backend.close()
                log_event(logger, logging.INFO, "session_closed", engine=backend.engine.value)
        finally:
            if self._owns_client and self._client is not None:
                client, self._client = self._client, None
                await client.aclose()

    def get_options(self) -> ScraperOptions:
        """Get a copy of the current options."""
        return self._options.model_copy(deep=True)

    def update_options(self, options: Mapping[str, Any] | None = None, **overrides: Any) -> None:
        """Merge the given fields over the current options.

        Changes reach the live backend (for example the navigation timeout).
        Launch-time settings such as ``headless`` need a new ``init()``. An
        ``engine`` change drops a session-less soup backend at once; an open
        browser session keeps its engine until ``init()`` replaces it.
        """
        previous_engine = self._options.engine
        self._options = merge_options(self._options, {**(options or {}), **overrides})
        if self._backend is None:
            return
        if self._options.engine != previous_engine and not self._backend.has_session:
            self._backend = None
            return
        self._backend.options = self._options
