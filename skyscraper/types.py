"""Type definitions for scrape requests and results."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field


class Engine(str, Enum):
    """Backend used to load and query pages."""
    CHROMIUM = "chromium"
    PLAYWRIGHT = "playwright"
    SOUP = "soup"


class ExtractMode(str, Enum):
    """What a selector spec pulls out of a matched element."""
    TEXT = "text"
    HTML = "html"
    ATTRIBUTE = "attribute"


BrowserType = Literal["chromium", "firefox", "webkit"]
WaitUntil = Literal["load", "domcontentloaded", "networkidle", "commit"]
HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Viewport(BaseModel):
    width: int = 1920
    height: int = 1080


class ProxySettings(BaseModel):
    """Proxy handed to the browser launch and HTTP client as-is."""
    server: str
    username: str | None = None
    password: str | None = None


class ScraperOptions(BaseModel):
    """Resolved scraper settings.

    ``engine`` is kept as a plain string so that unknown values survive
    construction and are only rejected by ``init()``. ``retries`` and
    ``concurrency`` are stored but not consulted by any operation.
    """
    engine: str = Engine.CHROMIUM.value
    headless: bool = True
    timeout: int = 30000
    user_agent: str = DEFAULT_USER_AGENT
    viewport: Viewport = Field(default_factory=Viewport)
    proxy: ProxySettings | None = None
    retries: int = 3
    delay: int = 1000
    concurrency: int = 1
    browser_type: BrowserType = "chromium"
    wait_until: WaitUntil = "networkidle"


class SelectorSpec(BaseModel):
    """One extraction instruction: a CSS selector and what to read from it."""
    model_config = ConfigDict(frozen=True)

    selector: str
    attribute: str | None = None
    text: bool = False
    html: bool = False
    multiple: bool = False

    @property
    def mode(self) -> ExtractMode:
        """Resolve the flags by precedence: text > html > attribute > text."""
        if self.text:
            return ExtractMode.TEXT
        if self.html:
            return ExtractMode.HTML
        if self.attribute:
            return ExtractMode.ATTRIBUTE
        return ExtractMode.TEXT


class ScrapeMetadata(BaseModel):
    title: str | None = None
    status_code: int | None = None
    response_time: int | None = None  # ms
    content_length: int | None = None


class ScrapeResult(BaseModel):
    """Result from scraping one URL."""
    url: str
    data: dict[str, Any] | None
    success: bool
    timestamp: datetime = Field(default_factory=utcnow)
    metadata: ScrapeMetadata | None = None


class ScrapeError(BaseModel):
    """Failure record for one batch item whose scrape raised."""
    url: str
    error: str
    timestamp: datetime = Field(default_factory=utcnow)
    retry_count: int | None = None


# Callbacks may be plain functions or coroutine functions
SuccessCallback = Callable[[ScrapeResult], Any | Awaitable[Any]]
ErrorCallback = Callable[[ScrapeError], Any | Awaitable[Any]]
CompleteCallback = Callable[[list[ScrapeResult], list[ScrapeError]], Any | Awaitable[Any]]


class BatchConfig(BaseModel):
    """Batch of URLs scraped with one shared selector list."""
    urls: list[str]
    selectors: list[SelectorSpec] = Field(default_factory=list)
    on_success: SuccessCallback | None = None
    on_error: ErrorCallback | None = None
    on_complete: CompleteCallback | None = None


class BatchOutcome(BaseModel):
    results: list[ScrapeResult] = Field(default_factory=list)
    errors: list[ScrapeError] = Field(default_factory=list)


class RequestOptions(BaseModel):
    """A direct HTTP call."""
    url: str
    method: HttpMethod = "GET"
    headers: dict[str, Any] | None = None  # values sent as str()
    data: Any = None
    timeout: int | None = None  # ms, falls back to ScraperOptions.timeout
    retries: int | None = None
