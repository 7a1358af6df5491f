"""Skyscraper - one scraping API over Playwright browsers and BeautifulSoup."""

from .types import (
    Engine,
    ExtractMode,
    ScraperOptions,
    Viewport,
    ProxySettings,
    SelectorSpec,
    ScrapeMetadata,
    ScrapeResult,
    ScrapeError,
    BatchConfig,
    BatchOutcome,
    RequestOptions,
)
from .exceptions import (
    SkyscraperError,
    UnsupportedEngineError,
    InitializationError,
    NotInitializedError,
    RequestError,
)
from .config import resolve_options, merge_options, options_from_env
from .core import Skyscraper

__all__ = [
    # Types
    "Engine",
    "ExtractMode",
    "ScraperOptions",
    "Viewport",
    "ProxySettings",
    "SelectorSpec",
    "ScrapeMetadata",
    "ScrapeResult",
    "ScrapeError",
    "BatchConfig",
    "BatchOutcome",
    "RequestOptions",
    # Errors
    "SkyscraperError",
    "UnsupportedEngineError",
    "InitializationError",
    "NotInitializedError",
    "RequestError",
    # Config
    "resolve_options",
    "merge_options",
    "options_from_env",
    # Core
    "Skyscraper",
]
