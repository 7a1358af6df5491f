"""Configuration resolution for the scraper.

Defaults live on ``ScraperOptions``; this module merges caller overrides over
them and reads overrides from environment variables, with .env file support.

Environment variables (all optional):
- SKYSCRAPER_ENGINE: chromium, playwright or soup
- SKYSCRAPER_HEADLESS: only "false", "0" or "no" disable headless mode
- SKYSCRAPER_TIMEOUT / SKYSCRAPER_DELAY: milliseconds
- SKYSCRAPER_USER_AGENT
- SKYSCRAPER_BROWSER_TYPE: chromium, firefox or webkit
- SKYSCRAPER_PROXY_SERVER / SKYSCRAPER_PROXY_USERNAME / SKYSCRAPER_PROXY_PASSWORD
"""

import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

from .types import ScraperOptions

ENV_PREFIX = "SKYSCRAPER_"


def resolve_options(overrides: Mapping[str, Any] | ScraperOptions | None = None) -> ScraperOptions:
    """Build options from defaults plus caller overrides.

    ``None`` values are treated as absent, so they fall back to the default.
    """
    if isinstance(overrides, ScraperOptions):
        return overrides.model_copy(deep=True)
    given = {k: v for k, v in (overrides or {}).items() if v is not None}
    return ScraperOptions.model_validate(given)


def merge_options(current: ScraperOptions, partial: Mapping[str, Any]) -> ScraperOptions:
    """Shallow-merge ``partial`` over ``current``; nested values are replaced whole."""
    merged = current.model_dump()
    merged.update({k: v for k, v in partial.items() if v is not None})
    return ScraperOptions.model_validate(merged)


def _env_flag(value: str) -> bool:
    return value.strip().lower() not in ("false", "0", "no")


def options_from_env(env_file: Path | str | None = None) -> dict[str, Any]:
    """Read option overrides from the environment.

    Returns:
        dict: Only the options that are set, ready for ``resolve_options``
    """
    env_path = Path(env_file) if env_file else Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    def get(name: str) -> str | None:
        value = os.environ.get(ENV_PREFIX + name)
        return value if value else None

    overrides: dict[str, Any] = {
        "engine": get("ENGINE"),
        "user_agent": get("USER_AGENT"),
        "browser_type": get("BROWSER_TYPE"),
    }
    if get("HEADLESS") is not None:
        overrides["headless"] = _env_flag(get("HEADLESS"))
    for key in ("TIMEOUT", "DELAY"):
        if get(key) is not None:
            overrides[key.lower()] = int(get(key))
    if get("PROXY_SERVER"):
        overrides["proxy"] = {
            "server": get("PROXY_SERVER"),
            "username": get("PROXY_USERNAME"),
            "password": get("PROXY_PASSWORD"),
        }
    return {k: v for k, v in overrides.items() if v is not None}
