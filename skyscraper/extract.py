"""Extraction strategies shared by all engines.

Each selector spec is read independently. A spec that fails (no match,
invalid selector, evaluation error) maps to None and the rest still run.
"""

import inspect
import logging
from functools import partial
from typing import Any, Awaitable, Callable, Iterable

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page

from .logging_utils import log_event
from .types import ExtractMode, SelectorSpec

logger = logging.getLogger(__name__)

# Evaluated in page context; mirrors read_element() below.
_READ_JS = """
function read(el, spec) {
    if (spec.mode === "html") return el.innerHTML;
    if (spec.mode === "attribute") return el.getAttribute(spec.attribute);
    return (el.textContent || "").trim();
}
"""
READ_ONE_JS = "(el, spec) => {" + _READ_JS + "return read(el, spec); }"
READ_ALL_JS = "(els, spec) => {" + _READ_JS + "return els.map((el) => read(el, spec)); }"

ExtractFn = Callable[[SelectorSpec], Any | Awaitable[Any]]


def read_element(element: Tag, spec: SelectorSpec) -> str | None:
    """Read one parsed element the way the browser engines read a DOM node."""
    mode = spec.mode
    if mode is ExtractMode.HTML:
        return element.decode_contents()
    if mode is ExtractMode.ATTRIBUTE:
        return element.get(spec.attribute)
    return element.get_text().strip()


def extract_from_soup(soup: BeautifulSoup, spec: SelectorSpec) -> Any:
    """Extract one spec from a parsed document. Supports CSS via soupsieve."""
    if spec.multiple:
        return [read_element(el, spec) for el in soup.select(spec.selector)]
    element = soup.select_one(spec.selector)
    if element is None:
        raise LookupError(f"No element matches selector {spec.selector!r}")
    return read_element(element, spec)


async def extract_from_page(page: Page, spec: SelectorSpec) -> Any:
    """Extract one spec from a live page. A missing single match raises."""
    arg = {"mode": spec.mode.value, "attribute": spec.attribute}
    if spec.multiple:
        return await page.eval_on_selector_all(spec.selector, READ_ALL_JS, arg)
    return await page.eval_on_selector(spec.selector, READ_ONE_JS, arg)


async def collect(specs: Iterable[SelectorSpec], extract_fn: ExtractFn) -> dict[str, Any]:
    """Apply ``extract_fn`` to every spec, keyed by selector (last one wins)."""
    data: dict[str, Any] = {}
    for spec in specs:
        try:
            value = extract_fn(spec)
            if inspect.isawaitable(value):
                value = await value
            data[spec.selector] = value
        except Exception as e:
            log_event(
                logger,
                logging.DEBUG,
                "selector_failed",
                selector=spec.selector,
                error=str(e),
            )
            data[spec.selector] = None
    return data


async def collect_from_soup(soup: BeautifulSoup, specs: Iterable[SelectorSpec]) -> dict[str, Any]:
    return await collect(specs, partial(extract_from_soup, soup))


async def collect_from_page(page: Page, specs: Iterable[SelectorSpec]) -> dict[str, Any]:
    return await collect(specs, partial(extract_from_page, page))
