"""Shared fixtures: an in-memory HTTP site and a fake Playwright driver."""

import httpx
import pytest

import skyscraper.backends

PAGE_HTML = """<html>
<head><title>T</title></head>
<body>
  <h1> H </h1>
  <ul>
    <li><a href="/one"> One </a></li>
    <li><a href="/two">Two</a></li>
    <li><a href="/three" class="x y">Three
    </a></li>
  </ul>
  <div id="content"><p>Hello <b>world</b></p></div>
</body>
</html>"""

SITE = {
    "https://site.test/page": lambda request: httpx.Response(200, html=PAGE_HTML),
    "https://site.test/json": lambda request: httpx.Response(200, json={"slideshow": {"title": "Sample"}}),
    "https://site.test/missing": lambda request: httpx.Response(404, text="not found"),
    "https://site.test/broken": lambda request: httpx.Response(500, text="boom"),
}


def site_handler(request: httpx.Request) -> httpx.Response:
    """Serve SITE routes; any other host is unreachable."""
    route = SITE.get(str(request.url))
    if route is None:
        raise httpx.ConnectError(f"Name or service not known: {request.url.host}", request=request)
    return route(request)


@pytest.fixture()
def client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(site_handler))


# ---------------------------------------------------------------------------
# Fake Playwright
# ---------------------------------------------------------------------------


class FakeResponse:
    def __init__(self, status: int):
        self.status = status


class FakePage:
    """Page whose selector evaluation is answered from canned values.

    ``elements`` maps selector -> value for single matches; ``lists`` maps
    selector -> list for multi matches. Unknown single selectors raise like
    Playwright does when nothing matches.
    """

    def __init__(self, title="Fake Title", status=200, elements=None, lists=None):
        self._title = title
        self.status = status
        self.elements = elements or {}
        self.lists = lists or {}
        self.calls = []
        self.goto_error = None

    async def goto(self, url, **kwargs):
        self.calls.append(("goto", url, kwargs))
        if self.goto_error:
            raise self.goto_error
        return FakeResponse(self.status) if self.status is not None else None

    async def eval_on_selector(self, selector, expression, arg=None):
        self.calls.append(("eval_on_selector", selector, arg))
        if selector not in self.elements:
            raise Exception(f"Failed to find element matching selector \"{selector}\"")
        return self.elements[selector]

    async def eval_on_selector_all(self, selector, expression, arg=None):
        self.calls.append(("eval_on_selector_all", selector, arg))
        return self.lists.get(selector, [])

    async def title(self):
        return self._title

    async def set_viewport_size(self, viewport):
        self.calls.append(("set_viewport_size", viewport))

    async def set_extra_http_headers(self, headers):
        self.calls.append(("set_extra_http_headers", headers))


class FakeBrowser:
    def __init__(self, page: FakePage):
        self.page = page
        self.new_page_kwargs = None
        self.closed = False

    async def new_page(self, **kwargs):
        self.new_page_kwargs = kwargs
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowserType:
    def __init__(self, name: str, page: FakePage):
        self.name = name
        self.page = page
        self.launch_kwargs = None
        self.launch_error = None
        self.browser = None

    async def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        if self.launch_error:
            raise self.launch_error
        self.browser = FakeBrowser(self.page)
        return self.browser


class FakePlaywright:
    def __init__(self, page: FakePage):
        self.page = page
        self.chromium = FakeBrowserType("chromium", page)
        self.firefox = FakeBrowserType("firefox", page)
        self.webkit = FakeBrowserType("webkit", page)
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakePlaywrightContextManager:
    def __init__(self, playwright: FakePlaywright):
        self.playwright = playwright

    async def start(self):
        return self.playwright


@pytest.fixture()
def fake_page() -> FakePage:
    return FakePage(
        elements={"h1": "Heading", "#content": "<p>Hello</p>", "a.logo": "/home"},
        lists={"a": ["One", "Two", "Three"]},
    )


@pytest.fixture()
def fake_playwright(monkeypatch, fake_page) -> FakePlaywright:
    playwright = FakePlaywright(fake_page)
    monkeypatch.setattr(
        skyscraper.backends,
        "async_playwright",
        lambda: FakePlaywrightContextManager(playwright),
    )
    return playwright
