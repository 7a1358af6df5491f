"""Exceptions raised by the scraper facade."""


class SkyscraperError(Exception):
    """Base exception for all scraper errors"""


class UnsupportedEngineError(SkyscraperError, ValueError):
    """The configured engine is not one of the known variants.

    Raised by ``init()``, never at construction time.
    """

    def __init__(self, engine):
        self.engine = engine
        super().__init__(f"Unsupported browser engine: {engine}")


class InitializationError(SkyscraperError):
    """Browser or page acquisition failed during ``init()``.

    The underlying collaborator failure is chained as ``__cause__``.
    """


class NotInitializedError(SkyscraperError):
    """A browser engine was used before ``init()`` opened a session."""


class RequestError(SkyscraperError):
    """A direct HTTP call failed.

    Unlike scrape failures, this one propagates to the caller.
    """

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Request failed: {message}")
