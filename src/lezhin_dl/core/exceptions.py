class LezhinError(Exception):
    """Base class of every error raised by the download pipeline."""


class ConfigError(LezhinError):
    pass


class AuthenticationError(LezhinError):
    pass


class CrawlError(LezhinError):
    pass


class CrawlTimeoutError(CrawlError):
    """The landmark of the comic page never became visible."""


class CrawlExtractionError(CrawlError):
    """The rendered page yielded no product JSON."""


class RangeError(LezhinError):
    pass


class RangeParseError(RangeError):
    pass


class RangeBoundsError(RangeError):
    def __init__(self, ordinal: int, count: int = None):
        if count is None:
            super().__init__(f"Episode {ordinal} is out of range (episodes start from 1)")
        else:
            super().__init__(f"Episode {ordinal} is out of range (1-{count})")
        self.ordinal = ordinal
        self.count = count


class ImageFetchError(LezhinError):
    def __init__(self, url: str, attempts: int, reason: str):
        super().__init__(f"Failed to fetch {url} after {attempts} attempts: {reason}")
        self.url = url
        self.attempts = attempts
        self.reason = reason
