# ==============================================
# Error Taxonomy
# ==============================================
#
# Every failure in this package is recovered locally. These
# exceptions travel between components (codec → caller,
# fetcher → orchestrator) and never escape to the host.
#
#   BossModuleError
#   ├── ConfigLoadError     → corrupt / unreadable cache file
#   ├── ConfigSaveError     → I/O failure writing the cache file
#   └── FeedError           → any failed feed fetch
#       ├── FeedTransportError  → network failure
#       ├── FeedStatusError     → non-200 response
#       └── FeedShapeError      → body lacks the module array
#
# A lookup miss is NOT an error: lookups return None.
# ==============================================

from typing import Optional


class BossModuleError(Exception):
    """Base class for all errors raised inside boss_module_manager."""


class ConfigLoadError(BossModuleError):
    """The persisted settings file could not be parsed or validated."""


class ConfigSaveError(BossModuleError):
    """The persisted settings file could not be written."""


class FeedError(BossModuleError):
    """A feed fetch failed. Carries the URL that was requested."""

    def __init__(self, url: str, detail: str):
        self.url = url
        self.detail = detail
        super().__init__(f"{url}: {detail}")


class FeedTransportError(FeedError):
    """The HTTP request itself failed (DNS, connection, timeout...)."""


class FeedStatusError(FeedError):
    """The server answered with a status code other than 200."""

    def __init__(self, url: str, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        super().__init__(url, detail or f"responded with code {status_code}")


class FeedShapeError(FeedError):
    """The response body did not contain the expected module array."""
