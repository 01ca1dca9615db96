# ==============================================
# FeedFetcher
# ==============================================
#
# PURPOSE:
#   Download the module feed and hand back the raw array of
#   module descriptors. No filtering happens here.
#
# FEED FORMAT:
#   {
#     "KtaneModules": [
#       {"Name": "Forget Me Not", "ModuleID": "MemoryV2",
#        "Ignore": ["Souvenir", ...], "IgnoreProcessed": [...]},
#       ...
#     ]
#   }
#
# FAILURE MODES (all raise a FeedError subclass):
#   - FeedTransportError → requests raised (DNS, refused, timeout)
#   - FeedStatusError    → status code other than 200
#   - FeedShapeError     → body is not JSON, or has no array
#                          at the modules key
#
#   The fetcher logs each failure with the URL before raising.
#   Deciding what to do about it is the orchestrator's job.
#
# ==============================================

import logging
from typing import Any, List, Optional

import requests

from boss_module_manager.config import DEFAULT_MODULES_KEY
from boss_module_manager.errors import (
    FeedError,
    FeedShapeError,
    FeedStatusError,
    FeedTransportError,
)

logger = logging.getLogger(__name__)


class FeedFetcher:
    def __init__(
        self,
        modules_key: str = DEFAULT_MODULES_KEY,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        # Don't open a session until the first fetch.
        self.modules_key = modules_key
        self.timeout = timeout
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def fetch(self, url: str) -> List[Any]:
        """
        GET the feed and extract the module descriptor array.

        Args:
            url: Feed URL (the SiteUrl of the persisted settings)

        Returns:
            The list found under the modules key, unmodified.

        Raises:
            FeedTransportError, FeedStatusError, FeedShapeError
        """
        try:
            modules = self._fetch(url)
        except FeedError as e:
            logger.warning(f"✗ Website {e.url} {e.detail}")
            raise

        logger.debug(f"Fetched {len(modules)} module descriptors from {url}")
        return modules

    def _fetch(self, url: str) -> List[Any]:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FeedTransportError(url, f"responded with error: {e}") from e

        if response.status_code != 200:
            raise FeedStatusError(url, response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            # requests' JSONDecodeError subclasses ValueError
            raise FeedShapeError(url, f"did not respond with JSON: {e}") from e

        modules = payload.get(self.modules_key) if isinstance(payload, dict) else None
        if not isinstance(modules, list):
            raise FeedShapeError(url, f"did not respond with a JSON array at “{self.modules_key}” key")

        return modules

    def close(self) -> None:
        """Release the HTTP session, if one was opened."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> 'FeedFetcher':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
