"""
Liquipedia MediaWiki client.

Every request goes through a per-source throttle. Liquipedia bans clients
that burst, so there is no retry path and no way to fetch without waiting.
"""
import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Dict, Optional

from curl_cffi import CurlError
from curl_cffi import requests

from src.exceptions import UpstreamError

logger = logging.getLogger(__name__)


DEFAULT_USER_AGENT = "GTR-GuessPlayer/1.0 (guess-the-rank project; roster sync)"

# Minimum seconds between two requests of the same source family
SOURCE_INTERVALS = {
    "rosters": 1.2,
    "details": 1.2,
    "statistics": 31.0,
}


class RequestThrottle:
    """
    Tracks the last request time per source family. Every request pays the
    family's interval after it completes, so a call that ends on a request
    still leaves the next call (even one with a fresh throttle) spaced out.
    """

    def __init__(
        self,
        intervals: Optional[Dict[str, float]] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.intervals = dict(intervals if intervals is not None else SOURCE_INTERVALS)
        self.clock = clock or time.monotonic
        self.sleep = sleep or time.sleep
        self.last_request_time: Dict[str, float] = {}

    def interval_for(self, source: str) -> float:
        if source not in self.intervals:
            raise KeyError(f"No throttle interval configured for source '{source}'")
        return self.intervals[source]

    def wait(self, source: str) -> None:
        """Enforce minimum delay since the previous request of this source"""
        interval = self.interval_for(source)
        last = self.last_request_time.get(source)
        if last is None:
            return
        now = self.clock()
        if now < last + interval:
            sleep_time = last + interval - now
            logger.debug(f"Rate limiting {source}: sleeping for {sleep_time:.2f}s")
            self.sleep(sleep_time)

    @contextmanager
    def hold(self, source: str):
        """Wait for a free slot, run the request, then sleep the interval even on failure"""
        self.wait(source)
        try:
            yield
        finally:
            self.last_request_time[source] = self.clock()
            interval = self.interval_for(source)
            logger.debug(f"Rate limiting {source}: cooling down for {interval:.2f}s")
            self.sleep(interval)


class LiquipediaClient:
    """Fetches rendered page HTML through the MediaWiki parse API"""

    API_URL = "https://liquipedia.net/valorant/api.php"
    REQUEST_TIMEOUT = 15

    def __init__(self, throttle: Optional[RequestThrottle] = None, session=None, user_agent: Optional[str] = None):
        self.throttle = throttle or RequestThrottle()
        self.session = session or requests.Session()
        self.user_agent = user_agent or os.getenv("LIQUIPEDIA_USER_AGENT", DEFAULT_USER_AGENT)

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept-Encoding": "gzip",
        }

    def fetch_page(self, page: str, source: str = "rosters") -> str:
        """
        Return the parsed HTML of one wiki page.

        Raises UpstreamError on a non-2xx response, a transport failure, an
        undecodable body or an API-level error envelope. A page without
        content yields an empty string.
        """
        params = {
            "action": "parse",
            "page": page,
            "format": "json",
            "prop": "text",
        }

        with self.throttle.hold(source):
            logger.info(f"Fetching: {page} ({source})")
            try:
                response = self.session.get(
                    self.API_URL,
                    params=params,
                    headers=self._headers(),
                    timeout=self.REQUEST_TIMEOUT,
                )
            except CurlError as e:
                raise UpstreamError(f"Liquipedia request failed for {page}: {e}", page=page) from e

        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                f"Liquipedia API error: {response.status_code} for {page}",
                status_code=response.status_code,
                page=page,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Liquipedia returned invalid JSON for {page}",
                status_code=response.status_code,
                page=page,
            ) from e

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            detail = error.get("info") or error.get("code") if isinstance(error, dict) else error
            raise UpstreamError(
                f"Liquipedia API error: {detail}",
                status_code=response.status_code,
                page=page,
            )

        html = ((data.get("parse") or {}).get("text") or {}).get("*") if isinstance(data, dict) else None
        if not html:
            logger.warning(f"No content returned for {page}")
            return ""
        return html
