from __future__ import annotations

import json
import logging
import socket
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

from ..config import ProviderSettings
from ..genres import map_genre
from ..models import ClassificationResult, ClassificationSource, Confidence
from .base import clean_album_title
from .ratelimit import RateLimiter

logger = logging.getLogger(__name__)

DISCOGS_API_URL = "https://api.discogs.com"
MAX_YEAR_DRIFT = 2


class DiscogsClassifier:
    """Genre lookup through Discogs release genres and styles."""

    name = "discogs"

    def __init__(
        self,
        settings: ProviderSettings,
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.settings = settings
        self.useragent = settings.discogs_useragent
        self.limiter = limiter or RateLimiter.per_minute(settings.discogs_budget)

    def classify(
        self, artist: str, album: str, year: Optional[int] = None
    ) -> Optional[ClassificationResult]:
        logger.debug("Discogs lookup: %s - %s", artist, album)
        release = self.search_release(artist, album, year)
        if not release:
            return None
        genres: List[str] = list(release.get("genre") or [])
        styles: List[str] = list(release.get("style") or [])
        tags = genres + styles
        if not tags:
            logger.debug("No genres/styles found for: %s - %s", artist, album)
            return None
        confidence = Confidence.HIGH if genres and styles else Confidence.MEDIUM
        for tag in tags:
            mapped = map_genre(tag)
            if not mapped:
                continue
            main_genre, subgenre = mapped
            return ClassificationResult(
                main_genre=main_genre,
                subgenre=subgenre or None,
                source=ClassificationSource.DISCOGS,
                confidence=confidence,
                raw_data={"releaseId": release.get("id"), "genres": genres, "styles": styles},
            )
        logger.debug("No mappable genres for: %s - %s (%s)", artist, album, ", ".join(tags))
        return None

    def search_release(self, artist: str, album: str, year: Optional[int] = None) -> Optional[dict]:
        params: Dict[str, Any] = {
            "q": f"{artist} {clean_album_title(album)}",
            "type": "release",
            "per_page": 5,
        }
        params.update(self._auth_params())
        url = f"{DISCOGS_API_URL}/database/search?{urllib.parse.urlencode(params)}"
        data = self._request(url)
        results = (data or {}).get("results") or []
        if not results:
            logger.debug("No Discogs results for: %s - %s", artist, album)
            return None
        return choose_result(results, artist, year)

    def _auth_params(self) -> Dict[str, str]:
        if self.settings.discogs_key and self.settings.discogs_secret:
            return {"key": self.settings.discogs_key, "secret": self.settings.discogs_secret}
        if self.settings.discogs_token:
            return {"token": self.settings.discogs_token}
        return {}

    def _request(self, url: str) -> Optional[dict]:
        self.limiter.acquire()
        req = urllib.request.Request(url, headers={"User-Agent": self.useragent})
        try:
            with urllib.request.urlopen(req, timeout=self.settings.request_timeout_seconds) as resp:
                return json.load(resp)
        except urllib.error.HTTPError as exc:
            if exc.code == 429:
                logger.warning("Discogs rate limit exceeded")
            else:
                logger.warning("Discogs HTTP error %s: %s", exc.code, exc)
        except (urllib.error.URLError, socket.timeout, TimeoutError) as exc:
            logger.warning("Discogs request failed: %s", exc)
        except ValueError as exc:
            logger.warning("Discogs returned malformed JSON: %s", exc)
        return None


def choose_result(results: List[dict], artist: str, year: Optional[int] = None) -> dict:
    """First result credited to ``artist`` within the year tolerance, else the first result."""
    wanted = artist.lower()
    for result in results:
        result_artist = (result.get("title") or "").split(" - ")[0].lower()
        if result_artist in wanted or wanted in result_artist:
            result_year = _as_int(result.get("year"))
            if year and result_year and abs(result_year - year) > MAX_YEAR_DRIFT:
                continue
            return result
    return results[0]


def _as_int(value: object) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None
