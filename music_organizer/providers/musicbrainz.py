from __future__ import annotations

import logging
import socket
import time
import urllib.error
from typing import Dict, List, Optional

import musicbrainzngs

from ..config import ProviderSettings
from ..genres import map_genre
from ..models import ClassificationResult, ClassificationSource, Confidence
from .base import clean_album_title
from .ratelimit import RateLimiter

logger = logging.getLogger(__name__)


def tag_confidence(count: int) -> Confidence:
    if count >= 5:
        return Confidence.HIGH
    if count >= 2:
        return Confidence.MEDIUM
    return Confidence.LOW


def build_release_query(artist: str, album: str, year: Optional[int] = None) -> str:
    query = f'artist:"{artist}" AND release:"{clean_album_title(album)}"'
    if year:
        query += f" AND date:{year}"
    return query


class MusicBrainzClassifier:
    """Genre lookup through community tags on the best matching release."""

    name = "musicbrainz"

    def __init__(
        self,
        settings: ProviderSettings,
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.settings = settings
        self.limiter = limiter or RateLimiter.fixed_interval(settings.musicbrainz_interval_seconds)
        musicbrainzngs.set_useragent(
            "music-organizer",
            "0.1",
            contact=settings.musicbrainz_useragent,
        )
        # Requests are spaced by self.limiter instead.
        musicbrainzngs.set_rate_limit(False)

    def classify(
        self, artist: str, album: str, year: Optional[int] = None
    ) -> Optional[ClassificationResult]:
        logger.debug("MusicBrainz lookup: %s - %s", artist, album)
        release = self.search_release(artist, album, year)
        if not release:
            return None
        tags = self.release_tags(release["id"])
        if not tags:
            logger.debug("No tags found for: %s - %s", artist, album)
            return None
        for tag in tags:
            mapped = map_genre(tag["name"])
            if not mapped:
                continue
            main_genre, subgenre = mapped
            return ClassificationResult(
                main_genre=main_genre,
                subgenre=subgenre or None,
                source=ClassificationSource.MUSICBRAINZ,
                confidence=tag_confidence(tag["count"]),
                raw_data={"releaseId": release["id"], "tags": tags[:5]},
            )
        logger.debug(
            "No mappable tags for: %s - %s (%s)",
            artist,
            album,
            ", ".join(tag["name"] for tag in tags),
        )
        return None

    def search_release(self, artist: str, album: str, year: Optional[int] = None) -> Optional[dict]:
        query = build_release_query(artist, album, year)
        response = self._call(
            lambda: musicbrainzngs.search_releases(query=query, limit=1),
            label="MusicBrainz release search",
        )
        releases = (response or {}).get("release-list") or []
        if not releases:
            logger.debug("No MusicBrainz results for: %s - %s", artist, album)
            return None
        return releases[0]

    def release_tags(self, release_id: str) -> List[Dict[str, object]]:
        """Tags of a release, most-voted first."""
        response = self._call(
            lambda: musicbrainzngs.get_release_by_id(release_id, includes=["tags"]),
            label=f"MusicBrainz tags for release {release_id}",
        )
        if not response:
            return []
        tags = []
        for tag in response.get("release", {}).get("tag-list", []):
            name = tag.get("name")
            if not name:
                continue
            try:
                count = int(tag.get("count", 0))
            except (TypeError, ValueError):
                count = 0
            tags.append({"name": name, "count": count})
        tags.sort(key=lambda item: item["count"], reverse=True)
        return tags

    def _call(self, fn, *, label: str):
        retries = max(0, int(self.settings.network_retries))
        backoff = max(0.0, float(self.settings.network_retry_backoff_seconds))
        for attempt in range(1, retries + 2):
            self.limiter.acquire()
            try:
                return fn()
            except musicbrainzngs.ResponseError as exc:
                if getattr(exc.cause, "code", None) == 429:
                    logger.warning("MusicBrainz rate limit exceeded (%s)", label)
                else:
                    logger.warning("%s failed: %s", label, exc)
                return None
            except Exception as exc:
                if not self._is_transient_network_error(exc):
                    raise
                if attempt > retries:
                    logger.warning("%s failed: %s", label, exc)
                    return None
                sleep_for = backoff * (2 ** (attempt - 1))
                if sleep_for:
                    time.sleep(sleep_for)
        return None

    @staticmethod
    def _is_transient_network_error(exc: Exception) -> bool:
        return isinstance(
            exc,
            (
                musicbrainzngs.NetworkError,
                socket.gaierror,
                urllib.error.URLError,
                TimeoutError,
                ConnectionError,
            ),
        )
