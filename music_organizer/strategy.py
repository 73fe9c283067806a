from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from .cache import ClassificationCache
from .config import StageSettings
from .dictionary import GenreDictionary
from .genres import classify_from_metadata
from .models import AlbumInfo, ClassificationResult, ClassificationSource, Confidence
from .providers.ai import AIClassifier, AlbumRequest
from .providers.base import AlbumClassifier

logger = logging.getLogger(__name__)

SOURCE_PRIORITY: Dict[ClassificationSource, int] = {
    ClassificationSource.MANUAL: 6,
    ClassificationSource.METADATA: 5,
    ClassificationSource.DICTIONARY: 4,
    ClassificationSource.MUSICBRAINZ: 3,
    ClassificationSource.DISCOGS: 2,
    ClassificationSource.AI: 1,
}

ProgressCallback = Callable[[int, int, AlbumInfo], None]


def calculate_confidence(sources: int, agreement: float, has_direct_match: bool) -> Confidence:
    if has_direct_match and sources >= 2 and agreement >= 0.8:
        return Confidence.HIGH
    if sources >= 1 and agreement >= 0.6:
        return Confidence.MEDIUM
    return Confidence.LOW


def merge_classifications(results: Sequence[ClassificationResult]) -> Optional[ClassificationResult]:
    """Vote over ``(main_genre, subgenre)`` and rescore the winner.

    Ties go to the pair seen first.
    """
    if not results:
        return None
    if len(results) == 1:
        return results[0]
    votes: Dict[tuple, List[ClassificationResult]] = {}
    for result in results:
        votes.setdefault(result.genre_pair, []).append(result)
    best: List[ClassificationResult] = []
    for group in votes.values():
        if len(group) > len(best):
            best = group
    count = len(best)
    agreement = count / len(results)
    confidence = calculate_confidence(len(results), agreement, count > 1)
    return best[0].with_confidence(confidence, f"{count}/{len(results)} sources agree")


def pick_best_result(results: Sequence[ClassificationResult]) -> Optional[ClassificationResult]:
    """Highest confidence wins, then source priority. Used outside the per-album pipeline."""
    if not results:
        return None
    return max(
        results,
        key=lambda r: (r.confidence.rank, SOURCE_PRIORITY.get(r.source, 0)),
    )


class ClassificationStrategy:
    """Runs the classification stages for one album at a time.

    Order: cache, dictionary, embedded genre tag, MusicBrainz, Discogs, AI.
    The first high-confidence answer (or any AI answer) is cached and
    returned; otherwise everything gathered is merged by vote.
    """

    def __init__(
        self,
        cache: ClassificationCache,
        *,
        stages: StageSettings,
        dictionary: Optional[GenreDictionary] = None,
        musicbrainz: Optional[AlbumClassifier] = None,
        discogs: Optional[AlbumClassifier] = None,
        ai: Optional[AIClassifier] = None,
    ) -> None:
        self.cache = cache
        self.stages = stages
        self.dictionary = dictionary
        self.musicbrainz = musicbrainz
        self.discogs = discogs
        self.ai = ai

    def classify(self, album: AlbumInfo) -> Optional[ClassificationResult]:
        artist, title, year = album.artist, album.album, album.year
        logger.debug("Classifying: %s - %s", artist, title)

        if self.stages.use_cache:
            cached = self.cache.get(artist, title, year)
            if cached:
                logger.debug("Cache hit: %s - %s", artist, title)
                return cached

        results: List[ClassificationResult] = []

        if self.stages.dictionary and self.dictionary is not None and self.dictionary.is_available():
            result = self.dictionary.lookup(artist, title)
            if result and self._collect(album, result, results):
                return result

        if self.stages.metadata and album.genre:
            result = classify_from_metadata(album.genre)
            if result:
                logger.debug("Metadata classification: %s", _describe(result))
                if self._collect(album, result, results):
                    return result

        for enabled, classifier in (
            (self.stages.musicbrainz, self.musicbrainz),
            (self.stages.discogs, self.discogs),
        ):
            if not enabled or classifier is None:
                continue
            result = self._run_external(classifier, album)
            if result and self._collect(album, result, results):
                return result

        if self.stages.ai:
            result = self._run_ai(album)
            if result:
                results.append(result)
                self._remember(album, result)
                return result

        if results:
            merged = merge_classifications(results)
            if merged:
                self._remember(album, merged)
            return merged

        logger.debug("No classification found for: %s - %s", artist, title)
        return None

    def classify_batch(
        self,
        albums: Sequence[AlbumInfo],
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, ClassificationResult]:
        """Classify albums sequentially; the result is keyed by ``"artist||album"``."""
        results: Dict[str, ClassificationResult] = {}
        total = len(albums)
        for index, album in enumerate(albums, start=1):
            if on_progress:
                on_progress(index, total, album)
            result = self.classify(album)
            if result:
                results[album.key] = result
        return results

    def _collect(
        self,
        album: AlbumInfo,
        result: ClassificationResult,
        results: List[ClassificationResult],
    ) -> bool:
        results.append(result)
        if result.confidence is Confidence.HIGH:
            self._remember(album, result)
            return True
        return False

    def _remember(self, album: AlbumInfo, result: ClassificationResult) -> None:
        if self.stages.use_cache:
            self.cache.set(album.artist, album.album, result, album.year)

    def _run_external(self, classifier: AlbumClassifier, album: AlbumInfo) -> Optional[ClassificationResult]:
        label = getattr(classifier, "name", type(classifier).__name__)
        try:
            result = classifier.classify(album.artist, album.album, album.year)
        except Exception as exc:
            logger.warning("%s classification failed for %s - %s: %s", label, album.artist, album.album, exc)
            return None
        if result:
            logger.debug("%s classification: %s", label, _describe(result))
        return result

    def _run_ai(self, album: AlbumInfo) -> Optional[ClassificationResult]:
        if self.ai is None or not self.ai.is_available():
            logger.warning("AI classification unavailable: no Anthropic API key configured")
            return None
        request = AlbumRequest(
            artist=album.artist,
            album=album.album,
            year=album.year,
            tracks=list(album.tracks),
        )
        try:
            result = self.ai.classify(request)
        except Exception as exc:
            logger.warning("AI classification failed for %s - %s: %s", album.artist, album.album, exc)
            return None
        if result:
            logger.debug("AI classification: %s", _describe(result))
        return result


def _describe(result: ClassificationResult) -> str:
    genre = result.main_genre.value
    if result.subgenre:
        genre = f"{genre} > {result.subgenre}"
    return f"{genre} ({result.confidence.value})"
