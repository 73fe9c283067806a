from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .cache import ClassificationCache
from .config import Settings, StageSettings
from .dictionary import GenreDictionary
from .executor import PlanExecutor
from .organizer import PathGenerator
from .providers.ai import AIClassifier
from .providers.discogs import DiscogsClassifier
from .providers.musicbrainz import MusicBrainzClassifier
from .scanner import LibraryScanner
from .strategy import ClassificationStrategy

logger = logging.getLogger(__name__)


@dataclass
class OrganizerApp:
    settings: Settings
    cache: ClassificationCache
    dictionary: GenreDictionary
    scanner: LibraryScanner
    musicbrainz: MusicBrainzClassifier
    discogs: DiscogsClassifier
    ai: AIClassifier
    _opened: bool = False

    @classmethod
    def create(cls, settings: Settings) -> "OrganizerApp":
        providers = settings.providers
        if not providers.discogs_authenticated:
            logger.debug("Discogs credentials not configured, using the anonymous request budget")
        return cls(
            settings=settings,
            cache=ClassificationCache(settings.storage.cache_path),
            dictionary=GenreDictionary(settings.storage.dictionary_path),
            scanner=LibraryScanner(settings.library),
            musicbrainz=MusicBrainzClassifier(providers),
            discogs=DiscogsClassifier(providers),
            ai=AIClassifier(providers),
        )

    def open(self) -> "OrganizerApp":
        if not self._opened:
            self.cache.load()
            self._opened = True
        return self

    def strategy(self, stages: Optional[StageSettings] = None) -> ClassificationStrategy:
        return ClassificationStrategy(
            self.cache,
            stages=stages or self.settings.classification,
            dictionary=self.dictionary,
            musicbrainz=self.musicbrainz,
            discogs=self.discogs,
            ai=self.ai,
        )

    def path_generator(
        self,
        target_root: Optional[Path] = None,
        *,
        use_performer_folders: Optional[bool] = None,
    ) -> PathGenerator:
        organizer = self.settings.organizer
        base = target_root or organizer.target_root
        if base is None:
            raise ValueError("No target library configured (organizer.target_root or --target)")
        if use_performer_folders is None:
            use_performer_folders = organizer.use_performer_folders
        return PathGenerator(base, use_performer_folders=use_performer_folders)

    def executor(
        self,
        *,
        dry_run: bool = False,
        mode: Optional[str] = None,
        verify: Optional[bool] = None,
    ) -> PlanExecutor:
        return PlanExecutor(self.settings.organizer, dry_run=dry_run, mode=mode, verify=verify)

    def close(self) -> None:
        if self._opened:
            self.cache.save()
            self._opened = False
