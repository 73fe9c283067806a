from __future__ import annotations

import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


STAGE_NAMES = ("metadata", "dictionary", "musicbrainz", "discogs", "ai")


class LibrarySettings(BaseModel):
    include_extensions: List[str] = Field(default_factory=lambda: [".flac"])
    exclude_patterns: List[str] = Field(default_factory=list)


class ProviderSettings(BaseModel):
    musicbrainz_useragent: str = "music-organizer/0.1 (unknown@example.com)"
    musicbrainz_interval_seconds: float = 1.0
    discogs_token: Optional[str] = None
    discogs_key: Optional[str] = None
    discogs_secret: Optional[str] = None
    discogs_useragent: str = "music-organizer/0.1 +https://example.com"
    discogs_requests_per_minute: int = 30
    request_timeout_seconds: float = 10.0
    network_retries: int = 1
    network_retry_backoff_seconds: float = 0.5
    anthropic_api_key: Optional[str] = None
    ai_model: str = "claude-sonnet-4-5-20250929"
    ai_max_tokens: int = 4096
    ai_batch_size: int = 20

    @model_validator(mode="after")
    def _api_key_from_env(self) -> "ProviderSettings":
        if not self.anthropic_api_key:
            self.anthropic_api_key = os.environ.get("ANTHROPIC_API_KEY") or None
        return self

    @property
    def discogs_authenticated(self) -> bool:
        return bool(self.discogs_token or (self.discogs_key and self.discogs_secret))

    @property
    def discogs_budget(self) -> int:
        if self.discogs_authenticated:
            return self.discogs_requests_per_minute * 2
        return self.discogs_requests_per_minute


class StageSettings(BaseModel):
    """Which classification stages run. The cache is governed by ``use_cache``."""

    metadata: bool = True
    dictionary: bool = True
    musicbrainz: bool = True
    discogs: bool = False
    ai: bool = False
    use_cache: bool = True

    @classmethod
    def from_names(cls, names: str, *, use_cache: bool = True) -> "StageSettings":
        """Build flags from a comma list such as ``"metadata,musicbrainz"`` or ``"all"``."""
        requested = {part.strip().lower() for part in names.split(",") if part.strip()}
        unknown = requested - set(STAGE_NAMES) - {"all"}
        if unknown:
            raise ValueError(f"Unknown stage(s): {', '.join(sorted(unknown))}")
        if "all" in requested:
            requested = set(STAGE_NAMES)
        flags = {name: name in requested for name in STAGE_NAMES}
        return cls(use_cache=use_cache, **flags)

    def enabled(self) -> List[str]:
        return [name for name in STAGE_NAMES if getattr(self, name)]


class StorageSettings(BaseModel):
    cache_path: Path = Path("~/.cache/music-organizer/genre-cache.json").expanduser()
    dictionary_path: Path = Path("~/.config/music-organizer/genre-dictionary.json").expanduser()

    @field_validator("cache_path", "dictionary_path", mode="before")
    @classmethod
    def _expand(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()


class OrganizerSettings(BaseModel):
    target_root: Optional[Path] = None
    use_performer_folders: bool = True
    mode: Literal["copy", "move"] = "copy"
    verify_checksums: bool = True
    max_failures: int = 10
    dry_run_delay_seconds: float = 0.01

    @field_validator("target_root", mode="before")
    @classmethod
    def _expand_target(cls, value: Optional[str | Path]) -> Optional[Path]:
        if value is None:
            return None
        return Path(value).expanduser().resolve()


class Settings(BaseModel):
    library: LibrarySettings = LibrarySettings()
    providers: ProviderSettings = ProviderSettings()
    classification: StageSettings = StageSettings()
    storage: StorageSettings = StorageSettings()
    organizer: OrganizerSettings = OrganizerSettings()

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "config.yaml", cwd / "config.yml"):
        if candidate.exists():
            return candidate
    return None


def load_settings(explicit_path: Optional[Path] = None) -> Settings:
    path = find_config(explicit_path)
    if path is None:
        return Settings()
    return Settings.load(path)
