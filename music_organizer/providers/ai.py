from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import anthropic

from ..composers import is_known_composer
from ..config import ProviderSettings
from ..models import ClassificationResult, ClassificationSource, Confidence, MainGenre
from .base import clean_album_title

logger = logging.getLogger(__name__)

MAX_SAMPLE_TRACKS = 5

GENRE_HIERARCHY = """
Genre Hierarchy:
- Rock: [Classic Rock, Hard Rock, Punk, Metal, Progressive, Psychedelic]
- Alternative: [Indie, Post-Punk, New Wave, Gothic, Shoegaze, Dream Pop]
- Electronic: [Ambient, IDM, Downtempo, Trip Hop, Industrial, Synthwave]
- Dance: [House, Techno, Drum & Bass, Dubstep, Trance]
- Urban: [Hip-Hop, R&B, Soul, Funk, Trap]
- Jazz: [Bebop, Cool Jazz, Free Jazz, Fusion, Smooth Jazz]
- Blues: (no subgenres)
- World & Folk: [Folk, World, Singer-Songwriter, Country, Celtic]
- Pop: (no subgenres)
- Classical: [Opera, Concertos, Symphonies, Chamber Music, Sonatas, Sacred Music, Suites, Keyboard Works, Orchestral Works, Other Works]
  IMPORTANT: For Classical, use WORK CATEGORY as subgenre, NEVER use composer name as subgenre!
- Soundtracks: (no subgenres)
""".strip()

EXAMPLE_RESPONSE = """[
  {
    "artist": "Dead Can Dance",
    "album": "Into the Labyrinth",
    "mainGenre": "World & Folk",
    "subgenre": "World",
    "confidence": "high",
    "reasoning": "Ethereal world music with folk influences"
  }
]"""


@dataclass(slots=True)
class AlbumRequest:
    artist: str
    album: str
    year: Optional[int] = None
    tracks: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.artist}||{self.album}"


def build_prompt(albums: List[AlbumRequest]) -> str:
    lines = []
    for idx, album in enumerate(albums, start=1):
        tracks = '", "'.join(album.tracks[:MAX_SAMPLE_TRACKS])
        lines.append(
            f'{idx}. Artist: "{album.artist}", Album: "{album.album}", '
            f"Year: {album.year or 'unknown'}\n"
            f'   Sample tracks: "{tracks}"'
        )
    albums_list = "\n\n".join(lines)
    return f"""Classify these albums into the genre hierarchy. Return ONLY valid JSON, no markdown formatting.

{GENRE_HIERARCHY}

Albums to classify:
{albums_list}

Return a JSON array with this exact structure:
{EXAMPLE_RESPONSE}

Confidence levels:
- "high": Very certain about the classification
- "medium": Likely correct but some ambiguity
- "low": Uncertain, needs manual review

Return ONLY the JSON array, nothing else."""


def extract_json_array(text: str) -> List[Dict[str, Any]]:
    """Parse the model reply, tolerating a surrounding code fence."""
    text = text.strip()
    text = re.sub(r"^```(?:json)?\s*\n?", "", text)
    text = re.sub(r"\n?```\s*$", "", text)
    parsed = json.loads(text.strip())
    if not isinstance(parsed, list):
        raise ValueError("Response is not a JSON array")
    return parsed


class AIClassifier:
    """Batch genre classification through the Anthropic Messages API."""

    name = "ai"

    def __init__(self, settings: ProviderSettings, client: Any = None) -> None:
        self.settings = settings
        self.model = settings.ai_model
        self.max_tokens = settings.ai_max_tokens
        self.batch_size = max(1, settings.ai_batch_size)
        if client is None and settings.anthropic_api_key:
            client = anthropic.Anthropic(
                api_key=settings.anthropic_api_key,
                timeout=max(60.0, settings.request_timeout_seconds),
            )
        self.client = client

    def is_available(self) -> bool:
        return self.client is not None

    def classify_batch(self, albums: List[AlbumRequest]) -> Dict[str, ClassificationResult]:
        """Classify albums in requests of at most ``batch_size``, keyed by ``"artist||album"``.

        A failed request, including an unparseable reply, contributes nothing.
        """
        results: Dict[str, ClassificationResult] = {}
        if not self.is_available():
            logger.warning("AI classification not available (no API key)")
            return results
        for start in range(0, len(albums), self.batch_size):
            results.update(self._classify_request(albums[start : start + self.batch_size]))
        return results

    def _classify_request(self, albums: List[AlbumRequest]) -> Dict[str, ClassificationResult]:
        results: Dict[str, ClassificationResult] = {}
        logger.info("AI classifying %d albums...", len(albums))
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": build_prompt(albums)}],
            )
        except anthropic.APIError as exc:
            logger.warning("AI classification request failed: %s", exc)
            return results
        text = next(
            (block.text for block in response.content if getattr(block, "type", None) == "text"),
            None,
        )
        if not text:
            logger.warning("AI response contained no text content")
            return results
        try:
            entries = extract_json_array(text)
        except ValueError as exc:
            logger.warning("Failed to parse AI response: %s", exc)
            logger.debug("Raw AI response: %s", text)
            return results
        usage = getattr(response, "usage", None)
        raw_data = {
            "model": self.model,
            "inputTokens": getattr(usage, "input_tokens", None),
            "outputTokens": getattr(usage, "output_tokens", None),
        }
        for entry in entries:
            result = self._to_result(entry, raw_data)
            if result is None:
                continue
            key = f"{entry.get('artist')}||{entry.get('album')}"
            logger.debug("AI result key: %r", key)
            results[key] = result
        logger.info("AI classified %d/%d albums", len(results), len(albums))
        if usage is not None:
            logger.info("Tokens used: %s input, %s output", raw_data["inputTokens"], raw_data["outputTokens"])
        return results

    def classify(self, request: AlbumRequest) -> Optional[ClassificationResult]:
        results = self.classify_batch([request])
        cleaned_key = f"{request.artist}||{clean_album_title(request.album)}"
        return results.get(request.key) or results.get(cleaned_key)

    @staticmethod
    def _to_result(entry: Any, raw_data: Dict[str, Any]) -> Optional[ClassificationResult]:
        if not isinstance(entry, dict):
            return None
        try:
            main_genre = MainGenre.parse(str(entry.get("mainGenre", "")))
        except ValueError:
            logger.warning(
                "AI returned unknown genre %r for %s - %s",
                entry.get("mainGenre"),
                entry.get("artist"),
                entry.get("album"),
            )
            return None
        try:
            confidence = Confidence(str(entry.get("confidence", "")).lower())
        except ValueError:
            confidence = Confidence.LOW
        subgenre = entry.get("subgenre") or None
        if main_genre is MainGenre.CLASSICAL and subgenre and is_known_composer(subgenre):
            logger.debug("Dropping composer %r used as Classical subgenre", subgenre)
            subgenre = None
        return ClassificationResult(
            main_genre=main_genre,
            subgenre=subgenre,
            source=ClassificationSource.AI,
            confidence=confidence,
            reasoning=entry.get("reasoning"),
            raw_data=dict(raw_data),
        )
