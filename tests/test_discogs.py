import io
import json
import unittest
import urllib.error
import urllib.parse
from unittest.mock import patch

from music_organizer.config import ProviderSettings
from music_organizer.models import ClassificationSource, Confidence, MainGenre
from music_organizer.providers.discogs import DiscogsClassifier, choose_result
from music_organizer.providers.ratelimit import RateLimiter


def _response(payload) -> io.BytesIO:
    return io.BytesIO(json.dumps(payload).encode("utf-8"))


SEARCH = {
    "results": [
        {"id": 1, "title": "Somebody Else - Dummy", "year": "1994", "genre": ["Pop"], "style": []},
        {
            "id": 2,
            "title": "Portishead - Dummy",
            "year": "1994",
            "genre": ["Electronic"],
            "style": ["Trip Hop"],
        },
    ]
}


class TestChooseResult(unittest.TestCase):
    def test_prefers_matching_artist_within_year_tolerance(self) -> None:
        results = [
            {"title": "Band - Live", "year": "1980"},
            {"title": "Band - Studio", "year": "2001"},
        ]
        self.assertEqual(choose_result(results, "Band", 2000)["title"], "Band - Studio")

    def test_falls_back_to_first_result(self) -> None:
        results = [{"title": "Alpha - One"}, {"title": "Beta - Two"}]
        self.assertEqual(choose_result(results, "Nobody", None)["title"], "Alpha - One")


class TestDiscogsClassifier(unittest.TestCase):
    def test_genre_and_style_give_high_confidence(self) -> None:
        settings = ProviderSettings(discogs_token="tok")
        with patch("urllib.request.urlopen", return_value=_response(SEARCH)) as urlopen:
            classifier = DiscogsClassifier(settings, limiter=RateLimiter())
            result = classifier.classify("Portishead", "Dummy (Deluxe Edition)", 1994)
        self.assertEqual(result.main_genre, MainGenre.ELECTRONIC)
        self.assertEqual(result.confidence, Confidence.HIGH)
        self.assertEqual(result.source, ClassificationSource.DISCOGS)
        self.assertEqual(result.raw_data["releaseId"], 2)
        self.assertEqual(result.raw_data["styles"], ["Trip Hop"])

        request = urlopen.call_args[0][0]
        query = urllib.parse.parse_qs(urllib.parse.urlparse(request.full_url).query)
        self.assertEqual(query["q"], ["Portishead Dummy"])
        self.assertEqual(query["token"], ["tok"])
        self.assertEqual(request.get_header("User-agent"), settings.discogs_useragent)

    def test_genre_only_is_medium(self) -> None:
        payload = {"results": [{"id": 3, "title": "Band - Album", "genre": ["Jazz"], "style": []}]}
        with patch("urllib.request.urlopen", return_value=_response(payload)):
            result = DiscogsClassifier(ProviderSettings(), limiter=RateLimiter()).classify("Band", "Album")
        self.assertEqual(result.main_genre, MainGenre.JAZZ)
        self.assertEqual(result.confidence, Confidence.MEDIUM)

    def test_key_and_secret_take_precedence(self) -> None:
        settings = ProviderSettings(discogs_key="k", discogs_secret="s", discogs_token="tok")
        with patch("urllib.request.urlopen", return_value=_response({"results": []})) as urlopen:
            self.assertIsNone(DiscogsClassifier(settings, limiter=RateLimiter()).classify("A", "B"))
        query = urllib.parse.parse_qs(urllib.parse.urlparse(urlopen.call_args[0][0].full_url).query)
        self.assertEqual(query["key"], ["k"])
        self.assertEqual(query["secret"], ["s"])
        self.assertNotIn("token", query)

    def test_http_429_is_logged_and_returns_none(self) -> None:
        error = urllib.error.HTTPError("https://api.discogs.com", 429, "Too Many Requests", None, None)
        with patch("urllib.request.urlopen", side_effect=error):
            classifier = DiscogsClassifier(ProviderSettings(), limiter=RateLimiter())
            with self.assertLogs("music_organizer.providers.discogs", level="WARNING") as logs:
                self.assertIsNone(classifier.classify("A", "B"))
        self.assertIn("rate limit", "\n".join(logs.output))

    def test_network_failure_returns_none(self) -> None:
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
            classifier = DiscogsClassifier(ProviderSettings(), limiter=RateLimiter())
            with self.assertLogs("music_organizer.providers.discogs", level="WARNING"):
                self.assertIsNone(classifier.classify("A", "B"))

    def test_budget_doubles_with_credentials(self) -> None:
        self.assertEqual(DiscogsClassifier(ProviderSettings()).limiter.budget, 30)
        self.assertEqual(DiscogsClassifier(ProviderSettings(discogs_token="t")).limiter.budget, 60)


if __name__ == "__main__":
    unittest.main()
