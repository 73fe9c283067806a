import unittest

from music_organizer.models import parse_int, parse_year


class TestParseYear(unittest.TestCase):
    def test_parse_year_accepts_full_dates(self) -> None:
        self.assertEqual(parse_year("1969-09-26"), 1969)
        self.assertEqual(parse_year(" 1998 "), 1998)
        self.assertEqual(parse_year(2004), 2004)

    def test_parse_year_rejects_garbage(self) -> None:
        self.assertIsNone(parse_year("unknown"))
        self.assertIsNone(parse_year("98"))
        self.assertIsNone(parse_year(None))

    def test_parse_int_takes_leading_number(self) -> None:
        self.assertEqual(parse_int("03/12"), 3)
        self.assertEqual(parse_int("7"), 7)
        self.assertIsNone(parse_int("A1"))


if __name__ == "__main__":
    unittest.main()
