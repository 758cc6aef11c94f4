import unittest
from unittest.mock import patch

from dagster import build_asset_context

from qobuz_pulse.assets.transformation.genre_analytics_assets import (
    genre_growth_trends,
    genre_statistics,
)
from qobuz_pulse.settings import GENRE_GROWTH_FILE, GENRE_STATISTICS_FILE

MODULE = "qobuz_pulse.assets.transformation.genre_analytics_assets"

TRACK_ROWS = [
    {"track_genre_clean": "house", "popularity": 90, "energy": 0.9},
    {"track_genre_clean": "house", "popularity": 90, "energy": 0.7},
    {"track_genre": "drone", "popularity": 0, "energy": 0.1},
    {"popularity": None},
]


class TestGenreAnalyticsAssets(unittest.TestCase):
    @patch(f"{MODULE}.save_to_jsonl")
    @patch(f"{MODULE}.load_tracks_jsonl")
    def test_genre_statistics(self, mock_load, mock_save):
        context = build_asset_context()
        mock_load.return_value = TRACK_ROWS

        result_path = genre_statistics(context)

        self.assertEqual(result_path, GENRE_STATISTICS_FILE)
        records, output_path = mock_save.call_args.args
        self.assertEqual(output_path, GENRE_STATISTICS_FILE)
        self.assertEqual([r["name"] for r in records], ["house", "drone", "Unknown"])
        self.assertEqual(sum(r["count"] for r in records), len(TRACK_ROWS))
        self.assertEqual(records[0]["avg_energy"], 0.8)
        self.assertEqual(records[0]["avg_popularity"], 90)

    @patch(f"{MODULE}.save_to_jsonl")
    @patch(f"{MODULE}.load_tracks_jsonl")
    def test_genre_growth_trends(self, mock_load, mock_save):
        context = build_asset_context()
        mock_load.return_value = TRACK_ROWS

        result_path = genre_growth_trends(context)

        self.assertEqual(result_path, GENRE_GROWTH_FILE)
        records, _ = mock_save.call_args.args
        # Overall average is 45: house is above it, the others below
        by_name = {r["name"]: r for r in records}
        self.assertEqual(by_name["house"]["trend"], "rising")
        self.assertEqual(by_name["house"]["growth_score"], 1)
        self.assertEqual(by_name["drone"]["trend"], "stable")
        self.assertLessEqual(by_name["drone"]["growth_score"], 0)
        self.assertEqual(records[0]["name"], "house")


if __name__ == "__main__":
    unittest.main()
