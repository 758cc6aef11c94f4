import json
from pathlib import Path

import pytest

from qobuz_pulse.utils.models import Track
from qobuz_pulse.utils.track_store import (
    TrackStore,
    load_tracks_csv,
    load_tracks_jsonl,
    read_track_frame,
    to_tracks,
)


# --- Tests for load_tracks_csv ---


def test_load_tracks_csv(tmp_path: Path):
    csv_file = tmp_path / "tracks_cleaned.csv"
    csv_file.write_text(
        "track_id,track_name,artist_clean,artists,popularity,energy\n"
        '1,"  Song   One ",Alpha,Alpha,80,0.5\n'
        "2,Song Two,,Beta,,0.2\n",
        encoding="utf-8",
    )

    rows = load_tracks_csv(csv_file)

    assert len(rows) == 2
    assert rows[0]["track_name"] == "Song One"
    assert rows[1]["artist_clean"] is None
    assert rows[1]["popularity"] is None

    tracks = to_tracks(rows)
    assert tracks[0].track_id == "1"
    assert tracks[1].artists == "Beta"
    assert tracks[1].popularity == 0


def test_load_tracks_csv_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_tracks_csv(tmp_path / "missing.csv")


# --- Tests for load_tracks_jsonl ---


def test_load_tracks_jsonl(tmp_path: Path):
    jsonl_file = tmp_path / "tracks.jsonl"
    jsonl_file.write_text(
        json.dumps({"artist_clean": "Alpha", "popularity": 10})
        + "\n"
        + json.dumps({"artist_clean": "Beta", "popularity": None})
        + "\n",
        encoding="utf-8",
    )

    rows = load_tracks_jsonl(jsonl_file)

    assert [row["artist_clean"] for row in rows] == ["Alpha", "Beta"]


def test_load_tracks_jsonl_empty_file(tmp_path: Path):
    jsonl_file = tmp_path / "tracks.jsonl"
    jsonl_file.write_text("", encoding="utf-8")

    assert load_tracks_jsonl(jsonl_file) == []


def test_load_tracks_jsonl_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_tracks_jsonl(tmp_path / "tracks.jsonl")


# --- Tests for TrackStore ---


def test_track_store_loads_once():
    calls = []

    def fake_loader(path):
        calls.append(path)
        return [{"artist_clean": "Alpha"}, None, {"popularity": "bad"}]

    store = TrackStore(Path("tracks.csv"), loader=fake_loader)
    assert not store.is_loaded

    first = store.tracks()
    second = store.tracks()

    assert first is second
    assert isinstance(first, tuple)
    assert first == (Track(artist_clean="Alpha"),)
    assert calls == [Path("tracks.csv")]


def test_track_store_invalidate_reloads():
    batches = [[{"artist_clean": "Old"}], [{"artist_clean": "New"}]]

    store = TrackStore(Path("tracks.csv"), loader=lambda path: batches.pop(0))

    assert store.tracks()[0].artist_clean == "Old"
    store.invalidate()
    assert not store.is_loaded
    assert store.tracks()[0].artist_clean == "New"


def test_read_track_frame_normalizes_strings(tmp_path: Path):
    csv_file = tmp_path / "tracks_cleaned.csv"
    csv_file.write_text(
        'artist_clean,popularity\n" Boards  of\tCanada ",71\n', encoding="utf-8"
    )

    df = read_track_frame(csv_file)

    assert df.height == 1
    assert df["artist_clean"][0] == "Boards of Canada"
    assert df["popularity"][0] == 71


def test_read_track_frame_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        read_track_frame(tmp_path / "missing.csv")


def test_track_store_default_loader_reads_csv(tmp_path: Path):
    csv_file = tmp_path / "tracks_cleaned.csv"
    csv_file.write_text(
        "artist_clean,track_genre_clean,popularity\nAlpha,rock,80\nBeta,,\n",
        encoding="utf-8",
    )

    store = TrackStore(csv_file)

    tracks = store.tracks()
    assert [track.artist_clean for track in tracks] == ["Alpha", "Beta"]
    assert tracks[1].popularity == 0
