"""
Loading of the track export and an explicit, caller-owned cache for it.
The aggregation helpers never touch this module; callers load once and pass
the resulting tracks in.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import polars as pl

from qobuz_pulse.utils.aggregation_helpers import coerce_tracks
from qobuz_pulse.utils.models import Track
from qobuz_pulse.utils.transformation_helpers import clean_text

logger = logging.getLogger(__name__)


def normalize_track_frame(df: pl.DataFrame) -> pl.DataFrame:
    """Squashes whitespace in every string column of the track frame."""
    for name, dtype in df.schema.items():
        if dtype == pl.Utf8:
            df = clean_text(df, name)
    return df


def read_track_frame(file_path: Path) -> pl.DataFrame:
    """
    Reads the track export into a normalized polars frame.

    Args:
        file_path: Path to the CSV export (header row required).

    Returns:
        The frame with whitespace squashed in every string column.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    df = pl.read_csv(file_path, infer_schema_length=10000)
    logger.info("Loaded %d rows from %s", df.height, file_path)
    return normalize_track_frame(df)


def load_tracks_csv(file_path: Path) -> List[Dict[str, Any]]:
    """Reads the track export into one normalized dictionary per row."""
    return read_track_frame(file_path).to_dicts()


def to_tracks(rows: Iterable[Dict[str, Any]]) -> Tuple[Track, ...]:
    """Validates raw rows into an immutable tuple of Track records."""
    return tuple(coerce_tracks(rows))


class TrackStore:
    """
    Holds the loaded track collection for the lifetime of its owner.

    The first call to `tracks()` loads and validates the dataset; later
    calls return the same tuple until `invalidate()` is called.
    """

    def __init__(
        self,
        file_path: Path,
        loader: Callable[[Path], List[Dict[str, Any]]] = load_tracks_csv,
    ):
        self.file_path = file_path
        self.loader = loader
        self._tracks: Optional[Tuple[Track, ...]] = None

    @property
    def is_loaded(self) -> bool:
        return self._tracks is not None

    def tracks(self) -> Tuple[Track, ...]:
        if self._tracks is None:
            self._tracks = to_tracks(self.loader(self.file_path))
            logger.debug("Cached %d tracks from %s", len(self._tracks), self.file_path)
        return self._tracks

    def invalidate(self):
        self._tracks = None


def load_tracks_jsonl(file_path: Path) -> List[Dict[str, Any]]:
    """
    Reads the normalized track file written by the `tracks_dataset` asset.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    # polars refuses to infer a schema from an empty file
    if file_path.stat().st_size == 0:
        return []
    return pl.read_ndjson(file_path).to_dicts()
