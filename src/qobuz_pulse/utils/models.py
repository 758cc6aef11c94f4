import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


_TRUE_STRINGS = {"true", "t", "yes", "y", "1"}


def _finite_number(value) -> float | None:
    """Reads a loosely typed numeric cell, None when it holds no finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class Track(BaseModel):
    """
    One row of the cleaned track export. Every field is optional; missing
    numeric values default to 0 and missing names to None. Unknown columns
    are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    track_id: str | None = None
    track_name: str | None = None
    album_name: str | None = None
    album_clean: str | None = None
    artists: str | None = None
    artist_clean: str | None = None
    track_genre: str | None = None
    track_genre_clean: str | None = None

    popularity: int = 0
    energy: float = 0.0
    danceability: float = 0.0
    valence: float = 0.0
    tempo: float = 0.0
    duration_ms: int = 0
    key: int | None = None
    explicit: bool = False

    @field_validator(
        "track_id",
        "track_name",
        "album_name",
        "album_clean",
        "artists",
        "artist_clean",
        "track_genre",
        "track_genre_clean",
        mode="before",
    )
    @classmethod
    def _coerce_name(cls, value):
        # CSV readers type numeric-looking names (e.g. "1975") as numbers
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            value = str(value)
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator(
        "popularity", "energy", "danceability", "valence", "tempo", mode="before"
    )
    @classmethod
    def _default_missing_number(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return value

    @field_validator("energy", "danceability", "valence", "tempo", mode="after")
    @classmethod
    def _finite_feature(cls, value: float) -> float:
        # "nan", "inf" and float infinities all parse; none of them is a measurement
        if not math.isfinite(value):
            return 0.0
        return value

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _parse_duration(cls, value):
        number = _finite_number(value)
        if number is None:
            return 0
        return int(number)

    @field_validator("key", mode="before")
    @classmethod
    def _parse_key(cls, value):
        number = _finite_number(value)
        if number is None or not number.is_integer():
            return None
        return int(number)

    @field_validator("explicit", mode="before")
    @classmethod
    def _parse_explicit(cls, value):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        return False


class ArtistSummary(BaseModel):
    name: str
    track_count: int
    avg_popularity: int
    genres: list[str] = Field(default_factory=list)


class GenreSummary(BaseModel):
    name: str
    count: int
    avg_popularity: int
    avg_energy: float
    avg_danceability: float
    avg_valence: float


class MomentumRecord(BaseModel):
    name: str
    track_count: int
    total_popularity: int = Field(default=0, exclude=True)
    avg_popularity: int
    high_popularity_tracks: int
    very_high_popularity_tracks: int
    momentum: int


class GrowthRecord(GenreSummary):
    growth_score: int
    trend: Literal["rising", "stable"]


# --- Supplementary views ---


class CountBucket(BaseModel):
    name: str
    value: int


class CollectionOverview(BaseModel):
    total_tracks: int
    total_artists: int
    total_genres: int
    avg_popularity: int
    total_duration_ms: int


class TempoSummary(BaseModel):
    avg: int
    min: int
    max: int
    ranges: list[CountBucket]


class ImpactTrack(BaseModel):
    track: str
    artist: str
    popularity: int
    energy: float
    danceability: float
    impact_score: int


class ReleaseImpact(BaseModel):
    top_tracks: list[ImpactTrack]
    performance_tiers: list[CountBucket]
    avg_impact_score: int


class PopularityBand(BaseModel):
    range: str
    artist_count: int
    avg_popularity: int
