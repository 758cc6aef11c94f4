"""
Aggregations that turn a flat list of track records into the ranked views
shown on the dashboard: artists, genres, artist momentum, rising artists and
genre growth trends.

Every function here is pure. Inputs are never mutated, results are freshly
built on each call, and bad entries are skipped instead of raised.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from qobuz_pulse.settings import (
    ABOVE_AVERAGE_BONUS,
    ARTIST_FIELDS,
    FEATURE_PRECISION,
    GENRE_FIELDS,
    GROWTH_SCALE,
    HIGH_POPULARITY_THRESHOLD,
    HIGH_POPULARITY_WEIGHT,
    MOMENTUM_MIN_TRACKS,
    RISING_LIMIT,
    RISING_MAX_TRACKS,
    UNKNOWN_GENRE,
    VERY_HIGH_POPULARITY_THRESHOLD,
    VERY_HIGH_POPULARITY_WEIGHT,
)
from qobuz_pulse.utils.models import (
    ArtistSummary,
    GenreSummary,
    GrowthRecord,
    MomentumRecord,
    Track,
)
from qobuz_pulse.utils.transformation_helpers import (
    first_present,
    round_fixed,
    round_half_up,
    safe_mean,
)

logger = logging.getLogger(__name__)


def coerce_tracks(entries: Iterable[Any] | None) -> List[Track]:
    """
    Validates raw entries into Track records, dropping anything that is not
    a track: None, non-mapping values, and mappings that fail validation.

    Args:
        entries: Track models and/or plain dicts, in dataset order.

    Returns:
        A new list of Track records in the original order.
    """
    tracks = []
    if entries is None:
        return tracks

    for position, entry in enumerate(entries):
        if isinstance(entry, Track):
            tracks.append(entry)
            continue
        if not isinstance(entry, Mapping):
            logger.debug("Skipping non-record entry at position %d", position)
            continue
        try:
            tracks.append(Track.model_validate(dict(entry)))
        except ValidationError as exc:
            logger.debug(
                "Skipping malformed track at position %d: %s",
                position,
                exc.errors()[0]["msg"],
            )
    return tracks


def overall_average_popularity(tracks: List[Track]) -> float:
    """Mean popularity over every track, 0 for an empty collection."""
    return safe_mean(sum(track.popularity for track in tracks), len(tracks))


def resolve_genre(track: Track | Mapping) -> str:
    """Genre identity of a track; never empty."""
    return first_present(track, GENRE_FIELDS) or UNKNOWN_GENRE


def _group_by_artist(tracks: List[Track]) -> Dict[str, Dict[str, Any]]:
    """
    Tallies every track with a resolvable artist name. Tracks without a
    name on any fallback field are left out.
    """
    groups: Dict[str, Dict[str, Any]] = {}
    for track in tracks:
        artist = first_present(track, ARTIST_FIELDS)
        if not artist:
            continue

        tally = groups.get(artist)
        if tally is None:
            # dict keys double as an insertion-ordered set of genres
            tally = {
                "track_count": 0,
                "total_popularity": 0,
                "high": 0,
                "very_high": 0,
                "genres": {},
            }
            groups[artist] = tally

        tally["track_count"] += 1
        tally["total_popularity"] += track.popularity
        if track.popularity > HIGH_POPULARITY_THRESHOLD:
            tally["high"] += 1
        if track.popularity > VERY_HIGH_POPULARITY_THRESHOLD:
            tally["very_high"] += 1
        if track.track_genre_clean:
            tally["genres"][track.track_genre_clean] = None
    return groups


def aggregate_artists(tracks: Iterable[Any]) -> List[ArtistSummary]:
    """
    Builds one summary per artist, ordered by track count (descending).

    Args:
        tracks: The track collection. Not modified.

    Returns:
        A list of ArtistSummary. Empty for an empty collection.
    """
    groups = _group_by_artist(coerce_tracks(tracks))

    summaries = [
        ArtistSummary(
            name=name,
            track_count=tally["track_count"],
            avg_popularity=round_half_up(
                tally["total_popularity"] / tally["track_count"]
            ),
            genres=list(tally["genres"]),
        )
        for name, tally in groups.items()
    ]
    return sorted(summaries, key=lambda summary: summary.track_count, reverse=True)


def aggregate_genres(tracks: Iterable[Any]) -> List[GenreSummary]:
    """
    Builds one summary per genre, ordered by track count (descending).

    Every track belongs to exactly one genre; tracks with no genre on either
    field fall under "Unknown". A missing audio feature counts as 0 but the
    track still counts toward the genre, so sparse features pull the average
    down.
    """
    groups: Dict[str, Dict[str, float]] = {}
    for track in coerce_tracks(tracks):
        genre = resolve_genre(track)
        tally = groups.setdefault(
            genre,
            {
                "count": 0,
                "popularity": 0,
                "energy": 0.0,
                "danceability": 0.0,
                "valence": 0.0,
            },
        )
        tally["count"] += 1
        tally["popularity"] += track.popularity
        tally["energy"] += track.energy
        tally["danceability"] += track.danceability
        tally["valence"] += track.valence

    summaries = [
        GenreSummary(
            name=name,
            count=tally["count"],
            avg_popularity=round_half_up(tally["popularity"] / tally["count"]),
            avg_energy=round_fixed(
                tally["energy"] / tally["count"], FEATURE_PRECISION
            ),
            avg_danceability=round_fixed(
                tally["danceability"] / tally["count"], FEATURE_PRECISION
            ),
            avg_valence=round_fixed(
                tally["valence"] / tally["count"], FEATURE_PRECISION
            ),
        )
        for name, tally in groups.items()
    ]
    return sorted(summaries, key=lambda summary: summary.count, reverse=True)


def score_momentum(tracks: Iterable[Any]) -> List[MomentumRecord]:
    """
    Scores every artist with at least three tracks and ranks them by
    momentum (descending). Ties keep dataset order.

    momentum = round(avg * count / 100 + 2 * high + 5 * very_high + bonus)

    where avg is the artist's already-rounded average popularity, high and
    very_high count tracks above 70 and 85, and bonus is 10 when avg beats
    the collection-wide mean popularity.
    """
    valid_tracks = coerce_tracks(tracks)
    overall_avg = overall_average_popularity(valid_tracks)

    records = []
    for name, tally in _group_by_artist(valid_tracks).items():
        track_count = tally["track_count"]
        if track_count < MOMENTUM_MIN_TRACKS:
            continue

        avg_popularity = round_half_up(tally["total_popularity"] / track_count)
        bonus = ABOVE_AVERAGE_BONUS if avg_popularity > overall_avg else 0
        momentum = round_half_up(
            (avg_popularity * track_count) / 100
            + tally["high"] * HIGH_POPULARITY_WEIGHT
            + tally["very_high"] * VERY_HIGH_POPULARITY_WEIGHT
            + bonus
        )
        records.append(
            MomentumRecord(
                name=name,
                track_count=track_count,
                total_popularity=tally["total_popularity"],
                avg_popularity=avg_popularity,
                high_popularity_tracks=tally["high"],
                very_high_popularity_tracks=tally["very_high"],
                momentum=momentum,
            )
        )

    return sorted(records, key=lambda record: record.momentum, reverse=True)


def rank_rising_artists(
    momentum_records: Iterable[MomentumRecord],
    max_tracks: int = RISING_MAX_TRACKS,
    limit: int = RISING_LIMIT,
) -> List[MomentumRecord]:
    """
    Re-ranks momentum records by momentum per track, keeping only artists
    with a small catalog. Scores are left untouched.

    Args:
        momentum_records: Output of `score_momentum`.
        max_tracks: Largest catalog still considered "rising".
        limit: Maximum number of artists returned.

    Returns:
        At most `limit` records, most efficient first.
    """
    candidates = [
        record for record in momentum_records if record.track_count <= max_tracks
    ]
    ranked = sorted(
        candidates,
        key=lambda record: record.momentum / record.track_count,
        reverse=True,
    )
    return ranked[:limit]


def select_rising_artists(tracks: Iterable[Any]) -> List[MomentumRecord]:
    return rank_rising_artists(score_momentum(tracks))


def score_genre_growth(tracks: Iterable[Any]) -> List[GrowthRecord]:
    """
    Estimates per-genre growth against the collection-wide mean popularity,
    scaled by genre size, and ranks genres by growth score (descending).

    A genre whose average sits exactly on the collection mean scores 0 and
    is labelled "stable"; only a strictly higher average is "rising".
    """
    valid_tracks = coerce_tracks(tracks)
    overall_avg = overall_average_popularity(valid_tracks)

    records = []
    for genre in aggregate_genres(valid_tracks):
        growth_score = round_half_up(
            (genre.avg_popularity - overall_avg) * (genre.count / GROWTH_SCALE)
        )
        trend = "rising" if genre.avg_popularity > overall_avg else "stable"
        records.append(
            GrowthRecord(
                **genre.model_dump(), growth_score=growth_score, trend=trend
            )
        )

    return sorted(records, key=lambda record: record.growth_score, reverse=True)
