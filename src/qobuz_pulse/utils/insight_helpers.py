"""
Collection-level views used by the overview and insights pages: counts,
distributions, tempo and release-impact summaries, and track/artist
filtering for the browse pages.
"""

from typing import Any, Iterable, List, Optional

from qobuz_pulse.settings import (
    ALBUM_FIELDS,
    ARTIST_FIELDS,
    GENRE_FIELDS,
    HIGH_POPULARITY_THRESHOLD,
    MAX_VALID_TEMPO,
    POPULARITY_BY_GENRE_LIMIT,
    RELEASE_IMPACT_LIMIT,
    TOP_GENRES_LIMIT,
)
from qobuz_pulse.utils.aggregation_helpers import coerce_tracks, resolve_genre
from qobuz_pulse.utils.models import (
    ArtistSummary,
    CollectionOverview,
    CountBucket,
    ImpactTrack,
    MomentumRecord,
    PopularityBand,
    ReleaseImpact,
    TempoSummary,
    Track,
)
from qobuz_pulse.utils.transformation_helpers import (
    clean_text_string,
    first_present,
    round_half_up,
    safe_mean,
)

KEY_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

TRACK_SORT_KEYS = {
    "popularity": lambda track: track.popularity,
    "duration": lambda track: track.duration_ms,
    "danceability": lambda track: track.danceability,
    "energy": lambda track: track.energy,
    "name": lambda track: (track.track_name or "").lower(),
}


def _buckets(labels: List[str]) -> dict:
    return {label: 0 for label in labels}


def _to_count_buckets(counts: dict) -> List[CountBucket]:
    return [CountBucket(name=name, value=value) for name, value in counts.items()]


def format_duration(ms: Optional[float]) -> str:
    """Formats milliseconds as M:SS."""
    if not ms or ms != ms:
        return "0:00"
    seconds = int(ms // 1000)
    minutes, remaining_seconds = divmod(seconds, 60)
    return f"{minutes}:{remaining_seconds:02d}"


def format_popularity(popularity: Optional[int]) -> str:
    return f"{popularity or 0}%"


def summarize_collection(tracks: Iterable[Any]) -> CollectionOverview:
    """
    Headline numbers for the overview page. Artist and genre counts only
    consider the cleaned fields.
    """
    valid_tracks = coerce_tracks(tracks)
    artists = {track.artist_clean for track in valid_tracks if track.artist_clean}
    genres = {
        track.track_genre_clean for track in valid_tracks if track.track_genre_clean
    }
    total_popularity = sum(track.popularity for track in valid_tracks)

    return CollectionOverview(
        total_tracks=len(valid_tracks),
        total_artists=len(artists),
        total_genres=len(genres),
        avg_popularity=round_half_up(safe_mean(total_popularity, len(valid_tracks))),
        total_duration_ms=sum(track.duration_ms for track in valid_tracks),
    )


def count_top_genres(
    tracks: Iterable[Any], limit: int = TOP_GENRES_LIMIT
) -> List[CountBucket]:
    counts: dict = {}
    for track in coerce_tracks(tracks):
        genre = resolve_genre(track)
        counts[genre] = counts.get(genre, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [CountBucket(name=name, value=value) for name, value in ranked[:limit]]


def popularity_distribution(tracks: Iterable[Any]) -> List[CountBucket]:
    """Track counts per popularity band; upper bounds are inclusive."""
    ranges = _buckets(["0-20", "21-40", "41-60", "61-80", "81-100"])
    for track in coerce_tracks(tracks):
        popularity = track.popularity
        if popularity <= 20:
            ranges["0-20"] += 1
        elif popularity <= 40:
            ranges["21-40"] += 1
        elif popularity <= 60:
            ranges["41-60"] += 1
        elif popularity <= 80:
            ranges["61-80"] += 1
        else:
            ranges["81-100"] += 1
    return _to_count_buckets(ranges)


def duration_distribution(tracks: Iterable[Any]) -> List[CountBucket]:
    ranges = _buckets(["0-2min", "2-3min", "3-4min", "4-5min", "5-6min", "6+min"])
    for track in coerce_tracks(tracks):
        minutes = track.duration_ms / 60000
        if minutes < 2:
            ranges["0-2min"] += 1
        elif minutes < 3:
            ranges["2-3min"] += 1
        elif minutes < 4:
            ranges["3-4min"] += 1
        elif minutes < 5:
            ranges["4-5min"] += 1
        elif minutes < 6:
            ranges["5-6min"] += 1
        else:
            ranges["6+min"] += 1
    return _to_count_buckets(ranges)


def key_distribution(tracks: Iterable[Any]) -> List[CountBucket]:
    """Track counts per musical key, most common first. Keyless tracks are skipped."""
    counts: dict = {}
    for track in coerce_tracks(tracks):
        if track.key is None:
            continue
        if 0 <= track.key < len(KEY_NAMES):
            key_name = KEY_NAMES[track.key]
        else:
            key_name = f"Key {track.key}"
        counts[key_name] = counts.get(key_name, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [CountBucket(name=name, value=value) for name, value in ranked]


def explicit_breakdown(tracks: Iterable[Any]) -> List[CountBucket]:
    valid_tracks = coerce_tracks(tracks)
    explicit = sum(1 for track in valid_tracks if track.explicit)
    return [
        CountBucket(name="Explicit", value=explicit),
        CountBucket(name="Non-Explicit", value=len(valid_tracks) - explicit),
    ]


def analyze_tempo(tracks: Iterable[Any]) -> TempoSummary | None:
    """
    Summarizes tempo over tracks with a plausible BPM (strictly between 0
    and 300). Returns None when no track qualifies.
    """
    tempos = [
        track.tempo
        for track in coerce_tracks(tracks)
        if 0 < track.tempo < MAX_VALID_TEMPO
    ]
    if not tempos:
        return None

    ranges = _buckets(
        ["Slow (0-80)", "Moderate (80-120)", "Fast (120-160)", "Very Fast (160+)"]
    )
    for tempo in tempos:
        if tempo < 80:
            ranges["Slow (0-80)"] += 1
        elif tempo < 120:
            ranges["Moderate (80-120)"] += 1
        elif tempo < 160:
            ranges["Fast (120-160)"] += 1
        else:
            ranges["Very Fast (160+)"] += 1

    return TempoSummary(
        avg=round_half_up(sum(tempos) / len(tempos)),
        min=round_half_up(min(tempos)),
        max=round_half_up(max(tempos)),
        ranges=_to_count_buckets(ranges),
    )


def _impact_score(track: Track) -> int:
    return round_half_up(
        track.popularity * 0.6
        + (track.energy * 100) * 0.2
        + (track.danceability * 100) * 0.2
    )


def release_impact(
    tracks: Iterable[Any], limit: int = RELEASE_IMPACT_LIMIT
) -> ReleaseImpact:
    """
    Ranks the best performing tracks (popularity above 70) by a blended
    impact score and buckets the whole collection into popularity tiers.
    """
    valid_tracks = coerce_tracks(tracks)

    popular = [
        track for track in valid_tracks if track.popularity > HIGH_POPULARITY_THRESHOLD
    ]
    popular = sorted(popular, key=lambda track: track.popularity, reverse=True)[:limit]
    top_tracks = [
        ImpactTrack(
            track=track.track_name or "Unknown",
            artist=first_present(track, ARTIST_FIELDS) or "Unknown",
            popularity=track.popularity,
            energy=track.energy * 100,
            danceability=track.danceability * 100,
            impact_score=_impact_score(track),
        )
        for track in popular
    ]

    tiers = _buckets(
        ["High Impact (80-100)", "Medium Impact (60-79)", "Low Impact (<60)"]
    )
    for track in valid_tracks:
        if track.popularity >= 80:
            tiers["High Impact (80-100)"] += 1
        elif track.popularity >= 60:
            tiers["Medium Impact (60-79)"] += 1
        else:
            tiers["Low Impact (<60)"] += 1

    total_impact = sum(track.impact_score for track in top_tracks)
    return ReleaseImpact(
        top_tracks=top_tracks,
        performance_tiers=_to_count_buckets(tiers),
        avg_impact_score=round_half_up(safe_mean(total_impact, len(top_tracks))),
    )


def popularity_by_genre(
    tracks: Iterable[Any], limit: int = POPULARITY_BY_GENRE_LIMIT
) -> List[CountBucket]:
    """Genres ranked by rounded average popularity (value), highest first."""
    totals: dict = {}
    for track in coerce_tracks(tracks):
        genre = resolve_genre(track)
        count, popularity = totals.get(genre, (0, 0))
        totals[genre] = (count + 1, popularity + track.popularity)

    averages = [
        CountBucket(name=genre, value=round_half_up(popularity / count))
        for genre, (count, popularity) in totals.items()
    ]
    return sorted(averages, key=lambda bucket: bucket.value, reverse=True)[:limit]


def momentum_tiers(momentum_records: Iterable[MomentumRecord]) -> List[CountBucket]:
    tiers = _buckets(
        ["High Momentum (80+)", "Medium Momentum (50-79)", "Low Momentum (<50)"]
    )
    for record in momentum_records:
        if record.momentum >= 80:
            tiers["High Momentum (80+)"] += 1
        elif record.momentum >= 50:
            tiers["Medium Momentum (50-79)"] += 1
        else:
            tiers["Low Momentum (<50)"] += 1
    return _to_count_buckets(tiers)


def popularity_by_catalog_size(
    momentum_records: Iterable[MomentumRecord],
) -> List[PopularityBand]:
    """
    Groups scored artists by how many tracks they have and averages their
    popularity within each band.
    """
    bands = {
        "1-5 tracks": [],
        "6-10 tracks": [],
        "11-20 tracks": [],
        "21-50 tracks": [],
        "50+ tracks": [],
    }
    for record in momentum_records:
        if record.track_count <= 5:
            bands["1-5 tracks"].append(record)
        elif record.track_count <= 10:
            bands["6-10 tracks"].append(record)
        elif record.track_count <= 20:
            bands["11-20 tracks"].append(record)
        elif record.track_count <= 50:
            bands["21-50 tracks"].append(record)
        else:
            bands["50+ tracks"].append(record)

    return [
        PopularityBand(
            range=label,
            artist_count=len(members),
            avg_popularity=round_half_up(
                safe_mean(sum(m.avg_popularity for m in members), len(members))
            ),
        )
        for label, members in bands.items()
    ]


def _matches_any(track: Track, fields, predicate) -> bool:
    for field in fields:
        value = getattr(track, field, None)
        if value and predicate(value.lower()):
            return True
    return False


def filter_tracks(
    tracks: Iterable[Any],
    search: str = "",
    genre: str = "",
    artist: str = "",
    sort_by: str = "popularity",
    descending: bool = True,
) -> List[Track]:
    """
    Filters and sorts tracks for the browse page.

    Args:
        tracks: The track collection. Not modified.
        search: Case-insensitive substring matched against the track name,
            artist fields and album fields. Whitespace is squashed the same
            way the dataset was normalized.
        genre: Case-insensitive exact match on either genre field.
        artist: Case-insensitive exact match on either artist field.
        sort_by: One of 'popularity', 'duration', 'danceability', 'energy'
            or 'name'. Any other value keeps the dataset order.
        descending: Sort direction.

    Returns:
        A new list of matching tracks.
    """
    term = clean_text_string(search or "").lower()
    genre = (genre or "").lower()
    artist = (artist or "").lower()

    matches = []
    for track in coerce_tracks(tracks):
        if term and not _matches_any(
            track,
            ("track_name",) + ARTIST_FIELDS + ALBUM_FIELDS,
            lambda value: term in value,
        ):
            continue
        if genre and not _matches_any(track, GENRE_FIELDS, lambda v: v == genre):
            continue
        if artist and not _matches_any(track, ARTIST_FIELDS, lambda v: v == artist):
            continue
        matches.append(track)

    sort_key = TRACK_SORT_KEYS.get(sort_by)
    if sort_key is None:
        return matches
    return sorted(matches, key=sort_key, reverse=descending)


def search_artists(artists: Iterable[ArtistSummary], term: str) -> List[ArtistSummary]:
    if not term:
        return list(artists)
    term = term.lower()
    return [artist for artist in artists if term in artist.name.lower()]


def rank_artists(
    artists: Iterable[ArtistSummary], by: str = "tracks"
) -> List[ArtistSummary]:
    """Re-sorts artist summaries by 'tracks' or 'popularity', descending."""
    if by == "tracks":
        return sorted(artists, key=lambda artist: artist.track_count, reverse=True)
    return sorted(artists, key=lambda artist: artist.avg_popularity, reverse=True)
