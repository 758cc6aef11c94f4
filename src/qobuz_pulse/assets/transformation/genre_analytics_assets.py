from pathlib import Path

from dagster import asset, AssetExecutionContext

from qobuz_pulse.settings import GENRE_GROWTH_FILE, GENRE_STATISTICS_FILE, TRACKS_FILE
from qobuz_pulse.utils.aggregation_helpers import aggregate_genres, score_genre_growth
from qobuz_pulse.utils.io_helpers import models_to_records, save_to_jsonl
from qobuz_pulse.utils.track_store import load_tracks_jsonl


@asset(
    name="genre_statistics",
    deps=["tracks_dataset"],
    description="Per-genre counts, popularity and average audio features.",
    group_name="transformation",
)
def genre_statistics(context: AssetExecutionContext) -> Path:
    tracks = load_tracks_jsonl(TRACKS_FILE)
    summaries = aggregate_genres(tracks)

    save_to_jsonl(models_to_records(summaries), GENRE_STATISTICS_FILE)

    context.log.info(f"Computed statistics for {len(summaries)} genres.")
    return GENRE_STATISTICS_FILE


@asset(
    name="genre_growth_trends",
    deps=["tracks_dataset"],
    description="Genre growth score and trend against the collection average.",
    group_name="transformation",
)
def genre_growth_trends(context: AssetExecutionContext) -> Path:
    """
    Scores each genre's popularity relative to the whole collection and
    saves the genres with the strongest growth first.
    """
    tracks = load_tracks_jsonl(TRACKS_FILE)
    records = score_genre_growth(tracks)

    save_to_jsonl(models_to_records(records), GENRE_GROWTH_FILE)

    rising = sum(1 for record in records if record.trend == "rising")
    context.log.info(f"{rising} of {len(records)} genres are trending up.")
    return GENRE_GROWTH_FILE
