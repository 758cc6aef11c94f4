from pathlib import Path

from dagster import asset, AssetExecutionContext

from qobuz_pulse.settings import (
    ARTIST_MOMENTUM_FILE,
    ARTIST_SUMMARIES_FILE,
    RISING_ARTISTS_FILE,
    TRACKS_FILE,
)
from qobuz_pulse.utils.aggregation_helpers import (
    aggregate_artists,
    rank_rising_artists,
    score_momentum,
)
from qobuz_pulse.utils.io_helpers import load_jsonl, models_to_records, save_to_jsonl
from qobuz_pulse.utils.models import MomentumRecord
from qobuz_pulse.utils.track_store import load_tracks_jsonl


@asset(
    name="artist_summaries",
    deps=["tracks_dataset"],
    description="Per-artist track counts, average popularity and genres.",
    group_name="transformation",
)
def artist_summaries(context: AssetExecutionContext) -> Path:
    tracks = load_tracks_jsonl(TRACKS_FILE)
    summaries = aggregate_artists(tracks)

    save_to_jsonl(models_to_records(summaries), ARTIST_SUMMARIES_FILE)

    context.log.info(
        f"Aggregated {len(tracks)} tracks into {len(summaries)} artists."
    )
    return ARTIST_SUMMARIES_FILE


@asset(
    name="artist_momentum",
    deps=["tracks_dataset"],
    description="Momentum score for every artist with at least three tracks.",
    group_name="transformation",
)
def artist_momentum(context: AssetExecutionContext) -> Path:
    """
    Scores artists by momentum and saves them highest first.
    """
    tracks = load_tracks_jsonl(TRACKS_FILE)
    if not tracks:
        context.log.warning("No tracks available; momentum view will be empty.")

    records = score_momentum(tracks)
    save_to_jsonl(models_to_records(records), ARTIST_MOMENTUM_FILE)

    context.log.info(f"Scored momentum for {len(records)} artists.")
    return ARTIST_MOMENTUM_FILE


@asset(
    name="rising_artists",
    deps=["artist_momentum"],
    description="Small-catalog artists ranked by momentum per track.",
    group_name="transformation",
)
def rising_artists(context: AssetExecutionContext) -> Path:
    """
    Re-ranks the saved momentum view by efficiency (momentum / track count)
    without rescoring.
    """
    records = [
        MomentumRecord.model_validate(row) for row in load_jsonl(ARTIST_MOMENTUM_FILE)
    ]
    rising = rank_rising_artists(records)

    save_to_jsonl(models_to_records(rising), RISING_ARTISTS_FILE)

    context.log.info(
        f"Selected {len(rising)} rising artists out of {len(records)} scored."
    )
    return RISING_ARTISTS_FILE
