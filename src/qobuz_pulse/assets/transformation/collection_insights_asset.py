from pathlib import Path

from dagster import asset, AssetExecutionContext

from qobuz_pulse.settings import COLLECTION_INSIGHTS_FILE, TRACKS_FILE
from qobuz_pulse.utils.aggregation_helpers import score_momentum
from qobuz_pulse.utils.insight_helpers import (
    analyze_tempo,
    count_top_genres,
    duration_distribution,
    explicit_breakdown,
    key_distribution,
    momentum_tiers,
    popularity_by_catalog_size,
    popularity_by_genre,
    popularity_distribution,
    release_impact,
    summarize_collection,
)
from qobuz_pulse.utils.io_helpers import models_to_records, save_to_jsonl
from qobuz_pulse.utils.track_store import TrackStore, load_tracks_jsonl


@asset(
    name="collection_insights",
    deps=["tracks_dataset"],
    description="Overview numbers and distributions for the overview and insights pages.",
    group_name="transformation",
)
def collection_insights(context: AssetExecutionContext) -> Path:
    """
    Computes every collection-level view and saves one line per view,
    shaped as {"view": <name>, "data": <payload>}.
    """
    # Every view below reads the same validated tuple
    store = TrackStore(TRACKS_FILE, loader=load_tracks_jsonl)
    tracks = store.tracks()
    momentum = score_momentum(tracks)
    tempo = analyze_tempo(tracks)

    views = {
        "overview": summarize_collection(tracks).model_dump(mode="json"),
        "top_genres": models_to_records(count_top_genres(tracks)),
        "popularity_distribution": models_to_records(popularity_distribution(tracks)),
        "duration_distribution": models_to_records(duration_distribution(tracks)),
        "key_distribution": models_to_records(key_distribution(tracks)),
        "explicit_breakdown": models_to_records(explicit_breakdown(tracks)),
        "tempo": tempo.model_dump(mode="json") if tempo else None,
        "release_impact": release_impact(tracks).model_dump(mode="json"),
        "popularity_by_genre": models_to_records(popularity_by_genre(tracks)),
        "momentum_tiers": models_to_records(momentum_tiers(momentum)),
        "popularity_by_catalog_size": models_to_records(
            popularity_by_catalog_size(momentum)
        ),
    }

    if tempo is None:
        context.log.warning("No track has a usable tempo; tempo view is empty.")

    save_to_jsonl(
        [{"view": name, "data": data} for name, data in views.items()],
        COLLECTION_INSIGHTS_FILE,
    )

    context.log.info(f"Saved {len(views)} insight views for {len(tracks)} tracks.")
    return COLLECTION_INSIGHTS_FILE
