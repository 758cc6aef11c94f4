from pathlib import Path

from dagster import asset, AssetExecutionContext

from qobuz_pulse.settings import TRACKS_CSV, TRACKS_FILE
from qobuz_pulse.utils.track_store import read_track_frame


@asset(
    name="tracks_dataset",
    description="Loads the cleaned track export and saves a normalized JSONL copy.",
    group_name="loading",
)
def tracks_dataset(context: AssetExecutionContext) -> Path:
    """
    Reads the track CSV once, squashes stray whitespace in every text column
    and writes one JSON object per track for the analytics assets.
    """
    df = read_track_frame(TRACKS_CSV)

    if df.height == 0:
        context.log.warning(f"Track export {TRACKS_CSV} has no rows.")

    TRACKS_FILE.parent.mkdir(parents=True, exist_ok=True)
    df.write_ndjson(TRACKS_FILE)

    context.log.info(f"Saved {df.height} tracks to {TRACKS_FILE}")
    return TRACKS_FILE
