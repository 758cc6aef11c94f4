from dagster import Definitions, load_assets_from_modules

from qobuz_pulse.assets.loading import tracks_dataset_asset
from qobuz_pulse.assets.transformation import (
    artist_analytics_assets,
    collection_insights_asset,
    genre_analytics_assets,
)


# Create a list of all asset modules
asset_modules = [
    tracks_dataset_asset,
    artist_analytics_assets,
    genre_analytics_assets,
    collection_insights_asset,
]

# Load all assets from the specified modules
all_assets = load_assets_from_modules(asset_modules)

defs = Definitions(assets=all_assets)
