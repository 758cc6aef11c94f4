"""
Centralized configuration settings for the QobuzPulse analytics project.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ==============================================================================
#  CORE PATH DEFINITIONS
# ==============================================================================
# Defines the project's directory structure for robust path management.

# The 'src' directory, which is the root for Python imports.
SRC_ROOT = Path(__file__).resolve().parents[1]

# The absolute root of the project (one level up from 'src').
PROJECT_ROOT = SRC_ROOT.parent

# Load environment variables from .env file located at the project root
load_dotenv(PROJECT_ROOT / ".env")

# Top-level directory for the raw dataset and all derived views.
DATA_DIR = PROJECT_ROOT / "data_volume"

# Datasets
PATH_DATASETS = DATA_DIR / "datasets"

# Derived analytics views consumed by the dashboard
PATH_ANALYTICS = DATA_DIR / "analytics"

# ==============================================================================
#  EXPLICIT FILE PATHS
# ==============================================================================

# The cleaned track export. Can be pointed elsewhere through the environment.
TRACKS_CSV = Path(
    os.getenv("QOBUZ_PULSE_TRACKS_CSV", str(PATH_DATASETS / "tracks_cleaned.csv"))
)

# Normalized copy of the dataset, one track per line.
TRACKS_FILE = PATH_DATASETS / "tracks.jsonl"

ARTIST_SUMMARIES_FILE = PATH_ANALYTICS / "artist_summaries.jsonl"
ARTIST_MOMENTUM_FILE = PATH_ANALYTICS / "artist_momentum.jsonl"
RISING_ARTISTS_FILE = PATH_ANALYTICS / "rising_artists.jsonl"
GENRE_STATISTICS_FILE = PATH_ANALYTICS / "genre_statistics.jsonl"
GENRE_GROWTH_FILE = PATH_ANALYTICS / "genre_growth_trends.jsonl"
COLLECTION_INSIGHTS_FILE = PATH_ANALYTICS / "collection_insights.jsonl"

# ==============================================================================
#  FIELD FALLBACK CHAINS
# ==============================================================================
# Candidate column names, in priority order. The first non-empty value wins.

ARTIST_FIELDS = ("artist_clean", "artists")
GENRE_FIELDS = ("track_genre_clean", "track_genre")
ALBUM_FIELDS = ("album_clean", "album_name")

UNKNOWN_GENRE = "Unknown"

# ==============================================================================
#  ANALYTICS PARAMETERS
# ==============================================================================

# --- Momentum ---
MOMENTUM_MIN_TRACKS = 3
HIGH_POPULARITY_THRESHOLD = 70
VERY_HIGH_POPULARITY_THRESHOLD = 85
HIGH_POPULARITY_WEIGHT = 2
VERY_HIGH_POPULARITY_WEIGHT = 5
ABOVE_AVERAGE_BONUS = 10

# --- Rising artists ---
RISING_MAX_TRACKS = 20
RISING_LIMIT = 20

# --- Genre growth ---
GROWTH_SCALE = 100

# Decimal places kept for averaged audio features (energy, danceability, valence)
FEATURE_PRECISION = 3

# --- Supplementary views ---
TOP_GENRES_LIMIT = 10
POPULARITY_BY_GENRE_LIMIT = 15
RELEASE_IMPACT_LIMIT = 20
MAX_VALID_TEMPO = 300
