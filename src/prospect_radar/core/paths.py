from pathlib import Path

# This file lives at <repo>/src/prospect_radar/core/paths.py
# Repo root is 3 levels up (paths.py -> core -> prospect_radar -> src -> <repo>)
PROJECT_ROOT = Path(__file__).resolve().parents[3]

DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"

# User annotations (tags, watchlist, scouting reports)
DEFAULT_ANNOTATIONS_PATH = DATA_DIR / "annotations.json"
