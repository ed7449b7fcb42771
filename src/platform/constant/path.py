from pathlib import Path


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Log directory
LOG_DIR = BASE_DIR / 'logs'

# Demo catalog used by script/seed_data.py
SEED_DATA_FILE = BASE_DIR / 'script' / 'seed_catalog.json'
