"""
config.py — Environment-based configuration utilities.

- Loads .env (python-dotenv) and reads runtime settings from environment variables
- Provides helpers for parsing booleans and comma lists from env
"""

import os
from dotenv import load_dotenv

def load_env():
    # Load .env file into the process environment (existing vars win).
    load_dotenv()

def bool_from_env(name: str, default: bool = False) -> bool:
    # Parse boolean env var into True/False with default fallback.
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}

def list_from_env(name: str) -> list:
    # Split a comma separated env var into trimmed, non-empty entries.
    return [p.strip() for p in os.getenv(name, "").split(",") if p.strip()]

load_env()

DB_PATH = os.getenv("TUBEFEED_DB_PATH", "data/tubefeed.db")
ALLOWED_CHANNELS = set(list_from_env("ALLOWED_CHANNELS"))
SUBSCRIPTION_SAMPLE = int(os.getenv("SUBSCRIPTION_SAMPLE", "5")) # subscriptions pulled on first pass
PER_CHANNEL_SAMPLE = int(os.getenv("PER_CHANNEL_SAMPLE", "5")) # recent uploads per subscription
SEARCH_RESULTS = int(os.getenv("SEARCH_RESULTS", "10")) # results per similarity query
CATALOG_TIMEOUT = float(os.getenv("CATALOG_TIMEOUT", "20")) # seconds per upstream request
LOG_DEBUG = bool_from_env("LOG_DEBUG", False)
