"""Configuration and API key management for Grocery Prices."""

import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# App directories
APP_NAME = "grocery-prices"
CONFIG_DIR = Path(os.getenv("GROCERY_PRICES_CACHE_DIR") or Path.home() / f".{APP_NAME}")
PACKAGE_CACHE_FILE = CONFIG_DIR / "package_size_cache.json"
PRICE_CACHE_FILE = CONFIG_DIR / "price_cache.json"

# Cache lifetimes
PACKAGE_CACHE_TTL = timedelta(days=30)
PRICE_CACHE_TTL = timedelta(hours=24)

# API Configuration
API_BASE_URL = os.getenv("SPOONACULAR_BASE_URL", "https://api.spoonacular.com")
API_TIMEOUT = 10.0


def ensure_config_dir() -> Path:
    """Create the config directory if it doesn't exist yet."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def get_api_key() -> str | None:
    """Get the Spoonacular API key from the environment."""
    key = os.getenv("SPOONACULAR_API_KEY")
    return key.strip() if key and key.strip() else None


def mask_api_key(key: str | None) -> str:
    """Mask an API key for display, keeping the first 5 and last 4 characters."""
    if not key:
        return "<none>"
    if len(key) <= 9:
        return "*" * len(key)
    return f"{key[:5]}...{key[-4:]}"
