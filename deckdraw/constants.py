"""Default configuration and remote endpoint constants for deckdraw."""

import os
from typing import Any, Dict, Optional

DEFAULT_BASE_URL = "https://deckofcardsapi.com/api/deck"

# Environment variable that overrides the provider base URL
BASE_URL_ENV_VAR = "DECKDRAW_API_URL"

DEFAULT_CONFIG: Dict[str, Any] = {
    "base_url": DEFAULT_BASE_URL,
    "deck_count": 1,
    "request_timeout": 10.0,
    "operation_timeout": None,
    "user_agent": "deckdraw/0.1.0",
}

# Provider path templates, relative to base_url
NEW_SHUFFLED_DECK_PATH = "new/shuffle/"
DRAW_PATH = "{deck_id}/draw/"
SHUFFLE_PATH = "{deck_id}/shuffle/"


def build_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Merge user supplied options over the defaults.

    The environment variable ``DECKDRAW_API_URL`` takes precedence over the
    default base URL, but an explicit ``base_url`` override wins over both.

    Args:
        overrides: Partial configuration dictionary

    Returns:
        A new, complete configuration dictionary
    """
    config = dict(DEFAULT_CONFIG)

    env_url = os.environ.get(BASE_URL_ENV_VAR)
    if env_url:
        config["base_url"] = env_url

    # None means "not specified" so CLI flags left unset keep the defaults
    for key, value in (overrides or {}).items():
        if value is not None:
            config[key] = value

    if config["deck_count"] < 1:
        raise ValueError(f"deck_count must be at least 1, got {config['deck_count']}")

    config["base_url"] = config["base_url"].rstrip("/") + "/"
    return config
