# config_service.py
import os
import json
import logging

from flavorpicker.flavor_service import DEFAULT_FLAVORS_URL, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"

def get_default_config() -> dict:
    return {
        "flavors_url": DEFAULT_FLAVORS_URL,
        "request_timeout": DEFAULT_TIMEOUT,
        # auto | plist | json
        "response_format": "auto",
        "log_level": "INFO",
    }

def load_config(base_dir: str) -> dict:
    """Load config.json from base_dir; merge with defaults."""
    config = get_default_config()
    path = os.path.join(base_dir, CONFIG_FILENAME)
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                file_cfg = json.load(f)
            if not isinstance(file_cfg, dict):
                raise ValueError("top level must be an object")
            config.update(file_cfg)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load %s (%s); using defaults.", path, e)
    return config

def save_config(base_dir: str, cfg: dict) -> None:
    """Write config.json to base_dir."""
    path = os.path.join(base_dir, CONFIG_FILENAME)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)
