# gopherize/config.py
"""
Service settings, read from the environment.

The Vision API key comes from VISION_API_KEY or, failing that, from a JSON
credentials file of the form {"key": "..."}.
"""

import json
import os
from functools import lru_cache

from pydantic import BaseModel

from .errors import ConfigurationError
from .logger import console

DEFAULT_VISION_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"


class Settings(BaseModel):
    asset_dir: str = "gopher"
    vision_endpoint: str = DEFAULT_VISION_ENDPOINT
    credentials_path: str = "credentials.json"
    detect_timeout_seconds: float = 30.0
    fetch_timeout_seconds: float = 30.0
    max_results: int = 0  # 0 leaves the service default


def settings_from_env() -> Settings:
    return Settings(
        asset_dir=os.getenv("GOPHERIZE_ASSET_DIR", "gopher"),
        vision_endpoint=os.getenv("GOPHERIZE_VISION_ENDPOINT", DEFAULT_VISION_ENDPOINT),
        credentials_path=os.getenv("GOPHERIZE_CREDENTIALS", "credentials.json"),
        detect_timeout_seconds=float(os.getenv("GOPHERIZE_DETECT_TIMEOUT", "30")),
        fetch_timeout_seconds=float(os.getenv("GOPHERIZE_FETCH_TIMEOUT", "30")),
        max_results=int(os.getenv("GOPHERIZE_MAX_RESULTS", "0")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return settings_from_env()


def redact_secret(value: str) -> str:
    """Shorten a key for logging."""
    if not value or len(value) < 8:
        return "***"
    return f"{value[:4]}***{value[-2:]}"


def load_api_key(settings: Settings) -> str:
    key = os.getenv("VISION_API_KEY", "")
    if key:
        return key

    path = settings.credentials_path
    try:
        with open(path, "r", encoding="utf-8") as f:
            credential = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"no VISION_API_KEY set and credentials file {path} not found"
        ) from None
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"failed to read credentials file {path}: {exc}") from exc

    key = credential.get("key", "") if isinstance(credential, dict) else ""
    if not key:
        raise ConfigurationError(f"credentials file {path} has no 'key'")
    console.log(f"[green]Loaded Vision API key {redact_secret(key)} from {path}[/green]")
    return key
