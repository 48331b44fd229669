"""Persisted Gemini API settings for the command line client."""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from markmap_generator.common.errors import SettingsError
from markmap_generator.common.schema import DEFAULT_API_ENDPOINT, DEFAULT_MODEL_ID, ApiSettings

LOGGER = logging.getLogger("markmap.client.settings")

API_KEY_KEY = "gemini_api_key"
API_ENDPOINT_KEY = "gemini_api_endpoint"
MODEL_ID_KEY = "gemini_model_id"

def default_settings_path() -> Path:
    override = os.getenv("MARKMAP_SETTINGS_PATH")
    if override:
        return Path(override)
    return Path.home() / ".config" / "markmap-generator" / "settings.yaml"

def load_settings(path: str | Path | None = None) -> ApiSettings:
    """
    Load saved settings, falling back to defaults for anything missing.

    Args:
        path: YAML file to read. Defaults to default_settings_path().
    """
    p = Path(path) if path is not None else default_settings_path()
    if not p.exists():
        return ApiSettings()
    with open(p, "r", encoding="utf-8") as f:
        try:
            raw: Any = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid settings file {p}: {e}") from e
    if not isinstance(raw, dict):
        raise SettingsError(f"Invalid settings file {p}: expected a mapping")
    return ApiSettings(
        api_key=str(raw.get(API_KEY_KEY) or ""),
        api_endpoint=str(raw.get(API_ENDPOINT_KEY) or DEFAULT_API_ENDPOINT),
        model_id=str(raw.get(MODEL_ID_KEY) or DEFAULT_MODEL_ID),
    )

def save_settings(settings: ApiSettings, path: str | Path | None = None) -> Path:
    """Write all three settings, replacing whatever was stored before."""
    p = Path(path) if path is not None else default_settings_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    data = {
        API_KEY_KEY: settings.api_key,
        API_ENDPOINT_KEY: settings.api_endpoint,
        MODEL_ID_KEY: settings.model_id,
    }
    with open(p, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False)
    LOGGER.info("Saved settings to %s", p)
    return p
