# ctxpacker/utils/prefs.py

import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from ctxpacker.config import APP_NAME, APP_AUTHOR, GITIGNORE_MODES, SETTINGS_FILENAME
from ctxpacker.core.models import AppSettings, GlobalPrompt, IgnoreFilter
from ctxpacker.utils.logger import logger


def settings_path() -> Path:
    cfg_dir = Path(user_config_dir(appname=APP_NAME, appauthor=APP_AUTHOR))
    return cfg_dir / SETTINGS_FILENAME


def settings_to_dict(settings: AppSettings) -> Dict[str, Any]:
    data = asdict(settings)
    data["custom_ignore_filters"] = [
        {"name": f.name, "patterns": list(f.patterns)} for f in settings.custom_ignore_filters
    ]
    return data


def settings_from_dict(data: Dict[str, Any]) -> AppSettings:
    defaults = AppSettings()
    known = {f.name for f in fields(AppSettings)}
    values = {k: v for k, v in data.items() if k in known}

    if not isinstance(values.get("include_file_headers", True), bool):
        logger.warning("Invalid include_file_headers in settings, using default")
        values["include_file_headers"] = defaults.include_file_headers
    exts = values.get("allowed_extensions", defaults.allowed_extensions)
    if not isinstance(exts, list) or not all(isinstance(e, str) for e in exts):
        logger.warning("Invalid allowed_extensions in settings, using defaults")
        values["allowed_extensions"] = defaults.allowed_extensions
    active = values.get("active_filters", {})
    if not isinstance(active, dict):
        logger.warning("Invalid active_filters in settings, using defaults")
        values["active_filters"] = defaults.active_filters
    else:
        values["active_filters"] = {str(k): bool(v) for k, v in active.items()}
    for key in ("custom_ignore_filters", "global_prompts"):
        if not isinstance(values.get(key, []), list):
            logger.warning(f"Invalid {key} in settings, using defaults")
            values[key] = []

    values["custom_ignore_filters"] = [
        IgnoreFilter(str(f.get("name", "")), tuple(str(p) for p in f.get("patterns", [])))
        for f in values.get("custom_ignore_filters", [])
        if isinstance(f, dict) and isinstance(f.get("patterns", []), list)
    ]
    values["global_prompts"] = [
        GlobalPrompt(p.get("id"), str(p.get("name", "")), str(p.get("content", "")))
        for p in values.get("global_prompts", [])
        if isinstance(p, dict)
    ]
    if values.get("gitignore_mode") not in GITIGNORE_MODES:
        values["gitignore_mode"] = defaults.gitignore_mode
    try:
        values["max_chars_limit"] = int(values.get("max_chars_limit", defaults.max_chars_limit))
    except (TypeError, ValueError):
        values["max_chars_limit"] = defaults.max_chars_limit
    if values["max_chars_limit"] <= 0:
        values["max_chars_limit"] = defaults.max_chars_limit
    return AppSettings(**values)


def load_settings(path: Optional[Path] = None) -> AppSettings:
    p = Path(path) if path else settings_path()
    if not p.exists():
        logger.info("No settings file found, using defaults.")
        return AppSettings()
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("settings root must be an object")
        settings = settings_from_dict(data)
        logger.info("Settings loaded from %s", p)
        return settings
    except (OSError, ValueError, TypeError) as e:
        logger.error("Failed to load settings from %s: %s", p, e)
        return AppSettings()


def save_settings(settings: AppSettings, path: Optional[Path] = None) -> bool:
    p = Path(path) if path else settings_path()
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(settings_to_dict(settings), indent=2), encoding="utf-8")
        logger.info("Settings saved to %s", p)
        return True
    except OSError as e:
        logger.error("Failed to save settings to %s: %s", p, e)
        return False
