# ctxpacker/core/filter_catalog.py

from __future__ import annotations

import json
import os
from typing import Dict, Iterable, List

from ctxpacker.core.models import AppSettings, IgnoreFilter
from ctxpacker.utils.logger import logger

PREDEFINED_FILTERS: List[IgnoreFilter] = [
    IgnoreFilter(".NET Build", (
        "bin/", "obj/", "*.dll", "*.exe", "*.pdb", "*.cache", ".vs/", "*.user",
        "*.suo", "packages/", "*.nupkg", "*_wpftmp.csproj",
    )),
    IgnoreFilter("Node.js", (
        "node_modules/", "package-lock.json", "yarn.lock", "npm-debug.log", "*.log",
        "dist/", "build/", ".next/", ".nuxt/",
    )),
    IgnoreFilter("Python", (
        "__pycache__/", "*.py[cod]", "*$py.class", "*.so", ".Python", "venv/", "env/",
        ".venv/", "pip-log.txt", "*.egg-info/", "dist/", "build/",
    )),
    IgnoreFilter("Git", (".git/", ".gitignore", ".gitattributes")),
    IgnoreFilter("IDE", (
        ".vscode/", ".idea/", "*.swp", "*.swo", "*~", ".DS_Store", "Thumbs.db",
    )),
]


def predefined_filters() -> Dict[str, IgnoreFilter]:
    return {f.name: f for f in PREDEFINED_FILTERS}


def all_filters(settings: AppSettings) -> List[IgnoreFilter]:
    """Predefined filters followed by the user's custom ones (custom wins on name clash)."""
    by_name = predefined_filters()
    for f in settings.custom_ignore_filters:
        by_name[f.name] = f
    return list(by_name.values())


def resolve_active_filters(settings: AppSettings, extra_names: Iterable[str] = ()) -> List[IgnoreFilter]:
    """Filters switched on in settings plus those named in ``extra_names``."""
    wanted = {name for name, on in settings.active_filters.items() if on}
    wanted.update(extra_names)
    available = all_filters(settings)
    unknown = wanted - {f.name for f in available}
    if unknown:
        raise KeyError(f"Unknown filter(s): {', '.join(sorted(unknown))}")
    return [f for f in available if f.name in wanted]


def load_filter_file(path: str) -> List[IgnoreFilter]:
    """
    Read custom filters from disk.

    ``*.json``: a list of ``{"name": ..., "patterns": [...]}`` objects.
    Anything else: gitignore-style lines, one filter named after the file.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    if path.lower().endswith(".json"):
        data = json.loads(raw)
        if isinstance(data, dict):
            data = [data]
        filters = [IgnoreFilter(str(d["name"]), tuple(d.get("patterns", []))) for d in data]
    else:
        patterns = [ln.strip() for ln in raw.splitlines() if ln.strip() and not ln.lstrip().startswith("#")]
        name = os.path.splitext(os.path.basename(path))[0] or path
        filters = [IgnoreFilter(name, tuple(patterns))]

    logger.info(f"Loaded {len(filters)} filter(s) from {path}")
    return filters
