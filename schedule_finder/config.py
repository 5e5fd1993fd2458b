from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Dict
import yaml

DEFAULT_CONFIG: Dict[str, object] = {
    "db_path": "schedfind.db",
    "log_level": "INFO",
    "output_dir": "./data",
    "output_modules": {
        "csv": "schedule_finder.outputs.csv_output.CSVOutput",
        "yaml": "schedule_finder.outputs.yaml_output.YAMLOutput",
    },
    # "today" matches weekday rules on the current weekday, "offset" on the
    # weekday of each start date tried.
    "weekday_source": "today",
}

WEEKDAY_SOURCES = ("today", "offset")


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: Path | str | None = None) -> Dict[str, object]:
    if path is None or not Path(path).exists():
        return deepcopy(DEFAULT_CONFIG)
    with Path(path).open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    config = _merge_defaults(data, DEFAULT_CONFIG)
    if config["weekday_source"] not in WEEKDAY_SOURCES:
        raise ValueError(
            f"weekday_source must be one of {', '.join(WEEKDAY_SOURCES)}, "
            f"got {config['weekday_source']!r}"
        )
    return config
