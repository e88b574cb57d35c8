from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from typing import Dict, List

from .announcer import DEFAULT_CAPACITY, DEFAULT_GRACE_PERIOD
from .history import DEFAULT_HISTORY_SIZE
from .launcher import DEFAULT_LAUNCHER_BINDINGS

logger = logging.getLogger(__name__)

DEFAULT_ANNOUNCERS: Dict[str, Dict[str, str]] = {
    "alerts": {"key": "{text}_{time}", "text": "Alert: {text}"},
    "season": {"key": "{year}_{season}", "text": "Season changed to {season}"},
    "villagers": {"key": "{id}_{reason}", "text": "{name} {reason}"},
}

DEFAULT_HANDLER_ORDER = ["history", "object_panel", "menu", "scanner", "launcher"]


@dataclass
class NavConfig:
    handler_order: List[str] = field(default_factory=lambda: list(DEFAULT_HANDLER_ORDER))
    grace_period: float = DEFAULT_GRACE_PERIOD
    cache_capacity: int = DEFAULT_CAPACITY
    history_size: int = DEFAULT_HISTORY_SIZE
    # {action: ["ctrl+page_up", ...]} overrides, merged over the defaults
    navigator_keys: Dict[str, List[str]] = field(default_factory=dict)
    scanner_keys: Dict[str, List[str]] = field(default_factory=dict)
    launcher_keys: Dict[str, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_LAUNCHER_BINDINGS.items()}
    )
    object_panel_levels: int = 4
    # event kind -> {"key": template, "text": template}; templates use str.format fields
    announcers: Dict[str, Dict[str, str]] = field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_ANNOUNCERS.items()}
    )

    def __post_init__(self) -> None:
        if self.grace_period < 0:
            raise ValueError(f"grace_period must be >= 0 (got {self.grace_period})")
        if self.cache_capacity <= 0:
            raise ValueError(f"cache_capacity must be > 0 (got {self.cache_capacity})")


CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".access_nav")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")


def load_config(path: str = CONFIG_FILE) -> NavConfig:
    """Return saved settings, or defaults if the file is missing or invalid."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return NavConfig()
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read config %s (%s); using defaults", path, exc)
        return NavConfig()

    known = {f.name for f in fields(NavConfig)}
    unknown = sorted(set(data) - known) if isinstance(data, dict) else []
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    try:
        return NavConfig(**{k: v for k, v in data.items() if k in known})
    except (TypeError, ValueError, AttributeError) as exc:
        logger.warning("Invalid config %s (%s); using defaults", path, exc)
        return NavConfig()


def save_config(config: NavConfig, path: str = CONFIG_FILE) -> None:
    """Persist ``config`` to ``path`` in JSON format."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(config), f, indent=2)
