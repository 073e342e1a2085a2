"""Global configuration and defaults for officemap."""

from __future__ import annotations

import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class EditorConfig:
    """Canvas interaction parameters (canvas units are unscaled pixels)."""

    min_zoom: float = 0.3
    max_zoom: float = 3.0
    wheel_sensitivity: float = 1000.0  # zoom factor = exp(-delta / sensitivity)
    zoom_step: float = 1.2
    min_room_size: float = 20.0
    default_preset_size: float = 60.0
    default_poly_extent: float = 50.0
    resize_handle_size: float = 8.0


@dataclass
class PersistenceConfig:
    """Local cache and remote reconciliation parameters."""

    debounce_seconds: float = 1.0
    probe_floor_min: int = 1
    probe_floor_max: int = 10
    cache_dir: Optional[Path] = None
    default_floor_name: str = "Floor 1"


@dataclass
class ApiConfig:
    """REST collaborator settings."""

    base_url: str = "http://localhost:8080"
    timeout: float = 30.0
    token: Optional[str] = None


@dataclass
class BookingConfig:
    """Slot decomposition defaults."""

    default_offset: str = "+03:00"


@dataclass
class Config:
    """Top-level configuration."""

    editor: EditorConfig = field(default_factory=EditorConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}

        editor_data = data.get("editor", {})
        persistence_data = dict(data.get("persistence", {}))
        api_data = data.get("api", {})
        booking_data = data.get("booking", {})

        cache_dir = persistence_data.pop("cache_dir", None)
        persistence = PersistenceConfig(**persistence_data) if persistence_data else PersistenceConfig()
        persistence.cache_dir = Path(cache_dir) if cache_dir else None

        return cls(
            editor=EditorConfig(**editor_data) if editor_data else EditorConfig(),
            persistence=persistence,
            api=ApiConfig(**api_data) if api_data else ApiConfig(),
            booking=BookingConfig(**booking_data) if booking_data else BookingConfig(),
        )

    @classmethod
    def default(cls) -> "Config":
        return cls()
