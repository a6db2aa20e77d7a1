"""Centralized constants and configuration loader.

This module provides access to configuration values and sensible defaults
for the detection, recognition, storage and API settings used throughout
the package. Values are loaded from config/config.yaml when available,
otherwise defaults are used.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"

# Label reported when no enrolled identity is close enough
UNKNOWN_LABEL = "Unknown"

# Number of distinct 8-bit texture codes
HISTOGRAM_BINS = 256


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Uses default if None.

    Returns:
        Configuration dictionary.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    try:
        if path.exists():
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")

    return {}


def _get_nested(config: Dict, *keys: str, default: Any = None) -> Any:
    """Get nested config value with default fallback."""
    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
        else:
            return default
        if value is None:
            return default
    return value


# ============================================================
# Face Detection Constants
# ============================================================

@dataclass
class DetectionConfig:
    """Face detection constants."""
    # Detection backend name
    backend: str = "haar_cascade"
    # Scale factor for multi-scale cascade detection
    scale_factor: float = 1.1
    # Minimum neighbors for a candidate to be kept
    min_neighbors: int = 4
    # Minimum face size to detect
    min_size: Tuple[int, int] = (30, 30)
    # Cascade XML file, None for the one bundled with OpenCV
    cascade_path: Optional[str] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DetectionConfig":
        """Create from config dictionary."""
        det = _get_nested(config, "face_detection") or {}
        min_size = det.get("min_size", [30, 30])

        return cls(
            backend=det.get("backend", "haar_cascade"),
            scale_factor=det.get("scale_factor", 1.1),
            min_neighbors=det.get("min_neighbors", 4),
            min_size=tuple(min_size),
            cascade_path=det.get("cascade_path"),
        )


# ============================================================
# Recognition Constants
# ============================================================

@dataclass
class RecognitionConfig:
    """Descriptor and matching constants."""
    # Fixed face size so centroids are comparable across enrollments
    face_size: Tuple[int, int] = (100, 100)
    # Margin around detected face as fraction of size
    crop_margin_ratio: float = 0.0
    # Chi-square distance above which a face is reported as unknown
    threshold: float = 0.35
    # Worker threads for batch extraction (None lets the executor decide)
    max_workers: Optional[int] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RecognitionConfig":
        """Create from config dictionary."""
        rec = _get_nested(config, "face_recognition") or {}
        face_size = rec.get("face_size", [100, 100])

        return cls(
            face_size=tuple(face_size),
            crop_margin_ratio=rec.get("crop_margin_ratio", 0.0),
            threshold=rec.get("threshold", 0.35),
            max_workers=rec.get("max_workers"),
        )


# ============================================================
# Storage Constants
# ============================================================

@dataclass
class StorageConfig:
    """Model store persistence settings."""
    database_path: str = "data/models/lbp_store.npz"
    watch_list_dir: str = "data/raw/faces/watch_list"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "StorageConfig":
        """Create from config dictionary."""
        st = _get_nested(config, "storage") or {}
        return cls(
            database_path=st.get("database_path", "data/models/lbp_store.npz"),
            watch_list_dir=st.get("watch_list_dir", "data/raw/faces/watch_list"),
        )


@dataclass
class ApiConfig:
    """HTTP API settings."""
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ApiConfig":
        """Create from config dictionary."""
        api = _get_nested(config, "api") or {}
        return cls(
            host=api.get("host", "0.0.0.0"),
            port=api.get("port", 8000),
        )


# ============================================================
# Global Config Instance (lazy loaded)
# ============================================================

class Config:
    """Global configuration singleton."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load()
        return cls._instance

    def _load(self) -> None:
        """Load configuration from file."""
        self._config = load_config()
        self._reset_sections()

    def _reset_sections(self) -> None:
        self._detection: Optional[DetectionConfig] = None
        self._recognition: Optional[RecognitionConfig] = None
        self._storage: Optional[StorageConfig] = None
        self._api: Optional[ApiConfig] = None

    def reload(self, config_path: Optional[Path] = None) -> None:
        """Reload configuration from file."""
        self._config = load_config(config_path)
        self._reset_sections()

    @property
    def detection(self) -> DetectionConfig:
        """Get face detection config."""
        if self._detection is None:
            self._detection = DetectionConfig.from_config(self._config)
        return self._detection

    @property
    def recognition(self) -> RecognitionConfig:
        """Get recognition config."""
        if self._recognition is None:
            self._recognition = RecognitionConfig.from_config(self._config)
        return self._recognition

    @property
    def storage(self) -> StorageConfig:
        """Get storage config."""
        if self._storage is None:
            self._storage = StorageConfig.from_config(self._config)
        return self._storage

    @property
    def api(self) -> ApiConfig:
        """Get API config."""
        if self._api is None:
            self._api = ApiConfig.from_config(self._config)
        return self._api

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a config value by key path."""
        return _get_nested(self._config, *keys, default=default)


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()


# Convenience accessors
def get_detection_config() -> DetectionConfig:
    """Get face detection configuration."""
    return get_config().detection


def get_recognition_config() -> RecognitionConfig:
    """Get recognition configuration."""
    return get_config().recognition


def get_storage_config() -> StorageConfig:
    """Get storage configuration."""
    return get_config().storage


def get_api_config() -> ApiConfig:
    """Get API configuration."""
    return get_config().api
