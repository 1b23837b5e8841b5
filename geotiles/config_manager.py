"""
Configuration manager for library and CLI usage.

Bundles the paths and rate-limit settings a build run needs into one
object so they can be passed explicitly instead of read from module
globals at each call site.
"""

import os
from dataclasses import dataclass
from typing import Optional

from . import config
from .exceptions import ConfigurationError


@dataclass
class PipelineConfig:
    """Configuration for a geotiles build run.

    Paths resolve as: explicit arg > GEOTILES_* env vars > config.py defaults.

    Args:
        output_dir: Directory for raw intermediate JSON files.
        store_path: Location of the published SQLite tile store.
        mapping_path: Lithology -> material mapping JSON used by validation.
        request_delay: Minimum seconds between upstream API requests.
        retry_delay: Seconds to wait between retries of one request.
        max_retries: Attempts per request before treating the point as no data.
        checkpoint_interval: Snapshot the output every N new records.
        verbose: Whether to print progress output.
    """

    output_dir: Optional[str] = None
    store_path: Optional[str] = None
    mapping_path: Optional[str] = None
    request_delay: float = config.DELAY_BETWEEN_REQUESTS
    retry_delay: float = config.RETRY_DELAY
    max_retries: int = config.MAX_RETRIES
    checkpoint_interval: int = config.CHECKPOINT_INTERVAL
    verbose: bool = True

    def __post_init__(self):
        """Resolve paths from env vars if not explicitly set."""
        if self.output_dir is None:
            self.output_dir = os.environ.get("GEOTILES_OUTPUT_DIR", config.OUTPUT_DIR)
        if self.store_path is None:
            self.store_path = os.environ.get("GEOTILES_STORE_PATH", config.TILE_STORE_PATH)
        if self.mapping_path is None:
            self.mapping_path = os.environ.get("GEOTILES_MAPPING_PATH", config.MAPPING_PATH)

        if self.request_delay < 0 or self.retry_delay < 0:
            raise ConfigurationError("Delays must be non-negative")
        if self.max_retries < 1:
            raise ConfigurationError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.checkpoint_interval < 1:
            raise ConfigurationError(
                f"checkpoint_interval must be >= 1, got {self.checkpoint_interval}"
            )

    @property
    def lithology_raw_path(self) -> str:
        return os.path.join(self.output_dir, config.LITHOLOGY_RAW_FILE)

    @property
    def city_lithology_raw_path(self) -> str:
        return os.path.join(self.output_dir, config.CITY_LITHOLOGY_RAW_FILE)

    @property
    def biomes_raw_path(self) -> str:
        return os.path.join(self.output_dir, config.BIOMES_RAW_FILE)

    def ensure_output_dir(self):
        os.makedirs(self.output_dir, exist_ok=True)
