"""
config.py: Compression constants and application settings.

Values are fixed at startup and never mutated; every worker reads the same
frozen instances.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

# Workstations Alpha -> Kilo, in the order they appear on the closing form
STATIONS: Tuple[str, ...] = (
    "Alpha", "Beta", "Gamma", "Delta", "Echo",
    "Foxtrot", "Golf", "Hotel", "India", "Juliet", "Kilo",
)

# Output mime type -> (Pillow format name, file extension)
OUTPUT_FORMATS: Dict[str, Tuple[str, str]] = {
    "image/jpeg": ("JPEG", ".jpg"),
    "image/webp": ("WEBP", ".webp"),
}

DEFAULT_HISTORY_LIMIT = 5
DEFAULT_TIMEOUT = 60.0


class OversizePolicy(str, Enum):
    """What to do with a photo whose input is larger than the byte budget."""
    RECOMPRESS = "recompress"
    REJECT = "reject"


@dataclass(frozen=True)
class CompressionConfig:
    max_dimension_px: int = 1600
    start_quality: float = 0.75
    quality_floor: float = 0.45
    quality_step: float = 0.10
    byte_budget: int = 900 * 1024
    output_mime_type: str = "image/jpeg"
    stations: Tuple[str, ...] = STATIONS
    oversize_policy: OversizePolicy = OversizePolicy.RECOMPRESS

    def __post_init__(self) -> None:
        if self.max_dimension_px < 1:
            raise ValueError(f"max_dimension_px must be positive, got {self.max_dimension_px}")
        if self.byte_budget < 1:
            raise ValueError(f"byte_budget must be positive, got {self.byte_budget}")
        if self.quality_step <= 0:
            raise ValueError(f"quality_step must be positive, got {self.quality_step}")
        if not 0.0 < self.quality_floor <= self.start_quality <= 1.0:
            raise ValueError(
                "qualities must satisfy 0 < quality_floor <= start_quality <= 1, "
                f"got floor={self.quality_floor} start={self.start_quality}"
            )
        if self.output_mime_type not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output mime type '{self.output_mime_type}'. "
                f"Available: {', '.join(OUTPUT_FORMATS)}"
            )
        stations = tuple(self.stations)
        if not stations:
            raise ValueError("At least one station must be configured")
        if len(set(stations)) != len(stations):
            raise ValueError(f"Station names must be unique: {stations}")
        # accept any iterable but store a tuple so the config stays hashable
        object.__setattr__(self, "stations", stations)
        object.__setattr__(self, "oversize_policy", OversizePolicy(self.oversize_policy))

    @property
    def pil_format(self) -> str:
        return OUTPUT_FORMATS[self.output_mime_type][0]

    @property
    def file_extension(self) -> str:
        return OUTPUT_FORMATS[self.output_mime_type][1]


@dataclass(frozen=True)
class AppConfig:
    """Settings for talking to the log service."""
    api_url: Optional[str] = None
    history_limit: int = DEFAULT_HISTORY_LIMIT
    timeout: float = DEFAULT_TIMEOUT
    compression: CompressionConfig = field(default_factory=CompressionConfig)


def load_config(api_url: Optional[str] = None, **compression_overrides) -> AppConfig:
    """Build the application config from environment variables.

    Args:
        api_url: Explicit log service URL. If None, uses SHIFT_LOG_API_URL env var.
        **compression_overrides: Fields forwarded to CompressionConfig.

    Raises:
        ValueError: If a numeric environment variable cannot be parsed.
    """
    url = api_url or os.getenv("SHIFT_LOG_API_URL")
    limit = os.getenv("SHIFT_LOG_HISTORY_LIMIT")
    timeout = os.getenv("SHIFT_LOG_TIMEOUT")
    try:
        history_limit = int(limit) if limit else DEFAULT_HISTORY_LIMIT
        request_timeout = float(timeout) if timeout else DEFAULT_TIMEOUT
    except ValueError as err:
        raise ValueError(f"Invalid numeric setting in environment: {err}") from err
    if history_limit < 1:
        raise ValueError(f"SHIFT_LOG_HISTORY_LIMIT must be positive, got {history_limit}")
    return AppConfig(
        api_url=url,
        history_limit=history_limit,
        timeout=request_timeout,
        compression=CompressionConfig(**compression_overrides),
    )
