"""
Shift Log Tool

Compresses workstation photos and bundles them with closing notes into a
single log submission for the remote log service.
"""

__version__ = "0.1.0"

from .core import (
    CompressionConfig,
    AppConfig,
    load_config,
    RawPhotoInput,
    StationInput,
    StationEntry,
    CompressedPhoto,
    BasicInfo,
    StationPayloadBuilder,
    build_stations_payload,
    build_submission,
    compress_photo,
    DecodeError,
    EncodeError,
    PhotoTooLargeError,
    BuildAborted,
)
from .api import LogServiceClient, LogServiceError


def main():
    """Entry point for the shift-log command."""
    from .cli import main as cli_main
    raise SystemExit(cli_main())


__all__ = [
    "CompressionConfig",
    "AppConfig",
    "load_config",
    "RawPhotoInput",
    "StationInput",
    "StationEntry",
    "CompressedPhoto",
    "BasicInfo",
    "StationPayloadBuilder",
    "build_stations_payload",
    "build_submission",
    "compress_photo",
    "DecodeError",
    "EncodeError",
    "PhotoTooLargeError",
    "BuildAborted",
    "LogServiceClient",
    "LogServiceError",
]
