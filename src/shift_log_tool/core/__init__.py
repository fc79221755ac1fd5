"""
Core functionality for photo compression and payload building.
"""

from .config import CompressionConfig, AppConfig, OversizePolicy, STATIONS, load_config
from .errors import (
    ShiftLogError,
    PhotoError,
    DecodeError,
    EncodeError,
    PhotoTooLargeError,
    BuildAborted,
)
from .models import (
    RawPhotoInput,
    CompressedPhoto,
    EncodeResult,
    StationInput,
    StationEntry,
    BasicInfo,
)
from .image_encoder import compress_photo, compress_photo_async, encode_adaptive
from .workers import StationPayloadBuilder, build_stations_payload, build_submission

__all__ = [
    "CompressionConfig",
    "AppConfig",
    "OversizePolicy",
    "STATIONS",
    "load_config",
    "ShiftLogError",
    "PhotoError",
    "DecodeError",
    "EncodeError",
    "PhotoTooLargeError",
    "BuildAborted",
    "RawPhotoInput",
    "CompressedPhoto",
    "EncodeResult",
    "StationInput",
    "StationEntry",
    "BasicInfo",
    "compress_photo",
    "compress_photo_async",
    "encode_adaptive",
    "StationPayloadBuilder",
    "build_stations_payload",
    "build_submission",
]
