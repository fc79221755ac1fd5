#!/usr/bin/env python3
"""
image_encoder.py: Shrink station photos to fit the log service's size limit.

A photo is decoded, scaled down so its longest side fits the configured maximum
(never enlarged), then re-encoded at decreasing quality until the encoded bytes
fit the byte budget or the quality floor is reached. The final bytes are
returned as base64 text ready for the submission payload.

Supports input formats JPEG, PNG, WebP and HEIC (requires pillow-heif).

Usage:
    python3 -m shift_log_tool.core.image_encoder <photo> [-o out.txt] [--data-url] [--budget-kb 900]

Dependencies:
    pip install pillow pillow-heif
"""

import argparse
import asyncio
import io
import logging
import math
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
except ImportError:
    pass

from .codec import encode_b64, to_data_url
from .config import CompressionConfig
from .errors import DecodeError, EncodeError
from .models import CompressedPhoto, EncodeResult, RawPhotoInput
from ..utils.log_utils import configure_logging, get_logger

logger = get_logger(__name__)

RESAMPLE_FILTER = Image.Resampling.BILINEAR


@contextmanager
def open_photo(raw: RawPhotoInput) -> Iterator[Image.Image]:
    """
    Decode `raw` and yield an upright, fully loaded image.

    Pillow file handles are closed when the block exits, whether or not it raised.
    """
    try:
        img = Image.open(io.BytesIO(raw.data))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as err:
        raise DecodeError(f"'{raw.name}' is not a supported image: {err}") from err

    upright = img
    try:
        try:
            img.load()
            upright = ImageOps.exif_transpose(img)
        except (OSError, ValueError, SyntaxError) as err:
            raise DecodeError(f"Failed to decode '{raw.name}': {err}") from err
        yield upright
    finally:
        if upright is not img:
            upright.close()
        img.close()


def fit_dimensions(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    """Scale (width, height) so the longest side fits `max_dimension`, never upscaling."""
    scale = min(1.0, max_dimension / max(width, height))
    return max(1, round(width * scale)), max(1, round(height * scale))


def rasterize(img: Image.Image, max_dimension: int) -> Image.Image:
    """Return a new RGB image of `img` fitted within `max_dimension`."""
    size = fit_dimensions(img.width, img.height, max_dimension)
    if size != img.size:
        logger.debug("Resizing %dx%d -> %dx%d", img.width, img.height, *size)
        resized = img.resize(size, resample=RESAMPLE_FILTER)
        if resized.mode != "RGB":
            converted = resized.convert("RGB")
            resized.close()
            return converted
        return resized
    # convert() always returns a copy, so the result outlives the decoder handle
    return img.convert("RGB")


def decode_and_rasterize(raw: RawPhotoInput, max_dimension: int) -> Image.Image:
    with open_photo(raw) as img:
        return rasterize(img, max_dimension)


def quality_levels(start: float, floor: float, step: float) -> List[float]:
    """
    Qualities tried by the encoder, from `start` down to `floor` in fixed steps.

    The last level is always exactly `floor`.
    """
    max_steps = math.ceil(round((start - floor) / step, 9))
    levels = [start]
    for _ in range(max_steps):
        nxt = levels[-1] - step
        if nxt <= floor + 1e-9:
            levels.append(floor)
            break
        levels.append(round(nxt, 6))
    if levels[-1] != floor:
        levels[-1] = floor
    return levels


def _encode_once(img: Image.Image, pil_format: str, quality: float) -> bytes:
    buffer = io.BytesIO()
    try:
        img.save(buffer, format=pil_format, quality=max(1, min(100, round(quality * 100))))
    except (OSError, ValueError, KeyError) as err:
        raise EncodeError(f"{pil_format} encoder failed at quality {quality:.2f}: {err}") from err
    data = buffer.getvalue()
    if not data:
        raise EncodeError(f"{pil_format} encoder produced no output at quality {quality:.2f}")
    return data


def encode_adaptive(img: Image.Image, config: CompressionConfig) -> EncodeResult:
    """
    Encode `img` at decreasing quality until it fits `config.byte_budget`.

    Never fails because of the budget: if even the floor quality is too big,
    the floor result is returned with `within_budget=False`.
    """
    levels = quality_levels(config.start_quality, config.quality_floor, config.quality_step)
    data = b""
    for attempt, quality in enumerate(levels, start=1):
        data = _encode_once(img, config.pil_format, quality)
        logger.debug("Attempt %d: quality %.2f -> %d bytes", attempt, quality, len(data))
        if len(data) <= config.byte_budget:
            return EncodeResult(data=data, quality=quality, attempts=attempt, within_budget=True)

    logger.warning(
        "Quality floor %.2f reached, photo is still %d KB (budget %d KB)",
        config.quality_floor, len(data) // 1024, config.byte_budget // 1024,
    )
    return EncodeResult(data=data, quality=levels[-1], attempts=len(levels), within_budget=False)


def derive_name(original: str, extension: str) -> str:
    """Keep the original filename stem, swapping the extension for the output format."""
    stem = Path(original).stem if original else ""
    return f"{stem or 'photo'}{extension}"


def _build_photo(raw: RawPhotoInput, size: Tuple[int, int], result: EncodeResult,
                 text: str, config: CompressionConfig) -> CompressedPhoto:
    return CompressedPhoto(
        encoded_text=text,
        mime_type=config.output_mime_type,
        name=derive_name(raw.name, config.file_extension),
        byte_size=result.byte_size,
        width=size[0],
        height=size[1],
        quality=result.quality,
        within_budget=result.within_budget,
    )


def compress_photo(raw: RawPhotoInput, config: CompressionConfig) -> CompressedPhoto:
    """Run the whole pipeline synchronously."""
    pixels = decode_and_rasterize(raw, config.max_dimension_px)
    try:
        result = encode_adaptive(pixels, config)
        size = pixels.size
    finally:
        pixels.close()
    return _build_photo(raw, size, result, encode_b64(result.data), config)


async def compress_photo_async(raw: RawPhotoInput, config: CompressionConfig) -> CompressedPhoto:
    """
    Same pipeline as compress_photo, with decode, encode and base64 each run
    in the default executor so several photos can be processed at once.
    """
    loop = asyncio.get_event_loop()
    pixels = await loop.run_in_executor(None, decode_and_rasterize, raw, config.max_dimension_px)
    try:
        result = await loop.run_in_executor(None, encode_adaptive, pixels, config)
        size = pixels.size
    finally:
        pixels.close()
    text = await loop.run_in_executor(None, encode_b64, result.data)
    return _build_photo(raw, size, result, text, config)


def parse_args(argv: Optional[List[str]] = None):
    # mainly used to test
    parser = argparse.ArgumentParser(
        description="Compress a photo the way station photos are compressed before upload."
    )
    parser.add_argument("input", help="Path to the photo.")
    parser.add_argument(
        "-o", "--output",
        help="File to write the base64 text to (default: only print the result summary)."
    )
    parser.add_argument("--max-dim", type=int, default=1600, help="Longest side in pixels (default: 1600).")
    parser.add_argument("--budget-kb", type=int, default=900, help="Byte budget in KB (default: 900).")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical", "none"],
        default="none",
        help="Set logging level ('none' disables logging)"
    )
    parser.add_argument(
        "--data-url",
        action="store_true",
        help="Write a data: URL instead of bare base64 text."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    if args.log_level.lower() != 'none':
        configure_logging(getattr(logging, args.log_level.upper()))

    config = CompressionConfig(max_dimension_px=args.max_dim, byte_budget=args.budget_kb * 1024)
    try:
        photo = compress_photo(RawPhotoInput.from_path(args.input), config)
    except (OSError, DecodeError, EncodeError) as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(1)

    print(f"{photo.name}: {photo.hint()} at quality {photo.quality:.2f}")
    if args.output:
        text = to_data_url(photo.encoded_text, photo.mime_type) if args.data_url else photo.encoded_text
        Path(args.output).write_text(text)


if __name__ == "__main__":
    main()
