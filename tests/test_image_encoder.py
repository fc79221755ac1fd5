import io

import pytest
from PIL import Image

from shift_log_tool.core.codec import decode_b64
from shift_log_tool.core.config import CompressionConfig
from shift_log_tool.core.errors import DecodeError, EncodeError
from shift_log_tool.core.image_encoder import (
    compress_photo,
    decode_and_rasterize,
    derive_name,
    encode_adaptive,
    fit_dimensions,
    main as encoder_main,
    open_photo,
    quality_levels,
    rasterize,
)
from shift_log_tool.core.models import RawPhotoInput

from conftest import make_image_bytes


@pytest.mark.parametrize("size", [(1, 1), (640, 480), (1600, 1200), (1200, 1600), (1600, 1600)])
def test_fit_dimensions_never_scales_images_within_ceiling(size):
    assert fit_dimensions(*size, 1600) == size


@pytest.mark.parametrize("size", [(4000, 3000), (3000, 4000), (1601, 900), (5000, 37), (2048, 2048)])
def test_fit_dimensions_shrinks_large_images_keeping_aspect(size):
    width, height = fit_dimensions(*size, 1600)
    assert width <= 1600 and height <= 1600
    assert max(width, height) == 1600
    # aspect ratio preserved within one pixel of rounding
    assert abs(width * size[1] / size[0] - height) <= 1


def test_fit_dimensions_clamps_to_one_pixel():
    assert fit_dimensions(10000, 2, 1600) == (1600, 1)


def test_rasterize_converts_to_rgb_without_upscaling():
    img = Image.new("RGBA", (120, 80), (10, 20, 30, 128))
    out = rasterize(img, 1600)
    assert out.size == (120, 80)
    assert out.mode == "RGB"
    assert out is not img


def test_rasterize_resizes_to_ceiling():
    img = Image.new("RGB", (400, 100))
    assert rasterize(img, 200).size == (200, 50)


def test_open_photo_rejects_non_image_bytes():
    raw = RawPhotoInput(name="notes.txt", data=b"definitely not an image")
    with pytest.raises(DecodeError):
        with open_photo(raw):
            pass


def test_open_photo_rejects_truncated_image():
    data = make_image_bytes(300, 300, fmt="JPEG", noise=True)
    raw = RawPhotoInput(name="cut.jpg", data=data[: len(data) // 2])
    with pytest.raises(DecodeError):
        decode_and_rasterize(raw, 1600)


def test_open_photo_applies_exif_orientation():
    img = Image.new("RGB", (40, 20))
    exif = img.getexif()
    exif[0x0112] = 6  # rotated 90 degrees clockwise
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", exif=exif)

    with open_photo(RawPhotoInput(name="rotated.jpg", data=buffer.getvalue())) as upright:
        assert upright.size == (20, 40)


def test_decoded_pixels_outlive_the_decoder(photo_factory):
    pixels = decode_and_rasterize(photo_factory(64, 48), 1600)
    assert pixels.size == (64, 48)
    # still usable after the decode handle was closed
    assert pixels.getpixel((0, 0)) is not None


@pytest.mark.parametrize("start, floor, step, expected", [
    (0.75, 0.45, 0.10, [0.75, 0.65, 0.55, 0.45]),
    (0.80, 0.45, 0.10, [0.8, 0.7, 0.6, 0.5, 0.45]),
    (0.50, 0.50, 0.10, [0.5]),
    (0.90, 0.10, 0.40, [0.9, 0.5, 0.1]),
])
def test_quality_levels(start, floor, step, expected):
    assert quality_levels(start, floor, step) == pytest.approx(expected)
    assert quality_levels(start, floor, step)[-1] == floor


def test_encode_adaptive_stops_at_first_quality_under_budget():
    img = Image.new("RGB", (200, 200), "white")
    result = encode_adaptive(img, CompressionConfig())
    assert result.quality == 0.75
    assert result.attempts == 1
    assert result.within_budget
    assert result.data[:2] == b"\xff\xd8"


def test_encode_adaptive_falls_back_to_floor_when_budget_unreachable():
    img = Image.open(io.BytesIO(make_image_bytes(300, 300, noise=True)))
    config = CompressionConfig(byte_budget=500)
    result = encode_adaptive(img, config)
    assert result.quality == config.quality_floor
    assert result.attempts == 4
    assert not result.within_budget
    assert result.byte_size > config.byte_budget


def test_encode_adaptive_size_or_floor_law():
    img = Image.open(io.BytesIO(make_image_bytes(400, 300, noise=True)))
    for budget in (2_000, 20_000, 60_000, 200_000, 2_000_000):
        config = CompressionConfig(byte_budget=budget)
        result = encode_adaptive(img, config)
        assert result.byte_size <= budget or result.quality == config.quality_floor


def test_encode_adaptive_webp_output():
    img = Image.new("RGB", (50, 50), "red")
    result = encode_adaptive(img, CompressionConfig(output_mime_type="image/webp"))
    assert result.data[:4] == b"RIFF"


def test_encode_adaptive_raises_when_encoder_cannot_write():
    img = Image.new("I;16", (10, 10))
    with pytest.raises(EncodeError):
        encode_adaptive(img, CompressionConfig())


@pytest.mark.parametrize("original, expected", [
    ("IMG_0042.HEIC", "IMG_0042.jpg"),
    ("belt.photo.png", "belt.photo.jpg"),
    ("", "photo.jpg"),
    ("noext", "noext.jpg"),
])
def test_derive_name(original, expected):
    assert derive_name(original, ".jpg") == expected


def test_compress_photo_bounds_size_and_dimensions(photo_factory):
    raw = photo_factory(2400, 1800, name="bench.png", noise=True)
    config = CompressionConfig()
    photo = compress_photo(raw, config)

    assert (photo.width, photo.height) == (1600, 1200)
    assert photo.byte_size <= config.byte_budget or photo.quality == config.quality_floor
    assert photo.within_budget == (photo.byte_size <= config.byte_budget)
    assert photo.mime_type == "image/jpeg"
    assert photo.name == "bench.jpg"

    blob = decode_b64(photo.encoded_text)
    assert len(blob) == photo.byte_size
    with Image.open(io.BytesIO(blob)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.size == (1600, 1200)


def test_compressed_photo_hint(photo_factory):
    photo = compress_photo(photo_factory(300, 200), CompressionConfig())
    assert photo.hint().startswith("Compressed: ~")
    assert photo.hint().endswith("(300×200)")


def test_encoder_main_writes_data_url(tmp_path, capsys):
    source = tmp_path / "bench.png"
    source.write_bytes(make_image_bytes(64, 48))
    out = tmp_path / "bench.txt"

    encoder_main([str(source), "-o", str(out), "--data-url"])

    assert "bench.jpg: Compressed: ~" in capsys.readouterr().out
    header, text = out.read_text().split(",", 1)
    assert header == "data:image/jpeg;base64"
    assert decode_b64(text)[:2] == b"\xff\xd8"


def test_encoder_main_writes_plain_base64_by_default(tmp_path):
    source = tmp_path / "bench.png"
    source.write_bytes(make_image_bytes(64, 48))
    out = tmp_path / "bench.txt"

    encoder_main([str(source), "-o", str(out)])

    assert decode_b64(out.read_text())[:2] == b"\xff\xd8"
