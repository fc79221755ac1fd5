import io
import os

import pytest
from PIL import Image

from shift_log_tool.core.models import RawPhotoInput


def make_image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "RGB",
                     noise: bool = False, **save_kwargs) -> bytes:
    """Encode a solid or random-noise image of the given size."""
    if noise:
        channels = len(Image.new(mode, (1, 1)).getbands())
        img = Image.frombytes(mode, (width, height), os.urandom(width * height * channels))
    else:
        img = Image.new(mode, (width, height), color="steelblue" if mode in ("RGB", "RGBA") else 128)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def photo_factory():
    def factory(width: int, height: int, name: str = "photo.png", **kwargs) -> RawPhotoInput:
        data = make_image_bytes(width, height, **kwargs)
        return RawPhotoInput(name=name, data=data, size=len(data))
    return factory
