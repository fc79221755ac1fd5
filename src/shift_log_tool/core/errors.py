"""
Exceptions raised while turning station inputs into a submission payload.
"""

from typing import Optional


class ShiftLogError(Exception):
    """Base class for all shift-log errors."""


class PhotoError(ShiftLogError):
    """Base class for failures of a single photo pipeline."""


class DecodeError(PhotoError):
    """The photo bytes are not a supported raster image."""


class EncodeError(PhotoError):
    """The encoder produced no output at all."""


class PhotoTooLargeError(PhotoError):
    """A photo exceeds the byte budget and the policy is to reject it."""

    def __init__(self, station: str, size: int, budget: int):
        self.station = station
        self.size = size
        self.budget = budget
        super().__init__(
            f"Photo for {station} is {size / 1024:.0f} KB, limit is {budget / 1024:.0f} KB"
        )


class BuildAborted(ShiftLogError):
    """One station's photo pipeline failed, so the whole build failed."""

    def __init__(self, station: str, cause: Optional[BaseException] = None):
        self.station = station
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Could not process photo for {station}{detail}")
