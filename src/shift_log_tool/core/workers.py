import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from .config import CompressionConfig, OversizePolicy
from .errors import BuildAborted, DecodeError, EncodeError, PhotoTooLargeError
from .image_encoder import compress_photo_async
from .models import BasicInfo, CompressedPhoto, RawPhotoInput, StationEntry, StationInput
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

Compressor = Callable[[RawPhotoInput, CompressionConfig], Awaitable[CompressedPhoto]]
CompressedCallback = Callable[[str, CompressedPhoto], None]


class StationPayloadBuilder:
    """
    Collects the station entries of one submission.

    Stations with neither notes nor a photo are left out. Photos of all other
    stations are compressed concurrently; the result keeps the configured
    station order no matter which photo finishes first. If any photo fails,
    the whole build fails with BuildAborted.
    """

    def __init__(
        self,
        config: Optional[CompressionConfig] = None,
        compressor: Compressor = compress_photo_async,
        on_compressed: Optional[CompressedCallback] = None,
    ) -> None:
        self.config = config or CompressionConfig()
        self.compressor = compressor
        self.on_compressed = on_compressed

    def _pending(self, inputs: Mapping[str, StationInput]) -> List[Tuple[str, str, Optional[RawPhotoInput]]]:
        unknown = [key for key in inputs if key not in self.config.stations]
        if unknown:
            raise ValueError(
                f"Unknown station(s): {', '.join(unknown)}. "
                f"Available stations: {', '.join(self.config.stations)}"
            )

        pending = []
        for key in self.config.stations:
            station = inputs.get(key)
            if station is None:
                continue
            notes = (station.notes or "").strip()
            if not notes and station.photo is None:
                continue
            pending.append((key, notes, station.photo))
        return pending

    def _check_sizes(self, pending: List[Tuple[str, str, Optional[RawPhotoInput]]]) -> None:
        """Reject oversized photos before any work is launched."""
        if self.config.oversize_policy is not OversizePolicy.REJECT:
            return
        for key, _, photo in pending:
            if photo is not None and photo.size > self.config.byte_budget:
                raise PhotoTooLargeError(key, photo.size, self.config.byte_budget)

    async def _build_entry(self, key: str, notes: str, photo: Optional[RawPhotoInput]) -> StationEntry:
        if photo is None:
            return StationEntry(key=key, notes=notes)

        logger.debug(f"Compressing {photo.name} for {key} ({photo.size / (1024 * 1024):.2f} MB)")
        try:
            compressed = await self.compressor(photo, self.config)
        except (DecodeError, EncodeError) as err:
            logger.error(f"Photo for {key} failed: {err}")
            raise BuildAborted(key, err) from err

        if self.on_compressed:
            self.on_compressed(key, compressed)
        return StationEntry(key=key, notes=notes, photo=compressed)

    async def _fill_slot(self, results: List[Optional[StationEntry]], index: int,
                         key: str, notes: str, photo: Optional[RawPhotoInput]) -> None:
        results[index] = await self._build_entry(key, notes, photo)

    async def build(self, inputs: Mapping[str, StationInput]) -> List[StationEntry]:
        """
        Build the station entries for `inputs`.

        Args:
            inputs: Form state per station name. Stations missing from the
                mapping are treated as empty.

        Returns:
            Entries in configured station order.

        Raises:
            ValueError: If `inputs` names a station that is not configured.
            PhotoTooLargeError: In reject mode, before any photo is processed.
            BuildAborted: If any station's photo could not be decoded or encoded.
        """
        pending = self._pending(inputs)
        self._check_sizes(pending)
        if not pending:
            return []

        start_time = time.time()
        photos = sum(1 for _, _, photo in pending if photo is not None)
        logger.info(f"Building {len(pending)} station entries ({photos} with photos)")

        results: List[Optional[StationEntry]] = [None] * len(pending)
        try:
            async with asyncio.TaskGroup() as tg:
                for index, (key, notes, photo) in enumerate(pending):
                    tg.create_task(self._fill_slot(results, index, key, notes, photo))
        except ExceptionGroup as group:
            aborted = [err for err in group.exceptions if isinstance(err, BuildAborted)]
            if aborted:
                raise aborted[0]
            raise

        logger.info(f"Built {len(results)} station entries in {time.time() - start_time:.2f}s")
        return [entry for entry in results if entry is not None]


async def build_stations_payload(
    inputs: Mapping[str, StationInput],
    config: Optional[CompressionConfig] = None,
    on_compressed: Optional[CompressedCallback] = None,
) -> List[StationEntry]:
    """
    Convenience function to build station entries with the default compressor.

    Args:
        inputs: Form state per station name.
        config: Compression settings (defaults apply if None).
        on_compressed: Called with (station, photo) as each photo finishes.

    Returns:
        Entries in configured station order.
    """
    builder = StationPayloadBuilder(config=config, on_compressed=on_compressed)
    return await builder.build(inputs)


def build_submission(basic: BasicInfo, entries: List[StationEntry]) -> Dict[str, Any]:
    """Combine the form fields with the station entries into the request body."""
    payload = basic.to_dict()
    payload["stations"] = [entry.to_payload() for entry in entries]
    return payload
