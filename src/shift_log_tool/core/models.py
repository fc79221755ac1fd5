from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Union

PRIORITIES = ("Low", "Medium", "High")


@dataclass(frozen=True)
class RawPhotoInput:
    """User-selected photo bytes with the size and name they were declared with."""
    name: str
    data: bytes = field(repr=False)
    size: int = -1

    def __post_init__(self) -> None:
        if self.size < 0:
            object.__setattr__(self, "size", len(self.data))

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "RawPhotoInput":
        path = Path(path)
        data = path.read_bytes()
        return cls(name=path.name, data=data, size=len(data))

    def hint(self) -> str:
        return f"Original: {self.size / (1024 * 1024):.2f} MB (auto-compress on Save)"


@dataclass(frozen=True)
class EncodeResult:
    """Output of the adaptive encoder."""
    data: bytes = field(repr=False)
    quality: float
    attempts: int
    within_budget: bool

    @property
    def byte_size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CompressedPhoto:
    encoded_text: str = field(repr=False)
    mime_type: str
    name: str
    byte_size: int
    width: int
    height: int
    quality: float
    within_budget: bool = True

    def to_payload(self) -> Dict[str, str]:
        """Shape expected by the log service for a station photo."""
        return {"base64": self.encoded_text, "mimeType": self.mime_type, "name": self.name}

    def hint(self) -> str:
        kb = round(self.byte_size / 1024)
        return f"Compressed: ~{kb} KB ({self.width}×{self.height})"


@dataclass(frozen=True)
class StationInput:
    """Current form state of one station."""
    notes: str = ""
    photo: Optional[RawPhotoInput] = None


@dataclass(frozen=True)
class StationEntry:
    key: str
    notes: str = ""
    photo: Optional[CompressedPhoto] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"key": self.key, "notes": self.notes}
        if self.photo is not None:
            payload["photo"] = self.photo.to_payload()
        return payload


@dataclass(frozen=True)
class BasicInfo:
    """Form fields sent alongside the stations."""
    closer: str
    date: str = field(default_factory=lambda: date.today().isoformat())
    priority: str = "Medium"
    units_on_bench: int = 0
    handoff_notes: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "closer", (self.closer or "").strip())
        object.__setattr__(self, "handoff_notes", (self.handoff_notes or "").strip())
        if not self.date:
            object.__setattr__(self, "date", date.today().isoformat())
        if self.priority not in PRIORITIES:
            raise ValueError(f"Priority must be one of {', '.join(PRIORITIES)}, got '{self.priority}'")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "closer": self.closer,
            "priority": self.priority,
            "units_on_bench": self.units_on_bench,
            "handoff_notes": self.handoff_notes,
        }
