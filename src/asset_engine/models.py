from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .errors import ErrorKind


@dataclass(frozen=True)
class AssetReference:
    raw: Optional[str]


@dataclass(frozen=True)
class CanonicalPath:
    path: str

    def __post_init__(self) -> None:
        if self.path and not self.path.startswith("/"):
            raise ValueError(f"canonical path must start with '/': {self.path!r}")

    def __bool__(self) -> bool:
        return bool(self.path)

    def __str__(self) -> str:
        return self.path


# "no asset" marker; every valid canonical path starts with "/" so this never collides
NO_ASSET = CanonicalPath("")


class NormalizationOutcome(str, Enum):
    PARSED = "parsed"
    PATH = "path"
    FALLBACK_USED = "fallback_used"
    NO_ASSET = "no_asset"


@dataclass(frozen=True)
class NormalizationResult:
    raw: Optional[str]
    path: CanonicalPath
    outcome: NormalizationOutcome

    @property
    def fallback_used(self) -> bool:
        return self.outcome is NormalizationOutcome.FALLBACK_USED


class FitMode(str, Enum):
    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"


@dataclass(frozen=True)
class FocusPoint:
    x: float = 50.0
    y: float = 50.0


@dataclass(frozen=True)
class ContainerRect:
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class PlacementState:
    focus_point: FocusPoint = field(default_factory=FocusPoint)
    fit: FitMode = FitMode.COVER


@dataclass(frozen=True)
class OrderableItem:
    id: str
    position: int


@dataclass(frozen=True)
class ClickEvent:
    item_id: str
    timestamp: float


def make_identity(name: Optional[str], last_modified: int, size_bytes: int) -> str:
    return f"{name or 'unnamed'}-{last_modified}-{size_bytes}"


@dataclass(frozen=True)
class AttachmentFile:
    name: str
    size_bytes: int
    mime_type: str
    last_modified: int = 0
    identity: str = field(init=False)

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be >= 0, got {self.size_bytes}")
        object.__setattr__(self, "identity", make_identity(self.name, self.last_modified, self.size_bytes))


@dataclass(frozen=True)
class AdmissionResult:
    accepted: list[AttachmentFile] = field(default_factory=list)
    rejected: list[AttachmentFile] = field(default_factory=list)
    reason: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.reason is None


@dataclass(frozen=True)
class UploadRejection:
    kind: ErrorKind
    message: str
