"""Data models for AVX Sight."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from avx_sight.exceptions import AVXSightError


class PluginKind(Enum):
    """Closed set of plugin formats, keyed by bundle extension."""
    AUDIO_UNIT = "AudioUnit"
    VST = "VST"
    VST3 = "VST3"
    AAX = "AAX"

    @property
    def extension(self) -> str:
        """Lowercase bundle extension for this format (without the dot)."""
        return _KIND_EXTENSIONS[self]

    @property
    def has_metadata(self) -> bool:
        """Whether bundles of this format expose a readable Info.plist."""
        return self in (PluginKind.AUDIO_UNIT, PluginKind.VST3)

    @classmethod
    def from_extension(cls, extension: str) -> Optional["PluginKind"]:
        """Map a file extension (case-insensitive, dot optional) to a kind."""
        return _EXTENSION_KINDS.get(extension.lower().lstrip("."))


_KIND_EXTENSIONS = {
    PluginKind.AUDIO_UNIT: "component",
    PluginKind.VST: "vst",
    PluginKind.VST3: "vst3",
    PluginKind.AAX: "aaxplugin",
}
_EXTENSION_KINDS = {ext: kind for kind, ext in _KIND_EXTENSIONS.items()}

KNOWN_EXTENSIONS = frozenset(_EXTENSION_KINDS)


class Domain(Enum):
    """Which library root a plugin was found under."""
    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True)
class PluginRecord:
    """Snapshot of one discovered plugin bundle.

    Equality and hashing are defined on ``identity`` (the absolute bundle
    path) alone, so two records for the same path are interchangeable in a
    set regardless of their metadata.
    """
    identity: str
    name: str = field(compare=False)
    kind: PluginKind = field(compare=False)
    domain: Domain | None = field(default=None, compare=False)
    version: str | None = field(default=None, compare=False)
    manufacturer: str | None = field(default=None, compare=False)
    description: str | None = field(default=None, compare=False)

    @property
    def path(self) -> Path:
        return Path(self.identity)

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict."""
        return {
            "identity": self.identity,
            "name": self.name,
            "kind": self.kind.value,
            "domain": self.domain.value if self.domain else None,
            "version": self.version,
            "manufacturer": self.manufacturer,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PluginRecord":
        """Deserialize from dict."""
        domain = data.get("domain")
        return cls(
            identity=data["identity"],
            name=data["name"],
            kind=PluginKind(data["kind"]),
            domain=Domain(domain) if domain else None,
            version=data.get("version"),
            manufacturer=data.get("manufacturer"),
            description=data.get("description"),
        )


def merge_records(*groups: Iterable[PluginRecord]) -> frozenset[PluginRecord]:
    """Union record groups keyed by identity.

    A record from a later group (or later in the same group) replaces an
    earlier record with the same identity.
    """
    merged: dict[str, PluginRecord] = {}
    for group in groups:
        for record in group:
            merged[record.identity] = record
    return frozenset(merged.values())


@dataclass(frozen=True)
class LibraryRoot:
    """A top-level library directory searched for plugin sub-directories."""
    path: Path
    domain: Domain

    def to_dict(self) -> dict:
        return {"path": str(self.path), "domain": self.domain.value}

    @classmethod
    def from_dict(cls, data: dict) -> "LibraryRoot":
        return cls(path=Path(data["path"]).expanduser(), domain=Domain(data["domain"]))


@dataclass(frozen=True)
class RootOutcome:
    """Result of scanning one library root."""
    root: LibraryRoot
    count: int = 0
    error: AVXSightError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ScanResult:
    """Best-effort outcome of a scan: records plus at most one representative error."""
    records: frozenset[PluginRecord] = frozenset()
    error: AVXSightError | None = None
    outcomes: tuple[RootOutcome, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    def __len__(self) -> int:
        return len(self.records)

    def sorted(self) -> list[PluginRecord]:
        """Records ordered by name, then by path."""
        return sorted(self.records, key=lambda r: (r.name, r.identity))

    def search(self, text: str = "") -> list[PluginRecord]:
        """Case-insensitive substring match on record names.

        Empty text matches every record. Results are ordered by name.
        """
        needle = text.lower()
        return [r for r in self.sorted() if not needle or needle in r.name.lower()]

    def get(self, identity: str) -> PluginRecord | None:
        """Look up a record by its absolute path."""
        for record in self.records:
            if record.identity == identity:
                return record
        return None


class PromptOutcome(Enum):
    """Answer to an interactive folder-access request."""
    GRANTED = "granted"
    DENIED = "denied"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PromptResponse:
    """Sum type returned by an access prompter.

    ``selected_path`` is only meaningful for ``GRANTED`` and holds the folder
    the user actually picked, which may differ from the one requested.
    """
    outcome: PromptOutcome
    selected_path: Path | None = None

    @classmethod
    def granted(cls, selected_path: Path | str) -> "PromptResponse":
        return cls(PromptOutcome.GRANTED, Path(selected_path))

    @classmethod
    def denied(cls) -> "PromptResponse":
        return cls(PromptOutcome.DENIED)

    @classmethod
    def cancelled(cls) -> "PromptResponse":
        return cls(PromptOutcome.CANCELLED)


@dataclass
class Grant:
    """Persisted, revalidatable read permission for one root folder."""
    path: str
    token: str
    device: int
    inode: int
    created_at: datetime = field(default_factory=datetime.now)
    refreshed_at: datetime | None = None

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict."""
        return {
            "path": self.path,
            "token": self.token,
            "device": self.device,
            "inode": self.inode,
            "created_at": self.created_at.isoformat(),
            "refreshed_at": self.refreshed_at.isoformat() if self.refreshed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Grant":
        """Deserialize from dict."""
        refreshed_at = data.get("refreshed_at")
        return cls(
            path=data["path"],
            token=data["token"],
            device=int(data["device"]),
            inode=int(data["inode"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            refreshed_at=datetime.fromisoformat(refreshed_at) if refreshed_at else None,
        )


@dataclass
class AuditEvent:
    """Record of an access or scan operation."""
    ts: datetime
    kind: str  # "access", "grant", "scan", "error"
    path: str
    domain: str | None = None
    count: int | None = None
    detail: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict."""
        return {
            "ts": self.ts.isoformat(),
            "kind": self.kind,
            "path": self.path,
            "domain": self.domain,
            "count": self.count,
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEvent":
        """Deserialize from dict."""
        return cls(
            ts=datetime.fromisoformat(data["ts"]),
            kind=data["kind"],
            path=data["path"],
            domain=data.get("domain"),
            count=data.get("count"),
            detail=data.get("detail", {}),
        )
