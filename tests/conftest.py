"""Pytest configuration and shared fixtures."""

import plistlib
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from avx_sight.models import AuditEvent
from avx_sight.observability.audit import AuditSink

COMPONENTS = Path("Audio/Plug-Ins/Components")
VST3 = Path("Audio/Plug-Ins/VST3")
VST = Path("Audio/Plug-Ins/VST")
AAX = Path("Application Support/Avid/Audio/Plug-Ins")


def make_bundle(directory: Path, filename: str, info: dict | None = None, fmt=plistlib.FMT_XML) -> Path:
    """Create a bundle directory, optionally with a Contents/Info.plist."""
    bundle = directory / filename
    bundle.mkdir(parents=True)
    if info is not None:
        write_info_plist(bundle, info, fmt=fmt)
    return bundle


def write_info_plist(bundle: Path, info, fmt=plistlib.FMT_XML) -> Path:
    """Write a property list to <bundle>/Contents/Info.plist."""
    contents = bundle / "Contents"
    contents.mkdir(parents=True, exist_ok=True)
    plist_path = contents / "Info.plist"
    with open(plist_path, "wb") as f:
        plistlib.dump(info, f, fmt=fmt)
    return plist_path


class MemoryAuditSink(AuditSink):
    """Collects audit events in memory."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def log(self, event: AuditEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [event.kind for event in self.events]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def library(temp_dir: Path) -> Path:
    """Create an empty library root."""
    root = temp_dir / "Library"
    root.mkdir()
    return root


@pytest.fixture
def populated_library(library: Path) -> Path:
    """Library with the reference layout.

    Components/Reverb.component (Info.plist, version 1.2)
    Components/notes.txt
    VST3/Synth.vst3 (no Info.plist)
    VST/.hidden.vst
    """
    make_bundle(
        library / COMPONENTS,
        "Reverb.component",
        {"CFBundleShortVersionString": "1.2"},
    )
    (library / COMPONENTS / "notes.txt").write_text("not a plugin")
    make_bundle(library / VST3, "Synth.vst3")
    make_bundle(library / VST, ".hidden.vst")
    return library


@pytest.fixture
def audit_sink() -> MemoryAuditSink:
    return MemoryAuditSink()
