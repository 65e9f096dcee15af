"""Tests for PluginScanService across multiple library roots."""

from pathlib import Path

import pytest

from avx_sight.access import AccessCoordinator, AccessPrompter, GrantStore, StaticPrompter
from avx_sight.config import ScanConfig
from avx_sight.exceptions import AccessDeniedError, DirectoryReadError
from avx_sight.models import Domain, LibraryRoot, PluginKind, PromptOutcome, PromptResponse
from avx_sight.runtime import PluginScanService

from conftest import COMPONENTS, VST, VST3, MemoryAuditSink, make_bundle


class DenyPathPrompter(AccessPrompter):
    """Grants every folder except one."""

    def __init__(self, denied: Path):
        self.denied = denied

    def request_access(self, path: Path) -> PromptResponse:
        if path == self.denied:
            return PromptResponse.denied()
        return PromptResponse.granted(path)


@pytest.fixture
def system_library(temp_dir: Path) -> Path:
    root = temp_dir / "System" / "Library"
    make_bundle(root / COMPONENTS, "Reverb.component", {"CFBundleShortVersionString": "1.2"})
    make_bundle(root / VST3, "Synth.vst3")
    return root


@pytest.fixture
def user_library(temp_dir: Path) -> Path:
    root = temp_dir / "Users" / "me" / "Library"
    make_bundle(root / COMPONENTS, "Reverb.component", {"CFBundleShortVersionString": "2.0"})
    make_bundle(root / VST, "Delay.vst")
    return root


def make_service(
    temp_dir: Path,
    system_library: Path,
    user_library: Path,
    prompter: AccessPrompter | None = None,
    audit_sink=None,
    **config_kwargs,
) -> PluginScanService:
    config = ScanConfig(
        roots=[
            LibraryRoot(system_library, Domain.SYSTEM),
            LibraryRoot(user_library, Domain.USER),
        ],
        grants_path=temp_dir / "grants.json",
        **config_kwargs,
    )
    coordinator = AccessCoordinator(
        GrantStore(config.grants_path),
        prompter or StaticPrompter(PromptOutcome.GRANTED),
        audit_sink,
    )
    return PluginScanService(config=config, coordinator=coordinator, audit_sink=audit_sink)


class TestPluginScanService:
    """Tests for multi-root scanning."""

    def test_scan_both_roots(self, temp_dir, system_library, user_library):
        result = make_service(temp_dir, system_library, user_library).scan()

        assert result.ok
        assert len(result) == 4
        assert [r.name for r in result.sorted()] == ["Delay", "Reverb", "Reverb", "Synth"]

    def test_same_relative_path_in_two_roots_is_two_records(self, temp_dir, system_library, user_library):
        result = make_service(temp_dir, system_library, user_library).scan()

        reverbs = result.search("reverb")
        assert len(reverbs) == 2
        assert {r.identity for r in reverbs} == {
            str(system_library / COMPONENTS / "Reverb.component"),
            str(user_library / COMPONENTS / "Reverb.component"),
        }
        assert {(r.domain, r.version) for r in reverbs} == {
            (Domain.SYSTEM, "1.2"),
            (Domain.USER, "2.0"),
        }

    def test_denied_root_does_not_block_other_root(self, temp_dir, system_library, user_library):
        service = make_service(
            temp_dir, system_library, user_library, prompter=DenyPathPrompter(system_library)
        )

        result = service.scan()

        assert {r.domain for r in result.records} == {Domain.USER}
        assert {r.name for r in result.records} == {"Reverb", "Delay"}
        assert isinstance(result.error, AccessDeniedError)
        assert result.error.path == str(system_library)

        system_outcome, user_outcome = result.outcomes
        assert not system_outcome.ok
        assert system_outcome.count == 0
        assert user_outcome.ok
        assert user_outcome.count == 2

    def test_all_roots_denied(self, temp_dir, system_library, user_library):
        service = make_service(
            temp_dir, system_library, user_library, prompter=StaticPrompter(PromptOutcome.DENIED)
        )

        result = service.scan()

        assert len(result) == 0
        assert isinstance(result.error, AccessDeniedError)
        # First error in root order
        assert result.error.path == str(system_library)
        assert all(not outcome.ok for outcome in result.outcomes)

    def test_read_failure_in_one_root(self, temp_dir, system_library, user_library):
        (system_library / VST).write_text("not a folder")

        result = make_service(temp_dir, system_library, user_library).scan()

        assert isinstance(result.error, DirectoryReadError)
        assert len(result) == 4

    def test_missing_root_is_denied(self, temp_dir, user_library):
        result = make_service(temp_dir, temp_dir / "Nowhere", user_library).scan()

        assert isinstance(result.error, AccessDeniedError)
        assert {r.name for r in result.records} == {"Reverb", "Delay"}

    def test_extensions_from_config(self, temp_dir, system_library, user_library):
        service = make_service(temp_dir, system_library, user_library, extensions={"vst3"})

        result = service.scan()

        assert [r.kind for r in result.records] == [PluginKind.VST3]

    def test_each_scan_returns_fresh_result(self, temp_dir, system_library, user_library):
        service = make_service(temp_dir, system_library, user_library)

        first = service.scan()
        make_bundle(user_library / VST3, "Added.vst3")
        second = service.scan()

        assert len(first) == 4
        assert len(second) == 5
        assert first.get(str(user_library / VST3 / "Added.vst3")) is None

    def test_grants_are_reused_between_scans(self, temp_dir, system_library, user_library):
        prompter = StaticPrompter(PromptOutcome.GRANTED)
        service = make_service(temp_dir, system_library, user_library, prompter=prompter)

        service.scan()
        service.scan()

        assert prompter.requests == [system_library, user_library]

    def test_default_coordinator_uses_stored_grants(self, temp_dir, system_library, user_library):
        grants_path = temp_dir / "grants.json"
        store = GrantStore(grants_path)
        store.put(system_library)
        store.put(user_library)

        config = ScanConfig(
            roots=[
                LibraryRoot(system_library, Domain.SYSTEM),
                LibraryRoot(user_library, Domain.USER),
            ],
            grants_path=grants_path,
        )
        result = PluginScanService(config=config).scan()

        assert result.ok
        assert len(result) == 4

    def test_audit_events(self, temp_dir, system_library, user_library):
        sink = MemoryAuditSink()
        service = make_service(
            temp_dir,
            system_library,
            user_library,
            prompter=DenyPathPrompter(system_library),
            audit_sink=sink,
        )

        service.scan()

        scan_events = [e for e in sink.events if e.kind == "scan"]
        assert [(e.domain, e.count) for e in scan_events] == [("system", 0), ("user", 2)]

        error_events = [e for e in sink.events if e.kind == "error"]
        assert len(error_events) == 1
        assert error_events[0].detail["error_type"] == "AccessDeniedError"
