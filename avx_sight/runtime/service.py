"""Scan orchestration across configured library roots.

This module provides the PluginScanService class, the single entry point a
presentation layer uses to discover plugins. It asks the AccessCoordinator
for each configured root, scans the accessible ones concurrently, and
returns the merged outcome as an immutable ScanResult value.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime

from avx_sight.access.coordinator import AccessCoordinator
from avx_sight.access.grants import GrantStore
from avx_sight.access.handle import AccessibleDirectory
from avx_sight.access.prompt import ConsolePrompter
from avx_sight.config import ScanConfig
from avx_sight.discovery.scanner import DirectoryScanner
from avx_sight.exceptions import AccessDeniedError, AVXSightError
from avx_sight.models import (
    AuditEvent,
    LibraryRoot,
    PluginRecord,
    RootOutcome,
    ScanResult,
    merge_records,
)
from avx_sight.observability.audit import AuditSink


class PluginScanService:
    """Discovers plugins under every configured library root.

    The service is an explicit instance owned by its caller; it keeps no
    results between calls. Each ``scan()`` returns its own ScanResult, so
    overlapping scans never corrupt each other. If a caller runs scans
    concurrently it decides which result to keep (last write wins).

    Each root is handled independently: a denied or failing root contributes
    an empty set and an error, but never hides records from another root.

    Example:
        >>> service = PluginScanService(
        ...     config=ScanConfig(),
        ...     coordinator=AccessCoordinator(GrantStore(path), ConsolePrompter()),
        ... )
        >>> result = service.scan()
        >>> for plugin in result.search("verb"):
        ...     print(plugin.name, plugin.kind.value)
        >>> if result.error:
        ...     print(f"Some plugins may be missing: {result.error}")
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        coordinator: AccessCoordinator | None = None,
        scanner: DirectoryScanner | None = None,
        audit_sink: AuditSink | None = None,
    ):
        """Initialize the service.

        Args:
            config: Scan configuration. If None, uses the default system and
                    user libraries.
            coordinator: Access coordinator for the roots. If None, one is
                         built from ``config.grants_path`` with a console
                         prompter.
            scanner: Directory scanner. If None, a default scanner is used.
            audit_sink: Optional AuditSink for logging operations.
        """
        self._config = config or ScanConfig()
        self._audit_sink = audit_sink
        self._coordinator = coordinator or AccessCoordinator(
            grant_store=GrantStore(self._config.grants_path),
            prompter=ConsolePrompter(),
            audit_sink=audit_sink,
        )
        self._scanner = scanner or DirectoryScanner()

    @property
    def config(self) -> ScanConfig:
        return self._config

    @property
    def coordinator(self) -> AccessCoordinator:
        return self._coordinator

    def scan(self) -> ScanResult:
        """Scan all configured roots.

        Access is resolved for every root first, one root at a time, so that
        interactive prompts never overlap. The accessible roots are then
        scanned concurrently and joined before returning.

        Returns:
            ScanResult with the merged records, the first error in root
            order (if any), and a per-root outcome
        """
        roots = self._config.roots
        handles: list[AccessibleDirectory | None] = []
        denials: list[AccessDeniedError | None] = []

        for root in roots:
            try:
                handles.append(self._coordinator.ensure_accessible(root.path))
                denials.append(None)
            except AccessDeniedError as e:
                handles.append(None)
                denials.append(e)

        scans: list[Future | None] = []
        accessible = sum(1 for handle in handles if handle is not None)
        workers = max(1, min(self._config.max_workers, accessible))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            for root, handle in zip(roots, handles):
                if handle is None:
                    scans.append(None)
                    continue
                scans.append(
                    executor.submit(
                        self._scanner.scan,
                        handle,
                        self._config.extensions,
                        root.domain,
                    )
                )

            groups: list[set[PluginRecord]] = []
            outcomes: list[RootOutcome] = []
            first_error: AVXSightError | None = None

            for root, denial, scan in zip(roots, denials, scans):
                if scan is None:
                    records, error = set(), denial
                else:
                    records, error = scan.result()

                groups.append(records)
                outcomes.append(RootOutcome(root=root, count=len(records), error=error))
                self._emit_scan(root, records, error)

                if first_error is None and error is not None:
                    first_error = error

        return ScanResult(
            records=merge_records(*groups),
            error=first_error,
            outcomes=tuple(outcomes),
        )

    def _emit_scan(
        self,
        root: LibraryRoot,
        records: set[PluginRecord],
        error: AVXSightError | None,
    ) -> None:
        if not self._audit_sink:
            return

        self._audit_sink.log(
            AuditEvent(
                ts=datetime.now(),
                kind="scan",
                path=str(root.path),
                domain=root.domain.value,
                count=len(records),
                detail={"operation": "plugin_discovery", "ok": error is None},
            )
        )

        if error is not None:
            self._audit_sink.log(
                AuditEvent(
                    ts=datetime.now(),
                    kind="error",
                    path=str(root.path),
                    domain=root.domain.value,
                    detail={"error_type": type(error).__name__, "message": str(error)},
                )
            )
