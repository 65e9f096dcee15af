"""Filesystem scanning for plugin discovery."""

import os
import stat
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable

from avx_sight.access.handle import AccessibleDirectory
from avx_sight.config import PLUGIN_SUBDIRECTORIES
from avx_sight.exceptions import (
    AccessDeniedError,
    AVXSightError,
    BundleNotFoundError,
    DirectoryReadError,
    UnrecognizedBundleError,
)
from avx_sight.models import KNOWN_EXTENSIONS, Domain, PluginKind, PluginRecord, merge_records
from avx_sight.parsing.plist import MetadataExtractor

# 0 on platforms without BSD file flags
_UF_HIDDEN = getattr(stat, "UF_HIDDEN", 0)


class DirectoryScanner:
    """Scans a library root for plugin bundles.

    A root is expanded into a fixed list of plugin sub-directories, each of
    which is listed (non-recursively) on its own worker thread. Entries are
    kept when their lowercase extension is one of the requested extensions
    and their name is not hidden. Audio Unit and VST3 bundles also get their
    Info.plist metadata read.

    The scanner holds no state between calls; every scan returns fresh
    records.
    """

    def __init__(
        self,
        subdirectories: Iterable[str] = PLUGIN_SUBDIRECTORIES,
        extractor: MetadataExtractor | None = None,
    ):
        """Initialize the scanner.

        Args:
            subdirectories: Plugin folders relative to each root
            extractor: Metadata extractor for bundle property lists
        """
        self.subdirectories = tuple(subdirectories)
        self.extractor = extractor or MetadataExtractor()

    def scan(
        self,
        root: AccessibleDirectory,
        extensions: Iterable[str] = KNOWN_EXTENSIONS,
        domain: Domain | None = None,
    ) -> tuple[set[PluginRecord], AVXSightError | None]:
        """Find all plugin bundles under a root.

        Args:
            root: Accessible library folder, e.g. ``/Library``
            extensions: Bundle extensions to keep (case-insensitive)
            domain: Domain to stamp on each record, if known

        Returns:
            Tuple of (records, first error). Records gathered before or
            alongside a failure are always returned. A missing plugin
            sub-directory is not an error.

        Example:
            >>> scanner = DirectoryScanner()
            >>> records, error = scanner.scan(AccessibleDirectory(Path("/Library")))
            >>> print(f"Found {len(records)} plugins")
        """
        wanted = {ext.lower().lstrip(".") for ext in extensions}

        try:
            with root.access() as root_path:
                if root.empty:
                    return set(), None
                return self._scan_subdirectories(root_path, wanted, domain)
        except AccessDeniedError as e:
            return set(), e

    def inspect(self, path: Path | str, domain: Domain | None = None) -> PluginRecord:
        """Build a record for a single bundle path.

        Args:
            path: Path to a plugin bundle
            domain: Domain to stamp on the record, if known

        Returns:
            PluginRecord for the bundle

        Raises:
            BundleNotFoundError: If the path does not exist
            UnrecognizedBundleError: If the path is hidden or has an unknown extension
        """
        bundle_path = Path(os.path.abspath(Path(path).expanduser()))
        if not bundle_path.exists():
            raise BundleNotFoundError(f"Plugin bundle not found: {bundle_path}")

        record = self._build_record(bundle_path, KNOWN_EXTENSIONS, domain)
        if record is None:
            raise UnrecognizedBundleError(
                f"Not a recognized plugin bundle: {bundle_path} "
                f"(expected one of: {', '.join(sorted('.' + e for e in KNOWN_EXTENSIONS))})"
            )
        return record

    def _scan_subdirectories(
        self,
        root_path: Path,
        extensions: set[str],
        domain: Domain | None,
    ) -> tuple[set[PluginRecord], AVXSightError | None]:
        base = Path(os.path.abspath(root_path))
        directories = [base / sub for sub in self.subdirectories]

        records: frozenset[PluginRecord] = frozenset()
        first_error: AVXSightError | None = None

        with ThreadPoolExecutor(max_workers=max(1, len(directories))) as executor:
            futures = [
                executor.submit(self._scan_directory, directory, extensions, domain)
                for directory in directories
            ]
            # Merge in completion order; first error collected wins
            for future in as_completed(futures):
                found, error = future.result()
                records = merge_records(records, found)
                if first_error is None and error is not None:
                    first_error = error

        return set(records), first_error

    def _scan_directory(
        self,
        directory: Path,
        extensions: set[str],
        domain: Domain | None,
    ) -> tuple[set[PluginRecord], AVXSightError | None]:
        """List one plugin folder. Blocking; runs on a worker thread."""
        plugins: set[PluginRecord] = set()

        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    record = self._record_for_entry(entry, extensions, domain)
                    if record is not None:
                        # Later insertion wins for an equal identity
                        plugins.discard(record)
                        plugins.add(record)
        except FileNotFoundError:
            # Not an error if a standard folder doesn't exist
            return plugins, None
        except OSError as e:
            # Keep whatever was found before the failure
            return plugins, DirectoryReadError(str(directory), e)

        return plugins, None

    def _record_for_entry(
        self,
        entry: os.DirEntry,
        extensions: set[str],
        domain: Domain | None,
    ) -> PluginRecord | None:
        if entry.name.startswith("."):
            return None

        try:
            st = entry.stat()
        except OSError:
            # Broken symlink or permission denied on this entry only
            return None

        if getattr(st, "st_flags", 0) & _UF_HIDDEN:
            return None

        return self._build_record(Path(entry.path), extensions, domain)

    def _build_record(
        self,
        path: Path,
        extensions: Iterable[str],
        domain: Domain | None,
    ) -> PluginRecord | None:
        extension = path.suffix[1:].lower()
        if not extension or extension not in extensions:
            return None

        kind = PluginKind.from_extension(extension)
        if kind is None:
            return None

        name = path.stem
        if not name or name.startswith("."):
            return None

        metadata = self.extractor.extract(path, kind)

        return PluginRecord(
            identity=str(path),
            name=name,
            kind=kind,
            domain=domain,
            version=metadata.version,
            manufacturer=metadata.manufacturer,
            description=metadata.description,
        )
