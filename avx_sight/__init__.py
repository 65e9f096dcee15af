"""AVX Sight - discovery of installed audio plugin bundles.

This library finds Audio Unit, VST, VST3 and AAX bundles under the system and
user library folders, reads basic Info.plist metadata, and coordinates the
folder-access grants needed to read those locations.
"""

from avx_sight.exceptions import (
    AVXSightError,
    AccessDeniedError,
    DirectoryReadError,
    GrantStoreError,
    ConfigError,
    BundleNotFoundError,
    UnrecognizedBundleError,
)

from avx_sight.models import (
    PluginKind,
    Domain,
    PluginRecord,
    LibraryRoot,
    RootOutcome,
    ScanResult,
    PromptOutcome,
    PromptResponse,
    Grant,
    AuditEvent,
    merge_records,
)

from avx_sight.config import ScanConfig
from avx_sight.access import (
    AccessCoordinator,
    AccessibleDirectory,
    AccessPrompter,
    ConsolePrompter,
    GrantStore,
    StaticPrompter,
)
from avx_sight.discovery import DirectoryScanner
from avx_sight.parsing import BundleMetadata, MetadataExtractor, extract_metadata
from avx_sight.observability import AuditSink, JSONLAuditSink, StdoutAuditSink
from avx_sight.runtime import PluginScanService

__version__ = "0.1.0"

__all__ = [
    # Exceptions
    "AVXSightError",
    "AccessDeniedError",
    "DirectoryReadError",
    "GrantStoreError",
    "ConfigError",
    "BundleNotFoundError",
    "UnrecognizedBundleError",
    # Models
    "PluginKind",
    "Domain",
    "PluginRecord",
    "LibraryRoot",
    "RootOutcome",
    "ScanResult",
    "PromptOutcome",
    "PromptResponse",
    "Grant",
    "AuditEvent",
    "merge_records",
    # Configuration
    "ScanConfig",
    # Access
    "AccessCoordinator",
    "AccessibleDirectory",
    "AccessPrompter",
    "ConsolePrompter",
    "GrantStore",
    "StaticPrompter",
    # Discovery
    "DirectoryScanner",
    "BundleMetadata",
    "MetadataExtractor",
    "extract_metadata",
    # Observability
    "AuditSink",
    "JSONLAuditSink",
    "StdoutAuditSink",
    # Runtime
    "PluginScanService",
]
