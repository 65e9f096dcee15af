"""Runtime module for scan orchestration."""

from avx_sight.runtime.service import PluginScanService

__all__ = ["PluginScanService"]
