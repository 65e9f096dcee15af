"""Discovery module for plugin scanning."""

from avx_sight.discovery.scanner import DirectoryScanner

__all__ = ["DirectoryScanner"]
