"""Parsing module for bundle property lists."""

from avx_sight.parsing.plist import BundleMetadata, MetadataExtractor, extract_metadata

__all__ = ["BundleMetadata", "MetadataExtractor", "extract_metadata"]
