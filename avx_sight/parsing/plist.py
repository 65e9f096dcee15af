"""Info.plist metadata extraction for plugin bundles."""

import plistlib
from dataclasses import dataclass
from pathlib import Path

from avx_sight.models import PluginKind

INFO_PLIST = Path("Contents") / "Info.plist"

VERSION_KEY = "CFBundleShortVersionString"
MANUFACTURER_KEY = "CFBundleIdentifier"
DESCRIPTION_KEY = "CFBundleGetInfoString"


@dataclass(frozen=True)
class BundleMetadata:
    """Optional descriptive fields read from a bundle's property list."""
    version: str | None = None
    manufacturer: str | None = None
    description: str | None = None


class MetadataExtractor:
    """Reads version, manufacturer and description from Info.plist.

    Only Audio Unit and VST3 bundles are introspected. A missing, unreadable
    or malformed property list is not an error: every field simply comes
    back as ``None``.
    """

    def extract(self, bundle_path: Path, kind: PluginKind) -> BundleMetadata:
        """Extract metadata for a bundle.

        Args:
            bundle_path: Path to the plugin bundle directory
            kind: Plugin format of the bundle

        Returns:
            BundleMetadata with any fields that could be read

        Example:
            >>> extractor = MetadataExtractor()
            >>> meta = extractor.extract(Path("/Library/Audio/Plug-Ins/Components/Reverb.component"),
            ...                          PluginKind.AUDIO_UNIT)
            >>> meta.version
            '1.2'
        """
        if not kind.has_metadata:
            return BundleMetadata()

        info = self._load(Path(bundle_path) / INFO_PLIST)
        if info is None:
            return BundleMetadata()

        return BundleMetadata(
            version=_string_value(info, VERSION_KEY),
            manufacturer=_string_value(info, MANUFACTURER_KEY),
            description=_string_value(info, DESCRIPTION_KEY),
        )

    def _load(self, plist_path: Path) -> dict | None:
        """Parse a plist into a mapping, or None if that is not possible."""
        try:
            with open(plist_path, 'rb') as f:
                data = plistlib.load(f)
        except Exception:
            # Third-party file: missing, unreadable or malformed in any way
            return None

        if not isinstance(data, dict):
            return None

        return data


def _string_value(info: dict, key: str) -> str | None:
    value = info.get(key)
    return value if isinstance(value, str) else None


def extract_metadata(bundle_path: Path, kind: PluginKind) -> BundleMetadata:
    """Convenience wrapper around MetadataExtractor.extract."""
    return MetadataExtractor().extract(bundle_path, kind)
