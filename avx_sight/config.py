"""Scan configuration and YAML loading."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from avx_sight.exceptions import ConfigError
from avx_sight.models import KNOWN_EXTENSIONS, Domain, LibraryRoot

SYSTEM_LIBRARY = Path("/Library")
USER_LIBRARY = Path("~/Library")
DEFAULT_GRANTS_PATH = Path("~/.config/avx-sight/grants.json")

# Relative to each library root, in scan order.
PLUGIN_SUBDIRECTORIES = (
    "Audio/Plug-Ins/Components",
    "Audio/Plug-Ins/VST3",
    "Audio/Plug-Ins/VST",
    "Application Support/Avid/Audio/Plug-Ins",
)


def default_roots() -> list[LibraryRoot]:
    """System library first, then the current user's library."""
    return [
        LibraryRoot(SYSTEM_LIBRARY, Domain.SYSTEM),
        LibraryRoot(USER_LIBRARY.expanduser(), Domain.USER),
    ]


@dataclass
class ScanConfig:
    """Configuration for a plugin scan."""
    roots: list[LibraryRoot] = field(default_factory=default_roots)
    extensions: set[str] = field(default_factory=lambda: set(KNOWN_EXTENSIONS))
    grants_path: Path = field(default_factory=lambda: DEFAULT_GRANTS_PATH.expanduser())
    max_workers: int = 4

    def __post_init__(self):
        self.extensions = {ext.lower().lstrip(".") for ext in self.extensions}
        unknown = self.extensions - KNOWN_EXTENSIONS
        if unknown:
            raise ConfigError(
                f"Unknown plugin extensions {sorted(unknown)}; "
                f"expected a subset of {sorted(KNOWN_EXTENSIONS)}"
            )
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict."""
        return {
            "roots": [root.to_dict() for root in self.roots],
            "extensions": sorted(self.extensions),
            "grants_path": str(self.grants_path),
            "max_workers": self.max_workers,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScanConfig":
        """Deserialize from dict, filling in defaults for missing keys.

        Raises:
            ConfigError: If a root entry or value is malformed
        """
        try:
            roots = (
                [LibraryRoot.from_dict(root) for root in data["roots"]]
                if "roots" in data
                else default_roots()
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid roots entry: {e}")

        grants_path = data.get("grants_path")
        if grants_path is not None and not isinstance(grants_path, (str, Path)):
            raise ConfigError(f"grants_path must be a path, got {grants_path!r}")

        try:
            max_workers = int(data.get("max_workers", 4))
        except (TypeError, ValueError):
            raise ConfigError(f"max_workers must be an integer, got {data.get('max_workers')!r}")

        return cls(
            roots=roots,
            extensions=set(data.get("extensions", KNOWN_EXTENSIONS)),
            grants_path=(
                Path(grants_path).expanduser()
                if grants_path
                else DEFAULT_GRANTS_PATH.expanduser()
            ),
            max_workers=max_workers,
        )

    @classmethod
    def from_yaml(cls, config_path: Path) -> "ScanConfig":
        """Load configuration from a YAML file.

        Example file:

            roots:
              - path: /Library
                domain: system
              - path: ~/Library
                domain: user
            extensions: [component, vst3]
            grants_path: ~/.config/avx-sight/grants.json

        Raises:
            ConfigError: If the file is missing, is not valid YAML, or is not a mapping
        """
        config_path = Path(config_path).expanduser()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")

        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ConfigError(
                f"Config must be a YAML mapping, got {type(data).__name__}"
            )

        return cls.from_dict(data)
