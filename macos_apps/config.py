"""Configuration file management for macos-apps."""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_SEARCH_ROOTS = (
    "/Applications",
    "~/Applications",
    "/System/Applications",
)

DEFAULT_CONFIG_PATHS = (
    Path.home() / ".macos-apps.yaml",
    Path.home() / ".macos-apps.yml",
    Path.home() / ".config" / "macos-apps" / "config.yaml",
    Path.home() / ".config" / "macos-apps" / "config.yml",
)


@dataclass(frozen=True)
class ScanConfig:
    """Immutable options for one scanner instance."""

    # Icon rendering
    include_icon_image: bool = False
    icon_size: int = 256

    # Discovery
    search_roots: tuple[str, ...] = DEFAULT_SEARCH_ROOTS
    timeout: float = 30.0
    excluded_paths: tuple[str, ...] = ("/System/Applications/Utilities",)

    # Deduplication prefers bundles under this root
    primary_root: str = "/Applications"

    # Fan-out
    max_workers: int = 8
    iconutil_timeout: float = 10.0

    def __post_init__(self) -> None:
        """Normalize sequences and validate values."""
        object.__setattr__(self, "search_roots", _expand_paths(self.search_roots))
        object.__setattr__(self, "excluded_paths", _expand_paths(self.excluded_paths))
        object.__setattr__(self, "primary_root", str(Path(self.primary_root).expanduser()))

        if self.icon_size <= 0:
            raise ValueError(f"icon_size must be positive, got {self.icon_size}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.iconutil_timeout <= 0:
            raise ValueError(f"iconutil_timeout must be positive, got {self.iconutil_timeout}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

    def with_overrides(self, **changes: Any) -> "ScanConfig":
        """Return a copy with the given fields replaced; None values are ignored."""
        changes = {key: value for key, value in changes.items() if value is not None}
        return dataclasses.replace(self, **changes)


def _expand_paths(paths: Any) -> tuple[str, ...]:
    if isinstance(paths, (str, Path)):
        paths = [paths]
    return tuple(str(Path(path).expanduser()) for path in paths)


def load_config(config_path: Path | str | None = None) -> ScanConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to config file. If None, checks default locations:
            1. ~/.macos-apps.yaml
            2. ~/.macos-apps.yml
            3. ~/.config/macos-apps/config.yaml
            4. ~/.config/macos-apps/config.yml

    Returns:
        ScanConfig with loaded settings (or defaults if no config found)

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        ValueError: If the file cannot be parsed or holds unknown/invalid options
    """
    if config_path:
        config_file = Path(config_path).expanduser()
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
    else:
        config_file = next((path for path in DEFAULT_CONFIG_PATHS if path.exists()), None)
        if config_file is None:
            return ScanConfig()

    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to load config from {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_file} must contain a mapping")

    known = {f.name for f in dataclasses.fields(ScanConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown option(s) in {config_file}: {', '.join(unknown)}")

    try:
        return ScanConfig(**data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid config in {config_file}: {e}") from e


def save_example_config(output_path: Path | str) -> None:
    """
    Save an example configuration file with all options documented.

    Args:
        output_path: Where to save the example config
    """
    example = """# macos-apps configuration file
# Place at ~/.macos-apps.yaml or ~/.config/macos-apps/config.yaml

# Render each icon as a data:image/png;base64 payload (slower)
include_icon_image: false

# Bounding box in pixels for rendered icons (never upscaled)
icon_size: 256

# Directories searched with Spotlight, in order
search_roots:
  - /Applications
  - ~/Applications
  - /System/Applications

# Seconds allowed for discovery before the scan fails
timeout: 30

# Bundles under these directories are skipped
excluded_paths:
  - /System/Applications/Utilities

# When several apps share a name, prefer the one under this root
primary_root: /Applications

# Concurrent per-application workers
max_workers: 8

# Seconds allowed for unpacking one .icns file
iconutil_timeout: 10
"""

    path = Path(output_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(example)
