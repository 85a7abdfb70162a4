"""Data models for the macOS application scanner."""

import json
import re
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator

from macos_apps.util.image import DATA_URI_PREFIX

_CAMEL_ALIASES = {
    "name": "appName",
    "path": "appPath",
    "bundle_id": "bundleId",
    "icon_name": "appIconName",
    "icon_path": "appIconPath",
    "icon_base64": "appIconBase64",
}


class ApplicationRecord(BaseModel):
    """Identity and presentation data for one discovered application."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=lambda field_name: _CAMEL_ALIASES.get(field_name, field_name),
        json_schema_extra={
            "example": {
                "name": "Safari",
                "path": "/Applications/Safari.app",
                "bundle_id": "com.apple.Safari",
                "icon_name": "AppIcon",
                "icon_path": "/Applications/Safari.app/Contents/Resources/AppIcon.icns",
                "icon_base64": None
            }
        }
    )

    name: str = Field(min_length=1, description="Display name (falls back to 'Unknown')")
    path: str = Field(description="File system path of the .app bundle")
    bundle_id: str = Field(description="CFBundleIdentifier (falls back to 'Unknown')")
    icon_name: str | None = Field(default=None, description="Icon name as declared in Info.plist")
    icon_path: str | None = Field(default=None, description="Resolved icon file on disk")
    icon_base64: str | None = Field(
        default=None,
        description="Bounded PNG rendition of the icon as a data:image/png;base64 URI"
    )

    @model_validator(mode="after")
    def _check_icon_fields(self) -> "ApplicationRecord":
        if self.icon_base64 is not None:
            if self.icon_path is None:
                raise ValueError("icon_base64 requires icon_path")
            if not self.icon_base64.startswith(DATA_URI_PREFIX):
                raise ValueError(f"icon_base64 must start with {DATA_URI_PREFIX!r}")
        return self

    def to_json(self, indent: int | None = 2, by_alias: bool = False) -> str:
        """Serialize to JSON with sorted keys for stability."""
        return json.dumps(self.model_dump(mode="json", by_alias=by_alias), indent=indent, sort_keys=True)


class ScanReport(BaseModel):
    """Result of one scan pass."""

    schema_version: str = Field(
        default="0.1",
        description="Schema version for compatibility tracking"
    )
    timestamp: str = Field(description="Scan timestamp in ISO-8601 format")
    search_roots: list[str] = Field(default_factory=list, description="Roots that were searched")
    applications: list[ApplicationRecord] = Field(
        default_factory=list,
        description="Deduplicated applications in discovery order"
    )

    @classmethod
    def create(
        cls,
        applications: list[ApplicationRecord],
        search_roots: list[str] | tuple[str, ...] = ()
    ) -> "ScanReport":
        """Create a report stamped with the current UTC time."""
        return cls(
            timestamp=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            search_roots=list(search_roots),
            applications=applications
        )

    def find_by_bundle_id(self, bundle_id: str) -> ApplicationRecord | None:
        return next((app for app in self.applications if app.bundle_id == bundle_id), None)

    def find_by_name(self, pattern: str | re.Pattern[str]) -> list[ApplicationRecord]:
        """All applications whose name matches the pattern (strings are case-insensitive)."""
        regex = re.compile(pattern, re.IGNORECASE) if isinstance(pattern, str) else pattern
        return [app for app in self.applications if regex.search(app.name)]

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.applications),
            "with_icon": sum(1 for app in self.applications if app.icon_path),
            "with_image": sum(1 for app in self.applications if app.icon_base64),
        }

    def to_json(self, indent: int | None = 2, by_alias: bool = False) -> str:
        """Serialize to JSON with sorted keys for stability."""
        return json.dumps(self.model_dump(mode="json", by_alias=by_alias), indent=indent, sort_keys=True)
