"""Pydantic models describing the Servarr REST payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _stringify(value: object) -> object:
    if value is None or isinstance(value, str):
        return value
    return str(value)


class ServarrModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


class OpenServarrModel(ServarrModel):
    """Payload whose unmodelled fields must survive a read-modify-write cycle."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)


class TagResource(ServarrModel):
    id: int
    label: str


class SystemStatusResource(ServarrModel):
    version: str
    app_name: str | None = None
    instance_name: str | None = None
    start_time: datetime | None = None


class HealthResource(ServarrModel):
    source: str = ""
    type: str = "ok"
    message: str = ""
    wiki_url: str | None = None

    _normalize_wiki_url = field_validator("wiki_url", mode="before")(_stringify)


class FieldValue(ServarrModel):
    name: str
    value: object = None


class ProviderResource(ServarrModel):
    id: int | None = None
    name: str = ""
    implementation: str = ""
    config_contract: str = ""
    fields: list[FieldValue] = Field(default_factory=list[FieldValue])
    tags: list[int] = Field(default_factory=list[int])

    def field_map(self) -> dict[str, object]:
        return {item.name: item.value for item in self.fields}


class DownloadClientResource(ProviderResource):
    enable: bool = True
    protocol: str = "unknown"
    priority: int = 1
    remove_completed_downloads: bool = True
    remove_failed_downloads: bool = True


class IndexerResource(ProviderResource):
    enable: bool = True
    protocol: str = "unknown"
    priority: int = 25
    enable_rss: bool = True
    enable_automatic_search: bool = True
    enable_interactive_search: bool = True
    definition_name: str | None = None


class IndexerProxyResource(ProviderResource):
    pass


class ApplicationResource(ProviderResource):
    sync_level: str = "disabled"


class NotificationResource(ProviderResource):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    include_health_warnings: bool = False

    def triggers(self) -> frozenset[str]:
        extra = self.model_extra or {}
        return frozenset(
            key for key, value in extra.items() if key.startswith("on") and value is True
        )


class ImportListResource(ProviderResource):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    root_folder_path: str = ""
    quality_profile_id: int = 0

    def extra(self, name: str) -> object:
        return (self.model_extra or {}).get(name)


class RemotePathMappingResource(ServarrModel):
    id: int | None = None
    host: str
    remote_path: str
    local_path: str


class RootFolderResource(ServarrModel):
    id: int | None = None
    path: str
    name: str | None = None
    default_quality_profile_id: int | None = None
    default_metadata_profile_id: int | None = None


class DelayProfileResource(ServarrModel):
    id: int | None = None
    order: int
    preferred_protocol: str = "usenet"
    usenet_delay: int = 0
    torrent_delay: int = 0
    enable_usenet: bool = True
    enable_torrent: bool = True
    bypass_if_highest_quality: bool = False
    bypass_if_above_custom_format_score: bool = False
    minimum_custom_format_score: int = 0
    tags: list[int] = Field(default_factory=list[int])


class CustomFormatSpecificationResource(ServarrModel):
    name: str
    implementation: str
    negate: bool = False
    required: bool = False
    fields: list[FieldValue] = Field(default_factory=list[FieldValue])


class CustomFormatResource(ServarrModel):
    id: int | None = None
    name: str
    include_custom_format_when_renaming: bool = False
    specifications: list[CustomFormatSpecificationResource] = Field(
        default_factory=list[CustomFormatSpecificationResource]
    )


class QualityResource(OpenServarrModel):
    id: int
    name: str


class QualityProfileItemResource(OpenServarrModel):
    id: int | None = None
    name: str | None = None
    quality: QualityResource | None = None
    items: list[QualityProfileItemResource] = Field(
        default_factory=list["QualityProfileItemResource"]
    )
    allowed: bool = False

    @property
    def label(self) -> str:
        if self.quality is not None:
            return self.quality.name
        return self.name or ""

    @property
    def item_id(self) -> int | None:
        return self.quality.id if self.quality is not None else self.id


class ProfileFormatItemResource(OpenServarrModel):
    format: int
    name: str = ""
    score: int = 0


class QualityProfileResource(OpenServarrModel):
    id: int | None = None
    name: str = ""
    upgrade_allowed: bool = True
    cutoff: int = 0
    items: list[QualityProfileItemResource] = Field(
        default_factory=list[QualityProfileItemResource]
    )
    min_format_score: int = 0
    cutoff_format_score: int = 0
    format_items: list[ProfileFormatItemResource] = Field(
        default_factory=list[ProfileFormatItemResource]
    )


class MetadataProfileResource(ServarrModel):
    id: int
    name: str


class ApplicationProfileResource(ServarrModel):
    id: int
    name: str
