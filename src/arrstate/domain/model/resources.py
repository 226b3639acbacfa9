"""Concrete resource kinds managed on a Servarr-style service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from .base import ManagedResource
from .enums import (
    AuthenticationMethod,
    AuthenticationRequired,
    DownloadProtocol,
    ResourceKind,
    SyncLevel,
)

if TYPE_CHECKING:
    from collections.abc import Mapping


type Settings = Mapping[str, object]


def _no_settings() -> dict[str, object]:
    return {}


@dataclass(frozen=True, slots=True, kw_only=True)
class FormatSpecification:
    """One matching condition of a custom format."""

    name: str
    implementation: str
    negate: bool = False
    required: bool = False
    value: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class CustomFormat(ManagedResource):
    KIND: ClassVar[ResourceKind] = ResourceKind.CUSTOM_FORMAT

    name: str
    include_when_renaming: bool = False
    specifications: tuple[FormatSpecification, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class QualityProfile(ManagedResource):
    """Quality profile; ``format_scores`` maps custom format names to scores."""

    KIND: ClassVar[ResourceKind] = ResourceKind.QUALITY_PROFILE

    name: str
    cutoff: str
    allowed_qualities: frozenset[str]
    upgrade_allowed: bool = True
    min_format_score: int = 0
    cutoff_format_score: int = 0
    format_scores: Mapping[str, int] = field(default_factory=dict[str, int], compare=False)

    def scored_formats(self) -> dict[str, int]:
        """Scores with neutral (zero) entries dropped."""

        return {name: score for name, score in self.format_scores.items() if score != 0}


@dataclass(frozen=True, slots=True, kw_only=True)
class RootFolder(ManagedResource):
    KIND: ClassVar[ResourceKind] = ResourceKind.ROOT_FOLDER

    path: str
    name: str | None = None
    default_quality_profile_id: int | None = None
    default_metadata_profile_id: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DownloadClient(ManagedResource):
    KIND: ClassVar[ResourceKind] = ResourceKind.DOWNLOAD_CLIENT

    name: str
    implementation: str
    protocol: DownloadProtocol
    enable: bool = True
    priority: int = 1
    host: str = ""
    port: int = 0
    use_tls: bool = False
    username: str = ""
    password: str = field(default="", compare=False, repr=False)
    category: str = ""
    remove_completed_downloads: bool = True
    remove_failed_downloads: bool = True
    settings: Settings = field(default_factory=_no_settings, compare=False)

    @property
    def config_contract(self) -> str:
        return f"{self.implementation}Settings"


@dataclass(frozen=True, slots=True, kw_only=True)
class RemotePathMapping(ManagedResource):
    KIND: ClassVar[ResourceKind] = ResourceKind.REMOTE_PATH_MAPPING

    host: str
    remote_path: str
    local_path: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Indexer(ManagedResource):
    KIND: ClassVar[ResourceKind] = ResourceKind.INDEXER

    name: str
    implementation: str
    protocol: DownloadProtocol
    enable: bool = True
    priority: int = 25
    url: str = ""
    api_key: str = field(default="", compare=False, repr=False)
    categories: frozenset[int] = frozenset()
    minimum_seeders: int | None = None
    enable_rss: bool = True
    enable_automatic_search: bool = True
    enable_interactive_search: bool = True
    # Prowlarr definition (``definitionName``); None leaves it to the service
    definition: str | None = None
    settings: Settings = field(default_factory=_no_settings, compare=False)

    @property
    def config_contract(self) -> str:
        return f"{self.implementation}Settings"


@dataclass(frozen=True, slots=True, kw_only=True)
class Notification(ManagedResource):
    """Notification connection; ``triggers`` holds the enabled ``on*`` event flags."""

    KIND: ClassVar[ResourceKind] = ResourceKind.NOTIFICATION

    name: str
    implementation: str
    triggers: frozenset[str] = frozenset()
    include_health_warnings: bool = False
    settings: Settings = field(default_factory=_no_settings, compare=False)

    @property
    def config_contract(self) -> str:
        return f"{self.implementation}Settings"


@dataclass(frozen=True, slots=True, kw_only=True)
class DelayProfile(ManagedResource):
    """Delay profile keyed by its order; ``tags`` select the series/movies it applies to."""

    KIND: ClassVar[ResourceKind] = ResourceKind.DELAY_PROFILE

    order: int
    preferred_protocol: DownloadProtocol = DownloadProtocol.USENET
    usenet_delay: int = 0
    torrent_delay: int = 0
    enable_usenet: bool = True
    enable_torrent: bool = True
    bypass_if_highest_quality: bool = False
    bypass_if_above_custom_format_score: bool = False
    minimum_custom_format_score: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportList(ManagedResource):
    KIND: ClassVar[ResourceKind] = ResourceKind.IMPORT_LIST

    name: str
    implementation: str
    enabled: bool = True
    enable_auto: bool = True
    search_on_add: bool = True
    quality_profile: str | None = None
    root_folder_path: str = ""
    monitor: str | None = None
    minimum_availability: str | None = None
    settings: Settings = field(default_factory=_no_settings, compare=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class NamingConfig(ManagedResource):
    """Renaming settings; ``formats`` maps service format fields to templates."""

    KIND: ClassVar[ResourceKind] = ResourceKind.NAMING_CONFIG

    rename: bool = False
    replace_illegal_characters: bool = True
    formats: Mapping[str, str] = field(default_factory=dict[str, str], compare=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class MediaManagement(ManagedResource):
    KIND: ClassVar[ResourceKind] = ResourceKind.MEDIA_MANAGEMENT

    recycle_bin: str = ""
    recycle_bin_cleanup_days: int = 7
    set_permissions: bool = False
    chmod_folder: str = "755"
    chown_group: str = ""
    delete_empty_folders: bool = False
    create_empty_folders: bool = False
    use_hardlinks: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class Authentication(ManagedResource):
    KIND: ClassVar[ResourceKind] = ResourceKind.AUTHENTICATION

    method: AuthenticationMethod = AuthenticationMethod.NONE
    required: AuthenticationRequired = AuthenticationRequired.ENABLED
    username: str = ""
    password: str = field(default="", compare=False, repr=False)


# Newznab/Torznab categories Prowlarr syncs when an application lists none.
DEFAULT_SYNC_CATEGORIES: Mapping[str, frozenset[int]] = {
    "Radarr": frozenset({2000, 2010, 2020, 2030, 2040, 2045, 2050, 2060}),
    "Sonarr": frozenset({5000, 5010, 5020, 5030, 5040, 5045, 5050}),
    "Lidarr": frozenset({3000, 3010, 3020, 3030, 3040}),
    "Readarr": frozenset({7000, 7010, 7020, 7030, 8000, 8010}),
}


@dataclass(frozen=True, slots=True, kw_only=True)
class IndexerProxy(ManagedResource):
    """Prowlarr indexer proxy; FlareSolverr takes a full URL as ``host`` and no port."""

    KIND: ClassVar[ResourceKind] = ResourceKind.INDEXER_PROXY

    name: str
    implementation: str
    host: str = ""
    port: int | None = None
    username: str = ""
    password: str = field(default="", compare=False, repr=False)
    request_timeout: int | None = None
    settings: Settings = field(default_factory=_no_settings, compare=False)

    @property
    def config_contract(self) -> str:
        return f"{self.implementation}Settings"


@dataclass(frozen=True, slots=True, kw_only=True)
class Application(ManagedResource):
    """Application Prowlarr syncs its indexers into; ``url`` is the application's address."""

    KIND: ClassVar[ResourceKind] = ResourceKind.APPLICATION

    name: str
    implementation: str
    sync_level: SyncLevel = SyncLevel.FULL_SYNC
    url: str = ""
    prowlarr_url: str = ""
    api_key: str = field(default="", compare=False, repr=False)
    sync_categories: frozenset[int] = frozenset()
    settings: Settings = field(default_factory=_no_settings, compare=False)

    @property
    def config_contract(self) -> str:
        return f"{self.implementation}Settings"


type Resource = (
    CustomFormat
    | QualityProfile
    | RootFolder
    | DownloadClient
    | RemotePathMapping
    | Indexer
    | Notification
    | DelayProfile
    | ImportList
    | NamingConfig
    | MediaManagement
    | Authentication
    | IndexerProxy
    | Application
)
