"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class App(StrEnum):
    RADARR = "radarr"
    SONARR = "sonarr"
    LIDARR = "lidarr"
    PROWLARR = "prowlarr"


class ResourceKind(StrEnum):
    """Discriminator for every configuration entity the engine reconciles."""

    CUSTOM_FORMAT = "custom_format"
    QUALITY_PROFILE = "quality_profile"
    ROOT_FOLDER = "root_folder"
    DOWNLOAD_CLIENT = "download_client"
    REMOTE_PATH_MAPPING = "remote_path_mapping"
    INDEXER = "indexer"
    NOTIFICATION = "notification"
    DELAY_PROFILE = "delay_profile"
    IMPORT_LIST = "import_list"
    NAMING_CONFIG = "naming_config"
    MEDIA_MANAGEMENT = "media_management"
    AUTHENTICATION = "authentication"
    INDEXER_PROXY = "indexer_proxy"
    APPLICATION = "application"


class DownloadProtocol(StrEnum):
    TORRENT = "torrent"
    USENET = "usenet"
    UNKNOWN = "unknown"


class SyncLevel(StrEnum):
    """How far Prowlarr pushes indexers into a connected application."""

    DISABLED = "disabled"
    ADD_ONLY = "addOnly"
    FULL_SYNC = "fullSync"


class AuthenticationMethod(StrEnum):
    NONE = "none"
    BASIC = "basic"
    FORMS = "forms"
    EXTERNAL = "external"


class AuthenticationRequired(StrEnum):
    ENABLED = "enabled"
    DISABLED_FOR_LOCAL_ADDRESSES = "disabledForLocalAddresses"


class HealthIssueType(StrEnum):
    OK = "ok"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
