"""Resource model for reconciled service configuration."""

from __future__ import annotations

from .base import ManagedResource, settings_match
from .enums import (
    App,
    AuthenticationMethod,
    AuthenticationRequired,
    DownloadProtocol,
    HealthIssueType,
    ResourceKind,
    SyncLevel,
)
from .resources import (
    DEFAULT_SYNC_CATEGORIES,
    Application,
    Authentication,
    CustomFormat,
    DelayProfile,
    DownloadClient,
    FormatSpecification,
    ImportList,
    Indexer,
    IndexerProxy,
    MediaManagement,
    NamingConfig,
    Notification,
    QualityProfile,
    RemotePathMapping,
    Resource,
    RootFolder,
    Settings,
)
from .service import HealthIssue, HealthStatus, ServiceInfo, Tag
from .state import DESIRED_STATE_VERSION, KIND_FIELDS, DesiredState

__all__ = [
    "DEFAULT_SYNC_CATEGORIES",
    "DESIRED_STATE_VERSION",
    "KIND_FIELDS",
    "App",
    "Application",
    "Authentication",
    "AuthenticationMethod",
    "AuthenticationRequired",
    "CustomFormat",
    "DelayProfile",
    "DesiredState",
    "DownloadClient",
    "DownloadProtocol",
    "FormatSpecification",
    "HealthIssue",
    "HealthIssueType",
    "HealthStatus",
    "ImportList",
    "Indexer",
    "IndexerProxy",
    "ManagedResource",
    "MediaManagement",
    "NamingConfig",
    "Notification",
    "QualityProfile",
    "RemotePathMapping",
    "Resource",
    "RootFolder",
    "ServiceInfo",
    "Settings",
    "SyncLevel",
    "Tag",
    "settings_match",
]
