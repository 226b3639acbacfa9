"""Per-application differences between the Servarr services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from arrstate.domain.model import App, ResourceKind

if TYPE_CHECKING:
    from collections.abc import Mapping

_MEDIA_KINDS = frozenset(ResourceKind) - {ResourceKind.INDEXER_PROXY, ResourceKind.APPLICATION}


@dataclass(frozen=True, slots=True, kw_only=True)
class AppProfile:
    app: App
    api_version: str
    category_field: str
    rename_field: str
    naming_format_fields: tuple[str, ...]
    create_empty_folders_field: str
    # domain attribute -> import list wire field
    import_list_fields: Mapping[str, str]
    root_folder_requires_name: bool = False
    uses_metadata_profiles: bool = False
    # indexers need an ``appProfileId`` (Prowlarr)
    indexer_app_profiles: bool = False
    supported_kinds: frozenset[ResourceKind] = field(default_factory=lambda: _MEDIA_KINDS)

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.api_version}"


RADARR = AppProfile(
    app=App.RADARR,
    api_version="v3",
    category_field="movieCategory",
    rename_field="renameMovies",
    naming_format_fields=("standardMovieFormat", "movieFolderFormat"),
    create_empty_folders_field="createEmptyMovieFolders",
    import_list_fields={
        "enabled": "enabled",
        "enable_auto": "enableAuto",
        "search_on_add": "searchOnAdd",
        "monitor": "monitor",
        "minimum_availability": "minimumAvailability",
    },
)

SONARR = AppProfile(
    app=App.SONARR,
    api_version="v3",
    category_field="tvCategory",
    rename_field="renameEpisodes",
    naming_format_fields=(
        "standardEpisodeFormat",
        "dailyEpisodeFormat",
        "animeEpisodeFormat",
        "seriesFolderFormat",
        "seasonFolderFormat",
        "specialsFolderFormat",
    ),
    create_empty_folders_field="createEmptySeriesFolders",
    import_list_fields={
        "enable_auto": "enableAutomaticAdd",
        "search_on_add": "searchForMissingEpisodes",
        "monitor": "shouldMonitor",
    },
)

LIDARR = AppProfile(
    app=App.LIDARR,
    api_version="v1",
    category_field="musicCategory",
    rename_field="renameTracks",
    naming_format_fields=("standardTrackFormat", "multiDiscTrackFormat", "artistFolderFormat"),
    create_empty_folders_field="createEmptyArtistFolders",
    import_list_fields={
        "enable_auto": "enableAutomaticAdd",
        "search_on_add": "shouldSearch",
        "monitor": "shouldMonitor",
    },
    root_folder_requires_name=True,
    uses_metadata_profiles=True,
)

PROWLARR = AppProfile(
    app=App.PROWLARR,
    api_version="v1",
    category_field="category",
    rename_field="",
    naming_format_fields=(),
    create_empty_folders_field="",
    import_list_fields={},
    indexer_app_profiles=True,
    supported_kinds=frozenset(
        {
            ResourceKind.DOWNLOAD_CLIENT,
            ResourceKind.INDEXER,
            ResourceKind.INDEXER_PROXY,
            ResourceKind.APPLICATION,
        }
    ),
)

PROFILES: Mapping[App, AppProfile] = {
    profile.app: profile for profile in (RADARR, SONARR, LIDARR, PROWLARR)
}
