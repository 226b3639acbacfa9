from __future__ import annotations

import httpx
import pytest

from arrstate.adapters.servarr import ServarrAdapter, ServarrAPIError, TranslationError
from arrstate.config import ConnectionConfig
from arrstate.domain.model import (
    App,
    Application,
    DownloadProtocol,
    ImportList,
    Indexer,
    IndexerProxy,
    NamingConfig,
    QualityProfile,
    ResourceKind,
    RootFolder,
)
from arrstate.domain.ports import ServiceAdapter
from arrstate.domain.reconciliation import Change, ChangeAction
from tests.support.servarr import FakeServarr, make_client_factory
from tests.support.services import make_client

QBIT_PAYLOAD = {
    "id": 3,
    "name": "qbit",
    "implementation": "QBittorrent",
    "configContract": "QBittorrentSettings",
    "protocol": "torrent",
    "enable": True,
    "priority": 1,
    "removeCompletedDownloads": True,
    "removeFailedDownloads": True,
    "tags": [2],
    "fields": [
        {"name": "host", "value": "qbittorrent"},
        {"name": "port", "value": 8080},
        {"name": "useSsl", "value": False},
        {"name": "username", "value": "admin"},
        {"name": "password", "value": "********"},
        {"name": "movieCategory", "value": "radarr"},
        {"name": "initialState", "value": 0},
    ],
}

PROFILE_SCHEMA = {
    "name": "",
    "upgradeAllowed": False,
    "cutoff": 0,
    "items": [
        {
            "quality": {"id": 1, "name": "SDTV", "source": "television"},
            "items": [],
            "allowed": False,
        },
        {
            "name": "WEB 1080p",
            "id": 1001,
            "items": [
                {"quality": {"id": 3, "name": "WEBDL-1080p"}, "items": [], "allowed": False},
                {"quality": {"id": 15, "name": "WEBRip-1080p"}, "items": [], "allowed": False},
            ],
            "allowed": False,
        },
        {"quality": {"id": 7, "name": "Bluray-1080p"}, "items": [], "allowed": False},
    ],
    "minFormatScore": 0,
    "cutoffFormatScore": 0,
    "formatItems": [],
    "language": {"id": 1, "name": "English"},
}


def _adapter(app: App, server: FakeServarr, url: str = "http://arr.local:7878") -> ServarrAdapter:
    return ServarrAdapter(
        app=app,
        connection=ConnectionConfig(url=url, api_key="secret-key"),
        client_factory=make_client_factory(server),
    )


def test_adapter_satisfies_service_port() -> None:
    adapter = _adapter(App.SONARR, FakeServarr())

    assert isinstance(adapter, ServiceAdapter)
    assert ResourceKind.NAMING_CONFIG in adapter.supported_kinds()


def test_connect_reads_system_status_with_api_key() -> None:
    server = FakeServarr(
        {("GET", "/api/v3/system/status"): (200, {"version": "5.3.6", "instanceName": "Radarr"})}
    )

    info = _adapter(App.RADARR, server).connect()

    assert info.app is App.RADARR
    assert info.version == "5.3.6"
    assert info.instance_name == "Radarr"
    assert server.requests[0].headers["X-Api-Key"] == "secret-key"


def test_lidarr_uses_api_v1_under_base_path() -> None:
    server = FakeServarr({("GET", "/lidarr/api/v1/tag"): (200, [{"id": 1, "label": "music"}])})

    tags = _adapter(App.LIDARR, server, url="http://arr.local/lidarr/").list_tags()

    assert [(tag.id, tag.label) for tag in tags] == [(1, "music")]
    assert server.paths() == [("GET", "/lidarr/api/v1/tag")]


def test_create_tag_posts_label() -> None:
    server = FakeServarr({("POST", "/api/v3/tag"): (201, {"id": 9, "label": "arrstate-managed"})})

    tag = _adapter(App.RADARR, server).create_tag("arrstate-managed")

    assert tag.id == 9
    assert server.sent("POST", "/api/v3/tag") == [{"label": "arrstate-managed"}]


def test_health_reports_errors_as_unhealthy() -> None:
    server = FakeServarr(
        {
            ("GET", "/api/v3/health"): (
                200,
                [
                    {"source": "IndexerStatusCheck", "type": "warning", "message": "slow"},
                    {"source": "RootFolderCheck", "type": "error", "message": "missing"},
                    {"source": "UpdateCheck", "type": "somethingNew", "message": "?"},
                ],
            )
        }
    )

    status = _adapter(App.RADARR, server).health()

    assert not status.healthy
    assert [issue.type.value for issue in status.issues] == ["warning", "error", "notice"]


def test_fetch_download_clients_translates_fields() -> None:
    server = FakeServarr({("GET", "/api/v3/downloadclient"): (200, [QBIT_PAYLOAD])})

    (client,) = _adapter(App.RADARR, server).fetch_current(ResourceKind.DOWNLOAD_CLIENT)

    assert client == make_client("qbit", username="admin", category="radarr")
    assert client.server_id == 3
    assert client.tags == frozenset({2})
    assert client.protocol is DownloadProtocol.TORRENT
    assert client.settings == {"initialState": 0}


def test_unexpected_status_raises_api_error() -> None:
    server = FakeServarr({("GET", "/api/v3/downloadclient"): (401, {"message": "Unauthorized"})})

    with pytest.raises(ServarrAPIError) as excinfo:
        _adapter(App.RADARR, server).fetch_current(ResourceKind.DOWNLOAD_CLIENT)

    assert excinfo.value.status_code == 401
    assert "Unauthorized" in str(excinfo.value)


def test_invalid_json_raises_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>login</html>")

    adapter = ServarrAdapter(
        app=App.RADARR,
        connection=ConnectionConfig(url="http://arr.local", api_key="k"),
        client_factory=make_client_factory(handler),
    )

    with pytest.raises(ServarrAPIError, match="Invalid JSON"):
        adapter.connect()


def test_create_download_client_posts_owner_tag_and_category() -> None:
    server = FakeServarr({("POST", "/api/v3/downloadclient"): (201, QBIT_PAYLOAD)})
    desired = make_client("qbit", category="radarr", password="hunter2", tags=frozenset({2}))

    _adapter(App.RADARR, server).apply_create(
        Change(
            kind=ResourceKind.DOWNLOAD_CLIENT,
            action=ChangeAction.CREATE,
            display_name="qbit",
            payload=desired,
        )
    )

    (body,) = server.sent("POST", "/api/v3/downloadclient")
    assert isinstance(body, dict)
    assert body["tags"] == [2]
    assert body["configContract"] == "QBittorrentSettings"
    assert "id" not in body
    fields = {item["name"]: item["value"] for item in body["fields"]}
    assert fields["movieCategory"] == "radarr"
    assert fields["password"] == "hunter2"


def test_update_and_delete_address_resource_by_id() -> None:
    server = FakeServarr(
        {
            ("PUT", "/api/v3/downloadclient/3"): (202, QBIT_PAYLOAD),
            ("DELETE", "/api/v3/downloadclient/3"): (200, None),
        }
    )
    adapter = _adapter(App.RADARR, server)
    client = make_client("qbit", server_id=3)

    adapter.apply_update(
        Change(
            kind=ResourceKind.DOWNLOAD_CLIENT,
            action=ChangeAction.UPDATE,
            display_name="qbit",
            payload=client,
            server_id=3,
        )
    )
    adapter.apply_delete(
        Change(
            kind=ResourceKind.DOWNLOAD_CLIENT,
            action=ChangeAction.DELETE,
            display_name="qbit",
            payload=client,
            server_id=3,
        )
    )

    assert server.paths() == [
        ("PUT", "/api/v3/downloadclient/3"),
        ("DELETE", "/api/v3/downloadclient/3"),
    ]
    (body,) = server.sent("PUT", "/api/v3/downloadclient/3")
    assert isinstance(body, dict)
    assert body["id"] == 3
    fields = {item["name"] for item in body["fields"]}
    assert "password" not in fields


def test_create_quality_profile_fills_schema() -> None:
    server = FakeServarr(
        {
            ("GET", "/api/v3/qualityprofile/schema"): (200, PROFILE_SCHEMA),
            ("GET", "/api/v3/customformat"): (
                200,
                [{"id": 4, "name": "x265", "specifications": []}, {"id": 5, "name": "Remux"}],
            ),
            ("POST", "/api/v3/qualityprofile"): (201, {"id": 8, "name": "arrstate-hd"}),
        }
    )
    desired = QualityProfile(
        name="arrstate-hd",
        cutoff="Bluray-1080p",
        allowed_qualities=frozenset({"WEB 1080p", "Bluray-1080p"}),
        format_scores={"x265": -100},
    )

    _adapter(App.RADARR, server).apply_create(
        Change(
            kind=ResourceKind.QUALITY_PROFILE,
            action=ChangeAction.CREATE,
            display_name="arrstate-hd",
            payload=desired,
        )
    )

    (body,) = server.sent("POST", "/api/v3/qualityprofile")
    assert isinstance(body, dict)
    assert body["name"] == "arrstate-hd"
    assert body["cutoff"] == 7
    assert body["upgradeAllowed"] is True
    assert body["language"] == {"id": 1, "name": "English"}
    assert "id" not in body
    allowed = [item["allowed"] for item in body["items"]]
    assert allowed == [False, True, True]
    assert all(child["allowed"] for child in body["items"][1]["items"])
    assert body["items"][0]["quality"]["source"] == "television"
    assert body["formatItems"] == [
        {"format": 4, "name": "x265", "score": -100},
        {"format": 5, "name": "Remux", "score": 0},
    ]


def test_naming_update_merges_into_fetched_document() -> None:
    document = {
        "id": 1,
        "renameMovies": False,
        "replaceIllegalCharacters": True,
        "colonReplacementFormat": "delete",
        "standardMovieFormat": "{Movie Title} ({Release Year})",
        "movieFolderFormat": "{Movie Title} ({Release Year})",
    }
    server = FakeServarr(
        {
            ("GET", "/api/v3/config/naming"): (200, document),
            ("PUT", "/api/v3/config/naming/1"): (202, document),
        }
    )
    desired = NamingConfig(rename=True, formats={"standardMovieFormat": "{Movie CleanTitle}"})

    _adapter(App.RADARR, server).apply_update(
        Change(
            kind=ResourceKind.NAMING_CONFIG,
            action=ChangeAction.UPDATE,
            display_name="naming",
            payload=desired,
            server_id=1,
        )
    )

    (body,) = server.sent("PUT", "/api/v3/config/naming/1")
    assert body == {
        **document,
        "renameMovies": True,
        "standardMovieFormat": "{Movie CleanTitle}",
    }


def test_singletons_cannot_be_created() -> None:
    server = FakeServarr()

    with pytest.raises(TranslationError, match="cannot be created"):
        _adapter(App.RADARR, server).apply_create(
            Change(
                kind=ResourceKind.NAMING_CONFIG,
                action=ChangeAction.CREATE,
                display_name="naming",
                payload=NamingConfig(rename=True),
            )
        )

    assert server.requests == []


def test_lidarr_root_folder_resolves_default_profiles() -> None:
    server = FakeServarr(
        {
            ("GET", "/api/v1/qualityprofile"): (
                200,
                [{"id": 1, "name": "Any"}, {"id": 2, "name": "arrstate-lossless"}],
            ),
            ("GET", "/api/v1/metadataprofile"): (200, [{"id": 6, "name": "Standard"}]),
            ("POST", "/api/v1/rootfolder"): (201, {"id": 1, "path": "/music/"}),
        }
    )

    _adapter(App.LIDARR, server).apply_create(
        Change(
            kind=ResourceKind.ROOT_FOLDER,
            action=ChangeAction.CREATE,
            display_name="/music/",
            payload=RootFolder(path="/music/"),
        )
    )

    assert server.sent("POST", "/api/v1/rootfolder") == [
        {
            "path": "/music/",
            "name": "music",
            "defaultMonitorOption": "all",
            "defaultQualityProfileId": 2,
            "defaultMetadataProfileId": 6,
        }
    ]


def test_import_list_with_unknown_implementation_fails() -> None:
    server = FakeServarr(
        {
            ("GET", "/api/v3/importlist/schema"): (
                200,
                [{"implementation": "TraktListImport", "configContract": "TraktListSettings"}],
            )
        }
    )
    desired = ImportList(name="plex", implementation="PlexImport", root_folder_path="/movies")

    with pytest.raises(TranslationError, match="Unknown import list implementation"):
        _adapter(App.RADARR, server).apply_create(
            Change(
                kind=ResourceKind.IMPORT_LIST,
                action=ChangeAction.CREATE,
                display_name="plex",
                payload=desired,
            )
        )

    assert ("POST", "/api/v3/importlist") not in server.paths()


def test_sonarr_import_list_uses_sonarr_field_names() -> None:
    server = FakeServarr(
        {
            ("GET", "/api/v3/importlist/schema"): (
                200,
                [
                    {
                        "implementation": "TraktListImport",
                        "configContract": "TraktListSettings",
                        "enableAutomaticAdd": False,
                        "fields": [
                            {"name": "listName", "value": ""},
                            {"name": "limit", "value": 100},
                        ],
                    }
                ],
            ),
            ("GET", "/api/v3/qualityprofile"): (200, [{"id": 4, "name": "HD-1080p"}]),
            ("POST", "/api/v3/importlist"): (201, {"id": 11, "name": "trending"}),
        }
    )
    desired = ImportList(
        name="trending",
        implementation="TraktListImport",
        quality_profile="HD-1080p",
        root_folder_path="/tv",
        settings={"listName": "trending"},
        tags=frozenset({2}),
    )

    _adapter(App.SONARR, server).apply_create(
        Change(
            kind=ResourceKind.IMPORT_LIST,
            action=ChangeAction.CREATE,
            display_name="trending",
            payload=desired,
        )
    )

    (body,) = server.sent("POST", "/api/v3/importlist")
    assert isinstance(body, dict)
    assert body["enableAutomaticAdd"] is True
    assert body["searchForMissingEpisodes"] is True
    assert body["qualityProfileId"] == 4
    assert body["rootFolderPath"] == "/tv"
    assert body["tags"] == [2]
    assert body["fields"] == [
        {"name": "listName", "value": "trending"},
        {"name": "limit", "value": 100},
    ]


def test_prowlarr_supports_only_indexer_side_kinds() -> None:
    prowlarr = _adapter(App.PROWLARR, FakeServarr()).supported_kinds()
    radarr = _adapter(App.RADARR, FakeServarr()).supported_kinds()

    assert ResourceKind.APPLICATION in prowlarr
    assert ResourceKind.INDEXER_PROXY in prowlarr
    assert ResourceKind.QUALITY_PROFILE not in prowlarr
    assert ResourceKind.APPLICATION not in radarr
    assert ResourceKind.INDEXER_PROXY not in radarr


def test_prowlarr_fetches_applications_and_proxies_from_api_v1() -> None:
    server = FakeServarr(
        {
            ("GET", "/api/v1/applications"): (
                200,
                [
                    {
                        "id": 1,
                        "name": "sonarr",
                        "implementation": "Sonarr",
                        "configContract": "SonarrSettings",
                        "syncLevel": "fullSync",
                        "tags": [2],
                        "fields": [
                            {"name": "prowlarrUrl", "value": "http://prowlarr:9696"},
                            {"name": "baseUrl", "value": "http://sonarr:8989"},
                            {"name": "apiKey", "value": "********"},
                            {"name": "syncCategories", "value": [5000, 5040]},
                        ],
                    }
                ],
            ),
            ("GET", "/api/v1/indexerproxy"): (
                200,
                [
                    {
                        "id": 4,
                        "name": "flaresolverr",
                        "implementation": "FlareSolverr",
                        "tags": [2],
                        "fields": [
                            {"name": "host", "value": "http://flaresolverr:8191/"},
                            {"name": "requestTimeout", "value": 60},
                        ],
                    }
                ],
            ),
        }
    )
    adapter = _adapter(App.PROWLARR, server, url="http://prowlarr:9696")

    (application,) = adapter.fetch_current(ResourceKind.APPLICATION)
    (proxy,) = adapter.fetch_current(ResourceKind.INDEXER_PROXY)

    assert isinstance(application, Application)
    assert application.server_id == 1
    assert application.url == "http://sonarr:8989"
    assert application.sync_categories == frozenset({5000, 5040})
    assert application.tags == frozenset({2})
    assert isinstance(proxy, IndexerProxy)
    assert proxy.host == "http://flaresolverr:8191/"
    assert proxy.port is None
    assert proxy.request_timeout == 60


def test_prowlarr_create_application_and_proxy_post_to_their_endpoints() -> None:
    server = FakeServarr(
        {
            ("POST", "/api/v1/applications"): (201, {"id": 1}),
            ("POST", "/api/v1/indexerproxy"): (201, {"id": 4}),
        }
    )
    adapter = _adapter(App.PROWLARR, server)
    application = Application(
        name="radarr",
        implementation="Radarr",
        url="http://radarr:7878",
        prowlarr_url="http://prowlarr:9696",
        api_key="radarr-key",
        sync_categories=frozenset({2000}),
        tags=frozenset({2}),
    )
    proxy = IndexerProxy(name="http", implementation="HttpIndexerProxy", host="squid", port=3128)

    adapter.apply_create(
        Change(
            kind=ResourceKind.APPLICATION,
            action=ChangeAction.CREATE,
            display_name="radarr",
            payload=application,
        )
    )
    adapter.apply_create(
        Change(
            kind=ResourceKind.INDEXER_PROXY,
            action=ChangeAction.CREATE,
            display_name="http",
            payload=proxy,
        )
    )

    (app_body,) = server.sent("POST", "/api/v1/applications")
    assert isinstance(app_body, dict)
    assert app_body["syncLevel"] == "fullSync"
    assert app_body["tags"] == [2]
    app_fields = {item["name"]: item["value"] for item in app_body["fields"]}
    assert app_fields["apiKey"] == "radarr-key"
    assert app_fields["syncCategories"] == [2000]
    (proxy_body,) = server.sent("POST", "/api/v1/indexerproxy")
    assert isinstance(proxy_body, dict)
    assert proxy_body["configContract"] == "HttpIndexerProxySettings"


def test_prowlarr_indexer_create_uses_first_app_profile() -> None:
    server = FakeServarr(
        {
            ("GET", "/api/v1/appprofile"): (200, [{"id": 1, "name": "Standard"}]),
            ("POST", "/api/v1/indexer"): (201, {"id": 7}),
        }
    )
    indexer = Indexer(
        name="nyaa",
        implementation="Cardigann",
        protocol=DownloadProtocol.TORRENT,
        definition="nyaasi",
    )

    _adapter(App.PROWLARR, server).apply_create(
        Change(
            kind=ResourceKind.INDEXER,
            action=ChangeAction.CREATE,
            display_name="nyaa",
            payload=indexer,
        )
    )

    (body,) = server.sent("POST", "/api/v1/indexer")
    assert isinstance(body, dict)
    assert body["appProfileId"] == 1
    assert body["definitionName"] == "nyaasi"


def test_prowlarr_indexer_update_keeps_its_app_profile() -> None:
    server = FakeServarr(
        {
            ("GET", "/api/v1/indexer/7"): (200, {"id": 7, "name": "nyaa", "appProfileId": 3}),
            ("PUT", "/api/v1/indexer/7"): (202, {"id": 7}),
        }
    )
    indexer = Indexer(name="nyaa", implementation="Cardigann", protocol=DownloadProtocol.TORRENT)

    _adapter(App.PROWLARR, server).apply_update(
        Change(
            kind=ResourceKind.INDEXER,
            action=ChangeAction.UPDATE,
            display_name="nyaa",
            payload=indexer,
            server_id=7,
        )
    )

    assert ("GET", "/api/v1/appprofile") not in server.paths()
    (body,) = server.sent("PUT", "/api/v1/indexer/7")
    assert isinstance(body, dict)
    assert body["appProfileId"] == 3
    assert body["id"] == 7


def test_radarr_indexer_payload_has_no_app_profile() -> None:
    server = FakeServarr({("POST", "/api/v3/indexer"): (201, {"id": 7})})
    indexer = Indexer(name="nzbgeek", implementation="Newznab", protocol=DownloadProtocol.USENET)

    _adapter(App.RADARR, server).apply_create(
        Change(
            kind=ResourceKind.INDEXER,
            action=ChangeAction.CREATE,
            display_name="nzbgeek",
            payload=indexer,
        )
    )

    (body,) = server.sent("POST", "/api/v3/indexer")
    assert isinstance(body, dict)
    assert "appProfileId" not in body
    assert server.paths() == [("POST", "/api/v3/indexer")]
