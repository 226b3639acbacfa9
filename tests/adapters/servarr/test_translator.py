from __future__ import annotations

from dataclasses import replace

import pytest

from arrstate.adapters.servarr.profiles import LIDARR, RADARR, SONARR, AppProfile
from arrstate.adapters.servarr.schema import (
    ApplicationResource,
    CustomFormatResource,
    IndexerResource,
    IndexerProxyResource,
    NotificationResource,
    QualityProfileResource,
)
from arrstate.adapters.servarr.translator import (
    TranslationError,
    build_application,
    build_custom_format,
    build_indexer,
    build_indexer_proxy,
    build_notification,
    build_quality_profile,
    build_root_folder,
    merge_authentication,
    merge_naming,
    parse_application,
    parse_authentication,
    parse_custom_format,
    parse_indexer,
    parse_indexer_proxy,
    parse_naming,
    parse_notification,
    parse_quality_profile,
)
from arrstate.domain.model import (
    DEFAULT_SYNC_CATEGORIES,
    Application,
    Authentication,
    AuthenticationMethod,
    AuthenticationRequired,
    CustomFormat,
    DownloadProtocol,
    FormatSpecification,
    Indexer,
    IndexerProxy,
    NamingConfig,
    Notification,
    QualityProfile,
    ResourceKind,
    RootFolder,
    SyncLevel,
)
from arrstate.domain.reconciliation import DEFAULT_SPECS, diff_resources

PROFILE = {
    "id": 5,
    "name": "arrstate-hd",
    "upgradeAllowed": True,
    "cutoff": 1001,
    "items": [
        {"quality": {"id": 1, "name": "SDTV"}, "items": [], "allowed": False},
        {"name": "WEB 1080p", "id": 1001, "items": [], "allowed": True},
        {"quality": {"id": 7, "name": "Bluray-1080p"}, "items": [], "allowed": True},
    ],
    "minFormatScore": 10,
    "cutoffFormatScore": 100,
    "formatItems": [
        {"format": 4, "name": "x265", "score": -100},
        {"format": 5, "name": "Remux", "score": 0},
    ],
}


def test_parse_quality_profile_resolves_cutoff_and_scores() -> None:
    profile = parse_quality_profile(QualityProfileResource.model_validate(PROFILE))

    assert profile.server_id == 5
    assert profile.cutoff == "WEB 1080p"
    assert profile.allowed_qualities == frozenset({"WEB 1080p", "Bluray-1080p"})
    assert profile.format_scores == {"x265": -100}
    assert profile.min_format_score == 10


def test_quality_profile_round_trip_is_stable() -> None:
    template = QualityProfileResource.model_validate(PROFILE)
    formats = [
        CustomFormatResource.model_validate({"id": 4, "name": "x265"}),
        CustomFormatResource.model_validate({"id": 5, "name": "Remux"}),
    ]
    observed = parse_quality_profile(template)

    payload = build_quality_profile(template, observed, formats, server_id=5)
    rebuilt = parse_quality_profile(QualityProfileResource.model_validate(payload))

    assert rebuilt == observed
    assert rebuilt.scored_formats() == observed.scored_formats()


@pytest.mark.parametrize(
    ("changes", "message"),
    [
        ({"allowed_qualities": frozenset({"Bluray-2160p"})}, "Unknown qualities"),
        ({"cutoff": "Bluray-2160p"}, "Unknown cutoff"),
        ({"cutoff": "SDTV"}, "not an allowed quality"),
        ({"format_scores": {"DV": 50}}, "Unknown custom formats"),
    ],
)
def test_build_quality_profile_rejects_invalid_profiles(
    changes: dict[str, object], message: str
) -> None:
    fields: dict[str, object] = {
        "name": "arrstate-hd",
        "cutoff": "Bluray-1080p",
        "allowed_qualities": frozenset({"Bluray-1080p"}),
        **changes,
    }
    desired = QualityProfile(**fields)  # pyright: ignore[reportArgumentType]

    with pytest.raises(TranslationError, match=message):
        build_quality_profile(QualityProfileResource.model_validate(PROFILE), desired, [])


def test_custom_format_values_are_typed_by_implementation() -> None:
    custom_format = CustomFormat(
        name="x265",
        specifications=(
            FormatSpecification(
                name="codec", implementation="ReleaseTitleSpecification", value="x265"
            ),
            FormatSpecification(
                name="1080p", implementation="ResolutionSpecification", value="1080"
            ),
        ),
    )

    payload = build_custom_format(custom_format, server_id=4)
    parsed = parse_custom_format(CustomFormatResource.model_validate(payload))

    specifications = payload["specifications"]
    assert isinstance(specifications, list)
    values = [spec["fields"][0]["value"] for spec in specifications]
    assert values == ["x265", 1080]
    assert payload["id"] == 4
    assert parsed == custom_format


def test_indexer_round_trip_keeps_typed_fields_out_of_settings() -> None:
    indexer = Indexer(
        name="nzbgeek",
        implementation="Newznab",
        protocol=DownloadProtocol.USENET,
        url="https://api.nzbgeek.info",
        api_key="abc",
        categories=frozenset({2000, 2040}),
        settings={"additionalParameters": "&extended=1"},
    )

    payload = build_indexer(indexer)
    parsed = parse_indexer(IndexerResource.model_validate(payload))

    items = payload["fields"]
    assert isinstance(items, list)
    fields = {item["name"]: item["value"] for item in items}
    assert fields["apiKey"] == "abc"
    assert fields["categories"] == [2000, 2040]
    assert "minimumSeeders" not in fields
    assert parsed == indexer
    assert parsed.settings == {"additionalParameters": "&extended=1"}


def test_notification_triggers_round_trip() -> None:
    notification = Notification(
        name="discord",
        implementation="Discord",
        triggers=frozenset({"onGrab", "onHealthIssue"}),
        settings={"webHookUrl": "https://discord/hook"},
    )

    payload = build_notification(notification)
    parsed = parse_notification(
        NotificationResource.model_validate(
            {**payload, "onDownload": False, "supportsOnGrab": True}
        )
    )

    assert payload["onGrab"] is True
    assert parsed.triggers == frozenset({"onGrab", "onHealthIssue"})
    assert parsed == notification


@pytest.mark.parametrize(
    ("profile", "expected"),
    [
        (RADARR, {"path": "/movies"}),
        (SONARR, {"path": "/movies"}),
        (LIDARR, {"path": "/movies", "name": "movies", "defaultMonitorOption": "all"}),
    ],
)
def test_build_root_folder_adds_lidarr_fields(
    profile: AppProfile, expected: dict[str, object]
) -> None:
    assert build_root_folder(RootFolder(path="/movies"), profile) == expected


def test_naming_uses_app_specific_rename_field() -> None:
    document = {"id": 1, "renameEpisodes": True, "standardEpisodeFormat": "{Series Title}"}

    parsed = parse_naming(document, SONARR)

    assert parsed.rename is True
    assert parsed.formats == {"standardEpisodeFormat": "{Series Title}"}


def test_merge_naming_rejects_formats_of_other_apps() -> None:
    desired = NamingConfig(formats={"standardMovieFormat": "{Movie Title}"})

    with pytest.raises(TranslationError, match="standardMovieFormat"):
        merge_naming({"id": 1}, desired, SONARR)


def test_authentication_wire_values_round_trip() -> None:
    document = {
        "id": 1,
        "authenticationMethod": "forms",
        "authenticationRequired": "disabledForLocalAddresses",
        "username": "admin",
        "port": 7878,
    }

    parsed = parse_authentication(document)
    merged = merge_authentication(
        document,
        Authentication(
            method=AuthenticationMethod.BASIC,
            required=AuthenticationRequired.ENABLED,
            password="hunter2",
        ),
    )

    assert parsed.method is AuthenticationMethod.FORMS
    assert parsed.required is AuthenticationRequired.DISABLED_FOR_LOCAL_ADDRESSES
    assert parsed.username == "admin"
    assert merged["authenticationMethod"] == "Basic"
    assert merged["authenticationRequired"] == "Enabled"
    assert merged["username"] == "admin"
    assert merged["password"] == merged["passwordConfirmation"] == "hunter2"
    assert merged["port"] == 7878


def test_indexer_with_service_filled_minimum_seeders_is_converged() -> None:
    indexer = Indexer(
        name="jackett",
        implementation="Torznab",
        protocol=DownloadProtocol.TORRENT,
        url="http://jackett:9117/api/v2.0/indexers/all/results/torznab",
        tags=frozenset({3}),
    )
    payload = build_indexer(indexer, server_id=8)
    items = payload["fields"]
    assert isinstance(items, list)
    echoed = {**payload, "fields": [*items, {"name": "minimumSeeders", "value": 1}]}

    observed = parse_indexer(IndexerResource.model_validate(echoed))
    changes = diff_resources([observed], [indexer], DEFAULT_SPECS[ResourceKind.INDEXER], owner=3)

    assert observed.minimum_seeders == 1
    assert changes.is_empty()


def test_indexer_explicit_minimum_seeders_is_still_compared() -> None:
    spec = DEFAULT_SPECS[ResourceKind.INDEXER]
    observed = Indexer(
        server_id=8,
        tags=frozenset({3}),
        name="jackett",
        implementation="Torznab",
        protocol=DownloadProtocol.TORRENT,
        minimum_seeders=1,
    )
    wanted = Indexer(
        name="jackett",
        implementation="Torznab",
        protocol=DownloadProtocol.TORRENT,
        minimum_seeders=5,
    )

    changes = diff_resources([observed], [wanted], spec, owner=3)

    assert [change.server_id for change in changes.updates] == [8]


def _echo(payload: dict[str, object], **extra_fields: object) -> dict[str, object]:
    items = payload["fields"]
    assert isinstance(items, list)
    added = [{"name": name, "value": value} for name, value in extra_fields.items()]
    return {**payload, "fields": [*items, *added]}


def test_indexer_definition_is_sent_only_when_set() -> None:
    cardigann = Indexer(
        name="nyaa",
        implementation="Cardigann",
        protocol=DownloadProtocol.TORRENT,
        definition="nyaasi",
    )

    assert build_indexer(cardigann)["definitionName"] == "nyaasi"
    assert "definitionName" not in build_indexer(replace(cardigann, definition=None))


def test_indexer_without_definition_accepts_the_service_definition() -> None:
    wanted = Indexer(
        name="nyaa",
        implementation="Cardigann",
        protocol=DownloadProtocol.TORRENT,
        tags=frozenset({3}),
    )
    echoed = {**build_indexer(wanted, server_id=2), "definitionName": "nyaasi"}

    observed = parse_indexer(IndexerResource.model_validate(echoed))
    changes = diff_resources([observed], [wanted], DEFAULT_SPECS[ResourceKind.INDEXER], owner=3)

    assert observed.definition == "nyaasi"
    assert changes.is_empty()


def test_indexer_proxy_round_trip_keeps_password_out_of_equality() -> None:
    proxy = IndexerProxy(
        name="socks",
        implementation="Socks5IndexerProxy",
        host="proxy.local",
        port=1080,
        username="user",
        password="hunter2",
    )

    payload = build_indexer_proxy(proxy)
    parsed = parse_indexer_proxy(IndexerProxyResource.model_validate(payload))

    items = payload["fields"]
    assert isinstance(items, list)
    fields = {item["name"]: item["value"] for item in items}
    assert payload["configContract"] == "Socks5IndexerProxySettings"
    assert fields == {
        "host": "proxy.local",
        "port": 1080,
        "username": "user",
        "password": "hunter2",
    }
    assert parsed == proxy
    assert parsed.password == ""


def test_flaresolverr_proxy_accepts_service_defaults() -> None:
    wanted = IndexerProxy(
        name="flaresolverr",
        implementation="FlareSolverr",
        host="http://flaresolverr:8191/",
        tags=frozenset({3}),
    )
    echoed = _echo(build_indexer_proxy(wanted, server_id=4), requestTimeout=60)

    observed = parse_indexer_proxy(IndexerProxyResource.model_validate(echoed))
    spec = DEFAULT_SPECS[ResourceKind.INDEXER_PROXY]

    assert observed.request_timeout == 60
    assert diff_resources([observed], [wanted], spec, owner=3).is_empty()
    stricter = replace(wanted, request_timeout=120)
    assert diff_resources([observed], [stricter], spec, owner=3).updates


def test_application_round_trip_compares_categories_as_a_set() -> None:
    application = Application(
        name="radarr",
        implementation="Radarr",
        sync_level=SyncLevel.ADD_ONLY,
        url="http://radarr:7878",
        prowlarr_url="http://prowlarr:9696",
        api_key="radarr-key",
        sync_categories=DEFAULT_SYNC_CATEGORIES["Radarr"],
    )

    payload = build_application(application, server_id=6)
    items = payload["fields"]
    assert isinstance(items, list)
    reordered = [
        {**item, "value": sorted(item["value"], reverse=True)}
        if item["name"] == "syncCategories"
        else item
        for item in items
    ]
    parsed = parse_application(
        ApplicationResource.model_validate({**payload, "fields": reordered})
    )

    fields = {item["name"]: item["value"] for item in items}
    assert payload["syncLevel"] == "addOnly"
    assert payload["configContract"] == "RadarrSettings"
    assert fields["apiKey"] == "radarr-key"
    assert parsed == application
    assert parsed.server_id == 6
    assert parsed.settings == {}


def test_parse_application_rejects_unknown_sync_level() -> None:
    resource = ApplicationResource.model_validate(
        {"id": 1, "name": "radarr", "implementation": "Radarr", "syncLevel": "mirror"}
    )

    with pytest.raises(TranslationError, match="unknown sync level"):
        parse_application(resource)
