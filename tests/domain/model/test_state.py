from __future__ import annotations

from arrstate.domain.model import (
    App,
    DesiredState,
    HealthIssue,
    HealthIssueType,
    HealthStatus,
    NamingConfig,
    QualityProfile,
    ResourceKind,
    settings_match,
)
from tests.support.services import make_client, make_delay


def test_declared_kinds_follow_non_empty_collections_by_default() -> None:
    desired = DesiredState(
        app=App.RADARR,
        download_clients=(make_client("qbit"),),
        naming=NamingConfig(rename=True),
    )

    assert desired.declared_kinds() == (ResourceKind.DOWNLOAD_CLIENT, ResourceKind.NAMING_CONFIG)
    assert not desired.declares(ResourceKind.INDEXER)


def test_managed_kinds_declare_empty_collections() -> None:
    desired = DesiredState(
        app=App.RADARR,
        managed_kinds=frozenset({ResourceKind.INDEXER}),
        download_clients=(make_client("qbit"),),
    )

    assert desired.declares(ResourceKind.INDEXER)
    assert not desired.declares(ResourceKind.DOWNLOAD_CLIENT)
    assert desired.resources_of(ResourceKind.INDEXER) == ()


def test_resources_of_wraps_singletons() -> None:
    naming = NamingConfig(rename=True)
    desired = DesiredState(app=App.SONARR, naming=naming)

    assert desired.resources_of(ResourceKind.NAMING_CONFIG) == (naming,)
    assert desired.resources_of(ResourceKind.AUTHENTICATION) == ()


def test_server_id_and_tags_do_not_affect_equality() -> None:
    observed = make_delay(2, server_id=7)
    wanted = make_delay(2)

    assert observed == wanted
    assert make_client("qbit", server_id=3, tags=frozenset({1})) == make_client("qbit")


def test_with_tag_returns_same_instance_when_already_tagged() -> None:
    client = make_client("qbit", tags=frozenset({4}))

    assert client.with_tag(4) is client
    assert client.with_tag(5).tags == frozenset({4, 5})


def test_quality_profile_ignores_zero_scores() -> None:
    profile = QualityProfile(
        name="arrstate-hd",
        cutoff="Bluray-1080p",
        allowed_qualities=frozenset({"Bluray-1080p"}),
        format_scores={"x265": 0, "Remux": 50},
    )

    assert profile.scored_formats() == {"Remux": 50}


def test_settings_match_is_desired_subset() -> None:
    current = {"host": "sab", "port": 8080, "category": "movies"}

    assert settings_match(current, {"port": 8080})
    assert settings_match(current, {})
    assert not settings_match(current, {"port": 9090})
    assert not settings_match(current, {"apiKey": "x"})


def test_health_status_is_unhealthy_only_on_errors() -> None:
    warning = HealthIssue(source="IndexerCheck", type=HealthIssueType.WARNING, message="slow")
    error = HealthIssue(source="RootFolderCheck", type=HealthIssueType.ERROR, message="missing")

    assert HealthStatus().healthy
    assert HealthStatus(issues=(warning,)).healthy
    assert not HealthStatus(issues=(warning, error)).healthy
