from __future__ import annotations

import pytest

from arrstate.domain.model import Tag
from arrstate.domain.reconciliation import (
    OWNERSHIP_TAG,
    OwnershipTagManager,
    TagNotFoundError,
    TagResolutionError,
)
from tests.support.services import FakeService


def test_resolve_tag_matches_label_exactly() -> None:
    service = FakeService(
        tags=[Tag(1, "arrstate-managed-old"), Tag(2, OWNERSHIP_TAG), Tag(3, "Arrstate-Managed")]
    )

    assert OwnershipTagManager(service).resolve_tag() == 2


def test_resolve_tag_is_cached() -> None:
    service = FakeService(tags=[Tag(4, OWNERSHIP_TAG)])
    manager = OwnershipTagManager(service)

    manager.resolve_tag()
    manager.resolve_tag()

    assert service.calls.count(("list_tags", "")) == 1


def test_resolve_tag_raises_when_missing() -> None:
    service = FakeService(tags=[Tag(1, "movies")])

    with pytest.raises(TagNotFoundError) as excinfo:
        OwnershipTagManager(service).resolve_tag()

    assert excinfo.value.marker == OWNERSHIP_TAG
    assert ("create_tag", OWNERSHIP_TAG) not in service.calls


def test_ensure_tag_creates_missing_tag_once() -> None:
    service = FakeService()
    manager = OwnershipTagManager(service)

    first = manager.ensure_tag()
    second = manager.ensure_tag()

    assert first == second
    assert service.calls.count(("create_tag", OWNERSHIP_TAG)) == 1
    assert [tag.label for tag in service.tags] == [OWNERSHIP_TAG]


def test_ensure_tag_reuses_existing_tag() -> None:
    service = FakeService(tags=[Tag(9, OWNERSHIP_TAG)])

    assert OwnershipTagManager(service).ensure_tag() == 9
    assert ("create_tag", OWNERSHIP_TAG) not in service.calls


def test_custom_marker_is_used() -> None:
    service = FakeService(tags=[Tag(5, "homelab")])

    assert OwnershipTagManager(service, "homelab").ensure_tag() == 5


def test_unreachable_service_raises_resolution_error() -> None:
    service = FakeService()
    service.fail_tags = True

    with pytest.raises(TagResolutionError, match="service unreachable"):
        OwnershipTagManager(service).ensure_tag()
