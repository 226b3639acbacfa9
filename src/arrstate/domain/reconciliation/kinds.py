"""Per-kind identity, equality and ownership rules.

Every resource kind is reconciled by the same diff engine; what differs is
captured in one ``ResourceSpec`` row of ``DEFAULT_SPECS``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, cast

from arrstate.domain.model import (
    Authentication,
    DelayProfile,
    NamingConfig,
    QualityProfile,
    RemotePathMapping,
    ResourceKind,
    RootFolder,
    settings_match,
)

from .contracts import Ownership

if TYPE_CHECKING:
    from collections.abc import Mapping

    from arrstate.domain.model.resources import Resource

    from .contracts import ResourceKey

MANAGED_NAME_PREFIX = "arrstate-"

# Kinds are diffed and applied in this order; import lists follow via direct apply.
KIND_ORDER: tuple[ResourceKind, ...] = (
    ResourceKind.CUSTOM_FORMAT,
    ResourceKind.QUALITY_PROFILE,
    ResourceKind.ROOT_FOLDER,
    ResourceKind.DOWNLOAD_CLIENT,
    ResourceKind.REMOTE_PATH_MAPPING,
    ResourceKind.INDEXER_PROXY,
    ResourceKind.INDEXER,
    ResourceKind.APPLICATION,
    ResourceKind.NOTIFICATION,
    ResourceKind.DELAY_PROFILE,
    ResourceKind.NAMING_CONFIG,
    ResourceKind.MEDIA_MANAGEMENT,
    ResourceKind.AUTHENTICATION,
)

DIRECT_KINDS: tuple[ResourceKind, ...] = (ResourceKind.IMPORT_LIST,)

type KeyFn = Callable[[Any], ResourceKey]
type EqualFn = Callable[[Any, Any], bool]
type NameFn = Callable[[Any], str]
type ProtectedFn = Callable[[Any], bool]


def _never(_resource: object) -> bool:
    return False


def _always(_resource: object) -> bool:
    return True


def _by_name(resource: Any) -> str:
    return cast(str, resource.name)


def default_equal(current: Resource, desired: Resource) -> bool:
    """Typed fields by dataclass equality, ``settings`` as a desired subset."""

    if current != desired:
        return False
    desired_settings: Mapping[str, object] | None = getattr(desired, "settings", None)
    if not desired_settings:
        return True
    return settings_match(getattr(current, "settings", {}), desired_settings)


def unset_fields_equal(*names: str) -> EqualFn:
    """Equality where a desired ``None`` in ``names`` accepts the service's value.

    Services fill optional provider fields with their schema default, so an
    unset desired value must not count as drift.
    """

    def equal(current: Resource, desired: Resource) -> bool:
        unset = {name: getattr(current, name) for name in names if getattr(desired, name) is None}
        return default_equal(current, replace(desired, **unset) if unset else desired)

    return equal


def _quality_profile_equal(current: QualityProfile, desired: QualityProfile) -> bool:
    return current == desired and current.scored_formats() == desired.scored_formats()


def _delay_profile_equal(current: DelayProfile, desired: DelayProfile) -> bool:
    return current == desired and current.tags == desired.tags


def _naming_equal(current: NamingConfig, desired: NamingConfig) -> bool:
    return current == desired and settings_match(current.formats, desired.formats)


def _mapping_key(mapping: RemotePathMapping) -> tuple[str, str]:
    return (mapping.host, mapping.remote_path)


def _mapping_name(mapping: RemotePathMapping) -> str:
    return f"{mapping.host}:{mapping.remote_path}"


def _authentication_equal(current: Authentication, desired: Authentication) -> bool:
    # an empty desired username leaves the service's username alone
    if desired.username and current.username != desired.username:
        return False
    return (current.method, current.required) == (desired.method, desired.required)


def _singleton_key(resource: Resource) -> ResourceKind:
    return resource.kind


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceSpec:
    """Configuration row telling the diff engine how to treat one kind."""

    kind: ResourceKind
    key: KeyFn
    display_name: NameFn
    ownership: Ownership
    equal: EqualFn = default_equal
    protected: ProtectedFn = _never
    allow_create: bool = True
    allow_update: bool = True
    name_prefix: str | None = None

    def is_owned(self, resource: Resource, owner_tag: int | None) -> bool:
        match self.ownership:
            case Ownership.TAG:
                return owner_tag is not None and resource.has_tag(owner_tag)
            case Ownership.NAME_PREFIX:
                prefix = self.name_prefix or MANAGED_NAME_PREFIX
                return self.display_name(resource).startswith(prefix)
            case Ownership.ADOPT_ALL | Ownership.SETTINGS:
                return True


def _specs(*specs: ResourceSpec) -> dict[ResourceKind, ResourceSpec]:
    return {spec.kind: spec for spec in specs}


DEFAULT_SPECS: Mapping[ResourceKind, ResourceSpec] = _specs(
    ResourceSpec(
        kind=ResourceKind.CUSTOM_FORMAT,
        key=_by_name,
        display_name=_by_name,
        ownership=Ownership.ADOPT_ALL,
    ),
    ResourceSpec(
        kind=ResourceKind.QUALITY_PROFILE,
        key=_by_name,
        display_name=_by_name,
        ownership=Ownership.NAME_PREFIX,
        name_prefix=MANAGED_NAME_PREFIX,
        equal=_quality_profile_equal,
    ),
    ResourceSpec(
        kind=ResourceKind.ROOT_FOLDER,
        key=lambda folder: cast(RootFolder, folder).path,
        display_name=lambda folder: cast(RootFolder, folder).path,
        ownership=Ownership.ADOPT_ALL,
        protected=_always,
        allow_update=False,
    ),
    ResourceSpec(
        kind=ResourceKind.DOWNLOAD_CLIENT,
        key=_by_name,
        display_name=_by_name,
        ownership=Ownership.TAG,
    ),
    ResourceSpec(
        kind=ResourceKind.REMOTE_PATH_MAPPING,
        key=_mapping_key,
        display_name=_mapping_name,
        ownership=Ownership.ADOPT_ALL,
    ),
    ResourceSpec(
        kind=ResourceKind.INDEXER,
        key=_by_name,
        display_name=_by_name,
        ownership=Ownership.TAG,
        equal=unset_fields_equal("minimum_seeders", "definition"),
    ),
    ResourceSpec(
        kind=ResourceKind.INDEXER_PROXY,
        key=_by_name,
        display_name=_by_name,
        ownership=Ownership.TAG,
        equal=unset_fields_equal("port", "request_timeout"),
    ),
    ResourceSpec(
        kind=ResourceKind.APPLICATION,
        key=_by_name,
        display_name=_by_name,
        ownership=Ownership.TAG,
    ),
    ResourceSpec(
        kind=ResourceKind.NOTIFICATION,
        key=_by_name,
        display_name=_by_name,
        ownership=Ownership.TAG,
    ),
    ResourceSpec(
        kind=ResourceKind.DELAY_PROFILE,
        key=lambda profile: cast(DelayProfile, profile).order,
        display_name=lambda profile: f"delay profile #{cast(DelayProfile, profile).order}",
        ownership=Ownership.ADOPT_ALL,
        equal=_delay_profile_equal,
        protected=lambda profile: cast(DelayProfile, profile).order == 1,
    ),
    ResourceSpec(
        kind=ResourceKind.IMPORT_LIST,
        key=_by_name,
        display_name=_by_name,
        ownership=Ownership.TAG,
    ),
    ResourceSpec(
        kind=ResourceKind.NAMING_CONFIG,
        key=_singleton_key,
        display_name=lambda _: "naming",
        ownership=Ownership.SETTINGS,
        equal=_naming_equal,
        protected=_always,
        allow_create=False,
    ),
    ResourceSpec(
        kind=ResourceKind.MEDIA_MANAGEMENT,
        key=_singleton_key,
        display_name=lambda _: "media management",
        ownership=Ownership.SETTINGS,
        protected=_always,
        allow_create=False,
    ),
    ResourceSpec(
        kind=ResourceKind.AUTHENTICATION,
        key=_singleton_key,
        display_name=lambda _: "authentication",
        ownership=Ownership.SETTINGS,
        equal=_authentication_equal,
        protected=_always,
        allow_create=False,
    ),
)
