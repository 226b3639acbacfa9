"""
Base building block for reconciled resources:
server identity, ownership tags, kind discriminator.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, ClassVar, Self

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .enums import ResourceKind


@dataclass(frozen=True, slots=True, kw_only=True)
class ManagedResource:
    """One configuration entity as observed on, or desired for, a service.

    ``server_id`` is assigned by the service on creation and is absent on
    desired resources. It never takes part in equality; neither do ``tags``,
    which carry the ownership marker rather than configuration.
    """

    # class-level discriminator; subclasses must override
    KIND: ClassVar[ResourceKind]

    server_id: int | None = field(default=None, compare=False)
    tags: frozenset[int] = field(default_factory=frozenset, compare=False)

    @property
    def kind(self) -> ResourceKind:
        return self.KIND

    def has_tag(self, tag_id: int) -> bool:
        return tag_id in self.tags

    def with_tag(self, tag_id: int) -> Self:
        if tag_id in self.tags:
            return self
        return replace(self, tags=self.tags | {tag_id})

    def with_server_id(self, server_id: int | None) -> Self:
        return replace(self, server_id=server_id)


def settings_match(current: Mapping[str, object], desired: Mapping[str, object]) -> bool:
    """Desired-subset comparison for schema-less passthrough settings.

    Services echo back every field of a resource's schema, most of them with
    defaults the desired configuration never mentions; only keys present in
    ``desired`` are compared.
    """

    return all(key in current and current[key] == value for key, value in desired.items())
