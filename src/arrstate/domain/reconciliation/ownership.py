"""Ownership tag resolution.

Resources carrying the ownership tag are managed by this tool; everything
else on the service is left untouched.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from arrstate.domain.ports import TagStore

log = getLogger(__name__)

OWNERSHIP_TAG = "arrstate-managed"


class TagResolutionError(RuntimeError):
    """Raised when the ownership tag cannot be looked up or created."""


class TagNotFoundError(LookupError):
    """Raised when the ownership tag does not exist on the service."""

    def __init__(self, marker: str) -> None:
        super().__init__(f"Tag {marker!r} not found")
        self.marker = marker


class OwnershipTagManager:
    """Resolves the ownership marker to the service's numeric tag id.

    One manager serves one service instance; the resolved id is cached for
    the lifetime of the manager.
    """

    def __init__(self, store: TagStore, marker: str = OWNERSHIP_TAG) -> None:
        self.store = store
        self.marker = marker
        self._tag_id: int | None = None

    def resolve_tag(self) -> int:
        """Return the id of an existing tag labelled ``marker``.

        Raises ``TagNotFoundError`` when no tag matches and
        ``TagResolutionError`` when the service cannot be queried.
        """

        if self._tag_id is not None:
            return self._tag_id
        try:
            tags = self.store.list_tags()
        except Exception as exc:
            raise TagResolutionError(f"Could not list tags: {exc}") from exc
        for tag in tags:
            if tag.label == self.marker:
                self._tag_id = tag.id
                return tag.id
        raise TagNotFoundError(self.marker)

    def ensure_tag(self) -> int:
        """Return the marker's tag id, creating the tag when missing."""

        try:
            return self.resolve_tag()
        except TagNotFoundError:
            pass
        try:
            tag = self.store.create_tag(self.marker)
        except Exception as exc:
            raise TagResolutionError(f"Could not create tag {self.marker!r}: {exc}") from exc
        log.info(f"Created ownership tag {tag.label!r} (id={tag.id})")
        self._tag_id = tag.id
        return tag.id
