"""Load a desired-state document from JSON."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from arrstate.config import ConfigurationError
from arrstate.domain.model import KIND_FIELDS, DesiredState

from .schema import DesiredStateDocument

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

log = getLogger(__name__)


class DesiredStateError(ConfigurationError):
    """Raised when a desired-state document cannot be read or is invalid."""


def parse_desired_state(data: Mapping[str, object]) -> DesiredState:
    """Validate a decoded document and materialize it.

    Every collection key present in the document, even an empty one, marks
    that kind as managed; absent keys leave the kind untouched.
    """

    try:
        document = DesiredStateDocument.model_validate(data)
    except ValidationError as exc:
        raise DesiredStateError(f"Invalid desired state: {exc}") from exc

    present = document.model_fields_set
    managed = frozenset(kind for kind, name in KIND_FIELDS.items() if name in present)
    return DesiredState(
        app=document.app,
        version=document.version,
        managed_kinds=managed,
        custom_formats=tuple(item.to_domain() for item in document.custom_formats),
        quality_profiles=tuple(item.to_domain() for item in document.quality_profiles),
        root_folders=tuple(item.to_domain() for item in document.root_folders),
        download_clients=tuple(item.to_domain() for item in document.download_clients),
        remote_path_mappings=tuple(item.to_domain() for item in document.remote_path_mappings),
        indexers=tuple(item.to_domain() for item in document.indexers),
        notifications=tuple(item.to_domain() for item in document.notifications),
        delay_profiles=tuple(item.to_domain() for item in document.delay_profiles),
        import_lists=tuple(item.to_domain() for item in document.import_lists),
        indexer_proxies=tuple(item.to_domain() for item in document.indexer_proxies),
        applications=tuple(item.to_domain() for item in document.applications),
        naming=document.naming.to_domain() if document.naming else None,
        media_management=(
            document.media_management.to_domain() if document.media_management else None
        ),
        authentication=document.authentication.to_domain() if document.authentication else None,
    )


def load_desired_state(path: Path) -> DesiredState:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DesiredStateError(f"Cannot read desired state {path}: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DesiredStateError(f"Desired state {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DesiredStateError(f"Desired state {path} must be a JSON object")
    log.debug(f"Loaded desired state from {path}")
    return parse_desired_state(data)
