"""Read-only facts reported by a managed service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import HealthIssueType

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import App


@dataclass(frozen=True, slots=True)
class Tag:
    id: int
    label: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ServiceInfo:
    app: App
    version: str
    instance_name: str | None = None
    start_time: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class HealthIssue:
    source: str
    type: HealthIssueType
    message: str
    wiki_url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class HealthStatus:
    issues: tuple[HealthIssue, ...] = ()

    @property
    def healthy(self) -> bool:
        return not any(issue.type is HealthIssueType.ERROR for issue in self.issues)
