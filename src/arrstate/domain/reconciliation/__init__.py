"""Reconciliation core: ownership tagging, diffing and applying changes."""

from __future__ import annotations

from .apply import Deadline, apply_changes
from .contracts import (
    ApplyError,
    ApplyResult,
    Change,
    ChangeAction,
    ChangeSet,
    Ownership,
    ResourceKey,
)
from .diff import DuplicateKeyError, diff_resources
from .direct import apply_direct, plan_direct
from .engine import (
    ReconcileReport,
    ReconciliationEngine,
    ReconciliationPlan,
    UnsupportedResourceKindError,
)
from .kinds import DEFAULT_SPECS, KIND_ORDER, MANAGED_NAME_PREFIX, ResourceSpec
from .ownership import (
    OWNERSHIP_TAG,
    OwnershipTagManager,
    TagNotFoundError,
    TagResolutionError,
)

__all__ = [
    "DEFAULT_SPECS",
    "KIND_ORDER",
    "MANAGED_NAME_PREFIX",
    "OWNERSHIP_TAG",
    "ApplyError",
    "ApplyResult",
    "Change",
    "ChangeAction",
    "ChangeSet",
    "Deadline",
    "DuplicateKeyError",
    "Ownership",
    "OwnershipTagManager",
    "ReconcileReport",
    "ReconciliationEngine",
    "ReconciliationPlan",
    "ResourceKey",
    "ResourceSpec",
    "TagNotFoundError",
    "TagResolutionError",
    "UnsupportedResourceKindError",
    "apply_changes",
    "apply_direct",
    "diff_resources",
    "plan_direct",
]
