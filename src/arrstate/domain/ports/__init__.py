"""Domain port definitions for adapters."""

from __future__ import annotations

from .service import ServiceAdapter, TagStore

__all__ = ["ServiceAdapter", "TagStore"]
