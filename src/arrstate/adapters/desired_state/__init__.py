"""Desired-state document loading."""

from __future__ import annotations

from .loader import DesiredStateError, load_desired_state, parse_desired_state

__all__ = ["DesiredStateError", "load_desired_state", "parse_desired_state"]
