"""Radarr, Sonarr, Lidarr and Prowlarr adapter."""

from __future__ import annotations

from .adapter import ServarrAdapter
from .client import ServarrAPIError, ServarrSession
from .profiles import PROFILES, AppProfile
from .translator import TranslationError

__all__ = [
    "PROFILES",
    "AppProfile",
    "ServarrAPIError",
    "ServarrAdapter",
    "ServarrSession",
    "TranslationError",
]
