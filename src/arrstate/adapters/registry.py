"""Adapter lookup by application name."""

from __future__ import annotations

from typing import TYPE_CHECKING

from arrstate.config import ConfigurationError, get_connection_config
from arrstate.domain.model import App

from .servarr import ServarrAdapter

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from arrstate.config import ConnectionConfig
    from arrstate.domain.ports import ServiceAdapter

type AdapterFactory = Callable[[App, ConnectionConfig], ServiceAdapter]


def _servarr(app: App, connection: ConnectionConfig) -> ServiceAdapter:
    return ServarrAdapter(app=app, connection=connection)


ADAPTERS: Mapping[App, AdapterFactory] = {
    App.RADARR: _servarr,
    App.SONARR: _servarr,
    App.LIDARR: _servarr,
    App.PROWLARR: _servarr,
}


def resolve_app(name: str) -> App:
    try:
        return App(name.strip().lower())
    except ValueError:
        known = ", ".join(app.value for app in App)
        raise ConfigurationError(f"Unknown app {name!r}; expected one of: {known}") from None


def create_adapter(
    name: str,
    connection: ConnectionConfig | None = None,
) -> ServiceAdapter:
    """Build the adapter for ``name``, reading its connection from the environment if needed."""

    app = resolve_app(name)
    if connection is None:
        connection = get_connection_config(app.value)
    return ADAPTERS[app](app, connection)
