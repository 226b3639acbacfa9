"""Connection settings for managed services."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

SERVICE_TIMEOUT_SECONDS = 30.0
API_KEY_HEADER = "X-Api-Key"


@dataclass(frozen=True, slots=True)
class ConnectionConfig:
    """Connection descriptor for one service instance."""

    url: str
    api_key: str
    insecure_skip_verify: bool = False

    def __post_init__(self) -> None:
        if not self.url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Service URL must be http(s): {self.url!r}")

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    def resilience(self, *, name: str) -> ResilienceConfig:
        return ResilienceConfig(
            name=name,
            base_url=self.base_url,
            timeout_seconds=SERVICE_TIMEOUT_SECONDS,
            verify_tls=not self.insecure_skip_verify,
            retry=RetryPolicy(),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={API_KEY_HEADER: self.api_key},
        )

    def __repr__(self) -> str:
        return (
            f"ConnectionConfig(url={self.url!r}, api_key='***', "
            f"insecure_skip_verify={self.insecure_skip_verify!r})"
        )


def connection_env_prefix(app: str) -> str:
    return app.strip().upper().replace("-", "_")


def get_connection_config(app: str) -> ConnectionConfig:
    """Build the connection descriptor for ``app`` from ``<APP>_*`` variables."""

    prefix = connection_env_prefix(app)
    url_var = f"{prefix}_URL"
    key_var = f"{prefix}_API_KEY"
    values = require_env_vars((url_var, key_var))
    return ConnectionConfig(
        url=values[url_var].strip(),
        api_key=values[key_var].strip(),
        insecure_skip_verify=env_flag(f"{prefix}_INSECURE_SKIP_VERIFY"),
    )
