"""Request helpers for one Servarr API session."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from arrstate.adapters.http_resilience import ResilientClient

log = getLogger(__name__)

_EXPECTED_STATUS: Mapping[str, frozenset[int]] = {
    "GET": frozenset({200}),
    "POST": frozenset({200, 201}),
    "PUT": frozenset({200, 202}),
    "DELETE": frozenset({200, 204}),
}
_ERROR_BODY_LIMIT = 300


class ServarrAPIError(RuntimeError):
    """Raised when a Servarr service answers with an unexpected status or payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ServarrSession:
    """API-versioned JSON calls over an open ``ResilientClient``."""

    def __init__(self, client: ResilientClient, api_prefix: str) -> None:
        self._client = client
        self._api_prefix = api_prefix.rstrip("/")

    def url(self, path: str) -> str:
        return f"{self._api_prefix}/{path.lstrip('/')}"

    async def get(self, path: str) -> object:
        response = await self._call("GET", path)
        return _decode(response)

    async def get_model[M: BaseModel](self, path: str, model: type[M]) -> M:
        payload = await self.get(path)
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise ServarrAPIError(f"Unexpected payload from {self.url(path)}: {exc}") from exc

    async def get_models[M: BaseModel](self, path: str, model: type[M]) -> list[M]:
        payload = await self.get(path)
        if not isinstance(payload, list):
            raise ServarrAPIError(f"Expected a list from {self.url(path)}")
        try:
            return [model.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise ServarrAPIError(f"Unexpected payload from {self.url(path)}: {exc}") from exc

    async def get_document(self, path: str) -> dict[str, object]:
        payload = await self.get(path)
        if not isinstance(payload, dict):
            raise ServarrAPIError(f"Expected an object from {self.url(path)}")
        return payload

    async def post(self, path: str, payload: object) -> object:
        response = await self._call("POST", path, payload=payload)
        return _decode(response)

    async def post_model[M: BaseModel](self, path: str, payload: object, model: type[M]) -> M:
        result = await self.post(path, payload)
        try:
            return model.model_validate(result)
        except ValidationError as exc:
            raise ServarrAPIError(f"Unexpected payload from {self.url(path)}: {exc}") from exc

    async def put(self, path: str, payload: object) -> object:
        response = await self._call("PUT", path, payload=payload)
        return _decode(response)

    async def delete(self, path: str) -> None:
        await self._call("DELETE", path)

    async def _call(
        self,
        method: str,
        path: str,
        *,
        payload: object = None,
    ) -> httpx.Response:
        url = self.url(path)
        if payload is None:
            response = await self._client.request(method, url)
        else:
            response = await self._client.request(method, url, json=payload)
        if response.status_code not in _EXPECTED_STATUS[method]:
            body = response.text[:_ERROR_BODY_LIMIT]
            log.error(f"{method} {url} failed with HTTP {response.status_code}: {body}")
            raise ServarrAPIError(
                f"{method} {url} returned HTTP {response.status_code}: {body}",
                status_code=response.status_code,
            )
        return response


def _decode(response: httpx.Response) -> object:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise ServarrAPIError(
            f"Invalid JSON from {response.request.url}",
            status_code=response.status_code,
        ) from exc
