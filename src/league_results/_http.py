"""HTTP transport for the league backend's JSON API, wrapping httpx.

The backend answers either with a bare JSON document or with an envelope
``{"success": ..., "data": ..., "message": ...}``. Transports hand back the
document inside the envelope and turn failures into league results errors.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import httpx

from league_results.constants import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from league_results.exceptions import (
    LeagueResultsAPIError,
    LeagueResultsConnectionError,
    LeagueResultsTimeoutError,
)

Params = dict[str, str | int] | None

_ENVELOPE_KEYS = frozenset({"data", "message", "success", "meta"})


def _client_options(base_url: str, timeout: float) -> dict[str, Any]:
    return {
        "base_url": base_url,
        "timeout": timeout,
        "headers": {"Accept": "application/json"},
    }


@contextmanager
def _league_errors(endpoint: str) -> Iterator[None]:
    """Re-raise httpx connection and timeout failures for *endpoint*."""
    try:
        yield
    except httpx.ConnectError as exc:
        raise LeagueResultsConnectionError(f"GET {endpoint}: {exc}") from exc
    except httpx.TimeoutException as exc:
        raise LeagueResultsTimeoutError(f"GET {endpoint}: {exc}") from exc


def _error_message(response: httpx.Response) -> str:
    """The backend's JSON ``message`` when it sent one, otherwise the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return response.text


def _payload(response: httpx.Response) -> Any:
    """Return the response document, unwrapped from its envelope.

    Raises:
        LeagueResultsAPIError: on an HTTP error status, or an envelope that
            reports ``"success": false``.
    """
    if response.is_error:
        raise LeagueResultsAPIError(
            status_code=response.status_code,
            message=_error_message(response),
        )
    body = response.json()
    if not (isinstance(body, dict) and "data" in body and body.keys() <= _ENVELOPE_KEYS):
        return body
    if body.get("success") is False:
        raise LeagueResultsAPIError(
            status_code=response.status_code,
            message=body.get("message") or "request was not successful",
        )
    return body["data"]


class SyncTransport:
    """Blocking transport over httpx.Client."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = httpx.Client(**_client_options(base_url, timeout))

    def get(self, endpoint: str, params: Params = None) -> Any:
        with _league_errors(endpoint):
            response = self._client.get(endpoint, params=params)
        return _payload(response)

    def close(self) -> None:
        self._client.close()


class AsyncTransport:
    """Non-blocking transport over httpx.AsyncClient; cancellation propagates."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = httpx.AsyncClient(**_client_options(base_url, timeout))

    async def get(self, endpoint: str, params: Params = None) -> Any:
        with _league_errors(endpoint):
            response = await self._client.get(endpoint, params=params)
        return _payload(response)

    async def close(self) -> None:
        await self._client.aclose()
