"""Public client classes for the league results API."""

from __future__ import annotations

import asyncio
from typing import Any

from pydantic import TypeAdapter

from league_results._http import AsyncTransport, SyncTransport
from league_results._logging import log_api_call, log_async_api_call
from league_results.constants import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from league_results.exceptions import LeagueResultsValidationError
from league_results.models.result import ResultEntry
from league_results.models.round import Division, RoundPayload, RoundSummary


def _validate(model_type: Any, data: Any, name: str) -> Any:
    """Validate JSON data against a Pydantic model or collection type."""
    try:
        return TypeAdapter(model_type).validate_python(data)
    except Exception as exc:
        raise LeagueResultsValidationError(
            f"Failed to validate {name} response: {exc}"
        ) from exc


class LeagueResultsClient:
    """Synchronous client for the league results API.

    Usage:
        client = LeagueResultsClient()
        payload = client.round_results(12)
        client.close()

        # Or as a context manager:
        with LeagueResultsClient(base_url="https://league.example/api") as client:
            divisions = client.divisions(season_id=3)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._transport = SyncTransport(base_url=base_url, timeout=timeout)

    def __enter__(self) -> LeagueResultsClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection."""
        self._transport.close()

    # ── Endpoints ──────────────────────────────────────────────

    @log_api_call
    def round_results(self, round_id: int) -> RoundPayload:
        """Get a round with its sessions and recorded results."""
        data = self._transport.get(f"/rounds/{round_id}/results")
        return _validate(RoundPayload, data, "RoundPayload")

    @log_api_call
    def round(self, round_id: int) -> RoundSummary:
        """Get a round header."""
        data = self._transport.get(f"/rounds/{round_id}")
        return _validate(RoundSummary, data, "RoundSummary")

    @log_api_call
    def divisions(self, season_id: int) -> list[Division]:
        """Get the divisions configured for a season."""
        data = self._transport.get(f"/seasons/{season_id}/divisions")
        return _validate(list[Division], data, "Division")

    @log_api_call
    def race_results(self, race_id: int) -> list[ResultEntry]:
        """Get the recorded results of one session."""
        data = self._transport.get(f"/races/{race_id}/results")
        return _validate(list[ResultEntry], data, "ResultEntry")


class AsyncLeagueResultsClient:
    """Asynchronous client for the league results API.

    Usage:
        async with AsyncLeagueResultsClient() as client:
            payload = await client.round_results(12)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._transport = AsyncTransport(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> AsyncLeagueResultsClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP connection."""
        await self._transport.close()

    # ── Endpoints ──────────────────────────────────────────────

    @log_async_api_call
    async def round_results(self, round_id: int) -> RoundPayload:
        """Get a round with its sessions and recorded results."""
        data = await self._transport.get(f"/rounds/{round_id}/results")
        return _validate(RoundPayload, data, "RoundPayload")

    @log_async_api_call
    async def round(self, round_id: int) -> RoundSummary:
        """Get a round header."""
        data = await self._transport.get(f"/rounds/{round_id}")
        return _validate(RoundSummary, data, "RoundSummary")

    @log_async_api_call
    async def divisions(self, season_id: int) -> list[Division]:
        """Get the divisions configured for a season."""
        data = await self._transport.get(f"/seasons/{season_id}/divisions")
        return _validate(list[Division], data, "Division")

    @log_async_api_call
    async def race_results(self, race_id: int) -> list[ResultEntry]:
        """Get the recorded results of one session."""
        data = await self._transport.get(f"/races/{race_id}/results")
        return _validate(list[ResultEntry], data, "ResultEntry")


class LatestRoundFetcher:
    """Fetches round payloads, keeping only the newest request in flight.

    Starting a fetch cancels any fetch still running, so results are only ever
    delivered for the latest request. A superseded call returns None.

    Usage:
        async with AsyncLeagueResultsClient() as client:
            fetcher = LatestRoundFetcher(client)
            payload = await fetcher.fetch(12)
    """

    def __init__(self, client: AsyncLeagueResultsClient) -> None:
        self._client = client
        self._task: asyncio.Task[RoundPayload] | None = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def fetch(self, round_id: int) -> RoundPayload | None:
        self.cancel()
        task = asyncio.ensure_future(self._client.round_results(round_id))
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            # Superseded by a newer fetch; our own cancellation still propagates.
            if self._task is not task and task.cancelled():
                return None
            raise
        finally:
            if self._task is task:
                self._task = None

    def cancel(self) -> None:
        """Cancel the in-flight fetch, if any."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
