"""Standing rows (driver and team) and cross-division leaderboard rows.

These are derived by the engine but may also arrive precomputed in a round
payload, so they live with the input models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RoundStanding:
    driver_id: int | str
    position: int
    total_points: float
    driver_name: str | None = None
    division_id: int | None = None
    team_id: int | None = None
    race_points: float = 0
    fastest_lap_points: float = 0
    pole_points: float = 0
    round_points: float = 0
    positions_gained: int = 0
    sessions_entered: int = 0
    has_any_dnf: bool = False


@dataclass(frozen=True)
class TeamStanding:
    team_id: int
    position: int
    total_points: float
    team_name: str | None = None
    driver_ids: tuple[int | str, ...] = ()


@dataclass(frozen=True)
class CrossDivisionEntry:
    position: int
    driver_id: int | str
    time_ms: int
    driver_name: str | None = None
    division_id: int | None = None
    session_number: int | None = None
    gap_ms: int | None = None
