"""Division-agnostic time leaderboards for a round."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from league_results.models.result import ResultEntry
from league_results.models.round import SessionSnapshot
from league_results.models.standings import CrossDivisionEntry
from league_results.timing import effective_time


@dataclass(frozen=True)
class CrossDivisionResults:
    qualifying_times: tuple[CrossDivisionEntry, ...] = ()
    race_times: tuple[CrossDivisionEntry, ...] = ()
    fastest_laps: tuple[CrossDivisionEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.qualifying_times or self.race_times or self.fastest_laps)


def _lap(entry: ResultEntry) -> int | None:
    if entry.dns:
        return None
    return entry.fastest_lap_ms


def _race_time(entry: ResultEntry) -> int | None:
    if not entry.is_classified:
        return None
    return effective_time(entry.race_time_ms, entry.penalty_ms)


def _leaderboard(
    sessions: Iterable[SessionSnapshot],
    time_of: Callable[[ResultEntry], int | None],
) -> tuple[CrossDivisionEntry, ...]:
    """Best positive time per driver, ascending, gaps measured to the first row."""
    best: dict[int | str, tuple[int, ResultEntry, int]] = {}
    for session in sessions:
        for entry in session.results:
            time_ms = time_of(entry)
            if not time_ms or time_ms <= 0:
                continue
            current = best.get(entry.driver_id)
            if current is None or time_ms < current[0]:
                best[entry.driver_id] = (time_ms, entry, session.number)

    rows = sorted(best.values(), key=lambda row: row[0])
    if not rows:
        return ()

    leader_ms = rows[0][0]
    return tuple(
        CrossDivisionEntry(
            position=position,
            driver_id=entry.driver_id,
            time_ms=time_ms,
            driver_name=entry.driver_name,
            division_id=entry.division_id,
            session_number=number,
            gap_ms=None if position == 1 else time_ms - leader_ms,
        )
        for position, (time_ms, entry, number) in enumerate(rows, start=1)
    )


def compare_across_divisions(sessions: Iterable[SessionSnapshot]) -> CrossDivisionResults:
    """Rank every driver in the round by time alone, ignoring divisions and points.

    Qualifying sessions feed the qualifying-lap board. Race sessions feed the
    race-time board (DNF and DNS excluded) and the fastest-lap board.
    """
    sessions = list(sessions)
    qualifying = [s for s in sessions if s.is_qualifying]
    races = [s for s in sessions if not s.is_qualifying]
    return CrossDivisionResults(
        qualifying_times=_leaderboard(qualifying, _lap),
        race_times=_leaderboard(races, _race_time),
        fastest_laps=_leaderboard(races, _lap),
    )
