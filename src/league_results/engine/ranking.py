"""Session ranking and gap-to-leader computation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from league_results.engine.common import group_by
from league_results.models.result import ResultEntry
from league_results.models.session import SessionConfig
from league_results.timing import effective_time


@dataclass(frozen=True)
class RankedEntry:
    entry: ResultEntry
    position: int
    effective_time_ms: int | None
    gap_ms: int | None

    @property
    def driver_id(self) -> int | str:
        return self.entry.driver_id

    @property
    def division_id(self) -> int | None:
        return self.entry.division_id

    @property
    def is_timed(self) -> bool:
        return self.effective_time_ms is not None


@dataclass(frozen=True)
class SessionRanking:
    """Ranked entries of one session, or of one division within it.

    ``incomplete`` is set when the leader has no usable time yet. Gaps are then
    all None and callers should render them as pending.
    """

    session_number: int
    entries: tuple[RankedEntry, ...]
    division_id: int | None = None
    incomplete: bool = False

    @property
    def leader(self) -> RankedEntry | None:
        return self.entries[0] if self.entries else None

    def finishing_order(self) -> list[int | str]:
        return [ranked.driver_id for ranked in self.entries]

    def by_driver(self) -> dict[int | str, RankedEntry]:
        return {ranked.driver_id: ranked for ranked in self.entries}


def ranking_time(entry: ResultEntry, session: SessionConfig) -> int | None:
    """Effective time used to order *entry*: race time, or lap time in qualifying."""
    if session.is_qualifying:
        raw = entry.fastest_lap_ms if entry.fastest_lap_ms is not None else entry.race_time_ms
    else:
        raw = entry.race_time_ms
    return effective_time(raw, entry.penalty_ms)


def _rank_by_given_position(
    session: SessionConfig,
    entries: Sequence[ResultEntry],
    division_id: int | None,
) -> SessionRanking:
    given = [e for e in entries if e.position is not None and e.is_classified]
    rest = [e for e in entries if e.position is None or not e.is_classified]
    given.sort(key=lambda e: e.position)  # type: ignore[arg-type, return-value]

    ranked = tuple(
        RankedEntry(entry=entry, position=index, effective_time_ms=None, gap_ms=None)
        for index, entry in enumerate(given + rest, start=1)
    )
    return SessionRanking(
        session_number=session.number,
        entries=ranked,
        division_id=division_id,
    )


def rank_session(
    session: SessionConfig,
    entries: Sequence[ResultEntry],
    division_id: int | None = None,
) -> SessionRanking:
    """Order entries by effective time and compute each entry's gap to the leader.

    Timed entries come first, sorted ascending with ties kept in input order.
    DNF, DNS and not-yet-timed entries follow in input order. Qualifying
    formats without timing are ordered by their given positions instead.
    """
    if not session.ranks_by_time:
        return _rank_by_given_position(session, entries, division_id)

    timed: list[tuple[ResultEntry, int]] = []
    untimed: list[ResultEntry] = []
    for entry in entries:
        eff = ranking_time(entry, session) if entry.is_classified else None
        if eff is None:
            untimed.append(entry)
        else:
            timed.append((entry, eff))

    timed.sort(key=lambda pair: pair[1])

    leader_time = timed[0][1] if timed else None
    incomplete = not leader_time

    ranked: list[RankedEntry] = []
    for index, (entry, eff) in enumerate(timed, start=1):
        gap = None if incomplete or index == 1 else eff - leader_time  # type: ignore[operator]
        ranked.append(RankedEntry(entry=entry, position=index, effective_time_ms=eff, gap_ms=gap))

    for index, entry in enumerate(untimed, start=len(timed) + 1):
        ranked.append(RankedEntry(entry=entry, position=index, effective_time_ms=None, gap_ms=None))

    return SessionRanking(
        session_number=session.number,
        entries=tuple(ranked),
        division_id=division_id,
        incomplete=incomplete,
    )


def rank_by_division(
    session: SessionConfig,
    entries: Sequence[ResultEntry],
) -> dict[int | None, SessionRanking]:
    """Rank each division's entries separately (None collects undivided drivers)."""
    return {
        division_id: rank_session(session, group, division_id=division_id)
        for division_id, group in group_by(entries, lambda e: e.division_id).items()
    }
