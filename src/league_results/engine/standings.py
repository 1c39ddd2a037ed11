"""Round standings: per-driver aggregation of scored sessions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence

from league_results.engine.common import group_by
from league_results.engine.points import ScoredEntry, ScoredSession, resolve_points_table, within_top
from league_results.engine.tiebreak import TiebreakerInfo, TiebreakerResolution, resolve_ties
from league_results.models.round import RoundScoringPolicy, TiebreakerRule
from league_results.models.standings import RoundStanding


@dataclass
class _Tally:
    driver_id: int | str
    division_id: int | None
    driver_name: str | None = None
    team_id: int | None = None
    race_points: float = 0
    fastest_lap_points: float = 0
    pole_points: float = 0
    positions_gained: int = 0
    sessions_entered: int = 0
    has_any_dnf: bool = False
    best_race_lap_ms: int | None = None
    best_qualifying_ms: int | None = None

    def add(self, scored: ScoredEntry, is_qualifying: bool) -> None:
        entry = scored.ranked.entry
        if self.driver_name is None:
            self.driver_name = entry.driver_name
        if self.team_id is None:
            self.team_id = entry.team_id
        self.race_points += scored.points
        self.fastest_lap_points += scored.fastest_lap_points
        self.pole_points += scored.pole_points
        self.sessions_entered += 1
        if scored.positions_gained is not None:
            self.positions_gained += scored.positions_gained
        if not entry.is_classified:
            self.has_any_dnf = True
            return
        if is_qualifying:
            self.best_qualifying_ms = _faster(self.best_qualifying_ms, scored.ranked.effective_time_ms)
        else:
            self.best_race_lap_ms = _faster(self.best_race_lap_ms, entry.fastest_lap_ms)

    def to_standing(self) -> RoundStanding:
        return RoundStanding(
            driver_id=self.driver_id,
            position=0,
            total_points=self.race_points,
            driver_name=self.driver_name,
            division_id=self.division_id,
            team_id=self.team_id,
            race_points=self.race_points,
            fastest_lap_points=self.fastest_lap_points,
            pole_points=self.pole_points,
            positions_gained=self.positions_gained,
            sessions_entered=self.sessions_entered,
            has_any_dnf=self.has_any_dnf,
        )


@dataclass(frozen=True)
class RoundStandings:
    """Standings tables keyed by division id (None when the round is not split)."""

    tables: dict[int | None, tuple[RoundStanding, ...]] = field(default_factory=dict)
    tiebreakers: TiebreakerInfo = TiebreakerInfo()

    def for_division(self, division_id: int | None = None) -> tuple[RoundStanding, ...]:
        return self.tables.get(division_id, ())

    def all(self) -> list[RoundStanding]:
        return [standing for table in self.tables.values() for standing in table]


def _faster(current: int | None, candidate: int | None) -> int | None:
    if not candidate or candidate <= 0:
        return current
    if current is None or candidate < current:
        return candidate
    return current


def _fastest_holder(tallies: Sequence[_Tally], attr: str) -> int | str | None:
    """Driver with the lowest positive *attr* time; first appearance wins a tie."""
    best_id, best_time = None, None
    for tally in tallies:
        value = getattr(tally, attr)
        if value is not None and (best_time is None or value < best_time):
            best_id, best_time = tally.driver_id, value
    return best_id


def _tally(
    scored_sessions: Sequence[ScoredSession],
    split_by_division: bool,
) -> dict[int | None, list[_Tally]]:
    tallies: dict[tuple[int | None, int | str], _Tally] = {}
    for scored in scored_sessions:
        for entry in scored.entries:
            division_id = entry.ranked.division_id if split_by_division else None
            key = (division_id, entry.driver_id)
            tally = tallies.get(key)
            if tally is None:
                tally = tallies[key] = _Tally(driver_id=entry.driver_id, division_id=division_id)
            tally.add(entry, scored.session.is_qualifying)
    return group_by(tallies.values(), lambda t: t.division_id)


def _division_sessions(
    scored_sessions: Sequence[ScoredSession],
    division_id: int | None,
    split_by_division: bool,
) -> list[ScoredSession]:
    if not split_by_division:
        return list(scored_sessions)
    return [s for s in scored_sessions if s.division_id is None or s.division_id == division_id]


def _apply_round_points(
    ordered: list[RoundStanding],
    tallies: Sequence[_Tally],
    policy: RoundScoringPolicy,
) -> list[RoundStanding]:
    """Replace totals with round points plus round-level bonuses.

    Positions stay as ordered by race points; the bonuses never re-sort.
    """
    table = resolve_points_table(policy.points)
    bonus = policy.bonus
    lap_holder = _fastest_holder(tallies, "best_race_lap_ms")
    pole_holder = _fastest_holder(tallies, "best_qualifying_ms")

    result = []
    for standing in ordered:
        round_points = 0 if standing.has_any_dnf else table.points_for(standing.position)
        lap = 0
        if standing.driver_id == lap_holder and within_top(standing.position, bonus.fastest_lap_top_n):
            lap = bonus.fastest_lap_points
        pole = 0
        if standing.driver_id == pole_holder and within_top(standing.position, bonus.pole_top_n):
            pole = bonus.pole_points
        result.append(replace(
            standing,
            round_points=round_points,
            fastest_lap_points=lap,
            pole_points=pole,
            total_points=round_points + lap + pole,
        ))
    return result


def aggregate_round(
    scored_sessions: Sequence[ScoredSession],
    split_by_division: bool = False,
    policy: RoundScoringPolicy | None = None,
    rules: Sequence[TiebreakerRule] = (),
) -> RoundStandings:
    """Sum scored sessions into per-driver round standings.

    Drivers are ranked by summed session points, descending, with ties kept
    in first-appearance order unless tie-breaker *rules* are given. Positions
    are sequential. Only drivers with at least one entry appear.

    With round scoring enabled, each driver's total becomes the round table's
    points for their standings position (zero after any DNF or DNS) plus the
    round-level fastest-lap and pole bonuses.
    """
    policy = policy or RoundScoringPolicy()
    tables: dict[int | None, tuple[RoundStanding, ...]] = {}
    resolutions: list[TiebreakerResolution] = []
    applied: list[TiebreakerRule] = []
    unresolved = False

    for division_id, tallies in _tally(scored_sessions, split_by_division).items():
        provisional = sorted(
            (t.to_standing() for t in tallies),
            key=lambda s: s.race_points,
            reverse=True,
        )
        ordered, info = resolve_ties(
            provisional,
            rules,
            _division_sessions(scored_sessions, division_id, split_by_division),
            points=lambda s: s.race_points,
        )
        resolutions.extend(info.resolutions)
        applied.extend(r for r in info.applied_rules if r not in applied)
        unresolved = unresolved or info.had_unresolved_ties

        ordered = [replace(s, position=index) for index, s in enumerate(ordered, start=1)]
        if policy.enabled:
            ordered = _apply_round_points(ordered, tallies, policy)
        tables[division_id] = tuple(ordered)

    return RoundStandings(
        tables=tables,
        tiebreakers=TiebreakerInfo(
            resolutions=tuple(resolutions),
            applied_rules=tuple(applied),
            had_unresolved_ties=unresolved,
        ),
    )
