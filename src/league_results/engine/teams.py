"""Round team championship: team totals from drivers' round standings."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping

from league_results.engine.common import group_by
from league_results.models.round import SessionSnapshot, Team
from league_results.models.standings import RoundStanding, TeamStanding


def team_names(
    teams: Iterable[Team],
    sessions: Iterable[SessionSnapshot] = (),
) -> dict[int, str]:
    """Team id -> name from the round's team list, falling back to names on result entries."""
    names = {
        entry.team_id: entry.team_name
        for session in sessions
        for entry in session.results
        if entry.team_id is not None and entry.team_name
    }
    names.update((team.id, team.name) for team in teams)
    return names


def team_standings(
    standings: Iterable[RoundStanding],
    names: Mapping[int, str] | None = None,
    drivers_for_calculation: int | None = None,
) -> tuple[TeamStanding, ...]:
    """Sum each team's best driver totals into a ranked team table.

    Drivers without a team are left out. With *drivers_for_calculation* set,
    only that many of a team's highest-scoring drivers count. Teams are ordered
    by points descending, then by name. Standings from every division of the
    round are pooled.
    """
    names = names or {}
    rows = []
    for team_id, members in group_by(
        (s for s in standings if s.team_id is not None),
        lambda s: s.team_id,
    ).items():
        counted = sorted(members, key=lambda s: s.total_points, reverse=True)
        if drivers_for_calculation is not None:
            counted = counted[:drivers_for_calculation]
        rows.append(TeamStanding(
            team_id=team_id,
            position=0,
            total_points=sum(s.total_points for s in counted),
            team_name=names.get(team_id),
            driver_ids=tuple(s.driver_id for s in counted),
        ))

    rows.sort(key=lambda t: (-t.total_points, t.team_name or ""))
    return tuple(replace(row, position=position) for position, row in enumerate(rows, start=1))
