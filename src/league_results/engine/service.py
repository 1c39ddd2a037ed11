"""Round compute service: the full results pipeline over one round payload."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from league_results._logging import log_compute_call
from league_results.engine.common import division_names, group_by, index_by
from league_results.engine.cross_division import CrossDivisionResults, compare_across_divisions
from league_results.engine.grid import resolve_grid, sessions_by_id, validate_grid_sources
from league_results.engine.points import ScoredSession, score_session
from league_results.engine.ranking import SessionRanking, rank_by_division, rank_session
from league_results.engine.standings import RoundStandings, aggregate_round
from league_results.engine.teams import team_names, team_standings
from league_results.models.round import RoundPayload, RoundSummary, SessionSnapshot
from league_results.models.session import GridSourceKind
from league_results.models.standings import RoundStanding, TeamStanding

Scoped = dict[int | None, SessionRanking]


@dataclass(frozen=True)
class RoundResults:
    round: RoundSummary
    rankings: dict[int, Scoped] = field(default_factory=dict)
    scored: dict[int, dict[int | None, ScoredSession]] = field(default_factory=dict)
    standings: RoundStandings = RoundStandings()
    cross_division: CrossDivisionResults = CrossDivisionResults()
    division_names: dict[int | None, str] = field(default_factory=dict)
    precomputed_standings: bool = False
    precomputed_cross_division: bool = False
    team_standings: tuple[TeamStanding, ...] = ()

    def scored_sessions(self) -> list[ScoredSession]:
        return [s for by_division in self.scored.values() for s in by_division.values()]

    def session(self, number: int, division_id: int | None = None) -> ScoredSession | None:
        return self.scored.get(number, {}).get(division_id)

    def standings_for(self, division_id: int | None = None) -> tuple[RoundStanding, ...]:
        return self.standings.for_division(division_id)


def _scopes(
    sessions: Sequence[SessionSnapshot],
    rankings: dict[int, Scoped],
) -> dict[int | None, dict[int, SessionRanking]]:
    """Division id -> session number -> that session's ranking within the division.

    A session ranked in a different scope is re-ranked at most once per pass.
    """
    divisions = {d for by_division in rankings.values() for d in by_division}
    scopes: dict[int | None, dict[int, SessionRanking]] = {d: {} for d in divisions}
    for session in sessions:
        ranked = rankings[session.number]
        missing = divisions - ranked.keys()
        regrouped: Scoped = {}
        if missing - {None}:
            regrouped.update(rank_by_division(session, session.results))
        if None in missing:
            regrouped[None] = rank_session(session, session.results)
        for division_id in divisions:
            ranking = ranked[division_id] if division_id in ranked else regrouped.get(division_id)
            if ranking is not None:
                scopes[division_id][session.number] = ranking
    return scopes


class RoundResultsService:
    """Computes rankings, points and standings for a round.

    Usage:
        service = RoundResultsService()
        results = service.compute(RoundPayload.model_validate(data))
        for standing in results.standings_for(division_id):
            ...

    Every call starts from the payload alone; nothing is cached between calls.
    """

    def __init__(self, prefer_precomputed: bool = True) -> None:
        self._prefer_precomputed = prefer_precomputed

    def rank(self, payload: RoundPayload) -> dict[int, Scoped]:
        """Session number -> division id -> ranking."""
        split = payload.split_by_division
        rankings: dict[int, Scoped] = {}
        for session in payload.sessions:
            if split or session.race_divisions:
                rankings[session.number] = rank_by_division(session, session.results)
            else:
                rankings[session.number] = {None: rank_session(session, session.results)}
        return rankings

    def score(
        self,
        payload: RoundPayload,
        rankings: dict[int, Scoped],
    ) -> dict[int, dict[int | None, ScoredSession]]:
        by_number = index_by(payload.sessions, lambda s: s.number)
        by_id = sessions_by_id(payload.sessions)
        needs_grid = any(s.grid_source != GridSourceKind.NONE for s in payload.sessions)
        scopes = _scopes(payload.sessions, rankings) if needs_grid else {}
        scored: dict[int, dict[int | None, ScoredSession]] = {}
        for session in payload.sessions:
            scored[session.number] = {}
            for division_id, ranking in rankings[session.number].items():
                grid = None
                if session.grid_source != GridSourceKind.NONE:
                    grid = resolve_grid(session, by_number, scopes[division_id], by_id)
                scored[session.number][division_id] = score_session(ranking, session, grid)
        return scored

    @log_compute_call
    def compute(self, payload: RoundPayload) -> RoundResults:
        """Run the whole pipeline for *payload*.

        Raises:
            ConfigurationError: session numbers repeat, grid references are
                invalid or cyclic, or a points policy cannot be resolved.
        """
        validate_grid_sources(payload.sessions)

        rankings = self.rank(payload)
        scored = self.score(payload, rankings)
        split = payload.split_by_division
        scored_sessions = [s for by_division in scored.values() for s in by_division.values()]

        use_standings = self._prefer_precomputed and payload.standings is not None
        if use_standings:
            tables = group_by(payload.standings, lambda s: s.division_id if split else None)
            standings = RoundStandings(tables={k: tuple(v) for k, v in tables.items()})
        else:
            standings = aggregate_round(
                scored_sessions,
                split_by_division=split,
                policy=payload.scoring,
                rules=payload.tiebreakers,
            )

        use_cross = self._prefer_precomputed and payload.has_precomputed_cross_division
        if use_cross:
            cross = CrossDivisionResults(
                qualifying_times=payload.qualifying_results or (),
                race_times=payload.race_time_results or (),
                fastest_laps=payload.fastest_lap_results or (),
            )
        else:
            cross = compare_across_divisions(payload.sessions)

        teams: tuple[TeamStanding, ...] = ()
        if payload.team_championship.enabled:
            teams = team_standings(
                standings.all(),
                team_names(payload.teams, payload.sessions),
                payload.team_championship.drivers_for_calculation,
            )

        return RoundResults(
            round=payload.round,
            rankings=rankings,
            scored=scored,
            standings=standings,
            cross_division=cross,
            division_names=division_names(payload.divisions),
            precomputed_standings=use_standings,
            precomputed_cross_division=use_cross,
            team_standings=teams,
        )
