"""Results engine: ranking, grids, points, standings and export."""

from league_results.engine.cross_division import CrossDivisionResults, compare_across_divisions
from league_results.engine.export import (
    ExportTable,
    cross_division_table,
    qualifying_results_table,
    race_results_table,
    session_table,
    standings_table,
    team_standings_table,
    write_csv,
)
from league_results.engine.grid import (
    grid_positions,
    resolve_grid,
    sessions_by_id,
    validate_grid_sources,
)
from league_results.engine.points import (
    PointsTable,
    ScoredEntry,
    ScoredSession,
    resolve_points_table,
    score_session,
)
from league_results.engine.ranking import (
    RankedEntry,
    SessionRanking,
    rank_by_division,
    rank_session,
    ranking_time,
)
from league_results.engine.service import RoundResults, RoundResultsService
from league_results.engine.standings import RoundStandings, aggregate_round
from league_results.engine.teams import team_names, team_standings
from league_results.engine.tiebreak import TiebreakerInfo, TiebreakerResolution, resolve_ties

__all__ = [
    "CrossDivisionResults",
    "ExportTable",
    "PointsTable",
    "RankedEntry",
    "RoundResults",
    "RoundResultsService",
    "RoundStandings",
    "ScoredEntry",
    "ScoredSession",
    "SessionRanking",
    "TiebreakerInfo",
    "TiebreakerResolution",
    "aggregate_round",
    "compare_across_divisions",
    "cross_division_table",
    "grid_positions",
    "qualifying_results_table",
    "race_results_table",
    "rank_by_division",
    "rank_session",
    "ranking_time",
    "resolve_grid",
    "resolve_points_table",
    "resolve_ties",
    "score_session",
    "session_table",
    "sessions_by_id",
    "standings_table",
    "team_names",
    "team_standings",
    "team_standings_table",
    "validate_grid_sources",
    "write_csv",
]
