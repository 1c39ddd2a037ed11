"""League results data models."""

from league_results.models.result import ResultEntry
from league_results.models.round import (
    Division,
    RoundPayload,
    RoundScoringPolicy,
    RoundSummary,
    SessionSnapshot,
    Team,
    TeamChampionshipPolicy,
    TiebreakerRule,
)
from league_results.models.session import (
    BonusPolicy,
    GridSourceKind,
    LengthType,
    PointsPolicy,
    QualifyingFormat,
    SessionConfig,
    SessionKind,
)
from league_results.models.standings import CrossDivisionEntry, RoundStanding, TeamStanding

__all__ = [
    "BonusPolicy",
    "CrossDivisionEntry",
    "Division",
    "GridSourceKind",
    "LengthType",
    "PointsPolicy",
    "QualifyingFormat",
    "ResultEntry",
    "RoundPayload",
    "RoundScoringPolicy",
    "RoundStanding",
    "RoundSummary",
    "SessionConfig",
    "SessionKind",
    "SessionSnapshot",
    "Team",
    "TeamChampionshipPolicy",
    "TeamStanding",
    "TiebreakerRule",
]
