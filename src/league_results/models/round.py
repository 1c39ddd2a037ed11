"""Round payload models: the snapshot the engine computes over."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from league_results.models.result import ResultEntry
from league_results.models.session import BonusPolicy, PointsPolicy, SessionConfig
from league_results.models.standings import CrossDivisionEntry, RoundStanding


class TiebreakerRule(str, Enum):
    HIGHEST_QUALIFYING_POSITION = "highest_qualifying_position"
    RACE_1_BEST_RESULT = "race_1_best_result"
    BEST_RESULT_ALL_RACES = "best_result_all_races"


class RoundSummary(BaseModel):
    """Round header."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    round_number: int = Field(ge=0)
    name: str | None = None
    status: str = "scheduled"

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


class Division(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str | None = None


class Team(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class TeamChampionshipPolicy(BaseModel):
    """Round team championship: each team scores its best drivers' round totals.

    ``drivers_for_calculation`` caps how many drivers count per team; None
    counts every driver.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    drivers_for_calculation: int | None = Field(None, ge=1)


class SessionSnapshot(SessionConfig):
    """A session's configuration together with its recorded results."""

    results: tuple[ResultEntry, ...] = ()


class RoundScoringPolicy(BaseModel):
    """Round-level points awarded by round standings position.

    Disabled by default, in which case round totals are plain sums of session
    points.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    points: PointsPolicy = PointsPolicy()
    bonus: BonusPolicy = BonusPolicy()


class RoundPayload(BaseModel):
    """Everything the engine needs for one round, as delivered by the backend."""

    model_config = ConfigDict(frozen=True)

    round: RoundSummary
    divisions: tuple[Division, ...] = ()
    sessions: tuple[SessionSnapshot, ...] = Field(
        (), validation_alias=AliasChoices("sessions", "race_events"),
    )
    scoring: RoundScoringPolicy = RoundScoringPolicy()
    tiebreakers: tuple[TiebreakerRule, ...] = ()
    teams: tuple[Team, ...] = ()
    team_championship: TeamChampionshipPolicy = TeamChampionshipPolicy()

    # Optionally precomputed by the backend
    standings: tuple[RoundStanding, ...] | None = None
    qualifying_results: tuple[CrossDivisionEntry, ...] | None = None
    race_time_results: tuple[CrossDivisionEntry, ...] | None = None
    fastest_lap_results: tuple[CrossDivisionEntry, ...] | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_backend_fields(cls, data: Any) -> Any:
        """Accept the season's flat team championship settings."""
        if not isinstance(data, dict) or "team_championship" in data:
            return data
        if "team_championship_enabled" in data or "teams_drivers_for_calculation" in data:
            data = dict(data)
            data["team_championship"] = {
                "enabled": bool(data.pop("team_championship_enabled", False)),
                "drivers_for_calculation": data.pop("teams_drivers_for_calculation", None),
            }
        return data

    @property
    def split_by_division(self) -> bool:
        return bool(self.divisions)

    @property
    def has_precomputed_cross_division(self) -> bool:
        return (
            self.qualifying_results is not None
            or self.race_time_results is not None
            or self.fastest_lap_results is not None
        )
