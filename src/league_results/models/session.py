"""Session configuration models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from league_results.constants import TOP_POSITIONS_LIMIT


class SessionKind(str, Enum):
    QUALIFYING = "qualifying"
    RACE = "race"


class QualifyingFormat(str, Enum):
    STANDARD = "standard"
    TIME_TRIAL = "time_trial"
    NONE = "none"
    PREVIOUS_RACE = "previous_race"

    @property
    def uses_time(self) -> bool:
        """Whether qualifying order comes from lap times rather than given positions."""
        return self in (QualifyingFormat.STANDARD, QualifyingFormat.TIME_TRIAL)


class GridSourceKind(str, Enum):
    SELF_QUALIFYING = "self_qualifying"
    PREVIOUS_SESSION = "previous_session"
    REVERSE_PREVIOUS_SESSION = "reverse_previous_session"
    NONE = "none"


class LengthType(str, Enum):
    LAPS = "laps"
    TIME = "time"


# Grid source names used by the league backend
_GRID_SOURCE_ALIASES = {
    "qualifying": GridSourceKind.SELF_QUALIFYING.value,
    "previous_race": GridSourceKind.PREVIOUS_SESSION.value,
    "reverse_previous": GridSourceKind.REVERSE_PREVIOUS_SESSION.value,
    "manual": GridSourceKind.NONE.value,
}


class PointsPolicy(BaseModel):
    """Position-based points: a named template or an explicit position->points map.

    The explicit mapping wins when both are given.
    """

    model_config = ConfigDict(frozen=True)

    template: str | None = None
    mapping: dict[int, float] | None = None

    @field_validator("mapping")
    @classmethod
    def _check_mapping(cls, value: dict[int, float] | None) -> dict[int, float] | None:
        if value is None:
            return None
        for position, points in value.items():
            if position < 1:
                raise ValueError(f"points position must be >= 1, got {position}")
            if points < 0:
                raise ValueError(f"points for position {position} must be non-negative")
        return value


class BonusPolicy(BaseModel):
    """Pole and fastest-lap bonus amounts with optional top-N eligibility."""

    model_config = ConfigDict(frozen=True)

    pole_points: float = Field(0, ge=0)
    pole_top_n: int | None = Field(None, ge=1)
    fastest_lap_points: float = Field(0, ge=0)
    fastest_lap_top_n: int | None = Field(None, ge=1)


class SessionConfig(BaseModel):
    """Configuration of one race or qualifying session within a round."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=0)
    id: int | None = None
    kind: SessionKind = SessionKind.RACE
    name: str | None = None
    qualifying_format: QualifyingFormat = QualifyingFormat.STANDARD
    grid_source: GridSourceKind = GridSourceKind.NONE
    # Grid references: by session number, or by backend session id
    grid_source_session: int | None = None
    grid_source_session_id: int | None = Field(
        None, validation_alias=AliasChoices("grid_source_session_id", "grid_source_race_id"),
    )
    length_type: LengthType = LengthType.LAPS
    length_value: int | None = Field(None, ge=0)
    race_divisions: bool = False
    race_points: bool = True
    points: PointsPolicy = PointsPolicy()
    bonus: BonusPolicy = BonusPolicy()
    dnf_points: float = Field(0, ge=0)
    dns_points: float = Field(0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _from_backend_fields(cls, data: Any) -> Any:
        """Accept the league backend's race field names alongside our own."""
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if "number" not in data and "race_number" in data:
            # Qualifiers carry no race number
            data["number"] = data.pop("race_number") or 0
        if "kind" not in data and "is_qualifier" in data:
            data["kind"] = SessionKind.QUALIFYING if data.pop("is_qualifier") else SessionKind.RACE

        source = data.get("grid_source")
        if isinstance(source, str):
            data["grid_source"] = _GRID_SOURCE_ALIASES.get(source, source)

        if "points" not in data and ("points_system" in data or "points_template" in data):
            data["points"] = {
                "mapping": data.pop("points_system", None),
                "template": data.pop("points_template", None),
            }

        if "bonus" not in data:
            bonus: dict[str, Any] = {}
            if data.get("qualifying_pole") is not None:
                bonus["pole_points"] = data.pop("qualifying_pole")
            if data.pop("qualifying_pole_top_10", False):
                bonus["pole_top_n"] = TOP_POSITIONS_LIMIT
            if data.get("fastest_lap") is not None:
                bonus["fastest_lap_points"] = data.pop("fastest_lap")
            if data.pop("fastest_lap_top_10", False):
                bonus["fastest_lap_top_n"] = TOP_POSITIONS_LIMIT
            if bonus:
                data["bonus"] = bonus

        return data

    @property
    def is_qualifying(self) -> bool:
        return self.kind == SessionKind.QUALIFYING

    @property
    def ranks_by_time(self) -> bool:
        """False for qualifying formats that carry explicit positions instead of times."""
        return not self.is_qualifying or self.qualifying_format.uses_time

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        return "Qualifying" if self.is_qualifying else f"Race {self.number}"
