"""Driver result entry model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from league_results.constants import UNKNOWN_DRIVER_NAME
from league_results.timing import parse_time


class ResultEntry(BaseModel):
    """One driver's recorded result within a session.

    Time fields hold milliseconds. Clock text such as ``"1:32.456"`` is accepted
    on input; text that cannot be parsed is treated as "no time yet".
    """

    model_config = ConfigDict(frozen=True)

    driver_id: int | str
    driver_name: str | None = None
    division_id: int | None = None
    team_id: int | None = None
    team_name: str | None = None
    race_time_ms: int | None = Field(
        None, validation_alias=AliasChoices("race_time_ms", "race_time", "original_race_time"),
    )
    penalty_ms: int | None = Field(
        None, validation_alias=AliasChoices("penalty_ms", "penalties"),
    )
    fastest_lap_ms: int | None = Field(
        None, validation_alias=AliasChoices("fastest_lap_ms", "fastest_lap"),
    )
    position: int | None = Field(None, ge=1)
    dnf: bool = False
    dns: bool = False
    has_pole: bool = False
    has_fastest_lap: bool = False

    @field_validator("race_time_ms", "penalty_ms", "fastest_lap_ms", mode="before")
    @classmethod
    def _parse_clock(cls, value: Any) -> int | None:
        return parse_time(value)

    @model_validator(mode="before")
    @classmethod
    def _dns_over_dnf(cls, data: Any) -> Any:
        # A driver who never started cannot also have retired
        if isinstance(data, dict) and data.get("dns") and data.get("dnf"):
            data = {**data, "dnf": False}
        return data

    @property
    def is_classified(self) -> bool:
        """False for DNF and DNS entries."""
        return not (self.dnf or self.dns)

    @property
    def display_name(self) -> str:
        return self.driver_name or UNKNOWN_DRIVER_NAME
