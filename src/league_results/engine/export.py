"""Flat tables of round results for CSV export."""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, TextIO

from league_results.constants import UNKNOWN_DRIVER_NAME, UNKNOWN_TEAM_NAME
from league_results.engine.common import division_label
from league_results.engine.points import ScoredSession
from league_results.models.result import ResultEntry
from league_results.models.standings import CrossDivisionEntry, RoundStanding, TeamStanding
from league_results.timing import format_gap, format_time

RACE_HEADERS = (
    "Position", "Division", "Driver", "Race Time", "Time Difference",
    "Penalties", "Fastest Lap", "Points",
)
QUALIFYING_HEADERS = ("Position", "Division", "Driver", "Qualifying Lap", "Time Difference")
STANDINGS_HEADERS = (
    "Position", "Division", "Driver", "Race Points", "Fastest Lap Points",
    "Pole Points", "Round Points", "Positions Gained", "Total Points",
)
TEAM_STANDINGS_HEADERS = ("Position", "Team", "Drivers Counted", "Total Points")


@dataclass(frozen=True)
class ExportTable:
    headers: tuple[str, ...]
    rows: list[list[Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def _driver(
    driver_id: int | str,
    name: str | None,
    driver_names: Mapping[int | str, str] | None,
) -> str:
    if driver_names and driver_id in driver_names:
        return driver_names[driver_id]
    return name or UNKNOWN_DRIVER_NAME


def _division(names: Mapping[int | None, str] | None, division_id: int | None) -> str:
    if names is None or division_id is None:
        return ""
    return division_label(names, division_id)


def _points(value: float) -> float | int:
    """Whole-number points export without a trailing '.0'."""
    return int(value) if float(value).is_integer() else value


def _status_or(entry: ResultEntry, text: str) -> str:
    if entry.dns:
        return "DNS"
    if entry.dnf:
        return "DNF"
    return text


def race_results_table(
    scored: ScoredSession,
    division_names: Mapping[int | None, str] | None = None,
    driver_names: Mapping[int | str, str] | None = None,
) -> ExportTable:
    rows = []
    for item in scored.entries:
        ranked = item.ranked
        entry = ranked.entry
        rows.append([
            ranked.position,
            _division(division_names, entry.division_id),
            _driver(entry.driver_id, entry.driver_name, driver_names),
            _status_or(entry, format_time(ranked.effective_time_ms)),
            format_gap(ranked.gap_ms),
            format_time(entry.penalty_ms),
            "Yes" if entry.has_fastest_lap else "",
            _points(item.points),
        ])
    return ExportTable(headers=RACE_HEADERS, rows=rows)


def qualifying_results_table(
    scored: ScoredSession,
    division_names: Mapping[int | None, str] | None = None,
    driver_names: Mapping[int | str, str] | None = None,
) -> ExportTable:
    rows = []
    for item in scored.entries:
        ranked = item.ranked
        entry = ranked.entry
        rows.append([
            ranked.position,
            _division(division_names, entry.division_id),
            _driver(entry.driver_id, entry.driver_name, driver_names),
            _status_or(entry, format_time(ranked.effective_time_ms)),
            format_gap(ranked.gap_ms),
        ])
    return ExportTable(headers=QUALIFYING_HEADERS, rows=rows)


def session_table(
    scored: ScoredSession,
    division_names: Mapping[int | None, str] | None = None,
    driver_names: Mapping[int | str, str] | None = None,
) -> ExportTable:
    """Race or qualifying layout, whichever fits the session."""
    if scored.session.is_qualifying:
        return qualifying_results_table(scored, division_names, driver_names)
    return race_results_table(scored, division_names, driver_names)


def standings_table(
    standings: Iterable[RoundStanding],
    division_names: Mapping[int | None, str] | None = None,
    driver_names: Mapping[int | str, str] | None = None,
) -> ExportTable:
    rows = [
        [
            s.position,
            _division(division_names, s.division_id),
            _driver(s.driver_id, s.driver_name, driver_names),
            _points(s.race_points),
            _points(s.fastest_lap_points),
            _points(s.pole_points),
            _points(s.round_points),
            s.positions_gained,
            _points(s.total_points),
        ]
        for s in standings
    ]
    return ExportTable(headers=STANDINGS_HEADERS, rows=rows)


def team_standings_table(standings: Iterable[TeamStanding]) -> ExportTable:
    rows = [
        [t.position, t.team_name or UNKNOWN_TEAM_NAME, len(t.driver_ids), _points(t.total_points)]
        for t in standings
    ]
    return ExportTable(headers=TEAM_STANDINGS_HEADERS, rows=rows)


def cross_division_table(
    entries: Iterable[CrossDivisionEntry],
    time_header: str = "Time",
    division_names: Mapping[int | None, str] | None = None,
    driver_names: Mapping[int | str, str] | None = None,
) -> ExportTable:
    rows = [
        [
            e.position,
            _division(division_names, e.division_id),
            _driver(e.driver_id, e.driver_name, driver_names),
            format_time(e.time_ms),
            format_gap(e.gap_ms),
        ]
        for e in entries
    ]
    return ExportTable(
        headers=("Position", "Division", "Driver", time_header, "Time Difference"),
        rows=rows,
    )


def write_csv(table: ExportTable, fp: TextIO) -> int:
    """Write *table* to an open text stream. Returns the number of data rows."""
    writer = csv.writer(fp)
    writer.writerow(table.headers)
    writer.writerows(table.rows)
    return len(table.rows)
