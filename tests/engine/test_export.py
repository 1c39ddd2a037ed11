"""Tests for tabular export."""

from __future__ import annotations

import io

from league_results.engine.common import division_names
from league_results.engine.export import (
    cross_division_table,
    qualifying_results_table,
    race_results_table,
    session_table,
    standings_table,
    team_standings_table,
    write_csv,
)
from league_results.engine.points import score_session
from league_results.engine.ranking import rank_session
from league_results.models import CrossDivisionEntry, Division, RoundStanding, TeamStanding
from tests.conftest import make_entry, make_session

NAMES = division_names([Division(id=1, name="Pro")])


def _scored(session):
    return score_session(rank_session(session, session.results), session)


RACE = make_session(1, [
    make_entry(1, driver_name="Alice", division_id=1, race_time_ms=2_700_000,
               penalty_ms=5_000, has_fastest_lap=True),
    make_entry(2, division_id=1, race_time_ms=2_710_000),
    make_entry(3, driver_name="Cara", dnf=True),
], points={"template": "f1"}, bonus={"fastest_lap_points": 1})


class TestRaceResultsTable:
    def test_headers(self) -> None:
        table = race_results_table(_scored(RACE), NAMES)
        assert table.headers == (
            "Position", "Division", "Driver", "Race Time", "Time Difference",
            "Penalties", "Fastest Lap", "Points",
        )

    def test_rows(self) -> None:
        table = race_results_table(_scored(RACE), NAMES)
        assert len(table) == 3
        assert table.rows[0] == [1, "Pro", "Alice", "45:05.000", "-", "00:05.000", "Yes", 26]
        assert table.rows[1] == [2, "Pro", "Unknown Driver", "45:10.000", "+00:05.000", "-", "", 18]
        assert table.rows[2][:4] == [3, "", "Cara", "DNF"]

    def test_driver_name_index_overrides(self) -> None:
        table = race_results_table(_scored(RACE), driver_names={2: "Bruno"})
        assert table.rows[1][2] == "Bruno"
        assert table.rows[1][1] == ""


class TestQualifyingTable:
    def test_rows(self) -> None:
        quali = make_session(0, [
            make_entry(1, driver_name="Alice", fastest_lap_ms=90_000),
            make_entry(2, driver_name="Bruno", fastest_lap_ms=90_250),
        ], kind="qualifying")
        table = qualifying_results_table(_scored(quali))
        assert table.headers[3] == "Qualifying Lap"
        assert table.rows == [
            [1, "", "Alice", "01:30.000", "-"],
            [2, "", "Bruno", "01:30.250", "+00:00.250"],
        ]
        assert session_table(_scored(quali)).headers == table.headers

    def test_session_table_picks_race_layout(self) -> None:
        assert session_table(_scored(RACE)).headers[3] == "Race Time"


class TestStandingsTable:
    def test_rows(self) -> None:
        standings = [
            RoundStanding(driver_id=1, position=1, total_points=26, driver_name="Alice",
                          division_id=1, race_points=26, fastest_lap_points=1, positions_gained=2),
            RoundStanding(driver_id=9, position=2, total_points=0, division_id=5),
        ]
        table = standings_table(standings, NAMES)
        assert table.headers[-1] == "Total Points"
        assert table.rows[0] == [1, "Pro", "Alice", 26, 1, 0, 0, 2, 26]
        assert table.rows[1][1:3] == ["Unknown Division", "Unknown Driver"]


class TestCrossDivisionTable:
    def test_rows(self) -> None:
        entries = [
            CrossDivisionEntry(position=1, driver_id=1, time_ms=90_000, driver_name="Alice", division_id=1),
            CrossDivisionEntry(position=2, driver_id=2, time_ms=90_100, gap_ms=100),
        ]
        table = cross_division_table(entries, time_header="Fastest Lap", division_names=NAMES)
        assert table.headers == ("Position", "Division", "Driver", "Fastest Lap", "Time Difference")
        assert table.rows[0] == [1, "Pro", "Alice", "01:30.000", "-"]
        assert table.rows[1] == [2, "", "Unknown Driver", "01:30.100", "+00:00.100"]


class TestWriteCsv:
    def test_writes_header_and_rows(self) -> None:
        buffer = io.StringIO()
        count = write_csv(race_results_table(_scored(RACE), NAMES), buffer)
        lines = buffer.getvalue().splitlines()
        assert count == 3
        assert lines[0] == "Position,Division,Driver,Race Time,Time Difference,Penalties,Fastest Lap,Points"
        assert lines[1] == "1,Pro,Alice,45:05.000,-,00:05.000,Yes,26"
        assert len(lines) == 4


class TestTeamStandingsTable:
    def test_rows(self) -> None:
        table = team_standings_table([
            TeamStanding(team_id=1, position=1, total_points=44.0, team_name="Apex", driver_ids=(1, 2)),
            TeamStanding(team_id=7, position=2, total_points=12.5, driver_ids=(9,)),
        ])
        assert table.headers == ("Position", "Team", "Drivers Counted", "Total Points")
        assert table.rows == [[1, "Apex", 2, 44], [2, "Unknown Team", 1, 12.5]]
