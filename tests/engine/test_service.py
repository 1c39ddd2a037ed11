"""Tests for the round compute service."""

from __future__ import annotations

import pytest

from league_results.engine.service import RoundResultsService
from league_results.exceptions import ConfigurationError
from league_results.models import RoundPayload
from tests.conftest import SAMPLE_ROUND_PAYLOAD, make_entry, make_payload, make_session


@pytest.fixture
def service() -> RoundResultsService:
    return RoundResultsService()


class TestCompute:
    def test_standings_per_division(self, service, sample_payload) -> None:
        results = service.compute(sample_payload)
        pro = results.standings_for(1)
        assert [(s.driver_id, s.total_points) for s in pro] == [(2, 26), (1, 19)]
        assert [s.position for s in pro] == [1, 2]
        assert pro[0].positions_gained == 1
        assert pro[1].pole_points == 1
        am = results.standings_for(2)
        assert [(s.driver_id, s.total_points) for s in am] == [(3, 26), (4, 0)]
        assert am[1].has_any_dnf
        assert not results.precomputed_standings

    def test_grid_comes_from_division_qualifying(self, service, sample_payload) -> None:
        results = service.compute(sample_payload)
        race_pro = results.session(1, 1)
        by_driver = {e.driver_id: e for e in race_pro.entries}
        assert by_driver[2].grid_position == 2
        assert by_driver[2].positions_gained == 1
        assert by_driver[1].positions_gained == -1
        race_am = results.session(1, 2)
        assert {e.driver_id: e.positions_gained for e in race_am.entries} == {3: 0, 4: None}

    def test_rankings_and_gaps(self, service, sample_payload) -> None:
        results = service.compute(sample_payload)
        ranking = results.rankings[1][2]
        assert ranking.finishing_order() == [3, 4]
        assert ranking.entries[0].effective_time_ms == 46 * 60_000 + 5_000
        assert results.rankings[0][1].entries[1].gap_ms == 500

    def test_cross_division(self, service, sample_payload) -> None:
        results = service.compute(sample_payload)
        assert [e.driver_id for e in results.cross_division.qualifying_times] == [1, 2, 3, 4]
        assert not results.precomputed_cross_division

    def test_division_names(self, service, sample_payload) -> None:
        results = service.compute(sample_payload)
        assert results.division_names == {None: "No Division", 1: "Pro", 2: "Am"}

    def test_unsplit_round(self, service) -> None:
        payload = make_payload([
            make_session(1, [make_entry("A", race_time_ms=90_000), make_entry("B", race_time_ms=91_000)],
                         points={"template": "f1"}),
            make_session(2, [make_entry("B", race_time_ms=91_000), make_entry("A", race_time_ms=90_000)],
                         points={"template": "f1"}, grid_source="reverse_previous_session",
                         grid_source_session=1),
        ])
        results = service.compute(payload)
        standings = results.standings_for()
        assert [(s.driver_id, s.total_points) for s in standings] == [("A", 50), ("B", 36)]
        # Reversed grid puts B on pole and A second
        assert {e.driver_id: e.positions_gained for e in results.session(2).entries} == {"A": 1, "B": -1}
        assert standings[0].positions_gained == 1
        assert len(results.scored_sessions()) == 2

    def test_division_missing_from_grid_source(self, service) -> None:
        payload = make_payload(
            [
                make_session(0, [make_entry(1, division_id=1, fastest_lap_ms=90_000)],
                             kind="qualifying"),
                make_session(1, [
                    make_entry(1, division_id=1, race_time_ms=90_000),
                    make_entry(2, division_id=2, race_time_ms=91_000),
                ], grid_source="self_qualifying"),
            ],
            divisions=[{"id": 1, "name": "Pro"}, {"id": 2, "name": "Am"}],
        )
        results = service.compute(payload)
        assert results.session(1, 1).entries[0].positions_gained == 0
        assert results.session(1, 2).entries[0].positions_gained is None

    def test_grid_cycle_raises(self, service) -> None:
        payload = make_payload([
            make_session(1, [make_entry("A", race_time_ms=90_000)],
                         grid_source="previous_session", grid_source_session=2),
            make_session(2, [make_entry("A", race_time_ms=90_000)],
                         grid_source="previous_session", grid_source_session=1),
        ])
        with pytest.raises(ConfigurationError, match="cycle"):
            service.compute(payload)

    def test_unknown_template_raises(self, service) -> None:
        payload = make_payload([
            make_session(1, [make_entry("A", race_time_ms=90_000)], points={"template": "nope"}),
        ])
        with pytest.raises(ConfigurationError):
            service.compute(payload)

    def test_duplicate_session_numbers_raise(self, service) -> None:
        payload = make_payload([
            make_session(1, [make_entry("A", race_time_ms=90_000)]),
            make_session(1, [make_entry("B", race_time_ms=90_000)]),
        ])
        with pytest.raises(ConfigurationError, match="more than once"):
            service.compute(payload)

    def test_backend_grid_by_race_id(self, service) -> None:
        payload = RoundPayload.model_validate({
            "round": {"round_number": 4},
            "race_events": [
                {"id": 31, "race_number": 1, "is_qualifier": False, "grid_source": "manual",
                 "points_system": {"1": 10, "2": 5},
                 "results": [{"driver_id": 1, "race_time": "30:00.000"},
                             {"driver_id": 2, "race_time": "30:01.000"}]},
                {"id": 32, "race_number": 2, "is_qualifier": False,
                 "grid_source": "reverse_previous", "grid_source_race_id": 31,
                 "points_system": {"1": 10, "2": 5},
                 "results": [{"driver_id": 1, "race_time": "30:00.000"},
                             {"driver_id": 2, "race_time": "30:02.000"}]},
            ],
        })
        results = service.compute(payload)
        race_2 = {e.driver_id: e for e in results.session(2).entries}
        assert race_2[2].grid_position == 1
        assert race_2[1].positions_gained == 1
        assert race_2[2].positions_gained == -1

    def test_each_session_ranked_once_without_grids(self, service, monkeypatch) -> None:
        import league_results.engine.service as mod

        calls = []
        original = mod.rank_by_division

        def counting(session, results):
            calls.append(session.number)
            return original(session, results)

        monkeypatch.setattr(mod, "rank_by_division", counting)
        payload = make_payload(
            [
                make_session(0, [make_entry(1, division_id=1, fastest_lap_ms=90_000)],
                             kind="qualifying"),
                make_session(1, [
                    make_entry(1, division_id=1, race_time_ms=90_000),
                    make_entry(2, division_id=2, race_time_ms=91_000),
                ]),
                make_session(2, [
                    make_entry(1, division_id=1, race_time_ms=90_000),
                    make_entry(2, division_id=2, race_time_ms=91_000),
                ]),
            ],
            divisions=[{"id": 1, "name": "Pro"}, {"id": 2, "name": "Am"}],
        )
        service.compute(payload)
        assert sorted(calls) == [0, 1, 2]

    def test_regrouped_session_ranked_at_most_once(self, service, monkeypatch) -> None:
        import league_results.engine.service as mod

        calls = []
        original = mod.rank_session

        def counting(session, results):
            calls.append(session.number)
            return original(session, results)

        monkeypatch.setattr(mod, "rank_session", counting)
        # Races split by division take their grid from a combined race
        payload = make_payload([
            make_session(1, [make_entry(1, division_id=1, race_time_ms=90_000),
                             make_entry(2, division_id=2, race_time_ms=91_000)]),
            make_session(2, [make_entry(1, division_id=1, race_time_ms=90_000),
                             make_entry(2, division_id=2, race_time_ms=91_000)],
                         race_divisions=True, grid_source="previous_session", grid_source_session=1),
            make_session(3, [make_entry(1, division_id=1, race_time_ms=90_000),
                             make_entry(2, division_id=2, race_time_ms=91_000)],
                         race_divisions=True, grid_source="previous_session", grid_source_session=1),
        ])
        results = service.compute(payload)
        # Session 1 ranked once in rank(); sessions 2 and 3 regrouped once each
        assert sorted(calls) == [1, 2, 3]
        assert results.session(2, 1).entries[0].grid_position == 1
        assert results.session(2, 2).entries[0].grid_position == 1

    def test_empty_round(self, service) -> None:

        results = service.compute(make_payload([]))
        assert results.standings.tables == {}
        assert results.cross_division.is_empty

    def test_recomputes_from_scratch(self, service, sample_payload) -> None:
        first = service.compute(sample_payload)
        second = service.compute(sample_payload)
        assert first.standings == second.standings


class TestPrecomputed:
    def _payload(self) -> RoundPayload:
        return RoundPayload.model_validate({
            **SAMPLE_ROUND_PAYLOAD,
            "standings": [
                {"driver_id": 9, "position": 1, "total_points": 99, "division_id": 1},
            ],
            "race_time_results": [
                {"position": 1, "driver_id": 9, "time_ms": 1_000},
            ],
        })

    def test_passes_through_precomputed(self, service) -> None:
        results = service.compute(self._payload())
        assert results.precomputed_standings
        assert results.standings_for(1)[0].total_points == 99
        assert results.precomputed_cross_division
        assert results.cross_division.race_times[0].driver_id == 9
        assert results.cross_division.qualifying_times == ()
        # Session-level results are still computed
        assert results.session(1, 1) is not None

    def test_recompute_when_not_preferred(self) -> None:
        results = RoundResultsService(prefer_precomputed=False).compute(self._payload())
        assert not results.precomputed_standings
        assert [s.driver_id for s in results.standings_for(1)] == [2, 1]
        assert [e.driver_id for e in results.cross_division.race_times] == [2, 1, 3]


class TestTeamChampionship:
    def _payload(self, **kwargs) -> RoundPayload:
        return make_payload(
            [
                make_session(1, [
                    make_entry(1, team_id=1, race_time_ms=90_000),
                    make_entry(3, team_id=2, race_time_ms=90_500),
                    make_entry(2, team_id=1, race_time_ms=91_000),
                    make_entry(4, race_time_ms=92_000),
                ], points={"template": "f1"}),
            ],
            teams=[{"id": 1, "name": "Apex"}, {"id": 2, "name": "Borealis"}],
            **kwargs,
        )

    def test_off_by_default(self, service) -> None:
        assert service.compute(self._payload()).team_standings == ()

    def test_sums_team_drivers(self, service) -> None:
        results = service.compute(self._payload(team_championship={"enabled": True}))
        table = results.team_standings
        assert [(t.team_name, t.total_points) for t in table] == [("Apex", 40), ("Borealis", 18)]
        assert results.standings_for()[0].team_id == 1

    def test_driver_cap(self, service) -> None:
        results = service.compute(self._payload(
            team_championship_enabled=True, teams_drivers_for_calculation=1,
        ))
        assert [(t.team_id, t.total_points, t.driver_ids) for t in results.team_standings] == [
            (1, 25, (1,)),
            (2, 18, (3,)),
        ]
