"""Shared test fixtures and sample API responses."""

from __future__ import annotations

from typing import Any

import pytest

from league_results.models import ResultEntry, RoundPayload, SessionSnapshot

BASE_URL = "http://localhost:8000/api"


SAMPLE_DIVISIONS = [
    {"id": 1, "name": "Pro", "description": "Top split"},
    {"id": 2, "name": "Am", "description": None},
]

# Backend-shaped qualifying session (field names as stored by the league site)
SAMPLE_QUALIFYING = {
    "race_number": 0,
    "is_qualifier": True,
    "name": "Qualifying",
    "qualifying_format": "standard",
    "grid_source": "manual",
    "race_divisions": True,
    "qualifying_pole": 1,
    "results": [
        {"driver_id": 1, "driver_name": "Alice Moreau", "division_id": 1,
         "fastest_lap": "1:30.000", "has_pole": True},
        {"driver_id": 2, "driver_name": "Ben Okafor", "division_id": 1,
         "fastest_lap": "1:30.500"},
        {"driver_id": 3, "driver_name": "Chloe Lindqvist", "division_id": 2,
         "fastest_lap": "1:31.000", "has_pole": True},
        {"driver_id": 4, "driver_name": "Dev Patel", "division_id": 2,
         "fastest_lap": "1:32.250"},
    ],
}

SAMPLE_RACE = {
    "race_number": 1,
    "is_qualifier": False,
    "grid_source": "qualifying",
    "race_divisions": True,
    "length_type": "laps",
    "length_value": 30,
    "points_system": {"1": 25, "2": 18},
    "fastest_lap": 1,
    "dnf_points": 0,
    "dns_points": 0,
    "results": [
        {"driver_id": 1, "driver_name": "Alice Moreau", "division_id": 1,
         "race_time": "45:00.000", "fastest_lap": "1:31.000"},
        {"driver_id": 2, "driver_name": "Ben Okafor", "division_id": 1,
         "race_time": "44:58.000", "fastest_lap": "1:30.800", "has_fastest_lap": True},
        {"driver_id": 3, "driver_name": "Chloe Lindqvist", "division_id": 2,
         "race_time": "46:00.000", "penalties": 5000, "fastest_lap": "1:32.000"},
        {"driver_id": 4, "driver_name": "Dev Patel", "division_id": 2,
         "race_time": None, "dnf": True},
    ],
}

SAMPLE_ROUND = {
    "id": 12,
    "round_number": 3,
    "name": "Spa",
    "status": "completed",
}

SAMPLE_ROUND_PAYLOAD = {
    "round": SAMPLE_ROUND,
    "divisions": SAMPLE_DIVISIONS,
    "race_events": [SAMPLE_QUALIFYING, SAMPLE_RACE],
}

SAMPLE_RESULT_ENTRY = {
    "driver_id": 7,
    "driver_name": "Gia Russo",
    "division_id": None,
    "original_race_time": "1:02:03.456",
    "penalties": "5.000",
    "fastest_lap": "1:55.123",
    "dnf": False,
    "dns": False,
}


def make_entry(driver_id: int | str, **kwargs: Any) -> ResultEntry:
    """Build a ResultEntry; times may be given as ms or clock text."""
    return ResultEntry.model_validate({"driver_id": driver_id, **kwargs})


def make_session(
    number: int = 1,
    results: list[ResultEntry | dict[str, Any]] | tuple = (),
    **kwargs: Any,
) -> SessionSnapshot:
    """Build a race session snapshot (pass kind='qualifying' for qualifying)."""
    return SessionSnapshot.model_validate({"number": number, "results": list(results), **kwargs})


def make_payload(sessions: list[SessionSnapshot], **kwargs: Any) -> RoundPayload:
    return RoundPayload.model_validate({
        "round": {"round_number": 1},
        "sessions": sessions,
        **kwargs,
    })


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def sample_payload() -> RoundPayload:
    return RoundPayload.model_validate(SAMPLE_ROUND_PAYLOAD)


@pytest.fixture(autouse=True, scope="session")
def _log_to_tmp(tmp_path_factory):
    """Keep engine log output out of the working tree."""
    import league_results._logging as mod

    log_dir = tmp_path_factory.mktemp("logs")
    old_dir, old_file = mod._LOG_DIR, mod._LOG_FILE
    mod._LOG_DIR = str(log_dir)
    mod._LOG_FILE = str(log_dir / "engine.log")
    yield log_dir
    mod._LOG_DIR, mod._LOG_FILE = old_dir, old_file
