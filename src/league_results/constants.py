"""Shared constants for the league results engine."""

from __future__ import annotations

import os

DEFAULT_BASE_URL = os.environ.get("LEAGUE_RESULTS_API_URL", "http://localhost:8000/api")
DEFAULT_TIMEOUT = 30.0

LOG_DIR = os.environ.get(
    "LEAGUE_RESULTS_LOG_DIR",
    os.path.join(os.getcwd(), "logs"),
)

TIME_PLACEHOLDER = "-"
NO_DIVISION_NAME = "No Division"
UNKNOWN_DRIVER_NAME = "Unknown Driver"
UNKNOWN_DIVISION_NAME = "Unknown Division"
UNKNOWN_TEAM_NAME = "Unknown Team"

# Default finishing threshold for "top 10 only" bonus restrictions
TOP_POSITIONS_LIMIT = 10

POINTS_TEMPLATES: dict[str, dict[int, float]] = {
    "f1": {1: 25, 2: 18, 3: 15, 4: 12, 5: 10, 6: 8, 7: 6, 8: 4, 9: 2, 10: 1},
    "f1_sprint": {1: 8, 2: 7, 3: 6, 4: 5, 5: 4, 6: 3, 7: 2, 8: 1},
    "motogp": {
        1: 25, 2: 20, 3: 16, 4: 13, 5: 11, 6: 10, 7: 9, 8: 8,
        9: 7, 10: 6, 11: 5, 12: 4, 13: 3, 14: 2, 15: 1,
    },
    "linear_10": {position: 11 - position for position in range(1, 11)},
}
