"""league-results: race results and round standings for racing leagues."""

from league_results.client import AsyncLeagueResultsClient, LatestRoundFetcher, LeagueResultsClient
from league_results.engine import RoundResults, RoundResultsService
from league_results.exceptions import (
    ConfigurationError,
    LeagueResultsAPIError,
    LeagueResultsConnectionError,
    LeagueResultsError,
    LeagueResultsTimeoutError,
    LeagueResultsValidationError,
    ParseError,
)
from league_results.models import ResultEntry, RoundPayload, SessionConfig
from league_results.timing import format_gap, format_time, normalize_time, parse_time

__all__ = [
    "AsyncLeagueResultsClient",
    "ConfigurationError",
    "LatestRoundFetcher",
    "LeagueResultsAPIError",
    "LeagueResultsClient",
    "LeagueResultsConnectionError",
    "LeagueResultsError",
    "LeagueResultsTimeoutError",
    "LeagueResultsValidationError",
    "ParseError",
    "ResultEntry",
    "RoundPayload",
    "RoundResults",
    "RoundResultsService",
    "SessionConfig",
    "format_gap",
    "format_time",
    "normalize_time",
    "parse_time",
]

__version__ = "0.1.0"
