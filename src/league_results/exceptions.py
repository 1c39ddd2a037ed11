"""Custom exceptions for the league results engine and client."""

from __future__ import annotations


class LeagueResultsError(Exception):
    """Base exception for all league results errors."""


class ParseError(LeagueResultsError):
    """Raised when race-clock text cannot be parsed.

    Only ``parse_time_strict`` raises this; every other caller recovers it as
    "no time".
    """

    def __init__(self, text: object) -> None:
        self.text = text
        super().__init__(f"Invalid time value: {text!r}")


class ConfigurationError(LeagueResultsError, ValueError):
    """Raised when a session or round configuration cannot be evaluated."""


class LeagueResultsConnectionError(LeagueResultsError):
    """Raised when the client cannot connect to the API."""


class LeagueResultsTimeoutError(LeagueResultsError):
    """Raised when a request to the API times out."""


class LeagueResultsAPIError(LeagueResultsError):
    """Raised when the API returns an error response (4xx/5xx)."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


class LeagueResultsValidationError(LeagueResultsError):
    """Raised when API response data fails model validation."""
