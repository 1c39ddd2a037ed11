"""Starting-grid resolution from a session's configured grid source."""

from __future__ import annotations

from typing import Iterable, Mapping, TypeVar

from league_results.engine.ranking import SessionRanking
from league_results.exceptions import ConfigurationError
from league_results.models.round import SessionSnapshot
from league_results.models.session import GridSourceKind, SessionConfig

_REFERENCING_KINDS = (
    GridSourceKind.PREVIOUS_SESSION,
    GridSourceKind.REVERSE_PREVIOUS_SESSION,
)


S = TypeVar("S", bound=SessionConfig)


def sessions_by_id(sessions: Iterable[S]) -> dict[int, S]:
    """Backend session id -> session, for sessions that carry one."""
    return {s.id: s for s in sessions if s.id is not None}


def _referenced_number(
    session: SessionConfig,
    by_id: Mapping[int, SessionConfig],
) -> int | None:
    """The session number *session*'s grid points at, resolving backend ids."""
    if session.grid_source_session is not None:
        return session.grid_source_session
    if session.grid_source_session_id is None:
        return None
    source = by_id.get(session.grid_source_session_id)
    if source is None:
        raise ConfigurationError(
            f"{session.label} references session id {session.grid_source_session_id}, "
            "which is not in this round",
        )
    return source.number


def _source_session_number(
    session: SessionConfig,
    sessions_by_number: Mapping[int, SessionSnapshot],
    by_id: Mapping[int, SessionSnapshot],
) -> int:
    """Return the number of the session whose order seeds *session*'s grid."""
    referenced = _referenced_number(session, by_id)
    if session.grid_source == GridSourceKind.SELF_QUALIFYING:
        if session.is_qualifying:
            return session.number
        if referenced is not None:
            source = referenced
        else:
            source = next(
                (number for number, s in sessions_by_number.items() if s.is_qualifying),
                None,
            )
            if source is None:
                raise ConfigurationError(
                    f"{session.label} takes its grid from qualifying, "
                    "but the round has no qualifying session",
                )
    else:
        if referenced is None:
            raise ConfigurationError(
                f"{session.label} grid source '{session.grid_source.value}' "
                "requires a source session",
            )
        source = referenced

    if source == session.number:
        raise ConfigurationError(f"{session.label} cannot take its grid from itself")
    if source not in sessions_by_number:
        raise ConfigurationError(
            f"{session.label} references session {source}, which is not in this round",
        )
    return source


def resolve_grid(
    session: SessionConfig,
    sessions_by_number: Mapping[int, SessionSnapshot],
    rankings: Mapping[int, SessionRanking],
    by_id: Mapping[int, SessionSnapshot] | None = None,
) -> list[int | str] | None:
    """Return the starting order (driver ids, pole first) or None without a grid.

    *rankings* maps session number to the ranking in the same scope (whole
    session or one division) as the session being resolved. *by_id* indexes
    the round's sessions by backend id; it is built from *sessions_by_number*
    when omitted.

    Raises:
        ConfigurationError: the session references itself, a session missing
            from the round, or a session that has no results yet.
    """
    if session.grid_source == GridSourceKind.NONE:
        return None

    if by_id is None:
        by_id = sessions_by_id(sessions_by_number.values())
    source = _source_session_number(session, sessions_by_number, by_id)

    if source != session.number and not sessions_by_number[source].results:
        raise ConfigurationError(
            f"{session.label} takes its grid from session {source}, "
            "which has no results yet",
        )

    ranking = rankings.get(source)
    order = ranking.finishing_order() if ranking is not None else []
    if session.grid_source == GridSourceKind.REVERSE_PREVIOUS_SESSION:
        order.reverse()
    return order


def grid_positions(order: Iterable[int | str] | None) -> dict[int | str, int]:
    """Driver id -> 1-based grid slot."""
    if order is None:
        return {}
    return {driver_id: slot for slot, driver_id in enumerate(order, start=1)}


def validate_grid_sources(sessions: Iterable[SessionConfig]) -> None:
    """Check session numbers are unique, every grid reference resolves and no
    references form a cycle.

    Raises:
        ConfigurationError: on a duplicate session number or id, a
            self-reference, dangling reference or cycle.
    """
    by_number: dict[int, SessionConfig] = {}
    by_id: dict[int, SessionConfig] = {}
    for session in sessions:
        if session.number in by_number:
            raise ConfigurationError(
                f"Session number {session.number} appears more than once in the round",
            )
        by_number[session.number] = session
        if session.id is not None:
            if session.id in by_id:
                raise ConfigurationError(
                    f"Session id {session.id} appears more than once in the round",
                )
            by_id[session.id] = session

    edges: dict[int, int] = {}
    for session in by_number.values():
        referencing = session.grid_source in _REFERENCING_KINDS or (
            session.grid_source == GridSourceKind.SELF_QUALIFYING
            and not session.is_qualifying
            and (
                session.grid_source_session is not None
                or session.grid_source_session_id is not None
            )
        )
        if not referencing:
            continue
        source = _referenced_number(session, by_id)
        if source is None:
            raise ConfigurationError(
                f"{session.label} grid source '{session.grid_source.value}' "
                "requires a source session",
            )
        if source == session.number:
            raise ConfigurationError(f"{session.label} cannot take its grid from itself")
        if source not in by_number:
            raise ConfigurationError(
                f"{session.label} references session {source}, which is not in this round",
            )
        edges[session.number] = source

    for start in edges:
        seen = {start}
        current = edges.get(start)
        while current is not None:
            if current in seen:
                raise ConfigurationError(
                    f"Grid sources form a cycle through session {current}",
                )
            seen.add(current)
            current = edges.get(current)
