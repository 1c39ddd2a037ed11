"""Points assignment: position tables, bonuses and fixed DNF/DNS awards."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from league_results._logging import get_logger
from league_results.constants import POINTS_TEMPLATES
from league_results.engine.grid import grid_positions
from league_results.engine.ranking import RankedEntry, SessionRanking
from league_results.exceptions import ConfigurationError
from league_results.models.session import BonusPolicy, PointsPolicy, SessionConfig


@dataclass(frozen=True)
class PointsTable:
    """Sparse position -> points map. Positions not in the table score zero.

    Usage:
        table = PointsTable.from_mapping({1: 25, 2: 18, 3: 15})
        table.points_for(2)   # 18
        table.points_for(4)   # 0
    """

    points: Mapping[int, float] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Any]) -> PointsTable:
        """Validate and build a table. JSON string keys such as ``"1"`` are accepted.

        Raises:
            ConfigurationError: a key is not a position >= 1 or a value is negative.
        """
        points: dict[int, float] = {}
        for key, value in mapping.items():
            try:
                position = int(key)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Invalid points position: {key!r}") from exc
            if position < 1:
                raise ConfigurationError(f"Points position must be >= 1, got {position}")
            if position in points:
                raise ConfigurationError(f"Duplicate points position: {position}")
            if value is None or value < 0:
                raise ConfigurationError(
                    f"Points for position {position} must be non-negative, got {value!r}",
                )
            points[position] = value
        return cls(points=points)

    def points_for(self, position: int | None) -> float:
        if position is None:
            return 0
        return self.points.get(position, 0)

    def __len__(self) -> int:
        return len(self.points)


def resolve_points_table(policy: PointsPolicy) -> PointsTable:
    """Return the authoritative table for *policy*: explicit mapping, else template.

    Raises:
        ConfigurationError: the template name is not known.
    """
    if policy.mapping is not None:
        return PointsTable.from_mapping(policy.mapping)
    if policy.template is not None:
        template = POINTS_TEMPLATES.get(policy.template)
        if template is None:
            raise ConfigurationError(
                f"Unknown points template '{policy.template}' "
                f"(known: {', '.join(sorted(POINTS_TEMPLATES))})",
            )
        return PointsTable.from_mapping(template)
    return PointsTable()


@dataclass(frozen=True)
class ScoredEntry:
    ranked: RankedEntry
    base_points: float
    pole_points: float = 0
    fastest_lap_points: float = 0
    grid_position: int | None = None
    positions_gained: int | None = None

    @property
    def points(self) -> float:
        return self.base_points + self.pole_points + self.fastest_lap_points

    @property
    def driver_id(self) -> int | str:
        return self.ranked.driver_id

    @property
    def position(self) -> int:
        return self.ranked.position


@dataclass(frozen=True)
class ScoredSession:
    session: SessionConfig
    ranking: SessionRanking
    entries: tuple[ScoredEntry, ...]

    @property
    def division_id(self) -> int | None:
        return self.ranking.division_id


def within_top(position: int, top_n: int | None) -> bool:
    return top_n is None or position <= top_n


def _bonus_holder(
    entries: Iterable[RankedEntry],
    flag: str,
    session: SessionConfig,
) -> RankedEntry | None:
    """Return the single bonus-eligible entry carrying *flag*, warning on duplicates."""
    holders = [r for r in entries if getattr(r.entry, flag) and r.entry.is_classified]
    if len(holders) > 1:
        get_logger().warning(
            "%s: %d entries flagged %s; awarding only driver %r",
            session.label, len(holders), flag, holders[0].driver_id,
        )
    return holders[0] if holders else None


def _bonus_for(
    ranked: RankedEntry,
    holder: RankedEntry | None,
    amount: float,
    top_n: int | None,
) -> float:
    if holder is None or ranked is not holder:
        return 0
    return amount if within_top(ranked.position, top_n) else 0


def score_session(
    ranking: SessionRanking,
    session: SessionConfig,
    grid_order: Iterable[int | str] | None = None,
) -> ScoredSession:
    """Award points for a ranked session.

    Base points come from the session's points table by finishing position.
    DNF and DNS entries get the session's fixed DNF/DNS award instead and are
    never bonus-eligible. Pole bonus applies to qualifying sessions and the
    fastest-lap bonus to races; a holder outside the top-N restriction gets
    nothing and the bonus is not passed on.
    """
    table = resolve_points_table(session.points)
    bonus: BonusPolicy = session.bonus
    grid = grid_positions(grid_order)

    pole_holder = _bonus_holder(ranking.entries, "has_pole", session) if session.is_qualifying else None
    lap_holder = None if session.is_qualifying else _bonus_holder(ranking.entries, "has_fastest_lap", session)

    scored: list[ScoredEntry] = []
    for ranked in ranking.entries:
        entry = ranked.entry

        if not session.race_points:
            base = pole = lap = 0.0
        elif entry.dns:
            base, pole, lap = session.dns_points, 0, 0
        elif entry.dnf:
            base, pole, lap = session.dnf_points, 0, 0
        else:
            base = table.points_for(ranked.position)
            pole = _bonus_for(ranked, pole_holder, bonus.pole_points, bonus.pole_top_n)
            lap = _bonus_for(ranked, lap_holder, bonus.fastest_lap_points, bonus.fastest_lap_top_n)

        grid_slot = grid.get(entry.driver_id) if grid_order is not None else None
        gained = None
        if grid_slot is not None and entry.is_classified:
            gained = grid_slot - ranked.position

        scored.append(ScoredEntry(
            ranked=ranked,
            base_points=base,
            pole_points=pole,
            fastest_lap_points=lap,
            grid_position=grid_slot,
            positions_gained=gained,
        ))

    return ScoredSession(session=session, ranking=ranking, entries=tuple(scored))
