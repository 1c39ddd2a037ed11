"""Opt-in tie-breaker rules for round standings.

Rules run in the configured order. Within a group of drivers level on points,
each pass picks the single winner of the first rule that separates someone,
moves them ahead and repeats on the rest. Drivers no rule can separate keep
their stable first-appearance order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence, TypeVar

from league_results.engine.points import ScoredSession
from league_results.models.round import TiebreakerRule
from league_results.models.standings import RoundStanding

DriverId = int | str
S = TypeVar("S", bound=RoundStanding)

UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class TiebreakerResolution:
    driver_ids: tuple[DriverId, ...]
    rule: TiebreakerRule | None
    winner_id: DriverId | None
    explanation: str

    @property
    def was_resolved(self) -> bool:
        return self.winner_id is not None

    @property
    def rule_name(self) -> str:
        return self.rule.value if self.rule is not None else UNRESOLVED


@dataclass(frozen=True)
class TiebreakerInfo:
    resolutions: tuple[TiebreakerResolution, ...] = ()
    applied_rules: tuple[TiebreakerRule, ...] = ()
    had_unresolved_ties: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.resolutions


def ordinal(number: int) -> str:
    """1 -> '1st', 12 -> '12th', 23 -> '23rd'."""
    if 11 <= number % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def _positions(
    sessions: Iterable[ScoredSession],
    driver_ids: Sequence[DriverId],
    include: Callable[[ScoredSession], bool],
) -> dict[DriverId, list[int]]:
    """Driver -> finishing positions in the sessions matching *include*, best first."""
    wanted = set(driver_ids)
    found: dict[DriverId, list[int]] = {}
    for scored in sessions:
        if not include(scored):
            continue
        for entry in scored.entries:
            if entry.driver_id in wanted and not entry.ranked.entry.dns:
                found.setdefault(entry.driver_id, []).append(entry.position)
    for positions in found.values():
        positions.sort()
    return found


def _single_best(
    best: dict[DriverId, int],
    label: str,
) -> tuple[DriverId | None, str]:
    if not best:
        return None, f"No {label} results available"
    top = min(best.values())
    winners = [driver_id for driver_id, position in best.items() if position == top]
    if len(winners) > 1:
        return None, f"Multiple drivers tied with {label} position {top}"
    return winners[0], f"Driver won with {label} position {top}"


def _highest_qualifying(driver_ids, sessions):
    found = _positions(sessions, driver_ids, lambda s: s.session.is_qualifying)
    return _single_best({d: p[0] for d, p in found.items()}, "qualifying")


def _race_1_result(driver_ids, sessions):
    found = _positions(
        sessions,
        driver_ids,
        lambda s: not s.session.is_qualifying and s.session.number == 1,
    )
    return _single_best({d: p[0] for d, p in found.items()}, "Race 1")


def _countback(driver_ids, sessions):
    found = _positions(sessions, driver_ids, lambda s: not s.session.is_qualifying)
    if not found:
        return None, "No race results available for countback"

    contenders = [d for d in driver_ids if d in found]
    depth = max(len(p) for p in found.values())
    for index in range(depth):
        compared = {d: found[d][index] for d in contenders if index < len(found[d])}
        if not compared:
            break
        top = min(compared.values())
        winners = [d for d, position in compared.items() if position == top]
        if len(winners) == 1:
            return winners[0], f"Driver won on {ordinal(index + 1)} best result (P{top})"
        contenders = winners
    return None, "Drivers remain tied after countback through all results"


_RULES = {
    TiebreakerRule.HIGHEST_QUALIFYING_POSITION: _highest_qualifying,
    TiebreakerRule.RACE_1_BEST_RESULT: _race_1_result,
    TiebreakerRule.BEST_RESULT_ALL_RACES: _countback,
}


def _order_group(
    group: list[S],
    rules: Sequence[TiebreakerRule],
    sessions: Sequence[ScoredSession],
    resolutions: list[TiebreakerResolution],
) -> list[S]:
    remaining = list(group)
    ordered: list[S] = []
    while len(remaining) > 1:
        driver_ids = tuple(s.driver_id for s in remaining)
        resolution = None
        for rule in rules:
            winner, explanation = _RULES[rule](driver_ids, sessions)
            if winner is not None:
                resolution = TiebreakerResolution(driver_ids, rule, winner, explanation)
                break
        if resolution is None:
            resolutions.append(TiebreakerResolution(
                driver_ids, None, None, "No tiebreaker rule could resolve this tie",
            ))
            break
        resolutions.append(resolution)
        index = driver_ids.index(resolution.winner_id)
        ordered.append(remaining.pop(index))
    return ordered + remaining


def resolve_ties(
    standings: Sequence[S],
    rules: Sequence[TiebreakerRule],
    sessions: Sequence[ScoredSession],
    points: Callable[[S], float] = lambda s: s.total_points,
) -> tuple[list[S], TiebreakerInfo]:
    """Reorder runs of equal *points* in already-sorted *standings*.

    Positions are left untouched; the caller renumbers the returned order.
    """
    if not rules:
        return list(standings), TiebreakerInfo()

    resolutions: list[TiebreakerResolution] = []
    result: list[S] = []
    index = 0
    while index < len(standings):
        end = index + 1
        while end < len(standings) and points(standings[end]) == points(standings[index]):
            end += 1
        group = list(standings[index:end])
        if len(group) > 1:
            group = _order_group(group, rules, sessions, resolutions)
        result.extend(group)
        index = end

    applied: list[TiebreakerRule] = []
    for resolution in resolutions:
        if resolution.rule is not None and resolution.rule not in applied:
            applied.append(resolution.rule)

    info = TiebreakerInfo(
        resolutions=tuple(resolutions),
        applied_rules=tuple(applied),
        had_unresolved_ties=any(not r.was_resolved for r in resolutions),
    )
    return result, info
