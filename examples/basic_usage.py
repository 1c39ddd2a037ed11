"""Basic usage examples for the league results client and engine."""

import sys

from league_results import LeagueResultsClient, RoundResultsService
from league_results.engine import cross_division_table, session_table, standings_table, write_csv
from league_results.timing import format_gap, format_time


def main(round_id: int = 1) -> None:
    with LeagueResultsClient() as client:
        payload = client.round_results(round_id)

    results = RoundResultsService().compute(payload)
    names = results.division_names

    print(f"=== Round {payload.round.round_number}: {payload.round.name or ''} ===")

    # Each session, per division when the round is split
    for number, by_division in results.scored.items():
        for division_id, scored in by_division.items():
            label = scored.session.label
            if payload.split_by_division:
                label += f" ({names.get(division_id, '?')})"
            print(f"\n--- {label} ---")
            for item in scored.entries:
                ranked = item.ranked
                time_text = format_time(ranked.effective_time_ms)
                print(
                    f"  P{ranked.position:<2} {ranked.entry.display_name:<20} "
                    f"{time_text:>12} {format_gap(ranked.gap_ms):>12} {item.points:>5g} pts"
                )

    print("\n=== Round standings ===")
    for division_id, table in results.standings.tables.items():
        if payload.split_by_division:
            print(f"  [{names.get(division_id, '?')}]")
        for s in table:
            print(f"  {s.position:>2}. {s.driver_name or s.driver_id:<20} {s.total_points:>5g}")

    if results.team_standings:
        print("\n=== Team standings ===")
        for t in results.team_standings:
            print(f"  {t.position:>2}. {t.team_name or t.team_id:<20} {t.total_points:>5g}")

    print("\n=== Fastest laps (all divisions) ===")
    write_csv(
        cross_division_table(results.cross_division.fastest_laps, "Fastest Lap", names),
        sys.stdout,
    )

    # CSV export of every table
    with open(f"round-{round_id}-standings.csv", "w", newline="", encoding="utf-8") as fp:
        write_csv(standings_table(results.standings.all(), names), fp)
    for scored in results.scored_sessions():
        suffix = f"-div{scored.division_id}" if scored.division_id is not None else ""
        path = f"round-{round_id}-session-{scored.session.number}{suffix}.csv"
        with open(path, "w", newline="", encoding="utf-8") as fp:
            write_csv(session_table(scored, names), fp)


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 1)
