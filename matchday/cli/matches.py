from __future__ import annotations

import argparse
import sys
from datetime import date
from typing import Iterable, Sequence

from matchday.application.container import Services, open_services
from matchday.application.services.admin_credentials import Principal
from matchday.application.services.match_ledger import MatchDraft
from matchday.application.services.stats_aggregator import StandingRow
from matchday.application.services.team_generator import PlayerLock, RoundStructure
from matchday.domain.entities import MatchRecord
from matchday.domain.errors import ServiceError
from matchday.domain.value_objects.enums import LockSide, StatsMode
from matchday.domain.value_objects.score import ScoreLine
from matchday.logging_config import get_logger


def _format_score(m: MatchRecord) -> str:
    text = f"{m.score.regular.team1}-{m.score.regular.team2}"
    if m.score.extra_time is not None:
        text += f" (aet {m.score.extra_time.team1}-{m.score.extra_time.team2})"
    if m.score.penalties is not None:
        text += f" (pens {m.score.penalties.team1}-{m.score.penalties.team2})"
    return text


def _format_matches(rows: Iterable[MatchRecord]) -> str:
    lines: list[str] = []
    for m in rows:
        lock = m.lock_at.isoformat() if m.lock_at else "-"
        lines.append(
            f"{m.timestamp} | {' & '.join(m.team1)} vs {' & '.join(m.team2)} "
            f"{_format_score(m)} [{m.result.value}] (lockAt={lock})"
        )
    return "\n".join(lines)


def _num(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"


def _format_standings(rows: Iterable[StandingRow]) -> str:
    lines = ["Team | Pts P W D L GF GA GD"]
    for r in rows:
        cells = [r.points, r.played, r.won, r.drawn, r.lost, r.goals_for, r.goals_against]
        lines.append(
            f"{' & '.join(r.players)} | "
            + " ".join(_num(c) for c in cells)
            + f" {_num(r.goal_difference)}"
        )
    return "\n".join(lines)


def _format_rounds(structures: Sequence[RoundStructure]) -> str:
    lines: list[str] = []
    for i, structure in enumerate(structures, start=1):
        lines.append(f"Option {i}:")
        lines.extend(f"  {n}. {m.describe()}" for n, m in enumerate(structure.matches, start=1))
    return "\n".join(lines)


def _score_from_args(args: argparse.Namespace) -> ScoreLine:
    et = args.extra_time or (None, None)
    pens = args.penalties or (None, None)
    return ScoreLine.from_fields(args.score[0], args.score[1], et[0], et[1], pens[0], pens[1])


def _add_score_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--score", type=int, nargs=2, required=True, metavar=("T1", "T2"))
    p.add_argument("--extra-time", type=int, nargs=2, metavar=("T1", "T2"))
    p.add_argument("--penalties", type=int, nargs=2, metavar=("T1", "T2"))


def _add_admin_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--uid", help="Caller id, needed with --token to act as admin")
    p.add_argument("--token", help="Admin claim returned by the admin CLI")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Record and inspect league match results")
    p.add_argument("--league", default="default", help="League id (default: default)")
    sub = p.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("record", help="Record a new match")
    rec.add_argument("--team1", nargs="+", required=True)
    rec.add_argument("--team2", nargs="+", required=True)
    _add_score_args(rec)
    rec.add_argument("--timestamp", help="Logical match time (ISO-8601); defaults to now")
    rec.add_argument("--team1-name")
    rec.add_argument("--team2-name")

    ls = sub.add_parser("list", help="List matches")
    ls.add_argument("--season", type=int, help="Season number (default: current)")
    ls.add_argument("--all", action="store_true", help="All seasons")
    ls.add_argument("--from", dest="date_from", type=date.fromisoformat, metavar="YYYY-MM-DD")
    ls.add_argument("--to", dest="date_to", type=date.fromisoformat, metavar="YYYY-MM-DD")

    upd = sub.add_parser("update", help="Change the score of a match")
    upd.add_argument("timestamp")
    _add_score_args(upd)
    _add_admin_args(upd)

    dele = sub.add_parser("delete", help="Delete a match by timestamp")
    dele.add_argument("timestamp")
    _add_admin_args(dele)

    last = sub.add_parser("delete-last", help="Delete the latest match of the current season")
    _add_admin_args(last)

    st = sub.add_parser("standings", help="Show standings")
    st.add_argument("--players", action="store_true", help="Player totals instead of teams")
    st.add_argument("--partnerships", action="store_true", help="Only rosters of 2+ players")
    st.add_argument("--season", type=int, help="Restrict team standings to one season")
    st.add_argument(
        "--mode", choices=[m.value for m in StatsMode], default=StatsMode.RAW.value
    )

    sub.add_parser("new-season", help="Start a new season")

    ap = sub.add_parser("add-player", help="Add a player to the league roster")
    ap.add_argument("name")

    pr = sub.add_parser("presence", help="Mark a player present or absent")
    pr.add_argument("name")
    pr.add_argument("state", choices=["in", "out"])

    rd = sub.add_parser("rounds", help="Suggest round structures for the present players")
    rd.add_argument("--lock-player", help="Keep this player on one side")
    rd.add_argument("--lock-side", choices=[s.value for s in LockSide], default=LockSide.NEUTRAL.value)
    rd.add_argument("--first", action="store_true", help="Only show the first structure")
    return p


def _is_admin(svc: Services, args: argparse.Namespace) -> bool:
    return svc.admin.is_admin(Principal(uid=args.uid, token=args.token), args.league)


def _run(svc: Services, args: argparse.Namespace) -> None:
    league = args.league
    if args.command == "record":
        match = svc.ledger.append(
            league,
            MatchDraft(
                team1=args.team1,
                team2=args.team2,
                score=_score_from_args(args),
                timestamp=args.timestamp,
                team1_name=args.team1_name,
                team2_name=args.team2_name,
            ),
        )
        print(f"Recorded {match.timestamp}: {match.result.value} (id={match.match_id})")
    elif args.command == "list":
        if args.date_from or args.date_to:
            rows = svc.ledger.matches_between(league, args.date_from, args.date_to)
        elif args.all:
            rows = svc.ledger.all_matches(league)
        else:
            rows = svc.ledger.season_matches(league, args.season)
        print(_format_matches(rows) if rows else "No matches found.")
    elif args.command == "update":
        match = svc.ledger.update(
            league, args.timestamp, _score_from_args(args), admin=_is_admin(svc, args)
        )
        print(f"Updated {match.timestamp}: {_format_score(match)} [{match.result.value}]")
    elif args.command == "delete":
        match = svc.ledger.delete(league, args.timestamp, admin=_is_admin(svc, args))
        print(f"Deleted {match.timestamp}")
    elif args.command == "delete-last":
        removed = svc.ledger.delete_last(league, admin=_is_admin(svc, args))
        print(f"Deleted {removed.timestamp}" if removed else "No matches to delete.")
    elif args.command == "standings":
        mode = StatsMode(args.mode)
        if args.players:
            doc = svc.ledger.league(league)
            rows = svc.stats.player_table(doc, mode) if doc is not None else []
        else:
            matches = (
                svc.ledger.season_matches(league, args.season)
                if args.season is not None
                else svc.ledger.all_matches(league)
            )
            rows = svc.stats.team_standings(
                matches, partnerships_only=args.partnerships, mode=mode
            )
        print(_format_standings(rows) if rows else "No standings yet.")
    elif args.command == "new-season":
        print(f"Season {svc.ledger.start_new_season(league)} started")
    elif args.command == "add-player":
        added = svc.roster.add_player(league, args.name)
        print(f"Added {args.name}" if added else f"{args.name} is already on the roster")
    elif args.command == "presence":
        svc.roster.set_presence(league, args.name, args.state == "in")
        print(f"{args.name} marked {args.state}")
    elif args.command == "rounds":
        lock = PlayerLock.parse(args.lock_player, args.lock_side)
        structures = svc.teams.rounds(league, lock)
        if args.first:
            structures = structures[:1]
        print(_format_rounds(structures) if structures else "Need 2 to 4 present players.")


def main(argv: Sequence[str] | None = None, services: Services | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    svc = services or open_services()
    get_logger(lock_timezone=svc.locks.timezone)
    try:
        _run(svc, args)
    except ServiceError as exc:
        print(f"Error ({exc.code}): {exc.message}", file=sys.stderr)
        return 2
    finally:
        # Lock assignment runs after the command's own write has completed
        svc.locks.run_pending(svc.events)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
