# mypy: ignore-errors

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

import pytest

from matchday.application.services.lock_scheduler import LockScheduler
from matchday.application.services.match_ledger import MatchDraft, MatchLedger
from matchday.application.services.roster_service import RosterService
from matchday.application.services.stats_aggregator import StatsAggregator
from matchday.domain.errors import InvalidArgument, NotFound, PermissionDenied
from matchday.domain.value_objects.enums import MatchResult
from matchday.domain.value_objects.score import ScoreLine
from matchday.infrastructure.events import EventQueue

UTC = timezone.utc


def _draft(t1=("Alice",), t2=("Bob",), score=(2, 1), timestamp=None, **kw) -> MatchDraft:
    return MatchDraft(
        team1=list(t1), team2=list(t2), score=ScoreLine.from_fields(*score), timestamp=timestamp, **kw
    )


def test_append_creates_league_and_updates_totals(ledger: MatchLedger, leagues) -> None:
    m = ledger.append("default", _draft(t1=("Alice", "Ann"), score=(3, 1)))

    assert m.result == MatchResult.TEAM1
    assert m.timestamp == "2024-06-15T12:00:00Z"
    assert m.created_at == datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
    assert len(ledger.events) == 1

    league = leagues.get("default")
    assert league.total_matches == 1
    assert league.players == ["Alice", "Ann", "Bob"]
    assert league.seasons[1].matches[0].match_id == m.match_id
    alice = league.player_totals["Alice"]
    assert (alice.wins, alice.goals_for, alice.goals_against) == (1, 3, 1)
    assert league.player_totals["Ann"] == alice
    bob = league.player_totals["Bob"]
    assert (bob.losses, bob.goals_for, bob.goals_against) == (1, 1, 3)


def test_append_uses_effective_pair_for_player_goals(ledger: MatchLedger, leagues) -> None:
    ledger.append("default", _draft(score=(1, 1, 1, 1, 5, 4)))
    alice = leagues.get("default").player_totals["Alice"]
    assert (alice.wins, alice.goals_for, alice.goals_against) == (1, 5, 4)


def test_append_validation_errors(ledger: MatchLedger) -> None:
    with pytest.raises(InvalidArgument):
        ledger.append("", _draft())
    with pytest.raises(InvalidArgument):
        ledger.append("default", _draft(t1=()))
    with pytest.raises(InvalidArgument):
        ledger.append("default", _draft(t2=(" ",)))


def test_total_matches_counts_every_append(ledger: MatchLedger, leagues) -> None:
    for i in range(5):
        ledger.append("default", _draft(timestamp=f"2024-06-15T1{i}:00:00Z"))
    league = leagues.get("default")
    assert league.total_matches == 5
    assert len(ledger.all_matches("default")) == 5
    assert league.player_totals["Alice"].played == 5


def test_find_by_timestamp_returns_first_duplicate(ledger: MatchLedger) -> None:
    first = ledger.append("default", _draft(timestamp="2024-06-15T10:00:00Z"))
    ledger.append("default", _draft(score=(0, 0), timestamp="2024-06-15T10:00:00Z"))

    found = ledger.find_by_timestamp("default", "2024-06-15T10:00:00Z")
    assert found.match_id == first.match_id
    assert ledger.find_by_id("default", first.match_id).timestamp == first.timestamp
    assert ledger.find_by_timestamp("default", "nope") is None
    assert ledger.find_by_timestamp("missing-league", "nope") is None

    updated = ledger.update("default", "2024-06-15T10:00:00Z", ScoreLine.from_fields(0, 4))
    assert updated.match_id == first.match_id
    assert updated.result == MatchResult.TEAM2


def test_read_fills_missing_lock_boundary(ledger: MatchLedger, leagues) -> None:
    m = ledger.append("default", _draft())
    assert leagues.get("default").seasons[1].matches[0].lock_at is None

    found = ledger.find_by_id("default", m.match_id)
    assert found.lock_at == datetime(2024, 6, 15, 23, 0, tzinfo=UTC)
    # Reconciled boundary is persisted
    assert leagues.get("default").seasons[1].matches[0].lock_at == found.lock_at


def test_edit_lock_enforced_for_non_admin(ledger: MatchLedger, clock) -> None:
    m = ledger.append("default", _draft())
    ledger.update("default", m.timestamp, ScoreLine.from_fields(1, 1))

    clock.now = datetime(2024, 6, 15, 23, 0, 1, tzinfo=UTC)
    with pytest.raises(PermissionDenied, match="locked"):
        ledger.update("default", m.timestamp, ScoreLine.from_fields(3, 1))
    with pytest.raises(PermissionDenied):
        ledger.delete("default", m.timestamp)
    with pytest.raises(PermissionDenied):
        ledger.delete_last("default")

    updated = ledger.update("default", m.timestamp, ScoreLine.from_fields(3, 1), admin=True)
    assert updated.result == MatchResult.TEAM1
    assert not ledger.can_edit(updated)
    assert ledger.can_edit(updated, admin=True)


def test_backdated_match_is_locked_immediately(ledger: MatchLedger) -> None:
    m = ledger.append("default", _draft(timestamp="2024-06-10T18:00:00Z"))
    with pytest.raises(PermissionDenied):
        ledger.update("default", m.timestamp, ScoreLine.from_fields(0, 0))


def test_update_and_delete_not_found(ledger: MatchLedger) -> None:
    with pytest.raises(NotFound, match="League not found"):
        ledger.update("nowhere", "t", ScoreLine.from_fields(0, 0))
    ledger.append("default", _draft())
    with pytest.raises(NotFound):
        ledger.update("default", "missing", ScoreLine.from_fields(0, 0))
    with pytest.raises(NotFound):
        ledger.delete("default", "missing")


def test_update_leaves_player_totals_stale_by_default(ledger: MatchLedger, leagues) -> None:
    m = ledger.append("default", _draft(score=(2, 1)))
    ledger.update("default", m.timestamp, ScoreLine.from_fields(0, 3))
    alice = leagues.get("default").player_totals["Alice"]
    assert alice.wins == 1 and alice.losses == 0

    ledger.delete("default", m.timestamp)
    league = leagues.get("default")
    assert league.total_matches == 0
    assert league.player_totals["Alice"].wins == 1


def test_update_reconciles_totals_when_enabled(leagues, clock) -> None:
    ledger = MatchLedger(
        leagues, StatsAggregator(), EventQueue(), LockScheduler(leagues),
        reconcile_aggregates=True, clock=clock,
    )
    m = ledger.append("default", _draft(score=(2, 1)))
    ledger.append("default", _draft(score=(0, 0), timestamp="2024-06-15T13:00:00Z"))
    ledger.update("default", m.timestamp, ScoreLine.from_fields(0, 3))

    alice = leagues.get("default").player_totals["Alice"]
    assert (alice.wins, alice.losses, alice.draws) == (0, 1, 1)
    assert (alice.goals_for, alice.goals_against) == (0, 3)

    ledger.delete("default", m.timestamp)
    alice = leagues.get("default").player_totals["Alice"]
    assert (alice.wins, alice.losses, alice.draws) == (0, 0, 1)


def test_delete_last_removes_latest_of_current_season(ledger: MatchLedger, leagues) -> None:
    assert ledger.delete_last("default") is None
    ledger.append("default", _draft(timestamp="2024-06-15T10:00:00Z"))
    second = ledger.append("default", _draft(timestamp="2024-06-15T11:00:00Z"))

    removed = ledger.delete_last("default")
    assert removed.match_id == second.match_id
    assert [m.timestamp for m in ledger.season_matches("default")] == ["2024-06-15T10:00:00Z"]
    assert leagues.get("default").total_matches == 1

    ledger.start_new_season("default")
    # New season has no matches yet
    assert ledger.delete_last("default") is None


def test_seasons_partition_matches(ledger: MatchLedger) -> None:
    ledger.append("default", _draft(timestamp="2024-06-15T10:00:00Z"))
    assert ledger.start_new_season("default") == 2
    ledger.append("default", _draft(timestamp="2024-06-15T11:00:00Z"))

    assert ledger.current_season("default") == 2
    assert len(ledger.season_matches("default", 1)) == 1
    assert len(ledger.season_matches("default")) == 1
    assert ledger.season_matches("default", 7) == []
    assert [m.timestamp for m in ledger.all_matches("default")] == [
        "2024-06-15T10:00:00Z",
        "2024-06-15T11:00:00Z",
    ]


def test_matches_between_inclusive(ledger: MatchLedger) -> None:
    for ts in ("2024-06-10T12:00:00Z", "2024-06-12T23:59:00Z", "2024-06-14T00:00:00Z"):
        ledger.append("default", _draft(timestamp=ts))
    got = ledger.matches_between("default", date(2024, 6, 11), date(2024, 6, 14))
    assert [m.timestamp for m in got] == ["2024-06-12T23:59:00Z", "2024-06-14T00:00:00Z"]
    assert len(ledger.matches_between("default", date_to=date(2024, 6, 10))) == 1


def test_presence_snapshot_is_frozen_at_append(ledger: MatchLedger, leagues) -> None:
    roster = RosterService(leagues)
    roster.add_player("default", "Bob")
    roster.set_presence("default", "Bob", False)

    m = ledger.append("default", _draft())
    assert m.player_presence == {"Alice": True, "Bob": False}

    roster.set_presence("default", "Bob", True)
    stored = ledger.find_by_id("default", m.match_id)
    assert stored.player_presence == {"Alice": True, "Bob": False}


def test_clear_statistics_requires_admin(ledger: MatchLedger, leagues) -> None:
    ledger.append("default", _draft())
    with pytest.raises(PermissionDenied):
        ledger.clear_statistics("default", admin=False)
    ledger.clear_statistics("default", admin=True)
    league = leagues.get("default")
    assert league.total_matches == 0
    assert league.seasons == {}
    assert league.players == ["Alice", "Bob"]


def test_append_logs_with_league_id(ledger: MatchLedger, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="matchday")
    ledger.append("default", _draft())
    records = [r for r in caplog.records if r.getMessage().startswith("Recorded match")]
    assert records and records[0].league_id == "default"


def test_delete_then_find_returns_none(ledger: MatchLedger) -> None:
    m = ledger.append("default", _draft(timestamp="2024-06-15T10:00:00Z"))
    ledger.delete("default", m.timestamp)

    assert ledger.find_by_timestamp("default", m.timestamp) is None
    assert ledger.find_by_id("default", m.match_id) is None
    with pytest.raises(NotFound):
        ledger.delete("default", m.timestamp)


def test_played_equals_wins_losses_draws_for_every_player(ledger: MatchLedger, leagues) -> None:
    rounds = [
        (("Alice",), ("Bob",), (2, 1)),
        (("Alice", "Carol"), ("Bob", "Dan"), (0, 0)),
        (("Carol", "Dan"), ("Eve",), (1, 3)),
        (("Bob",), ("Alice", "Eve"), (1, 1, 0, 0, 4, 5)),
        (("Dan",), ("Carol",), (2, 2, 1, 0)),
        (("Eve", "Bob"), ("Alice", "Carol"), (0, 2)),
    ]
    for i, (t1, t2, score) in enumerate(rounds):
        ledger.append("default", _draft(t1=t1, t2=t2, score=score, timestamp=f"2024-06-15T0{i}:00:00Z"))

    matches = ledger.all_matches("default")
    totals = leagues.get("default").player_totals
    assert set(totals) == {"Alice", "Bob", "Carol", "Dan", "Eve"}
    for player, row in totals.items():
        took_part = sum(1 for m in matches if player in m.players)
        assert row.wins + row.losses + row.draws == took_part == row.played


def test_out_of_range_timestamp_keeps_league_readable(
    ledger: MatchLedger, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="matchday")
    late = ledger.append("default", _draft(timestamp="9999-12-31T23:30:00Z"))
    ledger.append("default", _draft(timestamp="2024-06-15T10:00:00Z"))

    matches = ledger.all_matches("default")
    assert len(matches) == 2
    by_id = {m.match_id: m for m in matches}
    assert by_id[late.match_id].lock_at is None
    assert any(
        r.levelno == logging.ERROR and r.league_id == "default" for r in caplog.records
    )

    removed = ledger.delete("default", "9999-12-31T23:30:00Z")
    assert removed.match_id == late.match_id
    assert ledger.find_by_timestamp("default", "9999-12-31T23:30:00Z") is None


def test_offset_past_max_date_falls_back_to_creation_time(ledger: MatchLedger) -> None:
    ts = "9999-12-31T23:30:00-05:00"
    m = ledger.append("default", _draft(timestamp=ts))

    found = ledger.find_by_timestamp("default", ts)
    assert found.lock_at == datetime(2024, 6, 15, 23, 0, tzinfo=UTC)
    assert ledger.delete("default", ts).match_id == m.match_id
    assert ledger.all_matches("default") == []
