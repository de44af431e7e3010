from __future__ import annotations

import pytest

from matchday.domain.errors import InvalidArgument
from matchday.domain.rules.result import effective_pair, resolve_result
from matchday.domain.value_objects.enums import MatchResult, ScoreKind
from matchday.domain.value_objects.score import ScoreLine


@pytest.mark.parametrize(
    "fields, expected",
    [
        ((2, 1), MatchResult.TEAM1),
        ((0, 3), MatchResult.TEAM2),
        ((1, 1), MatchResult.DRAW),
        ((1, 1, 2, 1), MatchResult.TEAM1),
        ((1, 1, 1, 1), MatchResult.DRAW),
        ((1, 1, 1, 1, 4, 5), MatchResult.TEAM2),
        ((1, 1, None, None, 3, 2), MatchResult.TEAM1),
    ],
)
def test_resolve_result_uses_latest_stage(fields: tuple, expected: MatchResult) -> None:
    assert resolve_result(ScoreLine.from_fields(*fields)) == expected


def test_penalties_decide_even_when_regular_score_disagrees() -> None:
    # Inconsistent input is still resolved purely by the highest stage present
    score = ScoreLine.from_fields(3, 0, None, None, 2, 4)
    assert resolve_result(score) == MatchResult.TEAM2


def test_effective_pair_precedence() -> None:
    assert effective_pair(ScoreLine.from_fields(2, 2)).team1 == 2
    et = ScoreLine.from_fields(2, 2, 3, 2)
    assert (effective_pair(et).team1, effective_pair(et).team2) == (3, 2)
    pens = ScoreLine.from_fields(2, 2, 3, 3, 5, 4)
    assert (effective_pair(pens).team1, effective_pair(pens).team2) == (5, 4)


def test_score_kind() -> None:
    assert ScoreLine.from_fields(0, 0).kind == ScoreKind.REGULAR_ONLY
    assert ScoreLine.from_fields(0, 0, 1, 0).kind == ScoreKind.WITH_EXTRA_TIME
    assert ScoreLine.from_fields(0, 0, 0, 0, 3, 1).kind == ScoreKind.WITH_PENALTIES


@pytest.mark.parametrize(
    "fields",
    [
        (1, 1, 2, None),
        (1, 1, None, 0),
        (1, 1, None, None, 4, None),
        (None, 1),
        (-1, 0),
        (1, 1, 0, -2),
    ],
)
def test_score_line_rejects_partial_or_negative(fields: tuple) -> None:
    with pytest.raises(InvalidArgument):
        ScoreLine.from_fields(*fields)


def test_score_document_omits_missing_stages() -> None:
    doc = ScoreLine.from_fields(1, 0).to_document()
    assert doc == {"team1Score": 1, "team2Score": 0}
    full = ScoreLine.from_fields(1, 1, 2, 2, 5, 3).to_document()
    assert full["team1PenaltiesScore"] == 5
    assert ScoreLine.from_document(full) == ScoreLine.from_fields(1, 1, 2, 2, 5, 3)


@pytest.mark.parametrize(
    "fields",
    [
        ("a", 1),
        (1, 2.5),
        (True, 0),
        (1, 1, "2", 0),
        (1, 1, None, None, 3, [4]),
    ],
)
def test_score_line_rejects_non_integer_values(fields: tuple) -> None:
    with pytest.raises(InvalidArgument, match="whole numbers"):
        ScoreLine.from_fields(*fields)


def test_score_line_from_document_rejects_text_scores() -> None:
    with pytest.raises(InvalidArgument):
        ScoreLine.from_document({"team1Score": "two", "team2Score": 1})
