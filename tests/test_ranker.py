"""Tests for candidate-move ranking."""

from __future__ import annotations

import pytest

from moveeval.models import CandidateMove
from moveeval.ranker import candidate_quality, rank, verdict_for, visible_candidates


def _candidates() -> list[CandidateMove]:
    return [
        CandidateMove("stockfish-online", "e2e4", evaluation=100),
        CandidateMove("chess-api", "d2d4", evaluation=300),
        CandidateMove("stockfish-online", "g1f3", evaluation=-50),
        CandidateMove("chess-api", "c2c4", mate=2),
        CandidateMove("chess-api", "f2f3", evaluation=-600),
    ]


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def test_ranks_are_a_permutation() -> None:
    scores = rank(_candidates())
    assert sorted(s.rank for s in scores) == list(range(1, 6))
    assert [s.rank for s in scores] == [1, 2, 3, 4, 5]


def test_quality_sort() -> None:
    scores = rank(_candidates())
    assert [s.move for s in scores] == ["c2c4", "d2d4", "e2e4", "g1f3", "f2f3"]
    assert scores[0].is_best
    assert not any(s.is_best for s in scores[1:])


@pytest.mark.parametrize("sort_by", ["quality", "win", "safety"])
def test_output_length_matches_input(sort_by: str) -> None:
    assert len(rank(_candidates(), sort_by=sort_by)) == 5


def test_win_sort_keys_are_ordered() -> None:
    scores = rank(_candidates(), sort_by="win")
    keys = [(-s.win, -s.quality) for s in scores]
    assert keys == sorted(keys)


def test_safety_sort_keys_are_ordered() -> None:
    scores = rank(_candidates(), sort_by="safety")
    keys = [(s.loss, -s.quality) for s in scores]
    assert keys == sorted(keys)
    assert scores[-1].move == "f2f3"


def test_equal_candidates_keep_input_order() -> None:
    moves = [
        CandidateMove("stockfish-online", "a2a3", evaluation=15),
        CandidateMove("chess-api", "h2h3", evaluation=15),
        CandidateMove("local", "b2b3", evaluation=15),
    ]
    for sort_by in ("quality", "win", "safety"):
        assert [s.move for s in rank(moves, sort_by=sort_by)] == ["a2a3", "h2h3", "b2b3"]


def test_unknown_sort_mode() -> None:
    with pytest.raises(ValueError, match="sort_by"):
        rank(_candidates(), sort_by="popularity")


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def test_engine_filter() -> None:
    scores = rank(_candidates(), engine_filter="stockfish-online")
    assert [s.move for s in scores] == ["e2e4", "g1f3"]
    assert [s.rank for s in scores] == [1, 2]


def test_engine_filter_all_is_noop() -> None:
    assert len(rank(_candidates(), engine_filter="all")) == 5


def test_empty_input() -> None:
    assert rank([]) == []


# ---------------------------------------------------------------------------
# Scores, verdicts, badges
# ---------------------------------------------------------------------------


def test_quality_is_expected_score() -> None:
    assert candidate_quality(33, 33) == 50.0
    assert candidate_quality(99, 0) == 99.5
    assert candidate_quality(0, 99) == 0.5


def test_quality_bounds_for_extreme_input() -> None:
    scores = rank(
        [
            CandidateMove("chess-api", "a2a4", evaluation=1e9),
            CandidateMove("chess-api", "h2h4", evaluation=-1e9),
            CandidateMove("chess-api", "b2b4"),
        ]
    )
    assert all(0 <= s.quality <= 100 for s in scores)
    assert all(0 <= s.win <= 100 and 0 <= s.loss <= 100 for s in scores)


def test_mate_candidate_verdict() -> None:
    top = rank(_candidates())[0]
    assert top.win == 99 and top.loss == 0
    assert top.verdict == "Winning"
    assert top.color == "#22c55e"


def test_verdict_bands() -> None:
    assert verdict_for(50.0)[0] == "Balanced"
    assert verdict_for(10.0) == ("Losing", "#ef4444")


def test_badge_text() -> None:
    scores = rank(_candidates())
    assert scores[0].badge_text() == "BEST 100"
    assert scores[1].badge_text().startswith("2:")


# ---------------------------------------------------------------------------
# visible_candidates
# ---------------------------------------------------------------------------


def test_visible_top_n() -> None:
    scores = rank(_candidates())
    assert [s.move for s in visible_candidates(scores, 2)] == ["c2c4", "d2d4"]


def test_visible_shows_at_least_one() -> None:
    scores = rank(_candidates())
    assert len(visible_candidates(scores, 0)) == 1


def test_visible_selected_move() -> None:
    scores = rank(_candidates())
    picked = visible_candidates(scores, 3, selected_move="e2e4", show_all=False)
    assert [s.move for s in picked] == ["e2e4"]


def test_visible_selected_outside_top_n() -> None:
    scores = rank(_candidates())
    assert visible_candidates(scores, 2, selected_move="f2f3", show_all=False) == []


def test_visible_show_all_ignores_selection() -> None:
    scores = rank(_candidates())
    assert len(visible_candidates(scores, 3, selected_move="e2e4", show_all=True)) == 3
