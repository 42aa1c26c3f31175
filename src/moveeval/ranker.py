"""Ranking of engine candidate moves for the arrow overlay.

Each candidate gets a WDL estimate and a *quality* equal to its expected
score for the side to move, ``win + draw / 2`` (equivalently
``(win - loss + 100) / 2``), so higher win and lower loss both help.

Sort modes
----------
quality  highest quality first (default)
win      highest win % first, ties by quality
safety   lowest loss % first, ties by quality

Sorting is stable: equal keys keep their input order.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import CandidateMove, CandidateMoveScore
from .wdl import estimate_wdl

SORT_MODES: tuple[str, ...] = ("quality", "win", "safety")

# (minimum quality, verdict, colour), best band first.
_VERDICT_BANDS: tuple[tuple[float, str, str], ...] = (
    (85.0, "Winning", "#22c55e"),
    (65.0, "Strong", "#14b8a6"),
    (55.0, "Favorable", "#3b82f6"),
    (45.0, "Balanced", "#84cc16"),
    (35.0, "Dubious", "#eab308"),
    (15.0, "Risky", "#f97316"),
    (0.0, "Losing", "#ef4444"),
)


def rank(
    moves: Iterable[CandidateMove],
    sort_by: str = "quality",
    engine_filter: str = "all",
) -> list[CandidateMoveScore]:
    """Score, sort and number the candidates that pass *engine_filter*."""
    if sort_by not in SORT_MODES:
        raise ValueError(f"sort_by must be one of {SORT_MODES}, got {sort_by!r}")

    pending: list[tuple[CandidateMove, int, int, float]] = []
    for cand in moves:
        if engine_filter != "all" and cand.engine != engine_filter:
            continue
        wdl = estimate_wdl(cand.evaluation, cand.mate, cand.win_chance)
        pending.append((cand, wdl.win, wdl.loss, candidate_quality(wdl.win, wdl.loss)))

    if sort_by == "win":
        pending.sort(key=lambda p: (-p[1], -p[3]))
    elif sort_by == "safety":
        pending.sort(key=lambda p: (p[2], -p[3]))
    else:
        pending.sort(key=lambda p: -p[3])

    scores: list[CandidateMoveScore] = []
    for position, (cand, win, loss, quality) in enumerate(pending, start=1):
        verdict, color = verdict_for(quality)
        scores.append(
            CandidateMoveScore(
                move=cand.move,
                engine=cand.engine,
                win=win,
                loss=loss,
                quality=quality,
                rank=position,
                verdict=verdict,
                color=color,
            )
        )
    return scores


def candidate_quality(win: float, loss: float) -> float:
    """Expected score in percent, clamped to [0, 100]."""
    return max(0.0, min(100.0, (win - loss + 100) / 2))


def verdict_for(quality: float) -> tuple[str, str]:
    for floor, verdict, color in _VERDICT_BANDS:
        if quality >= floor:
            return verdict, color
    return _VERDICT_BANDS[-1][1], _VERDICT_BANDS[-1][2]


def visible_candidates(
    scores: list[CandidateMoveScore],
    limit: int,
    selected_move: str | None = None,
    show_all: bool = True,
) -> list[CandidateMoveScore]:
    """Top-*limit* candidates (at least one), narrowed to *selected_move*.

    The selection is ignored when *show_all* is set or when it is unset.
    """
    top = scores[: max(1, limit)]
    if show_all or not selected_move:
        return top
    return [s for s in top if s.move == selected_move]
