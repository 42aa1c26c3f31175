"""Per-ply analysis timeline for a played game.

Input
-----
``moves``
    UCI moves from ``start_fen``.
``evaluations``
    One list of :class:`EvaluationSample` per position, White's POV, where
    ``evaluations[0]`` is the start position and ``evaluations[i]`` the
    position after ``i`` plies (so ``len(moves) + 1`` entries).  A position no
    engine answered for may hold an empty list; it scores as level.

For each ply the consensus before and after the move is re-signed to the
mover, the move is classified, and the point records the consensus, engine
disagreement and WDL of the resulting position.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

import chess

from .config import DEFAULT_CONFIG, ScoringConfig
from .consensus import aggregate, engine_priority
from .local import local_analysis
from .models import AnalysisTimelinePoint, EvaluationSample, MoveQuality, Reading
from .quality import accuracy, classify_move, move_swing_cp
from .wdl import wdl_for_reading


@dataclass
class ReviewSummary:
    white_accuracy: float
    black_accuracy: float
    counts: dict[str, Counter] = field(default_factory=dict)   # "white"/"black" → quality counts


def build_timeline(
    moves: Sequence[str],
    evaluations: Sequence[Sequence[EvaluationSample]],
    start_fen: str = chess.STARTING_FEN,
    *,
    second_best_gaps: Sequence[int | None] | None = None,
    config: ScoringConfig = DEFAULT_CONFIG,
    verbose: bool = False,
) -> list[AnalysisTimelinePoint]:
    """Score every ply of a game; see module docstring for the input layout."""
    if len(evaluations) != len(moves) + 1:
        raise ValueError(
            f"expected {len(moves) + 1} evaluation lists for {len(moves)} moves, "
            f"got {len(evaluations)}"
        )
    if second_best_gaps is not None and len(second_best_gaps) != len(moves):
        raise ValueError("second_best_gaps must have one entry per move")

    def log(*args: object) -> None:
        if verbose:
            print(*args, flush=True)

    board = chess.Board(start_fen)
    before = aggregate(evaluations[0], config.consensus)
    timeline: list[AnalysisTimelinePoint] = []

    log(f"[review] Scoring {len(moves)} plies …")

    for index, uci in enumerate(moves):
        move = chess.Move.from_uci(uci)
        if move not in board.legal_moves:
            raise ValueError(f"illegal move {uci!r} at ply {index + 1} in {board.fen()}")

        mover = board.turn
        move_number = board.fullmove_number
        san = board.san(move)
        best_move = _top_engine_move(evaluations[index])
        pre_board = board.copy(stack=False)
        board.push(move)

        after_samples = list(evaluations[index + 1])
        if board.is_checkmate() and not any(s.has_data for s in after_samples):
            # Engines return nothing useful for a finished game.
            after_samples = [local_analysis(board.fen())]
        after = aggregate(after_samples, config.consensus)

        before_pov = _for_side(before.as_reading(), mover)
        if board.is_checkmate():
            after_pov = Reading.mate_in(1)
        else:
            after_pov = _for_side(after.as_reading(), mover)

        quality = classify_move(
            before_pov,
            after_pov,
            is_best_move=None if best_move is None else best_move == uci,
            second_best_gap_cp=second_best_gaps[index] if second_best_gaps else None,
            board=pre_board,
            move=move,
            thresholds=config.quality,
        )
        wdl = wdl_for_reading(after.as_reading())

        point = AnalysisTimelinePoint(
            ply=index + 1,
            move_number=move_number,
            fen=board.fen(),
            move=uci,
            san=san,
            mover=mover,
            stockfish_cp=_engine_cp(after_samples, "stockfish-online"),
            chess_api_cp=_engine_cp(after_samples, "chess-api"),
            consensus_cp=after.consensus_cp,
            delta_cp=after.delta_cp,
            confidence=after.confidence,
            quality=quality,
            wdl_win=wdl.win,
            wdl_draw=wdl.draw,
            wdl_loss=wdl.loss,
            swing_cp=move_swing_cp(before_pov, after_pov),
        )
        timeline.append(point)

        if quality in (MoveQuality.MISTAKE, MoveQuality.BLUNDER):
            dots = "." if mover == chess.WHITE else "..."
            log(f"[review] {move_number}{dots}{san}: {quality.label} ({point.swing_cp:+d}cp)")

        before = after

    log(f"[review] Done. {len(timeline)} plies scored.")
    return timeline


def local_evaluations(
    moves: Sequence[str], start_fen: str = chess.STARTING_FEN
) -> list[list[EvaluationSample]]:
    """Evaluations for every position of the game from the material fallback."""
    board = chess.Board(start_fen)
    evaluations = [[local_analysis(board.fen())]]
    for uci in moves:
        board.push_uci(uci)
        evaluations.append([local_analysis(board.fen())])
    return evaluations


def summarise(timeline: Sequence[AnalysisTimelinePoint]) -> ReviewSummary:
    by_side: dict[str, list[MoveQuality]] = {"white": [], "black": []}
    for point in timeline:
        by_side["white" if point.mover == chess.WHITE else "black"].append(point.quality)

    return ReviewSummary(
        white_accuracy=accuracy(by_side["white"]),
        black_accuracy=accuracy(by_side["black"]),
        counts={side: Counter(q.value for q in qs) for side, qs in by_side.items()},
    )


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _for_side(reading: Reading, side: chess.Color) -> Reading:
    return reading if side == chess.WHITE else reading.flipped()


def _top_engine_move(samples: Sequence[EvaluationSample]) -> str | None:
    """Best move of the highest-priority engine that reported one.

    The material fallback's "best move" is just the first legal move.
    """
    for sample in sorted(samples, key=lambda s: engine_priority(s.engine)):
        if sample.best_move and sample.engine != "local":
            return sample.best_move
    return None


def _engine_cp(samples: Sequence[EvaluationSample], engine: str) -> int | None:
    for sample in samples:
        if sample.engine == engine and not sample.reading.is_empty:
            return sample.reading.as_cp()
    return None
