"""Material-count fallback used when no remote engine has answered.

This is not an engine: it counts material, spots checkmate and proposes the
first legal move.  Good enough to keep the evaluation bar and timeline alive
offline.
"""

from __future__ import annotations

import chess

from .models import EvaluationSample, Reading
from .wdl import cp_to_win_chance

_PIECE_CP: dict[int, int] = {
    chess.PAWN:   100,
    chess.KNIGHT: 320,
    chess.BISHOP: 330,
    chess.ROOK:   500,
    chess.QUEEN:  900,
    chess.KING:   0,
}


def material_cp(board: chess.Board) -> int:
    """Material balance in centipawns from White's perspective."""
    total = 0
    for piece_type, value in _PIECE_CP.items():
        total += len(board.pieces(piece_type, chess.WHITE)) * value
        total -= len(board.pieces(piece_type, chess.BLACK)) * value
    return total


def local_analysis(fen: str) -> EvaluationSample:
    """Evaluate *fen* by material alone (White's POV)."""
    board = chess.Board(fen)

    if board.is_checkmate():
        # The side to move is mated.
        mate = -1 if board.turn == chess.WHITE else 1
        return EvaluationSample("local", Reading.mate_in(mate))

    cp = material_cp(board)
    best = next(iter(board.legal_moves), None)
    return EvaluationSample(
        engine="local",
        reading=Reading.centipawns(cp),
        win_chance=cp_to_win_chance(cp),
        best_move=best.uci() if best else None,
    )
