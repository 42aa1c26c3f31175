"""Move-quality classification for played plies.

Every ply is judged on the *swing* it caused, measured from the mover's point
of view (positive = good for the side that just moved):

    swing = eval_after - eval_before

Bands (defaults, see :class:`~moveeval.config.QualityThresholds`):

    swing >= -10    best   (good if the engine preferred another move)
    swing >= -50    good
    swing >= -100   inaccuracy
    swing >= -250   mistake
    otherwise       blunder

Inside the best band two auxiliary signals can promote a move:

* **great** – it was the engine's top choice and the runner-up was at least
  ``great_gap_cp`` worse (the only move).
* **brilliant** – the move leaves material en prise (a sacrifice of at least
  ``brilliant_min_sacrifice`` pawns), the eval after it is at least as good as
  before, and the mover was not already winning outright.

Mate transitions override the swing: losing a forced mate is always a blunder,
finding one is never worse than good.  With a non-positive ``good`` threshold the
second rule is already implied by the bands, since reaching a mate swings by at
least ``MATE_CP - eval_before`` > 0; it is kept as an explicit guard.
"""

from __future__ import annotations

from collections.abc import Iterable

import chess

from .config import DEFAULT_CONFIG, QualityThresholds
from .models import MoveQuality, Reading

_PIECE_VALUES: dict[int, int] = {
    chess.PAWN:   1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK:   5,
    chess.QUEEN:  9,
    chess.KING:   0,
}

# Any attacker beats "no attacker"; kings only take undefended pieces.
_KING_ATTACKER_VALUE = 100


def classify_move(
    before: int | Reading,
    after: int | Reading,
    *,
    is_best_move: bool | None = None,
    second_best_gap_cp: int | None = None,
    board: chess.Board | None = None,
    move: chess.Move | None = None,
    thresholds: QualityThresholds = DEFAULT_CONFIG.quality,
) -> MoveQuality:
    """Classify one ply from mover-relative evaluations before and after it.

    *board* is the position before *move*; both are only needed for
    sacrifice (brilliant) detection.
    """
    before_r = _as_reading(before)
    after_r = _as_reading(after)

    if before_r.mates_for_owner() and not after_r.mates_for_owner():
        return MoveQuality.BLUNDER

    swing = move_swing_cp(before_r, after_r)
    quality = _band(swing, is_best_move, thresholds)

    if quality is MoveQuality.BEST:
        before_cp = before_r.as_cp() or 0
        if (
            board is not None
            and move is not None
            and swing >= 0
            and before_cp < thresholds.brilliant_max_eval_before
            and is_sacrifice(board, move, thresholds.brilliant_min_sacrifice)
        ):
            quality = MoveQuality.BRILLIANT
        elif (
            is_best_move
            and second_best_gap_cp is not None
            and second_best_gap_cp >= thresholds.great_gap_cp
        ):
            quality = MoveQuality.GREAT

    if after_r.mates_for_owner() and not before_r.mates_for_owner():
        if quality.weight < MoveQuality.GOOD.weight:
            quality = MoveQuality.GOOD

    return quality


def move_swing_cp(before: int | Reading, after: int | Reading) -> int:
    """after - before, mate readings counted as +/-MATE_CP, missing as 0."""
    before_cp = _as_reading(before).as_cp() or 0
    after_cp = _as_reading(after).as_cp() or 0
    return after_cp - before_cp


def is_sacrifice(board: chess.Board, move: chess.Move, min_pawns: int = 2) -> bool:
    """True when *move* leaves at least *min_pawns* of material en prise.

    Exposure is the moved piece's value if the landing square is attacked and
    undefended, or the value above its cheapest attacker if it is defended.
    Whatever the move captured is credited back.
    """
    piece = board.piece_at(move.from_square)
    if piece is None or piece.piece_type in (chess.PAWN, chess.KING):
        return False

    captured = 0
    if board.is_en_passant(move):
        captured = _PIECE_VALUES[chess.PAWN]
    else:
        target = board.piece_at(move.to_square)
        if target is not None:
            captured = _PIECE_VALUES[target.piece_type]

    after = board.copy(stack=False)
    after.push(move)
    moved_type = move.promotion or piece.piece_type
    value = _PIECE_VALUES[moved_type]

    attackers = after.attackers(not piece.color, move.to_square)
    if not attackers:
        return False

    defended = bool(after.attackers(piece.color, move.to_square))
    if defended:
        cheapest = min(_attacker_value(after, sq) for sq in attackers)
        exposure = max(0, value - cheapest)
    else:
        exposure = value

    return exposure - captured >= min_pawns


def accuracy(qualities: Iterable[MoveQuality]) -> float:
    """Mean quality weight (0-100); 0.0 when there are no moves."""
    weights = [q.weight for q in qualities]
    if not weights:
        return 0.0
    return sum(weights) / len(weights)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _band(
    swing: int, is_best_move: bool | None, thresholds: QualityThresholds
) -> MoveQuality:
    if swing >= thresholds.best:
        return MoveQuality.GOOD if is_best_move is False else MoveQuality.BEST
    if swing >= thresholds.good:
        return MoveQuality.GOOD
    if swing >= thresholds.inaccuracy:
        return MoveQuality.INACCURACY
    if swing >= thresholds.mistake:
        return MoveQuality.MISTAKE
    return MoveQuality.BLUNDER


def _attacker_value(board: chess.Board, square: chess.Square) -> int:
    piece = board.piece_at(square)
    if piece is None:
        return 0
    if piece.piece_type == chess.KING:
        return _KING_ATTACKER_VALUE
    return _PIECE_VALUES[piece.piece_type]


def _as_reading(value: int | Reading) -> Reading:
    if isinstance(value, Reading):
        return value
    return Reading.centipawns(value)
