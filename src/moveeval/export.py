"""Annotated PGN export of a reviewed game.

Format
------
  [standard headers]
  [Annotator "moveeval"]

  { Game-level comment: accuracy per side, quality counts }

  1. e4 { [%eval 0.20] best | conf 92% } 1... f6? { [%eval 1.10] mistake | -90cp } ...

Quality NAGs
------------
* ``$3``  brilliant (!!)      * ``$1``  great (!)
* ``$6``  inaccuracy (?!)     * ``$2``  mistake (?)
* ``$4``  blunder (??)

Best and good moves get no NAG.  ``[%eval]`` is White-relative, as chess GUIs
expect.
"""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from pathlib import Path

import chess
import chess.pgn

from .models import MATE_CP, AnalysisTimelinePoint
from .timeline import summarise


def export_review_pgn(
    timeline: Sequence[AnalysisTimelinePoint],
    start_fen: str,
    out_path: Path,
    *,
    headers: dict[str, str] | None = None,
) -> None:
    """Write the reviewed game to *out_path*."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    game = build_review_game(timeline, start_fen, headers=headers)

    with open(out_path, "w", encoding="utf-8") as fh:
        exporter = chess.pgn.FileExporter(fh)
        game.accept(exporter)
        fh.write("\n")


def build_review_game(
    timeline: Sequence[AnalysisTimelinePoint],
    start_fen: str,
    *,
    headers: dict[str, str] | None = None,
) -> chess.pgn.Game:
    game = chess.pgn.Game()

    game.headers["Event"] = "moveeval review"
    game.headers["Site"] = "?"
    game.headers["Date"] = datetime.date.today().strftime("%Y.%m.%d")
    game.headers["Result"] = "*"
    for key, value in (headers or {}).items():
        game.headers[key] = value
    game.headers["Annotator"] = "moveeval"

    game.setup(chess.Board(start_fen))  # sets FEN / SetUp headers if non-starting position
    game.comment = _summary_comment(timeline)

    node: chess.pgn.GameNode = game
    for point in timeline:
        node = node.add_variation(chess.Move.from_uci(point.move))
        nag = point.quality.nag
        if nag is not None:
            node.nags.add(nag)
        node.comment = _move_comment(point)

    return game


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _summary_comment(timeline: Sequence[AnalysisTimelinePoint]) -> str:
    summary = summarise(timeline)
    parts = [
        f"Accuracy: White {summary.white_accuracy:.1f} | Black {summary.black_accuracy:.1f}",
    ]
    for side in ("white", "black"):
        counts = summary.counts.get(side)
        if counts:
            listed = ", ".join(f"{name}={n}" for name, n in sorted(counts.items()))
            parts.append(f"{side.capitalize()}: {listed}")
    return " | ".join(parts)


def _move_comment(point: AnalysisTimelinePoint) -> str:
    parts = [
        _eval_annotation(point.consensus_cp),
        point.quality.value,
        f"{point.swing_cp:+d}cp",
        f"conf {point.confidence}%",
        f"wdl {point.wdl_win}/{point.wdl_draw}/{point.wdl_loss}",
    ]
    return " | ".join(parts)


def _eval_annotation(cp_white: int) -> str:
    if abs(cp_white) >= MATE_CP:
        # Mate distance is not carried on the timeline; report the direction only.
        return "[%eval #1]" if cp_white > 0 else "[%eval #-1]"
    return f"[%eval {cp_white / 100:.2f}]"
