"""Normalise raw engine-API payloads into :class:`EvaluationSample` objects.

Two remote engines are understood:

``stockfish-online``
    ``{"success": bool, "evaluation": float, "mate": int|null,
    "bestmove": "bestmove e2e4 ponder e7e5", "continuation": "..."}``.
    The evaluation is usually in pawn units (``1.36``) but some deployments
    send centipawns; anything with magnitude <= 25 is treated as pawns.

``chess-api``
    ``{"centipawns": "36" | 36, "eval": 0.36, "mate": int|null,
    "move": "e2e4", "lan": "e2e4", "winChance": 53.1}``.
    ``centipawns`` wins over ``eval`` (pawn units) when both are present.

Nothing here performs I/O.  Malformed values are dropped rather than raised
so a half-broken response still yields whatever it did contain.
"""

from __future__ import annotations

import math
import re
from typing import Any

from .config import ENGINE_MAX_DEPTH
from .models import EvaluationSample, Reading

_UCI_RE = re.compile(r"[a-h][1-8][a-h][1-8][qrbn]?")
_PAWN_UNIT_LIMIT = 25


def from_payload(engine: str, payload: dict[str, Any]) -> EvaluationSample:
    """Dispatch on *engine* id."""
    if engine == "stockfish-online":
        return from_stockfish_online(payload)
    if engine == "chess-api":
        return from_chess_api(payload)
    # Already-normalised shape: {evaluation, mate, winChance, bestmove}.
    return EvaluationSample(
        engine=engine,
        reading=Reading.from_fields(_number(payload.get("evaluation")), _int(payload.get("mate"))),
        win_chance=_number(payload.get("winChance")),
        best_move=extract_uci_move(payload.get("bestmove")),
    )


def from_stockfish_online(payload: dict[str, Any]) -> EvaluationSample:
    if not payload.get("success"):
        return EvaluationSample("stockfish-online", Reading.empty())

    raw = _number(payload.get("evaluation"))
    cp: float | None = None
    if raw is not None:
        cp = raw * 100 if abs(raw) <= _PAWN_UNIT_LIMIT else raw

    return EvaluationSample(
        engine="stockfish-online",
        reading=Reading.from_fields(cp, _int(payload.get("mate"))),
        best_move=extract_uci_move(payload.get("bestmove")),
    )


def from_chess_api(payload: dict[str, Any]) -> EvaluationSample:
    cp = _number(payload.get("centipawns"))
    if cp is None:
        pawns = _number(payload.get("eval"))
        cp = None if pawns is None else pawns * 100

    return EvaluationSample(
        engine="chess-api",
        reading=Reading.from_fields(cp, _int(payload.get("mate"))),
        win_chance=_number(payload.get("winChance")),
        best_move=extract_uci_move(payload.get("move") or payload.get("lan")),
    )


def extract_uci_move(text: str | None) -> str | None:
    """Pull the first UCI move out of e.g. ``"bestmove e2e4 ponder e7e5"``."""
    if not text or text == "none":
        return None
    match = _UCI_RE.search(text)
    return match.group(0) if match else None


def evaluation_text(evaluation: float | None = None, mate: int | None = None) -> str:
    """Short status line for an evaluation in centipawns or mate."""
    if mate is not None:
        return f"Mate in {abs(mate)}"
    if evaluation is not None:
        return f"Eval: {evaluation / 100:+.2f}"
    return "No evaluation"


def normalise_depth(engine: str, depth: int) -> int:
    """Clamp *depth* to what *engine* accepts (at least 1)."""
    limit = ENGINE_MAX_DEPTH.get(engine)
    if limit is None:
        return max(1, depth)
    return max(1, min(depth, limit))


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def _int(value: Any) -> int | None:
    parsed = _number(value)
    return None if parsed is None else int(parsed)
