"""Tests for engine-payload normalisation (no network)."""

from __future__ import annotations

import pytest

from moveeval.models import Reading
from moveeval.readings import (
    evaluation_text,
    extract_uci_move,
    from_chess_api,
    from_payload,
    from_stockfish_online,
    normalise_depth,
)


# ---------------------------------------------------------------------------
# stockfish-online
# ---------------------------------------------------------------------------


def test_stockfish_pawn_units_are_scaled() -> None:
    sample = from_stockfish_online(
        {"success": True, "evaluation": 1.36, "mate": None,
         "bestmove": "bestmove e2e4 ponder e7e5"}
    )
    assert sample.engine == "stockfish-online"
    assert sample.reading == Reading.centipawns(136)
    assert sample.best_move == "e2e4"


def test_stockfish_centipawns_pass_through() -> None:
    sample = from_stockfish_online({"success": True, "evaluation": -180})
    assert sample.centipawns == -180


def test_stockfish_mate_overrides_eval() -> None:
    sample = from_stockfish_online({"success": True, "evaluation": 50.0, "mate": -3})
    assert sample.reading == Reading.mate_in(-3)
    assert sample.centipawns is None
    assert sample.mate_in == -3


def test_stockfish_failure_is_empty() -> None:
    sample = from_stockfish_online({"success": False, "data": "Invalid fen"})
    assert not sample.has_data
    assert sample.best_move is None


# ---------------------------------------------------------------------------
# chess-api
# ---------------------------------------------------------------------------


def test_chess_api_centipawns_string() -> None:
    sample = from_chess_api({"centipawns": "36", "eval": 0.4, "move": "g1f3", "winChance": 53.3})
    assert sample.reading == Reading.centipawns(36)
    assert sample.best_move == "g1f3"
    assert sample.win_chance == pytest.approx(53.3)


def test_chess_api_eval_in_pawns() -> None:
    sample = from_chess_api({"eval": -0.5, "lan": "e7e5"})
    assert sample.centipawns == -50
    assert sample.best_move == "e7e5"


def test_chess_api_mate() -> None:
    sample = from_chess_api({"eval": 100, "mate": 2, "move": "d1h5"})
    assert sample.reading == Reading.mate_in(2)


@pytest.mark.parametrize("bad", ["abc", None, float("nan"), True, [1, 2]])
def test_chess_api_malformed_eval_is_dropped(bad: object) -> None:
    sample = from_chess_api({"centipawns": bad})
    assert sample.reading.is_empty


# ---------------------------------------------------------------------------
# Dispatch and helpers
# ---------------------------------------------------------------------------


def test_fractional_centipawns_round_halves_up() -> None:
    assert Reading.from_fields(10.5, None) == Reading.centipawns(11)
    assert Reading.from_fields(-10.5, None) == Reading.centipawns(-10)
    assert from_chess_api({"eval": 0.125}).centipawns == 13


def test_from_payload_dispatch() -> None:
    assert from_payload("stockfish-online", {"success": True, "evaluation": 0.2}).centipawns == 20
    assert from_payload("chess-api", {"centipawns": 20}).centipawns == 20


def test_from_payload_generic_shape() -> None:
    sample = from_payload("local", {"evaluation": 320, "winChance": 76.0, "bestmove": "b1c3"})
    assert sample.engine == "local"
    assert sample.centipawns == 320
    assert sample.win_chance == 76.0
    assert sample.best_move == "b1c3"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("bestmove e2e4 ponder e7e5", "e2e4"),
        ("a7a8q", "a7a8q"),
        ("none", None),
        ("", None),
        (None, None),
        ("resign", None),
    ],
)
def test_extract_uci_move(text: str | None, expected: str | None) -> None:
    assert extract_uci_move(text) == expected


def test_evaluation_text() -> None:
    assert evaluation_text(136) == "Eval: +1.36"
    assert evaluation_text(-40) == "Eval: -0.40"
    assert evaluation_text(None, -3) == "Mate in 3"
    assert evaluation_text() == "No evaluation"


def test_normalise_depth() -> None:
    assert normalise_depth("stockfish-online", 20) == 15
    assert normalise_depth("chess-api", 30) == 18
    assert normalise_depth("chess-api", 0) == 1
    assert normalise_depth("local", 40) == 40
