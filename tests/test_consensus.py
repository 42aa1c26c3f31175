"""Tests for multi-engine consensus."""

from __future__ import annotations

import pytest

from moveeval.config import ConsensusConfig
from moveeval.consensus import aggregate, confidence_for_delta
from moveeval.models import MATE_CP, Consensus, EvaluationSample, Reading


def _cp(engine: str, cp: int) -> EvaluationSample:
    return EvaluationSample(engine, Reading.centipawns(cp))


def _mate(engine: str, n: int) -> EvaluationSample:
    return EvaluationSample(engine, Reading.mate_in(n))


# ---------------------------------------------------------------------------
# No data / single engine
# ---------------------------------------------------------------------------


def test_no_samples_is_neutral() -> None:
    assert aggregate([]) == Consensus(consensus_cp=0, delta_cp=0, confidence=0)


def test_empty_readings_are_ignored() -> None:
    empty = EvaluationSample("chess-api", Reading.empty())
    assert aggregate([empty]) == Consensus(0, 0, 0)
    assert aggregate([empty, _cp("stockfish-online", 45)]) == Consensus(45, 0, 100)


def test_single_engine_has_full_confidence() -> None:
    result = aggregate([_cp("stockfish-online", 30)])
    assert result.consensus_cp == 30
    assert result.delta_cp == 0
    assert result.confidence == 100


# ---------------------------------------------------------------------------
# Disagreement
# ---------------------------------------------------------------------------


def test_two_engines_disagreeing() -> None:
    split = aggregate([_cp("stockfish-online", 30), _cp("chess-api", -10)])
    agreed = aggregate([_cp("stockfish-online", 30), _cp("chess-api", 30)])
    assert split.consensus_cp == 10
    assert split.delta_cp == 40
    assert split.confidence == 92
    assert agreed.confidence == 100
    assert split.confidence < agreed.confidence


def test_delta_is_widest_gap() -> None:
    result = aggregate([_cp("stockfish-online", 10), _cp("chess-api", 70), _cp("local", -40)])
    assert result.delta_cp == 110
    assert result.consensus_cp == 13


def test_mean_rounds_halves_up() -> None:
    assert aggregate([_cp("stockfish-online", 10), _cp("chess-api", 11)]).consensus_cp == 11
    assert aggregate([_cp("stockfish-online", -10), _cp("chess-api", -11)]).consensus_cp == -10


def test_confidence_never_rises_with_gap() -> None:
    confidences = [
        aggregate([_cp("stockfish-online", 0), _cp("chess-api", gap)]).confidence
        for gap in range(0, 2000, 10)
    ]
    assert confidences == sorted(confidences, reverse=True)


def test_confidence_floor() -> None:
    assert confidence_for_delta(400) == 20
    assert confidence_for_delta(5000) == 20


def test_custom_confidence_config() -> None:
    config = ConsensusConfig(confidence_floor=50, confidence_span_cp=100)
    assert confidence_for_delta(50, config) == 75
    assert confidence_for_delta(300, config) == 50


def test_confidence_rounds_halves_up() -> None:
    config = ConsensusConfig(confidence_floor=0, confidence_span_cp=200)
    assert confidence_for_delta(1, config) == 100   # 99.5
    assert confidence_for_delta(3, config) == 99    # 98.5


def test_invalid_confidence_config() -> None:
    with pytest.raises(ValueError):
        ConsensusConfig(confidence_floor=120)
    with pytest.raises(ValueError):
        ConsensusConfig(confidence_span_cp=0)


def test_win_chance_only_sample_counts_as_cp() -> None:
    level = EvaluationSample("chess-api", Reading.empty(), win_chance=50.0)
    result = aggregate([_cp("stockfish-online", 40), level])
    assert result.consensus_cp == 20
    assert result.delta_cp == 40


# ---------------------------------------------------------------------------
# Mate dominance
# ---------------------------------------------------------------------------


def test_mate_dominates_centipawns() -> None:
    result = aggregate([_cp("stockfish-online", 50), _mate("chess-api", 3)])
    assert result.mate == 3
    assert result.consensus_cp == MATE_CP
    assert result.as_reading() == Reading.mate_in(3)


def test_mate_tie_goes_to_higher_priority_engine() -> None:
    result = aggregate([_mate("chess-api", 4), _mate("stockfish-online", -2)])
    assert result.mate == -2
    assert result.consensus_cp == -MATE_CP


def test_mate_majority_wins() -> None:
    result = aggregate(
        [_mate("stockfish-online", -2), _mate("chess-api", 4), _mate("local", 3)]
    )
    assert result.mate == 4
    assert result.consensus_cp == MATE_CP


def test_plain_consensus_has_no_mate() -> None:
    result = aggregate([_cp("stockfish-online", -120)])
    assert result.mate is None
    assert result.as_reading() == Reading.centipawns(-120)
