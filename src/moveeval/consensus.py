"""Combine readings from several engines for the same position.

consensus_cp
    Mean of the centipawn readings.  A forced mate reported by any engine
    dominates: the mate direction most engines agree on wins (ties go to the
    higher-priority engine) and the consensus becomes +/-MATE_CP.
delta_cp
    Largest pairwise gap between centipawn readings; how much the engines
    disagree.
confidence
    100 at zero disagreement, falling linearly to ``confidence_floor`` once
    the gap reaches ``confidence_span_cp``.
"""

from __future__ import annotations

import statistics
from collections.abc import Iterable

from .config import DEFAULT_CONFIG, ENGINE_PRIORITY, ConsensusConfig
from .models import MATE_CP, Consensus, EvaluationSample, round_half_up
from .wdl import win_chance_to_cp

_NO_DATA = Consensus(consensus_cp=0, delta_cp=0, confidence=0)


def aggregate(
    samples: Iterable[EvaluationSample],
    config: ConsensusConfig = DEFAULT_CONFIG.consensus,
) -> Consensus:
    """Return the consensus of *samples*; neutral zero-confidence if none has data."""
    usable = sorted(
        (s for s in samples if s.has_data),
        key=lambda s: engine_priority(s.engine),
    )
    if not usable:
        return _NO_DATA

    cp_values = [_cp_of(s) for s in usable if not s.reading.is_mate]
    delta = _max_gap(cp_values)
    confidence = confidence_for_delta(delta, config)

    mates = [s for s in usable if s.reading.is_mate]
    if mates:
        winning = [s for s in mates if s.reading.mates_for_owner()]
        losing = [s for s in mates if not s.reading.mates_for_owner()]
        if len(winning) != len(losing):
            chosen = winning if len(winning) > len(losing) else losing
        else:
            # Tie: the highest-priority mate reporter decides.
            chosen = winning if mates[0].reading.mates_for_owner() else losing
        lead = chosen[0].reading
        consensus_cp = MATE_CP if lead.mates_for_owner() else -MATE_CP
        return Consensus(consensus_cp, delta, confidence, mate=lead.value)

    consensus_cp = round_half_up(statistics.mean(cp_values))
    return Consensus(consensus_cp, delta, confidence)


def confidence_for_delta(
    delta_cp: int, config: ConsensusConfig = DEFAULT_CONFIG.consensus
) -> int:
    """Linear decay from ``max_confidence`` to ``confidence_floor``."""
    drop = (config.max_confidence - config.confidence_floor) * delta_cp / config.confidence_span_cp
    return max(config.confidence_floor, round_half_up(config.max_confidence - drop))


def engine_priority(engine: str) -> int:
    """Index of *engine* in the tie-break order; unknown engines sort last."""
    try:
        return ENGINE_PRIORITY.index(engine)
    except ValueError:
        return len(ENGINE_PRIORITY)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _cp_of(sample: EvaluationSample) -> int:
    if sample.reading.kind == "centipawn":
        return sample.reading.value or 0
    # Win-chance-only sample.
    return win_chance_to_cp(sample.win_chance or 50.0)


def _max_gap(values: list[int]) -> int:
    if len(values) < 2:
        return 0
    return max(values) - min(values)
