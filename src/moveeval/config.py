"""Tunable thresholds for quality classification and engine consensus.

All scoring functions accept these objects explicitly; the module-level
``DEFAULT_CONFIG`` is immutable and only used when a caller passes nothing.

Resolution order for :func:`load_config`:
1. An explicit *path* argument
2. ``MOVEEVAL_CONFIG`` environment variable
3. Built-in defaults

The config file is JSON with two optional sections::

    {
      "quality":   {"best": -10, "good": -50, "inaccuracy": -100, "mistake": -250},
      "consensus": {"confidence_floor": 20, "confidence_span_cp": 400}
    }
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Engines in tie-break priority order (first wins).
ENGINE_PRIORITY: tuple[str, ...] = ("stockfish-online", "chess-api", "local")

# Deepest search each remote engine accepts.
ENGINE_MAX_DEPTH: dict[str, int] = {
    "stockfish-online": 15,
    "chess-api": 18,
}


@dataclass(frozen=True)
class QualityThresholds:
    """Lower bounds of each delta band (mover's POV, centipawns).

    A ply whose delta is >= ``best`` lands in the best band; below
    ``mistake`` it is a blunder.
    """

    best: int = -10
    good: int = -50
    inaccuracy: int = -100
    mistake: int = -250
    great_gap_cp: int = 150          # top move must beat the 2nd-best by this much
    brilliant_min_sacrifice: int = 2  # pawns of material left en prise
    brilliant_max_eval_before: int = 400

    def __post_init__(self) -> None:
        if not (self.best >= self.good >= self.inaccuracy >= self.mistake):
            raise ValueError(
                "quality thresholds must satisfy best >= good >= inaccuracy >= mistake, "
                f"got {self.best}, {self.good}, {self.inaccuracy}, {self.mistake}"
            )


@dataclass(frozen=True)
class ConsensusConfig:
    max_confidence: int = 100
    confidence_floor: int = 20
    confidence_span_cp: int = 400  # disagreement at which confidence bottoms out

    def __post_init__(self) -> None:
        if not 0 <= self.confidence_floor <= self.max_confidence <= 100:
            raise ValueError(
                "expected 0 <= confidence_floor <= max_confidence <= 100, "
                f"got floor={self.confidence_floor} max={self.max_confidence}"
            )
        if self.confidence_span_cp <= 0:
            raise ValueError("confidence_span_cp must be positive")


@dataclass(frozen=True)
class ScoringConfig:
    quality: QualityThresholds = field(default_factory=QualityThresholds)
    consensus: ConsensusConfig = field(default_factory=ConsensusConfig)


DEFAULT_CONFIG = ScoringConfig()


def load_config(path: Path | None = None) -> ScoringConfig:
    """Return a :class:`ScoringConfig`, reading JSON overrides when available."""
    if path is None:
        env_val = os.environ.get("MOVEEVAL_CONFIG")
        if not env_val:
            return DEFAULT_CONFIG
        path = Path(env_val)
        if not path.is_file():
            raise FileNotFoundError(
                f"MOVEEVAL_CONFIG={env_val!r} does not point to an existing file"
            )

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a JSON object at the top level")

    unknown = set(raw) - {"quality", "consensus"}
    if unknown:
        raise ValueError(f"{path}: unknown config sections {sorted(unknown)}")

    return ScoringConfig(
        quality=_build(QualityThresholds, raw.get("quality", {}), path),
        consensus=_build(ConsensusConfig, raw.get("consensus", {}), path),
    )


def _build(cls: Any, section: dict[str, Any], path: Path) -> Any:
    names = {f.name for f in dataclasses.fields(cls)}
    unknown = set(section) - names
    if unknown:
        raise ValueError(f"{path}: unknown {cls.__name__} keys {sorted(unknown)}")
    return cls(**{k: int(v) for k, v in section.items()})
