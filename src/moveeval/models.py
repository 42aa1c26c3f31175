"""Shared data-model types used across all modules."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

import chess
import chess.pgn

# Centipawn stand-in for a forced mate (shorter mates are not preferred).
MATE_CP = 10_000


def round_half_up(value: float) -> int:
    """Round halves towards +infinity: 2.5 -> 3, -2.5 -> -2."""
    return math.floor(value + 0.5)


# ---------------------------------------------------------------------------
# Engine readings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Reading:
    """One engine reading: exactly one of centipawns / mate, or nothing.

    The sign is relative to whoever the caller measures from (White, or the
    side that just moved); :meth:`flipped` switches perspective.
    """

    kind: str           # "centipawn" | "mate" | "none"
    value: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in ("centipawn", "mate", "none"):
            raise ValueError(f"unknown reading kind {self.kind!r}")
        if (self.kind == "none") != (self.value is None):
            raise ValueError(f"{self.kind!r} reading with value={self.value!r}")

    @classmethod
    def centipawns(cls, value: int) -> "Reading":
        return cls("centipawn", int(value))

    @classmethod
    def mate_in(cls, moves: int) -> "Reading":
        return cls("mate", int(moves))

    @classmethod
    def empty(cls) -> "Reading":
        return cls("none")

    @classmethod
    def from_fields(cls, evaluation: float | None, mate: int | None) -> "Reading":
        """Build a reading from nullable fields; mate overrides centipawns."""
        if mate is not None:
            return cls.mate_in(mate)
        if evaluation is not None:
            return cls.centipawns(round_half_up(evaluation))
        return cls.empty()

    @property
    def is_mate(self) -> bool:
        return self.kind == "mate"

    @property
    def is_empty(self) -> bool:
        return self.kind == "none"

    def mates_for_owner(self) -> bool:
        """True when this is a forced mate delivered by the owning side.

        Mate-in-0 means the owning side is already mated.
        """
        return self.kind == "mate" and (self.value or 0) > 0

    def flipped(self) -> "Reading":
        if self.value is None:
            return self
        if self.kind == "mate" and self.value == 0:
            # Owner already mated: from the other side that is a delivered mate.
            return Reading.mate_in(1)
        return Reading(self.kind, -self.value)

    def as_cp(self) -> int | None:
        """Centipawn equivalent, mate mapped to +/-MATE_CP; None when empty."""
        if self.kind == "mate":
            return MATE_CP if self.mates_for_owner() else -MATE_CP
        return self.value

    def display(self) -> str:
        """Human-readable evaluation string."""
        if self.kind == "mate":
            sign = "+" if self.mates_for_owner() else "-"
            return f"M{sign}{abs(self.value or 0)}"
        if self.kind == "centipawn":
            return f"{(self.value or 0) / 100:+.2f}"
        return "—"


@dataclass(frozen=True)
class EvaluationSample:
    """Normalised output of one engine for one position."""

    engine: str
    reading: Reading
    win_chance: float | None = None   # 0-100, same perspective as reading
    best_move: str | None = None      # UCI

    @property
    def centipawns(self) -> int | None:
        return self.reading.value if self.reading.kind == "centipawn" else None

    @property
    def mate_in(self) -> int | None:
        return self.reading.value if self.reading.kind == "mate" else None

    @property
    def has_data(self) -> bool:
        return not self.reading.is_empty or self.win_chance is not None

    def flipped(self) -> "EvaluationSample":
        win_chance = None if self.win_chance is None else 100.0 - self.win_chance
        return EvaluationSample(self.engine, self.reading.flipped(), win_chance, self.best_move)


# ---------------------------------------------------------------------------
# Derived scores
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WdlEstimate:
    win: int
    draw: int
    loss: int


@dataclass(frozen=True)
class Consensus:
    consensus_cp: int
    delta_cp: int
    confidence: int
    mate: int | None = None   # mate reading that dominated the consensus, if any

    def as_reading(self) -> Reading:
        if self.mate is not None:
            return Reading.mate_in(self.mate)
        return Reading.centipawns(self.consensus_cp)


class MoveQuality(enum.Enum):
    """Quality label for a played move, best first."""

    BRILLIANT = "brilliant"
    GREAT = "great"
    BEST = "best"
    GOOD = "good"
    INACCURACY = "inaccuracy"
    MISTAKE = "mistake"
    BLUNDER = "blunder"

    @property
    def weight(self) -> int:
        return _QUALITY_WEIGHT[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def color(self) -> str:
        return _QUALITY_COLOR[self]

    @property
    def nag(self) -> int | None:
        return _QUALITY_NAG.get(self)


_QUALITY_WEIGHT: dict[MoveQuality, int] = {
    MoveQuality.BRILLIANT: 100,
    MoveQuality.GREAT: 95,
    MoveQuality.BEST: 90,
    MoveQuality.GOOD: 80,
    MoveQuality.INACCURACY: 65,
    MoveQuality.MISTAKE: 40,
    MoveQuality.BLUNDER: 15,
}

_QUALITY_COLOR: dict[MoveQuality, str] = {
    MoveQuality.BRILLIANT: "#22c55e",
    MoveQuality.GREAT: "#14b8a6",
    MoveQuality.BEST: "#3b82f6",
    MoveQuality.GOOD: "#84cc16",
    MoveQuality.INACCURACY: "#eab308",
    MoveQuality.MISTAKE: "#f97316",
    MoveQuality.BLUNDER: "#ef4444",
}

_QUALITY_NAG: dict[MoveQuality, int] = {
    MoveQuality.BRILLIANT: chess.pgn.NAG_BRILLIANT_MOVE,     # !!
    MoveQuality.GREAT: chess.pgn.NAG_GOOD_MOVE,              # !
    MoveQuality.INACCURACY: chess.pgn.NAG_DUBIOUS_MOVE,      # ?!
    MoveQuality.MISTAKE: chess.pgn.NAG_MISTAKE,              # ?
    MoveQuality.BLUNDER: chess.pgn.NAG_BLUNDER,              # ??
}


# ---------------------------------------------------------------------------
# Game timeline
# ---------------------------------------------------------------------------


@dataclass
class AnalysisTimelinePoint:
    """Scoring data for one played ply."""

    ply: int                   # 1-indexed half-move
    move_number: int           # full-move number the ply belongs to
    fen: str                   # position *after* the move
    move: str                  # UCI
    san: str
    mover: chess.Color
    stockfish_cp: int | None   # White's POV
    chess_api_cp: int | None   # White's POV
    consensus_cp: int          # White's POV
    delta_cp: int              # engine disagreement, not the eval swing
    confidence: int
    quality: MoveQuality
    wdl_win: int               # White's POV
    wdl_draw: int
    wdl_loss: int
    swing_cp: int = 0          # eval change for the mover (after - before)


# ---------------------------------------------------------------------------
# Candidate moves
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CandidateMove:
    """An engine-suggested move for the current (unplayed) position."""

    engine: str
    move: str                       # UCI
    evaluation: float | None = None  # centipawns, side-to-move POV
    mate: int | None = None
    win_chance: float | None = None


@dataclass(frozen=True)
class CandidateMoveScore:
    move: str
    engine: str
    win: int
    loss: int
    quality: float   # expected score for the side to move, 0-100
    rank: int
    verdict: str
    color: str

    @property
    def is_best(self) -> bool:
        return self.rank == 1

    def badge_text(self) -> str:
        q = round_half_up(self.quality)
        return f"BEST {q}" if self.is_best else f"{self.rank}:{q}"
