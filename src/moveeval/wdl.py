"""Win/draw/loss estimation and evaluation-bar fill.

Win probability follows the logistic curve

    win% = 50 + 50 * (2 / (1 + exp(-K * cp)) - 1),   K = 0.00368208

which maps roughly +/-400 cp to 90/10.  The draw share peaks at 34 % for a
level position and shrinks linearly (floored at 5 %) as the position becomes
one-sided:

    draw_rate = clamp(0.34 - |win% - 50| / 120, 0.05, 0.34)

The evaluation bar is deliberately *not* a probability: it is a coarse linear
map, ``50 + cp / 24`` clamped to [1, 99].

All functions take the scores from one side's point of view and answer from
that same side's point of view.
"""

from __future__ import annotations

import math

from .models import EvaluationSample, Reading, WdlEstimate, round_half_up

_K: float = 0.00368208
_BAR_CP_LIMIT: int = 1200
_BAR_CP_PER_PERCENT: float = 24.0
_MAX_DRAW: float = 0.34
_MIN_DRAW: float = 0.05
_DRAW_FALLOFF: float = 120.0

_MATE_WIN = WdlEstimate(win=99, draw=1, loss=0)
_MATE_LOSS = WdlEstimate(win=0, draw=1, loss=99)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def has_evaluation_data(
    evaluation: float | None = None,
    mate: int | None = None,
    win_chance: float | None = None,
) -> bool:
    return evaluation is not None or mate is not None or win_chance is not None


def cp_to_win_chance(cp: float) -> float:
    """Logistic win chance in percent, clamped to [1, 99]."""
    # Keep exp() in range for absurd inputs; the result saturates long before.
    x = _clamp(-_K * cp, -700.0, 700.0)
    win_chance = 50 + 50 * (2 / (1 + math.exp(x)) - 1)
    return _clamp(win_chance, 1, 99)


def win_chance_to_cp(win_chance: float) -> int:
    """Inverse of :func:`cp_to_win_chance` (input clamped to [1, 99])."""
    p = _clamp(win_chance, 1, 99) / 100
    return round_half_up(math.log(p / (1 - p)) / _K)


def estimate_wdl(
    evaluation: float | None = None,
    mate: int | None = None,
    win_chance: float | None = None,
) -> WdlEstimate:
    """Return a win/draw/loss triple that always sums to 100.

    *mate* overrides everything else: positive means the owning side mates
    (99/1/0); zero or negative means it is being mated (0/1/99).
    Missing data is treated as a level position.
    """
    if mate is not None:
        return _MATE_WIN if mate > 0 else _MATE_LOSS

    if win_chance is not None:
        white_win = _clamp(win_chance, 1, 99)
    else:
        white_win = cp_to_win_chance(evaluation or 0)

    draw_rate = _clamp(
        _MAX_DRAW - abs(white_win - 50) / _DRAW_FALLOFF, _MIN_DRAW, _MAX_DRAW
    )
    win = round_half_up(white_win / 100 * (1 - draw_rate) * 100)
    draw = round_half_up(draw_rate * 100)
    loss = 100 - win - draw

    if loss < 0:
        loss = 0
        draw = 100 - win

    return WdlEstimate(win=win, draw=draw, loss=loss)


def evaluation_bar_percent(
    evaluation: float | None = None,
    mate: int | None = None,
    win_chance: float | None = None,
) -> float:
    """Fill level of the evaluation bar, always within [1, 99]."""
    if mate is not None:
        return 99 if mate > 0 else 1
    if win_chance is not None:
        return _clamp(win_chance, 1, 99)
    cp = _clamp(evaluation or 0, -_BAR_CP_LIMIT, _BAR_CP_LIMIT)
    return _clamp(50 + cp / _BAR_CP_PER_PERCENT, 1, 99)


def chart_y(cp: float) -> float:
    """Vertical position (0 = top, 100 = bottom) of *cp* on the timeline chart."""
    clamped = _clamp(cp, -_BAR_CP_LIMIT, _BAR_CP_LIMIT)
    return 100 - (clamped + _BAR_CP_LIMIT) / (2 * _BAR_CP_LIMIT) * 100


# ---------------------------------------------------------------------------
# Adapters for the tagged reading types
# ---------------------------------------------------------------------------


def wdl_for_reading(reading: Reading, win_chance: float | None = None) -> WdlEstimate:
    return estimate_wdl(
        reading.value if reading.kind == "centipawn" else None,
        reading.value if reading.kind == "mate" else None,
        win_chance,
    )


def wdl_for_sample(sample: EvaluationSample) -> WdlEstimate:
    return wdl_for_reading(sample.reading, sample.win_chance)


def bar_for_sample(sample: EvaluationSample) -> float:
    return evaluation_bar_percent(sample.centipawns, sample.mate_in, sample.win_chance)
