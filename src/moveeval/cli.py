"""Command-line entry-point for moveeval.

Usage
-----
  moveeval wdl --cp 35                          (WDL + evaluation bar)
  moveeval classify --before 50 --after -350    (quality of one ply)
  moveeval consensus -s stockfish-online=30 -s chess-api=-10
  moveeval rank candidates.json --sort-by safety
  moveeval review game.pgn --local --out reviewed.pgn

Run ``moveeval <command> --help`` for full option listings.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import chess
import chess.pgn
import click

from .config import ENGINE_PRIORITY, ScoringConfig, load_config
from .consensus import aggregate
from .export import export_review_pgn
from .models import CandidateMove, EvaluationSample, Reading, round_half_up
from .quality import classify_move, move_swing_cp
from .ranker import SORT_MODES, rank, visible_candidates
from .readings import from_payload
from .timeline import build_timeline, local_evaluations, summarise
from .wdl import estimate_wdl, evaluation_bar_percent


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with quality/consensus overrides (default: $MOVEEVAL_CONFIG).",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """moveeval – evaluation consensus and move-quality scoring.

    \b
    Commands:
      wdl        Win/draw/loss estimate and evaluation-bar fill.
      classify   Quality label for one played move.
      consensus  Combine several engines' readings of one position.
      rank       Rank candidate moves for the arrow overlay.
      review     Score every move of a game.
    """
    try:
        ctx.obj = load_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# wdl
# ---------------------------------------------------------------------------


@main.command("wdl")
@click.option("--cp", "cp", type=float, default=None, help="Centipawn evaluation.")
@click.option("--mate", type=int, default=None, help="Mate in N (negative = being mated).")
@click.option("--win-chance", "win_chance", type=float, default=None, help="Win chance in percent.")
def wdl_cmd(cp: float | None, mate: int | None, win_chance: float | None) -> None:
    """Print the WDL estimate and evaluation-bar percentage."""
    wdl = estimate_wdl(cp, mate, win_chance)
    bar = evaluation_bar_percent(cp, mate, win_chance)
    click.echo(f"W/D/L: {wdl.win}/{wdl.draw}/{wdl.loss}")
    click.echo(f"Bar:   {bar:.1f}%")


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


@main.command("classify")
@click.option("--before", required=True, help="Eval before the move (mover's POV): cp or #N for mate.")
@click.option("--after", required=True, help="Eval after the move (mover's POV): cp or #N for mate.")
@click.option(
    "--best/--not-best",
    "is_best",
    default=None,
    help="Whether the move was the engine's top choice.",
)
@click.option("--gap", "gap", type=int, default=None, help="Top move's margin over the 2nd best (cp).")
@click.option("--fen", default=None, help="Position before the move, for sacrifice detection.")
@click.option("--move", "uci", default=None, help="The move in UCI, for sacrifice detection.")
@click.pass_obj
def classify_cmd(
    config: ScoringConfig,
    before: str,
    after: str,
    is_best: bool | None,
    gap: int | None,
    fen: str | None,
    uci: str | None,
) -> None:
    """Classify one played move from its before/after evaluations."""
    before_r = _parse_reading(before, "--before")
    after_r = _parse_reading(after, "--after")

    board = move = None
    if fen and uci:
        try:
            board = chess.Board(fen)
            move = chess.Move.from_uci(uci)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--fen/--move")
        if move not in board.legal_moves:
            raise click.BadParameter(f"{uci} is not legal in {fen}", param_hint="--move")

    quality = classify_move(
        before_r,
        after_r,
        is_best_move=is_best,
        second_best_gap_cp=gap,
        board=board,
        move=move,
        thresholds=config.quality,
    )
    click.echo(f"{quality.label} (swing {move_swing_cp(before_r, after_r):+d}cp, weight {quality.weight})")


# ---------------------------------------------------------------------------
# consensus
# ---------------------------------------------------------------------------


@main.command("consensus")
@click.option(
    "--sample",
    "-s",
    "samples",
    multiple=True,
    required=True,
    help="ENGINE=CP or ENGINE=#N (mate). Repeat once per engine.",
)
@click.pass_obj
def consensus_cmd(config: ScoringConfig, samples: tuple[str, ...]) -> None:
    """Combine engine readings for a single position."""
    parsed: list[EvaluationSample] = []
    for raw in samples:
        engine, sep, value = raw.partition("=")
        if not sep or not engine:
            raise click.BadParameter(f"expected ENGINE=VALUE, got {raw!r}", param_hint="--sample")
        parsed.append(EvaluationSample(engine, _parse_reading(value, "--sample")))

    result = aggregate(parsed, config.consensus)
    click.echo(f"Consensus:  {result.as_reading().display()}")
    click.echo(f"Delta:      {result.delta_cp}cp")
    click.echo(f"Confidence: {result.confidence}%")


# ---------------------------------------------------------------------------
# rank
# ---------------------------------------------------------------------------


@main.command("rank")
@click.argument("candidates_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--sort-by",
    "sort_by",
    default="quality",
    show_default=True,
    type=click.Choice(list(SORT_MODES)),
)
@click.option(
    "--engine",
    "engine_filter",
    default="all",
    show_default=True,
    type=click.Choice(["all", *ENGINE_PRIORITY]),
)
@click.option("--limit", default=3, show_default=True, help="Number of arrows to show.")
def rank_cmd(candidates_file: Path, sort_by: str, engine_filter: str, limit: int) -> None:
    """Rank candidate moves from a JSON list.

    \b
    Each entry: {"engine": ..., "move": "e2e4",
                 "evaluation": 35, "mate": null, "winChance": null}
    """
    raw = _load_json(candidates_file)
    if not isinstance(raw, list):
        raise click.BadParameter("expected a JSON list", param_hint="CANDIDATES_FILE")

    try:
        moves = [
            CandidateMove(
                engine=str(entry["engine"]),
                move=str(entry["move"]),
                evaluation=entry.get("evaluation"),
                mate=entry.get("mate"),
                win_chance=entry.get("winChance"),
            )
            for entry in raw
        ]
    except (KeyError, TypeError, AttributeError) as exc:
        raise click.BadParameter(f"malformed candidate entry: {exc}", param_hint="CANDIDATES_FILE")

    scores = rank(moves, sort_by=sort_by, engine_filter=engine_filter)
    if not scores:
        click.echo("[moveeval] No candidates.")
        return

    for score in visible_candidates(scores, limit):
        click.echo(
            f"  {score.badge_text():<8} {score.move:<6} {score.engine:<17} "
            f"win={score.win:>2}% loss={score.loss:>2}% {score.verdict}"
        )


# ---------------------------------------------------------------------------
# review
# ---------------------------------------------------------------------------


@main.command("review")
@click.argument("game_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--local/--no-local",
    "use_local",
    default=False,
    help="Fill positions without an engine reading from the material count.",
)
@click.option(
    "--out",
    "out_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write an annotated PGN here.",
)
@click.option("--quiet", is_flag=True, help="Only print the summary.")
@click.pass_obj
def review_cmd(
    config: ScoringConfig,
    game_file: Path,
    use_local: bool,
    out_path: Path | None,
    quiet: bool,
) -> None:
    """Score every move of a game from a PGN or a JSON review file.

    \b
    PGN: [%eval] comments are used as engine readings.
    JSON: {"start_fen": ..., "moves": [uci, ...],
           "evaluations": [[{"engine": ..., <engine payload>}, ...], ...],
           "second_best_gaps": [...]}   (optional)
    """
    gaps = None
    if game_file.suffix.lower() == ".pgn":
        start_fen, moves, evaluations, headers = _read_pgn(game_file)
    else:
        start_fen, moves, evaluations, gaps = _read_review_json(game_file)
        headers = {}

    try:
        if use_local and len(evaluations) == len(moves) + 1:
            fallback = local_evaluations(moves, start_fen)
            evaluations = [
                samples if any(s.has_data for s in samples) else fallback[i]
                for i, samples in enumerate(evaluations)
            ]

        timeline = build_timeline(
            moves,
            evaluations,
            start_fen,
            second_best_gaps=gaps,
            config=config,
            verbose=not quiet,
        )
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if not quiet:
        click.echo("")
        for point in timeline:
            dots = "." if point.mover == chess.WHITE else "..."
            click.echo(
                f"  {point.move_number}{dots}{point.san:<8} {point.quality.label:<11} "
                f"{point.consensus_cp:+6d}cp  conf {point.confidence:>3}%  "
                f"wdl {point.wdl_win}/{point.wdl_draw}/{point.wdl_loss}"
            )

    summary = summarise(timeline)
    click.echo(f"\n[moveeval] Accuracy: White {summary.white_accuracy:.1f} | Black {summary.black_accuracy:.1f}")

    if out_path is not None:
        export_review_pgn(timeline, start_fen, out_path, headers=headers)
        click.echo(f"[moveeval] Annotated PGN → {out_path}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_reading(text: str, hint: str) -> Reading:
    """``"35"`` → centipawns, ``"#3"`` / ``"#-2"`` → mate."""
    text = text.strip()
    try:
        if text.startswith("#"):
            return Reading.mate_in(int(text[1:]))
        return Reading.centipawns(round_half_up(float(text)))
    except (ValueError, OverflowError):
        raise click.BadParameter(f"expected centipawns or #N, got {text!r}", param_hint=hint)


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{path}: invalid JSON ({exc})")


def _read_pgn(
    path: Path,
) -> tuple[str, list[str], list[list[EvaluationSample]], dict[str, str]]:
    with open(path, encoding="utf-8") as fh:
        game = chess.pgn.read_game(fh)
    if game is None:
        raise click.BadParameter(f"{path}: no game found")

    start_fen = game.board().fen()
    moves: list[str] = []
    evaluations: list[list[EvaluationSample]] = [_pgn_eval(game)]
    for node in game.mainline():
        moves.append(node.move.uci())
        evaluations.append(_pgn_eval(node))

    headers = {
        key: game.headers[key]
        for key in ("White", "Black", "Event", "Date")
        if key in game.headers
    }
    return start_fen, moves, evaluations, headers


def _pgn_eval(node: chess.pgn.GameNode) -> list[EvaluationSample]:
    score = node.eval()
    if score is None:
        return []
    white = score.white()
    return [EvaluationSample("pgn", Reading.from_fields(white.score(), white.mate()))]


def _read_review_json(
    path: Path,
) -> tuple[str, list[str], list[list[EvaluationSample]], list[int | None] | None]:
    raw = _load_json(path)
    if not isinstance(raw, dict) or "moves" not in raw or "evaluations" not in raw:
        raise click.BadParameter(f"{path}: expected an object with 'moves' and 'evaluations'")

    evaluations = [
        [from_payload(str(entry.get("engine", "unknown")), entry) for entry in position]
        for position in raw["evaluations"]
    ]
    return (
        raw.get("start_fen", chess.STARTING_FEN),
        [str(m) for m in raw["moves"]],
        evaluations,
        raw.get("second_best_gaps"),
    )
