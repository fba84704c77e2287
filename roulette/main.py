from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich import print
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import RoulettePolicy, default_history_file, default_pool_file, policy_from_env
from .errors import RouletteError
from .ingest import append_round, read_history, read_pool
from .matcher import generate_round
from .report import history_summary, round_frame, simulation_frame
from .simulate import simulate_rounds


app = typer.Typer(help="Coffee Roulette CLI")

TIE_BREAKS = ("alphabetical", "random")


@app.callback()
def _main() -> None:
	"""History-aware 1:1 matching for recurring coffee breaks."""
	load_dotenv()


def _setup_logging(verbose: bool) -> None:
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.INFO,
		format="%(message)s",
		datefmt="[%X]",
		handlers=[RichHandler(show_path=False)],
		force=True,
	)


def _policy(tie_break: Optional[str], seed: Optional[int]) -> RoulettePolicy:
	if tie_break is not None and tie_break not in TIE_BREAKS:
		raise typer.BadParameter(f"must be one of {', '.join(TIE_BREAKS)}", param_hint="--tie-break")
	return policy_from_env(tie_break=tie_break, seed=seed)


def _fail(exc: Exception) -> typer.Exit:
	print(f"[red]Error:[/red] {escape(str(exc))}")
	return typer.Exit(code=1)


@app.command()
def match(
	pool_path: Optional[Path] = typer.Option(None, "--pool", help="Participant pool, one per line"),
	history_path: Optional[Path] = typer.Option(None, "--history", help="History log of previous matches"),
	save: bool = typer.Option(True, "--save/--no-save", help="Append the new round to the history log"),
	out_path: Optional[Path] = typer.Option(None, "--out", help="Also write the round to this CSV"),
	tie_break: Optional[str] = typer.Option(None, help="Tie-break for the leftover: 'alphabetical' or 'random'"),
	seed: Optional[int] = typer.Option(None, help="Seed for the random tie-break"),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Log window sizes and retries"),
):
	"""Compute this round's matches, avoiding recently matched pairs."""
	_setup_logging(verbose)
	pool_path = pool_path or default_pool_file()
	history_path = history_path or default_history_file()

	try:
		policy = _policy(tie_break, seed)
		pool = read_pool(pool_path)
		records = read_history(history_path)
		match_round = generate_round(pool, records, policy)
	except (RouletteError, FileNotFoundError, ValueError) as e:
		raise _fail(e)

	table = Table("#", "Group")
	for i, line in enumerate(match_round.lines(), start=1):
		table.add_row(str(i), escape(line))
	print(table)
	print(
		f"[bold]Matched {match_round.participants} participants into {len(match_round.groups)} groups[/bold] "
		f"(avoiding the last {match_round.excluded_history} history pairs)"
	)

	if out_path:
		round_frame(match_round).to_csv(out_path, index=False)
		print(f"[green]Wrote round to[/green] {out_path}")
	if save:
		append_round(history_path, match_round)
		print(f"[green]Appended round to[/green] {history_path}")


@app.command()
def history(
	history_path: Optional[Path] = typer.Option(None, "--history", help="History log of previous matches"),
	top: int = typer.Option(15, help="Number of pairs to show"),
):
	"""Show which pairs met most often and how long ago."""
	history_path = history_path or default_history_file()
	try:
		records = read_history(history_path)
	except RouletteError as e:
		raise _fail(e)

	summary = history_summary(records)
	print(f"[bold]{len(records)} history records, {len(summary)} distinct pairs[/bold]")
	table = Table(*summary.columns)
	for _, r in summary.head(top).iterrows():
		table.add_row(*(escape(str(r[c])) for c in summary.columns))
	print(table)


@app.command()
def simulate(
	pool_path: Optional[Path] = typer.Option(None, "--pool", help="Participant pool, one per line"),
	history_path: Optional[Path] = typer.Option(None, "--history", help="History log to start from"),
	rounds: int = typer.Option(10, help="Number of rounds to simulate"),
	tie_break: Optional[str] = typer.Option(None, help="Tie-break for the leftover: 'alphabetical' or 'random'"),
	seed: Optional[int] = typer.Option(None, help="Seed for the random tie-break"),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Log window sizes and retries"),
):
	"""Dry-run several rounds in a row without touching the history log."""
	_setup_logging(verbose)
	pool_path = pool_path or default_pool_file()
	history_path = history_path or default_history_file()

	try:
		policy = _policy(tie_break, seed)
		reports = simulate_rounds(read_pool(pool_path), read_history(history_path), rounds=rounds, policy=policy)
	except (RouletteError, FileNotFoundError, ValueError) as e:
		raise _fail(e)

	frame = simulation_frame(reports)
	table = Table(*frame.columns)
	for _, r in frame.iterrows():
		table.add_row(*(escape(str(r[c])) for c in frame.columns))
	print(table)
	print(f"[bold]{int(frame['repeated_pairs'].sum())} repeated pairs over {len(frame)} rounds[/bold]")


if __name__ == "__main__":
	app()
