"""
Console reporter.

Renders harness, selector and pipeline progress with Rich: one marker
line per iteration, scope or stage, a final aggregate line, and summary
tables.
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from testgate.models.aggregate import AggregateResult
from testgate.models.change_set import ChangeSet, ChangeSource
from testgate.models.command_result import CommandResult
from testgate.models.pipeline import PipelineResult, Stage, StageResult
from testgate.models.run_outcome import RunOutcome
from testgate.models.scope import ScopeRule
from testgate.models.selection import (
    FallbackReason,
    ScopeRunResult,
    SelectionResult,
)

_OUTPUT_TAIL_LINES = 40

_FALLBACK_TEXT = {
    FallbackReason.NO_CHANGES: "no changed files",
    FallbackReason.VCS_UNAVAILABLE: "changed files unknown",
    FallbackReason.UNMATCHED: "changes outside every scope",
    FallbackReason.FORCED: "full run requested",
}


def format_duration(seconds: float) -> str:
	"""Format a duration like ``1m 23s``, ``45s`` or ``2h 5m``."""
	total = max(int(seconds), 0)
	hours, rem = divmod(total, 3600)
	minutes, secs = divmod(rem, 60)
	if hours:
		return f"{hours}h {minutes}m"
	if minutes:
		return f"{minutes}m {secs}s"
	return f"{secs}s"


def output_tail(output: str, lines: int = _OUTPUT_TAIL_LINES) -> str:
	"""Return the last ``lines`` lines of captured output."""
	parts = output.rstrip().splitlines()
	if len(parts) <= lines:
		return "\n".join(parts)
	return "\n".join([f"... ({len(parts) - lines} lines omitted)",
	                  *parts[-lines:]])


class ConsoleReporter:
	"""Reporter that prints progress to a Rich console."""

	def __init__(self, console: Console | None = None,
	             tail_lines: int = _OUTPUT_TAIL_LINES) -> None:
		self.console = console or Console()
		self.tail_lines = tail_lines

	def _failure_details(self, result: CommandResult | RunOutcome) -> None:
		if result.error:
			self.console.print(f"   [red]{escape(result.error)}[/red]")
		for captured in (result.output, result.stderr):
			if captured:
				self.console.print(
				    Text(output_tail(captured, self.tail_lines), style="dim"))

	# burn-in

	def burn_in_started(self, iterations: int, label: str) -> None:
		self.console.print(
		    f"🔥 Starting burn-in loop ({iterations} iterations): "
		    f"[bold]{escape(label)}[/bold]")

	def iteration_started(self, iteration: int, total: int) -> None:
		self.console.print(f"🔄 Iteration {iteration}/{total}")

	def iteration_finished(self, outcome: RunOutcome, total: int) -> None:
		if outcome.passed:
			self.console.print(
			    f"[green]✅ Iteration {outcome.iteration} PASSED[/green] "
			    f"[dim]({format_duration(outcome.duration_seconds)})[/dim]")
			return
		if outcome.timed_out:
			reason = "timed out"
		elif outcome.error:
			reason = "could not start"
		else:
			reason = f"exit code {outcome.returncode}"
		self.console.print(
		    f"[red]❌ Iteration {outcome.iteration} FAILED[/red] "
		    f"[dim]({reason})[/dim]")
		self._failure_details(outcome)

	def burn_in_finished(self, result: AggregateResult) -> None:
		self.console.print(
		    f"📊 Burn-in Results: {result.summary_line()} "
		    f"[dim]({format_duration(result.duration_seconds)})[/dim]")
		if result.success:
			self.console.print("[green]✅ All burn-in iterations passed - "
			                   "no flaky tests detected[/green]")
			return
		if result.stopped_early:
			self.console.print(
			    f"[red]❌ Flaky tests detected! Iteration "
			    f"{result.first_failure} of {result.requested} failed; "
			    f"iterations {result.first_failure + 1}-{result.requested} "
			    "were not run[/red]")
		else:
			failed = ", ".join(str(i) for i in result.failed_iterations)
			self.console.print(
			    f"[red]❌ Flaky tests detected! {result.failed} failure(s) in "
			    f"{result.executed} runs (iterations {failed})[/red]")

	# selector

	def changes_detected(self, change_set: ChangeSet) -> None:
		where = ""
		if change_set.source in (ChangeSource.DIFF,
		                         ChangeSource.FALLBACK_DIFF):
			where = f" against {escape(change_set.base_ref or '')}"
		self.console.print(f"🔍 Changed files{where}:")
		for path in change_set.paths:
			self.console.print(f"  {escape(path)}")
		self.console.print()

	def scope_started(self, scope: ScopeRule, label: str) -> None:
		self.console.print(f"📦 {escape(scope.notice)} - running "
		                   f"[bold]{escape(label)}[/bold]")

	def scope_finished(self, run: ScopeRunResult) -> None:
		name = escape(run.scope.name)
		if run.success:
			self.console.print(f"[green]✅ Scope {name} PASSED[/green]")
			return
		self.console.print(f"[red]❌ Scope {name} FAILED[/red] "
		                   f"[dim]({escape(run.result.status_text)})[/dim]")
		self._failure_details(run.result)

	def fallback_started(self, reason: FallbackReason, label: str) -> None:
		self.console.print(f"🎭 Running full suite ({_FALLBACK_TEXT[reason]})"
		                   f" - [bold]{escape(label)}[/bold]")

	def fallback_finished(self, result: CommandResult) -> None:
		if result.success:
			self.console.print("[green]✅ Full suite PASSED[/green]")
			return
		self.console.print(f"[red]❌ Full suite FAILED[/red] "
		                   f"[dim]({escape(result.status_text)})[/dim]")
		self._failure_details(result)

	def notice(self, message: str) -> None:
		self.console.print(f"📝 [yellow]{escape(message)}[/yellow]")

	def selection_finished(self, result: SelectionResult) -> None:
		if result.commands_run:
			table = Table(box=box.ROUNDED, title="Selective Testing",
			              title_style="bold cyan")
			table.add_column("Scope")
			table.add_column("Command")
			table.add_column("Result")
			table.add_column("Duration")
			rows = [(r.scope.name, r.result) for r in result.scope_runs]
			if result.fallback_result is not None:
				rows.append(("full suite", result.fallback_result))
			for name, cmd in rows:
				table.add_row(
				    name,
				    " ".join(cmd.argv),
				    Text("PASS", style="green")
				    if cmd.success else Text("FAIL", style="red"),
				    format_duration(cmd.duration_seconds),
				)
			self.console.print(table)
		if result.success:
			self.console.print(
			    f"[green]✅ Selective testing complete "
			    f"({result.commands_run} command(s) run)[/green]")
		else:
			failed = result.failed_scopes
			if (result.fallback_result is not None
			    and not result.fallback_result.success):
				failed = [*failed, "full suite"]
			self.console.print(f"[red]❌ Selective testing failed: "
			                   f"{escape(', '.join(failed))}[/red]")

	# pipeline

	def stage_started(self, index: int, stage: Stage) -> None:
		self.console.print(
		    Rule(f"Stage {index}: {stage.title}", style="bold", align="left"))

	def stage_finished(self, index: int, result: StageResult) -> None:
		title = escape(result.stage.title)
		if result.success:
			self.console.print(f"[green]✅ {title} passed[/green]\n")
			return
		self.console.print(f"[red]❌ {title} failed[/red]")
		if result.command is not None:
			self.console.print(f"   [dim]{escape(result.command.status_text)}"
			                   "[/dim]")
			self._failure_details(result.command)

	def pipeline_finished(self, result: PipelineResult) -> None:
		table = Table(box=box.ROUNDED, title="Local CI", title_style="bold")
		table.add_column("Stage")
		table.add_column("Result")
		table.add_column("Duration")
		for res in result.stages:
			table.add_row(
			    res.stage.name,
			    Text("PASS", style="green")
			    if res.success else Text("FAIL", style="red"),
			    format_duration(res.duration_seconds),
			)
		for name in result.skipped:
			table.add_row(name, Text("SKIPPED", style="dim"), "-")
		self.console.print(table)
		if result.success:
			self.console.print(
			    "[bold green]🎉 Local CI pipeline passed![/bold green]")
			self.console.print("[green]✅ All stages completed successfully"
			                   "[/green]")
		else:
			self.console.print(f"[bold red]❌ Local CI pipeline failed at "
			                   f"stage {escape(result.failed_stage)}[/bold red]")


__all__ = ["ConsoleReporter", "format_duration", "output_tail"]
