"""
Task runner adapters.

Each adapter knows one package manager's command line for running a
named script, optionally scoped to a workspace, and delegates execution
to the shared command executor.
"""

from __future__ import annotations

from testgate.errors import ConfigurationError
from testgate.models.command_result import CommandResult
from testgate.models.task import PackageManager, Task
from testgate.utils.protocols import CommandExecutor


class BaseTaskRunner:
	"""Runs tasks through a CommandExecutor."""

	name: str = ""

	def __init__(self, executor: CommandExecutor) -> None:
		self.executor = executor

	def command_for(self, task: Task) -> list[str]:
		raise NotImplementedError

	async def run(self, task: Task, *, timeout: float | None = None,
	              capture: bool = False) -> CommandResult:
		"""Run the task and return the command result."""
		return await self.executor.run(self.command_for(task),
		                               timeout=timeout, capture=capture)


class NpmTaskRunner(BaseTaskRunner):
	"""``npm run NAME [--workspace=WS | --workspaces] [-- ARGS]``"""

	name = "npm"

	def command_for(self, task: Task) -> list[str]:
		argv = ["npm", "run", task.name]
		if task.workspace:
			argv.append(f"--workspace={task.workspace}")
		elif task.all_workspaces:
			argv.append("--workspaces")
		if task.args:
			argv += ["--", *task.args]
		return argv


class PnpmTaskRunner(BaseTaskRunner):
	"""``pnpm [--filter WS | -r] run NAME [ARGS]``"""

	name = "pnpm"

	def command_for(self, task: Task) -> list[str]:
		argv = ["pnpm"]
		if task.workspace:
			argv += ["--filter", task.workspace]
		elif task.all_workspaces:
			argv.append("-r")
		return argv + ["run", task.name, *task.args]


class YarnTaskRunner(BaseTaskRunner):
	"""Yarn (berry) workspace and ``workspaces foreach`` commands."""

	name = "yarn"

	def command_for(self, task: Task) -> list[str]:
		if task.workspace:
			argv = ["yarn", "workspace", task.workspace, "run"]
		elif task.all_workspaces:
			argv = ["yarn", "workspaces", "foreach", "--all", "run"]
		else:
			argv = ["yarn", "run"]
		return argv + [task.name, *task.args]


TASK_RUNNERS: dict[PackageManager, type[BaseTaskRunner]] = {
    PackageManager.NPM: NpmTaskRunner,
    PackageManager.PNPM: PnpmTaskRunner,
    PackageManager.YARN: YarnTaskRunner,
}


def create_task_runner(package_manager: PackageManager | str,
                       executor: CommandExecutor) -> BaseTaskRunner:
	"""
	Create the task runner adapter for a package manager.

	Parameters:
		package_manager: Package manager enum member or name.
		executor: Executor the runner delegates to.

	Returns:
		Task runner adapter.

	Raises:
		ConfigurationError: If the package manager is not supported.
	"""
	try:
		pm = PackageManager(package_manager)
	except ValueError:
		supported = ", ".join(p.value for p in PackageManager)
		raise ConfigurationError(
		    f"unsupported package manager {package_manager!r} "
		    f"(expected one of: {supported})") from None
	return TASK_RUNNERS[pm](executor)


__all__ = [
    "BaseTaskRunner",
    "NpmTaskRunner",
    "PnpmTaskRunner",
    "YarnTaskRunner",
    "TASK_RUNNERS",
    "create_task_runner",
]
