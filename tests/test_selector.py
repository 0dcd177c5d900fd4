import pytest

from testgate.core.selector import (
    run_selective,
    triggered_scopes,
    unmatched_paths,
)
from testgate.core.task_runners import NpmTaskRunner
from testgate.models.change_set import ChangeSet
from testgate.models.command_result import CommandResult
from testgate.models.scope import (
    DEFAULT_SCOPE_CONFIG,
    ScopeConfig,
    ScopeRule,
    UnmatchedPolicy,
)
from testgate.models.selection import FallbackReason
from testgate.models.task import Task


class DummyExecutor:
	"""Fails any command whose argv contains one of ``failing``."""

	def __init__(self, failing=()):
		self.failing = set(failing)
		self.calls = []

	async def run(self, argv, *, timeout=None, capture=False):
		self.calls.append(list(argv))
		rc = 1 if self.failing.intersection(argv) else 0
		return CommandResult(argv=tuple(argv), returncode=rc)


class NoticeLog:

	def __init__(self):
		self.notices = []
		self.finished = []

	def notice(self, message):
		self.notices.append(message)

	def changes_detected(self, change_set):
		pass

	def scope_started(self, scope, label):
		pass

	def scope_finished(self, run):
		pass

	def fallback_started(self, reason, label):
		pass

	def fallback_finished(self, result):
		pass

	def selection_finished(self, result):
		self.finished.append(result)


BACKEND = ["npm", "run", "test", "--workspace=backend"]
DASHBOARD = ["npm", "run", "test", "--workspace=dashboard"]
E2E = ["npm", "run", "test:e2e"]


def _runner(failing=()):
	return NpmTaskRunner(DummyExecutor(failing))


def _changes(*paths):
	return ChangeSet(paths=list(paths))


def test_triggered_scopes_in_rule_order_once_each():
	cs = _changes("dashboard/src/App.tsx", "backend/src/api/users.ts",
	              "backend/README.md")
	names = [r.name for r in triggered_scopes(cs, DEFAULT_SCOPE_CONFIG.scopes)]
	assert names == ["backend", "frontend", "e2e-critical"]


def test_unmatched_paths():
	cs = _changes("backend/a.ts", "docs/readme.md", "package.json")
	assert unmatched_paths(cs, DEFAULT_SCOPE_CONFIG.scopes) == [
	    "docs/readme.md", "package.json"
	]


@pytest.mark.asyncio
async def test_empty_change_set_runs_only_full_suite():
	runner = _runner()
	log = NoticeLog()
	result = await run_selective(_changes(), DEFAULT_SCOPE_CONFIG, runner,
	                             reporter=log)
	assert runner.executor.calls == [E2E]
	assert result.fallback_reason is FallbackReason.NO_CHANGES
	assert result.scope_runs == []
	assert result.success
	assert len(log.notices) == 1
	assert log.finished == [result]


@pytest.mark.asyncio
async def test_backend_only_change():
	runner = _runner()
	result = await run_selective(_changes("backend/src/db.ts"),
	                             DEFAULT_SCOPE_CONFIG, runner)
	assert runner.executor.calls == [BACKEND]
	assert result.triggered == ["backend"]
	assert result.fallback_result is None
	assert result.success


@pytest.mark.asyncio
async def test_backend_api_triggers_backend_and_e2e():
	runner = _runner()
	result = await run_selective(_changes("backend/src/api/users.ts"),
	                             DEFAULT_SCOPE_CONFIG, runner)
	assert runner.executor.calls == [BACKEND, E2E]
	assert result.triggered == ["backend", "e2e-critical"]


@pytest.mark.asyncio
async def test_two_scopes_failure_of_either_fails_and_both_run():
	runner = _runner(failing={"--workspace=backend"})
	result = await run_selective(_changes("backend/x.ts", "dashboard/y.css"),
	                             DEFAULT_SCOPE_CONFIG, runner)
	assert runner.executor.calls == [BACKEND, DASHBOARD]
	assert result.failed_scopes == ["backend"]
	assert result.success is False
	assert result.commands_run == 2


@pytest.mark.asyncio
async def test_markdown_only_runs_nothing_and_succeeds():
	runner = _runner()
	log = NoticeLog()
	result = await run_selective(_changes("docs/readme.md"),
	                             DEFAULT_SCOPE_CONFIG, runner, reporter=log)
	assert runner.executor.calls == []
	assert result.commands_run == 0
	assert result.success
	assert result.unmatched_paths == ["docs/readme.md"]
	assert len(log.notices) == 1
	assert "docs/readme.md" in log.notices[0]
	assert "npm run test:e2e" in log.notices[0]
	assert "--force-full" in log.notices[0]


@pytest.mark.asyncio
async def test_run_all_policy_runs_full_suite_for_unmatched():
	runner = _runner(failing={"test:e2e"})
	result = await run_selective(_changes("docs/readme.md"),
	                             DEFAULT_SCOPE_CONFIG, runner,
	                             policy=UnmatchedPolicy.RUN_ALL)
	assert runner.executor.calls == [E2E]
	assert result.fallback_reason is FallbackReason.UNMATCHED
	assert result.success is False


@pytest.mark.asyncio
async def test_partially_unmatched_gets_informational_notice():
	runner = _runner()
	log = NoticeLog()
	result = await run_selective(_changes("backend/a.ts", "docs/readme.md"),
	                             DEFAULT_SCOPE_CONFIG, runner, reporter=log)
	assert runner.executor.calls == [BACKEND]
	assert result.fallback_result is None
	assert len(log.notices) == 1
	assert "1 changed file(s)" in log.notices[0]


@pytest.mark.asyncio
async def test_force_full_ignores_changes():
	runner = _runner()
	result = await run_selective(_changes("backend/a.ts"),
	                             DEFAULT_SCOPE_CONFIG, runner, force_full=True)
	assert runner.executor.calls == [E2E]
	assert result.fallback_reason is FallbackReason.FORCED
	assert result.scope_runs == []


@pytest.mark.asyncio
async def test_unavailable_vcs_runs_full_suite():
	runner = _runner()
	result = await run_selective(ChangeSet.unavailable(),
	                             DEFAULT_SCOPE_CONFIG, runner)
	assert runner.executor.calls == [E2E]
	assert result.fallback_reason is FallbackReason.VCS_UNAVAILABLE
	assert result.notices


@pytest.mark.asyncio
async def test_custom_scopes_and_timeout_passthrough():
	seen = []

	class Recorder:

		async def run(self, argv, *, timeout=None, capture=False):
			seen.append((timeout, capture))
			return CommandResult(argv=tuple(argv), returncode=0)

	scopes = ScopeConfig(
	    full_suite=Task(name="test"),
	    scopes=[
	        ScopeRule(name="lib", prefixes=("lib/", "src/"),
	                  task=Task(name="test:lib")),
	    ],
	)
	result = await run_selective(_changes("src/index.ts"), scopes,
	                             NpmTaskRunner(Recorder()), timeout=30,
	                             capture=True)
	assert result.triggered == ["lib"]
	assert seen == [(30, True)]
