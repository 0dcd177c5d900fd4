"""
testgate - burn-in loops and change-scoped test selection.

This package wraps a JavaScript workspace's test scripts with a
repeated-run harness for flaky-test detection, a selector that only runs
the suites touched by a diff, and a local mirror of the CI stages.

Main entry points:
    - testgate.main: CLI entrypoints
    - testgate.core.burn_in: run_burn_in() for repeated runs
    - testgate.core.selector: run_selective() for change-scoped runs
    - testgate.core.pipeline: run_pipeline() for the local CI mirror
    - testgate.models.config: Config and load_env()
"""
