"""User interface components.

Key modules:
    - console: Rich console reporter for progress and summaries
"""

from testgate.ui.console import ConsoleReporter, format_duration, output_tail

__all__ = [
    "ConsoleReporter",
    "format_duration",
    "output_tail",
]
