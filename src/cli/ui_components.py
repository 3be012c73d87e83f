"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from presentation details.
- Result lines are plain text on purpose; Rich is only used for stderr
  notices and the doctor report.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

FAILURE_NOTICE = "NOTICE: Some hostnames could not be resolved."


def print_failure_notice(console: Console, program: str) -> None:
    """Trailing notice printed when at least one hostname failed."""

    console.print(f"\n{program}: {FAILURE_NOTICE}", markup=False, highlight=False, soft_wrap=True)


def build_doctor_table() -> Table:
    table = Table(title="hostresolve doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table


def status_label(ok: bool) -> str:
    return "OK" if ok else "FAIL"
