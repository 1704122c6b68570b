# Copyright 2025 HERU Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Shared Rich console and message helpers for the CLI."""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.table import Table

from heru.core.models import Issue, Outcome

console = Console()

OUTCOME_STYLES = {
    Outcome.PASS: "green",
    Outcome.FLAG: "yellow",
    Outcome.REJECT: "red",
}


def print_success(message: str) -> None:
    """Print a success message.

    Args:
        message: Success message to display
    """
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message.

    Args:
        message: Error message to display
    """
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: Warning message to display
    """
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message.

    Args:
        message: Info message to display
    """
    console.print(f"[cyan]ℹ[/cyan] {message}")


def issues_table(issues: Iterable[Issue], title: str = "Quality issues") -> Table:
    """Build a table of quality issues.

    Args:
        issues: Issues to list
        title: Table title

    Returns:
        Rich table with one row per issue
    """
    table = Table(title=title, show_lines=False)
    table.add_column("Kind", style="yellow")
    table.add_column("Segment", justify="right")
    table.add_column("Span", style="dim")
    table.add_column("Detail")
    for issue in issues:
        where = "output" if issue.in_output else "source"
        table.add_row(
            issue.kind.value,
            "-" if issue.segment_index is None else str(issue.segment_index),
            f"{where} {issue.span[0]}-{issue.span[1]}",
            issue.detail,
        )
    return table


__all__ = [
    "OUTCOME_STYLES",
    "console",
    "issues_table",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
