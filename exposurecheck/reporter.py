from __future__ import annotations

import re
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .models import CheckReport, Status


def print_report(report: CheckReport, base_url: str, console: Optional[Console] = None) -> None:
    console = console or Console()

    console.print(
        Panel.fit(
            f"{report.label}\n{escape(base_url)}",
            style="bold cyan",
            border_style="cyan",
        )
    )

    table = Table(
        expand=True,
        box=box.SIMPLE_HEAVY,
        show_lines=False,
        header_style="bold",
    )
    table.add_column("Status", no_wrap=True)
    table.add_column("Path", no_wrap=True)
    table.add_column("HTTP", no_wrap=True)
    table.add_column("Message", overflow="fold")

    for o in report.outcomes:
        table.add_row(
            f"[{_status_style(o.status)}]{o.status.value}[/]",
            escape(o.path),
            str(o.http_status or ""),
            escape(plain_text(o.message)),
        )

    console.print(table)

    if report.long_error_message:
        console.print(
            Panel(
                escape(plain_text(report.long_error_message)),
                title="Action required",
                border_style="red",
                box=box.ROUNDED,
            )
        )


def plain_text(html: str) -> str:
    """Drop the markup the host UI would render, for terminal output."""
    text = re.sub(r"<br\s*/?>", "\n", html)
    text = re.sub(r"<[^>]+>", "", text)
    return re.sub(r"[ \t]+", " ", text).strip()


def _status_style(status: Status) -> str:
    return {
        Status.ERROR: "bold white on red",
        Status.WARNING: "bold black on yellow",
        Status.OK: "bold black on green",
    }[status]
