from __future__ import annotations

from typing import List, Tuple

from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.widgets import DataTable, Footer, Header, Label, LoadingIndicator

from .checker import check_many_async
from .models import CheckReport
from .reporter import plain_text


class ExposureCheckApp(App):
    CSS = """
    Screen {
        align: center middle;
    }
    """

    def __init__(self, base_urls: List[str], **options) -> None:
        super().__init__()
        self.base_urls = base_urls
        self.options = options
        self.results: List[Tuple[str, CheckReport]] = []
        self.progress_label = Label("Preparing check…")
        self.table = DataTable(zebra_stripes=True)
        self.spinner = LoadingIndicator()

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Vertical(
            Label("Files that should not be public", id="title"),
            self.progress_label,
            self.spinner,
            self.table,
        )
        yield Footer()

    async def on_mount(self) -> None:
        self.table.add_columns("Base URL", "Path", "Status", "HTTP", "Message")
        self.spinner.display = True
        await self.run_check()
        self.spinner.display = False

    async def run_check(self) -> None:
        self.results = await check_many_async(
            self.base_urls,
            progress_cb=self._update_progress,
            **self.options,
        )
        self._populate_table(self.results)

    def _update_progress(self, done: int, tot: int) -> None:
        self.progress_label.update(f"Checked instances: {done}/{tot}")

    def _populate_table(self, results: List[Tuple[str, CheckReport]]) -> None:
        for base, report in results:
            for o in report.outcomes:
                self.table.add_row(base, o.path, o.status.value, str(o.http_status or ""), plain_text(o.message))
