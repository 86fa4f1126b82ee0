# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime

import yaml
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from wipeout_lib.core.common import (
    format_duration,
    get_panel_width,
    load_yaml_dumper,
    to_utc,
    utc_now,
)
from wipeout_lib.core.config import CFG
from wipeout_lib.disposal.queue import WorkItem


class PendingPresenter:
    """
    Presents information about disposals waiting in the disposal queue.
    """

    def __init__(self, items: list[WorkItem], now: datetime | None = None):
        """
        Args:
            items (list[WorkItem]): Items of the disposal queue to present.
            now (datetime | None): The current time. Defaults to the current UTC time.
        """
        self._items = items
        self._now = utc_now() if now is None else to_utc(now)

    def dumpYaml(self) -> None:
        """
        Print the YAML representation of all items to stdout.
        """
        print(
            yaml.dump(
                [item.toDict() for item in self._items],
                Dumper=load_yaml_dumper(),
                default_flow_style=False,
                sort_keys=False,
            ),
            end="",
        )

    def createPendingPanel(self, console: Console | None = None) -> Group:
        """
        Create a Rich panel displaying the pending disposals.

        Args:
            console (Console | None): Optional Rich Console instance.
                If None, a new Console will be created.

        Returns:
            Group: Rich Group containing the table of disposals.
        """
        console = console or Console()
        content = (
            self._createPendingTable()
            if self._items
            else Text(
                "No pending disposals.",
                style=CFG.pending_presenter.notes_style,
                justify="center",
            )
        )

        panel = Panel(
            content,
            title=Text(
                f"PENDING DISPOSALS ({len(self._items)})",
                style=CFG.pending_presenter.title_style,
                justify="center",
            ),
            border_style=CFG.pending_presenter.border_style,
            padding=(1, 1),
            width=get_panel_width(
                console,
                1,
                CFG.pending_presenter.min_width,
                CFG.pending_presenter.max_width,
            ),
            expand=False,
        )

        return Group(Text(""), panel, Text(""))

    def _createPendingTable(self) -> Table:
        """
        Construct and return a formatted Rich Table containing the disposals.
        """
        table = Table(show_header=True, box=None, padding=(0, 1))

        for header, justify in (
            ("ID", "left"),
            ("Resource", "left"),
            ("Registered", "center"),
            ("Attempts", "right"),
            ("Next Attempt", "right"),
            ("Problem", "left"),
        ):
            table.add_column(
                header=Text(
                    header,
                    justify="center",
                    style=CFG.pending_presenter.headers_style,
                ),
                justify=justify,
            )

        main_style = CFG.pending_presenter.main_style
        for item in self._items:
            table.add_row(
                Text(item.id, style=main_style),
                Text(item.disposable.getDisplayName(), style=main_style),
                Text(
                    item.registered.astimezone().strftime(CFG.date_formats.standard),
                    style=main_style,
                ),
                Text(str(item.attempts), style=main_style),
                self._formatNextAttempt(item),
                self._formatProblem(item.problem),
            )

        return table

    def _formatNextAttempt(self, item: WorkItem) -> Text:
        if item.isLeased(self._now):
            return Text("running", style=CFG.pending_presenter.leased_style)

        if item.next_attempt is None or item.next_attempt <= self._now:
            return Text("now", style=CFG.pending_presenter.main_style)

        return Text(
            f"in {format_duration(item.next_attempt - self._now)}",
            style=CFG.pending_presenter.main_style,
        )

    @staticmethod
    def _formatProblem(problem: str | None) -> Text:
        if not problem:
            return Text("")

        # only the first line is shown
        problem = problem.splitlines()[0]
        max_length = CFG.pending_presenter.max_problem_length
        if len(problem) > max_length:
            problem = problem[: max_length - 1] + "…"

        return Text(problem, style=CFG.pending_presenter.problem_style)
