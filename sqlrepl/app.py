"""Textual shell and command line entry point for sqlrepl."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Sequence

from textual.app import App, ComposeResult
from textual.suggester import Suggester
from textual.widgets import DataTable, Footer, Header, Input, Static

from . import __version__
from .completion import ArgumentCompleter, Completion
from .config import AppConfig, load_config
from .connection import ConnectionManager
from .errors import ConnectionBackendError, DataAccessError
from .output import fit, render_table
from .query import QueryExecutionError, QueryExecutor, QueryResult

LOG = logging.getLogger(__name__)


def _load_app_config() -> AppConfig:
    """Load configuration with a small wrapper for future overrides."""

    return load_config()


class SqlSuggester(Suggester):
    """Feeds the connection's completer into Textual's inline suggestions."""

    def __init__(self, manager: ConnectionManager) -> None:
        super().__init__(use_cache=False, case_sensitive=True)
        self._manager = manager

    async def get_suggestion(self, value: str) -> str | None:
        completer = self._manager.completer
        if completer is None or not value or value[-1].isspace():
            return None
        # the first completion may fetch the schema over the network
        completion = await asyncio.to_thread(self._complete, completer, value)
        word = value[completion.start:]
        for candidate in completion.candidates:
            if candidate != word and candidate.casefold().startswith(word.casefold()):
                return value + candidate[len(word):]
        return None

    def _complete(self, completer: ArgumentCompleter, value: str) -> Completion:
        with self._manager.lock:
            return completer.complete(value)


class SqlReplApp(App[None]):
    """Single connection SQL shell with buffered, width-fitted results."""

    TITLE = "sqlrepl"
    CSS = """
    Screen {
        layout: vertical;
    }
    #sql-input {
        border: heavy $primary;
    }
    #results {
        height: 1fr;
    }
    #status {
        height: 1;
        padding: 0 1;
        background: $surface-darken-3;
    }
    """

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+r", "reconnect", "Reconnect"),
    ]

    def __init__(self, manager: ConnectionManager, *, executor: QueryExecutor | None = None) -> None:
        super().__init__()
        self._manager = manager
        self._executor = executor or QueryExecutor(manager)
        self._last_result: QueryResult | None = None

    @property
    def manager(self) -> ConnectionManager:
        return self._manager

    @property
    def last_result(self) -> QueryResult | None:
        return self._last_result

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(
            placeholder="SELECT * FROM ...",
            id="sql-input",
            suggester=SqlSuggester(self._manager),
        )
        yield DataTable(id="results", zebra_stripes=True)
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self._open_connection(reconnect=False)

    def on_unmount(self) -> None:
        self._manager.close()

    def action_reconnect(self) -> None:
        self._open_connection(reconnect=True)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        sql = event.value.strip()
        if not sql:
            self._set_status("⚠ Enter SQL to run.")
            return
        try:
            result = self._executor.execute(sql)
        except (QueryExecutionError, ConnectionBackendError) as exc:
            self._set_status(f"✖ {exc}")
            self._render_result(None)
            return
        self._last_result = result
        self._render_result(result)
        self._set_status(f"✔ {result.status} · {result.elapsed_ms} ms")
        event.input.value = ""

    def _open_connection(self, *, reconnect: bool) -> None:
        try:
            with self._manager.lock:
                if reconnect:
                    self._manager.reconnect()
                else:
                    self._manager.get_connection()
                self._manager.set_completions()
        except (ConnectionBackendError, DataAccessError) as exc:
            LOG.debug("Connection attempt failed", extra={"url": self._manager.url})
            self._set_status(f"✖ {exc}")
            return
        self._set_status(f"Connected to {self._manager.url}")

    def _render_result(self, result: QueryResult | None) -> None:
        table = self.query_one("#results", DataTable)
        table.clear(columns=True)
        if result is None or result.rows is None:
            return
        header = result.rows.header
        for label, width in zip(header.values, header.sizes):
            table.add_column(label, width=max(width, 1))
        for row in result.rows.data_rows:
            table.add_row(*(fit(value, width) for value, width in zip(row.values, row.sizes)))

    def _set_status(self, message: str) -> None:
        self.query_one("#status", Static).update(message)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sqlrepl", description="Interactive SQL shell.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--profile", help="Connection profile from the config file.")
    parser.add_argument("--url", help="Connection URL, e.g. sqlite:///tmp/demo.db.")
    parser.add_argument("-d", "--driver", help="Driver to load first, as module:Class.")
    parser.add_argument("-u", "--user")
    parser.add_argument("-p", "--password")
    parser.add_argument("-e", "--execute", metavar="SQL", help="Run SQL, print the result, and exit.")
    parser.add_argument("--width", type=int, help="Display width for result columns.")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr.")
    return parser


def build_manager(args: argparse.Namespace, config: AppConfig) -> ConnectionManager:
    options = config.options
    if args.width:
        options = options.model_copy(update={"max_width": args.width})
    if args.url:
        return ConnectionManager(
            args.url,
            driver=args.driver,
            user=args.user,
            password=args.password,
            options=options,
        )
    profile = config.profile(args.profile)
    if profile is None:
        raise ValueError("No connection URL given and no profiles configured.")
    return ConnectionManager(
        profile.url,
        driver=args.driver or profile.driver,
        user=args.user or profile.user,
        password=args.password or profile.password,
        options=options,
    )


def run_once(manager: ConnectionManager, sql: str) -> int:
    """Execute ``sql`` and print it as a table; returns a process exit code."""

    try:
        result = QueryExecutor(manager).execute(sql)
    except (QueryExecutionError, ConnectionBackendError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        manager.close()
    if result.rows is not None:
        for line in render_table(result.rows):
            print(line)
    print(result.status)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        manager = build_manager(args, _load_app_config())
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    if args.execute:
        return run_once(manager, args.execute)
    SqlReplApp(manager).run()
    return 0


__all__ = ["SqlReplApp", "SqlSuggester", "build_manager", "build_parser", "main", "run_once"]
