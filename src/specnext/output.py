"""Diagnostics rendering with strict stdout/stderr discipline.

* **stdout** -- primary data only (statistics tables, dependency graphs,
  cycle reports, generated source). This is what downstream tools pipe.
* **stderr** -- status, warnings and errors.
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped.
* **Colour control** -- respects ``NO_COLOR`` and ``TERM=dumb``.

The engine itself never prints; an orchestrator creates an
:class:`OutputManager` and passes engine results to the ``render_*``
methods.
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from specnext.models import DependencyNode, PathCycle, SchemaStatistics
from specnext.schema.compose import join_path


class OutputFormat(str, Enum):
    """Supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes engine diagnostics to the right stream in the right format.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_json(self, data: Any) -> None:
        """Print *data* as JSON; highlighted in Rich mode."""
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(text)

    def print_source(self, code: str, lexer: str = "typescript") -> None:
        """Print generated source code; highlighted in Rich mode."""
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(code, lexer, theme="monokai"))
        else:
            self.print_data(code)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print tabular data to stdout in the active format.

        * **Rich mode** -- styled :class:`~rich.table.Table`.
        * **JSON mode** -- array of objects keyed by header names.
        * **Plain mode** -- tab-separated values, one row per line.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Engine results
    # ------------------------------------------------------------------ #

    def render_statistics(self, stats: SchemaStatistics) -> None:
        """Print schema statistics as a metric/value table."""
        if self._format == OutputFormat.JSON:
            self.print_json(stats.model_dump(mode="json"))
            return
        rows = [
            ["Schemas", str(stats.total_schemas)],
            ["Properties", str(stats.total_properties)],
            ["Max depth", str(stats.max_depth)],
            ["Circular", ", ".join(stats.circular_schemas) or "-"],
            ["Unresolved references", str(stats.unresolved_references)],
        ]
        rows.extend([f"Kind: {kind}", str(count)] for kind, count in sorted(stats.kinds.items()))
        self.print_table(["Metric", "Value"], rows, title="Schema statistics")

    def render_dependency_graph(self, graph: Mapping[str, DependencyNode]) -> None:
        """Print one row per schema with its edges and complexity."""
        if self._format == OutputFormat.JSON:
            self.print_json({name: node.model_dump(mode="json") for name, node in graph.items()})
            return
        rows = [
            [
                name,
                ", ".join(node.dependencies) or "-",
                ", ".join(node.dependents) or "-",
                str(node.complexity),
                "yes" if node.circular else "no",
            ]
            for name, node in graph.items()
        ]
        self.print_table(
            ["Schema", "Depends on", "Used by", "Complexity", "Circular"],
            rows,
            title="Dependency graph",
        )

    def render_cycles(self, cycles: Iterable[PathCycle]) -> None:
        """Print path-scoped cycle reports, or a note on stderr when there are none."""
        cycles = list(cycles)
        if not cycles:
            self.info("No circular references found")
            return
        if self._format == OutputFormat.JSON:
            self.print_json([cycle.model_dump(mode="json") for cycle in cycles])
            return
        rows = [[cycle.ref, join_path(cycle.path) or "(root)"] for cycle in cycles]
        self.print_table(["Reference", "Path"], rows, title="Circular references")

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed when quiet."""
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(message)

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr. Not suppressed when quiet."""
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when verbose."""
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim][debug] {message}[/dim]")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``."""
    global _output
    _output = None
