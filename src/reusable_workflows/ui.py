"""Terminal presentation and prompting.

All user interaction goes through a :class:`Prompter`, so the generator can
run against scripted answers in tests and in non-interactive mode.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.syntax import Syntax
from rich.table import Table

from reusable_workflows.types import FieldSpec, Group, Preset


class Prompter(ABC):
    """Interface for asking the user questions."""

    @abstractmethod
    def section(self, title: str) -> None:
        """Announce a new section of questions."""

    @abstractmethod
    def notice(self, message: str, style: str = "green") -> None:
        """Show an informational message."""

    @abstractmethod
    def choose_template(self, templates: Sequence[Any]) -> str:
        """Return the id of the chosen template."""

    @abstractmethod
    def choose_preset(self, presets: Sequence[Preset]) -> Preset | None:
        """Return the chosen preset, or None for manual setup."""

    @abstractmethod
    def select_groups(self, groups: Sequence[Group], checked: set[str]) -> list[str]:
        """Return the keys of the groups to configure."""

    @abstractmethod
    def ask(self, spec: FieldSpec, question: str, default: Any = None) -> Any:
        """Ask for one field value."""

    @abstractmethod
    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def preview(self, manifest: str) -> None:
        """Show a generated manifest."""


def _parse_indexes(raw: str, count: int) -> list[int]:
    """Parse ``"1, 3"`` into zero-based indexes, ignoring anything out of range."""
    indexes = []
    for part in raw.replace(",", " ").split():
        if part.isdigit() and 1 <= int(part) <= count:
            index = int(part) - 1
            if index not in indexes:
                indexes.append(index)
    return indexes


def _as_bool(value: Any) -> bool:
    """Read a boolean default, including quoted ``'false'``."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "on", "1")
    return bool(value)


def _as_number(text: str) -> int | float | None:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


class ConsolePrompter(Prompter):
    """Prompter for an interactive terminal.

    Uses Rich for layout and Typer for input.
    """

    def __init__(self, console: Console | None = None, box_width: int = 50) -> None:
        self.console = console or Console()
        self.box_width = box_width

    def header(self) -> None:
        self.console.print("\n[bold blue]🚀 Reusable Workflows Generator[/bold blue]")
        self.console.print(
            "[dim]Generate and update GitHub Actions manifests from shared workflow templates.[/dim]"
        )
        self.console.print(Rule(style="dim"), width=self.box_width)

    def _prompt_number(self, message: str, low: int, high: int, default: int) -> int:
        while True:
            choice = typer.prompt(message, type=int, default=default)
            if low <= choice <= high:
                return choice
            self.console.print(f"[red]Enter a number from {low} to {high}[/red]")

    def section(self, title: str) -> None:
        self.console.print()
        self.console.print(Panel(f"[bold blue]{title}[/bold blue]", width=self.box_width))

    def notice(self, message: str, style: str = "green") -> None:
        self.console.print(f"[{style}]{message}[/{style}]")

    def choose_template(self, templates: Sequence[Any]) -> str:
        table = Table(show_header=False, box=None)
        for number, template in enumerate(templates, start=1):
            table.add_row(
                f"[bold]{number}[/bold]",
                f"[cyan]{template.display_name}[/cyan]",
                f"[dim]{template.short_description}[/dim]",
            )
        self.console.print(table)
        choice = self._prompt_number("Select workflow template", 1, len(templates), default=1)
        return templates[choice - 1].id

    def choose_preset(self, presets: Sequence[Preset]) -> Preset | None:
        self.section("Configuration Preset")
        for number, preset in enumerate(presets, start=1):
            self.console.print(f"  [bold]{number}[/bold]  {preset.name}")
        self.console.print("  [bold]0[/bold]  Custom (Manual Setup)")
        choice = self._prompt_number("Choose a starting configuration", 0, len(presets), default=0)
        return presets[choice - 1] if choice else None

    def select_groups(self, groups: Sequence[Group], checked: set[str]) -> list[str]:
        self.section("Optional Components")
        for number, group in enumerate(groups, start=1):
            mark = "x" if group.key in checked else " "
            self.console.print(f"  [bold]{number}[/bold]  {escape(f'[{mark}]')} {escape(group.label)}")
        default = " ".join(
            str(number) for number, group in enumerate(groups, start=1) if group.key in checked
        )
        raw = typer.prompt(
            "Select components to configure (numbers, space separated)",
            default=default,
            show_default=bool(default),
        )
        return [groups[i].key for i in _parse_indexes(raw, len(groups))]

    def ask(self, spec: FieldSpec, question: str, default: Any = None) -> Any:
        """Ask for a field value, keeping the default's declared type.

        Pressing enter returns the default unchanged, so ``default: 3`` stays
        the integer ``3``. Typed answers to ``number`` inputs are converted.
        """
        question = question or spec.name
        if spec.type == "boolean":
            return typer.confirm(question, default=_as_bool(default))

        default_text = "" if default is None else str(default)
        while True:
            value = typer.prompt(question, default=default_text, show_default=bool(default_text))
            if spec.type == "number" and value:
                number = _as_number(value)
                if number is not None:
                    return number
                self.console.print("[red]Enter a number[/red]")
                continue
            if default is not None and value == default_text:
                return default
            if value or not spec.required:
                return value
            self.console.print("[red]This field is required[/red]")

    def confirm(self, message: str, default: bool = True) -> bool:
        return typer.confirm(message, default=default)

    def preview(self, manifest: str) -> None:
        self.section("Preview Manifest")
        self.console.print(Syntax(manifest, "yaml", theme="ansi_dark", background_color="default"))


def templates_table(templates: Sequence[Any]) -> Table:
    """Build a table listing catalog templates."""
    table = Table(title="Workflow Templates")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Description", style="dim")
    table.add_column("Presets", justify="right")
    for template in templates:
        table.add_row(
            template.id,
            template.display_name,
            template.short_description,
            str(len(template.presets)),
        )
    return table


def presets_table(template: Any) -> Table:
    """Build a table listing a template's presets."""
    table = Table(title=f"Presets for {template.id}")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Values")
    table.add_column("Secrets")
    for preset in template.presets:
        table.add_row(
            preset.id,
            preset.name,
            ", ".join(f"{k}={v}" for k, v in preset.values.items()),
            ", ".join(preset.secret_values),
        )
    return table
