#!/usr/bin/env python3
"""
Ideation Workshop - Terminal Display

Rich tables and panels for workshop listings, summaries and catalogs.
Falls back to plain text when NO_COLOR is set or stdout is not a TTY.
"""

import os
import sys
from typing import Dict, List, Optional

from rich.box import HEAVY, ROUNDED
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import Card, CardCategory, Idea, Workshop
from .summary import WorkshopSummary

_SEPARATOR = "=" * 60


class WorkshopDisplay:
    """Centralized terminal display for the workshop CLI."""

    def __init__(self, console: Optional[Console] = None) -> None:
        if console is not None:
            self._use_rich = True
            self._console = console
        else:
            self._use_rich = not os.environ.get("NO_COLOR") and sys.stdout.isatty()
            self._console = Console() if self._use_rich else None

    # =========================================================================
    # Messages
    # =========================================================================

    def success(self, text: str) -> None:
        if self._use_rich:
            self._console.print(f"[green]✓[/green] {text}")
        else:
            print(f"✓ {text}")

    def error(self, text: str) -> None:
        if self._use_rich:
            self._console.print(f"[red]✗[/red] {text}")
        else:
            print(f"✗ {text}", file=sys.stderr)

    # =========================================================================
    # Listings
    # =========================================================================

    def workshops(self, workshops: List[Workshop], idea_counts: Dict[str, int]) -> None:
        if not workshops:
            self._line("No workshops yet.")
            return

        if self._use_rich:
            table = Table(title="Workshops", box=ROUNDED)
            table.add_column("ID", style="dim")
            table.add_column("Name", style="bold")
            table.add_column("Date")
            table.add_column("Facilitator")
            table.add_column("Ideas", justify="right")
            for workshop in workshops:
                table.add_row(
                    workshop.id,
                    workshop.name,
                    workshop.date,
                    workshop.facilitator_name,
                    str(idea_counts.get(workshop.id, 0)),
                )
            self._console.print(table)
        else:
            print(f"\n{_SEPARATOR}\nWORKSHOPS\n{_SEPARATOR}")
            for workshop in workshops:
                print(f"{workshop.id}  {workshop.name}  ({workshop.date or 'no date'})"
                      f"  ideas: {idea_counts.get(workshop.id, 0)}")

    def ideas(self, workshop: Workshop, ideas: List[Idea]) -> None:
        if not ideas:
            self._line(f"No ideas in workshop {workshop.name}.")
            return

        if self._use_rich:
            table = Table(title=f"Ideas - {workshop.name}", box=ROUNDED)
            table.add_column("ID", style="dim")
            table.add_column("Title", style="bold")
            table.add_column("Cards")
            table.add_column("Updated")
            for idea in ideas:
                table.add_row(idea.id, idea.title, idea.card_combination.summary(), idea.updated_at)
            self._console.print(table)
        else:
            print(f"\n{_SEPARATOR}\nIDEAS - {workshop.name}\n{_SEPARATOR}")
            for idea in ideas:
                print(f"{idea.id}  {idea.title}  [{idea.card_combination.summary()}]")

    def catalog(self, category: CardCategory, cards: List[Card]) -> None:
        if self._use_rich:
            table = Table(title=category.plural, box=ROUNDED, show_lines=True)
            table.add_column("ID", style="dim")
            table.add_column("Name", style="bold")
            table.add_column("Description")
            for card in cards:
                table.add_row(card.id, card.name, getattr(card, "goal", "") or card.description)
            self._console.print(table)
        else:
            print(f"\n{_SEPARATOR}\n{category.plural.upper()}\n{_SEPARATOR}")
            for card in cards:
                print(f"{card.id:<6}{card.name}: {getattr(card, 'goal', '') or card.description}")

    # =========================================================================
    # Summary
    # =========================================================================

    def summary(self, summary: WorkshopSummary) -> None:
        workshop = summary.workshop
        if not self._use_rich:
            self._print_plain_summary(summary)
            return

        header = [
            f"[bold]Date:[/bold]        {workshop.date or '-'}",
            f"[bold]Facilitator:[/bold] {workshop.facilitator_name or '-'}",
        ]
        if workshop.mission:
            header.append(f"[bold]Mission:[/bold]     {workshop.mission.name}")
        if workshop.persona:
            header.append(f"[bold]Persona:[/bold]     {workshop.persona.name}")
        if workshop.scenario:
            header.append(f"[bold]Scenario:[/bold]    {workshop.scenario.name}")
        self._console.print(Panel("\n".join(header), title=f"[bold]{workshop.name}[/bold]", box=HEAVY, style="cyan"))

        table = Table(title="Ideas", box=ROUNDED, show_lines=True)
        table.add_column("Idea", style="bold")
        table.add_column("Cards")
        table.add_column("Storyboard")
        table.add_column("Evaluation")
        table.add_column("Pitch")
        table.add_column("Refinements", justify="right")
        for overview in summary.ideas:
            table.add_row(
                overview.title, overview.combination, overview.storyboard,
                overview.evaluation, overview.pitch, overview.refinements,
            )
        self._console.print(table)

        for overview in summary.ideas:
            if not overview.responses:
                continue
            lines = [f"[bold]{name}:[/bold] {response}" for name, response in overview.responses]
            self._console.print(Panel("\n".join(lines), title=f"Evaluation - {overview.title}", box=ROUNDED))

        if summary.card_usage:
            usage = Table(title="Card Usage", box=ROUNDED)
            usage.add_column("Category", style="bold")
            usage.add_column("Card")
            usage.add_column("Ideas", justify="right")
            for category, entries in summary.card_usage.items():
                for entry in entries:
                    usage.add_row(category.label, entry.name, str(entry.count))
            self._console.print(usage)

    def _print_plain_summary(self, summary: WorkshopSummary) -> None:
        workshop = summary.workshop
        print(f"\n{_SEPARATOR}\n{workshop.name.upper()}\n{_SEPARATOR}")
        print(f"Date: {workshop.date or '-'} | Facilitator: {workshop.facilitator_name or '-'}")

        for overview in summary.ideas:
            print(f"\n{overview.title}")
            print(f"  Cards: {overview.combination}")
            print(f"  Storyboard: {overview.storyboard}")
            print(f"  Evaluation: {overview.evaluation}")
            print(f"  Elevator pitch: {overview.pitch}")
            print(f"  Refinements: {overview.refinements}")
            for name, response in overview.responses:
                print(f"    - {name}: {response}")

        if summary.card_usage:
            print("\n" + "-" * 60)
            print("CARD USAGE:")
            for category, entries in summary.card_usage.items():
                counts = ", ".join(f"{entry.name} ({entry.count})" for entry in entries)
                print(f"  {category.plural}: {counts}")
        print(_SEPARATOR)

    def _line(self, text: str) -> None:
        if self._use_rich:
            self._console.print(text)
        else:
            print(text)
