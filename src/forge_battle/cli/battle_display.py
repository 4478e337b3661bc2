"""Rich rendering of a battle log."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from forge_battle.models.battle import (
    BattleEndEvent,
    BattleEvent,
    BattleStartEvent,
    BattleUnit,
    RoundEvent,
    StageCompleteEvent,
    StageStartEvent,
    SystemMessageEvent,
)

console = Console()


def _hp_bar(current: int, maximum: int, width: int = 12) -> str:
    pct = max(0, current / maximum) if maximum > 0 else 0
    filled = int(pct * width)
    color = "green" if pct > 0.5 else ("yellow" if pct > 0.25 else "red")
    return f"[{color}]{'█' * filled}[/{color}][dim]{'░' * (width - filled)}[/dim] {current}/{maximum}"


class BattleDisplay:
    def __init__(self, console_: Console | None = None) -> None:
        self.console = console_ or console

    def show_roster(self, title: str, units: list[BattleUnit], color: str) -> None:
        table = Table(title=title, box=box.SIMPLE, title_style=f"bold {color}")
        table.add_column("Name", style=color)
        table.add_column("HP")
        table.add_column("ATK", justify="right")
        table.add_column("SPD", justify="right")
        table.add_column("Skills", style="dim")
        for u in units:
            skills = ", ".join(s.name for s in u.skills.all())
            table.add_row(u.name, _hp_bar(u.hp, u.max_hp), str(u.stats.attack), str(u.stats.speed), skills)
        self.console.print(table)

    def show_battle_start(self, event: BattleStartEvent) -> None:
        self.console.print(Panel(
            f"[bold red]COMBAT![/bold red]\n\n{event.message}",
            border_style="red", box=box.HEAVY,
        ))
        self.show_roster("Your Party", event.allies, "green")
        self.show_roster("Enemies", event.enemies, "red")

    def show_round(self, event: RoundEvent) -> None:
        content = Text()
        content.append(f"Round {event.number}\n", style="bold yellow")
        if not event.actions:
            content.append("  No one is left to act.\n", style="dim")
        for action in event.actions:
            crit = " [bold magenta]CRITICAL![/bold magenta]" if action.is_critical else ""
            line = f"  {action.actor} uses {action.skill} on {action.target} for {action.damage}{crit}"
            content.append_text(Text.from_markup(line + "\n"))
            if action.message:
                content.append(f"    {action.message}\n", style="italic")
        content.append(
            f"  Allies standing: {event.remaining_allies}  Enemies standing: {event.remaining_enemies}",
            style="dim",
        )
        self.console.print(content)

    def show_stage_start(self, event: StageStartEvent) -> None:
        style = "magenta" if event.current_stage == event.total_stages else "cyan"
        self.console.print(Panel(
            f"[bold]Stage {event.current_stage} of {event.total_stages}[/bold]\n{event.message}",
            border_style=style, box=box.ROUNDED,
        ))
        self.show_roster("Enemies", event.enemies, "red")

    def show_stage_complete(self, event: StageCompleteEvent) -> None:
        self.console.print(f"\n[bold green]{event.message}[/bold green]")
        self.show_roster("Survivors", event.alive_allies, "green")

    def show_battle_end(self, event: BattleEndEvent) -> None:
        color = "green" if event.victory else "red"
        title = "VICTORY" if event.victory else "DEFEAT"
        body = (
            f"{event.summary}\n\n"
            f"Stages: {event.completed_stages}/{event.total_stages}   "
            f"Reward multiplier: x{event.reward_multiplier:.2f}"
        )
        if event.surviving_allies:
            body += f"\nSurvivors: {', '.join(event.surviving_allies)}"
        self.console.print(Panel(body, title=f"[bold]{title}[/bold]", border_style=color, box=box.DOUBLE))

    def show_event(self, event: BattleEvent) -> None:
        if isinstance(event, SystemMessageEvent):
            self.console.print(f"[italic cyan]{event.message}[/italic cyan]")
        elif isinstance(event, BattleStartEvent):
            self.show_battle_start(event)
        elif isinstance(event, RoundEvent):
            self.show_round(event)
        elif isinstance(event, StageStartEvent):
            self.show_stage_start(event)
        elif isinstance(event, StageCompleteEvent):
            self.show_stage_complete(event)
        elif isinstance(event, BattleEndEvent):
            self.show_battle_end(event)

    def show_log(self, events: list[BattleEvent]) -> None:
        for event in events:
            self.show_event(event)
