"""Typer CLI application."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="forge-battle",
    help="Generate and replay predetermined dungeon battle logs",
    no_args_is_help=True,
)

DEMO_NAMES = ["Aria", "Brom", "Cael", "Dara", "Eryn"]


def _configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def demo_characters(count: int, level: int) -> dict[int, dict]:
    """Stand-in character records for a party of ``count`` at ``level``."""
    return {
        i + 1: {
            "id": i + 1,
            "name": DEMO_NAMES[i % len(DEMO_NAMES)],
            "attack": 12 + level * 3,
            "vitality": 14 + level * 2,
            "speed": 10 + level,
        }
        for i in range(count)
    }


@app.command()
def simulate(
    run_id: int = typer.Option(42, "--run-id", "-r", help="Dungeon run id (seeds the battle)"),
    created_at: int = typer.Option(0, "--created-at", help="Run creation time, epoch seconds"),
    level: int = typer.Option(5, "--level", "-l", min=1, help="Dungeon level"),
    element: str = typer.Option("neutral", "--element", "-e", help="Dungeon element"),
    stages: Optional[int] = typer.Option(None, "--stages", "-s", min=1, help="Total stages"),
    allies: int = typer.Option(3, "--allies", "-a", min=0, max=5, help="Party size"),
    success: bool = typer.Option(True, "--success/--failure", help="Predetermined outcome"),
    as_json: bool = typer.Option(False, "--json", help="Print the log as JSON"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the JSON log to a file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show engine logging"),
) -> None:
    """Simulate a dungeon run with a demo party."""
    from forge_battle.cli.battle_display import BattleDisplay
    from forge_battle.config import load_settings
    from forge_battle.engine.battle_log import generate_battle_log
    from forge_battle.mechanics.roster import build_roster
    from forge_battle.models.battle import dump_battle_log_json

    _configure_logging(verbose)
    characters = demo_characters(allies, level)
    run = {
        "id": run_id,
        "created_at": datetime.fromtimestamp(created_at, tz=timezone.utc),
        "dungeon_level": level,
        "element": element,
        "total_stages": stages,
        "_allies": build_roster(list(characters), characters),
    }
    events = generate_battle_log(run, success, load_settings(config))

    payload = dump_battle_log_json(events, indent=2)
    if out is not None:
        out.write_text(payload, encoding="utf-8")
    if as_json:
        typer.echo(payload)
    else:
        BattleDisplay().show_log(events)


@app.command()
def replay(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved JSON battle log"),
) -> None:
    """Render a previously generated battle log."""
    from pydantic import ValidationError

    from forge_battle.cli.battle_display import BattleDisplay
    from forge_battle.models.battle import parse_battle_log

    try:
        events = parse_battle_log(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        typer.echo(f"Not a valid battle log: {e.error_count()} errors", err=True)
        raise typer.Exit(code=1)
    BattleDisplay().show_log(events)


if __name__ == "__main__":
    app()
