"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import List, Optional, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.json_store import JsonScheduleStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import ConcurrencyConflictError, RemapError
from ..domain.models import Fill, Guest, Occupant, Strategy, Teesheet
from ..domain.time_codec import format_time_12h, parse_time
from ..services.remap_service import RemapPreview, RemapService

app = typer.Typer(
    name="teeremap",
    help="Replace a range of tee times and remap the players booked into them",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
StoreOption = Annotated[Optional[Path], typer.Option("--store", "-s", help="Path to the tee sheet JSON file. Overrides the config.")]


@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Tee sheet remapping tools.
    """
    ctx.obj = {"verbose": verbose}


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load the config file, falling back to defaults when none exists."""
    if config_file:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()


def _configure_logging(config: AppConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _open(ctx: typer.Context, config_file: Optional[Path], store_file: Optional[Path]):
    config = _load_config(config_file)
    _configure_logging(config, bool(ctx.obj and ctx.obj.get("verbose")))
    store = JsonScheduleStore(store_file or config.store_path)
    return config, store


def _occupant_label(occupant: Occupant) -> str:
    if isinstance(occupant, Guest):
        return f"{occupant.display_name} [dim](guest)[/dim]"
    if isinstance(occupant, Fill):
        return f"[italic]{occupant.display_name}[/italic] [dim](fill)[/dim]"
    return occupant.display_name


def _display_time(raw: str, minutes: Optional[int]) -> str:
    return format_time_12h(minutes) if minutes is not None else f"[red]{raw}?[/red]"


def _render_teesheet(teesheet: Teesheet) -> Table:
    table = Table(
        title=f"Tee sheet {teesheet.date.format('dddd, MMMM D, YYYY')} (version {teesheet.version})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Time", style="bold yellow")
    table.add_column("Players")
    table.add_column("Booked", justify="right")

    for slot in teesheet.slots:
        table.add_row(
            str(slot.id),
            _display_time(slot.start_time, slot.start_minutes),
            ", ".join(_occupant_label(o) for o in slot.occupants) or "[dim]-[/dim]",
            str(slot.slot_capacity),
        )
    return table


def _render_preview(preview: RemapPreview) -> Table:
    table = Table(
        title="Proposed slots",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Time", style="bold yellow")
    table.add_column("Players")
    table.add_column("Booked", justify="right")

    for slot in preview.plan.target_slots:
        table.add_row(
            format_time_12h(slot.start_minutes),
            ", ".join(_occupant_label(o) for o in slot.assigned) or "[dim]-[/dim]",
            str(slot.slot_capacity),
        )
    return table


def _print_validation(preview: RemapPreview) -> None:
    validation = preview.validation
    style = "red" if validation.overflow else "green"
    console.print(Panel.fit(
        f"[bold]Players to map:[/bold] {validation.total_occupants}\n"
        f"[bold]Available places:[/bold] {validation.total_capacity}",
        title="Capacity",
        border_style=style
    ))

    if validation.overflow:
        console.print(
            f"[bold red]✗ Capacity overflow:[/bold red] {validation.total_occupants} players need to be "
            f"mapped but only {validation.total_capacity} places available. Add slots or increase capacity."
        )

    for group in preview.plan.unassigned_groups:
        names = ", ".join(o.display_name for o in group.members)
        console.print(f"[yellow]⚠ Not placed (from slot {group.origin_slot_id}):[/yellow] {names}")


@app.command()
def show(
    ctx: typer.Context,
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
):
    """
    Show the current tee sheet.
    """
    try:
        _, store = _open(ctx, config_file, store_file)
        console.print()
        console.print(_render_teesheet(store.load()))
        console.print()
    except (RemapError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def remap(
    ctx: typer.Context,
    start_id: Annotated[int, typer.Argument(help="Id of the first slot to replace")],
    end_id: Annotated[int, typer.Argument(help="Id of the last slot to replace")],
    interval_a: Annotated[Optional[int], typer.Option("--interval-a", "-a", min=1, help="Minutes between slots")] = None,
    interval_b: Annotated[Optional[int], typer.Option("--interval-b", "-b", min=1, help="Alternating second interval")] = None,
    alternating: Annotated[Optional[bool], typer.Option("--alternating/--no-alternating", help="Alternate interval A and B (e.g. 6-7-6-7)")] = None,
    strategy: Annotated[Optional[Strategy], typer.Option("--strategy", help="Mapping strategy")] = None,
    keep_together: Annotated[Optional[bool], typer.Option("--keep-together/--split", help="Keep players of one slot together")] = None,
    capacity: Annotated[Optional[int], typer.Option("--capacity", min=1, help="Capacity of each new slot")] = None,
    add_time: Annotated[Optional[List[str]], typer.Option("--add-time", help="Extra slot time, e.g. 08:03 (repeatable)")] = None,
    apply: Annotated[bool, typer.Option("--apply", help="Commit the remap. Without it only a preview is shown.")] = False,
    allow_overflow: Annotated[bool, typer.Option("--allow-overflow", help="Commit even if not every player fits.")] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
):
    """
    Replace slots START_ID..END_ID with freshly generated slots and remap players.

    Examples:

        # Preview a 6-7 alternating cadence
        teeremap remap 12 20

        # Every 10 minutes, players mapped individually, then commit
        teeremap remap 12 20 --no-alternating -a 10 --split --apply
    """
    try:
        config, store = _open(ctx, config_file, store_file)
        service = RemapService(store, config.defaults, config.frost_delay)

        extra_minutes = [parse_time(raw) for raw in add_time or []]
        options = dict(
            interval_a=interval_a,
            interval_b=interval_b,
            alternating=alternating,
            capacity=capacity,
        )

        for attempt in (1, 2):
            snapshot = service.select(start_id, end_id)
            targets = service.generate_targets(
                snapshot.selected,
                service.custom_slots(extra_minutes, capacity=capacity),
                **options
            )
            preview = service.preview(snapshot, targets, strategy=strategy, keep_together=keep_together)

            console.print(
                f"\n[bold cyan]Replacing {len(snapshot.selected.slots)} slot(s) with "
                f"{len(preview.plan.target_slots)} slot(s)[/bold cyan]\n"
            )
            console.print(_render_preview(preview))
            _print_validation(preview)

            if not apply:
                console.print("\n[dim]Preview only. Run again with --apply to commit.[/dim]\n")
                return

            if preview.has_overflow and not allow_overflow:
                console.print("[red]Not committed. Use --allow-overflow to commit anyway.[/red]")
                raise typer.Exit(1)

            if not yes and not typer.confirm("Replace these slots?"):
                console.print("[yellow]Aborted.[/yellow]")
                raise typer.Exit(1)

            try:
                teesheet = service.commit(preview, allow_overflow=allow_overflow)
            except ConcurrencyConflictError as e:
                if attempt == 2:
                    raise
                console.print(f"[yellow]⚠ {e}. Recomputing from the current tee sheet...[/yellow]")
                continue

            console.print(f"[green]✓ Tee sheet updated (version {teesheet.version})[/green]\n")
            return

    except (RemapError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("frost-delay")
def frost_delay(
    ctx: typer.Context,
    minutes: Annotated[int, typer.Argument(help="Minutes to push every tee time back")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
):
    """
    Shift all tee times forward by MINUTES.
    """
    try:
        config, store = _open(ctx, config_file, store_file)
        service = RemapService(store, config.defaults, config.frost_delay)

        if not yes and not typer.confirm(f"Push every tee time back by {minutes} minutes?"):
            console.print("[yellow]Aborted.[/yellow]")
            raise typer.Exit(1)

        teesheet = service.frost_delay(minutes)
        console.print(f"\n[green]✓ Frost delay of {minutes} minutes applied to {len(teesheet.slots)} slot(s)[/green]\n")

    except (RemapError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]teeremap[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
