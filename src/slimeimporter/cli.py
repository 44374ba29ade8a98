"""Command-line interface for Slime Importer."""

import logging
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

from . import __version__
from .config import ImportConfig
from .converter import ConversionProgress, ImportPipeline
from .errors import SlimeImporterError, WorldTooLarge
from .slime import compute_bounds

app = typer.Typer(
    name="slime-importer",
    help="Convert Anvil worlds into Slime Format files.",
    no_args_is_help=True,
)
console = Console()

WARNING_TEXT = (
    "The Slime Format is meant to be used on tiny maps, not big survival worlds. "
    "It is recommended to trim your world by using the Prune MCEdit tool to ensure "
    "you don't save more chunks than you want to."
)
EMPTY_CHUNKS_NOTE = "This utility will automatically ignore every chunk that doesn't contain any blocks."
TOO_LARGE_TEXT = (
    "The Slime Format isn't meant for big worlds. The world you provided just breaks "
    "the coordinate system. Please, trim it by using the MCEdit tool and try again."
)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route log records through the rich console."""
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def version_callback(value: bool):
    if value:
        console.print(f"Slime Importer version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """Slime Importer: Anvil world to Slime Format converter."""
    pass


def _make_progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    )


def _progress_callback(progress: Progress):
    current_task = None
    current_phase = None

    def callback(p: ConversionProgress):
        nonlocal current_task, current_phase
        if current_task is None or current_phase != p.phase:
            if current_task is not None:
                progress.update(current_task, completed=progress.tasks[current_task].total)
            current_phase = p.phase
            current_task = progress.add_task(f"[cyan]{p.phase}[/cyan]: {p.message}", total=p.total)
        progress.update(
            current_task,
            total=p.total,
            completed=p.current,
            description=f"[cyan]{p.phase}[/cyan]: {p.message}",
        )

    return callback


def _build_config(
    world: Optional[Path],
    output: Optional[Path],
    config_file: Optional[Path],
    parallel: Optional[bool],
    workers: Optional[int],
    level: Optional[int],
) -> ImportConfig:
    if config_file is not None:
        try:
            config = ImportConfig.load(config_file)
        except KeyError as e:
            console.print(f"[red]Error:[/red] Config file {config_file} is missing {e}")
            raise typer.Exit(1)
        except (OSError, ValueError, TypeError) as e:
            console.print(f"[red]Error:[/red] Cannot read config file {config_file}: {e}")
            raise typer.Exit(1)
        if world is not None:
            config.world_dir = world
    elif world is not None:
        config = ImportConfig(world_dir=world)
    else:
        console.print("[red]Error:[/red] Provide a world directory or --config")
        raise typer.Exit(1)

    if output is not None:
        config.output_path = output
    if parallel is not None:
        config.parallel = parallel
    if workers is not None:
        config.workers = workers
    if level is not None:
        config.compression_level = level

    try:
        config.validate()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    return config


@app.command()
def convert(
    world: Optional[Path] = typer.Argument(None, help="Anvil world directory (contains region/)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: <world>.slime)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    parallel: Optional[bool] = typer.Option(None, "--parallel/--no-parallel", help="Decode chunks in parallel"),
    workers: Optional[int] = typer.Option(None, "--workers", help="Parallel worker count (defaults to all cores)"),
    level: Optional[int] = typer.Option(None, "--level", "-l", help="zstd compression level (1-22)"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to an import config JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
):
    """Convert an Anvil world into a Slime file.

    Example:
        slime-importer convert worlds/lobby -o lobby.slime
    """
    setup_logging(verbose, quiet)
    config = _build_config(world, output, config_file, parallel, workers, level)

    console.print("[bold yellow]**** WARNING ****[/bold yellow]")
    console.print(WARNING_TEXT)
    console.print()
    console.print(f"NOTE: {EMPTY_CHUNKS_NOTE}")
    if not yes and not typer.confirm("Do you want to continue?"):
        console.print("Aborted.")
        raise typer.Exit()

    console.print(f"[bold]Loading world {config.world_name}...[/bold]")
    pipeline = ImportPipeline(config)
    start = time.perf_counter()
    try:
        with _make_progress() as progress:
            world_path = pipeline.run(_progress_callback(progress))
    except WorldTooLarge as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print(TOO_LARGE_TEXT)
        raise typer.Exit(1)
    except SlimeImporterError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    elapsed_ms = int((time.perf_counter() - start) * 1000)

    result = pipeline.result
    console.print()
    console.print(f"World {config.world_name} contains {result.chunk_count} chunks.")
    if result.world.skipped_files or result.world.failed_chunks:
        console.print(
            f"[yellow]Skipped {result.world.skipped_files} region files and "
            f"{result.world.failed_chunks} chunks that failed to load.[/yellow]"
        )
    console.print(
        f"[green]World {config.world_name} successfully serialized to the Slime Format "
        f"in {elapsed_ms}ms![/green]"
    )
    console.print(f"Saved {result.size_bytes} bytes to: {world_path}")


@app.command()
def info(
    world: Path = typer.Argument(..., help="Anvil world directory (contains region/)"),
    parallel: bool = typer.Option(True, "--parallel/--no-parallel", help="Decode chunks in parallel"),
    workers: Optional[int] = typer.Option(None, "--workers", help="Parallel worker count"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show debug logging"),
):
    """Show what a world would produce without writing anything.

    Example:
        slime-importer info worlds/lobby
    """
    setup_logging(verbose, quiet=not verbose)
    config = _build_config(world, None, None, parallel, workers, None)

    try:
        loaded = ImportPipeline(config).load()
    except SlimeImporterError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title=f"Region files of {config.world_name}")
    table.add_column("File", style="cyan")
    table.add_column("Present", justify="right")
    table.add_column("Loaded", justify="right")
    table.add_column("Empty", justify="right")
    table.add_column("Failed", justify="right")
    for region in loaded.regions:
        if region.error:
            table.add_row(region.path.name, "-", "-", "-", f"[red]{region.error}[/red]")
        else:
            table.add_row(
                region.path.name,
                str(region.present),
                str(region.loaded),
                str(region.empty),
                str(region.failed),
            )
    console.print(table)
    console.print()
    console.print(f"[cyan]Chunks:[/cyan] {len(loaded.chunks)}")

    if not loaded.chunks:
        console.print("[yellow]World has no non-empty chunks.[/yellow]")
        return
    try:
        bounds = compute_bounds(loaded.chunks)
    except WorldTooLarge as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print(TOO_LARGE_TEXT)
        raise typer.Exit(1)
    console.print(f"[cyan]Bounds:[/cyan] ({bounds.min_x}, {bounds.min_z}) to ({bounds.max_x}, {bounds.max_z})")
    console.print(f"[cyan]Size:[/cyan] {bounds.width} x {bounds.depth} chunks ({bounds.bitset_size} byte bitset)")


if __name__ == "__main__":
    app()
