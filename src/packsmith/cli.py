"""Click CLI for packsmith — generate, repair and package game addons."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table

from packsmith.config.hierarchy import load_config_hierarchy
from packsmith.errors.exceptions import PacksmithError
from packsmith.types import AssembledArchive, GenerationResult, OriginKind, UploadedInput

console = Console()
error_console = Console(stderr=True)

T = TypeVar("T")

_LEVELS = {"DEBUG": logging.DEBUG, "INFO": logging.INFO, "WARNING": logging.WARNING}


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = _LEVELS.get(str(default_level).upper(), logging.WARNING)
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _load_inputs(paths: tuple[str, ...], origin: OriginKind = OriginKind.ASSET) -> list[UploadedInput]:
    return [
        UploadedInput(data=Path(p).read_bytes(), name=Path(p).name, origin=origin)
        for p in paths
    ]


def _make_packsmith(config: dict[str, Any]) -> Any:
    from packsmith.core import Packsmith

    return Packsmith(
        api_key=config.get("api_key"),
        base_url=config.get("base_url"),
        model=config["model"],
        max_tokens=config["max_tokens"],
        max_retries=config["max_retries"],
        request_timeout=config.get("request_timeout"),
        no_cache=bool(config.get("cache_disabled")),
        cache_memory_mb=config["cache_memory_mb"],
        cache_session_mb=config["cache_session_mb"],
        session_db=config.get("session_db"),
        prompt_dir=config.get("prompt_dir"),
    )


def _run_tool(config: dict[str, Any], fn: Callable[[Any], Awaitable[T]]) -> T:
    """Run one async tool call, turning packsmith errors into exit code 1."""
    smith = _make_packsmith(config)

    async def _run() -> T:
        try:
            return await fn(smith)
        finally:
            await smith.close()

    try:
        return asyncio.run(_run())
    except PacksmithError as e:
        error_console.print(f"[red]Error:[/red] {e.message or e}")
        sys.exit(1)


def _write_and_report(archive: AssembledArchive, output_dir: str) -> None:
    from packsmith.archive.assembler import write_archive

    try:
        path = write_archive(archive, output_dir)
    except PacksmithError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)

    console.print(f"[green]Written to {path}[/green] ({len(archive.entries)} entries)")
    for warning in archive.warnings:
        error_console.print(f"[yellow]Warning:[/yellow] {warning.message}")


def _print_result(result: GenerationResult) -> None:
    table = Table(title="Generated Files", show_header=True)
    table.add_column("Path", style="cyan")
    table.add_column("Size")
    for f in result.files:
        table.add_row(f.path, f"{len(f.content):,}")
    for mapping in result.asset_mappings:
        table.add_row(f"{mapping.new_path} [dim](from {mapping.original_path})[/dim]", "asset")
    console.print(table)
    if result.summary_report:
        console.print(Markdown(result.summary_report))


@click.group()
@click.version_option(package_name="packsmith")
def cli() -> None:
    """packsmith — AI-assisted addon authoring and packaging."""


@cli.command()
@click.argument("request")
@click.option(
    "-i",
    "--input",
    "inputs",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Asset file to include (repeatable).",
)
@click.option("-n", "--name", default="addon", help="Addon name used for the archive file.")
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), default=".", help="Output directory.")
@click.option("--model", type=str, default=None, help="Override the model.")
@click.option("--no-cache", is_flag=True, default=False, help="Disable the response cache.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def generate(
    request: str,
    inputs: tuple[str, ...],
    name: str,
    output_dir: str,
    model: str | None,
    no_cache: bool,
    verbose: int,
) -> None:
    """Generate an addon from a description."""
    config = load_config_hierarchy(model=model, cache_disabled=no_cache or None)
    _setup_logging(verbose, config["log_level"])
    uploads = _load_inputs(inputs)

    async def _go(smith: Any) -> tuple[GenerationResult, AssembledArchive]:
        result = await smith.generate_addon(request, uploads)
        if result.plan and not result.files:
            result = await smith.generate_from_plan(result.plan, request, uploads)
        return result, smith.package(name, result, uploads)

    result, archive = _run_tool(config, _go)
    _print_result(result)
    _write_and_report(archive, output_dir)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("-n", "--name", required=True, help="Name of the merged addon.")
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), default=".", help="Output directory.")
@click.option("--no-cache", is_flag=True, default=False, help="Disable the response cache.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def combine(files: tuple[str, ...], name: str, output_dir: str, no_cache: bool, verbose: int) -> None:
    """Merge several addons into one."""
    config = load_config_hierarchy(cache_disabled=no_cache or None)
    _setup_logging(verbose, config["log_level"])
    uploads = _load_inputs(files, OriginKind.ADDON_FILE)

    async def _go(smith: Any) -> tuple[GenerationResult, AssembledArchive]:
        result = await smith.combine_addons(name, uploads)
        return result, smith.package(name, result, uploads)

    result, archive = _run_tool(config, _go)
    _print_result(result)
    _write_and_report(archive, output_dir)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--problem", default="", help="Describe the problem; omit for a full audit.")
@click.option("-n", "--name", default="fixed_addon", help="Addon name used for the archive file.")
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), default=".", help="Output directory.")
@click.option("--no-cache", is_flag=True, default=False, help="Disable the response cache.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def fix(
    files: tuple[str, ...],
    problem: str,
    name: str,
    output_dir: str,
    no_cache: bool,
    verbose: int,
) -> None:
    """Repair an addon."""
    config = load_config_hierarchy(cache_disabled=no_cache or None)
    _setup_logging(verbose, config["log_level"])
    uploads = _load_inputs(files, OriginKind.ADDON_FILE)

    async def _go(smith: Any) -> tuple[GenerationResult, AssembledArchive]:
        result = await smith.fix_addon(problem, uploads)
        return result, smith.package(name, result, uploads)

    result, archive = _run_tool(config, _go)
    _print_result(result)
    _write_and_report(archive, output_dir)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def summarize(files: tuple[str, ...], verbose: int) -> None:
    """Describe and audit an addon."""
    config = load_config_hierarchy()
    _setup_logging(verbose, config["log_level"])
    uploads = _load_inputs(files, OriginKind.ADDON_FILE)

    summary = _run_tool(config, lambda smith: smith.summarize_addon(uploads))
    console.print(Markdown(summary))


@cli.command("function")
@click.argument("request")
@click.option("--name", "function_name", required=True, help="Function name (file stem).")
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), default=".", help="Output directory.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def function(request: str, function_name: str, output_dir: str, verbose: int) -> None:
    """Write a single .mcfunction file."""
    config = load_config_hierarchy()
    _setup_logging(verbose, config["log_level"])

    files = _run_tool(config, lambda smith: smith.write_function(request, function_name))
    out = Path(output_dir).resolve()
    targets = [(out / f.path).resolve() for f in files]
    for f, path in zip(files, targets):
        if not path.is_relative_to(out):
            error_console.print(
                f"[red]Error:[/red] Refusing to write '{f.path}' outside {out}"
            )
            sys.exit(1)

    for f, path in zip(files, targets):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f.content, encoding="utf-8")
        console.print(f"[green]Written to {path}[/green]")


@cli.command()
@click.option("--rp", type=click.Path(exists=True, dir_okay=False), help="Finished resource pack.")
@click.option("--bp", type=click.Path(exists=True, dir_okay=False), help="Finished behavior pack.")
@click.option("-n", "--name", default="addon", help="Addon name used for the archive file.")
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), default=".", help="Output directory.")
def package(rp: str | None, bp: str | None, name: str, output_dir: str) -> None:
    """Bundle finished packs into one .mcaddon without regeneration."""
    from packsmith.archive.assembler import ArchiveAssembler

    if not rp and not bp:
        error_console.print("[red]Error:[/red] Provide --rp, --bp or both.")
        sys.exit(1)

    resource_pack = _load_inputs((rp,), OriginKind.ADDON_FILE)[0] if rp else None
    behavior_pack = _load_inputs((bp,), OriginKind.ADDON_FILE)[0] if bp else None
    try:
        archive = ArchiveAssembler().assemble_from_raw_containers(
            name, resource_pack, behavior_pack
        )
    except PacksmithError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)
    _write_and_report(archive, output_dir)


@cli.command()
def prompts() -> None:
    """List available tool prompts."""
    from packsmith.prompts.registry import PromptRegistry

    config = load_config_hierarchy()
    prompt_dir = config.get("prompt_dir")
    registry = PromptRegistry(user_dirs=[Path(prompt_dir)] if prompt_dir else [])

    table = Table(title="Available Prompts", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Source")

    for info in sorted(registry.list_prompts()):
        table.add_row(info.name, info.description, "builtin" if info.builtin else "user")

    console.print(table)


@cli.group()
def cache() -> None:
    """Session cache commands (requires PACKSMITH_SESSION_DB)."""


def _session_cache() -> Any:
    from packsmith.cache.disk import SessionDiskStore
    from packsmith.cache.manager import ResponseCache

    config = load_config_hierarchy()
    session_db = config.get("session_db")
    if not session_db:
        error_console.print(
            "[yellow]No session database configured; the cache lives in memory "
            "for one command only.[/yellow]"
        )
        return None
    return ResponseCache(
        SessionDiskStore(Path(session_db), max_size_mb=config["cache_session_mb"])
    )


@cache.command("stats")
def cache_stats() -> None:
    """Show session cache statistics."""
    response_cache = _session_cache()
    if response_cache is None:
        return

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    stats = response_cache.stats()
    table.add_row("Entries", str(stats.entries))
    table.add_row("Size (MB)", f"{stats.size_mb:.2f}")

    console.print(table)
    response_cache.close()


@cache.command("clear")
@click.confirmation_option(prompt="Are you sure you want to end the cache session?")
def cache_clear() -> None:
    """Discard the session cache."""
    response_cache = _session_cache()
    if response_cache is None:
        return
    response_cache.close(discard=True)
    console.print("[green]Cache cleared.[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
